"""
Endpoint del dashboard principal.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import get_current_user
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.dashboard import DashboardData
from hah_erp.services import dashboard_service

router = APIRouter()


@router.get("", response_model=DashboardData)
async def get_dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Métricas del mes en curso, citas de hoy, servicios más rentables y
    actividad reciente. Las fechas se evalúan en hora de Lima.
    """
    return await dashboard_service.get_dashboard(db)
