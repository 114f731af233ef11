"""
Endpoints de reportes por rango de fechas y su descarga en Excel o CSV.
"""

from datetime import date
from io import BytesIO
from typing import Literal

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.care_shift import ShiftReport
from hah_erp.schemas.home_care import HomeCareReport
from hah_erp.schemas.medical_record import MedicalReport
from hah_erp.schemas.procedure import ProcedureReport
from hah_erp.services import (
    home_care_service,
    medical_record_service,
    procedure_service,
    report_service,
    shift_service,
)

router = APIRouter()


@router.get("/procedures", response_model=ProcedureReport)
async def procedures_report(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    report_service.check_range(date_from, date_to)
    return await procedure_service.build_report(db, date_from, date_to)


@router.get("/home-care", response_model=HomeCareReport)
async def home_care_report(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Periodos de cuidado cuyo inicio cae en el rango."""
    report_service.check_range(date_from, date_to)
    return await home_care_service.build_report(db, date_from, date_to)


@router.get("/shifts", response_model=ShiftReport)
async def shifts_report(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    report_service.check_range(date_from, date_to)
    return await shift_service.build_report(db, date_from, date_to)


@router.get("/medical-appointments", response_model=MedicalReport)
async def medical_appointments_report(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Ingreso, costo y utilidad de los registros de citas médicas del rango."""
    report_service.check_range(date_from, date_to)
    return await medical_record_service.build_report(db, date_from, date_to)


@router.get("/{kind}/export")
async def export_report(
    kind: Literal["procedures", "home-care", "shifts", "medical-appointments"] = Path(...),
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    format: Literal["xlsx", "csv"] = Query("xlsx"),
    user: User = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Descarga el reporte con encabezados en español."""
    content, media_type, filename = await report_service.export_report(
        db, kind, date_from, date_to, format
    )
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
