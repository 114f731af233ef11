"""
Endpoints del maestro de materiales (inventario).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.material import MaterialStatus
from hah_erp.models.user import User
from hah_erp.schemas.inventory import (
    InventoryStats,
    MaterialCreate,
    MaterialListResponse,
    MaterialResponse,
    MaterialUpdate,
    StockAdjustment,
)
from hah_erp.services import inventory_service

router = APIRouter()


@router.get("", response_model=MaterialListResponse)
async def list_materials(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    search: str | None = Query(None, description="Nombre, proveedor o descripción"),
    category: str | None = Query(None),
    status: MaterialStatus | None = Query(None),
    user: User = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lista los materiales activos ordenados por nombre."""
    return await inventory_service.list_materials(
        db, page=page, size=size, search=search, category=category, status=status
    )


@router.get("/stats", response_model=InventoryStats)
async def inventory_stats(
    user: User = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Conteos por estado y valor del inventario (Σ stock × costo unitario)."""
    return await inventory_service.get_stats(db)


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: UUID,
    user: User = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await inventory_service.get_material(db, material_id)


@router.post("", response_model=MaterialResponse, status_code=201)
async def create_material(
    data: MaterialCreate,
    user: User = Depends(require_permission("inventory", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await inventory_service.create_material(db, data)


@router.put("/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: UUID,
    data: MaterialUpdate,
    user: User = Depends(require_permission("inventory", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await inventory_service.update_material(db, material_id, data)


@router.post("/{material_id}/stock", response_model=MaterialResponse)
async def adjust_stock(
    material_id: UUID,
    data: StockAdjustment,
    user: User = Depends(require_permission("inventory", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Suma (ingreso) o resta (consumo) unidades; el stock no puede quedar negativo."""
    return await inventory_service.adjust_stock(db, material_id, data)


@router.delete("/{material_id}", status_code=204)
async def delete_material(
    material_id: UUID,
    user: User = Depends(require_permission("inventory", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await inventory_service.delete_material(db, material_id)
