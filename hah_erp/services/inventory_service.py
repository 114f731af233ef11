"""
Servicio de inventario (maestro de materiales).
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import ConflictException, NotFoundException, ValidationException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import today_lima
from hah_erp.models.material import Material, MaterialStatus
from hah_erp.schemas.inventory import InventoryStats, MaterialCreate, MaterialUpdate, StockAdjustment

logger = logging.getLogger(__name__)


def compute_status(
    stock: int, min_stock: int, current: MaterialStatus | None = None
) -> MaterialStatus:
    """
    Deriva el estado del stock: 0 → out_of_stock, <= mínimo → low_stock.
    Con stock suficiente se conserva expired si ya estaba asignado; si no, in_stock.
    """
    if stock <= 0:
        return MaterialStatus.OUT_OF_STOCK
    if min_stock > 0 and stock <= min_stock:
        return MaterialStatus.LOW_STOCK
    if current == MaterialStatus.EXPIRED:
        return MaterialStatus.EXPIRED
    return MaterialStatus.IN_STOCK


async def _find_by_name(
    db: AsyncSession, name: str, exclude_id: UUID | None = None
) -> Material | None:
    query = select(Material).where(Material.name == name)
    if exclude_id:
        query = query.where(Material.id != exclude_id)
    return (await db.execute(query)).scalar_one_or_none()


async def _ensure_unique_name(
    db: AsyncSession, name: str, exclude_id: UUID | None = None
) -> None:
    clash = await _find_by_name(db, name, exclude_id)
    if clash is None:
        return
    if clash.is_active:
        raise ConflictException(f"Ya existe un material llamado '{name}'")
    raise ConflictException(
        f"El nombre '{name}' pertenece a un material dado de baja; vuelva a crearlo para reactivarlo"
    )


async def get_material(db: AsyncSession, material_id: UUID) -> Material:
    material = await db.get(Material, material_id)
    if not material:
        raise NotFoundException("Material")
    return material


async def list_materials(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
    category: str | None = None,
    status: MaterialStatus | None = None,
) -> dict:
    query = select(Material).where(Material.is_active.is_(True))
    if search:
        query = query.where(func.lower(Material.name).like(f"%{search.strip().lower()}%"))
    if category:
        query = query.where(Material.category == category)
    if status:
        query = query.where(Material.status == status)

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(Material.name).offset(page_offset(page, size)).limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def create_material(db: AsyncSession, data: MaterialCreate) -> Material:
    """
    Crea un material. Si el nombre pertenece a uno dado de baja, lo reactiva
    con los valores nuevos. El estado inicial siempre se deriva del stock.
    """
    values = data.model_dump()
    material = await _find_by_name(db, data.name)
    if material is not None and material.is_active:
        raise ConflictException(f"Ya existe un material llamado '{data.name}'")

    if material is None:
        material = Material(**values)
        db.add(material)
    else:
        for key, value in values.items():
            setattr(material, key, value)
        material.is_active = True
        logger.info("Material '%s' reactivado", material.name)

    material.status = compute_status(data.stock, data.min_stock)
    await db.flush()
    await db.refresh(material)
    return material


async def update_material(db: AsyncSession, material_id: UUID, data: MaterialUpdate) -> Material:
    material = await get_material(db, material_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("name"):
        update_data["name"] = update_data["name"].strip()
        await _ensure_unique_name(db, update_data["name"], exclude_id=material.id)

    requested_status = update_data.pop("status", None)
    for key, value in update_data.items():
        if value is None and key in ("name", "unit_cost", "stock", "min_stock", "unit"):
            continue
        setattr(material, key, value)

    # Un estado explícito distinto de expired saca al material de expired
    current = material.status if requested_status is None else requested_status
    material.status = compute_status(material.stock, material.min_stock, current)

    await db.flush()
    await db.refresh(material)
    return material


async def delete_material(db: AsyncSession, material_id: UUID) -> None:
    material = await get_material(db, material_id)
    material.is_active = False
    await db.flush()


async def adjust_stock(db: AsyncSession, material_id: UUID, data: StockAdjustment) -> Material:
    """Suma (o resta) unidades al stock; nunca puede quedar negativo."""
    material = await get_material(db, material_id)
    new_stock = material.stock + data.delta
    if new_stock < 0:
        raise ValidationException(
            f"Stock insuficiente: hay {material.stock} {material.unit} de {material.name}"
        )

    material.stock = new_stock
    if data.delta > 0:
        material.last_restocked = today_lima()
    material.status = compute_status(material.stock, material.min_stock, material.status)

    if material.status in (MaterialStatus.LOW_STOCK, MaterialStatus.OUT_OF_STOCK):
        logger.warning(
            "Stock bajo de '%s': %s %s (mínimo %s)",
            material.name, material.stock, material.unit, material.min_stock,
        )

    await db.flush()
    await db.refresh(material)
    return material


async def get_stats(db: AsyncSession) -> InventoryStats:
    active = Material.is_active.is_(True)

    async def _count(*conditions) -> int:
        return await db.scalar(select(func.count(Material.id)).where(active, *conditions)) or 0

    value = await db.scalar(
        select(func.coalesce(func.sum(Material.stock * Material.unit_cost), 0)).where(active)
    )
    return InventoryStats(
        total=await _count(),
        low_stock=await _count(Material.status == MaterialStatus.LOW_STOCK),
        out_of_stock=await _count(Material.status == MaterialStatus.OUT_OF_STOCK),
        expired=await _count(Material.status == MaterialStatus.EXPIRED),
        inventory_value=Decimal(str(value or 0)).quantize(Decimal("0.01")),
    )
