"""
Servicio de procedimientos: catálogo con costos y registros con cobros.

El catálogo guarda total_cost y utility ya calculados; los registros
guardan su utilidad calculada contra el costo del catálogo vigente al
momento de escribir.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException, ValidationException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.models.material import Material
from hah_erp.models.patient import Patient
from hah_erp.models.procedure_catalog import ProcedureCatalog, ProcedureCatalogMaterial
from hah_erp.models.procedure_record import PAYMENT_COLUMNS, ProcedureRecord
from hah_erp.models.user import User
from hah_erp.schemas.procedure import (
    CostPreviewRequest,
    CostPreviewResponse,
    MaterialItem,
    ProcedureCatalogCreate,
    ProcedureCatalogUpdate,
    ProcedureRecordCreate,
    ProcedureRecordResponse,
    ProcedureRecordUpdate,
    ProcedureReport,
    ProcedureReportRow,
    ProcedureReportTotals,
)
from hah_erp.services import billing
from hah_erp.services.audit_service import log_action
from hah_erp.services.inventory_service import compute_status

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════
# Catálogo
# ══════════════════════════════════════════════════════


async def _load_catalog(db: AsyncSession, procedure_id: UUID) -> ProcedureCatalog:
    result = await db.execute(
        select(ProcedureCatalog)
        .where(ProcedureCatalog.id == procedure_id)
        .execution_options(populate_existing=True)
    )
    procedure = result.scalar_one_or_none()
    if not procedure:
        raise NotFoundException("Procedimiento")
    return procedure


async def _register_materials(db: AsyncSession, lines: list[billing.MaterialLine]) -> None:
    """Da de alta en el maestro los nombres que aún no existen y reactiva los dados de baja."""
    if not lines:
        return
    names = [line.name for line in lines]
    result = await db.execute(select(Material).where(Material.name.in_(names)))
    existing = {material.name: material for material in result.scalars().all()}
    for line in lines:
        material = existing.get(line.name)
        if material is not None:
            if not material.is_active:
                material.is_active = True
                logger.info("Material '%s' reactivado desde el catálogo", line.name)
            continue
        material = Material(
            name=line.name,
            unit_cost=billing.money(line.unit_cost),
            status=compute_status(stock=0, min_stock=0),
        )
        db.add(material)
        existing[line.name] = material
        logger.info("Material '%s' registrado desde el catálogo", line.name)


def _material_rows(lines: list[billing.MaterialLine]) -> list[ProcedureCatalogMaterial]:
    return [
        ProcedureCatalogMaterial(
            material_name=line.name,
            quantity=billing.money(line.quantity),
            unit_cost=billing.money(line.unit_cost),
            sort_order=line.sort_order,
        )
        for line in lines
    ]


def _stored_lines(procedure: ProcedureCatalog) -> list[billing.MaterialLine]:
    return billing.normalize_materials(
        {"name": m.material_name, "quantity": m.quantity, "unit_cost": m.unit_cost}
        for m in procedure.materials
    )


async def get_procedure(db: AsyncSession, procedure_id: UUID) -> ProcedureCatalog:
    procedure = await db.get(ProcedureCatalog, procedure_id)
    if not procedure:
        raise NotFoundException("Procedimiento")
    return procedure


async def list_procedures(db: AsyncSession, active_only: bool = True) -> list[ProcedureCatalog]:
    query = select(ProcedureCatalog)
    if active_only:
        query = query.where(ProcedureCatalog.is_active.is_(True))
    result = await db.execute(query.order_by(ProcedureCatalog.name))
    return list(result.scalars().all())


async def find_by_name(db: AsyncSession, pattern: str, limit: int = 20) -> list[ProcedureCatalog]:
    result = await db.execute(
        select(ProcedureCatalog)
        .where(
            ProcedureCatalog.is_active.is_(True),
            ProcedureCatalog.name.ilike(f"%{pattern.strip()}%"),
        )
        .order_by(ProcedureCatalog.name)
        .limit(limit)
    )
    return list(result.scalars().all())


def preview_costs(data: CostPreviewRequest) -> CostPreviewResponse:
    """Calcula costos y utilidad sin guardar."""
    lines = billing.normalize_materials(data.materials)
    totals = billing.catalog_totals(
        data.base_price, data.professional_fees, data.mobility_cost, lines
    )
    return CostPreviewResponse(
        materials=[
            MaterialItem(name=line.name, quantity=line.quantity, unit_cost=line.unit_cost)
            for line in lines
        ],
        materials_cost=totals.materials_cost,
        total_cost=totals.total_cost,
        utility=totals.utility,
    )


async def create_procedure(db: AsyncSession, data: ProcedureCatalogCreate) -> ProcedureCatalog:
    lines = billing.normalize_materials(data.materials)
    totals = billing.catalog_totals(
        data.base_price, data.professional_fees, data.mobility_cost, lines
    )
    procedure = ProcedureCatalog(
        name=data.name,
        base_price=billing.money(data.base_price),
        professional_fees=billing.money(data.professional_fees),
        mobility_cost=billing.money(data.mobility_cost),
        total_cost=totals.total_cost,
        utility=totals.utility,
        materials=_material_rows(lines),
    )
    db.add(procedure)
    await _register_materials(db, lines)
    await db.flush()
    return await _load_catalog(db, procedure.id)


async def update_procedure(
    db: AsyncSession, procedure_id: UUID, data: ProcedureCatalogUpdate
) -> ProcedureCatalog:
    """
    Actualización parcial: los campos omitidos conservan su valor.
    `materials` omitido conserva los materiales; una lista los reemplaza
    (lista vacía los elimina). Los totales se recalculan siempre.
    """
    procedure = await get_procedure(db, procedure_id)
    update_data = data.model_dump(exclude_unset=True, exclude={"materials"})

    for key, value in update_data.items():
        if value is None:
            continue
        if key in ("base_price", "professional_fees", "mobility_cost"):
            value = billing.money(value)
        if key == "name":
            value = value.strip()
            if not value:
                raise ValidationException("El nombre del procedimiento es requerido")
        setattr(procedure, key, value)

    if "materials" in data.model_fields_set and data.materials is not None:
        lines = billing.normalize_materials(data.materials)
        procedure.materials = _material_rows(lines)
        await _register_materials(db, lines)
    else:
        lines = _stored_lines(procedure)

    totals = billing.catalog_totals(
        procedure.base_price, procedure.professional_fees, procedure.mobility_cost, lines
    )
    procedure.total_cost = totals.total_cost
    procedure.utility = totals.utility

    await db.flush()
    return await _load_catalog(db, procedure.id)


async def delete_procedure(db: AsyncSession, procedure_id: UUID) -> None:
    """Baja lógica; los registros históricos siguen apuntando al procedimiento."""
    procedure = await get_procedure(db, procedure_id)
    procedure.is_active = False
    await db.flush()


# ══════════════════════════════════════════════════════
# Registros de procedimientos
# ══════════════════════════════════════════════════════


async def _catalog_costs(db: AsyncSession, ids: set[UUID]) -> dict[UUID, Decimal]:
    if not ids:
        return {}
    result = await db.execute(
        select(ProcedureCatalog.id, ProcedureCatalog.total_cost).where(
            ProcedureCatalog.id.in_(ids)
        )
    )
    return {row.id: row.total_cost for row in result.all()}


def _record_utility(record: ProcedureRecord, catalog_cost) -> Decimal:
    return billing.record_utility(
        record.income,
        catalog_cost,
        record.material_expenses,
        record.fuel,
        record.additional_cost,
    )


def serialize_record(record: ProcedureRecord, catalog_cost=None) -> ProcedureRecordResponse:
    """Respuesta con ingreso, método de pago principal y utilidad (calculada si falta)."""
    columns = {column: getattr(record, column) for column in PAYMENT_COLUMNS}
    method, amount = billing.payment_from_columns(columns)
    utility = record.utility
    if utility is None:
        utility = _record_utility(record, catalog_cost or 0)
    return ProcedureRecordResponse(
        id=record.id,
        record_date=record.record_date,
        patient_id=record.patient_id,
        patient_name=record.patient_name,
        procedure_catalog_id=record.procedure_catalog_id,
        procedure_name=record.procedure_name,
        quantity=record.quantity,
        district=record.district,
        operation_number=record.operation_number,
        material_expenses=record.material_expenses,
        fuel=record.fuel,
        additional_cost=record.additional_cost,
        notes=record.notes,
        income=billing.record_income(columns),
        utility=utility,
        payment_method=method,
        payment_amount=amount,
        created_at=record.created_at,
        updated_at=record.updated_at,
        **columns,
    )


async def serialize_records(
    db: AsyncSession, records: list[ProcedureRecord]
) -> list[ProcedureRecordResponse]:
    missing = {r.procedure_catalog_id for r in records if r.utility is None and r.procedure_catalog_id}
    costs = await _catalog_costs(db, missing)
    return [serialize_record(r, costs.get(r.procedure_catalog_id)) for r in records]


async def _apply_record_values(db: AsyncSession, record: ProcedureRecord, values: dict) -> None:
    """Aplica los valores, completa snapshots y recalcula la utilidad."""
    payment = values.pop("payment", None)
    if payment:
        try:
            values.update(billing.payment_columns_for(payment["method"], payment["amount"]))
        except ValueError as e:
            raise ValidationException(str(e)) from e

    for key, value in values.items():
        if value is None and key in ("record_date", "quantity"):
            continue
        if key in PAYMENT_COLUMNS or key in ("material_expenses", "fuel", "additional_cost"):
            value = billing.money(value)
        setattr(record, key, value)

    if values.get("patient_id") and not values.get("patient_name"):
        patient = await db.get(Patient, record.patient_id)
        if not patient:
            raise NotFoundException("Paciente")
        record.patient_name = patient.name

    catalog_cost = Decimal("0")
    if record.procedure_catalog_id:
        procedure = await db.get(ProcedureCatalog, record.procedure_catalog_id)
        if not procedure:
            raise NotFoundException("Procedimiento")
        catalog_cost = procedure.total_cost
        if not record.procedure_name:
            record.procedure_name = procedure.name

    record.utility = _record_utility(record, catalog_cost)


async def get_record(db: AsyncSession, record_id: UUID) -> ProcedureRecord:
    record = await db.get(ProcedureRecord, record_id)
    if not record:
        raise NotFoundException("Registro")
    return record


async def list_records(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    payment_status: str | None = None,
) -> dict:
    query = select(ProcedureRecord)

    if date_from:
        query = query.where(ProcedureRecord.record_date >= date_from)
    if date_to:
        query = query.where(ProcedureRecord.record_date <= date_to)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(ProcedureRecord.patient_name).like(pattern),
                func.lower(ProcedureRecord.procedure_name).like(pattern),
                func.lower(ProcedureRecord.district).like(pattern),
                func.lower(ProcedureRecord.operation_number).like(pattern),
            )
        )
    paid = [getattr(ProcedureRecord, column) > 0 for column in PAYMENT_COLUMNS]
    if payment_status == "pendiente":
        query = query.where(~or_(*paid))
    elif payment_status == "cancelado":
        query = query.where(or_(*paid))

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(ProcedureRecord.record_date.desc(), ProcedureRecord.created_at.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    items = await serialize_records(db, list(result.scalars().all()))
    return page_payload(items, total, page, size)


async def create_record(
    db: AsyncSession,
    user: User,
    data: ProcedureRecordCreate,
    ip_address: str | None = None,
) -> ProcedureRecord:
    record = ProcedureRecord()
    await _apply_record_values(db, record, data.model_dump(exclude_none=True))
    db.add(record)
    await db.flush()
    await db.refresh(record)

    await log_action(
        db,
        user_id=user.id,
        entity="procedure_record",
        entity_id=str(record.id),
        action="create",
        new_data={
            "procedure_name": record.procedure_name,
            "patient_name": record.patient_name,
            "income": record.income,
        },
        ip_address=ip_address,
    )
    return record


async def update_record(
    db: AsyncSession,
    record_id: UUID,
    user: User,
    data: ProcedureRecordUpdate,
    ip_address: str | None = None,
) -> ProcedureRecord:
    record = await get_record(db, record_id)
    update_data = data.model_dump(exclude_unset=True)
    old_data = {key: getattr(record, key) for key in update_data if key != "payment"}

    await _apply_record_values(db, record, update_data)
    await db.flush()
    await db.refresh(record)

    await log_action(
        db,
        user_id=user.id,
        entity="procedure_record",
        entity_id=str(record.id),
        action="update",
        old_data=old_data,
        new_data=data.model_dump(exclude_unset=True),
        ip_address=ip_address,
    )
    return record


async def delete_record(
    db: AsyncSession,
    record_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> None:
    record = await get_record(db, record_id)
    await log_action(
        db,
        user_id=user.id,
        entity="procedure_record",
        entity_id=str(record.id),
        action="delete",
        old_data={"procedure_name": record.procedure_name, "income": record.income},
        ip_address=ip_address,
    )
    await db.delete(record)
    await db.flush()


async def _records_between(db: AsyncSession, date_from: date, date_to: date) -> list[ProcedureRecord]:
    result = await db.execute(
        select(ProcedureRecord)
        .where(
            ProcedureRecord.record_date >= date_from,
            ProcedureRecord.record_date <= date_to,
        )
        .order_by(ProcedureRecord.record_date.asc(), ProcedureRecord.created_at.asc())
    )
    return list(result.scalars().all())


async def report_totals(db: AsyncSession, date_from: date, date_to: date) -> dict:
    """Ingresos, gastos de material y movilidad (combustible) del rango."""
    records = await _records_between(db, date_from, date_to)
    return {
        "income": billing.money(sum((r.income for r in records), Decimal("0"))),
        "materials": billing.money(sum((r.material_expenses for r in records), Decimal("0"))),
        "mobility": billing.money(sum((r.fuel for r in records), Decimal("0"))),
    }


async def build_report(db: AsyncSession, date_from: date, date_to: date) -> ProcedureReport:
    """
    Filas con ingreso, costo y utilidad:

        costo = costo catálogo + gastos material + combustible + costo adicional
    """
    records = await _records_between(db, date_from, date_to)
    costs = await _catalog_costs(
        db, {r.procedure_catalog_id for r in records if r.procedure_catalog_id}
    )

    rows: list[ProcedureReportRow] = []
    for r in records:
        catalog_cost = costs.get(r.procedure_catalog_id, Decimal("0"))
        income = billing.money(r.income)
        cost = billing.record_cost(catalog_cost, r.material_expenses, r.fuel, r.additional_cost)
        method, _ = billing.payment_from_columns(
            {column: getattr(r, column) for column in PAYMENT_COLUMNS}
        )
        rows.append(
            ProcedureReportRow(
                id=r.id,
                record_date=r.record_date,
                patient_name=r.patient_name,
                procedure_name=r.procedure_name,
                quantity=r.quantity,
                district=r.district,
                payment_method=method,
                operation_number=r.operation_number,
                income=income,
                material_expenses=billing.money(r.material_expenses),
                fuel=billing.money(r.fuel),
                cost=cost,
                utility=billing.money(income - cost),
            )
        )

    zero = Decimal("0")
    totals = ProcedureReportTotals(
        total_records=len(rows),
        income=billing.money(sum((row.income for row in rows), zero)),
        materials=billing.money(sum((row.material_expenses for row in rows), zero)),
        mobility=billing.money(sum((row.fuel for row in rows), zero)),
        cost=billing.money(sum((row.cost for row in rows), zero)),
        utility=billing.money(sum((row.utility for row in rows), zero)),
    )
    return ProcedureReport(date_from=date_from, date_to=date_to, rows=rows, totals=totals)
