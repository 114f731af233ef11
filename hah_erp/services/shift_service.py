"""
Servicio de turnos eventuales de cuidado (cobro por turno, sin contrato).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.models.care_shift import CareShift
from hah_erp.models.patient import Patient
from hah_erp.schemas.care_shift import (
    CareShiftCreate,
    CareShiftUpdate,
    ShiftReport,
    ShiftReportRow,
    ShiftReportTotals,
)
from hah_erp.services import billing


async def _load(db: AsyncSession, shift_id: UUID) -> CareShift:
    result = await db.execute(
        select(CareShift)
        .where(CareShift.id == shift_id)
        .execution_options(populate_existing=True)
    )
    shift = result.scalar_one_or_none()
    if not shift:
        raise NotFoundException("Turno")
    return shift


async def _check_patient(db: AsyncSession, patient_id: UUID | None) -> None:
    if patient_id and not await db.get(Patient, patient_id):
        raise NotFoundException("Paciente")


async def get_shift(db: AsyncSession, shift_id: UUID) -> CareShift:
    return await _load(db, shift_id)


async def list_shifts(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    date_from: date | None = None,
    date_to: date | None = None,
    patient_id: UUID | None = None,
    district: str | None = None,
    nurse: str | None = None,
) -> dict:
    query = select(CareShift)
    if date_from:
        query = query.where(CareShift.shift_date >= date_from)
    if date_to:
        query = query.where(CareShift.shift_date <= date_to)
    if patient_id:
        query = query.where(CareShift.patient_id == patient_id)
    if district:
        query = query.where(CareShift.district.ilike(f"%{district}%"))
    if nurse:
        query = query.where(CareShift.nurse.ilike(f"%{nurse}%"))

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(CareShift.shift_date.desc(), CareShift.start_time.asc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def create_shift(db: AsyncSession, data: CareShiftCreate) -> CareShift:
    await _check_patient(db, data.patient_id)
    shift = CareShift(**data.model_dump())
    db.add(shift)
    await db.flush()
    return await _load(db, shift.id)


async def update_shift(db: AsyncSession, shift_id: UUID, data: CareShiftUpdate) -> CareShift:
    shift = await _load(db, shift_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("patient_id"):
        await _check_patient(db, update_data["patient_id"])

    for key, value in update_data.items():
        if value is None and key in ("shift_date", "amount_due", "extra_expenses"):
            continue
        setattr(shift, key, value)
    await db.flush()
    return await _load(db, shift.id)


async def delete_shift(db: AsyncSession, shift_id: UUID) -> None:
    shift = await _load(db, shift_id)
    await db.delete(shift)
    await db.flush()


async def build_report(db: AsyncSession, date_from: date, date_to: date) -> ShiftReport:
    result = await db.execute(
        select(CareShift)
        .where(CareShift.shift_date >= date_from, CareShift.shift_date <= date_to)
        .order_by(CareShift.shift_date.asc(), CareShift.start_time.asc())
    )
    rows = [
        ShiftReportRow(
            id=s.id,
            shift_date=s.shift_date,
            start_time=s.start_time,
            patient_name=s.patient.name if s.patient else None,
            district=s.district,
            shift=s.shift,
            nurse=s.nurse,
            amount_due=s.amount_due,
            payment_method=s.payment_method,
            extra_expenses=s.extra_expenses,
            utility=s.utility,
        )
        for s in result.scalars().all()
    ]
    total = sum((row.amount_due for row in rows), Decimal("0"))
    return ShiftReport(
        date_from=date_from,
        date_to=date_to,
        rows=rows,
        totals=ShiftReportTotals(
            total_revenue=billing.money(total),
            total_shifts=len(rows),
            average=billing.money(total / len(rows)) if rows else billing.money(0),
        ),
    )
