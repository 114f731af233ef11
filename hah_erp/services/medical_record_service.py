"""
Servicio de registros de citas médicas.

Cada cita de medicina completada genera un registro con ingreso y costo
en cero para que administración los complete. La creación desde una cita
es idempotente: si ya existe el registro de esa cita se devuelve tal cual.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import ConflictException, NotFoundException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.models.appointment import Appointment, AppointmentVariant
from hah_erp.models.medical_record import MedicalAppointmentRecord
from hah_erp.models.patient import Patient
from hah_erp.schemas.medical_record import (
    MedicalRecordCreate,
    MedicalRecordUpdate,
    MedicalReport,
    MedicalReportRow,
    MedicalReportTotals,
)
from hah_erp.services import billing

logger = logging.getLogger(__name__)


async def get_record(db: AsyncSession, record_id: UUID) -> MedicalAppointmentRecord:
    record = await db.get(MedicalAppointmentRecord, record_id)
    if not record:
        raise NotFoundException("Registro de cita")
    return record


async def get_by_appointment(
    db: AsyncSession, appointment_id: UUID
) -> MedicalAppointmentRecord | None:
    result = await db.execute(
        select(MedicalAppointmentRecord).where(
            MedicalAppointmentRecord.appointment_id == appointment_id
        )
    )
    return result.scalar_one_or_none()


async def list_records(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 10,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
) -> dict:
    query = select(MedicalAppointmentRecord)
    if date_from:
        query = query.where(MedicalAppointmentRecord.record_date >= date_from)
    if date_to:
        query = query.where(MedicalAppointmentRecord.record_date <= date_to)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(MedicalAppointmentRecord.patient_name).like(pattern),
                func.lower(MedicalAppointmentRecord.doctor_name).like(pattern),
                func.lower(MedicalAppointmentRecord.appointment_type).like(pattern),
            )
        )

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(
            MedicalAppointmentRecord.record_date.desc(),
            MedicalAppointmentRecord.created_at.desc(),
        )
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def create_record(db: AsyncSession, data: MedicalRecordCreate) -> MedicalAppointmentRecord:
    values = data.model_dump()
    if values["appointment_id"] and await get_by_appointment(db, values["appointment_id"]):
        raise ConflictException("La cita ya tiene un registro")
    if values["patient_id"]:
        patient = await db.get(Patient, values["patient_id"])
        if not patient:
            raise NotFoundException("Paciente")
        values["patient_name"] = values["patient_name"] or patient.name
    values["appointment_type"] = values["appointment_type"] or "consulta"

    record = MedicalAppointmentRecord(**values)
    db.add(record)
    await db.flush()
    await db.refresh(record)
    return record


async def create_from_appointment(
    db: AsyncSession, appointment: Appointment
) -> MedicalAppointmentRecord:
    """Registro de la cita con montos en cero; devuelve el existente si ya lo tiene."""
    existing = await get_by_appointment(db, appointment.id)
    if existing:
        return existing

    record = MedicalAppointmentRecord(
        appointment_id=appointment.id,
        record_date=appointment.appointment_date,
        patient_id=appointment.patient_id,
        patient_name=appointment.patient_name,
        appointment_type=appointment.type.value if appointment.type else "consulta",
        doctor_name=appointment.doctor_name,
        income=Decimal("0"),
        cost=Decimal("0"),
        notes=appointment.notes,
    )
    db.add(record)
    await db.flush()
    await db.refresh(record)
    logger.info("Registro de cita médica creado para la cita %s", appointment.id)
    return record


async def create_from_appointment_id(
    db: AsyncSession, appointment_id: UUID
) -> MedicalAppointmentRecord:
    appointment = await db.get(Appointment, appointment_id)
    if not appointment or appointment.variant != AppointmentVariant.MEDICINA:
        raise NotFoundException("Cita", "Cita de medicina no encontrada")
    return await create_from_appointment(db, appointment)


async def update_record(
    db: AsyncSession, record_id: UUID, data: MedicalRecordUpdate
) -> MedicalAppointmentRecord:
    record = await get_record(db, record_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key in ("income", "cost"):
            continue
        setattr(record, key, value)
    await db.flush()
    await db.refresh(record)
    return record


async def delete_record(db: AsyncSession, record_id: UUID) -> None:
    record = await get_record(db, record_id)
    await db.delete(record)
    await db.flush()


async def build_report(db: AsyncSession, date_from: date, date_to: date) -> MedicalReport:
    result = await db.execute(
        select(MedicalAppointmentRecord)
        .where(
            MedicalAppointmentRecord.record_date >= date_from,
            MedicalAppointmentRecord.record_date <= date_to,
        )
        .order_by(MedicalAppointmentRecord.record_date.asc())
    )
    rows = [
        MedicalReportRow(
            id=r.id,
            record_date=r.record_date,
            patient_name=r.patient_name or "",
            appointment_type=r.appointment_type,
            doctor_name=r.doctor_name,
            income=billing.money(r.income),
            cost=billing.money(r.cost),
            utility=billing.money(r.utility),
        )
        for r in result.scalars().all()
    ]
    total_income = sum((row.income for row in rows), Decimal("0"))
    total_cost = sum((row.cost for row in rows), Decimal("0"))
    return MedicalReport(
        date_from=date_from,
        date_to=date_to,
        rows=rows,
        totals=MedicalReportTotals(
            total_records=len(rows),
            total_income=billing.money(total_income),
            total_cost=billing.money(total_cost),
            total_utility=billing.money(total_income - total_cost),
        ),
    )
