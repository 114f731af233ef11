"""
Servicio de citas: agendas de medicina y de procedimientos.

Las citas guardan una copia de los datos del paciente (nombre, email,
teléfono) para poder agendar a personas que aún no están registradas.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException, ValidationException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import today_lima
from hah_erp.models.appointment import Appointment, AppointmentStatus, AppointmentVariant
from hah_erp.models.patient import Patient
from hah_erp.models.procedure_catalog import ProcedureCatalog
from hah_erp.schemas.appointment import AppointmentCreate, AppointmentUpdate
from hah_erp.services import medical_record_service


async def _fill_snapshots(db: AsyncSession, values: dict, current: Appointment | None = None) -> None:
    """Completa los datos del paciente y el nombre del procedimiento faltantes."""
    patient_id = values.get("patient_id")
    if patient_id:
        patient = await db.get(Patient, patient_id)
        if not patient:
            raise NotFoundException("Paciente")
        for field, source in (
            ("patient_name", patient.name),
            ("patient_email", patient.email),
            ("patient_phone", patient.phone),
        ):
            if not values.get(field):
                values[field] = source

    catalog_id = values.get("procedure_catalog_id")
    if catalog_id and not values.get("procedure_name"):
        procedure = await db.get(ProcedureCatalog, catalog_id)
        if not procedure:
            raise NotFoundException("Procedimiento")
        values["procedure_name"] = procedure.name

    if current is None and not values.get("patient_name"):
        raise ValidationException("Se requiere el paciente o su nombre")


async def get_appointment(db: AsyncSession, appointment_id: UUID) -> Appointment:
    appointment = await db.get(Appointment, appointment_id)
    if not appointment:
        raise NotFoundException("Cita", "Cita no encontrada")
    return appointment


async def list_appointments(
    db: AsyncSession,
    *,
    variant: AppointmentVariant,
    page: int = 1,
    size: int = 20,
    date_from: date | None = None,
    date_to: date | None = None,
    status: AppointmentStatus | None = None,
    search: str | None = None,
) -> dict:
    """Citas de una agenda, más recientes primero (fecha y hora descendente)."""
    query = select(Appointment).where(Appointment.variant == variant)

    if date_from:
        query = query.where(Appointment.appointment_date >= date_from)
    if date_to:
        query = query.where(Appointment.appointment_date <= date_to)
    if status:
        query = query.where(Appointment.status == status)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Appointment.patient_name).like(pattern),
                func.lower(Appointment.doctor_name).like(pattern),
                func.lower(Appointment.procedure_name).like(pattern),
            )
        )

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(
            Appointment.appointment_date.desc(),
            Appointment.appointment_time.desc(),
        )
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def list_today(db: AsyncSession, day: date | None = None) -> list[Appointment]:
    """Citas del día (ambas agendas) ordenadas por hora."""
    day = day or today_lima()
    result = await db.execute(
        select(Appointment)
        .where(Appointment.appointment_date == day)
        .order_by(Appointment.appointment_time.asc())
    )
    return list(result.scalars().all())


async def create_appointment(db: AsyncSession, data: AppointmentCreate) -> Appointment:
    values = data.model_dump()
    await _fill_snapshots(db, values)

    appointment = Appointment(**values)
    db.add(appointment)
    await db.flush()
    await db.refresh(appointment)
    if (
        appointment.status == AppointmentStatus.COMPLETED
        and appointment.variant == AppointmentVariant.MEDICINA
    ):
        await medical_record_service.create_from_appointment(db, appointment)
    return appointment


async def update_appointment(
    db: AsyncSession, appointment_id: UUID, data: AppointmentUpdate
) -> Appointment:
    appointment = await get_appointment(db, appointment_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("patient_id") or update_data.get("procedure_catalog_id"):
        await _fill_snapshots(db, update_data, current=appointment)

    completed_now = (
        update_data.get("status") == AppointmentStatus.COMPLETED
        and appointment.status != AppointmentStatus.COMPLETED
    )
    for key, value in update_data.items():
        setattr(appointment, key, value)

    await db.flush()
    await db.refresh(appointment)

    # Las citas de medicina completadas pasan al registro de ingresos
    if completed_now and appointment.variant == AppointmentVariant.MEDICINA:
        await medical_record_service.create_from_appointment(db, appointment)
    return appointment


async def delete_appointment(db: AsyncSession, appointment_id: UUID) -> None:
    appointment = await get_appointment(db, appointment_id)
    await db.delete(appointment)
    await db.flush()
