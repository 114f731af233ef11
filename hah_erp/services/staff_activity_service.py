"""
Actividad reciente de un empleado.

Reúne, por el nombre del empleado, sus citas como médico, sus turnos de
cuidado y sus registros de enfermería. Los nombres se comparan sin
distinguir mayúsculas: en citas basta con que uno contenga al otro
("Dr. Juan Pérez" / "Juan Pérez"), en turnos deben coincidir y en los
registros de enfermería el nombre del empleado debe estar contenido en
el de la enfermera.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.timeutils import local_tz
from hah_erp.models.appointment import Appointment, AppointmentVariant
from hah_erp.models.care_shift import CareShift
from hah_erp.models.nursing import (
    EliminationRecord,
    NursingEvolution,
    NursingInitialAssessment,
    NursingVitalSign,
)
from hah_erp.schemas.staff import StaffActivityItem
from hah_erp.services import staff_service

LIMIT_PER_SOURCE = 15
FEED_LIMIT = 30


def _normalized(column):
    return func.upper(func.trim(column))


def _flexible_match(column, name: str):
    """El nombre de la columna contiene al del empleado o al revés."""
    wanted = func.upper(literal(name))
    return and_(
        column.is_not(None),
        func.trim(column) != "",
        or_(
            _normalized(column).contains(wanted),
            wanted.contains(_normalized(column)),
        ),
    )


def _local_date_time(moment: datetime) -> tuple:
    if moment.tzinfo is not None:
        moment = moment.astimezone(local_tz())
    return moment.date(), moment.strftime("%H:%M")


async def _appointments(
    db: AsyncSession, name: str, variant: AppointmentVariant
) -> list[Appointment]:
    result = await db.execute(
        select(Appointment)
        .where(Appointment.variant == variant, _flexible_match(Appointment.doctor_name, name))
        .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
        .limit(LIMIT_PER_SOURCE)
    )
    return list(result.scalars().all())


async def _nursing_rows(db: AsyncSession, model, date_column, name: str) -> list:
    result = await db.execute(
        select(model)
        .where(model.nurse_name.ilike(f"%{name}%"))
        .order_by(date_column.desc())
        .limit(LIMIT_PER_SOURCE)
    )
    return list(result.scalars().all())


async def get_activity_by_name(db: AsyncSession, staff_name: str) -> list[StaffActivityItem]:
    name = (staff_name or "").strip()
    if not name:
        return []

    items: list[StaffActivityItem] = []

    for c in await _appointments(db, name, AppointmentVariant.MEDICINA):
        items.append(
            StaffActivityItem(
                id=f"med-{c.id}",
                type="cita_medicina",
                type_label="Cita medicina",
                description=f"Cita con {c.patient_name}",
                date=c.appointment_date,
                time=c.appointment_time or "",
                extra=c.type.value if c.type else None,
            )
        )

    for c in await _appointments(db, name, AppointmentVariant.PROCEDIMIENTOS):
        label = c.procedure_name or (c.type.value if c.type else "Procedimiento")
        items.append(
            StaffActivityItem(
                id=f"proc-{c.id}",
                type="cita_procedimiento",
                type_label="Cita procedimiento",
                description=f"{label} - {c.patient_name}",
                date=c.appointment_date,
                time=c.appointment_time or "",
            )
        )

    shifts = await db.execute(
        select(CareShift)
        .where(_normalized(CareShift.nurse) == func.upper(literal(name)))
        .order_by(CareShift.shift_date.desc(), CareShift.start_time.desc())
        .limit(LIMIT_PER_SOURCE)
    )
    for s in shifts.scalars().all():
        items.append(
            StaffActivityItem(
                id=f"shift-{s.id}",
                type="turno_cuidado",
                type_label="Turno cuidado",
                description=f"Turno - {s.patient.name}" if s.patient else "Turno de cuidado",
                date=s.shift_date,
                time=s.start_time or "",
                extra=s.shift,
            )
        )

    for r in await _nursing_rows(db, EliminationRecord, EliminationRecord.record_date, name):
        items.append(
            StaffActivityItem(
                id=f"elim-{r.id}",
                type="eliminacion",
                type_label="Eliminación heces/orina",
                description=f"Registro - {r.patient_name or 'Paciente'}",
                date=r.record_date,
            )
        )

    for r in await _nursing_rows(
        db, NursingInitialAssessment, NursingInitialAssessment.assessment_date, name
    ):
        items.append(
            StaffActivityItem(
                id=f"val-{r.id}",
                type="valoracion",
                type_label="Valoración inicial",
                description=f"Valoración - {r.patient_name or 'Paciente'}",
                date=r.assessment_date,
            )
        )

    for r in await _nursing_rows(db, NursingEvolution, NursingEvolution.evolution_date, name):
        items.append(
            StaffActivityItem(
                id=f"evol-{r.id}",
                type="evolucion",
                type_label="Evolución enfermería",
                description=f"Evolución - {r.patient_name or 'Paciente'}",
                date=r.evolution_date,
            )
        )

    for r in await _nursing_rows(
        db, NursingVitalSign, NursingVitalSign.assessment_datetime, name
    ):
        day, time = _local_date_time(r.assessment_datetime)
        items.append(
            StaffActivityItem(
                id=f"vs-{r.id}",
                type="signos_vitales",
                type_label="Signos vitales",
                description="Registro de signos vitales",
                date=day,
                time=time,
            )
        )

    items.sort(key=lambda item: (item.date, item.time), reverse=True)
    return items[:FEED_LIMIT]


async def get_staff_activity(db: AsyncSession, staff_id: UUID) -> list[StaffActivityItem]:
    staff = await staff_service.get_staff(db, staff_id)
    return await get_activity_by_name(db, staff.name)
