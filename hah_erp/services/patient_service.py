"""
Servicio de pacientes: CRUD, búsqueda, estadísticas y exportación.
"""

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import ConflictException, NotFoundException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import month_bounds, today_lima
from hah_erp.models.contract import PatientContract
from hah_erp.models.home_care import HomeCareContract
from hah_erp.models.lab import LabOrder
from hah_erp.models.patient import Patient
from hah_erp.models.user import User
from hah_erp.schemas.patient import PatientCreate, PatientResponse, PatientStats, PatientUpdate
from hah_erp.services import export_service
from hah_erp.services.audit_service import log_action

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "name": Patient.name,
    "created_at": Patient.created_at,
    "last_visit": Patient.last_visit,
    "age": Patient.age,
}

EXPORT_HEADERS = [
    "ID", "Nombre", "DNI", "Email", "Teléfono", "Edad", "Género", "Dirección",
    "Distrito", "Última visita", "Estado", "Tipo de sangre", "Alergias",
    "Contacto de emergencia", "Teléfono de emergencia", "Médico tratante",
    "Medicación actual", "Diagnóstico principal", "Fecha de registro",
]


async def _ensure_unique_dni(
    db: AsyncSession, dni: str | None, exclude_id: UUID | None = None
) -> None:
    if not dni:
        return
    query = select(Patient.id).where(Patient.dni == dni)
    if exclude_id:
        query = query.where(Patient.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise ConflictException("Ya existe un paciente con ese DNI")


async def get_patient(db: AsyncSession, patient_id: UUID) -> Patient:
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFoundException("Paciente")
    return patient


async def list_patients(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
    status: str | None = None,
    gender: str | None = None,
    blood_type: str | None = None,
    district: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> dict:
    """Lista pacientes con búsqueda, filtros y orden configurable."""
    query = select(Patient)

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Patient.name).like(pattern),
                func.lower(Patient.email).like(pattern),
                Patient.phone.like(pattern),
                Patient.dni.like(pattern),
            )
        )
    if status:
        query = query.where(Patient.status == status)
    if gender:
        query = query.where(Patient.gender == gender)
    if blood_type:
        query = query.where(Patient.blood_type == blood_type)
    if district:
        query = query.where(Patient.district.ilike(f"%{district}%"))

    total = await count_rows(db, query)

    column = SORTABLE_FIELDS.get(sort_by, Patient.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        query.order_by(ordering, Patient.id)
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def quick_search(db: AsyncSession, term: str, limit: int = 10) -> list[Patient]:
    """Búsqueda rápida por nombre, DNI o teléfono (autocompletado)."""
    pattern = f"%{term.strip().lower()}%"
    result = await db.execute(
        select(Patient)
        .where(
            or_(
                func.lower(Patient.name).like(pattern),
                Patient.dni.like(pattern),
                Patient.phone.like(pattern),
            )
        )
        .order_by(Patient.name)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_districts(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(Patient.district)
        .where(Patient.district.is_not(None), Patient.district != "")
        .distinct()
        .order_by(Patient.district)
    )
    return [row for row in result.scalars().all()]


async def create_patient(
    db: AsyncSession,
    user: User,
    data: PatientCreate,
    ip_address: str | None = None,
) -> Patient:
    await _ensure_unique_dni(db, data.dni)

    patient = Patient(**data.model_dump())
    db.add(patient)
    await db.flush()
    await db.refresh(patient)

    await log_action(
        db,
        user_id=user.id,
        entity="patient",
        entity_id=str(patient.id),
        action="create",
        new_data={"name": patient.name, "dni": patient.dni},
        ip_address=ip_address,
    )
    return patient


async def update_patient(
    db: AsyncSession,
    patient_id: UUID,
    user: User,
    data: PatientUpdate,
    ip_address: str | None = None,
) -> Patient:
    patient = await get_patient(db, patient_id)
    update_data = data.model_dump(exclude_unset=True)

    if "dni" in update_data:
        await _ensure_unique_dni(db, update_data["dni"], exclude_id=patient.id)

    old_data = {key: getattr(patient, key) for key in update_data}
    for key, value in update_data.items():
        setattr(patient, key, value)

    await db.flush()
    await db.refresh(patient)

    await log_action(
        db,
        user_id=user.id,
        entity="patient",
        entity_id=str(patient.id),
        action="update",
        old_data=old_data,
        new_data=update_data,
        ip_address=ip_address,
    )
    return patient


async def delete_patient(
    db: AsyncSession,
    patient_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> None:
    """
    Elimina un paciente. Se rechaza si tiene contratos u órdenes de
    laboratorio; citas, registros y turnos conservan el nombre copiado.
    """
    patient = await get_patient(db, patient_id)

    for model, label in (
        (HomeCareContract, "contratos de cuidado en casa"),
        (PatientContract, "contratos"),
        (LabOrder, "órdenes de laboratorio"),
    ):
        linked = await db.scalar(
            select(func.count()).select_from(model).where(model.patient_id == patient.id)
        )
        if linked:
            raise ConflictException(f"El paciente tiene {label} registrados")

    await log_action(
        db,
        user_id=user.id,
        entity="patient",
        entity_id=str(patient.id),
        action="delete",
        old_data={"name": patient.name, "dni": patient.dni},
        ip_address=ip_address,
    )
    await db.delete(patient)
    await db.flush()
    logger.info("Paciente %s eliminado por user_id=%s", patient_id, user.id)


async def get_stats(db: AsyncSession) -> PatientStats:
    """Totales por género, activos y con visita en el mes en curso."""
    month_start, next_month = month_bounds(today_lima())
    total = await db.scalar(select(func.count(Patient.id))) or 0
    male = await db.scalar(select(func.count(Patient.id)).where(Patient.gender == "M")) or 0
    female = await db.scalar(select(func.count(Patient.id)).where(Patient.gender == "F")) or 0
    active = await db.scalar(
        select(func.count(Patient.id)).where(Patient.status == "Activo")
    ) or 0
    this_month = await db.scalar(
        select(func.count(Patient.id)).where(
            Patient.last_visit >= month_start,
            Patient.last_visit < next_month,
        )
    ) or 0
    return PatientStats(
        total=total,
        male=male,
        female=female,
        active=active,
        with_visit_this_month=this_month,
    )


async def export_patients(db: AsyncSession, fmt: str = "json") -> str | list[dict]:
    """Exporta todos los pacientes como CSV (texto) o lista de dicts."""
    result = await db.execute(select(Patient).order_by(Patient.name))
    patients = list(result.scalars().all())

    if fmt == "csv":
        rows = (
            [
                p.id, p.name, p.dni, p.email, p.phone, p.age, p.gender, p.address,
                p.district, p.last_visit, p.status, p.blood_type, p.allergies,
                p.emergency_contact_name, p.emergency_contact_phone,
                p.primary_physician, p.current_medications, p.primary_diagnosis,
                p.created_at,
            ]
            for p in patients
        )
        return export_service.to_csv(EXPORT_HEADERS, rows)

    return [
        PatientResponse.model_validate(p).model_dump(mode="json") for p in patients
    ]
