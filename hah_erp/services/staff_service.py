"""
Servicio de personal: CRUD, filtros con nombres legacy, estadísticas y exportación.

Los registros importados de planillas antiguas usan variantes sin tilde
("Enfermeria", "Medico General"); los filtros por departamento y cargo
incluyen esas equivalencias.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import month_bounds, today_lima
from hah_erp.models.staff import Staff
from hah_erp.models.user import User
from hah_erp.schemas.staff import StaffCreate, StaffResponse, StaffStats, StaffUpdate
from hah_erp.services import export_service
from hah_erp.services.audit_service import log_action

DEPARTMENT_EQUIVALENTS: dict[str, list[str]] = {
    "Enfermería": ["Enfermería", "Enfermeria", "Nursing"],
    "Administración": ["Administración", "Administracion", "Administration"],
    "Medicina": ["Medicina", "Medicina General", "Medicine"],
}

POSITION_EQUIVALENTS: dict[str, list[str]] = {
    "Técnico en Enfermería": [
        "Técnico en Enfermería", "Tecnico en Enfermeria", "Técnico en enfermería",
    ],
    "Licenciada en Enfermería": [
        "Licenciada en Enfermería", "Licenciada en Enfermeria", "Enfermera",
    ],
    "Médico General": ["Médico General", "Medico General"],
}

SORTABLE_FIELDS = {
    "name": Staff.name,
    "created_at": Staff.created_at,
    "hire_date": Staff.hire_date,
    "position": Staff.position,
    "department": Staff.department,
}

EXPORT_HEADERS = [
    "ID", "Nombre", "Email", "Teléfono", "Edad", "Género", "Dirección", "Cargo",
    "Departamento", "Salario", "Fecha de contratación", "Estado",
    "Contacto de emergencia", "Teléfono de emergencia", "Calificaciones",
    "Certificaciones", "Fecha de registro",
]


def _equivalents(table: dict[str, list[str]], value: str) -> list[str]:
    """Valores aceptados para un filtro, buscando la clave o cualquiera de sus variantes."""
    for key, variants in table.items():
        if value == key or value in variants:
            return variants
    return [value]


async def get_staff(db: AsyncSession, staff_id: UUID) -> Staff:
    staff = await db.get(Staff, staff_id)
    if not staff:
        raise NotFoundException("Personal")
    return staff


async def list_staff(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 10,
    search: str | None = None,
    status: str | None = None,
    gender: str | None = None,
    department: str | None = None,
    position: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> dict:
    query = select(Staff)

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Staff.name).like(pattern),
                func.lower(Staff.email).like(pattern),
                func.lower(Staff.position).like(pattern),
                func.lower(Staff.department).like(pattern),
            )
        )
    if status:
        query = query.where(Staff.status == status)
    if gender:
        query = query.where(Staff.gender == gender)
    if department:
        query = query.where(Staff.department.in_(_equivalents(DEPARTMENT_EQUIVALENTS, department)))
    if position:
        query = query.where(Staff.position.in_(_equivalents(POSITION_EQUIVALENTS, position)))

    total = await count_rows(db, query)

    column = SORTABLE_FIELDS.get(sort_by, Staff.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        query.order_by(ordering, Staff.id).offset(page_offset(page, size)).limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def create_staff(
    db: AsyncSession,
    user: User,
    data: StaffCreate,
    ip_address: str | None = None,
) -> Staff:
    staff = Staff(**data.model_dump())
    db.add(staff)
    await db.flush()
    await db.refresh(staff)

    await log_action(
        db,
        user_id=user.id,
        entity="staff",
        entity_id=str(staff.id),
        action="create",
        new_data={"name": staff.name, "position": staff.position},
        ip_address=ip_address,
    )
    return staff


async def update_staff(
    db: AsyncSession,
    staff_id: UUID,
    user: User,
    data: StaffUpdate,
    ip_address: str | None = None,
) -> Staff:
    staff = await get_staff(db, staff_id)
    update_data = data.model_dump(exclude_unset=True)
    old_data = {key: getattr(staff, key) for key in update_data}
    for key, value in update_data.items():
        setattr(staff, key, value)

    await db.flush()
    await db.refresh(staff)

    await log_action(
        db,
        user_id=user.id,
        entity="staff",
        entity_id=str(staff.id),
        action="update",
        old_data=old_data,
        new_data=update_data,
        ip_address=ip_address,
    )
    return staff


async def delete_staff(
    db: AsyncSession,
    staff_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> None:
    staff = await get_staff(db, staff_id)
    await log_action(
        db,
        user_id=user.id,
        entity="staff",
        entity_id=str(staff.id),
        action="delete",
        old_data={"name": staff.name, "position": staff.position},
        ip_address=ip_address,
    )
    await db.delete(staff)
    await db.flush()


async def list_hired_between(db: AsyncSession, start: date, end: date) -> list[Staff]:
    """Personal contratado en [start, end), más recientes primero."""
    result = await db.execute(
        select(Staff)
        .where(Staff.hire_date >= start, Staff.hire_date < end)
        .order_by(Staff.hire_date.desc())
    )
    return list(result.scalars().all())


async def list_hired_this_month(db: AsyncSession) -> list[Staff]:
    start, end = month_bounds(today_lima())
    return await list_hired_between(db, start, end)


async def list_hired_this_year(db: AsyncSession) -> list[Staff]:
    today = today_lima()
    return await list_hired_between(
        db, date(today.year, 1, 1), date(today.year + 1, 1, 1)
    )


async def get_stats(db: AsyncSession) -> StaffStats:
    today = today_lima()
    month_start, next_month = month_bounds(today)

    total = await db.scalar(select(func.count(Staff.id))) or 0
    male = await db.scalar(select(func.count(Staff.id)).where(Staff.gender == "M")) or 0
    female = await db.scalar(select(func.count(Staff.id)).where(Staff.gender == "F")) or 0
    active = await db.scalar(
        select(func.count(Staff.id)).where(Staff.status == "Activo")
    ) or 0
    this_month = await db.scalar(
        select(func.count(Staff.id)).where(
            Staff.hire_date >= month_start, Staff.hire_date < next_month
        )
    ) or 0
    this_year = await db.scalar(
        select(func.count(Staff.id)).where(extract("year", Staff.hire_date) == today.year)
    ) or 0

    return StaffStats(
        total=total,
        male=male,
        female=female,
        active=active,
        hired_this_month=this_month,
        hired_this_year=this_year,
    )


async def export_staff(db: AsyncSession, fmt: str = "json") -> str | list[dict]:
    result = await db.execute(select(Staff).order_by(Staff.name))
    members = list(result.scalars().all())

    if fmt == "csv":
        rows = (
            [
                s.id, s.name, s.email, s.phone, s.age, s.gender, s.address, s.position,
                s.department, s.salary, s.hire_date, s.status, s.emergency_contact,
                s.emergency_phone, s.qualifications, s.certifications, s.created_at,
            ]
            for s in members
        )
        return export_service.to_csv(EXPORT_HEADERS, rows)

    return [StaffResponse.model_validate(s).model_dump(mode="json") for s in members]
