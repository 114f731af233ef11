"""
Servicio de contratos con pacientes.

Numeración correlativa por año: CON-<año>-<NNNN>. El contador vive en
contract_sequences; un número emitido no se reutiliza aunque el contrato
se elimine.
"""

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException, ValidationException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import today_lima
from hah_erp.models.contract import ContractSequence, ContractStatus, PatientContract
from hah_erp.models.patient import Patient
from hah_erp.models.user import User
from hah_erp.schemas.contract import (
    ContractStats,
    PatientContractCreate,
    PatientContractResponse,
    PatientContractUpdate,
)
from hah_erp.services import export_service
from hah_erp.services.audit_service import log_action

SORTABLE_FIELDS = {
    "contract_number": PatientContract.contract_number,
    "contract_date": PatientContract.contract_date,
    "start_date": PatientContract.start_date,
    "monthly_amount": PatientContract.monthly_amount,
    "created_at": PatientContract.created_at,
}

EXPORT_HEADERS = [
    "N° Contrato", "Paciente", "DNI", "Fecha de contrato", "Familiar responsable",
    "Tipo de servicio", "Fecha de inicio", "Fecha de fin", "Hora de inicio",
    "Monto mensual", "Tarifa por hora", "Método de pago", "Estado", "Observaciones",
]


async def _highest_issued(db: AsyncSession, prefix: str) -> int:
    result = await db.execute(
        select(PatientContract.contract_number).where(
            PatientContract.contract_number.like(f"{prefix}%")
        )
    )
    suffixes = [number[len(prefix):] for number in result.scalars().all()]
    return max((int(s) for s in suffixes if s.isdigit()), default=0)


async def generate_contract_number(db: AsyncSession, year: int | None = None) -> str:
    """Siguiente número del año. Incrementa el contador, así que solo debe llamarse al crear."""
    year = year or today_lima().year
    prefix = f"CON-{year}-"

    result = await db.execute(
        select(ContractSequence)
        .where(ContractSequence.year == year)
        .with_for_update()
    )
    seq = result.scalar_one_or_none()
    if not seq:
        seq = ContractSequence(year=year, last_number=await _highest_issued(db, prefix))
        db.add(seq)
        await db.flush()

    seq.last_number += 1
    await db.flush()
    return f"{prefix}{seq.last_number:04d}"


async def _load(db: AsyncSession, contract_id: UUID) -> PatientContract:
    result = await db.execute(
        select(PatientContract)
        .where(PatientContract.id == contract_id)
        .execution_options(populate_existing=True)
    )
    contract = result.scalar_one_or_none()
    if not contract:
        raise NotFoundException("Contrato")
    return contract


async def get_contract(db: AsyncSession, contract_id: UUID) -> PatientContract:
    return await _load(db, contract_id)


async def list_contracts(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
    status: ContractStatus | None = None,
    service_type: str | None = None,
    patient_id: UUID | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> dict:
    query = select(PatientContract)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(PatientContract.contract_number).like(pattern),
                func.lower(PatientContract.responsible_family_member).like(pattern),
            )
        )
    if status:
        query = query.where(PatientContract.status == status)
    if service_type:
        query = query.where(PatientContract.service_type == service_type)
    if patient_id:
        query = query.where(PatientContract.patient_id == patient_id)

    total = await count_rows(db, query)
    column = SORTABLE_FIELDS.get(sort_by, PatientContract.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        query.order_by(ordering, PatientContract.id)
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def list_by_patient(db: AsyncSession, patient_id: UUID) -> list[PatientContract]:
    result = await db.execute(
        select(PatientContract)
        .where(PatientContract.patient_id == patient_id)
        .order_by(PatientContract.start_date.desc())
    )
    return list(result.scalars().all())


async def create_contract(
    db: AsyncSession,
    user: User,
    data: PatientContractCreate,
    ip_address: str | None = None,
) -> PatientContract:
    if not await db.get(Patient, data.patient_id):
        raise NotFoundException("Paciente")

    values = data.model_dump()
    values["contract_date"] = values.get("contract_date") or today_lima()
    contract = PatientContract(
        contract_number=await generate_contract_number(db, values["contract_date"].year),
        **values,
    )
    db.add(contract)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="patient_contract",
        entity_id=str(contract.id),
        action="create",
        new_data={
            "contract_number": contract.contract_number,
            "patient_id": contract.patient_id,
            "monthly_amount": contract.monthly_amount,
        },
        ip_address=ip_address,
    )
    return await _load(db, contract.id)


async def update_contract(
    db: AsyncSession,
    contract_id: UUID,
    user: User,
    data: PatientContractUpdate,
    ip_address: str | None = None,
) -> PatientContract:
    contract = await _load(db, contract_id)
    update_data = data.model_dump(exclude_unset=True)
    old_data = {key: getattr(contract, key) for key in update_data}

    for key, value in update_data.items():
        if value is None and key not in ("end_date", "start_time", "hourly_rate", "notes"):
            continue
        setattr(contract, key, value)

    if contract.end_date and contract.end_date < contract.start_date:
        raise ValidationException("La fecha de fin no puede ser anterior a la de inicio")

    await db.flush()
    await log_action(
        db,
        user_id=user.id,
        entity="patient_contract",
        entity_id=str(contract.id),
        action="update",
        old_data=old_data,
        new_data=update_data,
        ip_address=ip_address,
    )
    return await _load(db, contract.id)


async def delete_contract(
    db: AsyncSession,
    contract_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> None:
    contract = await _load(db, contract_id)
    await log_action(
        db,
        user_id=user.id,
        entity="patient_contract",
        entity_id=str(contract.id),
        action="delete",
        old_data={"contract_number": contract.contract_number},
        ip_address=ip_address,
    )
    await db.delete(contract)
    await db.flush()


async def get_stats(db: AsyncSession) -> ContractStats:
    result = await db.execute(
        select(PatientContract.status, func.count(PatientContract.id)).group_by(
            PatientContract.status
        )
    )
    counts = {status: count for status, count in result.all()}
    return ContractStats(
        total=sum(counts.values()),
        active=counts.get(ContractStatus.ACTIVO, 0),
        inactive=counts.get(ContractStatus.INACTIVO, 0),
        suspended=counts.get(ContractStatus.SUSPENDIDO, 0),
        finished=counts.get(ContractStatus.FINALIZADO, 0),
    )


async def export_contracts(db: AsyncSession, fmt: str = "json") -> str | list[dict]:
    result = await db.execute(
        select(PatientContract).order_by(PatientContract.contract_number)
    )
    contracts = list(result.scalars().all())

    if fmt == "csv":
        rows = (
            [
                c.contract_number,
                c.patient.name if c.patient else "",
                c.patient.dni if c.patient else "",
                c.contract_date, c.responsible_family_member, c.service_type,
                c.start_date, c.end_date, c.start_time, c.monthly_amount,
                c.hourly_rate, c.payment_method, c.status, c.notes,
            ]
            for c in contracts
        )
        return export_service.to_csv(EXPORT_HEADERS, rows)

    return [
        PatientContractResponse.model_validate(c).model_dump(mode="json") for c in contracts
    ]
