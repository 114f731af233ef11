"""
Servicio de cuidados en casa: planes, contratos y periodos quincenales.

Los montos de cada periodo se calculan siempre en el servidor a partir
del monto mensual del contrato (ver billing.quincena_billing).
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.config import get_settings
from hah_erp.core.exceptions import ConflictException, NotFoundException, ValidationException
from hah_erp.core.timeutils import today_lima
from hah_erp.models.home_care import HomeCareContract, HomeCarePeriod, HomeCarePlan
from hah_erp.models.patient import Patient
from hah_erp.models.user import User
from hah_erp.schemas.home_care import (
    BillingPreviewRequest,
    BillingPreviewResponse,
    HomeCareContractCreate,
    HomeCareContractSummary,
    HomeCareContractUpdate,
    HomeCarePeriodCreate,
    HomeCarePeriodUpdate,
    HomeCarePlanCreate,
    HomeCarePlanUpdate,
    HomeCareReport,
    HomeCareReportRow,
    HomeCareReportTotals,
)
from hah_erp.services import billing
from hah_erp.services.audit_service import log_action

settings = get_settings()
logger = logging.getLogger(__name__)

PERIOD_LENGTH = timedelta(days=14)


def _compute(monthly_amount, holiday_dates: list, pause_hours: int) -> billing.QuincenaBilling:
    return billing.quincena_billing(
        monthly_amount,
        holiday_count=len(holiday_dates or []),
        pause_hours=pause_hours or 0,
        default_quincena=settings.DEFAULT_QUINCENA_AMOUNT,
        days=settings.QUINCENA_DAYS,
    )


def _iso_dates(dates: list[date] | None) -> list[str]:
    return [d.isoformat() for d in (dates or [])]


# ══════════════════════════════════════════════════════
# Planes
# ══════════════════════════════════════════════════════


async def list_plans(db: AsyncSession, include_inactive: bool = False) -> list[HomeCarePlan]:
    query = select(HomeCarePlan)
    if not include_inactive:
        query = query.where(HomeCarePlan.is_active.is_(True))
    result = await db.execute(query.order_by(HomeCarePlan.monthly_amount.asc()))
    return list(result.scalars().all())


async def get_plan(db: AsyncSession, plan_id: UUID) -> HomeCarePlan:
    plan = await db.get(HomeCarePlan, plan_id)
    if not plan:
        raise NotFoundException("Plan")
    return plan


async def create_plan(db: AsyncSession, data: HomeCarePlanCreate) -> HomeCarePlan:
    plan = HomeCarePlan(**data.model_dump())
    db.add(plan)
    await db.flush()
    await db.refresh(plan)
    return plan


async def update_plan(db: AsyncSession, plan_id: UUID, data: HomeCarePlanUpdate) -> HomeCarePlan:
    plan = await get_plan(db, plan_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key != "shift":
            continue
        setattr(plan, key, value)
    await db.flush()
    await db.refresh(plan)
    return plan


# ══════════════════════════════════════════════════════
# Contratos
# ══════════════════════════════════════════════════════


async def get_contract(db: AsyncSession, contract_id: UUID) -> HomeCareContract:
    result = await db.execute(
        select(HomeCareContract)
        .where(HomeCareContract.id == contract_id)
        .execution_options(populate_existing=True)
    )
    contract = result.scalar_one_or_none()
    if not contract:
        raise NotFoundException("Contrato de cuidado en casa")
    return contract


async def get_contract_by_patient(db: AsyncSession, patient_id: UUID) -> HomeCareContract:
    result = await db.execute(
        select(HomeCareContract).where(HomeCareContract.patient_id == patient_id)
    )
    contract = result.scalar_one_or_none()
    if not contract:
        raise NotFoundException(
            "Contrato", "El paciente no tiene contrato de cuidado en casa"
        )
    return contract


async def list_contracts(db: AsyncSession, is_active: bool | None = None) -> list[HomeCareContract]:
    query = select(HomeCareContract)
    if is_active is not None:
        query = query.where(HomeCareContract.is_active.is_(is_active))
    result = await db.execute(
        query.order_by(
            HomeCareContract.start_date.desc().nulls_last(),
            HomeCareContract.created_at.desc(),
        )
    )
    return list(result.scalars().all())


async def _apply_plan(db: AsyncSession, values: dict) -> None:
    """Copia nombre y monto mensual del plan cuando no vienen explícitos."""
    plan_id = values.get("plan_id")
    if not plan_id:
        return
    plan = await get_plan(db, plan_id)
    if not values.get("plan_name"):
        values["plan_name"] = plan.name
    if values.get("monthly_amount") is None:
        values["monthly_amount"] = plan.monthly_amount


async def create_contract(
    db: AsyncSession,
    user: User,
    data: HomeCareContractCreate,
    ip_address: str | None = None,
) -> HomeCareContract:
    patient = await db.get(Patient, data.patient_id)
    if not patient:
        raise NotFoundException("Paciente")

    existing = await db.scalar(
        select(func.count(HomeCareContract.id)).where(
            HomeCareContract.patient_id == data.patient_id
        )
    )
    if existing:
        raise ConflictException("El paciente ya tiene un contrato de cuidado en casa")

    values = data.model_dump()
    await _apply_plan(db, values)
    if values.get("monthly_amount") is None:
        values["monthly_amount"] = Decimal("0")

    contract = HomeCareContract(**values)
    db.add(contract)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="home_care_contract",
        entity_id=str(contract.id),
        action="create",
        new_data={
            "patient_id": contract.patient_id,
            "plan_name": contract.plan_name,
            "monthly_amount": contract.monthly_amount,
        },
        ip_address=ip_address,
    )
    return await get_contract(db, contract.id)


async def update_contract(
    db: AsyncSession,
    contract_id: UUID,
    user: User,
    data: HomeCareContractUpdate,
    ip_address: str | None = None,
) -> HomeCareContract:
    contract = await get_contract(db, contract_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("plan_id") and update_data.get("plan_id") != contract.plan_id:
        await _apply_plan(db, update_data)

    old_data = {key: getattr(contract, key) for key in update_data}
    for key, value in update_data.items():
        if value is None and key in ("start_time", "monthly_amount", "is_active"):
            continue
        setattr(contract, key, value)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="home_care_contract",
        entity_id=str(contract.id),
        action="update",
        old_data=old_data,
        new_data=update_data,
        ip_address=ip_address,
    )
    return await get_contract(db, contract.id)


async def deactivate_contract(
    db: AsyncSession,
    contract_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> HomeCareContract:
    contract = await get_contract(db, contract_id)
    contract.is_active = False
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="home_care_contract",
        entity_id=str(contract.id),
        action="deactivate",
        ip_address=ip_address,
    )
    return await get_contract(db, contract.id)


async def contract_summary(db: AsyncSession, contract_id: UUID) -> HomeCareContractSummary:
    """Facturado, cobrado (periodos con fecha de pago) y pendiente."""
    await get_contract(db, contract_id)
    periods = await list_periods(db, contract_id)
    billed = sum((p.total_amount for p in periods), Decimal("0"))
    paid = sum((p.total_amount for p in periods if p.paid_at), Decimal("0"))
    return HomeCareContractSummary(
        contract_id=contract_id,
        total_billed=billing.money(billed),
        total_paid=billing.money(paid),
        total_pending=billing.money(billed - paid),
        period_count=len(periods),
    )


# ══════════════════════════════════════════════════════
# Periodos
# ══════════════════════════════════════════════════════


async def list_periods(db: AsyncSession, contract_id: UUID) -> list[HomeCarePeriod]:
    result = await db.execute(
        select(HomeCarePeriod)
        .where(HomeCarePeriod.contract_id == contract_id)
        .order_by(HomeCarePeriod.item_number.asc())
    )
    return list(result.scalars().all())


async def get_period(db: AsyncSession, period_id: UUID) -> HomeCarePeriod:
    period = await db.get(HomeCarePeriod, period_id)
    if not period:
        raise NotFoundException("Periodo")
    return period


def _apply_billing(period: HomeCarePeriod, monthly_amount, holiday_dates: list, pause_hours: int) -> None:
    computed = _compute(monthly_amount, holiday_dates, pause_hours)
    period.base_amount = computed.quincena_amount
    period.holiday_amount = computed.holiday_amount
    period.total_amount = computed.total_amount


async def create_period(
    db: AsyncSession, contract_id: UUID, data: HomeCarePeriodCreate
) -> HomeCarePeriod:
    contract = await get_contract(db, contract_id)
    count = await db.scalar(
        select(func.count(HomeCarePeriod.id)).where(HomeCarePeriod.contract_id == contract.id)
    ) or 0

    date_from = data.date_from or data.quincena_payment_date or today_lima()
    date_to = data.date_to or date_from + PERIOD_LENGTH
    if date_to < date_from:
        raise ValidationException("La fecha final no puede ser anterior a la inicial")

    period = HomeCarePeriod(
        contract_id=contract.id,
        item_number=data.item_number or count + 1,
        payment_number=data.payment_number or count + 1,
        quincena_payment_date=data.quincena_payment_date,
        shift=data.shift or "24X24",
        date_from=date_from,
        date_to=date_to,
        holiday_dates=_iso_dates(data.holiday_dates),
        pause_hours=data.pause_hours,
        pause_dates=_iso_dates(data.pause_dates),
        paid_at=data.paid_at,
        payment_method=data.payment_method,
        operation_number=data.operation_number,
        invoice_number=data.invoice_number,
    )
    _apply_billing(period, contract.monthly_amount, data.holiday_dates, data.pause_hours)

    db.add(period)
    await db.flush()
    await db.refresh(period)
    return period


async def update_period(
    db: AsyncSession, period_id: UUID, data: HomeCarePeriodUpdate
) -> HomeCarePeriod:
    period = await get_period(db, period_id)
    contract = await get_contract(db, period.contract_id)
    update_data = data.model_dump(exclude_unset=True)

    for key, value in update_data.items():
        if key in ("holiday_dates", "pause_dates"):
            value = _iso_dates(value)
        elif value is None and key in ("item_number", "payment_number", "shift", "date_from", "date_to", "pause_hours"):
            continue
        setattr(period, key, value)

    if period.date_to < period.date_from:
        raise ValidationException("La fecha final no puede ser anterior a la inicial")

    holiday_dates = data.holiday_dates if "holiday_dates" in update_data else period.holiday_dates
    _apply_billing(period, contract.monthly_amount, holiday_dates or [], period.pause_hours)

    await db.flush()
    await db.refresh(period)
    return period


async def delete_period(db: AsyncSession, period_id: UUID) -> None:
    period = await get_period(db, period_id)
    await db.delete(period)
    await db.flush()


async def preview_billing(db: AsyncSession, data: BillingPreviewRequest) -> BillingPreviewResponse:
    """Calcula el monto de una quincena sin guardar."""
    monthly_amount = data.monthly_amount
    if monthly_amount is None and data.contract_id:
        monthly_amount = (await get_contract(db, data.contract_id)).monthly_amount
    computed = _compute(monthly_amount or 0, data.holiday_dates, data.pause_hours)
    return BillingPreviewResponse(**computed.__dict__)


async def build_report(db: AsyncSession, date_from: date, date_to: date) -> HomeCareReport:
    """Periodos cuyo inicio cae en el rango, con el nombre del paciente."""
    result = await db.execute(
        select(HomeCarePeriod, Patient.name)
        .join(HomeCareContract, HomeCarePeriod.contract_id == HomeCareContract.id)
        .join(Patient, HomeCareContract.patient_id == Patient.id)
        .where(HomeCarePeriod.date_from >= date_from, HomeCarePeriod.date_from <= date_to)
        .order_by(HomeCarePeriod.date_from.asc(), HomeCarePeriod.item_number.asc())
    )
    rows = [
        HomeCareReportRow(
            period_id=period.id,
            paid_at=period.paid_at,
            patient_name=patient_name,
            shift=period.shift,
            date_from=period.date_from,
            date_to=period.date_to,
            total_amount=period.total_amount,
            payment_method=period.payment_method,
        )
        for period, patient_name in result.all()
    ]
    total = sum((row.total_amount for row in rows), Decimal("0"))
    return HomeCareReport(
        date_from=date_from,
        date_to=date_to,
        rows=rows,
        totals=HomeCareReportTotals(
            total_revenue=billing.money(total),
            total_periods=len(rows),
            average=billing.money(total / len(rows)) if rows else billing.money(0),
        ),
    )
