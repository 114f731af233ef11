"""
Métricas agregadas para el dashboard principal.

"Hoy" y "este mes" se evalúan en la zona horaria de Lima.
"""

from datetime import date, datetime, time
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.timeutils import local_tz, month_bounds, now_lima, relative_time, today_lima
from hah_erp.models.appointment import Appointment
from hah_erp.models.patient import Patient
from hah_erp.models.procedure_catalog import ProcedureCatalog
from hah_erp.models.procedure_record import ProcedureRecord
from hah_erp.schemas.dashboard import (
    DashboardData,
    DashboardStats,
    RecentActivityItem,
    TodayAppointmentItem,
    TopServiceItem,
)
from hah_erp.services import appointment_service, billing

TOP_SERVICES_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 5


def growth(current, previous) -> float:
    """Variación porcentual respecto al periodo anterior; 0 si no hay base."""
    previous = Decimal(str(previous or 0))
    if previous == 0:
        return 0.0
    return round(float((Decimal(str(current or 0)) - previous) / previous * 100), 1)


async def _records_between(db: AsyncSession, start: date, end: date) -> list[ProcedureRecord]:
    result = await db.execute(
        select(ProcedureRecord)
        .where(ProcedureRecord.record_date >= start, ProcedureRecord.record_date < end)
        .order_by(ProcedureRecord.record_date.desc(), ProcedureRecord.created_at.desc())
    )
    return list(result.scalars().all())


async def _patients_created_between(db: AsyncSession, start: date, end: date) -> int:
    tzinfo = local_tz()
    return await db.scalar(
        select(func.count(Patient.id)).where(
            Patient.created_at >= datetime.combine(start, time.min, tzinfo),
            Patient.created_at < datetime.combine(end, time.min, tzinfo),
        )
    ) or 0


def top_services(records: list[ProcedureRecord], limit: int = TOP_SERVICES_LIMIT) -> list[TopServiceItem]:
    """Agrupa por nombre de procedimiento; count suma las cantidades."""
    grouped: dict[str, dict] = {}
    for record in records:
        name = record.procedure_name or "Sin nombre"
        entry = grouped.setdefault(name, {"count": 0, "revenue": Decimal("0")})
        entry["count"] += record.quantity or 1
        entry["revenue"] += record.income
    ranked = sorted(grouped.items(), key=lambda item: item[1]["revenue"], reverse=True)
    return [
        TopServiceItem(name=name, count=data["count"], revenue=billing.money(data["revenue"]))
        for name, data in ranked[:limit]
    ]


def recent_activity(records: list[ProcedureRecord], now: datetime | None = None) -> list[RecentActivityItem]:
    now = now or now_lima()
    items = []
    for record in records[:RECENT_ACTIVITY_LIMIT]:
        who = record.patient_name or record.procedure_name or "Servicio"
        description = (
            f"{record.procedure_name} - {who}" if record.procedure_name else f"Registro - {who}"
        )
        # Los registros solo tienen fecha; se toma el mediodía local
        moment = datetime.combine(record.record_date, time(12, 0), local_tz())
        items.append(
            RecentActivityItem(
                id=record.id,
                description=description,
                time=relative_time(moment, now),
                record_date=record.record_date,
            )
        )
    return items


async def get_dashboard(db: AsyncSession) -> DashboardData:
    today = today_lima()
    month_start, next_month = month_bounds(today)
    prev_month_start = month_start - relativedelta(months=1)

    month_records = await _records_between(db, month_start, next_month)
    prev_records = await _records_between(db, prev_month_start, month_start)
    monthly_revenue = sum((r.income for r in month_records), Decimal("0"))
    previous_revenue = sum((r.income for r in prev_records), Decimal("0"))

    total_patients = await db.scalar(select(func.count(Patient.id))) or 0
    new_patients = await _patients_created_between(db, month_start, next_month)
    prev_new_patients = await _patients_created_between(db, prev_month_start, month_start)

    active_services = await db.scalar(
        select(func.count(ProcedureCatalog.id)).where(ProcedureCatalog.is_active.is_(True))
    ) or 0

    appointments: list[Appointment] = await appointment_service.list_today(db, today)
    today_items = [
        TodayAppointmentItem(
            id=a.id,
            patient=a.patient_name,
            time=a.appointment_time,
            doctor=a.doctor_name,
            type=a.procedure_name or a.type.value,
            status=a.status,
            variant=a.variant,
        )
        for a in appointments
    ]

    recent = await db.execute(
        select(ProcedureRecord)
        .order_by(ProcedureRecord.record_date.desc(), ProcedureRecord.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
    )

    return DashboardData(
        stats=DashboardStats(
            total_patients=total_patients,
            patient_growth=growth(new_patients, prev_new_patients),
            appointments_today=len(today_items),
            monthly_revenue=billing.money(monthly_revenue),
            revenue_growth=growth(monthly_revenue, previous_revenue),
            active_services=active_services,
        ),
        today_appointments=today_items,
        top_services=top_services(month_records),
        recent_activity=recent_activity(list(recent.scalars().all())),
    )
