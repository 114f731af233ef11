"""
Schemas del dashboard principal.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from hah_erp.models.appointment import AppointmentStatus, AppointmentVariant


class DashboardStats(BaseModel):
    total_patients: int
    patient_growth: float
    appointments_today: int
    monthly_revenue: Decimal
    revenue_growth: float
    active_services: int


class TodayAppointmentItem(BaseModel):
    id: UUID
    patient: str
    time: str
    doctor: str | None = None
    type: str
    status: AppointmentStatus
    variant: AppointmentVariant


class TopServiceItem(BaseModel):
    name: str
    count: int
    revenue: Decimal


class RecentActivityItem(BaseModel):
    id: UUID
    type: str = "procedimiento"
    description: str
    time: str
    record_date: date


class DashboardData(BaseModel):
    stats: DashboardStats
    today_appointments: list[TodayAppointmentItem]
    top_services: list[TopServiceItem]
    recent_activity: list[RecentActivityItem]
