"""
Tests del dashboard principal.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

from hah_erp.core.timeutils import today_lima
from hah_erp.models.procedure_record import ProcedureRecord
from hah_erp.services.dashboard_service import growth, recent_activity

API = "/api/v1/dashboard"


def test_growth():
    assert growth(110, 100) == 10.0
    assert growth(Decimal("50"), Decimal("200")) == -75.0
    assert growth(5, 0) == 0.0
    assert growth(5, None) == 0.0


@pytest.mark.asyncio
async def test_empty_dashboard(client: AsyncClient, auth_headers):
    response = await client.get(API, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["total_patients"] == 0
    assert data["stats"]["appointments_today"] == 0
    assert Decimal(data["stats"]["monthly_revenue"]) == Decimal("0")
    assert data["today_appointments"] == []
    assert data["top_services"] == []
    assert data["recent_activity"] == []


@pytest.mark.asyncio
async def test_dashboard_metrics(client: AsyncClient, auth_headers, test_patient):
    today = today_lima().isoformat()
    for time_value in ("11:00", "8:30 AM"):
        await client.post(
            "/api/v1/appointments",
            json={
                "patient_id": str(test_patient.id),
                "appointment_date": today,
                "appointment_time": time_value,
            },
            headers=auth_headers,
        )

    catalog = await client.post(
        "/api/v1/procedures/catalog",
        json={"name": "Inyectable", "base_price": "50"},
        headers=auth_headers,
    )
    for procedure, cash in (("Curación", "150"), ("Inyectable", "50"), ("Inyectable", "40")):
        await client.post(
            "/api/v1/procedures/records",
            json={
                "record_date": today,
                "patient_id": str(test_patient.id),
                "procedure_name": procedure,
                "cash": cash,
            },
            headers=auth_headers,
        )

    response = await client.get(API, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    stats = data["stats"]
    assert stats["total_patients"] == 1
    assert stats["appointments_today"] == 2
    assert stats["active_services"] == 1
    assert Decimal(stats["monthly_revenue"]) == Decimal("240.00")

    assert [a["time"] for a in data["today_appointments"]] == ["08:30", "11:00"]
    assert data["today_appointments"][0]["patient"] == "María Quispe"

    top = data["top_services"]
    assert [(s["name"], s["count"]) for s in top] == [("Curación", 1), ("Inyectable", 2)]
    assert Decimal(top[1]["revenue"]) == Decimal("90.00")

    assert len(data["recent_activity"]) == 3
    assert data["recent_activity"][0]["description"].endswith("María Quispe")
    assert catalog.status_code == 201


@pytest.mark.asyncio
async def test_dashboard_requires_auth(client: AsyncClient):
    response = await client.get(API)
    assert response.status_code in (401, 403)


def test_relative_activity_time():
    record = ProcedureRecord(
        id=uuid4(),
        record_date=today_lima() - timedelta(days=3),
        procedure_name="Curación",
        patient_name="Juan Pérez",
        quantity=1,
        cash=Decimal("100"),
    )
    now = datetime.now(timezone.utc)

    items = recent_activity([record], now)
    assert items[0].description == "Curación - Juan Pérez"
    assert items[0].time.startswith("Hace ")
