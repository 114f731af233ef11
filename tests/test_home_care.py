"""
Tests de cuidados en casa: planes, contratos y periodos quincenales.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/home-care"


async def _plan(client: AsyncClient, headers: dict, name="Plan 24x24", amount="7200") -> dict:
    response = await client.post(
        f"{API}/plans",
        json={"name": name, "shift": "24X24", "monthly_amount": amount},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def _contract(client: AsyncClient, headers: dict, patient_id, **extra) -> dict:
    payload = {"patient_id": str(patient_id), "start_date": "2025-07-01"}
    payload.update(extra)
    response = await client.post(f"{API}/contracts", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


# ── Planes ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_plans_sorted_by_amount(client: AsyncClient, auth_headers):
    await _plan(client, auth_headers, "Plan 24x24", "7200")
    cheap = await _plan(client, auth_headers, "Plan 12h día", "3600")

    response = await client.get(f"{API}/plans", headers=auth_headers)
    assert [p["name"] for p in response.json()] == ["Plan 12h día", "Plan 24x24"]

    await client.put(f"{API}/plans/{cheap['id']}", json={"is_active": False}, headers=auth_headers)
    active = await client.get(f"{API}/plans", headers=auth_headers)
    assert [p["name"] for p in active.json()] == ["Plan 24x24"]

    everything = await client.get(
        f"{API}/plans", params={"include_inactive": True}, headers=auth_headers
    )
    assert len(everything.json()) == 2


# ── Contratos ────────────────────────────────────────


@pytest.mark.asyncio
async def test_contract_copies_plan(client: AsyncClient, auth_headers, test_patient):
    plan = await _plan(client, auth_headers)
    contract = await _contract(
        client, auth_headers, test_patient.id, plan_id=plan["id"], start_time="7:00 PM"
    )

    assert contract["plan_name"] == "Plan 24x24"
    assert Decimal(contract["monthly_amount"]) == Decimal("7200.00")
    assert contract["patient"]["name"] == "María Quispe"
    assert contract["is_active"] is True

    by_patient = await client.get(
        f"{API}/contracts/patient/{test_patient.id}", headers=auth_headers
    )
    assert by_patient.json()["id"] == contract["id"]


@pytest.mark.asyncio
async def test_one_contract_per_patient(client: AsyncClient, auth_headers, test_patient):
    await _contract(client, auth_headers, test_patient.id)

    response = await client.post(
        f"{API}/contracts", json={"patient_id": str(test_patient.id)}, headers=auth_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_contract_invalid_start_time(client: AsyncClient, auth_headers, test_patient):
    response = await client.post(
        f"{API}/contracts",
        json={"patient_id": str(test_patient.id), "start_time": "25:00"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_and_deactivate_contract(client: AsyncClient, auth_headers, test_patient):
    contract = await _contract(client, auth_headers, test_patient.id, monthly_amount="6000")

    updated = await client.put(
        f"{API}/contracts/{contract['id']}",
        json={"responsible_family_member": "Rosa Quispe (hija)"},
        headers=auth_headers,
    )
    assert updated.json()["responsible_family_member"] == "Rosa Quispe (hija)"

    deactivated = await client.post(
        f"{API}/contracts/{contract['id']}/deactivate", headers=auth_headers
    )
    assert deactivated.json()["is_active"] is False

    active = await client.get(f"{API}/contracts", params={"is_active": True}, headers=auth_headers)
    assert active.json() == []


@pytest.mark.asyncio
async def test_contract_for_unknown_patient(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{API}/contracts",
        json={"patient_id": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers,
    )
    assert response.status_code == 404


# ── Periodos ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_period_computes_amounts(client: AsyncClient, auth_headers, test_patient):
    contract = await _contract(client, auth_headers, test_patient.id, monthly_amount="7200")

    response = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={
            "date_from": "2025-07-01",
            "holiday_dates": "28-29/07/2025",
            "pause_hours": "12 horas",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["item_number"] == 1
    assert data["date_to"] == "2025-07-15"
    assert data["holiday_dates"] == ["2025-07-28", "2025-07-29"]
    assert data["pause_hours"] == 12
    assert Decimal(data["base_amount"]) == Decimal("3600.00")
    assert Decimal(data["holiday_amount"]) == Decimal("480.00")
    # 3600 + 2 × 240 − 12 × 10
    assert Decimal(data["total_amount"]) == Decimal("3960.00")


@pytest.mark.asyncio
async def test_period_without_monthly_amount_uses_default(
    client: AsyncClient, auth_headers, test_patient
):
    contract = await _contract(client, auth_headers, test_patient.id)

    response = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={"date_from": "2025-07-01"},
        headers=auth_headers,
    )
    assert Decimal(response.json()["total_amount"]) == Decimal("2500.00")


@pytest.mark.asyncio
async def test_period_rejects_inverted_dates(client: AsyncClient, auth_headers, test_patient):
    contract = await _contract(client, auth_headers, test_patient.id)

    response = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={"date_from": "2025-07-15", "date_to": "2025-07-01"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_period_recomputes_and_summary(
    client: AsyncClient, auth_headers, test_patient
):
    contract = await _contract(client, auth_headers, test_patient.id, monthly_amount="7200")
    first = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={"date_from": "2025-07-01"},
        headers=auth_headers,
    )
    second = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={"date_from": "2025-07-16"},
        headers=auth_headers,
    )
    assert second.json()["item_number"] == 2

    updated = await client.put(
        f"{API}/periods/{first.json()['id']}",
        json={
            "holiday_dates": ["2025-07-06"],
            "paid_at": "2025-07-16",
            "payment_method": "YAPE",
        },
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["total_amount"]) == Decimal("3840.00")

    periods = await client.get(f"{API}/contracts/{contract['id']}/periods", headers=auth_headers)
    assert [p["item_number"] for p in periods.json()] == [1, 2]

    summary = await client.get(f"{API}/contracts/{contract['id']}/summary", headers=auth_headers)
    data = summary.json()
    assert data["period_count"] == 2
    assert Decimal(data["total_billed"]) == Decimal("7440.00")
    assert Decimal(data["total_paid"]) == Decimal("3840.00")
    assert Decimal(data["total_pending"]) == Decimal("3600.00")


@pytest.mark.asyncio
async def test_delete_period(client: AsyncClient, auth_headers, test_patient):
    contract = await _contract(client, auth_headers, test_patient.id)
    period = await client.post(
        f"{API}/contracts/{contract['id']}/periods",
        json={"date_from": "2025-07-01"},
        headers=auth_headers,
    )

    response = await client.delete(f"{API}/periods/{period.json()['id']}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"{API}/periods/{period.json()['id']}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_preview_billing(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{API}/periods/preview",
        json={"monthly_amount": "6000", "holiday_dates": "08 Y 09/12/2025", "pause_hours": 6},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["holiday_count"] == 2
    assert Decimal(data["per_day"]) == Decimal("200.00")
    # 3000 + 400 − 6 × 8.33…
    assert Decimal(data["total_amount"]) == Decimal("3350.00")
