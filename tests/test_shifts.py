"""
Tests de turnos eventuales de cuidado.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/shifts"


async def _shift(client: AsyncClient, headers: dict, **values) -> dict:
    payload = {
        "shift_date": "2025-07-10",
        "start_time": "8:00 PM",
        "district": "San Borja",
        "shift": "12h noche",
        "amount_due": "180",
        "nurse": "Carmen Díaz",
    }
    payload.update(values)
    response = await client.post(API, json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_shift_with_patient(client: AsyncClient, auth_headers, test_patient):
    data = await _shift(client, auth_headers, patient_id=str(test_patient.id), utility="60")

    assert data["start_time"] == "20:00"
    assert data["patient"]["name"] == "María Quispe"
    assert Decimal(data["amount_due"]) == Decimal("180.00")
    assert Decimal(data["utility"]) == Decimal("60.00")


@pytest.mark.asyncio
async def test_create_shift_unknown_patient(client: AsyncClient, auth_headers):
    response = await client.post(
        API,
        json={"shift_date": "2025-07-10", "patient_id": "00000000-0000-0000-0000-000000000000"},
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_order_and_filters(client: AsyncClient, auth_headers):
    await _shift(client, auth_headers, shift_date="2025-07-10", start_time="20:00")
    await _shift(client, auth_headers, shift_date="2025-07-10", start_time="08:00", nurse="Lucía Ramos")
    await _shift(client, auth_headers, shift_date="2025-07-12", district="Surco")

    response = await client.get(API, headers=auth_headers)
    items = response.json()["items"]
    assert [(s["shift_date"], s["start_time"]) for s in items] == [
        ("2025-07-12", "20:00"),
        ("2025-07-10", "08:00"),
        ("2025-07-10", "20:00"),
    ]

    by_nurse = await client.get(API, params={"nurse": "lucía"}, headers=auth_headers)
    assert by_nurse.json()["total"] == 1

    by_district = await client.get(API, params={"district": "Surco"}, headers=auth_headers)
    assert by_district.json()["total"] == 1

    by_range = await client.get(
        API, params={"date_from": "2025-07-11", "date_to": "2025-07-31"}, headers=auth_headers
    )
    assert by_range.json()["total"] == 1


@pytest.mark.asyncio
async def test_update_and_delete_shift(client: AsyncClient, nurse_headers, auth_headers):
    shift = await _shift(client, nurse_headers)

    updated = await client.put(
        f"{API}/{shift['id']}",
        json={"payment_method": "YAPE", "operation_number": "00123"},
        headers=nurse_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["payment_method"] == "YAPE"

    forbidden = await client.delete(f"{API}/{shift['id']}", headers=nurse_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"{API}/{shift['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/{shift['id']}", headers=auth_headers)
    assert missing.status_code == 404
