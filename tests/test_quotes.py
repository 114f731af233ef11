"""
Tests de cotizaciones de servicios.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from hah_erp.core.timeutils import today_lima

API = "/api/v1/quotes"

ITEMS = [
    {"name": "Visita de enfermería", "unit_price": "80", "quantity": 3},
    {"name": "Curación avanzada", "unit_price": "150.50", "quantity": 1},
]


@pytest.mark.asyncio
async def test_create_quote_defaults(client: AsyncClient, auth_headers, test_patient):
    response = await client.post(
        API,
        json={"patient_id": str(test_patient.id), "doctor_name": "Dr. Salas", "items": ITEMS},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["patient_name"] == "María Quispe"
    assert data["patient_email"] == "maria@test.com"
    assert data["status"] == "draft"
    assert Decimal(data["total_amount"]) == Decimal("390.50")
    assert data["valid_until"] == (today_lima() + timedelta(days=30)).isoformat()
    assert data["is_expired"] is False
    assert [item["sort_order"] for item in data["items"]] == [0, 1]


@pytest.mark.asyncio
async def test_create_quote_requires_patient_name(client: AsyncClient, auth_headers):
    response = await client.post(API, json={"items": ITEMS}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_quote_requires_items(client: AsyncClient, auth_headers):
    response = await client.post(
        API, json={"patient_name": "Sin líneas", "items": []}, headers=auth_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_past_validity_is_reported_expired(client: AsyncClient, auth_headers):
    yesterday = (today_lima() - timedelta(days=1)).isoformat()
    created = await client.post(
        API,
        json={"patient_name": "Juan Pérez", "items": ITEMS, "valid_until": yesterday},
        headers=auth_headers,
    )
    assert created.json()["is_expired"] is True

    accepted = await client.patch(
        f"{API}/{created.json()['id']}/status", json={"status": "accepted"}, headers=auth_headers
    )
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["is_expired"] is False


@pytest.mark.asyncio
async def test_update_replaces_items(client: AsyncClient, auth_headers):
    created = await client.post(
        API, json={"patient_name": "Juan Pérez", "items": ITEMS}, headers=auth_headers
    )

    response = await client.put(
        f"{API}/{created.json()['id']}",
        json={"items": [{"name": "Inyectable", "unit_price": "25", "quantity": 2}]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert [item["name"] for item in data["items"]] == ["Inyectable"]
    assert Decimal(data["total_amount"]) == Decimal("50.00")


@pytest.mark.asyncio
async def test_list_stats_and_delete(client: AsyncClient, auth_headers):
    first = await client.post(
        API, json={"patient_name": "Juan Pérez", "items": ITEMS}, headers=auth_headers
    )
    await client.post(
        API,
        json={"patient_name": "Ana Torres", "doctor_name": "Dra. Ríos", "items": ITEMS},
        headers=auth_headers,
    )
    await client.patch(
        f"{API}/{first.json()['id']}/status", json={"status": "accepted"}, headers=auth_headers
    )

    drafts = await client.get(API, params={"status": "draft"}, headers=auth_headers)
    assert [q["patient_name"] for q in drafts.json()["items"]] == ["Ana Torres"]

    searched = await client.get(API, params={"search": "juan"}, headers=auth_headers)
    assert searched.json()["total"] == 1

    stats = await client.get(f"{API}/stats", headers=auth_headers)
    data = stats.json()
    assert data["total"] == 2
    assert data["draft"] == 1
    assert data["accepted"] == 1
    assert Decimal(data["accepted_value"]) == Decimal("390.50")

    deleted = await client.delete(f"{API}/{first.json()['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/{first.json()['id']}", headers=auth_headers)
    assert missing.status_code == 404
