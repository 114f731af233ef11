"""
Tests de las agendas de citas (medicina y procedimientos).
"""

import pytest
from httpx import AsyncClient

from hah_erp.core.timeutils import today_lima

API = "/api/v1/appointments"


@pytest.mark.asyncio
async def test_create_from_patient_fills_snapshot(client: AsyncClient, auth_headers, test_patient):
    response = await client.post(
        API,
        json={
            "patient_id": str(test_patient.id),
            "doctor_name": "Dr. Salas",
            "appointment_date": "2025-08-04",
            "appointment_time": "3:30 PM",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["patient_name"] == "María Quispe"
    assert data["patient_phone"] == "987654321"
    assert data["appointment_time"] == "15:30"
    assert data["variant"] == "medicina"
    assert data["status"] == "scheduled"


@pytest.mark.asyncio
async def test_create_requires_patient_name(client: AsyncClient, auth_headers):
    response = await client.post(
        API,
        json={"appointment_date": "2025-08-04", "appointment_time": "09:00"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_rejects_invalid_time(client: AsyncClient, auth_headers):
    response = await client.post(
        API,
        json={
            "patient_name": "Visita",
            "appointment_date": "2025-08-04",
            "appointment_time": "13:00 PM",
        },
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_is_split_by_variant(client: AsyncClient, auth_headers):
    for variant, name in (("medicina", "Consulta A"), ("procedimientos", "Curación B")):
        await client.post(
            API,
            json={
                "variant": variant,
                "patient_name": name,
                "appointment_date": "2025-08-05",
                "appointment_time": "10:00",
            },
            headers=auth_headers,
        )

    medicina = await client.get(API, headers=auth_headers)
    assert [a["patient_name"] for a in medicina.json()["items"]] == ["Consulta A"]

    procedimientos = await client.get(
        API, params={"variant": "procedimientos"}, headers=auth_headers
    )
    assert [a["patient_name"] for a in procedimientos.json()["items"]] == ["Curación B"]


@pytest.mark.asyncio
async def test_today_and_status_update(client: AsyncClient, auth_headers):
    today = today_lima().isoformat()
    late = await client.post(
        API,
        json={"patient_name": "Tarde", "appointment_date": today, "appointment_time": "16:00"},
        headers=auth_headers,
    )
    await client.post(
        API,
        json={
            "variant": "procedimientos",
            "patient_name": "Temprano",
            "appointment_date": today,
            "appointment_time": "8:00 AM",
        },
        headers=auth_headers,
    )

    response = await client.get(f"{API}/today", headers=auth_headers)
    assert [a["patient_name"] for a in response.json()] == ["Temprano", "Tarde"]

    updated = await client.put(
        f"{API}/{late.json()['id']}", json={"status": "confirmed"}, headers=auth_headers
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "confirmed"


@pytest.mark.asyncio
async def test_delete_appointment(client: AsyncClient, auth_headers):
    created = await client.post(
        API,
        json={"patient_name": "Borrar", "appointment_date": "2025-08-06", "appointment_time": "11:00"},
        headers=auth_headers,
    )
    appointment_id = created.json()["id"]

    response = await client.delete(f"{API}/{appointment_id}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"{API}/{appointment_id}", headers=auth_headers)
    assert missing.status_code == 404
