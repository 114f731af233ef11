"""
Tests del módulo de personal.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from hah_erp.core.timeutils import today_lima

API = "/api/v1/staff"


def _staff(name: str, **extra) -> dict:
    payload = {
        "name": name,
        "position": "Técnico en Enfermería",
        "department": "Enfermería",
        "gender": "F",
        "salary": "1800.00",
    }
    payload.update(extra)
    return payload


@pytest.mark.asyncio
async def test_staff_crud(client: AsyncClient, auth_headers):
    created = await client.post(API, json=_staff("Carmen Díaz"), headers=auth_headers)
    assert created.status_code == 201
    staff_id = created.json()["id"]
    assert created.json()["status"] == "Activo"

    updated = await client.put(
        f"{API}/{staff_id}", json={"status": "Vacaciones"}, headers=auth_headers
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "Vacaciones"

    deleted = await client.delete(f"{API}/{staff_id}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/{staff_id}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_create_staff_requires_position(client: AsyncClient, auth_headers):
    response = await client.post(
        API, json={"name": "Sin Cargo", "department": "Enfermería"}, headers=auth_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_filters_match_legacy_names(client: AsyncClient, auth_headers):
    await client.post(API, json=_staff("Carmen Díaz"), headers=auth_headers)
    await client.post(
        API,
        json=_staff("Lucía Ramos", department="Nursing", position="Tecnico en Enfermeria"),
        headers=auth_headers,
    )
    await client.post(
        API,
        json=_staff("Jorge Vega", department="Administración", position="Contador", gender="M"),
        headers=auth_headers,
    )

    by_department = await client.get(
        API, params={"department": "Enfermeria"}, headers=auth_headers
    )
    assert by_department.json()["total"] == 2

    by_position = await client.get(
        API, params={"position": "Técnico en Enfermería"}, headers=auth_headers
    )
    assert by_position.json()["total"] == 2

    searched = await client.get(API, params={"search": "contador"}, headers=auth_headers)
    assert [s["name"] for s in searched.json()["items"]] == ["Jorge Vega"]


@pytest.mark.asyncio
async def test_list_default_page_size(client: AsyncClient, auth_headers):
    for index in range(12):
        await client.post(API, json=_staff(f"Persona {index:02d}"), headers=auth_headers)

    response = await client.get(API, headers=auth_headers)
    data = response.json()
    assert data["size"] == 10
    assert len(data["items"]) == 10
    assert data["total"] == 12
    assert data["has_next"] is True


@pytest.mark.asyncio
async def test_stats_and_hired_lists(client: AsyncClient, auth_headers):
    today = today_lima()
    await client.post(
        API, json=_staff("Nueva Ingreso", hire_date=today.isoformat()), headers=auth_headers
    )
    await client.post(
        API,
        json=_staff("Antigua", hire_date=(today - timedelta(days=800)).isoformat(), gender="M"),
        headers=auth_headers,
    )

    stats = await client.get(f"{API}/stats", headers=auth_headers)
    assert stats.status_code == 200
    data = stats.json()
    assert data["total"] == 2
    assert data["male"] == 1
    assert data["female"] == 1
    assert data["hired_this_month"] == 1
    assert data["hired_this_year"] == 1

    month = await client.get(f"{API}/hired/month", headers=auth_headers)
    assert [s["name"] for s in month.json()] == ["Nueva Ingreso"]

    year = await client.get(f"{API}/hired/year", headers=auth_headers)
    assert len(year.json()) == 1


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient, auth_headers):
    await client.post(API, json=_staff("Carmen Díaz"), headers=auth_headers)

    response = await client.get(f"{API}/export", params={"format": "csv"}, headers=auth_headers)
    assert response.status_code == 200
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("ID,Nombre,Email")
    assert "Carmen Díaz" in lines[1]


@pytest.mark.asyncio
async def test_staff_hidden_from_nurse(client: AsyncClient, nurse_headers):
    response = await client.get(API, headers=nurse_headers)
    assert response.status_code == 403


async def _doctor_appointment(client: AsyncClient, headers: dict, doctor: str, day: str, **extra) -> None:
    payload = {
        "patient_name": "Rosa Huamán",
        "doctor_name": doctor,
        "appointment_date": day,
        "appointment_time": "10:00",
    }
    payload.update(extra)
    response = await client.post("/api/v1/appointments", json=payload, headers=headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_staff_activity_feed(client: AsyncClient, auth_headers, test_patient):
    staff = await client.post(API, json=_staff("Ana Torres"), headers=auth_headers)
    staff_id = staff.json()["id"]

    await _doctor_appointment(client, auth_headers, "Lic. Ana Torres", "2025-07-14")
    await _doctor_appointment(client, auth_headers, "Dr. Salas", "2025-07-20")
    shift = await client.post(
        "/api/v1/shifts",
        json={
            "shift_date": "2025-07-15",
            "start_time": "8:00 PM",
            "nurse": " ana torres ",
            "patient_id": str(test_patient.id),
        },
        headers=auth_headers,
    )
    assert shift.status_code == 201
    await client.post(
        "/api/v1/nursing/vital-signs",
        json={
            "patient_id": str(test_patient.id),
            "assessment_datetime": "2025-07-13T09:00:00",
            "nurse_name": "Ana Torres",
        },
        headers=auth_headers,
    )
    await client.post(
        "/api/v1/nursing/evolutions",
        json={
            "patient_id": str(test_patient.id),
            "evolution_date": "2025-07-16",
            "nurse_name": "Lic. Ana Torres",
        },
        headers=auth_headers,
    )

    response = await client.get(f"{API}/{staff_id}/activity", headers=auth_headers)

    assert response.status_code == 200
    items = response.json()
    assert [item["id"].split("-")[0] for item in items] == ["evol", "shift", "med", "vs"]
    assert [item["date"] for item in items] == [
        "2025-07-16", "2025-07-15", "2025-07-14", "2025-07-13",
    ]
    assert items[1]["description"] == "Turno - María Quispe"
    assert items[1]["time"] == "20:00"
    assert items[2]["description"] == "Cita con Rosa Huamán"


@pytest.mark.asyncio
async def test_staff_activity_is_capped(client: AsyncClient, auth_headers):
    staff = await client.post(API, json=_staff("Ana Torres"), headers=auth_headers)

    for day in range(1, 17):
        await _doctor_appointment(client, auth_headers, "Ana Torres", f"2025-07-{day:02d}")
        await _doctor_appointment(
            client, auth_headers, "Ana Torres", f"2025-08-{day:02d}",
            variant="procedimientos", procedure_name="Curación",
        )
    await client.post(
        "/api/v1/shifts",
        json={"shift_date": "2025-09-01", "start_time": "08:00", "nurse": "Ana Torres"},
        headers=auth_headers,
    )

    response = await client.get(f"{API}/{staff.json()['id']}/activity", headers=auth_headers)

    items = response.json()
    assert len(items) == 30
    assert items[0]["type"] == "turno_cuidado"
    assert items[1] == {
        "id": items[1]["id"],
        "type": "cita_procedimiento",
        "type_label": "Cita procedimiento",
        "description": "Curación - Rosa Huamán",
        "date": "2025-08-16",
        "time": "10:00",
        "extra": None,
    }
    assert sum(item["type"] == "cita_medicina" for item in items) == 14


@pytest.mark.asyncio
async def test_activity_of_unknown_staff(client: AsyncClient, auth_headers):
    response = await client.get(
        f"{API}/00000000-0000-0000-0000-000000000000/activity", headers=auth_headers
    )
    assert response.status_code == 404
