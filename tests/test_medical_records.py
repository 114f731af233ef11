"""
Tests de registros de citas médicas y su reporte.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/medical-records"


async def _appointment(client: AsyncClient, headers: dict, patient_id, **values) -> dict:
    payload = {
        "patient_id": str(patient_id),
        "doctor_name": "Dr. Salas",
        "appointment_date": "2025-07-14",
        "appointment_time": "10:00",
    }
    payload.update(values)
    response = await client.post("/api/v1/appointments", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


async def _record(client: AsyncClient, headers: dict, **values) -> dict:
    payload = {"record_date": "2025-07-10", "patient_name": "Visita", "doctor_name": "Dr. Salas"}
    payload.update(values)
    response = await client.post(API, json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_completing_appointment_creates_record_once(
    client: AsyncClient, auth_headers, test_patient
):
    appointment = await _appointment(client, auth_headers, test_patient.id, type="seguimiento")

    pending = await client.get(
        f"{API}/by-appointment/{appointment['id']}", headers=auth_headers
    )
    assert pending.status_code == 200
    assert pending.json() is None

    for status in ("completed", "confirmed", "completed"):
        await client.put(
            f"/api/v1/appointments/{appointment['id']}",
            json={"status": status},
            headers=auth_headers,
        )

    listing = await client.get(API, headers=auth_headers)
    assert listing.json()["total"] == 1
    record = listing.json()["items"][0]
    assert record["appointment_id"] == appointment["id"]
    assert record["patient_name"] == "María Quispe"
    assert record["appointment_type"] == "seguimiento"
    assert record["record_date"] == "2025-07-14"
    assert Decimal(record["income"]) == Decimal("0")
    assert Decimal(record["utility"]) == Decimal("0")


@pytest.mark.asyncio
async def test_create_from_appointment_is_idempotent(
    client: AsyncClient, auth_headers, test_patient
):
    appointment = await _appointment(client, auth_headers, test_patient.id)

    first = await client.post(
        f"{API}/from-appointment/{appointment['id']}", headers=auth_headers
    )
    second = await client.post(
        f"{API}/from-appointment/{appointment['id']}", headers=auth_headers
    )

    assert first.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    by_appointment = await client.get(
        f"{API}/by-appointment/{appointment['id']}", headers=auth_headers
    )
    assert by_appointment.json()["id"] == first.json()["id"]


@pytest.mark.asyncio
async def test_procedure_appointments_have_no_record(
    client: AsyncClient, auth_headers, test_patient
):
    appointment = await _appointment(
        client,
        auth_headers,
        test_patient.id,
        variant="procedimientos",
        procedure_name="Curación",
        status="completed",
    )

    response = await client.post(
        f"{API}/from-appointment/{appointment['id']}", headers=auth_headers
    )
    assert response.status_code == 404

    listing = await client.get(API, headers=auth_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_manual_record_conflicts_with_existing_appointment(
    client: AsyncClient, auth_headers, test_patient
):
    appointment = await _appointment(client, auth_headers, test_patient.id, status="completed")

    response = await client.post(
        API,
        json={"appointment_id": appointment["id"], "record_date": "2025-07-14"},
        headers=auth_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_amounts_computes_utility(client: AsyncClient, auth_headers, test_patient):
    record = await _record(client, auth_headers, patient_id=str(test_patient.id), patient_name=None)
    assert record["patient_name"] == "María Quispe"

    response = await client.put(
        f"{API}/{record['id']}",
        json={"income": "150.50", "cost": "40", "notes": "Pagó en efectivo"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["utility"]) == Decimal("110.50")
    assert data["notes"] == "Pagó en efectivo"

    negative = await client.put(f"{API}/{record['id']}", json={"cost": "-1"}, headers=auth_headers)
    assert negative.status_code == 422


@pytest.mark.asyncio
async def test_list_search_and_order(client: AsyncClient, auth_headers):
    await _record(client, auth_headers, record_date="2025-07-01", patient_name="Rosa Huamán")
    await _record(
        client, auth_headers, record_date="2025-07-20", patient_name="Luis Rojas",
        doctor_name="Dra. Vega",
    )
    await _record(
        client, auth_headers, record_date="2025-07-05", patient_name="Ana Paz",
        appointment_type="emergencia",
    )

    listing = await client.get(API, headers=auth_headers)
    assert [r["patient_name"] for r in listing.json()["items"]] == [
        "Luis Rojas", "Ana Paz", "Rosa Huamán",
    ]

    by_doctor = await client.get(API, params={"search": "VEGA"}, headers=auth_headers)
    assert [r["patient_name"] for r in by_doctor.json()["items"]] == ["Luis Rojas"]

    by_type = await client.get(API, params={"search": "emerg"}, headers=auth_headers)
    assert by_type.json()["total"] == 1

    ranged = await client.get(
        API, params={"date_from": "2025-07-02", "date_to": "2025-07-10"}, headers=auth_headers
    )
    assert [r["patient_name"] for r in ranged.json()["items"]] == ["Ana Paz"]


@pytest.mark.asyncio
async def test_delete_record(client: AsyncClient, auth_headers):
    record = await _record(client, auth_headers)

    deleted = await client.delete(f"{API}/{record['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/{record['id']}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_nurse_cannot_read_records(client: AsyncClient, nurse_headers):
    response = await client.get(API, headers=nurse_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_medical_appointments_report(client: AsyncClient, auth_headers):
    await _record(client, auth_headers, record_date="2025-07-03", income="120", cost="30")
    await _record(client, auth_headers, record_date="2025-07-25", income="80.50", cost="20")
    await _record(client, auth_headers, record_date="2025-08-01", income="500", cost="0")

    response = await client.get(
        "/api/v1/reports/medical-appointments",
        params={"date_from": "2025-07-01", "date_to": "2025-07-31"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert [row["record_date"] for row in data["rows"]] == ["2025-07-03", "2025-07-25"]
    assert data["totals"]["total_records"] == 2
    assert Decimal(data["totals"]["total_income"]) == Decimal("200.50")
    assert Decimal(data["totals"]["total_cost"]) == Decimal("50.00")
    assert Decimal(data["totals"]["total_utility"]) == Decimal("150.50")

    export = await client.get(
        "/api/v1/reports/medical-appointments/export",
        params={"date_from": "2025-07-01", "date_to": "2025-07-31", "format": "csv"},
        headers=auth_headers,
    )
    assert export.status_code == 200
    lines = export.content.decode("utf-8-sig").splitlines()
    assert lines[0] == "Fecha,Paciente,Tipo de cita,Médico,Ingreso,Costo,Utilidad"
    assert len(lines) == 3
