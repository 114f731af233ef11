"""
Tests del CRUD de pacientes, búsquedas y exportación.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from hah_erp.models.lab import LabOrder

API = "/api/v1/patients"


@pytest.mark.asyncio
async def test_create_patient(client: AsyncClient, auth_headers):
    response = await client.post(
        API,
        json={
            "name": "  Juan Pérez ",
            "dni": "12345678",
            "phone": "999888777",
            "age": 80,
            "gender": "M",
            "district": "Surco",
            "blood_type": "O+",
            "allergies": ["Penicilina"],
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Juan Pérez"
    assert data["status"] == "Activo"
    assert data["allergies"] == ["Penicilina"]


@pytest.mark.asyncio
async def test_create_patient_duplicate_dni(client: AsyncClient, auth_headers, test_patient):
    response = await client.post(
        API, json={"name": "Otra Persona", "dni": test_patient.dni}, headers=auth_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_patient_invalid_blood_type(client: AsyncClient, auth_headers):
    response = await client.post(
        API, json={"name": "Ana Torres", "blood_type": "C+"}, headers=auth_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_patients_with_filters(client: AsyncClient, auth_headers, test_patient):
    await client.post(
        API, json={"name": "Pedro Rojas", "gender": "M", "district": "Surco"}, headers=auth_headers
    )

    response = await client.get(API, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2

    filtered = await client.get(API, params={"gender": "F"}, headers=auth_headers)
    items = filtered.json()["items"]
    assert [p["name"] for p in items] == ["María Quispe"]

    by_district = await client.get(API, params={"district": "surco"}, headers=auth_headers)
    assert by_district.json()["total"] == 1

    ordered = await client.get(
        API, params={"sort_by": "name", "sort_order": "asc"}, headers=auth_headers
    )
    assert [p["name"] for p in ordered.json()["items"]] == ["María Quispe", "Pedro Rojas"]


@pytest.mark.asyncio
async def test_search_and_districts(client: AsyncClient, auth_headers, test_patient):
    search = await client.get(f"{API}/search", params={"q": "quispe"}, headers=auth_headers)
    assert search.status_code == 200
    assert search.json()[0]["id"] == str(test_patient.id)

    by_dni = await client.get(f"{API}/search", params={"q": "456789"}, headers=auth_headers)
    assert len(by_dni.json()) == 1

    districts = await client.get(f"{API}/districts", headers=auth_headers)
    assert districts.json() == ["Miraflores"]


@pytest.mark.asyncio
async def test_patient_stats(client: AsyncClient, auth_headers, test_patient):
    response = await client.get(f"{API}/stats", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["female"] == 1
    assert data["male"] == 0
    assert data["active"] == 1


@pytest.mark.asyncio
async def test_get_update_patient(client: AsyncClient, auth_headers, test_patient):
    response = await client.get(f"{API}/{test_patient.id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["dni"] == "45678912"

    updated = await client.put(
        f"{API}/{test_patient.id}",
        json={"status": "Inactivo", "phone": "911222333"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "Inactivo"
    assert updated.json()["phone"] == "911222333"


@pytest.mark.asyncio
async def test_get_patient_not_found(client: AsyncClient, auth_headers):
    response = await client.get(
        f"{API}/00000000-0000-0000-0000-000000000000", headers=auth_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient, auth_headers, test_patient):
    response = await client.get(f"{API}/export", params={"format": "csv"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    text = response.content.decode("utf-8-sig")
    header, first_row = text.splitlines()[:2]
    assert header.startswith("ID,Nombre,DNI")
    assert "María Quispe" in first_row


@pytest.mark.asyncio
async def test_export_json(client: AsyncClient, auth_headers, test_patient):
    response = await client.get(f"{API}/export", params={"format": "json"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()[0]["name"] == "María Quispe"


@pytest.mark.asyncio
async def test_export_forbidden_for_nurse(client: AsyncClient, nurse_headers):
    response = await client.get(f"{API}/export", headers=nurse_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_patient(client: AsyncClient, auth_headers, test_patient):
    response = await client.delete(f"{API}/{test_patient.id}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"{API}/{test_patient.id}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_patient_with_lab_orders(
    client: AsyncClient, auth_headers, test_patient, db_session
):
    db_session.add(LabOrder(patient_id=test_patient.id, order_date=date.today()))
    await db_session.commit()

    response = await client.delete(f"{API}/{test_patient.id}", headers=auth_headers)
    assert response.status_code == 409
    assert "órdenes de laboratorio" in response.json()["detail"]
