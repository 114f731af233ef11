"""
Tests del historial clínico y de exámenes del paciente.
"""

import pytest
from httpx import AsyncClient

API = "/api/v1/history"


@pytest.mark.asyncio
async def test_patient_history_crud(client: AsyncClient, auth_headers, test_patient):
    for day, title in (("2025-05-02", "Alta hospitalaria"), ("2025-07-01", "Control mensual")):
        created = await client.post(
            f"{API}/patient",
            json={
                "patient_id": str(test_patient.id),
                "entry_date": day,
                "entry_type": "Consulta",
                "title": title,
            },
            headers=auth_headers,
        )
        assert created.status_code == 201

    listing = await client.get(
        f"{API}/patient", params={"patient_id": str(test_patient.id)}, headers=auth_headers
    )
    assert [e["title"] for e in listing.json()] == ["Control mensual", "Alta hospitalaria"]
    assert listing.json()[0]["attachments"] == []

    entry_id = listing.json()[0]["id"]
    updated = await client.put(
        f"{API}/patient/{entry_id}",
        json={"notes": "Presión controlada", "attachments": ["receta.pdf"]},
        headers=auth_headers,
    )
    assert updated.json()["notes"] == "Presión controlada"
    assert updated.json()["attachments"] == ["receta.pdf"]

    deleted = await client.delete(f"{API}/patient/{entry_id}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.put(f"{API}/patient/{entry_id}", json={}, headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_exam_history_defaults_to_pending(client: AsyncClient, auth_headers, test_patient):
    created = await client.post(
        f"{API}/exams",
        json={
            "patient_id": str(test_patient.id),
            "exam_date": "2025-07-03",
            "exam_type": "Laboratorio",
            "exam_name": "Hemograma completo",
            "ordered_by": "Dr. Salas",
        },
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["status"] == "Pendiente"

    completed = await client.put(
        f"{API}/exams/{created.json()['id']}",
        json={"status": "Completado", "results": "Dentro de rangos normales"},
        headers=auth_headers,
    )
    assert completed.json()["status"] == "Completado"

    invalid = await client.put(
        f"{API}/exams/{created.json()['id']}", json={"status": "Perdido"}, headers=auth_headers
    )
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_history_unknown_patient(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{API}/exams",
        json={
            "patient_id": "00000000-0000-0000-0000-000000000000",
            "exam_date": "2025-07-03",
            "exam_type": "Imagen",
            "exam_name": "Radiografía de tórax",
        },
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_nurse_writes_but_cannot_delete(client: AsyncClient, nurse_headers, test_patient):
    created = await client.post(
        f"{API}/exams",
        json={
            "patient_id": str(test_patient.id),
            "exam_date": "2025-07-03",
            "exam_type": "Laboratorio",
            "exam_name": "Glucosa",
        },
        headers=nurse_headers,
    )
    assert created.status_code == 201

    listing = await client.get(
        f"{API}/exams", params={"patient_id": str(test_patient.id)}, headers=nurse_headers
    )
    assert len(listing.json()) == 1

    deleted = await client.delete(f"{API}/exams/{created.json()['id']}", headers=nurse_headers)
    assert deleted.status_code == 403
