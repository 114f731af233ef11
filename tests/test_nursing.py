"""
Tests de registros de enfermería.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/nursing"
UNKNOWN = "00000000-0000-0000-0000-000000000000"


def _vital_sign(patient_id, moment: str, **extra) -> dict:
    payload = {
        "patient_id": str(patient_id),
        "assessment_datetime": moment,
        "nurse_name": "Carmen Díaz",
        "blood_pressure_systolic": "120",
        "blood_pressure_diastolic": "80",
        "heart_rate": 72,
        "spo2": 97,
        "temperature": "36.5",
    }
    payload.update(extra)
    return payload


@pytest.mark.asyncio
async def test_vital_signs_crud(client: AsyncClient, nurse_headers, test_patient):
    for moment in ("2025-07-10T08:00:00-05:00", "2025-07-12T08:00:00-05:00", "2025-07-11T20:00:00-05:00"):
        created = await client.post(
            f"{API}/vital-signs", json=_vital_sign(test_patient.id, moment), headers=nurse_headers
        )
        assert created.status_code == 201

    listing = await client.get(
        f"{API}/vital-signs", params={"patient_id": str(test_patient.id)}, headers=nurse_headers
    )
    days = [row["assessment_datetime"][:10] for row in listing.json()]
    assert days == ["2025-07-12", "2025-07-11", "2025-07-10"]

    limited = await client.get(
        f"{API}/vital-signs",
        params={"patient_id": str(test_patient.id), "limit": 2},
        headers=nurse_headers,
    )
    assert len(limited.json()) == 2

    entry_id = listing.json()[0]["id"]
    updated = await client.put(
        f"{API}/vital-signs/{entry_id}",
        json={"temperature": "38.2", "nurse_name": None, "observation": "Febril"},
        headers=nurse_headers,
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["temperature"]) == Decimal("38.2")
    assert updated.json()["nurse_name"] == "Carmen Díaz"

    deleted = await client.delete(f"{API}/vital-signs/{entry_id}", headers=nurse_headers)
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_vital_sign_validation(client: AsyncClient, nurse_headers, test_patient):
    out_of_range = await client.post(
        f"{API}/vital-signs",
        json=_vital_sign(test_patient.id, "2025-07-10T08:00:00-05:00", spo2=120),
        headers=nurse_headers,
    )
    assert out_of_range.status_code == 422

    unknown = await client.post(
        f"{API}/vital-signs",
        json=_vital_sign(UNKNOWN, "2025-07-10T08:00:00-05:00"),
        headers=nurse_headers,
    )
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_evolution_with_ordered_records(client: AsyncClient, nurse_headers, test_patient):
    created = await client.post(
        f"{API}/evolutions",
        json={
            "patient_id": str(test_patient.id),
            "evolution_date": "2025-07-10",
            "shift": "Mañana",
            "nurse_name": "Carmen Díaz",
            "pain_scale": 3,
            "records": [
                {"nanda_diagnosis": "Dolor agudo", "time": "2:00 PM", "record_order": 1},
                {"nanda_diagnosis": "Riesgo de caídas", "time": "08:30", "record_order": 0},
            ],
        },
        headers=nurse_headers,
    )

    assert created.status_code == 201
    data = created.json()
    assert data["patient_name"] == "María Quispe"
    assert [r["nanda_diagnosis"] for r in data["records"]] == ["Riesgo de caídas", "Dolor agudo"]
    assert [r["time"] for r in data["records"]] == ["08:30", "14:00"]

    added = await client.post(
        f"{API}/evolutions/{data['id']}/records",
        json={"nanda_diagnosis": "Deterioro de la movilidad", "record_order": 2},
        headers=nurse_headers,
    )
    assert added.status_code == 201

    record_id = data["records"][0]["id"]
    edited = await client.put(
        f"{API}/evolution-records/{record_id}",
        json={"evaluation": "Sin caídas en el turno"},
        headers=nurse_headers,
    )
    assert edited.json()["evaluation"] == "Sin caídas en el turno"

    removed = await client.delete(
        f"{API}/evolution-records/{data['records'][1]['id']}", headers=nurse_headers
    )
    assert removed.status_code == 204

    fetched = await client.get(f"{API}/evolutions/{data['id']}", headers=nurse_headers)
    assert [r["nanda_diagnosis"] for r in fetched.json()["records"]] == [
        "Riesgo de caídas", "Deterioro de la movilidad",
    ]


@pytest.mark.asyncio
async def test_evolution_pain_scale_range(client: AsyncClient, nurse_headers, test_patient):
    response = await client.post(
        f"{API}/evolutions",
        json={
            "patient_id": str(test_patient.id),
            "evolution_date": "2025-07-10",
            "nurse_name": "Carmen Díaz",
            "pain_scale": 11,
        },
        headers=nurse_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_and_delete_evolutions(client: AsyncClient, nurse_headers, test_patient):
    for day in ("2025-07-01", "2025-07-15"):
        await client.post(
            f"{API}/evolutions",
            json={
                "patient_id": str(test_patient.id),
                "evolution_date": day,
                "nurse_name": "Carmen Díaz",
                "records": [{"nanda_diagnosis": "Dolor agudo"}],
            },
            headers=nurse_headers,
        )

    listing = await client.get(
        f"{API}/evolutions", params={"patient_id": str(test_patient.id)}, headers=nurse_headers
    )
    assert [e["evolution_date"] for e in listing.json()] == ["2025-07-15", "2025-07-01"]

    evolution_id = listing.json()[0]["id"]
    deleted = await client.delete(f"{API}/evolutions/{evolution_id}", headers=nurse_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/evolutions/{evolution_id}", headers=nurse_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_latest_assessment(client: AsyncClient, nurse_headers, test_patient):
    params = {"patient_id": str(test_patient.id)}
    empty = await client.get(f"{API}/assessments/latest", params=params, headers=nurse_headers)
    assert empty.status_code == 200
    assert empty.json() is None

    for day, physician in (("2025-06-01", "Dr. Salas"), ("2025-07-01", "Dra. Vega")):
        created = await client.post(
            f"{API}/assessments",
            json={
                "patient_id": str(test_patient.id),
                "assessment_date": day,
                "nurse_name": "Carmen Díaz",
                "weight": "62.5",
                "attending_physician": physician,
                "vital_signs": {"heart_rate": 80, "vital_signs_time": "08:00"},
                "physical_exam": {"neurological": "Lúcida, orientada"},
            },
            headers=nurse_headers,
        )
        assert created.status_code == 201
        assert created.json()["patient_name"] == "María Quispe"

    latest = await client.get(f"{API}/assessments/latest", params=params, headers=nurse_headers)
    data = latest.json()
    assert data["attending_physician"] == "Dra. Vega"
    assert data["vital_signs"]["heart_rate"] == 80
    assert data["physical_exam"]["neurological"] == "Lúcida, orientada"

    updated = await client.put(
        f"{API}/assessments/{data['id']}",
        json={"pending_actions": "Control de glucosa"},
        headers=nurse_headers,
    )
    assert updated.json()["pending_actions"] == "Control de glucosa"


@pytest.mark.asyncio
async def test_elimination_by_date(client: AsyncClient, nurse_headers, test_patient):
    created = await client.post(
        f"{API}/eliminations",
        json={
            "patient_id": str(test_patient.id),
            "nurse_name": "Carmen Díaz",
            "record_date": "2025-07-10",
            "feces": {"morning": {"count": 1, "color": "marrón", "appearance": "pastosa"}},
            "urine": {
                "morning": {"count": 3, "color": "ámbar"},
                "night": {"count": 2, "odor": "normal"},
            },
        },
        headers=nurse_headers,
    )
    assert created.status_code == 201
    assert created.json()["patient_name"] == "María Quispe"

    found = await client.get(
        f"{API}/eliminations/by-date",
        params={"patient_id": str(test_patient.id), "day": "2025-07-10"},
        headers=nurse_headers,
    )
    data = found.json()
    assert data["id"] == created.json()["id"]
    assert data["feces"]["morning"]["appearance"] == "pastosa"
    assert data["urine"]["night"]["count"] == 2
    assert data["urine"]["afternoon"] is None

    other_day = await client.get(
        f"{API}/eliminations/by-date",
        params={"patient_id": str(test_patient.id), "day": "2025-07-11"},
        headers=nurse_headers,
    )
    assert other_day.json() is None

    updated = await client.put(
        f"{API}/eliminations/{data['id']}",
        json={"feces": {"afternoon": {"count": 2}}},
        headers=nurse_headers,
    )
    assert updated.json()["feces"]["afternoon"]["count"] == 2
    assert updated.json()["feces"]["morning"] is None


@pytest.mark.asyncio
async def test_nursing_history(client: AsyncClient, nurse_headers, test_patient):
    created = await client.post(
        f"{API}/history",
        json={
            "patient_id": str(test_patient.id),
            "entry_date": "2025-07-10",
            "entry_type": "Curación",
            "title": "Curación de escara sacra",
            "vital_signs": {"blood_pressure": "120/80", "heart_rate": 76},
            "attachments": ["foto-1.jpg"],
            "nurse_name": "Carmen Díaz",
        },
        headers=nurse_headers,
    )
    assert created.status_code == 201

    listing = await client.get(
        f"{API}/history", params={"patient_id": str(test_patient.id)}, headers=nurse_headers
    )
    assert len(listing.json()) == 1
    assert listing.json()[0]["vital_signs"]["blood_pressure"] == "120/80"
    assert listing.json()[0]["attachments"] == ["foto-1.jpg"]

    updated = await client.put(
        f"{API}/history/{created.json()['id']}",
        json={"title": None, "notes": "Buena evolución"},
        headers=nurse_headers,
    )
    assert updated.json()["title"] == "Curación de escara sacra"
    assert updated.json()["notes"] == "Buena evolución"


@pytest.mark.asyncio
async def test_unknown_patient_is_rejected(client: AsyncClient, nurse_headers):
    response = await client.post(
        f"{API}/eliminations",
        json={"patient_id": UNKNOWN, "nurse_name": "Carmen Díaz", "record_date": "2025-07-10"},
        headers=nurse_headers,
    )
    assert response.status_code == 404
