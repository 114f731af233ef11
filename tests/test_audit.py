"""
Tests del audit log.
"""

import pytest
from httpx import AsyncClient

API = "/api/v1/audit-logs"


@pytest.mark.asyncio
async def test_patient_changes_are_logged(client: AsyncClient, auth_headers, test_user):
    created = await client.post(
        "/api/v1/patients", json={"name": "Juan Pérez", "dni": "12345678"}, headers=auth_headers
    )
    patient_id = created.json()["id"]
    await client.delete(f"/api/v1/patients/{patient_id}", headers=auth_headers)

    response = await client.get(API, params={"entity": "patient"}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {entry["action"] for entry in data["items"]} == {"create", "delete"}
    assert all(entry["entity_id"] == patient_id for entry in data["items"])
    assert all(entry["user_id"] == str(test_user.id) for entry in data["items"])

    created_entry = next(e for e in data["items"] if e["action"] == "create")
    assert created_entry["new_data"]["dni"] == "12345678"


@pytest.mark.asyncio
async def test_login_is_logged(client: AsyncClient, auth_headers, test_user):
    await client.post(
        "/api/v1/auth/login", json={"email": "admin@test.com", "password": "TestPass123"}
    )

    response = await client.get(API, params={"action": "login"}, headers=auth_headers)

    items = response.json()["items"]
    assert len(items) == 1
    assert items[0]["entity"] == "user"
    assert items[0]["entity_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_search_and_pagination(client: AsyncClient, auth_headers):
    for dni in ("10000001", "10000002", "10000003"):
        await client.post(
            "/api/v1/patients", json={"name": f"Paciente {dni}", "dni": dni}, headers=auth_headers
        )

    response = await client.get(
        API, params={"search": "patient", "size": 2}, headers=auth_headers
    )

    data = response.json()
    assert data["total"] == 3
    assert len(data["items"]) == 2
    assert data["has_next"] is True


@pytest.mark.asyncio
async def test_audit_forbidden_for_nurse(client: AsyncClient, nurse_headers):
    response = await client.get(API, headers=nurse_headers)
    assert response.status_code == 403
