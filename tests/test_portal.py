"""
Tests del portal de pacientes: credenciales, login y consulta de resultados.
"""

import pytest
from httpx import AsyncClient

from hah_erp.models.user import UserRole

API = "/api/v1/portal"
LAB = "/api/v1/lab"

PDF_CONTENT = b"%PDF-1.4\n%%EOF\n"


async def _order(client: AsyncClient, headers: dict, patient_id) -> dict:
    exam = await client.post(
        f"{LAB}/exams", json={"code": "HEM01", "name": "Hemograma", "price": "25"}, headers=headers
    )
    order = await client.post(
        f"{LAB}/orders",
        json={"patient_id": str(patient_id), "exam_ids": [exam.json()["id"]]},
        headers=headers,
    )
    assert order.status_code == 201
    return order.json()


async def _portal_login(client: AsyncClient, headers: dict, patient) -> dict:
    account = await client.post(f"{API}/accounts/{patient.id}", headers=headers)
    assert account.status_code == 200
    credentials = account.json()
    login = await client.post(
        f"{API}/login", json={"dni": credentials["dni"], "password": credentials["password"]}
    )
    assert login.status_code == 200
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


@pytest.mark.asyncio
async def test_create_account_only_once(client: AsyncClient, auth_headers, test_patient):
    first = await client.post(f"{API}/accounts/{test_patient.id}", headers=auth_headers)
    assert first.status_code == 200
    data = first.json()
    assert data["dni"] == "45678912"
    assert len(data["password"]) == 8
    assert data["already_exists"] is False

    second = await client.post(f"{API}/accounts/{test_patient.id}", headers=auth_headers)
    assert second.json()["already_exists"] is True
    assert second.json()["password"] is None


@pytest.mark.asyncio
async def test_account_requires_dni(client: AsyncClient, auth_headers, db_session):
    from hah_erp.models.patient import Patient

    patient = Patient(name="Sin Documento")
    db_session.add(patient)
    await db_session.commit()

    response = await client.post(f"{API}/accounts/{patient.id}", headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_account_forbidden_for_nurse(client: AsyncClient, nurse_headers, test_patient):
    response = await client.post(f"{API}/accounts/{test_patient.id}", headers=nurse_headers)
    assert response.status_code == 403
    assert UserRole.NURSE.value in response.json()["detail"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, auth_headers, test_patient):
    await client.post(f"{API}/accounts/{test_patient.id}", headers=auth_headers)

    response = await client.post(f"{API}/login", json={"dni": "45678912", "password": "xxxx"})
    assert response.status_code == 401
    assert response.json()["detail"] == "DNI o contraseña incorrectos"


@pytest.mark.asyncio
async def test_profile_and_orders(client: AsyncClient, auth_headers, test_patient):
    order = await _order(client, auth_headers, test_patient.id)
    portal_headers = await _portal_login(client, auth_headers, test_patient)

    me = await client.get(f"{API}/me", headers=portal_headers)
    assert me.status_code == 200
    assert me.json()["name"] == "María Quispe"

    orders = await client.get(f"{API}/orders", headers=portal_headers)
    assert [o["id"] for o in orders.json()] == [order["id"]]
    assert orders.json()[0]["has_result"] is False
    assert orders.json()[0]["items"][0]["exam_code"] == "HEM01"

    no_result = await client.get(f"{API}/orders/{order['id']}/result-url", headers=portal_headers)
    assert no_result.status_code == 404


@pytest.mark.asyncio
async def test_result_download(client: AsyncClient, auth_headers, test_patient):
    order = await _order(client, auth_headers, test_patient.id)
    await client.post(
        f"{LAB}/orders/{order['id']}/result/upload",
        files={"file": ("resultado.pdf", PDF_CONTENT, "application/pdf")},
        headers=auth_headers,
    )
    portal_headers = await _portal_login(client, auth_headers, test_patient)

    detail = await client.get(f"{API}/orders/{order['id']}", headers=portal_headers)
    assert detail.json()["has_result"] is True
    assert detail.json()["status"] == "Completado"

    signed = await client.get(f"{API}/orders/{order['id']}/result-url", headers=portal_headers)
    assert signed.status_code == 200
    download = await client.get(signed.json()["url"])
    assert download.content == PDF_CONTENT


@pytest.mark.asyncio
async def test_other_patients_orders_are_hidden(client: AsyncClient, auth_headers, test_patient):
    other = await client.post(
        "/api/v1/patients", json={"name": "Otro Paciente", "dni": "11112222"}, headers=auth_headers
    )
    foreign_order = await _order(client, auth_headers, other.json()["id"])
    portal_headers = await _portal_login(client, auth_headers, test_patient)

    response = await client.get(f"{API}/orders/{foreign_order['id']}", headers=portal_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_token_rejected_by_portal(client: AsyncClient, auth_headers):
    response = await client.get(f"{API}/me", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_portal_token_rejected_by_staff_api(client: AsyncClient, auth_headers, test_patient):
    portal_headers = await _portal_login(client, auth_headers, test_patient)

    response = await client.get("/api/v1/patients", headers=portal_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_reset_password_by_order(client: AsyncClient, auth_headers, test_patient):
    order = await _order(client, auth_headers, test_patient.id)
    await client.post(f"{API}/accounts/{test_patient.id}", headers=auth_headers)

    reset = await client.post(f"{LAB}/orders/{order['id']}/portal-access", headers=auth_headers)
    assert reset.status_code == 200
    new_password = reset.json()["password"]

    login = await client.post(f"{API}/login", json={"dni": "45678912", "password": new_password})
    assert login.status_code == 200
