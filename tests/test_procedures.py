"""
Tests del catálogo de procedimientos y de los registros diarios.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/procedures"

CURACION = {
    "name": "Curación de herida",
    "base_price": "150.00",
    "professional_fees": "60.00",
    "mobility_cost": "20.00",
    "materials": [
        {"name": "Gasas", "quantity": "4", "unit_cost": "0.50"},
        {"name": "Suero fisiológico", "quantity": "1", "unit_cost": "12.00"},
        {"name": "Gasas", "quantity": "2", "unit_cost": "0.50"},
    ],
}


async def _create_catalog(client: AsyncClient, headers: dict) -> dict:
    response = await client.post(f"{API}/catalog", json=CURACION, headers=headers)
    assert response.status_code == 201
    return response.json()


# ── Catálogo ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_catalog_computes_totals(client: AsyncClient, auth_headers):
    data = await _create_catalog(client, auth_headers)

    assert Decimal(data["total_cost"]) == Decimal("95.00")
    assert Decimal(data["utility"]) == Decimal("55.00")
    assert [m["material_name"] for m in data["materials"]] == ["Gasas", "Suero fisiológico"]
    assert Decimal(data["materials"][0]["quantity"]) == Decimal("6")


@pytest.mark.asyncio
async def test_preview_does_not_persist(client: AsyncClient, auth_headers):
    response = await client.post(f"{API}/catalog/preview", json=CURACION, headers=auth_headers)

    assert response.status_code == 200
    assert Decimal(response.json()["materials_cost"]) == Decimal("15.00")

    catalog = await client.get(f"{API}/catalog", headers=auth_headers)
    assert catalog.json() == []


@pytest.mark.asyncio
async def test_update_catalog_keeps_materials_when_omitted(client: AsyncClient, auth_headers):
    created = await _create_catalog(client, auth_headers)

    updated = await client.put(
        f"{API}/catalog/{created['id']}", json={"base_price": "200"}, headers=auth_headers
    )
    assert updated.status_code == 200
    assert len(updated.json()["materials"]) == 2
    assert Decimal(updated.json()["utility"]) == Decimal("105.00")

    cleared = await client.put(
        f"{API}/catalog/{created['id']}", json={"materials": []}, headers=auth_headers
    )
    assert cleared.json()["materials"] == []
    assert Decimal(cleared.json()["total_cost"]) == Decimal("80.00")


@pytest.mark.asyncio
async def test_catalog_search_and_soft_delete(client: AsyncClient, auth_headers):
    created = await _create_catalog(client, auth_headers)

    search = await client.get(f"{API}/catalog/search", params={"q": "curac"}, headers=auth_headers)
    assert [p["id"] for p in search.json()] == [created["id"]]

    deleted = await client.delete(f"{API}/catalog/{created['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    active = await client.get(f"{API}/catalog", headers=auth_headers)
    assert active.json() == []

    everything = await client.get(
        f"{API}/catalog", params={"active_only": False}, headers=auth_headers
    )
    assert everything.json()[0]["is_active"] is False


@pytest.mark.asyncio
async def test_catalog_write_requires_admin(client: AsyncClient, nurse_headers):
    response = await client.post(f"{API}/catalog", json=CURACION, headers=nurse_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_catalog_reactivates_deleted_materials(client: AsyncClient, auth_headers):
    gasas = await client.post(
        "/api/v1/inventory", json={"name": "Gasas", "unit_cost": "0.50"}, headers=auth_headers
    )
    await client.delete(f"/api/v1/inventory/{gasas.json()['id']}", headers=auth_headers)

    await _create_catalog(client, auth_headers)

    inventory = await client.get("/api/v1/inventory", headers=auth_headers)
    names = [m["name"] for m in inventory.json()["items"]]
    assert names == ["Gasas", "Suero fisiológico"]


# ── Registros ────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_record_with_single_payment(client: AsyncClient, auth_headers, test_patient):
    catalog = await _create_catalog(client, auth_headers)

    response = await client.post(
        f"{API}/records",
        json={
            "record_date": "2025-07-10",
            "patient_id": str(test_patient.id),
            "procedure_catalog_id": catalog["id"],
            "payment": {"method": "yape", "amount": "150"},
            "material_expenses": "5",
            "fuel": "10",
        },
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["patient_name"] == "María Quispe"
    assert data["procedure_name"] == "Curación de herida"
    assert data["payment_method"] == "yape"
    assert Decimal(data["yape"]) == Decimal("150.00")
    assert Decimal(data["income"]) == Decimal("150.00")
    # 150 - 95 - 5 - 10
    assert Decimal(data["utility"]) == Decimal("40.00")


@pytest.mark.asyncio
async def test_update_record_recomputes_utility(client: AsyncClient, auth_headers):
    created = await client.post(
        f"{API}/records",
        json={"record_date": "2025-07-10", "patient_name": "Sin ficha", "cash": "80"},
        headers=auth_headers,
    )
    record_id = created.json()["id"]
    assert Decimal(created.json()["utility"]) == Decimal("80.00")

    updated = await client.put(
        f"{API}/records/{record_id}", json={"fuel": "15"}, headers=auth_headers
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["utility"]) == Decimal("65.00")

    fetched = await client.get(f"{API}/records/{record_id}", headers=auth_headers)
    assert fetched.json()["payment_method"] == "efectivo"


@pytest.mark.asyncio
async def test_list_records_by_payment_status(client: AsyncClient, auth_headers):
    await client.post(
        f"{API}/records",
        json={"record_date": "2025-07-11", "patient_name": "Pagado", "plin": "50"},
        headers=auth_headers,
    )
    await client.post(
        f"{API}/records",
        json={"record_date": "2025-07-12", "patient_name": "Debe"},
        headers=auth_headers,
    )

    pending = await client.get(
        f"{API}/records", params={"payment_status": "pendiente"}, headers=auth_headers
    )
    assert [r["patient_name"] for r in pending.json()["items"]] == ["Debe"]

    paid = await client.get(
        f"{API}/records", params={"payment_status": "cancelado"}, headers=auth_headers
    )
    assert [r["patient_name"] for r in paid.json()["items"]] == ["Pagado"]


@pytest.mark.asyncio
async def test_payment_methods(client: AsyncClient, auth_headers):
    response = await client.get(f"{API}/records/payment-methods", headers=auth_headers)
    assert [m["value"] for m in response.json()] == [
        "yape", "plin", "transferencia", "tarjeta", "efectivo",
    ]


@pytest.mark.asyncio
async def test_report_and_totals(client: AsyncClient, auth_headers):
    catalog = await _create_catalog(client, auth_headers)
    for day, amount in (("2025-07-01", "150"), ("2025-07-15", "200"), ("2025-08-01", "999")):
        await client.post(
            f"{API}/records",
            json={
                "record_date": day,
                "patient_name": "Paciente",
                "procedure_catalog_id": catalog["id"],
                "transfer_deposit": amount,
                "fuel": "10",
            },
            headers=auth_headers,
        )

    params = {"date_from": "2025-07-01", "date_to": "2025-07-31"}
    totals = await client.get(f"{API}/records/report/totals", params=params, headers=auth_headers)
    assert totals.status_code == 200
    assert Decimal(totals.json()["income"]) == Decimal("350.00")
    assert Decimal(totals.json()["mobility"]) == Decimal("20.00")

    report = await client.get(f"{API}/records/report", params=params, headers=auth_headers)
    data = report.json()
    assert data["totals"]["total_records"] == 2
    assert [row["payment_method"] for row in data["rows"]] == ["transferencia", "transferencia"]
    # 350 - 2 × (95 + 10)
    assert Decimal(data["totals"]["utility"]) == Decimal("140.00")


@pytest.mark.asyncio
async def test_report_rejects_inverted_range(client: AsyncClient, auth_headers):
    response = await client.get(
        f"{API}/records/report",
        params={"date_from": "2025-07-31", "date_to": "2025-07-01"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_record(client: AsyncClient, auth_headers):
    created = await client.post(
        f"{API}/records",
        json={"record_date": "2025-07-10", "patient_name": "Borrar"},
        headers=auth_headers,
    )
    record_id = created.json()["id"]

    response = await client.delete(f"{API}/records/{record_id}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"{API}/records/{record_id}", headers=auth_headers)
    assert missing.status_code == 404
