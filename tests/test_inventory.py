"""
Tests del inventario de materiales.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

API = "/api/v1/inventory"


async def _create(client: AsyncClient, headers: dict, **values) -> dict:
    payload = {"name": "Jeringa 5ml", "unit_cost": "0.50", "stock": 20, "min_stock": 5}
    payload.update(values)
    response = await client.post(API, json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_status_is_derived_from_stock(client: AsyncClient, auth_headers):
    assert (await _create(client, auth_headers))["status"] == "in_stock"
    assert (await _create(client, auth_headers, name="Gasas", stock=5))["status"] == "low_stock"
    assert (await _create(client, auth_headers, name="Sonda", stock=0))["status"] == "out_of_stock"
    suero = await _create(client, auth_headers, name="Suero", stock=10, status="expired")
    assert suero["status"] == "in_stock"


@pytest.mark.asyncio
async def test_expired_yields_to_stock_levels(client: AsyncClient, auth_headers):
    material = await _create(client, auth_headers, name="Suero", stock=10)

    expired = await client.put(
        f"{API}/{material['id']}", json={"status": "expired"}, headers=auth_headers
    )
    assert expired.json()["status"] == "expired"

    low = await client.post(f"{API}/{material['id']}/stock", json={"delta": -6}, headers=auth_headers)
    assert low.json()["status"] == "low_stock"

    empty = await client.put(
        f"{API}/{material['id']}", json={"stock": 0, "status": "expired"}, headers=auth_headers
    )
    assert empty.json()["status"] == "out_of_stock"


@pytest.mark.asyncio
async def test_duplicate_name(client: AsyncClient, auth_headers):
    await _create(client, auth_headers)
    response = await client.post(API, json={"name": "Jeringa 5ml"}, headers=auth_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_recreate_deleted_material_reactivates_it(client: AsyncClient, auth_headers):
    first = await _create(client, auth_headers)
    await client.delete(f"{API}/{first['id']}", headers=auth_headers)

    again = await _create(client, auth_headers, unit_cost="0.80", stock=0)
    assert again["id"] == first["id"]
    assert again["is_active"] is True
    assert again["status"] == "out_of_stock"
    assert Decimal(again["unit_cost"]) == Decimal("0.80")

    listing = await client.get(API, headers=auth_headers)
    assert [m["name"] for m in listing.json()["items"]] == ["Jeringa 5ml"]


@pytest.mark.asyncio
async def test_rename_onto_deleted_material_conflicts(client: AsyncClient, auth_headers):
    first = await _create(client, auth_headers)
    await client.delete(f"{API}/{first['id']}", headers=auth_headers)
    other = await _create(client, auth_headers, name="Gasas")

    response = await client.put(
        f"{API}/{other['id']}", json={"name": "Jeringa 5ml"}, headers=auth_headers
    )
    assert response.status_code == 409
    assert "dado de baja" in response.json()["detail"]


@pytest.mark.asyncio
async def test_adjust_stock(client: AsyncClient, auth_headers):
    material = await _create(client, auth_headers)

    consumed = await client.post(
        f"{API}/{material['id']}/stock", json={"delta": -16}, headers=auth_headers
    )
    assert consumed.status_code == 200
    assert consumed.json()["stock"] == 4
    assert consumed.json()["status"] == "low_stock"

    restocked = await client.post(
        f"{API}/{material['id']}/stock", json={"delta": 30, "reason": "Compra"}, headers=auth_headers
    )
    assert restocked.json()["stock"] == 34
    assert restocked.json()["status"] == "in_stock"
    assert restocked.json()["last_restocked"] is not None


@pytest.mark.asyncio
async def test_adjust_stock_never_negative(client: AsyncClient, auth_headers):
    material = await _create(client, auth_headers, stock=3)

    response = await client.post(
        f"{API}/{material['id']}/stock", json={"delta": -4}, headers=auth_headers
    )
    assert response.status_code == 422
    assert "Stock insuficiente" in response.json()["detail"]


@pytest.mark.asyncio
async def test_update_recomputes_status(client: AsyncClient, auth_headers):
    material = await _create(client, auth_headers)

    response = await client.put(
        f"{API}/{material['id']}", json={"min_stock": 25}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "low_stock"


@pytest.mark.asyncio
async def test_stats_and_soft_delete(client: AsyncClient, auth_headers):
    first = await _create(client, auth_headers)
    await _create(client, auth_headers, name="Gasas", unit_cost="2.00", stock=0)

    stats = await client.get(f"{API}/stats", headers=auth_headers)
    data = stats.json()
    assert data["total"] == 2
    assert data["out_of_stock"] == 1
    assert Decimal(data["inventory_value"]) == Decimal("10.00")

    deleted = await client.delete(f"{API}/{first['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    listing = await client.get(API, headers=auth_headers)
    assert [m["name"] for m in listing.json()["items"]] == ["Gasas"]


@pytest.mark.asyncio
async def test_filter_by_status(client: AsyncClient, auth_headers):
    await _create(client, auth_headers)
    await _create(client, auth_headers, name="Sonda", stock=0)

    response = await client.get(API, params={"status": "out_of_stock"}, headers=auth_headers)
    assert [m["name"] for m in response.json()["items"]] == ["Sonda"]


@pytest.mark.asyncio
async def test_delete_requires_admin(client: AsyncClient, auth_headers, nurse_headers):
    material = await _create(client, auth_headers)
    response = await client.delete(f"{API}/{material['id']}", headers=nurse_headers)
    assert response.status_code == 403
