"""
Tests de reportes por rango y su exportación.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from hah_erp.services.export_service import XLSX_MEDIA_TYPE

API = "/api/v1/reports"
RANGE = {"date_from": "2025-07-01", "date_to": "2025-07-31"}


async def _shifts(client: AsyncClient, headers: dict) -> None:
    for shift_date, amount in (("2025-07-05", "180"), ("2025-07-20", "220"), ("2025-08-02", "500")):
        response = await client.post(
            "/api/v1/shifts",
            json={
                "shift_date": shift_date,
                "start_time": "08:00",
                "district": "Miraflores",
                "nurse": "Carmen Díaz",
                "amount_due": amount,
            },
            headers=headers,
        )
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_shifts_report_totals(client: AsyncClient, auth_headers):
    await _shifts(client, auth_headers)

    response = await client.get(f"{API}/shifts", params=RANGE, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert [row["shift_date"] for row in data["rows"]] == ["2025-07-05", "2025-07-20"]
    assert data["totals"]["total_shifts"] == 2
    assert Decimal(data["totals"]["total_revenue"]) == Decimal("400.00")
    assert Decimal(data["totals"]["average"]) == Decimal("200.00")


@pytest.mark.asyncio
async def test_home_care_report_uses_period_start(
    client: AsyncClient, auth_headers, test_patient
):
    contract = await client.post(
        "/api/v1/home-care/contracts",
        json={"patient_id": str(test_patient.id), "monthly_amount": "6000"},
        headers=auth_headers,
    )
    for date_from in ("2025-06-16", "2025-07-01"):
        await client.post(
            f"/api/v1/home-care/contracts/{contract.json()['id']}/periods",
            json={"date_from": date_from},
            headers=auth_headers,
        )

    response = await client.get(f"{API}/home-care", params=RANGE, headers=auth_headers)

    data = response.json()
    assert len(data["rows"]) == 1
    assert data["rows"][0]["patient_name"] == "María Quispe"
    assert Decimal(data["totals"]["total_revenue"]) == Decimal("3000.00")


@pytest.mark.asyncio
async def test_procedures_report_empty_range(client: AsyncClient, auth_headers):
    response = await client.get(f"{API}/procedures", params=RANGE, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["rows"] == []
    assert data["totals"]["total_records"] == 0
    assert Decimal(data["totals"]["utility"]) == Decimal("0")


@pytest.mark.asyncio
async def test_report_rejects_inverted_range(client: AsyncClient, auth_headers):
    response = await client.get(
        f"{API}/shifts",
        params={"date_from": "2025-07-31", "date_to": "2025-07-01"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_export_xlsx(client: AsyncClient, auth_headers):
    await _shifts(client, auth_headers)

    response = await client.get(f"{API}/shifts/export", params=RANGE, headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "reporte_turnos_2025-07-01_2025-07-31.xlsx" in response.headers["content-disposition"]
    assert response.content.startswith(b"PK")


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient, auth_headers):
    await _shifts(client, auth_headers)

    response = await client.get(
        f"{API}/shifts/export", params={**RANGE, "format": "csv"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("Fecha,Hora,Paciente,Distrito")
    assert len(lines) == 3


@pytest.mark.asyncio
async def test_export_rejects_inverted_range(client: AsyncClient, auth_headers):
    response = await client.get(
        f"{API}/procedures/export",
        params={"date_from": "2025-07-31", "date_to": "2025-07-01"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_reports_forbidden_for_nurse(client: AsyncClient, nurse_headers):
    response = await client.get(f"{API}/shifts", params=RANGE, headers=nurse_headers)
    assert response.status_code == 403
