"""
Tests de laboratorio: catálogo, cotización, órdenes y PDF de resultados.
"""

from decimal import Decimal
from pathlib import Path
from uuid import UUID

import pytest
from httpx import AsyncClient

from hah_erp.config import get_settings
from hah_erp.services import lab_service

API = "/api/v1/lab"

PDF_CONTENT = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


async def _exam(client: AsyncClient, headers: dict, code: str, name: str, price, category="Hematología") -> dict:
    response = await client.post(
        f"{API}/exams",
        json={"code": code, "name": name, "price": price, "category": category},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def _order(client: AsyncClient, headers: dict, patient_id, exam_ids: list[str]) -> dict:
    response = await client.post(
        f"{API}/orders",
        json={"patient_id": str(patient_id), "exam_ids": exam_ids, "physician_name": "Dr. Salas"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


# ── Catálogo ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_exam_parses_legacy_price(client: AsyncClient, auth_headers):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma completo", "S/ 1,250.50")
    assert Decimal(exam["price"]) == Decimal("1250.50")

    duplicated = await client.post(
        f"{API}/exams", json={"code": "HEM01", "name": "Otro"}, headers=auth_headers
    )
    assert duplicated.status_code == 409


@pytest.mark.asyncio
async def test_exam_catalog_requires_admin(client: AsyncClient, nurse_headers):
    response = await client.post(
        f"{API}/exams", json={"code": "X1", "name": "Examen"}, headers=nurse_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_exams_categories_and_stats(client: AsyncClient, auth_headers):
    await _exam(client, auth_headers, "HEM01", "Hemograma completo", "25")
    await _exam(client, auth_headers, "GLU01", "Glucosa basal", "10", category="Bioquímica")
    await _exam(client, auth_headers, "COL01", "Colesterol total", "15", category="Bioquímica")

    listing = await client.get(
        f"{API}/exams", params={"sort_by": "price", "sort_order": "desc"}, headers=auth_headers
    )
    assert [e["code"] for e in listing.json()["items"]] == ["HEM01", "COL01", "GLU01"]

    by_category = await client.get(
        f"{API}/exams", params={"category": "Bioquímica", "search": "glu"}, headers=auth_headers
    )
    assert [e["code"] for e in by_category.json()["items"]] == ["GLU01"]

    categories = await client.get(f"{API}/exams/categories", headers=auth_headers)
    assert categories.json() == ["Bioquímica", "Hematología"]

    stats = await client.get(f"{API}/exams/stats", headers=auth_headers)
    assert stats.json() == {"total": 3, "categories": 2}


@pytest.mark.asyncio
async def test_update_exam(client: AsyncClient, auth_headers):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "25")

    response = await client.put(
        f"{API}/exams/{exam['id']}", json={"price": "S/.30"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["price"]) == Decimal("30.00")


# ── Cotización ───────────────────────────────────────


@pytest.mark.asyncio
async def test_quote_spreads_home_surcharge(client: AsyncClient, auth_headers):
    first = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    second = await _exam(client, auth_headers, "GLU01", "Glucosa", "30")

    response = await client.post(
        f"{API}/quote", json={"exam_ids": [first["id"], second["id"]]}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    # Recargo por defecto de 120 repartido entre 2 exámenes, markup 1.20
    assert Decimal(data["unit_surcharge"]) == Decimal("60.00")
    assert [Decimal(e["client_price"]) for e in data["exams"]] == [
        Decimal("120.00"),
        Decimal("96.00"),
    ]
    assert Decimal(data["subtotal"]) == Decimal("80.00")
    assert Decimal(data["total"]) == Decimal("216.00")


@pytest.mark.asyncio
async def test_quote_unknown_exams(client: AsyncClient, auth_headers):
    response = await client.post(
        f"{API}/quote",
        json={"exam_ids": ["00000000-0000-0000-0000-000000000000"]},
        headers=auth_headers,
    )
    assert response.status_code == 422


# ── Órdenes ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_order_freezes_client_prices(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    assert order["status"] == "Pendiente"
    assert order["patient"]["name"] == "María Quispe"
    assert Decimal(order["total_amount"]) == Decimal("180.00")
    assert order["items"][0]["exam_code"] == "HEM01"

    # Cambiar el precio del catálogo no altera la orden
    await client.put(f"{API}/exams/{exam['id']}", json={"price": "70"}, headers=auth_headers)
    fetched = await client.get(f"{API}/orders/{order['id']}", headers=auth_headers)
    assert Decimal(fetched.json()["items"][0]["price"]) == Decimal("180.00")


@pytest.mark.asyncio
async def test_update_status_propagates_to_items(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    response = await client.patch(
        f"{API}/orders/{order['id']}/status", json={"status": "En Proceso"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "En Proceso"
    assert {item["status"] for item in response.json()["items"]} == {"En Proceso"}

    listing = await client.get(
        f"{API}/orders", params={"status": "En Proceso"}, headers=auth_headers
    )
    assert listing.json()["total"] == 1

    by_patient = await client.get(f"{API}/orders/patient/{test_patient.id}", headers=auth_headers)
    assert [o["id"] for o in by_patient.json()] == [order["id"]]


@pytest.mark.asyncio
async def test_update_result_notes(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    response = await client.put(
        f"{API}/orders/{order['id']}/result",
        json={"result_notes": "Valores normales", "status": "Completado"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["result_notes"] == "Valores normales"
    assert response.json()["status"] == "Completado"


@pytest.mark.asyncio
async def test_upload_result_and_download(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    no_result = await client.get(
        f"{API}/orders/{order['id']}/result/signed-url", headers=auth_headers
    )
    assert no_result.status_code == 404

    uploaded = await client.post(
        f"{API}/orders/{order['id']}/result/upload",
        files={"file": ("resultado.pdf", PDF_CONTENT, "application/pdf")},
        headers=auth_headers,
    )
    assert uploaded.status_code == 200
    data = uploaded.json()
    assert data["status"] == "Completado"
    assert data["result_file_path"].startswith(f"orders/{order['id']}/")
    assert data["result_file_path"].endswith(".pdf")

    signed = await client.get(
        f"{API}/orders/{order['id']}/result/signed-url",
        params={"expires_in": 600},
        headers=auth_headers,
    )
    assert signed.status_code == 200
    assert signed.json()["expires_in"] == 600

    download = await client.get(signed.json()["url"])
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.content == PDF_CONTENT


@pytest.mark.asyncio
async def test_upload_rejects_non_pdf(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    wrong_type = await client.post(
        f"{API}/orders/{order['id']}/result/upload",
        files={"file": ("foto.png", b"\x89PNG....", "image/png")},
        headers=auth_headers,
    )
    assert wrong_type.status_code == 422

    fake_pdf = await client.post(
        f"{API}/orders/{order['id']}/result/upload",
        files={"file": ("falso.pdf", b"no es un pdf", "application/pdf")},
        headers=auth_headers,
    )
    assert fake_pdf.status_code == 422
    assert fake_pdf.json()["detail"] == "El archivo no es un PDF válido"


@pytest.mark.asyncio
async def test_delete_result(client: AsyncClient, auth_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])
    await client.post(
        f"{API}/orders/{order['id']}/result/upload",
        files={"file": ("resultado.pdf", PDF_CONTENT, "application/pdf")},
        headers=auth_headers,
    )

    response = await client.delete(f"{API}/orders/{order['id']}/result", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["result_file_path"] is None


@pytest.mark.asyncio
async def test_failed_flush_removes_uploaded_result(
    client: AsyncClient, auth_headers, test_patient, test_user, db_session, monkeypatch
):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    async def failing_flush(*args, **kwargs):
        raise RuntimeError("conexión perdida")

    monkeypatch.setattr(db_session, "flush", failing_flush)
    with pytest.raises(RuntimeError):
        await lab_service.upload_result(
            db_session,
            UUID(order["id"]),
            test_user,
            filename="resultado.pdf",
            content_type="application/pdf",
            content=PDF_CONTENT,
        )

    settings = get_settings()
    folder = Path(settings.STORAGE_LOCAL_DIR) / settings.LAB_RESULTS_BUCKET / "orders" / order["id"]
    assert not folder.exists() or not any(folder.iterdir())


@pytest.mark.asyncio
async def test_download_with_invalid_token(client: AsyncClient):
    response = await client.get("/api/v1/storage/download", params={"token": "manipulado"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_order(client: AsyncClient, auth_headers, nurse_headers, test_patient):
    exam = await _exam(client, auth_headers, "HEM01", "Hemograma", "50")
    order = await _order(client, auth_headers, test_patient.id, [exam["id"]])

    forbidden = await client.delete(f"{API}/orders/{order['id']}", headers=nurse_headers)
    assert forbidden.status_code == 403

    response = await client.delete(f"{API}/orders/{order['id']}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"{API}/orders/{order['id']}", headers=auth_headers)
    assert missing.status_code == 404
