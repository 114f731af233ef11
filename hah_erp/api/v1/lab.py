"""
Endpoints de laboratorio: catálogo de exámenes, cotizaciones, órdenes y
resultados en PDF.
"""

from datetime import date
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.config import get_settings
from hah_erp.database import get_db
from hah_erp.models.lab import LabOrderStatus
from hah_erp.models.user import User
from hah_erp.schemas.lab import (
    LabExamCreate,
    LabExamListResponse,
    LabExamResponse,
    LabExamStats,
    LabExamUpdate,
    LabOrderCreate,
    LabOrderListResponse,
    LabOrderResponse,
    LabOrderResultUpdate,
    LabOrderStatusUpdate,
    LabQuoteRequest,
    LabQuoteResponse,
    SignedUrlResponse,
)
from hah_erp.schemas.portal import PortalAccountResponse
from hah_erp.services import lab_service, portal_service

settings = get_settings()

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


# ── Catálogo de exámenes ─────────────────────────────


@router.get("/exams", response_model=LabExamListResponse)
async def list_exams(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=200, description="Tamaño de página"),
    search: str | None = Query(None, description="Nombre o código"),
    category: str | None = Query(None),
    sort_by: Literal["name", "code", "price", "category"] = Query("name"),
    sort_order: Literal["asc", "desc"] = Query("asc"),
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.list_exams(
        db,
        page=page,
        size=size,
        search=search,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/exams/categories", response_model=list[str])
async def list_categories(
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.list_categories(db)


@router.get("/exams/stats", response_model=LabExamStats)
async def exam_stats(
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.get_exam_stats(db)


@router.get("/exams/{exam_id}", response_model=LabExamResponse)
async def get_exam(
    exam_id: UUID,
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.get_exam(db, exam_id)


@router.post("/exams", response_model=LabExamResponse, status_code=201)
async def create_exam(
    data: LabExamCreate,
    user: User = Depends(require_permission("lab", "catalog")),
    db: AsyncSession = Depends(get_db),
):
    """Agrega un examen al catálogo. El código debe ser único."""
    return await lab_service.create_exam(db, data)


@router.put("/exams/{exam_id}", response_model=LabExamResponse)
async def update_exam(
    exam_id: UUID,
    data: LabExamUpdate,
    user: User = Depends(require_permission("lab", "catalog")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.update_exam(db, exam_id, data)


# ── Cotización ───────────────────────────────────────


@router.post("/quote", response_model=LabQuoteResponse)
async def quote_exams(
    data: LabQuoteRequest,
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    """
    Cotiza los exámenes seleccionados:

        precio cliente = precio × LAB_MARKUP_RATE + LAB_SURCHARGE_TOTAL / n
        total = Σ precio cliente + costo de visita
    """
    return await lab_service.quote(db, data.exam_ids)


# ── Órdenes ──────────────────────────────────────────


@router.get("/orders", response_model=LabOrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    status: LabOrderStatus | None = Query(None, description="Filtrar por estado"),
    date_from: date | None = Query(None, description="Fecha de orden desde"),
    date_to: date | None = Query(None, description="Fecha de orden hasta"),
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lista las órdenes, las más recientes primero."""
    return await lab_service.list_orders(
        db, page=page, size=size, status=status, date_from=date_from, date_to=date_to
    )


@router.get("/orders/patient/{patient_id}", response_model=list[LabOrderResponse])
async def list_patient_orders(
    patient_id: UUID,
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.list_orders_by_patient(db, patient_id)


@router.get("/orders/{order_id}", response_model=LabOrderResponse)
async def get_order(
    order_id: UUID,
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.get_order(db, order_id)


@router.post("/orders", response_model=LabOrderResponse, status_code=201)
async def create_order(
    data: LabOrderCreate,
    request: Request,
    user: User = Depends(require_permission("lab", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea una orden con los exámenes seleccionados.
    Cada ítem guarda el precio cliente calculado como en la cotización.
    """
    return await lab_service.create_order(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.patch("/orders/{order_id}/status", response_model=LabOrderResponse)
async def update_order_status(
    order_id: UUID,
    data: LabOrderStatusUpdate,
    request: Request,
    user: User = Depends(require_permission("lab", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.update_status(
        db, order_id, user, data.status, ip_address=_get_client_ip(request)
    )


@router.put("/orders/{order_id}/result", response_model=LabOrderResponse)
async def update_order_result(
    order_id: UUID,
    data: LabOrderResultUpdate,
    user: User = Depends(require_permission("lab", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Actualiza notas, fecha o estado del resultado sin tocar el archivo."""
    return await lab_service.update_result(db, order_id, data)


@router.post("/orders/{order_id}/result/upload", response_model=LabOrderResponse)
async def upload_order_result(
    order_id: UUID,
    request: Request,
    file: UploadFile = File(..., description="PDF del resultado"),
    user: User = Depends(require_permission("lab", "update")),
    db: AsyncSession = Depends(get_db),
):
    """
    Sube el PDF del resultado.
    La orden pasa a Completado y el archivo anterior, si existía, se elimina.
    """
    content = await file.read()
    return await lab_service.upload_result(
        db,
        order_id,
        user,
        filename=file.filename,
        content_type=file.content_type,
        content=content,
        ip_address=_get_client_ip(request),
    )


@router.delete("/orders/{order_id}/result", response_model=LabOrderResponse)
async def delete_order_result(
    order_id: UUID,
    user: User = Depends(require_permission("lab", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await lab_service.delete_result(db, order_id)


@router.get("/orders/{order_id}/result/signed-url", response_model=SignedUrlResponse)
async def order_result_url(
    order_id: UUID,
    expires_in: int | None = Query(None, ge=60, le=7 * 24 * 3600),
    user: User = Depends(require_permission("lab", "read")),
    db: AsyncSession = Depends(get_db),
):
    """URL temporal para descargar el PDF del resultado."""
    order = await lab_service.get_order(db, order_id)
    url = await lab_service.result_url(order, expires_in)
    return SignedUrlResponse(
        url=url, expires_in=expires_in or settings.STORAGE_SIGNED_URL_EXPIRES
    )


@router.post("/orders/{order_id}/portal-access", response_model=PortalAccountResponse)
async def reset_portal_access(
    order_id: UUID,
    request: Request,
    user: User = Depends(require_permission("portal", "manage")),
    db: AsyncSession = Depends(get_db),
):
    """Genera una nueva clave del portal para el paciente de la orden."""
    return await portal_service.reset_password_by_order(
        db, order_id, user, ip_address=_get_client_ip(request)
    )


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(
    order_id: UUID,
    request: Request,
    user: User = Depends(require_permission("lab", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await lab_service.delete_order(
        db, order_id, user, ip_address=_get_client_ip(request)
    )
