"""
Endpoints de cotizaciones de servicios.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.quote import QuoteStatus
from hah_erp.models.user import User
from hah_erp.schemas.quote import (
    QuoteCreate,
    QuoteListResponse,
    QuoteResponse,
    QuoteStats,
    QuoteStatusUpdate,
    QuoteUpdate,
)
from hah_erp.services import quote_service

router = APIRouter()


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    search: str | None = Query(None, description="Paciente o doctor"),
    status: QuoteStatus | None = Query(None),
    user: User = Depends(require_permission("quote", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await quote_service.list_quotes(
        db, page=page, size=size, search=search, status=status
    )


@router.get("/stats", response_model=QuoteStats)
async def quote_stats(
    user: User = Depends(require_permission("quote", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await quote_service.get_stats(db)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(
    quote_id: UUID,
    user: User = Depends(require_permission("quote", "read")),
    db: AsyncSession = Depends(get_db),
):
    return quote_service.to_response(await quote_service.get_quote(db, quote_id))


@router.post("", response_model=QuoteResponse, status_code=201)
async def create_quote(
    data: QuoteCreate,
    user: User = Depends(require_permission("quote", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea una cotización en borrador.
    El total es Σ precio unitario × cantidad; vence a los 30 días si no se indica.
    """
    return quote_service.to_response(await quote_service.create_quote(db, data))


@router.put("/{quote_id}", response_model=QuoteResponse)
async def update_quote(
    quote_id: UUID,
    data: QuoteUpdate,
    user: User = Depends(require_permission("quote", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Actualiza la cotización; si se envían `items` reemplazan a los actuales."""
    return quote_service.to_response(await quote_service.update_quote(db, quote_id, data))


@router.patch("/{quote_id}/status", response_model=QuoteResponse)
async def change_quote_status(
    quote_id: UUID,
    data: QuoteStatusUpdate,
    user: User = Depends(require_permission("quote", "update")),
    db: AsyncSession = Depends(get_db),
):
    quote = await quote_service.change_status(db, quote_id, data.status)
    return quote_service.to_response(quote)


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(
    quote_id: UUID,
    user: User = Depends(require_permission("quote", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await quote_service.delete_quote(db, quote_id)
