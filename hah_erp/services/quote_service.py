"""
Servicio de cotizaciones.

El total es Σ precio unitario × cantidad de las líneas. Una cotización en
borrador o enviada se reporta como vencida cuando valid_until < hoy.
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException, ValidationException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import today_lima
from hah_erp.models.patient import Patient
from hah_erp.models.quote import Quote, QuoteItem, QuoteStatus
from hah_erp.schemas.quote import (
    QuoteCreate,
    QuoteItemInput,
    QuoteResponse,
    QuoteStats,
    QuoteUpdate,
)
from hah_erp.services import billing

VALIDITY = timedelta(days=30)
OPEN_STATUSES = (QuoteStatus.DRAFT, QuoteStatus.SENT)


def is_expired(quote: Quote, today: date | None = None) -> bool:
    today = today or today_lima()
    return quote.status in OPEN_STATUSES and quote.valid_until < today


def to_response(quote: Quote) -> QuoteResponse:
    response = QuoteResponse.model_validate(quote)
    response.is_expired = is_expired(quote)
    return response


def _items(items: list[QuoteItemInput]) -> tuple[list[QuoteItem], Decimal]:
    rows = [
        QuoteItem(
            name=item.name.strip(),
            unit_price=billing.money(item.unit_price),
            quantity=item.quantity,
            sort_order=index,
        )
        for index, item in enumerate(items)
    ]
    total = billing.money(sum((row.subtotal for row in rows), Decimal("0")))
    return rows, total


async def _fill_patient(db: AsyncSession, values: dict) -> None:
    patient_id = values.get("patient_id")
    if not patient_id:
        return
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFoundException("Paciente")
    values.setdefault("patient_name", None)
    if not values.get("patient_name"):
        values["patient_name"] = patient.name
    if not values.get("patient_email"):
        values["patient_email"] = patient.email
    if not values.get("patient_phone"):
        values["patient_phone"] = patient.phone


async def _load(db: AsyncSession, quote_id: UUID) -> Quote:
    result = await db.execute(
        select(Quote).where(Quote.id == quote_id).execution_options(populate_existing=True)
    )
    quote = result.scalar_one_or_none()
    if not quote:
        raise NotFoundException("Cotización", "Cotización no encontrada")
    return quote


async def get_quote(db: AsyncSession, quote_id: UUID) -> Quote:
    return await _load(db, quote_id)


async def list_quotes(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
    status: QuoteStatus | None = None,
) -> dict:
    query = select(Quote)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Quote.patient_name).like(pattern),
                func.lower(Quote.patient_email).like(pattern),
                func.lower(Quote.doctor_name).like(pattern),
            )
        )
    if status:
        query = query.where(Quote.status == status)

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(Quote.created_at.desc(), Quote.id)
        .offset(page_offset(page, size))
        .limit(size)
    )
    items = [to_response(q) for q in result.scalars().all()]
    return page_payload(items, total, page, size)


async def create_quote(db: AsyncSession, data: QuoteCreate) -> Quote:
    values = data.model_dump(exclude={"items"})
    await _fill_patient(db, values)
    if not (values.get("patient_name") or "").strip():
        raise ValidationException("Se requiere el paciente o su nombre")

    items, total = _items(data.items)
    quote = Quote(
        **values,
        items=items,
        total_amount=total,
        status=QuoteStatus.DRAFT,
    )
    if not quote.valid_until:
        quote.valid_until = today_lima() + VALIDITY

    db.add(quote)
    await db.flush()
    return await _load(db, quote.id)


async def update_quote(db: AsyncSession, quote_id: UUID, data: QuoteUpdate) -> Quote:
    """Actualiza la cabecera; si vienen líneas, reemplazan a las anteriores."""
    quote = await _load(db, quote_id)
    update_data = data.model_dump(exclude_unset=True, exclude={"items"})
    if update_data.get("patient_id"):
        await _fill_patient(db, update_data)

    for key, value in update_data.items():
        if value is None and key in ("patient_name", "valid_until"):
            continue
        setattr(quote, key, value)

    if data.items is not None:
        quote.items, quote.total_amount = _items(data.items)

    await db.flush()
    return await _load(db, quote.id)


async def change_status(db: AsyncSession, quote_id: UUID, status: QuoteStatus) -> Quote:
    quote = await _load(db, quote_id)
    quote.status = status
    await db.flush()
    return await _load(db, quote.id)


async def delete_quote(db: AsyncSession, quote_id: UUID) -> None:
    quote = await _load(db, quote_id)
    await db.delete(quote)
    await db.flush()


async def get_stats(db: AsyncSession) -> QuoteStats:
    result = await db.execute(
        select(Quote.status, func.count(Quote.id)).group_by(Quote.status)
    )
    counts = {status: count for status, count in result.all()}
    accepted_value = await db.scalar(
        select(func.coalesce(func.sum(Quote.total_amount), 0)).where(
            Quote.status == QuoteStatus.ACCEPTED
        )
    )
    return QuoteStats(
        total=sum(counts.values()),
        draft=counts.get(QuoteStatus.DRAFT, 0),
        sent=counts.get(QuoteStatus.SENT, 0),
        accepted=counts.get(QuoteStatus.ACCEPTED, 0),
        rejected=counts.get(QuoteStatus.REJECTED, 0),
        expired=counts.get(QuoteStatus.EXPIRED, 0),
        accepted_value=billing.money(accepted_value or 0),
    )
