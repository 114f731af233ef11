"""
Servicio de laboratorio: catálogo de exámenes, cotizaciones y órdenes.

El precio al cliente de cada examen es precio × LAB_MARKUP_RATE más una
parte igual del recargo LAB_SURCHARGE_TOTAL (toma de muestra a domicilio).
"""

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.config import get_settings
from hah_erp.core.exceptions import (
    ConflictException,
    NotFoundException,
    StorageException,
    ValidationException,
)
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.timeutils import today_lima
from hah_erp.models.lab import LabExam, LabOrder, LabOrderItem, LabOrderStatus
from hah_erp.models.patient import Patient
from hah_erp.models.user import User
from hah_erp.schemas.lab import (
    LabExamCreate,
    LabExamStats,
    LabExamUpdate,
    LabOrderCreate,
    LabOrderResultUpdate,
    LabQuoteLineResponse,
    LabQuoteResponse,
)
from hah_erp.services import billing, storage_service
from hah_erp.services.audit_service import log_action

settings = get_settings()
logger = logging.getLogger(__name__)

EXAM_SORTABLE_FIELDS = {
    "name": LabExam.name,
    "code": LabExam.code,
    "price": LabExam.price,
    "category": LabExam.category,
}

RESULTS_FOLDER = "orders"


# ══════════════════════════════════════════════════════
# Catálogo de exámenes
# ══════════════════════════════════════════════════════


async def _ensure_unique_code(db: AsyncSession, code: str, exclude_id: UUID | None = None) -> None:
    query = select(LabExam.id).where(LabExam.code == code)
    if exclude_id:
        query = query.where(LabExam.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise ConflictException(f"Ya existe un examen con el código {code}")


async def get_exam(db: AsyncSession, exam_id: UUID) -> LabExam:
    exam = await db.get(LabExam, exam_id)
    if not exam:
        raise NotFoundException("Examen")
    return exam


async def list_exams(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
    category: str | None = None,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> dict:
    query = select(LabExam).where(LabExam.is_active.is_(True))
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(func.lower(LabExam.name).like(pattern), func.lower(LabExam.code).like(pattern))
        )
    if category and category != "all":
        query = query.where(LabExam.category == category)

    total = await count_rows(db, query)
    column = EXAM_SORTABLE_FIELDS.get(sort_by, LabExam.name)
    ordering = column.desc() if sort_order == "desc" else column.asc()
    result = await db.execute(
        query.order_by(ordering, LabExam.id).offset(page_offset(page, size)).limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def list_categories(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(LabExam.category)
        .where(LabExam.category.is_not(None), LabExam.category != "")
        .distinct()
        .order_by(LabExam.category)
    )
    return list(result.scalars().all())


async def get_exam_stats(db: AsyncSession) -> LabExamStats:
    total = await db.scalar(select(func.count(LabExam.id))) or 0
    return LabExamStats(total=total, categories=len(await list_categories(db)))


async def create_exam(db: AsyncSession, data: LabExamCreate) -> LabExam:
    await _ensure_unique_code(db, data.code)
    exam = LabExam(**data.model_dump())
    db.add(exam)
    await db.flush()
    await db.refresh(exam)
    return exam


async def update_exam(db: AsyncSession, exam_id: UUID, data: LabExamUpdate) -> LabExam:
    exam = await get_exam(db, exam_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("code"):
        await _ensure_unique_code(db, update_data["code"], exclude_id=exam.id)
    for key, value in update_data.items():
        if value is None and key in ("code", "name", "price", "is_active"):
            continue
        setattr(exam, key, value)
    await db.flush()
    await db.refresh(exam)
    return exam


# ══════════════════════════════════════════════════════
# Cotización
# ══════════════════════════════════════════════════════


async def _exams_by_ids(db: AsyncSession, exam_ids: list[UUID]) -> list[LabExam]:
    """Exámenes encontrados, en el orden en que se pidieron (sin repetir)."""
    result = await db.execute(select(LabExam).where(LabExam.id.in_(exam_ids)))
    found = {exam.id: exam for exam in result.scalars().all()}
    ordered: list[LabExam] = []
    for exam_id in dict.fromkeys(exam_ids):
        if exam_id in found:
            ordered.append(found[exam_id])
    return ordered


def _quote_for(exams: list[LabExam]) -> billing.LabQuote:
    return billing.lab_quote(
        [exam.price for exam in exams],
        settings.LAB_MARKUP_RATE,
        settings.LAB_SURCHARGE_TOTAL,
        settings.LAB_HOME_VISIT_COST,
    )


async def quote(db: AsyncSession, exam_ids: list[UUID]) -> LabQuoteResponse:
    exams = await _exams_by_ids(db, exam_ids)
    if not exams:
        raise ValidationException("No se encontraron los exámenes seleccionados")

    result = _quote_for(exams)
    return LabQuoteResponse(
        exams=[
            LabQuoteLineResponse(
                exam_id=exam.id,
                code=exam.code,
                name=exam.name,
                price=line.price,
                client_price=line.client_price,
            )
            for exam, line in zip(exams, result.lines)
        ],
        subtotal=result.subtotal,
        markup_rate=settings.LAB_MARKUP_RATE,
        surcharge_total=billing.money(settings.LAB_SURCHARGE_TOTAL),
        unit_surcharge=result.unit_surcharge,
        client_total=result.client_total,
        home_visit_cost=result.home_visit_cost,
        total=result.total,
    )


# ══════════════════════════════════════════════════════
# Órdenes
# ══════════════════════════════════════════════════════


async def get_order(db: AsyncSession, order_id: UUID) -> LabOrder:
    result = await db.execute(
        select(LabOrder)
        .where(LabOrder.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundException("Orden de laboratorio", "Orden de laboratorio no encontrada")
    return order


async def create_order(
    db: AsyncSession,
    user: User,
    data: LabOrderCreate,
    ip_address: str | None = None,
) -> LabOrder:
    """Crea la orden congelando el precio al cliente de cada examen."""
    patient = await db.get(Patient, data.patient_id)
    if not patient:
        raise NotFoundException("Paciente")

    exams = await _exams_by_ids(db, data.exam_ids)
    if not exams:
        raise ValidationException("No se encontraron los exámenes seleccionados")

    priced = _quote_for(exams)
    order = LabOrder(
        patient_id=patient.id,
        order_date=data.order_date or today_lima(),
        physician_name=data.physician_name,
        priority=data.priority,
        observations=data.observations,
        status=LabOrderStatus.PENDIENTE,
        total_amount=billing.money(sum(line.client_price for line in priced.lines)),
        items=[
            LabOrderItem(
                exam_id=exam.id,
                exam_code=exam.code,
                exam_name=exam.name,
                price=line.client_price,
                status=LabOrderStatus.PENDIENTE,
            )
            for exam, line in zip(exams, priced.lines)
        ],
    )
    db.add(order)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="lab_order",
        entity_id=str(order.id),
        action="create",
        new_data={
            "patient_id": patient.id,
            "exams": [exam.code for exam in exams],
            "total_amount": order.total_amount,
        },
        ip_address=ip_address,
    )
    return await get_order(db, order.id)


async def list_orders_by_patient(db: AsyncSession, patient_id: UUID) -> list[LabOrder]:
    result = await db.execute(
        select(LabOrder)
        .where(LabOrder.patient_id == patient_id)
        .order_by(LabOrder.order_date.desc(), LabOrder.created_at.desc())
    )
    return list(result.scalars().all())


async def list_orders(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    status: LabOrderStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> dict:
    query = select(LabOrder)
    if status:
        query = query.where(LabOrder.status == status)
    if date_from:
        query = query.where(LabOrder.order_date >= date_from)
    if date_to:
        query = query.where(LabOrder.order_date <= date_to)

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(LabOrder.created_at.desc(), LabOrder.id)
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


def _set_status(order: LabOrder, status: LabOrderStatus) -> None:
    order.status = status
    for item in order.items:
        item.status = status


async def update_status(
    db: AsyncSession,
    order_id: UUID,
    user: User,
    status: LabOrderStatus,
    ip_address: str | None = None,
) -> LabOrder:
    order = await get_order(db, order_id)
    old_status = order.status
    _set_status(order, status)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="lab_order",
        entity_id=str(order.id),
        action="update",
        old_data={"status": old_status},
        new_data={"status": status},
        ip_address=ip_address,
    )
    return await get_order(db, order.id)


async def update_result(
    db: AsyncSession, order_id: UUID, data: LabOrderResultUpdate
) -> LabOrder:
    order = await get_order(db, order_id)
    update_data = data.model_dump(exclude_unset=True)
    if "result_notes" in update_data:
        order.result_notes = update_data["result_notes"]
    if update_data.get("result_date"):
        order.result_date = update_data["result_date"]
    if update_data.get("status"):
        _set_status(order, update_data["status"])
    await db.flush()
    return await get_order(db, order.id)


async def _remove_quietly(path: str) -> None:
    """Elimina un resultado del bucket; si el storage falla solo se registra."""
    try:
        await storage_service.remove_file(settings.LAB_RESULTS_BUCKET, path)
    except StorageException as e:
        logger.warning("No se pudo eliminar el resultado %s: %s", path, e.detail)


async def upload_result(
    db: AsyncSession,
    order_id: UUID,
    user: User,
    *,
    filename: str | None,
    content_type: str | None,
    content: bytes,
    ip_address: str | None = None,
) -> LabOrder:
    """Sube el PDF de resultados y marca la orden como Completado."""
    order = await get_order(db, order_id)
    storage_service.validate_pdf(filename, content_type, content)

    path = await storage_service.upload_file(
        settings.LAB_RESULTS_BUCKET,
        f"{RESULTS_FOLDER}/{order.id}",
        filename or "resultado.pdf",
        content,
    )
    previous = order.result_file_path

    try:
        order.result_file_path = path
        order.result_date = datetime.now(timezone.utc)
        _set_status(order, LabOrderStatus.COMPLETADO)
        await db.flush()
    except Exception:
        # El archivo recién subido no debe quedar huérfano
        await _remove_quietly(path)
        raise

    if previous and previous != path:
        await _remove_quietly(previous)

    await log_action(
        db,
        user_id=user.id,
        entity="lab_order",
        entity_id=str(order.id),
        action="upload_result",
        new_data={"result_file_path": path, "size": len(content)},
        ip_address=ip_address,
    )
    return await get_order(db, order.id)


async def delete_result(db: AsyncSession, order_id: UUID) -> LabOrder:
    order = await get_order(db, order_id)
    previous = order.result_file_path
    order.result_file_path = None
    order.result_date = None
    order.result_notes = None
    await db.flush()

    if previous:
        await _remove_quietly(previous)
    return await get_order(db, order.id)


async def result_url(order: LabOrder, expires_in: int | None = None) -> str:
    if not order.result_file_path:
        raise NotFoundException("Resultado", "La orden no tiene resultado cargado")
    return await storage_service.create_signed_url(
        settings.LAB_RESULTS_BUCKET, order.result_file_path, expires_in
    )


async def delete_order(
    db: AsyncSession,
    order_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> None:
    order = await get_order(db, order_id)
    previous = order.result_file_path

    await log_action(
        db,
        user_id=user.id,
        entity="lab_order",
        entity_id=str(order.id),
        action="delete",
        old_data={"patient_id": order.patient_id, "total_amount": order.total_amount},
        ip_address=ip_address,
    )
    await db.delete(order)
    await db.flush()

    if previous:
        await _remove_quietly(previous)
