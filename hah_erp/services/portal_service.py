"""
Servicio del portal de pacientes.

El staff genera las credenciales (usuario = DNI del paciente, clave de
8 caracteres sin caracteres ambiguos) y el paciente consulta sus órdenes
de laboratorio y descarga los PDF de resultados.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.jwt import create_portal_token
from hah_erp.config import get_settings
from hah_erp.core.exceptions import CredentialsException, NotFoundException, ValidationException
from hah_erp.core.security import generate_portal_password, hash_password, verify_password
from hah_erp.models.lab import LabOrder
from hah_erp.models.patient import Patient
from hah_erp.models.portal_user import PortalUser
from hah_erp.models.user import User
from hah_erp.schemas.portal import (
    PortalAccountResponse,
    PortalLoginRequest,
    PortalLoginResponse,
    PortalOrderItem,
    PortalOrderResponse,
    PortalPatientProfile,
)
from hah_erp.services import lab_service
from hah_erp.services.audit_service import log_action

settings = get_settings()
logger = logging.getLogger(__name__)


def _patient_dni(patient: Patient) -> str:
    dni = (patient.dni or "").strip()
    if not dni:
        raise ValidationException("El paciente no tiene DNI registrado")
    return dni


async def _portal_user_for(db: AsyncSession, patient_id: UUID) -> PortalUser | None:
    result = await db.execute(select(PortalUser).where(PortalUser.patient_id == patient_id))
    return result.scalar_one_or_none()


async def ensure_account(
    db: AsyncSession,
    patient_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> PortalAccountResponse:
    """Crea el acceso al portal si no existe; si existe no revela la clave."""
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFoundException("Paciente")
    dni = _patient_dni(patient)

    existing = await _portal_user_for(db, patient.id)
    if existing:
        return PortalAccountResponse(dni=existing.dni, already_exists=True)

    password = generate_portal_password()
    portal_user = PortalUser(
        patient_id=patient.id,
        dni=dni,
        hashed_password=hash_password(password),
    )
    db.add(portal_user)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="portal_user",
        entity_id=str(portal_user.id),
        action="create",
        new_data={"patient_id": patient.id, "dni": dni},
        ip_address=ip_address,
    )
    logger.info("Acceso al portal creado para paciente %s", patient.id)
    return PortalAccountResponse(dni=dni, password=password, already_exists=False)


async def reset_password_by_order(
    db: AsyncSession,
    order_id: UUID,
    user: User,
    ip_address: str | None = None,
) -> PortalAccountResponse:
    """Genera una nueva clave para el paciente de la orden (crea el acceso si falta)."""
    order = await lab_service.get_order(db, order_id)
    patient = await db.get(Patient, order.patient_id)
    if not patient:
        raise NotFoundException("Paciente")
    dni = _patient_dni(patient)

    password = generate_portal_password()
    portal_user = await _portal_user_for(db, patient.id)
    if portal_user:
        portal_user.dni = dni
        portal_user.hashed_password = hash_password(password)
        portal_user.is_active = True
    else:
        portal_user = PortalUser(
            patient_id=patient.id, dni=dni, hashed_password=hash_password(password)
        )
        db.add(portal_user)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="portal_user",
        entity_id=str(portal_user.id),
        action="reset_password",
        new_data={"patient_id": patient.id, "order_id": order.id},
        ip_address=ip_address,
    )
    return PortalAccountResponse(dni=dni, password=password, already_exists=False)


async def login(db: AsyncSession, data: PortalLoginRequest) -> PortalLoginResponse:
    result = await db.execute(
        select(PortalUser).where(PortalUser.dni == data.dni, PortalUser.is_active.is_(True))
    )
    portal_user = result.scalar_one_or_none()

    if not portal_user or not verify_password(data.password, portal_user.hashed_password):
        logger.warning("Login fallido en el portal para dni=%s", data.dni)
        raise CredentialsException("DNI o contraseña incorrectos")

    portal_user.last_login = datetime.now(timezone.utc)
    await db.flush()

    return PortalLoginResponse(
        access_token=create_portal_token(portal_user.id, portal_user.patient_id),
        expires_in=settings.PORTAL_TOKEN_EXPIRE_MINUTES * 60,
        patient=PortalPatientProfile.model_validate(portal_user.patient),
    )


def profile(portal_user: PortalUser) -> PortalPatientProfile:
    return PortalPatientProfile.model_validate(portal_user.patient)


def _to_portal_order(order: LabOrder) -> PortalOrderResponse:
    return PortalOrderResponse(
        id=order.id,
        order_date=order.order_date,
        physician_name=order.physician_name,
        status=order.status.value,
        has_result=bool(order.result_file_path),
        result_date=order.result_date,
        result_notes=order.result_notes,
        items=[
            PortalOrderItem(
                exam_code=item.exam_code, exam_name=item.exam_name, status=item.status.value
            )
            for item in order.items
        ],
    )


async def my_orders(db: AsyncSession, portal_user: PortalUser) -> list[PortalOrderResponse]:
    orders = await lab_service.list_orders_by_patient(db, portal_user.patient_id)
    return [_to_portal_order(order) for order in orders]


async def _own_order(db: AsyncSession, portal_user: PortalUser, order_id: UUID) -> LabOrder:
    """Orden del propio paciente; las ajenas se reportan como inexistentes."""
    result = await db.execute(
        select(LabOrder).where(
            LabOrder.id == order_id, LabOrder.patient_id == portal_user.patient_id
        )
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundException("Orden de laboratorio", "Orden de laboratorio no encontrada")
    return order


async def order_detail(
    db: AsyncSession, portal_user: PortalUser, order_id: UUID
) -> PortalOrderResponse:
    return _to_portal_order(await _own_order(db, portal_user, order_id))


async def result_url(db: AsyncSession, portal_user: PortalUser, order_id: UUID) -> str:
    order = await _own_order(db, portal_user, order_id)
    return await lab_service.result_url(order)
