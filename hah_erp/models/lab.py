"""
Modelos de laboratorio: catálogo de exámenes, órdenes e ítems.

El precio de cada ítem de la orden se congela al crearla con el recargo
vigente, así que los cambios posteriores del catálogo no alteran órdenes
ya emitidas.
"""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base


class LabOrderPriority(str, enum.Enum):
    URGENTE = "urgente"
    NORMAL = "normal"
    PROGRAMADA = "programada"


class LabOrderStatus(str, enum.Enum):
    """Estados del flujo de una orden de laboratorio."""
    PENDIENTE = "Pendiente"
    EN_PROCESO = "En Proceso"
    COMPLETADO = "Completado"
    CANCELADO = "Cancelado"


class LabExam(Base):
    __tablename__ = "laboratory_exams"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Precio de laboratorio (S/)"
    )
    category: Mapped[str | None] = mapped_column(String(100), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    result_time: Mapped[str | None] = mapped_column(
        String(100), comment="Tiempo de entrega del resultado"
    )
    preparation: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<LabExam {self.code} {self.name}>"


class LabOrder(Base):
    """Orden de exámenes de laboratorio para un paciente."""
    __tablename__ = "lab_exam_orders"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id"), nullable=False, index=True
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    physician_name: Mapped[str | None] = mapped_column(String(200))
    priority: Mapped[LabOrderPriority] = mapped_column(
        Enum(LabOrderPriority), nullable=False, default=LabOrderPriority.NORMAL
    )
    observations: Mapped[str | None] = mapped_column(Text)
    status: Mapped[LabOrderStatus] = mapped_column(
        Enum(LabOrderStatus), nullable=False, default=LabOrderStatus.PENDIENTE
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )

    # ── Resultado ────────────────────────────────────
    result_file_path: Mapped[str | None] = mapped_column(
        String(500), comment="Ruta del PDF dentro del bucket de resultados"
    )
    result_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    result_notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relaciones ───────────────────────────────────
    items: Mapped[list["LabOrderItem"]] = relationship(
        "LabOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    patient: Mapped["Patient"] = relationship("Patient", lazy="selectin")  # noqa: F821

    __table_args__ = (
        Index("idx_lab_order_status_date", "status", "order_date"),
    )

    def __repr__(self) -> str:
        return f"<LabOrder {self.id} [{self.status.value}]>"


class LabOrderItem(Base):
    __tablename__ = "lab_exam_order_items"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lab_exam_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exam_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("laboratory_exams.id", ondelete="SET NULL")
    )
    exam_code: Mapped[str] = mapped_column(String(30), nullable=False)
    exam_name: Mapped[str] = mapped_column(String(300), nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Precio al cliente con recargo"
    )
    status: Mapped[LabOrderStatus] = mapped_column(
        Enum(LabOrderStatus), nullable=False, default=LabOrderStatus.PENDIENTE
    )

    order: Mapped["LabOrder"] = relationship("LabOrder", back_populates="items")

    def __repr__(self) -> str:
        return f"<LabOrderItem {self.exam_code} S/{self.price}>"
