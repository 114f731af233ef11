"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID = postgresql.UUID(as_uuid=True)
JSONB = postgresql.JSONB()
MONEY = sa.Numeric(12, 2)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            )
        )
    return columns


def _money(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, MONEY, nullable=True)
    return sa.Column(name, MONEY, nullable=False, server_default="0")


def upgrade() -> None:
    # ── Usuarios y auditoría ─────────────────────────
    op.create_table(
        "users",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "DOCTOR", "NURSE", "RECEPTIONIST", name="userrole"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20)),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "audit_log",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("user_id", UUID, sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("entity", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("old_data", JSONB),
        sa.Column("new_data", JSONB),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("user_agent", sa.Text),
        *_timestamps(updated=False),
    )
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"])
    op.create_index("ix_audit_log_entity", "audit_log", ["entity"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])

    # ── Pacientes y personal ─────────────────────────
    op.create_table(
        "patients",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("dni", sa.String(15), unique=True),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("age", sa.Integer),
        sa.Column("gender", sa.String(1)),
        sa.Column("address", sa.String(500)),
        sa.Column("district", sa.String(100)),
        sa.Column("last_visit", sa.Date),
        sa.Column("status", sa.String(20), nullable=False, server_default="Activo"),
        sa.Column("blood_type", sa.String(5)),
        sa.Column("allergies", JSONB),
        sa.Column("current_medications", JSONB),
        sa.Column("primary_physician", sa.String(200)),
        sa.Column("primary_diagnosis", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("emergency_contact_name", sa.String(200)),
        sa.Column("emergency_contact_phone", sa.String(20)),
        *_timestamps(),
    )
    op.create_index("idx_patient_name", "patients", ["name"])
    op.create_index("idx_patient_district", "patients", ["district"])

    op.create_table(
        "staff",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("age", sa.Integer),
        sa.Column("gender", sa.String(1)),
        sa.Column("address", sa.String(500)),
        sa.Column("position", sa.String(100), nullable=False),
        sa.Column("department", sa.String(100), nullable=False),
        _money("salary", nullable=True),
        sa.Column("hire_date", sa.Date),
        sa.Column("status", sa.String(20), nullable=False, server_default="Activo"),
        sa.Column("qualifications", JSONB),
        sa.Column("certifications", JSONB),
        sa.Column("emergency_contact", sa.String(200)),
        sa.Column("emergency_phone", sa.String(20)),
        *_timestamps(),
    )
    op.create_index("idx_staff_department", "staff", ["department"])
    op.create_index("idx_staff_hire_date", "staff", ["hire_date"])

    # ── Procedimientos e inventario ──────────────────
    op.create_table(
        "procedure_catalog",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        _money("base_price"),
        _money("professional_fees"),
        _money("mobility_cost"),
        _money("total_cost"),
        _money("utility"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("idx_procedure_catalog_name", "procedure_catalog", ["name"])

    op.create_table(
        "procedure_catalog_materials",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "procedure_id",
            UUID,
            sa.ForeignKey("procedure_catalog.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("material_name", sa.String(200), nullable=False),
        sa.Column("quantity", MONEY, nullable=False, server_default="1"),
        _money("unit_cost"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_procedure_catalog_materials_procedure_id",
        "procedure_catalog_materials",
        ["procedure_id"],
    )

    op.create_table(
        "procedure_records",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("record_date", sa.Date, nullable=False),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id", ondelete="SET NULL")),
        sa.Column("patient_name", sa.String(200)),
        sa.Column(
            "procedure_catalog_id",
            UUID,
            sa.ForeignKey("procedure_catalog.id", ondelete="SET NULL"),
        ),
        sa.Column("procedure_name", sa.String(200)),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("district", sa.String(100)),
        _money("yape"),
        _money("plin"),
        _money("transfer_deposit"),
        _money("card_link_pos"),
        _money("cash"),
        sa.Column("operation_number", sa.String(50)),
        _money("material_expenses"),
        _money("fuel"),
        _money("additional_cost"),
        _money("utility", nullable=True),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_procedure_record_date", "procedure_records", ["record_date"])
    op.create_index("ix_procedure_records_patient_id", "procedure_records", ["patient_id"])

    op.create_table(
        "materials",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        _money("unit_cost"),
        sa.Column("stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_stock", sa.Integer),
        sa.Column("unit", sa.String(30), nullable=False, server_default="unidades"),
        sa.Column(
            "status",
            sa.Enum("IN_STOCK", "LOW_STOCK", "OUT_OF_STOCK", "EXPIRED", name="materialstatus"),
            nullable=False,
        ),
        sa.Column("last_restocked", sa.Date),
        sa.Column("expiry_date", sa.Date),
        sa.Column("supplier", sa.String(200)),
        sa.Column("category", sa.String(100)),
        sa.Column("description", sa.Text),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "appointments",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "variant",
            sa.Enum("MEDICINA", "PROCEDIMIENTOS", name="appointmentvariant"),
            nullable=False,
        ),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id", ondelete="SET NULL")),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("patient_email", sa.String(255)),
        sa.Column("patient_phone", sa.String(20)),
        sa.Column("doctor_name", sa.String(200)),
        sa.Column("doctor_specialty", sa.String(100)),
        sa.Column("appointment_date", sa.Date, nullable=False),
        sa.Column("appointment_time", sa.String(5), nullable=False),
        sa.Column("duration", sa.Integer, server_default="30"),
        sa.Column(
            "type",
            sa.Enum(
                "CONSULTA", "EXAMEN", "EMERGENCIA", "SEGUIMIENTO", "PROCEDIMIENTO",
                name="appointmenttype",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "SCHEDULED", "CONFIRMED", "COMPLETED", "CANCELLED", "NO_SHOW",
                name="appointmentstatus",
            ),
            nullable=False,
        ),
        sa.Column("location", sa.String(300)),
        sa.Column("notes", sa.Text),
        sa.Column(
            "procedure_catalog_id",
            UUID,
            sa.ForeignKey("procedure_catalog.id", ondelete="SET NULL"),
        ),
        sa.Column("procedure_name", sa.String(200)),
        *_timestamps(),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index(
        "idx_appointment_variant_date", "appointments", ["variant", "appointment_date"]
    )

    # ── Laboratorio ──────────────────────────────────
    lab_status = sa.Enum(
        "PENDIENTE", "EN_PROCESO", "COMPLETADO", "CANCELADO", name="laborderstatus"
    )

    op.create_table(
        "laboratory_exams",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("code", sa.String(30), nullable=False, unique=True),
        sa.Column("name", sa.String(300), nullable=False),
        _money("price"),
        sa.Column("category", sa.String(100)),
        sa.Column("description", sa.Text),
        sa.Column("result_time", sa.String(100)),
        sa.Column("preparation", sa.Text),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_laboratory_exams_category", "laboratory_exams", ["category"])

    op.create_table(
        "lab_exam_orders",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("order_date", sa.Date, nullable=False),
        sa.Column("physician_name", sa.String(200)),
        sa.Column(
            "priority",
            sa.Enum("URGENTE", "NORMAL", "PROGRAMADA", name="laborderpriority"),
            nullable=False,
        ),
        sa.Column("observations", sa.Text),
        sa.Column("status", lab_status, nullable=False),
        _money("total_amount"),
        sa.Column("result_file_path", sa.String(500)),
        sa.Column("result_date", sa.DateTime(timezone=True)),
        sa.Column("result_notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("ix_lab_exam_orders_patient_id", "lab_exam_orders", ["patient_id"])
    op.create_index(
        "idx_lab_order_status_date", "lab_exam_orders", ["status", "order_date"]
    )

    op.create_table(
        "lab_exam_order_items",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "order_id",
            UUID,
            sa.ForeignKey("lab_exam_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "exam_id", UUID, sa.ForeignKey("laboratory_exams.id", ondelete="SET NULL")
        ),
        sa.Column("exam_code", sa.String(30), nullable=False),
        sa.Column("exam_name", sa.String(300), nullable=False),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("status", lab_status, nullable=False),
    )
    op.create_index(
        "ix_lab_exam_order_items_order_id", "lab_exam_order_items", ["order_id"]
    )

    op.create_table(
        "patient_portal_users",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "patient_id",
            UUID,
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("dni", sa.String(15), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_patient_portal_users_dni", "patient_portal_users", ["dni"])

    # ── Cuidados en casa y turnos ────────────────────
    op.create_table(
        "home_care_plans",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("shift", sa.String(30)),
        _money("monthly_amount"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(updated=False),
    )

    op.create_table(
        "home_care_contracts",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id"), nullable=False),
        sa.Column(
            "plan_id", UUID, sa.ForeignKey("home_care_plans.id", ondelete="SET NULL")
        ),
        sa.Column("responsible_family_member", sa.String(200)),
        sa.Column("start_time", sa.String(20), nullable=False, server_default="8:00 AM"),
        sa.Column("start_date", sa.Date),
        sa.Column("plan_name", sa.String(150)),
        _money("monthly_amount"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("patient_id", name="uq_home_care_contract_patient"),
    )

    op.create_table(
        "home_care_periods",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "contract_id",
            UUID,
            sa.ForeignKey("home_care_contracts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("item_number", sa.Integer, nullable=False),
        sa.Column("payment_number", sa.Integer, nullable=False),
        sa.Column("quincena_payment_date", sa.Date),
        sa.Column("shift", sa.String(30), nullable=False, server_default="24X24"),
        sa.Column("date_from", sa.Date, nullable=False),
        sa.Column("date_to", sa.Date, nullable=False),
        _money("base_amount"),
        sa.Column("holiday_dates", JSONB),
        _money("holiday_amount"),
        sa.Column("pause_hours", sa.Integer, nullable=False, server_default="0"),
        sa.Column("pause_dates", JSONB),
        _money("total_amount"),
        sa.Column("paid_at", sa.Date),
        sa.Column(
            "payment_method",
            sa.Enum(
                "TRANSFERENCIA", "YAPE", "PLIN", "EFECTIVO", "TARJETA",
                name="homecarepaymentmethod",
            ),
        ),
        sa.Column("operation_number", sa.String(50)),
        sa.Column("invoice_number", sa.String(50)),
        *_timestamps(),
    )
    op.create_index(
        "ix_home_care_periods_contract_id", "home_care_periods", ["contract_id"]
    )

    op.create_table(
        "care_shifts",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("shift_date", sa.Date, nullable=False),
        sa.Column("start_time", sa.String(5)),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id", ondelete="SET NULL")),
        sa.Column("responsible_family_member", sa.String(200)),
        sa.Column("district", sa.String(100)),
        sa.Column("shift", sa.String(30)),
        _money("amount_due"),
        sa.Column("payment_method", sa.String(30)),
        sa.Column("operation_number", sa.String(50)),
        sa.Column("nurse", sa.String(200)),
        _money("extra_expenses"),
        _money("utility", nullable=True),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_care_shift_date", "care_shifts", ["shift_date"])
    op.create_index("ix_care_shifts_patient_id", "care_shifts", ["patient_id"])

    # ── Contratos y cotizaciones ─────────────────────
    op.create_table(
        "patient_contracts",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("contract_number", sa.String(20), nullable=False, unique=True),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("contract_date", sa.Date, nullable=False),
        sa.Column("responsible_family_member", sa.String(200), nullable=False),
        sa.Column("service_type", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date),
        sa.Column("start_time", sa.String(5)),
        _money("monthly_amount"),
        _money("hourly_rate", nullable=True),
        sa.Column("payment_method", sa.String(30), nullable=False),
        sa.Column(
            "status",
            sa.Enum("ACTIVO", "INACTIVO", "SUSPENDIDO", "FINALIZADO", name="contractstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index(
        "ix_patient_contracts_contract_number", "patient_contracts", ["contract_number"]
    )
    op.create_index("ix_patient_contracts_patient_id", "patient_contracts", ["patient_id"])

    op.create_table(
        "quotes",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id", ondelete="SET NULL")),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("patient_email", sa.String(255)),
        sa.Column("patient_phone", sa.String(20)),
        sa.Column("doctor_name", sa.String(200)),
        _money("total_amount"),
        sa.Column(
            "status",
            sa.Enum("DRAFT", "SENT", "ACCEPTED", "REJECTED", "EXPIRED", name="quotestatus"),
            nullable=False,
        ),
        sa.Column("valid_until", sa.Date, nullable=False),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )

    op.create_table(
        "quote_items",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "quote_id", UUID, sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_quote_items_quote_id", "quote_items", ["quote_id"])


def downgrade() -> None:
    for table in (
        "quote_items",
        "quotes",
        "patient_contracts",
        "care_shifts",
        "home_care_periods",
        "home_care_contracts",
        "home_care_plans",
        "patient_portal_users",
        "lab_exam_order_items",
        "lab_exam_orders",
        "laboratory_exams",
        "appointments",
        "materials",
        "procedure_records",
        "procedure_catalog_materials",
        "procedure_catalog",
        "staff",
        "patients",
        "audit_log",
        "users",
    ):
        op.drop_table(table)

    for enum_name in (
        "quotestatus",
        "contractstatus",
        "homecarepaymentmethod",
        "laborderpriority",
        "laborderstatus",
        "appointmentstatus",
        "appointmenttype",
        "appointmentvariant",
        "materialstatus",
        "userrole",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
