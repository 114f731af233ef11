"""contract sequences, medical appointment records, nursing and history

Revision ID: 0002_clinical_records
Revises: 0001_initial
Create Date: 2026-10-19 15:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002_clinical_records"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID = postgresql.UUID(as_uuid=True)
JSONB = postgresql.JSONB()
MONEY = sa.Numeric(12, 2)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def _patient_fk() -> sa.Column:
    return sa.Column(
        "patient_id", UUID, sa.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    # ── Correlativo de contratos ─────────────────────
    op.create_table(
        "contract_sequences",
        sa.Column("id", UUID, primary_key=True),
        sa.Column("year", sa.SmallInteger, nullable=False, unique=True),
        sa.Column("last_number", sa.Integer, nullable=False, server_default="0"),
    )
    # Arranca cada año desde el mayor número ya emitido
    op.execute(
        """
        INSERT INTO contract_sequences (id, year, last_number)
        SELECT gen_random_uuid(),
               CAST(split_part(contract_number, '-', 2) AS SMALLINT),
               MAX(CAST(split_part(contract_number, '-', 3) AS INTEGER))
        FROM patient_contracts
        WHERE contract_number ~ '^CON-[0-9]{4}-[0-9]+$'
        GROUP BY split_part(contract_number, '-', 2)
        """
    )

    # ── Registros de citas médicas ───────────────────
    op.create_table(
        "medical_appointment_records",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "appointment_id",
            UUID,
            sa.ForeignKey("appointments.id", ondelete="SET NULL"),
            unique=True,
        ),
        sa.Column("record_date", sa.Date, nullable=False),
        sa.Column("patient_id", UUID, sa.ForeignKey("patients.id", ondelete="SET NULL")),
        sa.Column("patient_name", sa.String(200)),
        sa.Column("appointment_type", sa.String(30), nullable=False, server_default="consulta"),
        sa.Column("doctor_name", sa.String(200)),
        sa.Column("income", MONEY, nullable=False, server_default="0"),
        sa.Column("cost", MONEY, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_medical_record_date", "medical_appointment_records", ["record_date"])
    op.create_index(
        "ix_medical_appointment_records_patient_id", "medical_appointment_records", ["patient_id"]
    )

    # ── Enfermería ───────────────────────────────────
    op.create_table(
        "nursing_vital_signs",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("assessment_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("nurse_name", sa.String(200), nullable=False),
        sa.Column("blood_pressure_systolic", sa.String(10)),
        sa.Column("blood_pressure_diastolic", sa.String(10)),
        sa.Column("heart_rate", sa.SmallInteger),
        sa.Column("respiratory_rate", sa.SmallInteger),
        sa.Column("spo2", sa.SmallInteger),
        sa.Column("temperature", sa.Numeric(4, 1)),
        sa.Column("capillary_glucose", sa.SmallInteger),
        sa.Column("observation", sa.Text),
        *_timestamps(),
    )
    op.create_index("idx_vital_sign_datetime", "nursing_vital_signs", ["assessment_datetime"])
    op.create_index("ix_nursing_vital_signs_patient_id", "nursing_vital_signs", ["patient_id"])

    op.create_table(
        "nursing_evolutions",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("age", sa.Integer),
        sa.Column("evolution_date", sa.Date, nullable=False),
        sa.Column("shift", sa.String(30)),
        sa.Column("nurse_name", sa.String(200), nullable=False),
        sa.Column("dependency_grade", sa.String(50)),
        sa.Column("nursing_assessment", sa.Text),
        sa.Column("pain_scale", sa.SmallInteger),
        *_timestamps(),
        sa.CheckConstraint("pain_scale BETWEEN 0 AND 10", name="ck_evolution_pain_scale"),
    )
    op.create_index("ix_nursing_evolutions_patient_id", "nursing_evolutions", ["patient_id"])

    op.create_table(
        "nursing_evolution_records",
        sa.Column("id", UUID, primary_key=True),
        sa.Column(
            "evolution_id",
            UUID,
            sa.ForeignKey("nursing_evolutions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("nanda_diagnosis", sa.Text),
        sa.Column("noc_objective", sa.Text),
        sa.Column("time", sa.String(5)),
        sa.Column("nic_interventions", sa.Text),
        sa.Column("evaluation", sa.Text),
        sa.Column("observation", sa.Text),
        sa.Column("record_order", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        "ix_nursing_evolution_records_evolution_id", "nursing_evolution_records", ["evolution_id"]
    )

    op.create_table(
        "nursing_initial_assessments",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("patient_name", sa.String(200)),
        sa.Column("assessment_date", sa.Date, nullable=False),
        sa.Column("nurse_name", sa.String(200), nullable=False),
        sa.Column("age", sa.Integer),
        sa.Column("weight", sa.Numeric(5, 1)),
        sa.Column("height", sa.Numeric(5, 1)),
        sa.Column("blood_type", sa.String(10)),
        sa.Column("medical_diagnosis", sa.Text),
        sa.Column("attending_physician", sa.String(200)),
        sa.Column("pathological_history", sa.Text),
        sa.Column("prophylactic_medications", sa.Text),
        sa.Column("medication_allergies", sa.Text),
        sa.Column("vital_signs", JSONB),
        sa.Column("physical_exam", JSONB),
        sa.Column("nursing_actions", sa.Text),
        sa.Column("pending_actions", sa.Text),
        *_timestamps(),
    )
    op.create_index(
        "ix_nursing_initial_assessments_patient_id", "nursing_initial_assessments", ["patient_id"]
    )

    op.create_table(
        "elimination_records",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("patient_name", sa.String(200), nullable=False),
        sa.Column("age", sa.Integer),
        sa.Column("nurse_name", sa.String(200), nullable=False),
        sa.Column("record_date", sa.Date, nullable=False),
        sa.Column("feces", JSONB),
        sa.Column("urine", JSONB),
        *_timestamps(),
    )
    op.create_index(
        "idx_elimination_patient_date", "elimination_records", ["patient_id", "record_date"]
    )
    op.create_index("ix_elimination_records_patient_id", "elimination_records", ["patient_id"])

    op.create_table(
        "nursing_history",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("entry_date", sa.Date, nullable=False),
        sa.Column("entry_type", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("vital_signs", JSONB),
        sa.Column("attachments", JSONB),
        sa.Column("nurse_name", sa.String(200)),
        *_timestamps(),
    )
    op.create_index("ix_nursing_history_patient_id", "nursing_history", ["patient_id"])

    # ── Historial del paciente ───────────────────────
    op.create_table(
        "patient_history",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("entry_date", sa.Date, nullable=False),
        sa.Column("entry_type", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("notes", sa.Text),
        sa.Column("attachments", JSONB),
        *_timestamps(),
    )
    op.create_index("ix_patient_history_patient_id", "patient_history", ["patient_id"])

    op.create_table(
        "exam_history",
        sa.Column("id", UUID, primary_key=True),
        _patient_fk(),
        sa.Column("exam_date", sa.Date, nullable=False),
        sa.Column("exam_type", sa.String(100), nullable=False),
        sa.Column("exam_name", sa.String(200), nullable=False),
        sa.Column("exam_code", sa.String(50)),
        sa.Column("results", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("ordered_by", sa.String(200)),
        sa.Column("performed_by", sa.String(200)),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pendiente"),
        sa.Column("attachments", JSONB),
        *_timestamps(),
    )
    op.create_index("ix_exam_history_patient_id", "exam_history", ["patient_id"])


def downgrade() -> None:
    for table in (
        "exam_history",
        "patient_history",
        "nursing_history",
        "elimination_records",
        "nursing_initial_assessments",
        "nursing_evolution_records",
        "nursing_evolutions",
        "nursing_vital_signs",
        "medical_appointment_records",
        "contract_sequences",
    ):
        op.drop_table(table)
