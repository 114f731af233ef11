"""
Modelos SQLAlchemy — exportar todos para que Alembic los detecte.
"""

from hah_erp.models.user import User, UserRole
from hah_erp.models.audit_log import AuditLog
from hah_erp.models.patient import Patient
from hah_erp.models.staff import Staff
from hah_erp.models.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    AppointmentVariant,
)
from hah_erp.models.procedure_catalog import ProcedureCatalog, ProcedureCatalogMaterial
from hah_erp.models.procedure_record import ProcedureRecord
from hah_erp.models.material import Material, MaterialStatus
from hah_erp.models.lab import (
    LabExam,
    LabOrder,
    LabOrderItem,
    LabOrderPriority,
    LabOrderStatus,
)
from hah_erp.models.home_care import (
    HomeCareContract,
    HomeCarePaymentMethod,
    HomeCarePeriod,
    HomeCarePlan,
)
from hah_erp.models.care_shift import CareShift
from hah_erp.models.contract import ContractSequence, ContractStatus, PatientContract
from hah_erp.models.quote import Quote, QuoteItem, QuoteStatus
from hah_erp.models.portal_user import PortalUser
from hah_erp.models.medical_record import MedicalAppointmentRecord
from hah_erp.models.nursing import (
    EliminationRecord,
    NursingEvolution,
    NursingEvolutionRecord,
    NursingHistoryEntry,
    NursingInitialAssessment,
    NursingVitalSign,
)
from hah_erp.models.history import ExamHistoryEntry, PatientHistoryEntry

__all__ = [
    "User",
    "UserRole",
    "AuditLog",
    "Patient",
    "Staff",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "AppointmentVariant",
    "ProcedureCatalog",
    "ProcedureCatalogMaterial",
    "ProcedureRecord",
    "Material",
    "MaterialStatus",
    "LabExam",
    "LabOrder",
    "LabOrderItem",
    "LabOrderPriority",
    "LabOrderStatus",
    "HomeCareContract",
    "HomeCarePaymentMethod",
    "HomeCarePeriod",
    "HomeCarePlan",
    "CareShift",
    "ContractSequence",
    "ContractStatus",
    "PatientContract",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "PortalUser",
    "MedicalAppointmentRecord",
    "EliminationRecord",
    "NursingEvolution",
    "NursingEvolutionRecord",
    "NursingHistoryEntry",
    "NursingInitialAssessment",
    "NursingVitalSign",
    "ExamHistoryEntry",
    "PatientHistoryEntry",
]
