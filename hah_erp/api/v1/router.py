"""
Router principal de la API v1.
Agrupa todos los sub-routers de la versión 1.
"""

from fastapi import APIRouter

from hah_erp.api.v1.auth import router as auth_router
from hah_erp.api.v1.users import router as users_router
from hah_erp.api.v1.patients import router as patients_router
from hah_erp.api.v1.staff import router as staff_router
from hah_erp.api.v1.appointments import router as appointments_router
from hah_erp.api.v1.procedures import router as procedures_router
from hah_erp.api.v1.inventory import router as inventory_router
from hah_erp.api.v1.lab import router as lab_router
from hah_erp.api.v1.storage import router as storage_router
from hah_erp.api.v1.home_care import router as home_care_router
from hah_erp.api.v1.shifts import router as shifts_router
from hah_erp.api.v1.contracts import router as contracts_router
from hah_erp.api.v1.quotes import router as quotes_router
from hah_erp.api.v1.dashboard import router as dashboard_router
from hah_erp.api.v1.reports import router as reports_router
from hah_erp.api.v1.portal import router as portal_router
from hah_erp.api.v1.audit import router as audit_router
from hah_erp.api.v1.medical_records import router as medical_records_router
from hah_erp.api.v1.nursing import router as nursing_router
from hah_erp.api.v1.history import router as history_router

api_v1_router = APIRouter()

api_v1_router.include_router(auth_router, prefix="/auth", tags=["Autenticación"])
api_v1_router.include_router(users_router, prefix="/users", tags=["Usuarios"])
api_v1_router.include_router(patients_router, prefix="/patients", tags=["Pacientes"])
api_v1_router.include_router(staff_router, prefix="/staff", tags=["Personal"])
api_v1_router.include_router(appointments_router, prefix="/appointments", tags=["Citas"])
api_v1_router.include_router(procedures_router, prefix="/procedures", tags=["Procedimientos"])
api_v1_router.include_router(inventory_router, prefix="/inventory", tags=["Inventario"])
api_v1_router.include_router(lab_router, prefix="/lab", tags=["Laboratorio"])
api_v1_router.include_router(storage_router, prefix="/storage", tags=["Archivos"])
api_v1_router.include_router(home_care_router, prefix="/home-care", tags=["Cuidados en Casa"])
api_v1_router.include_router(shifts_router, prefix="/shifts", tags=["Turnos"])
api_v1_router.include_router(contracts_router, prefix="/contracts", tags=["Contratos"])
api_v1_router.include_router(quotes_router, prefix="/quotes", tags=["Cotizaciones"])
api_v1_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_v1_router.include_router(reports_router, prefix="/reports", tags=["Reportes"])
api_v1_router.include_router(portal_router, prefix="/portal", tags=["Portal de Pacientes"])
api_v1_router.include_router(audit_router, prefix="/audit-logs", tags=["Auditoría"])
api_v1_router.include_router(
    medical_records_router, prefix="/medical-records", tags=["Registros de Citas Médicas"]
)
api_v1_router.include_router(nursing_router, prefix="/nursing", tags=["Enfermería"])
api_v1_router.include_router(history_router, prefix="/history", tags=["Historial"])
