"""
Definición de permisos RBAC por rol.
Mapea qué acciones puede realizar cada rol sobre cada recurso.
"""

from hah_erp.models.user import UserRole

ADMIN = UserRole.ADMIN
DOCTOR = UserRole.DOCTOR
NURSE = UserRole.NURSE
RECEPTIONIST = UserRole.RECEPTIONIST

ALL_ROLES = [ADMIN, DOCTOR, NURSE, RECEPTIONIST]

# ── Permisos por recurso ─────────────────────────────
# Formato: {recurso: {acción: [roles permitidos]}}
PERMISSIONS: dict[str, dict[str, list[UserRole]]] = {
    "user": {
        "read": [ADMIN],
        "create": [ADMIN],
        "update": [ADMIN],
    },
    "patient": {
        "read": ALL_ROLES,
        "create": ALL_ROLES,
        "update": ALL_ROLES,
        "delete": [ADMIN],
        "export": [ADMIN, RECEPTIONIST],
    },
    "staff": {
        "read": [ADMIN, RECEPTIONIST],
        "create": [ADMIN],
        "update": [ADMIN],
        "delete": [ADMIN],
        "export": [ADMIN],
    },
    "appointment": {
        "read": ALL_ROLES,
        "create": ALL_ROLES,
        "update": ALL_ROLES,
        "delete": [ADMIN, RECEPTIONIST],
    },
    "procedure_catalog": {
        "read": ALL_ROLES,
        "create": [ADMIN],
        "update": [ADMIN],
        "delete": [ADMIN],
    },
    "procedure_record": {
        "read": ALL_ROLES,
        "create": ALL_ROLES,
        "update": [ADMIN, NURSE, RECEPTIONIST],
        "delete": [ADMIN],
    },
    "inventory": {
        "read": ALL_ROLES,
        "create": [ADMIN, NURSE],
        "update": [ADMIN, NURSE],
        "delete": [ADMIN],
    },
    "lab": {
        "read": ALL_ROLES,
        "create": ALL_ROLES,
        "update": ALL_ROLES,
        "delete": [ADMIN],
        "catalog": [ADMIN],
    },
    "home_care": {
        "read": ALL_ROLES,
        "create": [ADMIN, RECEPTIONIST],
        "update": [ADMIN, RECEPTIONIST],
        "delete": [ADMIN],
    },
    "care_shift": {
        "read": ALL_ROLES,
        "create": [ADMIN, NURSE, RECEPTIONIST],
        "update": [ADMIN, NURSE, RECEPTIONIST],
        "delete": [ADMIN],
    },
    "contract": {
        "read": [ADMIN, RECEPTIONIST],
        "create": [ADMIN, RECEPTIONIST],
        "update": [ADMIN, RECEPTIONIST],
        "delete": [ADMIN],
        "export": [ADMIN],
    },
    "quote": {
        "read": ALL_ROLES,
        "create": [ADMIN, DOCTOR, RECEPTIONIST],
        "update": [ADMIN, DOCTOR, RECEPTIONIST],
        "delete": [ADMIN],
    },
    "medical_record": {
        "read": [ADMIN, DOCTOR, RECEPTIONIST],
        "create": [ADMIN, DOCTOR, RECEPTIONIST],
        "update": [ADMIN, RECEPTIONIST],
        "delete": [ADMIN],
    },
    "nursing": {
        "read": ALL_ROLES,
        "create": [ADMIN, DOCTOR, NURSE],
        "update": [ADMIN, DOCTOR, NURSE],
        "delete": [ADMIN, NURSE],
    },
    "clinical_history": {
        "read": [ADMIN, DOCTOR, NURSE],
        "create": [ADMIN, DOCTOR, NURSE],
        "update": [ADMIN, DOCTOR, NURSE],
        "delete": [ADMIN],
    },
    "portal": {
        "manage": [ADMIN, RECEPTIONIST],
    },
    "report": {
        "read": [ADMIN],
    },
    "audit_log": {
        "read": [ADMIN],
    },
}


def has_permission(role: UserRole, resource: str, action: str) -> bool:
    """Verifica si un rol tiene permiso para una acción en un recurso."""
    resource_perms = PERMISSIONS.get(resource, {})
    allowed_roles = resource_perms.get(action, [])
    return role in allowed_roles
