"""
Endpoints de registros de enfermería: signos vitales, evoluciones,
valoración inicial, control de eliminación e historial.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.nursing import (
    EliminationCreate,
    EliminationResponse,
    EliminationUpdate,
    EvolutionCreate,
    EvolutionRecordCreate,
    EvolutionRecordResponse,
    EvolutionRecordUpdate,
    EvolutionResponse,
    EvolutionUpdate,
    InitialAssessmentCreate,
    InitialAssessmentResponse,
    InitialAssessmentUpdate,
    NursingHistoryCreate,
    NursingHistoryResponse,
    NursingHistoryUpdate,
    VitalSignCreate,
    VitalSignResponse,
    VitalSignUpdate,
)
from hah_erp.services import nursing_service

router = APIRouter()


# ── Signos vitales ───────────────────────────────────

@router.get("/vital-signs", response_model=list[VitalSignResponse])
async def list_vital_signs(
    patient_id: UUID | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500, description="Por defecto 50 por paciente, 100 en total"),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.list_vital_signs(db, patient_id, limit)


@router.post("/vital-signs", response_model=VitalSignResponse, status_code=201)
async def create_vital_sign(
    data: VitalSignCreate,
    user: User = Depends(require_permission("nursing", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.create_vital_sign(db, data)


@router.put("/vital-signs/{entry_id}", response_model=VitalSignResponse)
async def update_vital_sign(
    entry_id: UUID,
    data: VitalSignUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_vital_sign(db, entry_id, data)


@router.delete("/vital-signs/{entry_id}", status_code=204)
async def delete_vital_sign(
    entry_id: UUID,
    user: User = Depends(require_permission("nursing", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_vital_sign(db, entry_id)


# ── Evoluciones ──────────────────────────────────────

@router.get("/evolutions", response_model=list[EvolutionResponse])
async def list_evolutions(
    patient_id: UUID = Query(...),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.list_evolutions(db, patient_id)


@router.get("/evolutions/{evolution_id}", response_model=EvolutionResponse)
async def get_evolution(
    evolution_id: UUID,
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.get_evolution(db, evolution_id)


@router.post("/evolutions", response_model=EvolutionResponse, status_code=201)
async def create_evolution(
    data: EvolutionCreate,
    user: User = Depends(require_permission("nursing", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.create_evolution(db, data)


@router.put("/evolutions/{evolution_id}", response_model=EvolutionResponse)
async def update_evolution(
    evolution_id: UUID,
    data: EvolutionUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_evolution(db, evolution_id, data)


@router.delete("/evolutions/{evolution_id}", status_code=204)
async def delete_evolution(
    evolution_id: UUID,
    user: User = Depends(require_permission("nursing", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_evolution(db, evolution_id)


@router.post(
    "/evolutions/{evolution_id}/records",
    response_model=EvolutionRecordResponse,
    status_code=201,
)
async def add_evolution_record(
    evolution_id: UUID,
    data: EvolutionRecordCreate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.add_evolution_record(db, evolution_id, data)


@router.put("/evolution-records/{record_id}", response_model=EvolutionRecordResponse)
async def update_evolution_record(
    record_id: UUID,
    data: EvolutionRecordUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_evolution_record(db, record_id, data)


@router.delete("/evolution-records/{record_id}", status_code=204)
async def delete_evolution_record(
    record_id: UUID,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_evolution_record(db, record_id)


# ── Valoración inicial ───────────────────────────────

@router.get("/assessments", response_model=list[InitialAssessmentResponse])
async def list_assessments(
    patient_id: UUID | None = Query(None),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.list_assessments(db, patient_id)


@router.get("/assessments/latest", response_model=InitialAssessmentResponse | None)
async def latest_assessment(
    patient_id: UUID = Query(...),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Valoración más reciente del paciente, o null si no tiene."""
    return await nursing_service.get_latest_assessment(db, patient_id)


@router.post("/assessments", response_model=InitialAssessmentResponse, status_code=201)
async def create_assessment(
    data: InitialAssessmentCreate,
    user: User = Depends(require_permission("nursing", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.create_assessment(db, data)


@router.put("/assessments/{assessment_id}", response_model=InitialAssessmentResponse)
async def update_assessment(
    assessment_id: UUID,
    data: InitialAssessmentUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_assessment(db, assessment_id, data)


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(
    assessment_id: UUID,
    user: User = Depends(require_permission("nursing", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_assessment(db, assessment_id)


# ── Control de eliminación ───────────────────────────

@router.get("/eliminations", response_model=list[EliminationResponse])
async def list_eliminations(
    patient_id: UUID = Query(...),
    limit: int = Query(30, ge=1, le=366),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.list_eliminations(db, patient_id, limit)


@router.get("/eliminations/by-date", response_model=EliminationResponse | None)
async def elimination_by_date(
    patient_id: UUID = Query(...),
    day: date = Query(..., description="Fecha del registro"),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.get_elimination_by_date(db, patient_id, day)


@router.get("/eliminations/{record_id}", response_model=EliminationResponse)
async def get_elimination(
    record_id: UUID,
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.get_elimination(db, record_id)


@router.post("/eliminations", response_model=EliminationResponse, status_code=201)
async def create_elimination(
    data: EliminationCreate,
    user: User = Depends(require_permission("nursing", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.create_elimination(db, data)


@router.put("/eliminations/{record_id}", response_model=EliminationResponse)
async def update_elimination(
    record_id: UUID,
    data: EliminationUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_elimination(db, record_id, data)


@router.delete("/eliminations/{record_id}", status_code=204)
async def delete_elimination(
    record_id: UUID,
    user: User = Depends(require_permission("nursing", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_elimination(db, record_id)


# ── Historial de enfermería ──────────────────────────

@router.get("/history", response_model=list[NursingHistoryResponse])
async def list_history(
    patient_id: UUID = Query(...),
    user: User = Depends(require_permission("nursing", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.list_history(db, patient_id)


@router.post("/history", response_model=NursingHistoryResponse, status_code=201)
async def create_history_entry(
    data: NursingHistoryCreate,
    user: User = Depends(require_permission("nursing", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.create_history_entry(db, data)


@router.put("/history/{entry_id}", response_model=NursingHistoryResponse)
async def update_history_entry(
    entry_id: UUID,
    data: NursingHistoryUpdate,
    user: User = Depends(require_permission("nursing", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await nursing_service.update_history_entry(db, entry_id, data)


@router.delete("/history/{entry_id}", status_code=204)
async def delete_history_entry(
    entry_id: UUID,
    user: User = Depends(require_permission("nursing", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await nursing_service.delete_history_entry(db, entry_id)
