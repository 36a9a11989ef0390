"""Caregiver API routes.

Accessible-patient listing plus the server-side viewing context: which
patient's records later requests from this session should return.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.auth import ensure_not_patient, get_current_user, verify_bearer_token
from cuidador.database import get_db
from cuidador.models.auth import AuthSession
from cuidador.models.user import User
from cuidador.repositories.care import CareRepository, PatientNotFoundError
from cuidador.schemas.patient import (
    ClearContextResponse,
    PatientListResponse,
    PatientSummary,
    SwitchPatientRequest,
    SwitchPatientResponse,
    ViewerInfo,
    ViewingContext,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/caregiver", tags=["caregiver"])


def basic_summary(user: User) -> PatientSummary:
    """Project a patient onto the fields needed to pick it from a list."""
    return PatientSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        age=user.age,
        photo=user.photo,
        profile_type=user.profile_type,
    )


@router.get("/patients", response_model=PatientListResponse)
async def list_accessible_patients(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PatientListResponse:
    """List patients the viewer reaches through an active care relationship.

    Raises:
        HTTPException: 403 for patient profiles.
    """
    ensure_not_patient(user, "Patients cannot list other patients")
    patients = await CareRepository(db).list_accessible_patients(user.id)
    return PatientListResponse(patients=[PatientSummary.model_validate(p) for p in patients])


@router.get("/patients/basic", response_model=PatientListResponse)
async def list_accessible_patients_basic(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PatientListResponse:
    """Same listing as /patients with basic fields only."""
    ensure_not_patient(user, "Patients cannot list other patients")
    patients = await CareRepository(db).list_accessible_patients(user.id)
    return PatientListResponse(patients=[basic_summary(p) for p in patients])


@router.post("/switch-patient", response_model=SwitchPatientResponse)
async def switch_patient(
    body: SwitchPatientRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(verify_bearer_token),
    user: User = Depends(get_current_user),
) -> SwitchPatientResponse:
    """Store the selected patient on the session.

    Switching is idempotent: repeating it for the same patient is harmless.

    Raises:
        HTTPException: 403 for patient profiles or without an active
            relationship, 404 if the id is not a patient.
    """
    ensure_not_patient(user, "Patients cannot switch context")
    repo = CareRepository(db)

    try:
        patient = await repo.get_patient(body.patient_id)
    except PatientNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found",
        )

    if not await repo.has_active_relationship(patient.id, user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this patient's data",
        )

    await repo.set_viewing_context(session, patient.id)

    return SwitchPatientResponse(
        message="Context switched",
        patient=PatientSummary.model_validate(patient),
        session=ViewingContext(selected_patient_id=patient.id, caregiver_id=user.id),
    )


@router.delete("/clear-patient-context", response_model=ClearContextResponse)
async def clear_patient_context(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(verify_bearer_token),
    user: User = Depends(get_current_user),
) -> ClearContextResponse:
    """Return the session to the viewer's own records."""
    ensure_not_patient(user, "Patients cannot clear context")
    await CareRepository(db).clear_viewing_context(session)
    return ClearContextResponse(
        message="Context cleared",
        caregiver=ViewerInfo(id=user.id, name=user.name, email=user.email),
    )
