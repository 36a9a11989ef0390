"""Medical record routes.

The effective patient comes from the optional ``patientId`` query parameter
when the client sends one, otherwise from the session's viewing context
(see ``CareRepository.effective_patient_id``).
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.auth import get_current_user, verify_bearer_token
from cuidador.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cuidador.database import get_db
from cuidador.models.auth import AuthSession
from cuidador.models.medical import VitalSignKind
from cuidador.models.user import User
from cuidador.repositories.care import CareRepository
from cuidador.repositories.medical import MedicalRepository
from cuidador.schemas.medical import (
    MedicationResponse,
    VitalSignKind as VitalSignKindSchema,
    VitalSignReadingResponse,
)

router = APIRouter(tags=["medical"])


async def get_effective_patient_id(
    patient_id: int | None = Query(None, alias="patientId", gt=0),
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(verify_bearer_token),
    user: User = Depends(get_current_user),
) -> int:
    """Dependency resolving whose records this request reads.

    Raises:
        HTTPException: 403 if an explicit patientId is not accessible.
    """
    repo = CareRepository(db)
    if patient_id is None:
        return await repo.effective_patient_id(user, session)

    if not await repo.can_view(user, patient_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this patient's data",
        )
    return patient_id


@router.get("/medications", response_model=list[MedicationResponse])
async def list_medications(
    active_only: bool = False,
    db: AsyncSession = Depends(get_db),
    patient_id: int = Depends(get_effective_patient_id),
) -> list[MedicationResponse]:
    """List medications of the effective patient."""
    medications = await MedicalRepository(db).list_medications(patient_id, active_only=active_only)
    return [MedicationResponse.model_validate(m) for m in medications]


@router.get("/vital-signs/{kind}", response_model=list[VitalSignReadingResponse])
async def list_vital_signs(
    kind: VitalSignKindSchema,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    patient_id: int = Depends(get_effective_patient_id),
) -> list[VitalSignReadingResponse]:
    """List the effective patient's readings of one kind, newest first."""
    readings = await MedicalRepository(db).list_vital_signs(
        patient_id, VitalSignKind(kind.value), limit=limit
    )
    return [VitalSignReadingResponse.model_validate(r) for r in readings]
