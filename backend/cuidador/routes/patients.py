"""Patient API routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.auth import get_current_user
from cuidador.database import get_db
from cuidador.models.user import User
from cuidador.repositories.care import CareRepository, PatientNotFoundError
from cuidador.schemas.patient import PatientSummary

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("/{patient_id}/basic", response_model=PatientSummary)
async def get_patient_basic(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PatientSummary:
    """Get basic data for a patient, without medical records.

    Raises:
        HTTPException: 403 without access, 404 if not a patient.
    """
    repo = CareRepository(db)
    if not await repo.can_view(user, patient_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    try:
        patient = await repo.get_patient(patient_id)
    except PatientNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")

    return PatientSummary.model_validate(patient)
