"""User search routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.auth import ensure_not_patient, get_current_user
from cuidador.constants import MIN_SEARCH_LENGTH
from cuidador.database import get_db
from cuidador.models.user import User
from cuidador.repositories.care import CareRepository
from cuidador.schemas.patient import PatientListResponse, PatientSummary

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search-patients", response_model=PatientListResponse)
async def search_patients(
    q: str = Query("", description="Name or email fragment"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> PatientListResponse:
    """Search among the patients the viewer can access.

    Raises:
        HTTPException: 403 for patient profiles, 400 for short queries.
    """
    ensure_not_patient(user, "Patients cannot search other patients")

    query = q.strip()
    if len(query) < MIN_SEARCH_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search query must have at least {MIN_SEARCH_LENGTH} characters",
        )

    patients = await CareRepository(db).search_accessible_patients(user.id, query)
    return PatientListResponse(patients=[PatientSummary.model_validate(p) for p in patients])
