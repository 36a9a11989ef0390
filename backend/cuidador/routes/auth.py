"""Auth routes."""

from fastapi import APIRouter, Depends

from cuidador.auth import get_current_user, verify_bearer_token
from cuidador.models.auth import AuthSession
from cuidador.models.user import User
from cuidador.schemas.patient import ViewerResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=ViewerResponse)
async def me(
    session: AuthSession = Depends(verify_bearer_token),
    user: User = Depends(get_current_user),
) -> ViewerResponse:
    """Return the authenticated viewer and the session's selected patient."""
    return ViewerResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        profile_type=user.profile_type,
        selected_patient_id=session.selected_patient_id,
    )
