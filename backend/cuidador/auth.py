"""Bearer token authentication via the auth session table."""

from datetime import datetime, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.database import get_db
from cuidador.models.auth import AuthSession
from cuidador.models.user import ProfileType, User

bearer_scheme = HTTPBearer(auto_error=False)


async def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    """Validate a bearer token against the auth session table.

    Returns:
        The authenticated session, which also carries the viewing context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
        )

    token = credentials.credentials
    result = await db.execute(
        select(AuthSession).where(
            AuthSession.token == token,
            AuthSession.expires_at > datetime.now(timezone.utc),
        )
    )
    session = result.scalar_one_or_none()

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return session


async def get_current_user(
    session: AuthSession = Depends(verify_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the user behind the authenticated session.

    Raises:
        HTTPException: 401 if the session points at a deleted user.
    """
    result = await db.execute(select(User).where(User.id == session.user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
        )
    return user


def ensure_not_patient(user: User, detail: str) -> None:
    """Reject patient profiles from caregiver-only operations with a 403."""
    if user.profile_type == ProfileType.PATIENT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
