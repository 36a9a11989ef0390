"""Care relationship repository.

Answers "which patients can this viewer reach" and owns the server-side
viewing context stored on the auth session.
"""

from __future__ import annotations

import logging

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.models.auth import AuthSession
from cuidador.models.user import CareRelationship, ProfileType, RelationshipStatus, User

logger = logging.getLogger(__name__)


class PatientNotFoundError(ValueError):
    """Raised when a patient id does not resolve to a patient user."""

    pass


class CareRepository:
    """Repository for care relationships and viewing context."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _accessible_patients_query(self, caregiver_id: int) -> Select[tuple[User]]:
        """Patients linked to the caregiver through an active relationship."""
        return (
            select(User)
            .join(CareRelationship, CareRelationship.patient_id == User.id)
            .where(
                CareRelationship.caregiver_id == caregiver_id,
                CareRelationship.status == RelationshipStatus.ACTIVE,
                User.profile_type == ProfileType.PATIENT,
            )
            .order_by(User.name)
        )

    async def get_user(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_patient(self, patient_id: int) -> User:
        """Load a patient user.

        Raises:
            PatientNotFoundError: If the id is unknown or not a patient profile.
        """
        user = await self.get_user(patient_id)
        if user is None or user.profile_type != ProfileType.PATIENT:
            raise PatientNotFoundError(f"Patient {patient_id} not found")
        return user

    async def list_accessible_patients(self, caregiver_id: int) -> list[User]:
        result = await self.db.execute(self._accessible_patients_query(caregiver_id))
        return list(result.scalars().all())

    async def search_accessible_patients(self, caregiver_id: int, query: str) -> list[User]:
        """Case-insensitive name/email search among accessible patients."""
        term = query.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{term}%"
        stmt = self._accessible_patients_query(caregiver_id).where(
            or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            )
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def has_active_relationship(self, patient_id: int, caregiver_id: int) -> bool:
        result = await self.db.execute(
            select(CareRelationship.id)
            .where(
                CareRelationship.patient_id == patient_id,
                CareRelationship.caregiver_id == caregiver_id,
                CareRelationship.status == RelationshipStatus.ACTIVE,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def can_view(self, viewer: User, patient_id: int) -> bool:
        """Whether the viewer may read this patient's records."""
        if viewer.id == patient_id:
            return True
        if viewer.profile_type == ProfileType.PATIENT:
            return False
        return await self.has_active_relationship(patient_id, viewer.id)

    async def set_viewing_context(self, session: AuthSession, patient_id: int) -> None:
        session.selected_patient_id = patient_id
        await self.db.flush()
        logger.info("Session %s now viewing patient %s", session.id, patient_id)

    async def clear_viewing_context(self, session: AuthSession) -> None:
        session.selected_patient_id = None
        await self.db.flush()
        logger.info("Session %s viewing context cleared", session.id)

    async def effective_patient_id(self, viewer: User, session: AuthSession) -> int:
        """Resolve whose records a request should return.

        Patients always see their own records. Other viewers see the session's
        selected patient while the relationship is still active, otherwise
        their own records.
        """
        if viewer.profile_type == ProfileType.PATIENT:
            return viewer.id

        selected = session.selected_patient_id
        if selected is None:
            return viewer.id

        if await self.has_active_relationship(selected, viewer.id):
            return selected

        logger.warning(
            "Session %s selected patient %s without an active relationship; using viewer",
            session.id,
            selected,
        )
        return viewer.id
