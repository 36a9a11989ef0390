"""Notification repository."""

from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.models.notification import Notification


class NotificationNotFoundError(ValueError):
    """Raised when a notification is not found for the user."""

    pass


class NotificationRepository:
    """Repository for a user's notifications.

    Every operation is scoped by ``user_id`` so one user can never read or
    mutate another user's notifications.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: int, limit: int, offset: int) -> list[Notification]:
        """Newest first, ties broken by id."""
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def summary(self, user_id: int) -> tuple[int, int]:
        """Return (total, unread) counts."""
        total_result = await self.db.execute(
            select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
        )
        unread_result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
        return total_result.scalar() or 0, unread_result.scalar() or 0

    async def _get_owned(self, user_id: int, notification_id: int) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotificationNotFoundError(f"Notification {notification_id} not found")
        return notification

    async def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """Mark one notification read. Marking a read notification is a no-op."""
        notification = await self._get_owned(user_id, notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            await self.db.flush()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification read and return how many changed."""
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        return result.rowcount or 0

    async def delete(self, user_id: int, notification_id: int) -> None:
        notification = await self._get_owned(user_id, notification_id)
        await self.db.delete(notification)
        await self.db.flush()

    async def clear_read(self, user_id: int) -> int:
        """Delete read notifications and return how many were removed."""
        result = await self.db.execute(
            delete(Notification).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(True),
            )
        )
        return result.rowcount or 0
