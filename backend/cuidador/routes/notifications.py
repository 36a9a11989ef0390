"""Notification API routes.

Listing returns ``{notifications, summary, pagination}``. Read state only
moves from unread to read.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.auth import get_current_user
from cuidador.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cuidador.database import get_db
from cuidador.models.user import User
from cuidador.repositories.notification import NotificationNotFoundError, NotificationRepository
from cuidador.schemas.notification import (
    ClearReadResponse,
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationSummary,
    Pagination,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> NotificationListResponse:
    """List the viewer's notifications, newest first.

    Args:
        limit: Maximum number of notifications to return.
        offset: Number of notifications to skip.

    Returns:
        The page, server-side counts, and pagination metadata.
    """
    repo = NotificationRepository(db)
    notifications = await repo.list_for_user(user.id, limit=limit, offset=offset)
    total, unread = await repo.summary(user.id)

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        summary=NotificationSummary(total=total, unread=unread),
        pagination=Pagination(
            limit=limit,
            offset=offset,
            has_more=len(notifications) == limit,
        ),
    )


@router.put("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the viewer as read."""
    marked = await NotificationRepository(db).mark_all_read(user.id)
    logger.info("Marked %d notifications read for user %s", marked, user.id)
    return MarkAllReadResponse(message="All notifications marked as read", marked_count=marked)


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> MarkReadResponse:
    """Mark one notification as read.

    Raises:
        HTTPException: 404 if the notification does not belong to the viewer.
    """
    try:
        await NotificationRepository(db).mark_read(user.id, notification_id)
    except NotificationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return MarkReadResponse(message="Notification marked as read")


@router.delete("/clear-read", response_model=ClearReadResponse)
async def clear_read(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ClearReadResponse:
    """Delete every read notification of the viewer."""
    deleted = await NotificationRepository(db).clear_read(user.id)
    return ClearReadResponse(deleted_count=deleted)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> None:
    """Delete one notification.

    Raises:
        HTTPException: 404 if the notification does not belong to the viewer.
    """
    try:
        await NotificationRepository(db).delete(user.id, notification_id)
    except NotificationNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
