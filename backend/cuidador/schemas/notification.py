"""Pydantic schemas for the notifications API."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from cuidador.schemas.base import CamelModel


class NotificationPriority(str, Enum):
    """Notification priority levels (match SQLAlchemy enum)."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NotificationResponse(CamelModel):
    """Single notification.

    Not frozen: the client flips ``is_read`` locally after a successful
    mark-as-read call.
    """

    id: int
    type: str
    title: str
    message: str
    is_read: bool = False
    created_at: datetime
    priority: NotificationPriority = NotificationPriority.NORMAL
    patient_name: str | None = None
    editor_name: str | None = None
    related_id: int | None = None
    scheduled_for: datetime | None = None


class NotificationSummary(CamelModel):
    """Counts reported by the server."""

    total: int = 0
    unread: int = 0


class Pagination(CamelModel):
    """Offset pagination metadata."""

    limit: int
    offset: int
    has_more: bool


class NotificationListResponse(CamelModel):
    """GET /api/notifications payload."""

    notifications: list[NotificationResponse]
    summary: NotificationSummary
    pagination: Pagination


class MarkReadResponse(CamelModel):
    """Result of marking one notification read."""

    success: bool = True
    message: str


class MarkAllReadResponse(CamelModel):
    """Result of marking every notification read."""

    success: bool = True
    message: str
    marked_count: int = Field(ge=0)


class ClearReadResponse(CamelModel):
    """Result of deleting read notifications."""

    success: bool = True
    deleted_count: int = Field(ge=0)
