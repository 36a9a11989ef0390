"""Notification panel state.

Fetches a page of notifications through the query cache, keeps read/unread
bookkeeping, and exposes per-notification and bulk "mark as read" actions.

The unread badge uses ``max(server summary, client count)``: the server
summary is eventually consistent and may lag behind the page it came with,
so the panel never shows fewer unread than it can see.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from cuidador.client.api import ApiClient, ApiError
from cuidador.client.cache import QueryCache
from cuidador.client.feedback import ToastQueue
from cuidador.config import settings
from cuidador.schemas.notification import (
    NotificationPriority,
    NotificationResponse,
    NotificationSummary,
)

logger = logging.getLogger(__name__)

NOTIFICATIONS_PATH = "/api/notifications"

MAX_BADGE_COUNT = 99

PRIORITY_RANK = {
    NotificationPriority.URGENT: 0,
    NotificationPriority.HIGH: 1,
    NotificationPriority.NORMAL: 2,
    NotificationPriority.LOW: 3,
}


class NotificationCategory(str, enum.Enum):
    """Display category derived from the notification type."""

    MEDICATION = "Medicamento"
    APPOINTMENT = "Consulta"
    TEST = "Exame"
    PRESCRIPTION = "Receita"
    VITAL_SIGNS = "Sinais Vitais"
    ADHERENCE = "Aderência"
    SYSTEM = "Sistema"


_PREFIX_CATEGORIES = (
    ("medication_", NotificationCategory.MEDICATION),
    ("appointment_", NotificationCategory.APPOINTMENT),
    ("test_", NotificationCategory.TEST),
    ("prescription_", NotificationCategory.PRESCRIPTION),
    ("vital_sign_", NotificationCategory.VITAL_SIGNS),
)

_ADHERENCE_MARKERS = ("adherence", "congratulations", "weekly_report", "monthly_report")


def categorize(notification_type: str) -> NotificationCategory:
    """Map a type such as ``medication_edited`` to its display category."""
    for prefix, category in _PREFIX_CATEGORIES:
        if notification_type.startswith(prefix):
            return category
    if any(marker in notification_type for marker in _ADHERENCE_MARKERS):
        return NotificationCategory.ADHERENCE
    return NotificationCategory.SYSTEM


def format_delay(total_minutes: int) -> str:
    """Human delay label: ``45 min``, ``2h``, ``1h 30min``. Sign is ignored."""
    minutes = abs(total_minutes)
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest}min"


def parse_payload(payload: Any) -> tuple[list[NotificationResponse], NotificationSummary]:
    """Accept ``{notifications, summary, pagination}`` or a bare list.

    A bare list gets a summary computed from its items. A missing summary
    counts as zero; the unread badge recomputes from the list anyway.

    Raises:
        ApiError: If the payload has neither shape or an item is malformed.
    """
    if payload is None:
        return [], NotificationSummary()

    try:
        if isinstance(payload, list):
            notifications = [NotificationResponse.model_validate(item) for item in payload]
            unread = sum(1 for n in notifications if not n.is_read)
            return notifications, NotificationSummary(total=len(notifications), unread=unread)

        if not isinstance(payload, dict):
            raise ApiError(0, f"Unexpected notifications payload: {type(payload).__name__}")

        items = payload.get("notifications")
        notifications = [NotificationResponse.model_validate(item) for item in items] if isinstance(items, list) else []
        summary_data = payload.get("summary")
        summary = NotificationSummary.model_validate(summary_data) if summary_data else NotificationSummary()
    except ValidationError as exc:
        raise ApiError(0, "Malformed notifications payload") from exc
    return notifications, summary


class NotificationPanel:
    """Notification list, unread badge and read actions for one viewer.

    Args:
        api: Care API client.
        cache: Shared query cache; the page is cached under
            ``("/api/notifications", scope())``.
        toasts: Where failures are reported.
        scope: Returns the effective patient id used to qualify the cache key.
        page_size: Notifications per page.
    """

    def __init__(
        self,
        api: ApiClient,
        cache: QueryCache,
        toasts: ToastQueue,
        *,
        scope: Callable[[], int],
        page_size: int | None = None,
    ):
        self.api = api
        self.cache = cache
        self.toasts = toasts
        self.scope = scope
        self.page_size = settings.notifications_page_size if page_size is None else page_size

        self.notifications: list[NotificationResponse] = []
        self.summary = NotificationSummary()
        self.loading_ids: set[int] = set()
        self.is_marking_all = False
        self.has_new_notifications = False
        self._previous_unread = 0
        self._poll_task: asyncio.Task | None = None

    def _key(self) -> tuple[str, int]:
        return (NOTIFICATIONS_PATH, self.scope())

    async def _fetch_page(self) -> Any:
        return await self.api.get(
            NOTIFICATIONS_PATH, params={"limit": self.page_size, "offset": 0}
        )

    async def refresh(self, *, force: bool = False) -> None:
        """Load the first page. A failure leaves an empty panel."""
        try:
            payload = await self.cache.fetch(self._key(), self._fetch_page, force=force)
            self.notifications, self.summary = parse_payload(payload)
        except ApiError as exc:
            logger.warning("Could not load notifications: %s", exc)
            self.notifications, self.summary = [], NotificationSummary()

        self._track_unread()

    # === Counts ===

    @property
    def unread_notifications(self) -> list[NotificationResponse]:
        return [n for n in self.notifications if not n.is_read]

    @property
    def client_unread_count(self) -> int:
        return len(self.unread_notifications)

    @property
    def displayed_unread_count(self) -> int:
        return max(self.summary.unread, self.client_unread_count)

    @property
    def badge_label(self) -> str:
        """Badge text; empty when nothing is unread."""
        count = self.displayed_unread_count
        if count == 0:
            return ""
        return f"{MAX_BADGE_COUNT}+" if count > MAX_BADGE_COUNT else str(count)

    def _track_unread(self) -> None:
        count = self.displayed_unread_count
        if count > self._previous_unread:
            self.has_new_notifications = True
        self._previous_unread = count

    def acknowledge_new(self) -> None:
        """Stop highlighting new notifications (the bell animation ended)."""
        self.has_new_notifications = False

    @property
    def sorted_notifications(self) -> list[NotificationResponse]:
        """Unread first, then by priority, newest first."""
        by_date = sorted(self.notifications, key=lambda n: n.created_at, reverse=True)
        return sorted(by_date, key=lambda n: (n.is_read, PRIORITY_RANK[n.priority]))

    def grouped(self) -> dict[NotificationCategory, list[NotificationResponse]]:
        groups: dict[NotificationCategory, list[NotificationResponse]] = {}
        for notification in self.sorted_notifications:
            groups.setdefault(categorize(notification.type), []).append(notification)
        return groups

    def _find(self, notification_id: int) -> NotificationResponse | None:
        return next((n for n in self.notifications if n.id == notification_id), None)

    # === Mutations ===

    async def mark_as_read(self, notification_id: int) -> bool:
        """Mark one notification read.

        Each id has its own loading flag; other notifications stay
        interactive. On failure the flag clears, a toast is shown, and the
        notification stays unread.

        Returns:
            True if the notification went from unread to read.
        """
        notification = self._find(notification_id)
        if notification is None or notification.is_read or notification_id in self.loading_ids:
            return False

        self.loading_ids.add(notification_id)
        try:
            await self.api.put(f"{NOTIFICATIONS_PATH}/{notification_id}/read")
        except ApiError as exc:
            logger.warning("Could not mark notification %s read: %s", notification_id, exc)
            self.toasts.error("Erro", "Não foi possível marcar a notificação como lida.")
            return False
        finally:
            self.loading_ids.discard(notification_id)

        # the list may have been replaced by a refresh during the request
        current = self._find(notification_id)
        if current is not None and not current.is_read:
            current.is_read = True
            self.summary = NotificationSummary(
                total=self.summary.total,
                unread=max(0, self.summary.unread - 1),
            )
        self.cache.mark_stale(self._key())
        self._previous_unread = self.displayed_unread_count
        return True

    async def mark_all_as_read(self) -> int:
        """Mark unread notifications read one at a time.

        Uses the per-item endpoint sequentially; stops at the first failure.

        Returns:
            How many notifications were marked.
        """
        if self.is_marking_all:
            return 0

        self.is_marking_all = True
        marked = 0
        try:
            for notification in self.unread_notifications:
                if not await self.mark_as_read(notification.id):
                    break
                marked += 1
        finally:
            self.is_marking_all = False
        return marked

    async def delete(self, notification_id: int) -> bool:
        """Delete one notification. Returns False and toasts on failure."""
        notification = self._find(notification_id)
        try:
            await self.api.delete(f"{NOTIFICATIONS_PATH}/{notification_id}")
        except ApiError as exc:
            logger.warning("Could not delete notification %s: %s", notification_id, exc)
            self.toasts.error("Erro", "Não foi possível excluir a notificação.")
            return False

        if notification is not None:
            self.notifications.remove(notification)
            self.summary = NotificationSummary(
                total=max(0, self.summary.total - 1),
                unread=max(0, self.summary.unread - (0 if notification.is_read else 1)),
            )
        self.cache.mark_stale(self._key())
        return True

    async def clear_read(self) -> int:
        """Delete all read notifications. Returns the server's deleted count."""
        try:
            payload = await self.api.delete(f"{NOTIFICATIONS_PATH}/clear-read")
        except ApiError as exc:
            logger.warning("Could not clear read notifications: %s", exc)
            self.toasts.error("Erro", "Não foi possível limpar as notificações lidas.")
            return 0

        remaining = self.unread_notifications
        self.summary = NotificationSummary(
            total=max(0, self.summary.total - (len(self.notifications) - len(remaining))),
            unread=self.summary.unread,
        )
        self.notifications = remaining
        self.cache.mark_stale(self._key())
        return int((payload or {}).get("deletedCount", 0))

    # === Delivery ===

    def receive(self, notification: NotificationResponse | dict) -> None:
        """Add a pushed notification, replacing one with the same id."""
        if isinstance(notification, dict):
            notification = NotificationResponse.model_validate(notification)

        existing = self._find(notification.id)
        if existing is not None:
            self.notifications[self.notifications.index(existing)] = notification
        else:
            self.notifications.insert(0, notification)
            self.summary = NotificationSummary(
                total=self.summary.total + 1,
                unread=self.summary.unread + (0 if notification.is_read else 1),
            )
        self.cache.mark_stale(self._key())
        self._track_unread()

    async def poll(self, interval: float) -> None:
        """Refresh forever every ``interval`` seconds; cancel to stop."""
        while True:
            await self.refresh(force=True)
            await asyncio.sleep(interval)

    def start_polling(self, interval: float) -> asyncio.Task:
        self.stop_polling()
        self._poll_task = asyncio.ensure_future(self.poll(interval))
        return self._poll_task

    def stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
