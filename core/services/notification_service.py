"""
Notification inbox service.

The unread count is cached per session so the header badge can be
adjusted locally after mark-read and clear without another round trip.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from core.domain.constants import NOTIFICATION_KINDS, NOTIFICATION_PAGE_SIZE
from core.domain.errors import BackendError, ValidationFailed
from core.domain.models import Notification, NotificationCounts, NotificationFilter
from core.interfaces.repositories import INotificationRepository
from core.state.session import ClientSession

logger = logging.getLogger(__name__)

COUNTS_WIDGET = "notifications:counts"


@dataclass
class NotificationPage:
    notifications: List[Notification] = field(default_factory=list)
    page: int = 0
    has_more: bool = False

    def to_dict(self) -> dict:
        return {
            "notifications": [n.model_dump(mode="json") for n in self.notifications],
            "page": self.page,
            "has_more": self.has_more,
        }


def _check_kind(kind: Optional[str]) -> Optional[str]:
    if kind is not None and kind not in NOTIFICATION_KINDS:
        raise ValidationFailed({"kind": "Unknown notification type"})
    return kind


class NotificationService:

    def __init__(self, notification_repo: INotificationRepository, page_size: int = NOTIFICATION_PAGE_SIZE):
        self.notification_repo = notification_repo
        self.page_size = page_size

    async def get_page(
        self, session: ClientSession, filter: NotificationFilter = NotificationFilter.ALL,
        kind: Optional[str] = None, page: int = 0,
    ) -> NotificationPage:
        kind = _check_kind(kind)
        if filter == NotificationFilter.BY_TYPE and kind is None:
            # Nothing to show until a type is picked
            return NotificationPage(page=page)
        try:
            rows = await self.notification_repo.get_page(filter, kind, self.page_size, page * self.page_size)
        except BackendError as e:
            logger.error(f"[NOTIFICATIONS] Failed to fetch page {page} for {session.user_id}: {e.message}")
            session.toasts.error("Unable to load notifications. Please try again.")
            return NotificationPage(page=page)
        # A short page is the last one
        return NotificationPage(notifications=rows, page=page, has_more=len(rows) >= self.page_size)

    async def counts(self, session: ClientSession, refresh: bool = False) -> NotificationCounts:
        cached = session.widgets.get(COUNTS_WIDGET)
        if cached is not None and not refresh:
            return cached
        try:
            counts = await self.notification_repo.counts()
        except BackendError as e:
            logger.warning(f"[NOTIFICATIONS] Failed to fetch counts for {session.user_id}: {e.message}")
            return cached or NotificationCounts()
        session.widgets[COUNTS_WIDGET] = counts
        return counts

    def _adjust_unread(self, session: ClientSession, delta: int) -> None:
        cached = session.widgets.get(COUNTS_WIDGET)
        if cached is not None:
            cached.unread_count = max(cached.unread_count + delta, 0)

    async def mark_read(self, session: ClientSession, notification_id: UUID) -> bool:
        try:
            updated = await self.notification_repo.mark_read(notification_id)
        except BackendError as e:
            logger.error(f"[NOTIFICATIONS] Failed to mark {notification_id} read: {e.message}")
            session.toasts.error("Unable to update notification.")
            return False
        # Already read or not ours
        if updated:
            self._adjust_unread(session, -1)
        return updated

    async def mark_all_read(self, session: ClientSession, kind: Optional[str] = None) -> int:
        kind = _check_kind(kind)
        try:
            updated = await self.notification_repo.mark_all_read(kind)
        except BackendError as e:
            logger.error(f"[NOTIFICATIONS] Failed to mark all read for {session.user_id}: {e.message}")
            session.toasts.error("Unable to update notifications.")
            return 0
        self._adjust_unread(session, -updated)
        logger.info(f"[NOTIFICATIONS] {session.user_id} marked {updated} read (kind={kind or 'any'})")
        return updated

    async def clear(
        self, session: ClientSession, notification_ids: Optional[List[UUID]] = None, kind: Optional[str] = None,
    ) -> int:
        kind = _check_kind(kind)
        try:
            cleared = await self.notification_repo.clear(notification_ids or None, kind)
        except BackendError as e:
            logger.error(f"[NOTIFICATIONS] Failed to clear for {session.user_id}: {e.message}")
            session.toasts.error("Unable to clear notifications.")
            return 0
        # Cleared rows may have been unread; reload the badge next time
        session.widgets.pop(COUNTS_WIDGET, None)
        return cleared
