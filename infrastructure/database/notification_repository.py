"""
Supabase implementation of the notification inbox.
Every call is an RPC scoped to the caller by auth.uid().
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
from core.domain.models import Notification, NotificationCounts, NotificationFilter
from core.interfaces.repositories import INotificationRepository
from infrastructure.database.supabase_client import db, run_sync


class SupabaseNotificationRepository(INotificationRepository):

    @run_sync
    def _rpc_sync(self, name: str, params: Dict[str, Any]):
        return db().rpc(name, params).execute().data

    async def get_page(
        self, filter: NotificationFilter, kind: Optional[str], limit: int, offset: int,
    ) -> List[Notification]:
        rows = await self._rpc_sync("get_notifications", {
            "p_filter": filter.value,
            "p_kind": kind,
            "p_limit": limit,
            "p_offset": offset,
        })
        return [Notification.model_validate(r) for r in rows or []]

    async def counts(self) -> NotificationCounts:
        rows = await self._rpc_sync("get_notification_counts", {})
        row = rows[0] if rows else {}
        return NotificationCounts(
            unread_count=int(row.get("unread_count") or 0),
            total_count=int(row.get("total_count") or 0),
        )

    async def mark_read(self, notification_id: UUID) -> bool:
        data = await self._rpc_sync("mark_notification_read", {"p_notification_id": str(notification_id)})
        return bool(data)

    async def mark_all_read(self, kind: Optional[str]) -> int:
        data = await self._rpc_sync("mark_all_notifications_read", {"p_kind": kind})
        return int(data or 0)

    async def clear(self, notification_ids: Optional[List[UUID]], kind: Optional[str]) -> int:
        data = await self._rpc_sync("clear_profile_notifications", {
            "p_notification_ids": [str(i) for i in notification_ids] if notification_ids else None,
            "p_kind": kind,
        })
        return int(data or 0)
