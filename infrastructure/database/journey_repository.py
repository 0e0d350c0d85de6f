"""
Supabase implementation of the journey (playing history) repository.
"""

from typing import Any, Dict, List
from uuid import UUID
from core.domain.models import JourneyEntry
from core.interfaces.repositories import IJourneyRepository
from infrastructure.database.supabase_client import db, run_sync

TABLE = "playing_history"


class SupabaseJourneyRepository(IJourneyRepository):

    def _to_model(self, data: dict) -> JourneyEntry:
        row = dict(data)
        row["id"] = str(row["id"])
        row["highlights"] = row.get("highlights") or []
        for key in ("club_name", "position_role", "division_league"):
            row[key] = row.get(key) or ""
        return JourneyEntry.model_validate(row)

    @run_sync
    def _list_sync(self, user_id: UUID) -> List[dict]:
        response = db().table(TABLE).select("*")\
            .eq("user_id", str(user_id))\
            .order("start_date", desc=True, nullsfirst=False)\
            .order("display_order", desc=True)\
            .execute()
        return response.data or []

    async def list_for_user(self, user_id: UUID) -> List[JourneyEntry]:
        rows = await self._list_sync(user_id)
        return [self._to_model(r) for r in rows]

    @run_sync
    def _delete_many_sync(self, entry_ids: List[str]) -> None:
        db().table(TABLE).delete().in_("id", entry_ids).execute()

    async def delete_many(self, entry_ids: List[str]) -> None:
        if entry_ids:
            await self._delete_many_sync(entry_ids)

    @run_sync
    def _insert_sync(self, data: Dict[str, Any]) -> None:
        db().table(TABLE).insert(data).execute()

    async def insert(self, data: Dict[str, Any]) -> None:
        await self._insert_sync(data)

    @run_sync
    def _update_sync(self, entry_id: str, data: Dict[str, Any]) -> None:
        db().table(TABLE).update(data).eq("id", entry_id).execute()

    async def update(self, entry_id: str, data: Dict[str, Any]) -> None:
        await self._update_sync(entry_id, data)
