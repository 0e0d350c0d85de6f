"""
Supabase implementation of the friendship repository.
Edges are read from the profile_friend_edges view (one row per direction).
"""

from typing import List, Optional
from uuid import UUID
from core.domain.models import FriendshipEdge, FriendshipStatus
from core.interfaces.repositories import IFriendshipRepository
from infrastructure.database.supabase_client import db, run_sync


class SupabaseFriendshipRepository(IFriendshipRepository):

    @run_sync
    def _get_edge_sync(self, viewer_id: UUID, other_id: UUID) -> Optional[dict]:
        response = db().table("profile_friend_edges").select("*")\
            .eq("profile_id", str(viewer_id))\
            .eq("friend_id", str(other_id))\
            .limit(1)\
            .execute()
        return response.data[0] if response.data else None

    async def get_edge(self, viewer_id: UUID, other_id: UUID) -> Optional[FriendshipEdge]:
        data = await self._get_edge_sync(viewer_id, other_id)
        return FriendshipEdge.model_validate(data) if data else None

    @run_sync
    def _send_request_sync(self, requester_id: UUID, other_id: UUID) -> None:
        db().table("profile_friendships").upsert(
            {
                "user_one": str(requester_id),
                "user_two": str(other_id),
                "requester_id": str(requester_id),
                "status": FriendshipStatus.PENDING.value,
                "accepted_at": None,
            },
            on_conflict="pair_key_lower,pair_key_upper",
        ).execute()

    async def send_request(self, requester_id: UUID, other_id: UUID) -> None:
        await self._send_request_sync(requester_id, other_id)

    @run_sync
    def _set_status_sync(self, friendship_id: UUID, status: FriendshipStatus) -> None:
        db().table("profile_friendships").update({"status": status.value})\
            .eq("id", str(friendship_id)).execute()

    async def set_status(self, friendship_id: UUID, status: FriendshipStatus) -> None:
        await self._set_status_sync(friendship_id, status)

    @run_sync
    def _list_friends_sync(self, profile_id: UUID) -> List[dict]:
        response = db().table("profile_friend_edges").select("*")\
            .eq("profile_id", str(profile_id))\
            .eq("status", FriendshipStatus.ACCEPTED.value)\
            .order("accepted_at", desc=True)\
            .execute()
        return response.data or []

    async def list_friends(self, profile_id: UUID) -> List[FriendshipEdge]:
        rows = await self._list_friends_sync(profile_id)
        return [FriendshipEdge.model_validate(r) for r in rows]
