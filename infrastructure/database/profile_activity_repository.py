"""
Supabase implementation of the profile activity counts.
Only the tables that matter for the role are queried.
"""

from uuid import UUID
from core.domain.models import FriendshipStatus, ProfileCounts, ReferenceStatus, Role
from core.interfaces.repositories import IProfileActivityRepository
from infrastructure.database.supabase_client import db, run_sync


class SupabaseProfileActivityRepository(IProfileActivityRepository):

    @run_sync
    def _count_sync(self, table: str, column: str, profile_id: UUID) -> int:
        response = db().table(table).select("id", count="exact")\
            .eq(column, str(profile_id))\
            .execute()
        return response.count or 0

    @run_sync
    def _count_friends_sync(self, profile_id: UUID) -> int:
        response = db().table("profile_friendships").select("id", count="exact")\
            .or_(f"user_one.eq.{profile_id},user_two.eq.{profile_id}")\
            .eq("status", FriendshipStatus.ACCEPTED.value)\
            .execute()
        return response.count or 0

    @run_sync
    def _count_references_sync(self, profile_id: UUID) -> int:
        response = db().table("profile_references").select("id", count="exact")\
            .eq("requester_id", str(profile_id))\
            .eq("status", ReferenceStatus.ACCEPTED.value)\
            .execute()
        return response.count or 0

    async def count_activity(self, profile_id: UUID, role: Role) -> ProfileCounts:
        counts = ProfileCounts()
        if role == Role.CLUB:
            counts.gallery = await self._count_sync("club_media", "club_id", profile_id)
        elif role in (Role.PLAYER, Role.COACH):
            counts.journey = await self._count_sync("playing_history", "user_id", profile_id)
            counts.gallery = await self._count_sync("gallery_photos", "user_id", profile_id)
            if role == Role.PLAYER:
                counts.friends = await self._count_friends_sync(profile_id)
                counts.references = await self._count_references_sync(profile_id)
        return counts
