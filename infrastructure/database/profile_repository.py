"""
Supabase implementation of Profile repository.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID
from core.domain.models import Profile
from core.interfaces.repositories import IProfileRepository
from infrastructure.database.supabase_client import db, run_sync

logger = logging.getLogger(__name__)


class SupabaseProfileRepository(IProfileRepository):
    """Supabase implementation of profile repository"""

    def _to_model(self, data: dict) -> Profile:
        """Convert database row to Profile model"""
        row = dict(data)
        row["social_links"] = row.get("social_links") or {}
        for flag in ("contact_email_public", "onboarding_completed", "is_blocked",
                     "is_test_account", "open_to_play", "open_to_coach"):
            row[flag] = bool(row.get(flag))
        return Profile.model_validate(row)

    @run_sync
    def _get_by_id_sync(self, profile_id: UUID) -> Optional[dict]:
        response = db().table("profiles").select("*").eq("id", str(profile_id)).execute()
        return response.data[0] if response.data else None

    async def get_by_id(self, profile_id: UUID) -> Optional[Profile]:
        data = await self._get_by_id_sync(profile_id)
        return self._to_model(data) if data else None

    @run_sync
    def _update_sync(self, profile_id: UUID, update: Dict[str, Any]) -> Optional[dict]:
        if not update:
            return None
        response = db().table("profiles").update(update).eq("id", str(profile_id)).execute()
        return response.data[0] if response.data else None

    async def update(self, profile_id: UUID, update: Dict[str, Any]) -> Optional[Profile]:
        data = await self._update_sync(profile_id, update)
        return self._to_model(data) if data else None

    @run_sync
    def _create_for_new_user_sync(self, user_id: UUID, email: str, role: str):
        response = db().rpc("create_profile_for_new_user", {
            "user_id": str(user_id),
            "user_email": email,
            "user_role": role,
        }).execute()
        return response.data

    async def create_for_new_user(self, user_id: UUID, email: str, role: str) -> Optional[Profile]:
        data = await self._create_for_new_user_sync(user_id, email, role)
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            logger.warning(f"[PROFILE] create_profile_for_new_user returned nothing for {user_id}")
            return await self.get_by_id(user_id)
        return self._to_model(data)
