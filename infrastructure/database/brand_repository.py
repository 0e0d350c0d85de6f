"""
Supabase implementation of Brand repository.
Brand RPCs resolve the owner from the caller's auth identity.
"""

from typing import Any, Dict, Optional
from core.domain.models import Brand
from core.interfaces.repositories import IBrandRepository
from infrastructure.database.supabase_client import db, run_sync


class SupabaseBrandRepository(IBrandRepository):

    @run_sync
    def _get_my_brand_sync(self) -> Optional[dict]:
        response = db().rpc("get_my_brand", {}).execute()
        data = response.data
        if isinstance(data, list):
            return data[0] if data else None
        return data

    async def get_my_brand(self) -> Optional[Brand]:
        data = await self._get_my_brand_sync()
        return Brand.model_validate(data) if data else None

    @run_sync
    def _create_sync(self, data: Dict[str, Any]) -> Dict[str, Any]:
        response = db().rpc("create_brand", {
            "p_name": data["name"],
            "p_slug": data["slug"],
            "p_category": data["category"],
            "p_bio": data.get("bio"),
            "p_logo_url": data.get("logo_url"),
            "p_website_url": data.get("website_url"),
            "p_instagram_url": data.get("instagram_url"),
        }).execute()
        return response.data or {}

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create_sync(data)

    @run_sync
    def _update_sync(self, data: Dict[str, Any]) -> None:
        db().rpc("update_brand", {
            "p_name": data.get("name"),
            "p_bio": data.get("bio"),
            "p_logo_url": data.get("logo_url"),
            "p_cover_url": data.get("cover_url"),
            "p_website_url": data.get("website_url"),
            "p_instagram_url": data.get("instagram_url"),
            "p_category": data.get("category"),
        }).execute()

    async def update(self, data: Dict[str, Any]) -> None:
        await self._update_sync(data)
