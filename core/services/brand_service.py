"""
Brand service - the brand profile behind a brand account.
"""

import logging
from typing import Optional, Tuple

from core.domain.constants import BRAND_CATEGORIES
from core.domain.errors import BackendError
from core.domain.models import Brand, BrandInput
from core.interfaces.repositories import IBrandRepository, IProfileRepository
from core.state.session import ClientSession
from core.utils.text import blank_to_none, slugify

logger = logging.getLogger(__name__)


class BrandService:

    def __init__(self, brand_repo: IBrandRepository, profile_repo: IProfileRepository):
        self.brand_repo = brand_repo
        self.profile_repo = profile_repo

    async def get_my_brand(self) -> Optional[Brand]:
        try:
            return await self.brand_repo.get_my_brand()
        except BackendError as e:
            logger.error(f"[BRAND] Failed to load brand: {e.message}")
            return None

    def validate(self, data: BrandInput, is_new: bool) -> Optional[str]:
        if not data.name.strip():
            return "Brand name is required"
        if is_new and not (data.slug.strip() or slugify(data.name)):
            return "Brand URL slug is required"
        if data.category and data.category not in BRAND_CATEGORIES:
            return "Please choose a brand category"
        return None

    async def save(self, session: ClientSession, data: BrandInput) -> Tuple[bool, str]:
        """Create or update the caller's brand. Returns (success, slug or error)."""
        existing = await self.get_my_brand()
        is_new = existing is None

        error = self.validate(data, is_new)
        if error:
            return False, error

        payload = {
            "name": data.name.strip(),
            "category": data.category or "other",
            "bio": blank_to_none(data.bio),
            "logo_url": blank_to_none(data.logo_url),
            "website_url": blank_to_none(data.website_url),
            "instagram_url": blank_to_none(data.instagram_url),
        }
        try:
            if is_new:
                payload["slug"] = slugify(data.slug) or slugify(data.name)
                result = await self.brand_repo.create(payload)
                slug = result.get("slug") or payload["slug"]
            else:
                await self.brand_repo.update(payload)
                slug = existing.slug
        except BackendError as e:
            logger.error(f"[BRAND] Failed to save brand: {e.message}")
            return False, e.message or ("Failed to create brand" if is_new else "Failed to update brand")

        await self._sync_profile(session, payload, is_new)
        logger.info(f"[BRAND] {'Created' if is_new else 'Updated'} brand {slug}")
        return True, slug

    async def _sync_profile(self, session: ClientSession, payload: dict, is_new: bool = False) -> None:
        """Brand name and logo double as the profile's display name and avatar."""
        user_id = session.user_id
        if user_id is None:
            return
        update = {"full_name": payload["name"]}
        if is_new:
            # Creating the brand is the last onboarding step for brand accounts
            update["onboarding_completed"] = True
        if payload.get("logo_url"):
            update["avatar_url"] = payload["logo_url"]
        try:
            await self.profile_repo.update(user_id, update)
        except BackendError as e:
            logger.warning(f"[BRAND] Profile sync failed for {user_id}: {e.message}")
        session.profiles.invalidate(user_id, "brand-updated")
