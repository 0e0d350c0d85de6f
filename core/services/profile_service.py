"""
Profile service - edit modal, optimistic updates, onboarding and avatars.

Submitting the edit form writes an optimistic copy into the session's
profile cache and closes the modal right away. Persistence then runs in the
background and either confirms the server row or rolls back.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from core.domain.errors import BackendError, PlayrError
from core.domain.forms import ClubForm, OnboardingForm, ProfileFormBase, form_from_profile, merge_draft, parse_form
from core.domain.models import ClubClaimContext, Country, Profile, Role
from core.interfaces.gateways import IAvatarStorage
from core.interfaces.repositories import IProfileRepository, IWorldRepository
from core.state.drafts import DraftAutosaver, DraftStore
from core.state.session import ClientSession, ProfileEditState
from core.utils.images import AVATAR_UPLOAD_ERROR, optimize_avatar, validate_image

logger = logging.getLogger(__name__)

SAVE_FAILED_TOAST = "Some profile changes may not have saved. Please refresh the page."


class ProfileService:
    """Service for profile reads and edits"""

    def __init__(
        self,
        profile_repo: IProfileRepository,
        world_repo: IWorldRepository,
        drafts: DraftStore,
        avatar_storage: IAvatarStorage,
        autosave_ms: int = 400,
    ):
        self.profile_repo = profile_repo
        self.world_repo = world_repo
        self.drafts = drafts
        self.avatar_storage = avatar_storage
        self.autosave_ms = autosave_ms
        self._countries: Optional[List[Country]] = None

    async def get_profile(self, session: ClientSession, profile_id: Optional[UUID] = None) -> Optional[Profile]:
        profile_id = profile_id or session.user_id
        if profile_id is None:
            return None
        return await session.profiles.fetch(profile_id)

    async def _nationality_name(self, country_id: Optional[int]) -> Optional[str]:
        """Demonym for a country id (the legacy nationality text column)."""
        if not country_id:
            return None
        if self._countries is None:
            try:
                self._countries = await self.world_repo.get_countries()
            except BackendError as e:
                logger.warning(f"[PROFILE] Could not load countries: {e.message}")
                return None
        for country in self._countries:
            if country.id == country_id:
                return country.nationality_name or country.name
        return None

    # === CLAIMED CLUB CONTEXT ===

    async def load_claim_context(self, profile: Profile) -> Optional[ClubClaimContext]:
        """Regions and leagues for a club profile that claimed a directory club."""
        if profile.role != Role.CLUB:
            return None
        try:
            club = await self.world_repo.get_claim_for_profile(profile.id)
            if club is None:
                return None
            has_regions = await self.world_repo.country_has_regions(club.country_id)
            regions = await self.world_repo.get_regions(club.country_id) if has_regions else []
            leagues = await self.world_repo.get_leagues_for_location(club.country_id, club.province_id)
        except BackendError as e:
            logger.error(f"[PROFILE] Failed to fetch world claim for {profile.id}: {e.message}")
            return None

        return ClubClaimContext(
            world_club_id=club.id,
            country_id=club.country_id,
            province_id=club.province_id,
            has_regions=has_regions,
            regions=regions,
            leagues=leagues,
        )

    async def _ensure_region_leagues(self, claim: ClubClaimContext, region_id: Optional[int]) -> None:
        if not claim.has_regions or region_id is None:
            return
        if any(league.province_id == region_id for league in claim.leagues):
            return
        try:
            leagues = await self.world_repo.get_leagues_for_location(claim.country_id, region_id)
        except BackendError as e:
            logger.error(f"[PROFILE] Failed to load leagues for region {region_id}: {e.message}")
            return
        claim.leagues.extend(leagues)

    # === EDIT MODAL ===

    async def open_editor(self, session: ClientSession) -> Optional[ProfileEditState]:
        """Open the edit modal: profile-derived values with any saved draft on top."""
        profile = await self.get_profile(session)
        if profile is None:
            return None

        role = profile.role.value
        base = form_from_profile(profile)
        draft = await self.drafts.load(profile.id, role)
        form = merge_draft(base, draft)
        if draft:
            logger.debug(f"[PROFILE] Restored draft for {profile.id}/{role}")

        claim = await self.load_claim_context(profile)
        if claim and isinstance(form, ClubForm):
            await self._ensure_region_leagues(claim, form.world_region_id)

        session.edit = ProfileEditState(
            profile_id=profile.id,
            role=role,
            form=form,
            autosaver=DraftAutosaver(self.drafts, profile.id, role, self.autosave_ms),
            claim=claim,
        )
        return session.edit

    async def update_form(self, session: ClientSession, values: Dict[str, Any]) -> Optional[ProfileEditState]:
        """Apply typed values to the open form and schedule a draft autosave."""
        edit = session.edit
        if edit is None:
            return None

        values = dict(values)
        region_changed = "world_region_id" in values
        new_region = values.pop("world_region_id", None)

        data = edit.form.model_dump()
        data.update({k: v for k, v in values.items() if k in data and k != "role"})
        form = parse_form(data)

        if region_changed and isinstance(form, ClubForm):
            form.select_region(new_region)
            if edit.claim:
                await self._ensure_region_leagues(edit.claim, new_region)

        edit.form = form
        edit.errors = {}
        edit.autosaver.schedule(form.draft_data())
        return edit

    def leagues_for_form(self, edit: ProfileEditState):
        """Leagues selectable in the open club form."""
        if not edit.claim or not isinstance(edit.form, ClubForm):
            return []
        return edit.claim.leagues_for_region(edit.form.world_region_id)

    async def cancel_edit(self, session: ClientSession) -> None:
        """Close without saving. The draft stays for next time."""
        edit = session.edit
        if edit is None:
            return
        await edit.autosaver.flush()
        session.edit = None

    async def submit(self, session: ClientSession) -> Dict[str, str]:
        """
        Validate and apply the open form optimistically.
        Returns field errors; an empty dict means the modal closed.
        """
        edit = session.edit
        if edit is None:
            return {"form": "Nothing to save."}

        errors = edit.form.validate_form()
        if errors:
            edit.errors = errors
            return errors

        profile = session.profiles.get(edit.profile_id) or await session.profiles.fetch(edit.profile_id)
        if profile is None:
            return {"form": "Profile not found."}

        update = edit.form.to_update(edit.claim)
        if "nationality" in update and edit.form.nationality_country_id:
            update["nationality"] = await self._nationality_name(edit.form.nationality_country_id) or update["nationality"]

        snapshot, version = session.profiles.write_optimistic(profile.merged(update))

        # Close right away so the dashboard shows the new values
        edit.autosaver.cancel()
        session.edit = None

        session.spawn(self._persist(session, edit.profile_id, edit.role, update, snapshot, version))
        return {}

    async def _persist(
        self,
        session: ClientSession,
        profile_id: UUID,
        role: str,
        update: Dict[str, Any],
        snapshot: Optional[Profile],
        version: int,
    ) -> bool:
        logger.debug(f"[PROFILE] Updating {profile_id} fields: {sorted(update)}")
        try:
            row = await self.profile_repo.update(profile_id, update)
            if row is None:
                raise PlayrError("Update returned no row")
        except Exception as e:
            logger.error(f"[PROFILE] Update failed for {profile_id}: {e}")
            session.profiles.rollback(profile_id, snapshot, version)
            await self._refetch(session, profile_id, "profile-update-retry")
            # Modal stays closed; the user already sees their changes
            session.toasts.error(SAVE_FAILED_TOAST)
            return False

        session.profiles.confirm(row, version)
        # Pick up trigger-computed columns
        await self._refetch(session, profile_id, "profile-updated")
        await self.drafts.clear(profile_id, role)
        logger.info(f"[PROFILE] Updated {profile_id}")
        return True

    async def _refetch(self, session: ClientSession, profile_id: UUID, reason: str) -> None:
        try:
            await session.profiles.refetch(profile_id, reason)
        except Exception as e:
            logger.warning(f"[PROFILE] Refetch after update failed ({reason}): {e}")

    # === ONBOARDING ===

    async def complete_onboarding(self, session: ClientSession, form: OnboardingForm) -> Tuple[bool, str]:
        """Returns (success, error message or destination)."""
        error = form.validate_form()
        if error:
            return False, error

        user_id = session.user_id
        if user_id is None:
            return False, "Please sign in to continue."

        nationality = await self._nationality_name(form.nationality_country_id) or ""
        try:
            existing = await self.profile_repo.get_by_id(user_id)
            if existing is None:
                email = session.auth.email if session.auth else ""
                await self.profile_repo.create_for_new_user(user_id, email or "", form.role)
            row = await self.profile_repo.update(user_id, form.to_update(nationality))
        except BackendError as e:
            logger.error(f"[PROFILE] Onboarding failed for {user_id}: {e.message}")
            return False, "We couldn't save your profile. Please try again."

        if row is not None:
            session.profiles.put(row)
        logger.info(f"[PROFILE] Onboarding completed for {user_id} as {form.role}")
        return True, "/dashboard/profile"

    # === AVATAR ===

    async def upload_avatar(self, session: ClientSession, data: bytes) -> Tuple[bool, str]:
        """Returns (success, public URL or error message)."""
        user_id = session.user_id
        if user_id is None:
            return False, "Please sign in to continue."

        ok, error = validate_image(data)
        if not ok:
            return False, error

        loop = asyncio.get_running_loop()
        try:
            jpeg = await loop.run_in_executor(None, optimize_avatar, data)
        except OSError as e:
            logger.warning(f"[PROFILE] Avatar optimization failed for {user_id}: {e}")
            return False, AVATAR_UPLOAD_ERROR

        path = f"{user_id}/avatar_{int(time.time() * 1000)}.jpg"
        try:
            url = await self.avatar_storage.upload(path, jpeg, "image/jpeg")
        except BackendError as e:
            logger.error(f"[PROFILE] Avatar upload failed for {user_id}: {e.message}")
            return False, AVATAR_UPLOAD_ERROR

        previous = await self._replace_avatar_url(session, user_id, url)
        old_path = self.avatar_storage.path_from_url(previous or "")
        if old_path and old_path != path:
            await self.avatar_storage.remove(old_path)
        return True, url

    async def _replace_avatar_url(self, session: ClientSession, user_id: UUID, url: str) -> Optional[str]:
        """Point the open form (or the profile itself) at the new avatar. Returns the old URL."""
        edit = session.edit
        if edit is not None and edit.profile_id == user_id:
            edit.form.avatar_url = url
            edit.autosaver.schedule(edit.form.draft_data())
            # Saved with the rest of the form, so the old object must stay until then
            return None

        profile = session.profiles.get(user_id)
        previous = profile.avatar_url if profile else None
        try:
            row = await self.profile_repo.update(user_id, {"avatar_url": url})
        except BackendError as e:
            logger.error(f"[PROFILE] Saving avatar URL failed for {user_id}: {e.message}")
            return None
        if row is not None:
            session.profiles.put(row)
        return previous
