"""
Client-side profile cache with explicit invalidation.

Optimistic writes bump a per-profile version. Reconciliation (server row or
rollback) only applies when no newer write happened in between, so a slow
response can never overwrite a later edit.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple
from uuid import UUID

from core.domain.models import Profile

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[UUID], Awaitable[Optional[Profile]]]


class ProfileStore:

    def __init__(self, loader: ProfileLoader):
        self._loader = loader
        self._profiles: Dict[UUID, Profile] = {}
        self._versions: Dict[UUID, int] = {}
        # profile_id -> reason it must be refetched
        self._stale: Dict[UUID, str] = {}

    def get(self, profile_id: UUID) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    def version(self, profile_id: UUID) -> int:
        return self._versions.get(profile_id, 0)

    def is_stale(self, profile_id: UUID) -> bool:
        return profile_id in self._stale

    async def fetch(self, profile_id: UUID, force: bool = False) -> Optional[Profile]:
        """Cached profile, loading it when missing, stale or forced."""
        if not force and profile_id in self._profiles and profile_id not in self._stale:
            return self._profiles[profile_id]

        version = self.version(profile_id)
        profile = await self._loader(profile_id)
        if self.version(profile_id) != version:
            # An optimistic write landed while loading; keep it
            return self._profiles.get(profile_id)

        self._stale.pop(profile_id, None)
        if profile is None:
            self._profiles.pop(profile_id, None)
        else:
            self._profiles[profile_id] = profile
        return profile

    def put(self, profile: Profile) -> int:
        """Store a fresh row without treating it as an optimistic write."""
        self._profiles[profile.id] = profile
        self._stale.pop(profile.id, None)
        return self.version(profile.id)

    def write_optimistic(self, profile: Profile) -> Tuple[Optional[Profile], int]:
        """Replace the cached copy; returns (snapshot, version) for reconciliation."""
        snapshot = self._profiles.get(profile.id)
        version = self.version(profile.id) + 1
        self._versions[profile.id] = version
        self._profiles[profile.id] = profile
        return snapshot, version

    def confirm(self, profile: Profile, version: int) -> bool:
        """Apply the server row if the optimistic write is still the latest."""
        if self.version(profile.id) != version:
            logger.debug(f"[PROFILE_CACHE] Skip confirm for {profile.id}: newer write pending")
            return False
        self._profiles[profile.id] = profile
        return True

    def rollback(self, profile_id: UUID, snapshot: Optional[Profile], version: int) -> bool:
        """Restore the pre-write snapshot if nothing newer was written."""
        if self.version(profile_id) != version:
            logger.debug(f"[PROFILE_CACHE] Skip rollback for {profile_id}: newer write pending")
            return False
        if snapshot is None:
            self._profiles.pop(profile_id, None)
        else:
            self._profiles[profile_id] = snapshot
        return True

    def invalidate(self, profile_id: UUID, reason: str) -> None:
        """Mark the cached copy stale; the next fetch reloads it."""
        self._stale[profile_id] = reason
        logger.debug(f"[PROFILE_CACHE] Invalidated {profile_id} ({reason})")

    async def refetch(self, profile_id: UUID, reason: str) -> Optional[Profile]:
        self.invalidate(profile_id, reason)
        return await self.fetch(profile_id)
