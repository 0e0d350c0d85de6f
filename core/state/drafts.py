"""
Persistent drafts of in-progress profile edits, keyed by profile id and role.
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional
from uuid import UUID

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)


class DraftStore:
    """One JSON file per (profile, role) under a directory"""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, profile_id: UUID, role: str) -> str:
        return os.path.join(self.directory, f"profile-draft-{profile_id}-{role}.json")

    async def load(self, profile_id: UUID, role: str) -> Optional[Dict[str, Any]]:
        path = self._path(profile_id, role)
        if not await aiofiles.os.path.exists(path):
            return None
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.warning(f"[DRAFTS] Unreadable draft {path}: {e}")
            return None
        return data if isinstance(data, dict) else None

    async def save(self, profile_id: UUID, role: str, data: Dict[str, Any]) -> None:
        await aiofiles.os.makedirs(self.directory, exist_ok=True)
        path = self._path(profile_id, role)
        tmp_path = f"{path}.tmp"
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, default=str))
        await aiofiles.os.replace(tmp_path, path)

    async def clear(self, profile_id: UUID, role: str) -> None:
        path = self._path(profile_id, role)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass


class DraftAutosaver:
    """
    Debounced autosave: each change restarts the timer and only the last
    values within the window are written.
    """

    def __init__(self, store: DraftStore, profile_id: UUID, role: str, delay_ms: int):
        self.store = store
        self.profile_id = profile_id
        self.role = role
        self.delay = delay_ms / 1000
        self._task: Optional[asyncio.Task] = None

    def schedule(self, data: Dict[str, Any]) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.create_task(self._save_later(dict(data)))
        return self._task

    async def _save_later(self, data: Dict[str, Any]) -> None:
        await asyncio.sleep(self.delay)
        try:
            await self.store.save(self.profile_id, self.role, data)
        except OSError as e:
            logger.error(f"[DRAFTS] Autosave failed for {self.profile_id}/{self.role}: {e}")

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def flush(self) -> None:
        """Wait for a scheduled save to land."""
        if self._task is not None:
            await asyncio.wait({self._task})

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
