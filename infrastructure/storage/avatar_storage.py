"""
Avatar uploads to the Supabase storage bucket.
Uses the service client; callers pass paths already scoped to the owner.
"""

import logging

from core.domain.constants import AVATAR_BUCKET
from core.domain.errors import BackendError
from core.interfaces.gateways import IAvatarStorage
from infrastructure.database.supabase_client import get_supabase, run_sync

logger = logging.getLogger(__name__)


class SupabaseAvatarStorage(IAvatarStorage):

    def __init__(self, bucket: str = AVATAR_BUCKET):
        self.bucket = bucket

    @run_sync
    def _upload_sync(self, path: str, data: bytes, content_type: str) -> str:
        storage = get_supabase().storage.from_(self.bucket)
        try:
            storage.upload(path, data, {"content-type": content_type, "cache-control": "3600", "upsert": "false"})
        except Exception as e:
            logger.error(f"[STORAGE] Upload to {self.bucket}/{path} failed: {e}")
            raise BackendError(f"Upload failed: {e}") from e
        return storage.get_public_url(path)

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        return await self._upload_sync(path, data, content_type)

    @run_sync
    def _remove_sync(self, path: str) -> None:
        try:
            get_supabase().storage.from_(self.bucket).remove([path])
        except Exception as e:
            logger.warning(f"[STORAGE] Could not remove {self.bucket}/{path}: {e}")

    async def remove(self, path: str) -> None:
        await self._remove_sync(path)

    def path_from_url(self, url: str) -> str:
        """Object path inside the bucket for a public URL, or '' if foreign."""
        marker = f"/storage/v1/object/public/{self.bucket}/"
        if marker not in url:
            return ""
        return url.split(marker, 1)[1].split("?", 1)[0]
