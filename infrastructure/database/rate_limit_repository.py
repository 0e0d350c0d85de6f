"""
Backend rate limit checks. Checks fail open: an RPC error returns None.
"""

import logging
from typing import Any, Dict, Optional
from core.domain.errors import BackendError
from core.interfaces.repositories import IRateLimitRepository
from infrastructure.database.supabase_client import db, run_sync

logger = logging.getLogger(__name__)

# kind -> (rpc name, identifier param)
_CHECKS = {
    "login": ("check_login_rate_limit", "p_ip"),
    "signup": ("check_signup_rate_limit", "p_ip"),
    "password_reset": ("check_password_reset_rate_limit", "p_email"),
}


class SupabaseRateLimitRepository(IRateLimitRepository):

    @run_sync
    def _check_sync(self, rpc_name: str, params: Dict[str, Any]):
        return db().rpc(rpc_name, params).execute().data

    async def check(self, kind: str, identifier: str) -> Optional[Dict[str, Any]]:
        rpc_name, param = _CHECKS[kind]
        try:
            data = await self._check_sync(rpc_name, {param: identifier})
        except BackendError as e:
            logger.error(f"[RATE_LIMIT] {kind} rate limit check failed: {e.message}")
            return None
        if isinstance(data, list):
            data = data[0] if data else None
        return data
