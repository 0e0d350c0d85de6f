"""
Client for the admin-actions edge function.
Runs privileged auth operations (deleting auth users, granting admin)
that cannot go through PostgREST.
"""

import logging
import os
from typing import Any, Dict, Optional

import httpx

from core.domain.errors import BackendError
from core.interfaces.gateways import IAdminActions

logger = logging.getLogger(__name__)

ACTION_ERRORS = {
    "delete_auth_user": "Failed to delete auth user",
    "set_admin_status": "Failed to set admin status",
}


class EdgeFunctionAdminActions(IAdminActions):

    def __init__(self, supabase_url: Optional[str] = None, timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (supabase_url or os.environ.get("SUPABASE_URL", "")).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/functions/v1/admin-actions"

    async def invoke(
        self, action: str, target_id: str, access_token: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if not access_token:
            raise BackendError("No active session")

        body: Dict[str, Any] = {"action": action, "target_id": target_id}
        if params:
            body["params"] = params

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    json=body,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as e:
                logger.error(f"[ADMIN_ACTIONS] {action} request failed: {e}")
                raise BackendError(f"{ACTION_ERRORS.get(action, 'Admin action failed')}: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.status_code >= 400 or not result.get("success"):
            message = result.get("error") or ACTION_ERRORS.get(action, "Admin action failed")
            logger.warning(f"[ADMIN_ACTIONS] {action} on {target_id} rejected: {message}")
            raise BackendError(message)

        logger.info(f"[ADMIN_ACTIONS] {action} on {target_id} succeeded")
        return result
