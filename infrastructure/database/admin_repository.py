"""
Supabase implementation of the admin repository.

All admin RPCs check is_platform_admin() server-side against the caller's
identity, so these calls must run under the admin's access token.
Failures are re-raised with a "Failed to <action>" prefix.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID
from core.domain.errors import BackendError
from core.domain.models import (
    DashboardStats, SignupTrend, TopCountry,
    AuthOrphan, ProfileOrphan, BrokenReferences,
    AdminProfileListItem, ProfileSearchParams, AuditLogEntry, EngagementSummary,
    Page,
)
from core.interfaces.repositories import IAdminRepository
from infrastructure.database.supabase_client import db, run_sync

logger = logging.getLogger(__name__)


def _single(data) -> Dict[str, Any]:
    if isinstance(data, list):
        return data[0] if data else {}
    return data or {}


def _total_count(rows: List[dict]) -> int:
    """List RPCs repeat the overall count on every row."""
    return int(rows[0].get("total_count") or 0) if rows else 0


class SupabaseAdminRepository(IAdminRepository):

    @run_sync
    def _rpc_sync(self, name: str, params: Optional[Dict[str, Any]] = None):
        return db().rpc(name, params or {}).execute().data

    async def _call(self, action: str, name: str, params: Optional[Dict[str, Any]] = None):
        try:
            return await self._rpc_sync(name, params)
        except BackendError as e:
            logger.error(f"[ADMIN] {name} failed: {e.message}")
            raise e.with_prefix(f"Failed to {action}")

    async def is_platform_admin(self) -> bool:
        try:
            data = await self._rpc_sync("is_platform_admin")
        except BackendError as e:
            logger.warning(f"[ADMIN] is_platform_admin check failed: {e.message}")
            return False
        return bool(data)

    async def get_dashboard_stats(self) -> DashboardStats:
        data = await self._call("get dashboard stats", "admin_get_dashboard_stats")
        return DashboardStats.model_validate(_single(data))

    async def get_signup_trends(self, days: int) -> List[SignupTrend]:
        rows = await self._call("get signup trends", "admin_get_signup_trends", {"p_days": days})
        return [SignupTrend.model_validate(r) for r in rows or []]

    async def get_top_countries(self, limit: int) -> List[TopCountry]:
        rows = await self._call("get top countries", "admin_get_top_countries", {"p_limit": limit})
        return [TopCountry.model_validate(r) for r in rows or []]

    async def get_auth_orphans(self) -> List[AuthOrphan]:
        rows = await self._call("get auth orphans", "admin_get_auth_orphans")
        return [AuthOrphan.model_validate(r) for r in rows or []]

    async def get_profile_orphans(self) -> List[ProfileOrphan]:
        rows = await self._call("get profile orphans", "admin_get_profile_orphans")
        return [ProfileOrphan.model_validate(r) for r in rows or []]

    async def get_broken_references(self) -> BrokenReferences:
        data = await self._call("get broken references", "admin_get_broken_references")
        return BrokenReferences.model_validate(_single(data))

    async def search_profiles(self, params: ProfileSearchParams) -> Page[AdminProfileListItem]:
        rows = await self._call("search profiles", "admin_search_profiles", {
            "p_query": params.query or None,
            "p_role": params.role.value if params.role else None,
            "p_is_blocked": params.is_blocked,
            "p_is_test_account": params.is_test_account,
            "p_onboarding_completed": params.onboarding_completed,
            "p_limit": params.limit or 50,
            "p_offset": params.offset or 0,
        }) or []
        return Page[AdminProfileListItem](
            rows=[AdminProfileListItem.model_validate(r) for r in rows],
            total_count=_total_count(rows),
        )

    async def get_profile_details(self, profile_id: UUID) -> Dict[str, Any]:
        data = await self._call("get profile details", "admin_get_profile_details",
                                {"p_profile_id": str(profile_id)})
        return _single(data)

    async def block_user(self, profile_id: UUID, reason: Optional[str]) -> Dict[str, Any]:
        data = await self._call("block user", "admin_block_user",
                                {"p_profile_id": str(profile_id), "p_reason": reason or None})
        return _single(data)

    async def unblock_user(self, profile_id: UUID) -> Dict[str, Any]:
        data = await self._call("unblock user", "admin_unblock_user", {"p_profile_id": str(profile_id)})
        return _single(data)

    async def update_profile(self, profile_id: UUID, updates: Dict[str, Any], reason: Optional[str]) -> Dict[str, Any]:
        data = await self._call("update profile", "admin_update_profile", {
            "p_profile_id": str(profile_id),
            "p_updates": updates,
            "p_reason": reason or None,
        })
        return _single(data)

    async def set_test_account(self, profile_id: UUID, is_test: bool) -> Dict[str, Any]:
        data = await self._call("set test account status", "admin_set_test_account",
                                {"p_profile_id": str(profile_id), "p_is_test": is_test})
        return _single(data)

    async def delete_orphan_profile(self, profile_id: UUID) -> Dict[str, Any]:
        data = await self._call("delete orphan profile", "admin_delete_orphan_profile",
                                {"p_profile_id": str(profile_id)})
        return _single(data)

    async def get_audit_logs(
        self, action: Optional[str], target_type: Optional[str], admin_id: Optional[UUID],
        limit: int, offset: int,
    ) -> Page[AuditLogEntry]:
        rows = await self._call("get audit logs", "admin_get_audit_logs", {
            "p_action": action or None,
            "p_target_type": target_type or None,
            "p_admin_id": str(admin_id) if admin_id else None,
            "p_limit": limit or 50,
            "p_offset": offset or 0,
        }) or []
        return Page[AuditLogEntry](
            rows=[AuditLogEntry.model_validate(r) for r in rows],
            total_count=_total_count(rows),
        )

    async def get_engagement_summary(self) -> EngagementSummary:
        data = await self._call("get engagement summary", "admin_get_engagement_summary")
        return EngagementSummary.model_validate(_single(data))
