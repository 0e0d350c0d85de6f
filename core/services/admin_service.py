"""
Admin service - dashboard, data issues, user moderation and world CRUD.

Destructive actions are never run directly: callers get a ConfirmDialog
whose action runs only once the admin confirms it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from core.domain.constants import (
    ADMIN_SEARCH_LIMIT, DELETE_CONFIRM_TEXT, SIGNUP_TREND_DAYS, TOP_COUNTRIES_LIMIT,
)
from core.domain.errors import BackendError, ValidationFailed
from core.domain.models import (
    AdminProfileListItem, AuditLogEntry, AuthOrphan, DashboardStats, DataIssuesReport,
    EngagementSummary, Page, ProfileOrphan, ProfileSearchParams, SignupTrend, TopCountry,
    WorldClub, WorldLeague, WorldProvince,
)
from core.interfaces.gateways import IAdminActions
from core.interfaces.repositories import IAdminRepository, IWorldAdminRepository
from core.state.confirm import ConfirmDialog
from core.state.session import ClientSession
from core.state.table import TableController
from core.utils.text import normalize_club_name, slugify

logger = logging.getLogger(__name__)

WORLD_TABLES = {
    "regions": "world_provinces",
    "leagues": "world_leagues",
    "clubs": "world_clubs",
}


@dataclass
class AdminOverview:
    stats: DashboardStats
    trends: List[SignupTrend] = field(default_factory=list)
    top_countries: List[TopCountry] = field(default_factory=list)


def _display_name(profile: AdminProfileListItem) -> str:
    return profile.full_name or profile.email or str(profile.id)


def _int_or_none(value: Any, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed({field: "Must be a whole number"})


class AdminService:

    def __init__(
        self,
        admin_repo: IAdminRepository,
        world_admin_repo: IWorldAdminRepository,
        admin_actions: IAdminActions,
        admin_user_ids: Iterable[str] = (),
        page_size: int = 25,
        search_debounce_ms: int = 300,
    ):
        self.admin_repo = admin_repo
        self.world_admin_repo = world_admin_repo
        self.admin_actions = admin_actions
        self.admin_user_ids = {str(x) for x in admin_user_ids}
        self.page_size = page_size
        self.search_debounce_ms = search_debounce_ms

    async def is_admin(self, session: ClientSession) -> bool:
        """Configured admin ids pass directly; everyone else is checked server-side."""
        user_id = session.user_id
        if user_id is None:
            return False
        if str(user_id) in self.admin_user_ids:
            return True
        return await self.admin_repo.is_platform_admin()

    # === DASHBOARD ===

    async def overview(self) -> AdminOverview:
        stats, trends, top_countries = await asyncio.gather(
            self.admin_repo.get_dashboard_stats(),
            self.admin_repo.get_signup_trends(SIGNUP_TREND_DAYS),
            self.admin_repo.get_top_countries(TOP_COUNTRIES_LIMIT),
        )
        return AdminOverview(stats=stats, trends=trends, top_countries=top_countries)

    async def engagement(self) -> EngagementSummary:
        return await self.admin_repo.get_engagement_summary()

    async def audit_logs(
        self, action: Optional[str] = None, target_type: Optional[str] = None,
        admin_id: Optional[UUID] = None, page: int = 0,
    ) -> Page[AuditLogEntry]:
        return await self.admin_repo.get_audit_logs(
            action, target_type, admin_id, self.page_size, max(page, 0) * self.page_size,
        )

    # === DATA ISSUES ===

    async def data_issues(self) -> DataIssuesReport:
        """Orphans and broken references. Reported only, never repaired here."""
        auth_orphans, profile_orphans, broken = await asyncio.gather(
            self.admin_repo.get_auth_orphans(),
            self.admin_repo.get_profile_orphans(),
            self.admin_repo.get_broken_references(),
        )
        report = DataIssuesReport(
            auth_orphans=auth_orphans,
            profile_orphans=profile_orphans,
            broken_references=broken,
        )
        logger.info(f"[ADMIN] Data issues report: {report.total_issues} issues")
        return report

    def delete_auth_orphan_dialog(self, session: ClientSession, orphan: AuthOrphan) -> ConfirmDialog:
        async def action():
            await self.admin_actions.invoke(
                "delete_auth_user", str(orphan.user_id), session.access_token or "",
                {"reason": "Orphan cleanup from admin portal"},
            )
        return ConfirmDialog(
            title="Delete Auth User",
            message=f'This will permanently delete the auth user "{orphan.email}". This action cannot be undone.',
            action=action,
            confirm_label="Delete",
            confirm_text=DELETE_CONFIRM_TEXT,
            variant="danger",
        )

    def delete_profile_orphan_dialog(self, orphan: ProfileOrphan) -> ConfirmDialog:
        async def action():
            await self.admin_repo.delete_orphan_profile(orphan.profile_id)
        return ConfirmDialog(
            title="Delete Orphan Profile",
            message=(
                f'This will permanently delete the profile "{orphan.email}" and all related data. '
                "This action cannot be undone."
            ),
            action=action,
            confirm_label="Delete",
            confirm_text=DELETE_CONFIRM_TEXT,
            variant="danger",
        )

    # === USERS ===

    async def search_profiles(self, params: ProfileSearchParams) -> Page[AdminProfileListItem]:
        if not params.limit:
            params = params.model_copy(update={"limit": ADMIN_SEARCH_LIMIT})
        return await self.admin_repo.search_profiles(params)

    async def profile_details(self, profile_id: UUID) -> Dict[str, Any]:
        return await self.admin_repo.get_profile_details(profile_id)

    async def update_profile(self, profile_id: UUID, updates: Dict[str, Any], reason: Optional[str] = None):
        if not updates:
            raise ValidationFailed({"updates": "Nothing to update"})
        return await self.admin_repo.update_profile(profile_id, updates, reason)

    def block_dialog(self, profile: AdminProfileListItem, reason: Optional[str] = None) -> ConfirmDialog:
        async def action():
            await self.admin_repo.block_user(profile.id, reason)
        return ConfirmDialog(
            title="Block User",
            message=(
                f'Are you sure you want to block "{_display_name(profile)}"? '
                "They will not be able to access the platform."
            ),
            action=action,
            confirm_label="Block User",
            variant="danger",
        )

    def unblock_dialog(self, profile: AdminProfileListItem) -> ConfirmDialog:
        async def action():
            await self.admin_repo.unblock_user(profile.id)
        return ConfirmDialog(
            title="Unblock User",
            message=(
                f'Are you sure you want to unblock "{_display_name(profile)}"? '
                "They will regain access to the platform."
            ),
            action=action,
            confirm_label="Unblock User",
            variant="warning",
        )

    def test_account_dialog(self, profile: AdminProfileListItem, is_test: bool) -> ConfirmDialog:
        async def action():
            await self.admin_repo.set_test_account(profile.id, is_test)
        name = _display_name(profile)
        if is_test:
            title, label = "Mark as Test Account", "Mark as Test"
            message = f'This will mark "{name}" as a test account. They will be hidden from real users.'
        else:
            title, label = "Remove Test Flag", "Remove Test Flag"
            message = f'This will remove the test flag from "{name}". They will become visible to all users.'
        return ConfirmDialog(title=title, message=message, action=action, confirm_label=label, variant="warning")

    async def set_admin_status(self, session: ClientSession, user_id: UUID, is_admin: bool) -> Dict[str, Any]:
        return await self.admin_actions.invoke(
            "set_admin_status", str(user_id), session.access_token or "", {"is_admin": is_admin},
        )

    # === WORLD DIRECTORY ===

    def world_table(self, kind: str) -> TableController:
        loaders = {
            "regions": self.world_admin_repo.list_regions,
            "leagues": self.world_admin_repo.list_leagues,
            "clubs": self.world_admin_repo.list_clubs,
        }
        if kind not in loaders:
            raise ValueError(f"Unknown world table: {kind}")
        return TableController(loaders[kind], self.page_size, self.search_debounce_ms)

    def _world_row(self, kind: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validated insert/update payload for a world table."""
        if not isinstance(data, dict):
            raise ValidationFailed({"body": "Expected a JSON object"})
        if kind == "regions":
            name = str(data.get("name") or "").strip()
            errors = {}
            if not name:
                errors["name"] = "Name is required"
            if not data.get("country_id"):
                errors["country_id"] = "Country is required"
            if errors:
                raise ValidationFailed(errors)
            return {
                "name": name,
                "slug": slugify(str(data.get("slug") or name)),
                "country_id": _int_or_none(data["country_id"], "country_id"),
                "description": str(data.get("description") or "").strip() or None,
                "display_order": _int_or_none(data.get("display_order"), "display_order") or 0,
            }
        if kind == "leagues":
            name = str(data.get("name") or "").strip()
            if not name:
                raise ValidationFailed({"name": "Name is required"})
            return {
                "name": name,
                "slug": slugify(str(data.get("slug") or name)),
                "tier": _int_or_none(data.get("tier"), "tier"),
                "country_id": _int_or_none(data.get("country_id"), "country_id"),
                "province_id": _int_or_none(data.get("province_id"), "province_id"),
                "display_order": _int_or_none(data.get("display_order"), "display_order") or 0,
            }
        if kind == "clubs":
            club_name = str(data.get("club_name") or "").strip()
            errors = {}
            if not club_name:
                errors["club_name"] = "Club name is required"
            if not data.get("country_id"):
                errors["country_id"] = "Country is required"
            if errors:
                raise ValidationFailed(errors)
            return {
                "club_name": club_name,
                "club_name_normalized": normalize_club_name(club_name),
                "country_id": _int_or_none(data["country_id"], "country_id"),
                "province_id": _int_or_none(data.get("province_id"), "province_id"),
                "men_league_id": _int_or_none(data.get("men_league_id"), "men_league_id"),
                "women_league_id": _int_or_none(data.get("women_league_id"), "women_league_id"),
            }
        raise ValueError(f"Unknown world table: {kind}")

    async def save_world_row(self, kind: str, data: Dict[str, Any], row_id: Optional[Any] = None) -> Dict[str, Any]:
        row = self._world_row(kind, data)
        saved = await self.world_admin_repo.save(WORLD_TABLES[kind], row, row_id)
        logger.info(f"[WORLD_ADMIN] {'Created' if row_id is None else 'Updated'} {kind} row {saved.get('id', row_id)}")
        return saved

    async def region_delete_dialog(self, region: WorldProvince) -> ConfirmDialog:
        """Region deletes cascade, so the admin must type DELETE."""
        try:
            leagues, clubs = await self.world_admin_repo.count_region_dependents(region.id)
            message = f'Are you sure you want to delete "{region.name}"?'
            if leagues or clubs:
                message += (
                    f" This will cascade-delete {leagues} league(s)"
                    f" and unlink {clubs} club(s) from this region."
                )
            message += f" Type {DELETE_CONFIRM_TEXT} to confirm."
        except BackendError as e:
            logger.warning(f"[WORLD_ADMIN] Dependent count for region {region.id} failed: {e.message}")
            message = (
                f'Are you sure you want to delete "{region.name}"? '
                f"This may affect linked leagues and clubs. Type {DELETE_CONFIRM_TEXT} to confirm."
            )

        async def action():
            await self.world_admin_repo.delete("world_provinces", region.id)
        return ConfirmDialog(
            title="Delete Region",
            message=message,
            action=action,
            confirm_label="Delete",
            confirm_text=DELETE_CONFIRM_TEXT,
            variant="danger",
        )

    def league_delete_dialog(self, league: WorldLeague) -> ConfirmDialog:
        async def action():
            await self.world_admin_repo.delete("world_leagues", league.id)
        return ConfirmDialog(
            title="Delete League",
            message=(
                f'Are you sure you want to delete "{league.name}"? '
                "Clubs referencing this league will have their league field set to null."
            ),
            action=action,
            confirm_label="Delete",
            variant="danger",
        )

    def unclaim_dialog(self, club: WorldClub, claimed_profile_name: Optional[str] = None) -> ConfirmDialog:
        async def action():
            await self.world_admin_repo.unclaim_club(club.id)
        return ConfirmDialog(
            title="Unclaim Club",
            message=(
                f'Are you sure you want to unclaim "{club.club_name}"? '
                f'This will remove the link to the profile "{claimed_profile_name or club.claimed_profile_id}".'
            ),
            action=action,
            confirm_label="Unclaim",
            variant="warning",
        )

