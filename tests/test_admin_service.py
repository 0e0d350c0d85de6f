from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from core.domain.errors import BackendError, ValidationFailed
from core.domain.models import (
    AdminProfileListItem, AuthOrphan, BrokenReferences, DashboardStats, ProfileOrphan, WorldProvince,
)
from core.services.admin_service import AdminService
from tests.factories import signed_in


@pytest.fixture
def admin_repo():
    return AsyncMock()


@pytest.fixture
def world_admin_repo():
    return AsyncMock()


@pytest.fixture
def admin_actions():
    return AsyncMock()


@pytest.fixture
def admin(admin_repo, world_admin_repo, admin_actions):
    return AdminService(admin_repo, world_admin_repo, admin_actions, admin_user_ids=[str(ADMIN_ID)])


ADMIN_ID = UUID("11111111-1111-1111-1111-111111111111")
REGION = WorldProvince(id=7, country_id=1, name="Noord-Holland", slug="noord-holland")


# === ACCESS ===

async def test_signed_out_is_never_admin(admin, session, admin_repo):
    assert not await admin.is_admin(session)
    admin_repo.is_platform_admin.assert_not_awaited()


async def test_configured_admin_skips_rpc(admin, session, admin_repo):
    signed_in(session, ADMIN_ID)
    assert await admin.is_admin(session)
    admin_repo.is_platform_admin.assert_not_awaited()


async def test_other_users_checked_server_side(admin, session, admin_repo, user_id):
    signed_in(session, user_id)
    admin_repo.is_platform_admin.return_value = False
    assert not await admin.is_admin(session)
    admin_repo.is_platform_admin.assert_awaited_once()


# === DATA ISSUES ===

async def test_data_issues_report_totals(admin, admin_repo):
    admin_repo.get_auth_orphans.return_value = [AuthOrphan(user_id=uuid4(), email="ghost@example.com")]
    admin_repo.get_profile_orphans.return_value = [
        ProfileOrphan(profile_id=uuid4()), ProfileOrphan(profile_id=uuid4()),
    ]
    admin_repo.get_broken_references.return_value = BrokenReferences(
        messages_missing_sender=[{"message_id": "m1"}],
    )
    report = await admin.data_issues()
    assert report.total_issues == 4


async def test_auth_orphan_delete_requires_typed_confirmation(admin, session, admin_actions, user_id):
    signed_in(session, user_id)
    orphan = AuthOrphan(user_id=uuid4(), email="ghost@example.com")
    dialog = admin.delete_auth_orphan_dialog(session, orphan)
    assert '"ghost@example.com"' in dialog.message

    assert not await dialog.confirm()
    admin_actions.invoke.assert_not_awaited()

    dialog.type("DELETE")
    assert await dialog.confirm()
    admin_actions.invoke.assert_awaited_once()
    action, target, token, payload = admin_actions.invoke.await_args.args
    assert (action, target, token) == ("delete_auth_user", str(orphan.user_id), "token-1")
    assert not dialog.is_open


# === USERS ===

def test_block_dialog_names_the_user(admin):
    profile = AdminProfileListItem(id=uuid4(), email="sam@example.com", full_name="Sam Rivera")
    dialog = admin.block_dialog(profile)
    assert dialog.title == "Block User"
    assert '"Sam Rivera"' in dialog.message
    assert not dialog.confirm_disabled


def test_block_dialog_falls_back_to_email(admin):
    profile = AdminProfileListItem(id=uuid4(), email="sam@example.com")
    assert '"sam@example.com"' in admin.block_dialog(profile).message


async def test_failed_block_keeps_dialog_open(admin, admin_repo):
    admin_repo.block_user.side_effect = BackendError("permission denied")
    dialog = admin.block_dialog(AdminProfileListItem(id=uuid4(), full_name="Sam"))
    assert not await dialog.confirm()
    assert dialog.is_open
    assert "permission denied" in dialog.error


async def test_update_profile_needs_changes(admin):
    with pytest.raises(ValidationFailed):
        await admin.update_profile(uuid4(), {})


# === WORLD ===

async def test_region_delete_lists_dependents(admin, world_admin_repo):
    world_admin_repo.count_region_dependents.return_value = (3, 12)
    dialog = await admin.region_delete_dialog(REGION)
    assert "cascade-delete 3 league(s)" in dialog.message
    assert "unlink 12 club(s)" in dialog.message
    assert dialog.message.endswith("Type DELETE to confirm.")

    dialog.type("delete")
    assert dialog.confirm_disabled
    dialog.type("DELETE")
    assert await dialog.confirm()
    world_admin_repo.delete.assert_awaited_once_with("world_provinces", 7)


async def test_region_delete_without_dependents(admin, world_admin_repo):
    world_admin_repo.count_region_dependents.return_value = (0, 0)
    dialog = await admin.region_delete_dialog(REGION)
    assert dialog.message == 'Are you sure you want to delete "Noord-Holland"? Type DELETE to confirm.'


async def test_region_delete_when_count_fails(admin, world_admin_repo):
    world_admin_repo.count_region_dependents.side_effect = BackendError("timeout")
    dialog = await admin.region_delete_dialog(REGION)
    assert "This may affect linked leagues and clubs." in dialog.message
    assert dialog.confirm_text == "DELETE"


def test_world_row_validation(admin):
    with pytest.raises(ValidationFailed) as exc:
        admin._world_row("clubs", {"club_name": "  "})
    assert set(exc.value.errors) == {"club_name", "country_id"}


def test_world_row_region_slug(admin):
    row = admin._world_row("regions", {"name": " Noord Holland ", "country_id": "1"})
    assert row["name"] == "Noord Holland"
    assert row["slug"] == "noord-holland"
    assert row["country_id"] == 1


def test_world_row_club_normalized_name(admin):
    row = admin._world_row("clubs", {"club_name": "HC  Bloemendaal", "country_id": 1, "men_league_id": ""})
    assert row["club_name_normalized"] == "hc bloemendaal"
    assert row["men_league_id"] is None


def test_world_row_rejects_non_numeric_ids(admin):
    with pytest.raises(ValidationFailed) as exc:
        admin._world_row("regions", {"name": "North", "country_id": "abc"})
    assert exc.value.errors == {"country_id": "Must be a whole number"}

    with pytest.raises(ValidationFailed) as exc:
        admin._world_row("leagues", {"name": "Hoofdklasse", "tier": "first"})
    assert exc.value.errors == {"tier": "Must be a whole number"}


def test_world_row_requires_object(admin):
    with pytest.raises(ValidationFailed) as exc:
        admin._world_row("clubs", ["HC Bloemendaal"])
    assert exc.value.errors == {"body": "Expected a JSON object"}


async def test_save_world_row(admin, world_admin_repo):
    world_admin_repo.save.return_value = {"id": 3, "name": "Hoofdklasse"}
    saved = await admin.save_world_row("leagues", {"name": "Hoofdklasse", "tier": "1"})
    assert saved["id"] == 3
    table, row, row_id = world_admin_repo.save.await_args.args
    assert table == "world_leagues"
    assert row["tier"] == 1
    assert row_id is None


def test_unknown_world_table(admin):
    with pytest.raises(ValueError):
        admin.world_table("teams")


async def test_overview_gathers_stats(admin, admin_repo):
    admin_repo.get_dashboard_stats.return_value = DashboardStats()
    admin_repo.get_signup_trends.return_value = []
    admin_repo.get_top_countries.return_value = []
    overview = await admin.overview()
    assert overview.trends == []
    admin_repo.get_signup_trends.assert_awaited_once_with(30)
