import asyncio
from unittest.mock import AsyncMock

import pytest
from yarl import URL

from core.domain.models import ClubSearchResult, CountryDirectoryEntry, Page
from core.state.confirm import ConfirmDialog
from core.state.debounce import LatestQueryDebouncer
from core.state.drafts import DraftAutosaver, DraftStore
from core.state.profile_store import ProfileStore
from core.state.search_select import ClubPicker, HighlightList, WorldSearchDropdown, club_url
from core.state.table import TableController
from core.state.tabs import ADMIN_WORLD_TABS, PLAYER_TABS
from core.state.toasts import ToastStore
from tests.factories import make_profile


def _club(name="HC Bloemendaal", **fields):
    data = {
        "id": "00000000-0000-0000-0000-0000000000aa",
        "club_name": name,
        "country_id": 1,
        "country_code": "NL",
    }
    data.update(fields)
    return ClubSearchResult(**data)


# === DEBOUNCE ===

async def test_latest_query_wins():
    calls = []

    async def search(query):
        calls.append(query)
        return f"results:{query}"

    debouncer = LatestQueryDebouncer(search, delay_ms=20)
    first = asyncio.create_task(debouncer.request("bl"))
    await asyncio.sleep(0)
    second = await debouncer.request("bloem")

    assert await first is None
    assert second == "results:bloem"
    assert calls == ["bloem"]
    assert debouncer.latest_result == "results:bloem"


async def test_cancel_drops_pending_query():
    search = AsyncMock(return_value=["x"])
    debouncer = LatestQueryDebouncer(search, delay_ms=20)
    task = debouncer.submit("hockey")
    debouncer.cancel()
    await asyncio.sleep(0.05)
    assert task.cancelled()
    search.assert_not_awaited()
    assert not debouncer.pending


# === PROFILE CACHE ===

async def test_stale_confirm_does_not_clobber_newer_write(rows):
    profile = rows.add(make_profile(full_name="Before"))
    store = ProfileStore(rows.load)
    await store.fetch(profile.id)

    _, first_version = store.write_optimistic(profile.merged({"full_name": "First"}))
    _, second_version = store.write_optimistic(profile.merged({"full_name": "Second"}))

    assert not store.confirm(profile.merged({"full_name": "First (server)"}), first_version)
    assert store.get(profile.id).full_name == "Second"
    assert store.confirm(profile.merged({"full_name": "Second (server)"}), second_version)
    assert store.get(profile.id).full_name == "Second (server)"


async def test_rollback_restores_snapshot_only_for_latest_write(rows):
    profile = rows.add(make_profile(full_name="Before"))
    store = ProfileStore(rows.load)
    await store.fetch(profile.id)

    snapshot, version = store.write_optimistic(profile.merged({"full_name": "Optimistic"}))
    assert store.rollback(profile.id, snapshot, version)
    assert store.get(profile.id).full_name == "Before"

    snapshot, version = store.write_optimistic(profile.merged({"full_name": "One"}))
    store.write_optimistic(profile.merged({"full_name": "Two"}))
    assert not store.rollback(profile.id, snapshot, version)
    assert store.get(profile.id).full_name == "Two"


async def test_load_racing_an_optimistic_write_keeps_the_write(rows):
    profile = rows.add(make_profile(full_name="Server"))
    store = None

    async def loader(profile_id):
        store.write_optimistic(profile.merged({"full_name": "Typed"}))
        return profile

    store = ProfileStore(loader)
    result = await store.fetch(profile.id)
    assert result.full_name == "Typed"


async def test_invalidate_forces_reload(rows):
    profile = rows.add(make_profile())
    store = ProfileStore(rows.load)
    await store.fetch(profile.id)
    await store.fetch(profile.id)
    assert rows.loads == 1

    store.invalidate(profile.id, "test")
    assert store.is_stale(profile.id)
    await store.fetch(profile.id)
    assert rows.loads == 2
    assert not store.is_stale(profile.id)


# === TOASTS ===

def test_toasts_drain_in_order():
    toasts = ToastStore()
    toasts.success("Saved")
    dropped = toasts.error("Oops")
    toasts.info("FYI")
    toasts.dismiss(dropped.id)
    assert [t.message for t in toasts.drain()] == ["Saved", "FYI"]
    assert toasts.drain() == []


# === DRAFTS ===

async def test_draft_store_round_trip(tmp_path, user_id):
    store = DraftStore(str(tmp_path / "drafts"))
    assert await store.load(user_id, "player") is None
    await store.save(user_id, "player", {"full_name": "Draft"})
    assert await store.load(user_id, "player") == {"full_name": "Draft"}
    assert await store.load(user_id, "coach") is None
    await store.clear(user_id, "player")
    assert await store.load(user_id, "player") is None


async def test_autosave_writes_only_last_values(tmp_path, user_id):
    store = DraftStore(str(tmp_path))
    store.save = AsyncMock()
    autosaver = DraftAutosaver(store, user_id, "player", delay_ms=10)
    autosaver.schedule({"full_name": "S"})
    autosaver.schedule({"full_name": "Sa"})
    autosaver.schedule({"full_name": "Sam"})
    await autosaver.flush()
    store.save.assert_awaited_once_with(user_id, "player", {"full_name": "Sam"})


# === TABLE ===

async def test_country_filter_resets_page_and_region():
    loader = AsyncMock(return_value=Page(rows=[1, 2, 3], total_count=60))
    table = TableController(loader, page_size=25)
    await table.load()
    await table.go_to(2)
    table.filters["province_id"] = 7

    await table.set_filter("country_id", 3)

    assert table.page == 0
    assert table.filters["province_id"] is None
    filters, page, size = loader.await_args.args
    assert filters["country_id"] == 3
    assert page == 0 and size == 25


async def test_page_navigation_clamps():
    loader = AsyncMock(return_value=Page(rows=[], total_count=60))
    table = TableController(loader, page_size=25)
    await table.load()
    assert table.total_pages == 3
    await table.go_to(10)
    assert table.page == 2
    assert not table.has_next
    await table.previous_page()
    assert table.page == 1
    assert table.showing == "26 - 50 of 60"


async def test_false_is_a_real_filter_value():
    loader = AsyncMock(return_value=Page())
    table = TableController(loader, page_size=25)
    await table.set_filter("is_claimed", False)
    assert table.filters["is_claimed"] is False
    await table.set_filter("is_claimed", "")
    assert table.filters["is_claimed"] is None


async def test_table_keeps_rows_when_load_fails():
    loader = AsyncMock(return_value=Page(rows=["a"], total_count=1))
    table = TableController(loader, page_size=25)
    await table.load()
    loader.side_effect = RuntimeError("boom")
    rows = await table.load()
    assert rows == ["a"]
    assert table.error == "boom"


# === CONFIRM DIALOG ===

async def test_typed_confirmation_gates_action():
    action = AsyncMock()
    dialog = ConfirmDialog("Delete Region", "Sure?", action, confirm_text="DELETE")

    dialog.type("delete")
    assert dialog.confirm_disabled
    assert not await dialog.confirm()
    action.assert_not_awaited()

    dialog.type("DELETE")
    assert await dialog.confirm()
    action.assert_awaited_once()
    assert not dialog.is_open


async def test_failed_action_keeps_dialog_open():
    dialog = ConfirmDialog("Block User", "Sure?", AsyncMock(side_effect=RuntimeError("denied")))
    assert not await dialog.confirm()
    assert dialog.is_open
    assert dialog.error == "denied"


# === TABS ===

def test_tab_read_falls_back_to_default():
    assert PLAYER_TABS.read(URL("/dashboard/profile?tab=bogus")) == "profile"
    assert PLAYER_TABS.read(URL("/dashboard/profile?tab=journey")) == "journey"


def test_tab_write_omits_default_and_keeps_other_params():
    url = URL("/admin/world?tab=leagues&country=3")
    assert str(ADMIN_WORLD_TABS.write(url, "clubs")) == "/admin/world?country=3"
    assert ADMIN_WORLD_TABS.write(url, "regions").query["tab"] == "regions"


# === SEARCH WIDGETS ===

async def test_club_picker_links_and_unlinks():
    search = AsyncMock(return_value=[_club()])
    picker = ClubPicker(search, debounce_ms=0)

    assert await picker.type("b") == []
    search.assert_not_awaited()

    results = await picker.type("Bloem")
    assert [c.club_name for c in results] == ["HC Bloemendaal"]
    assert picker.key("ArrowDown") is None
    chosen = picker.key("Enter")
    assert chosen.club_name == "HC Bloemendaal"
    assert picker.selected_club_id == str(chosen.id)

    search.return_value = []
    await picker.type("HC Bloemendaal 2")
    assert picker.selected_club_id is None
    assert picker.can_add_to_directory


async def test_world_dropdown_lists_countries_then_clubs():
    countries = [
        CountryDirectoryEntry(country_id=1, country_code="NL", country_name="Netherlands"),
        CountryDirectoryEntry(country_id=2, country_code="NZ", country_name="New Zealand"),
    ]
    search = AsyncMock(return_value=[_club("Netherlands Hockey Club")])
    dropdown = WorldSearchDropdown(countries, search, debounce_ms=0)

    items = await dropdown.type("nether")
    assert [i.type for i in items] == ["country", "club"]
    assert dropdown.select(0) == "/world/nl"
    assert dropdown.query == ""


def test_club_url_points_at_league():
    club = _club(province_slug="noord-holland", women_league_id=5)
    assert club_url(club) == "/world/nl/noord-holland?club=00000000-0000-0000-0000-0000000000aa&league=5"
    men_only = _club(men_league_id=9)
    assert "gender=men" in club_url(men_only)


def test_highlight_list_needs_items():
    with pytest.raises(TypeError):
        HighlightList()

    class Fixed(HighlightList):
        items = ["a", "b"]

    widget = Fixed()
    widget.open = True
    widget.key("ArrowDown")
    assert widget.key("Enter") == "a"
