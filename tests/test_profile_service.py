import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from core.domain.errors import BackendError
from core.domain.forms import ClubForm, OnboardingForm
from core.domain.models import Brand, BrandInput, WorldClub, WorldLeague, WorldProvince
from core.services.brand_service import BrandService
from core.services.profile_service import SAVE_FAILED_TOAST, ProfileService
from core.state.drafts import DraftStore
from core.utils.images import AVATAR_UPLOAD_ERROR
from tests.factories import make_profile, signed_in


@pytest.fixture
def profile_repo(rows):
    repo = AsyncMock()

    async def update(profile_id, update):
        row = rows.rows[profile_id].merged(update)
        rows.rows[profile_id] = row
        return row

    repo.update.side_effect = update
    repo.get_by_id.side_effect = rows.load
    return repo


@pytest.fixture
def world_repo():
    return AsyncMock()


@pytest.fixture
def drafts(tmp_path):
    return DraftStore(str(tmp_path / "drafts"))


@pytest.fixture
def service(profile_repo, world_repo, drafts):
    storage = AsyncMock()
    storage.path_from_url = MagicMock(return_value="")
    return ProfileService(profile_repo, world_repo, drafts, storage, autosave_ms=10)


async def test_submit_shows_new_values_before_persisting(service, session, rows, profile_repo, drafts):
    profile = rows.add(make_profile(full_name="Before"))
    signed_in(session, profile.id)

    await service.open_editor(session)
    await service.update_form(session, {"full_name": "After"})
    errors = await service.submit(session)

    assert errors == {}
    assert session.edit is None
    assert session.profiles.get(profile.id).full_name == "After"
    profile_repo.update.assert_not_awaited()

    await session.settle()
    profile_repo.update.assert_awaited_once()
    assert session.profiles.get(profile.id).full_name == "After"
    assert await drafts.load(profile.id, "player") is None
    assert session.toasts.pending() == []


async def test_failed_save_rolls_back_and_keeps_modal_closed(service, session, rows, profile_repo):
    profile = rows.add(make_profile(full_name="Before"))
    signed_in(session, profile.id)
    profile_repo.update.side_effect = BackendError("permission denied")

    await service.open_editor(session)
    await service.update_form(session, {"full_name": "After"})
    await service.submit(session)
    await session.settle()

    assert session.edit is None
    assert session.profiles.get(profile.id).full_name == "Before"
    assert [t.message for t in session.toasts.drain()] == [SAVE_FAILED_TOAST]


async def test_invalid_form_stays_open_with_errors(service, session, rows, profile_repo):
    profile = rows.add(make_profile())
    signed_in(session, profile.id)

    await service.open_editor(session)
    await service.update_form(session, {"full_name": ""})
    errors = await service.submit(session)

    assert errors == {"full_name": "Full name is required."}
    assert session.edit is not None
    profile_repo.update.assert_not_awaited()


async def test_cancel_keeps_draft_until_successful_save(service, session, rows, drafts):
    profile = rows.add(make_profile(full_name="Saved Name"))
    signed_in(session, profile.id)

    await service.open_editor(session)
    await service.update_form(session, {"full_name": "Half typed"})
    await service.cancel_edit(session)

    assert session.edit is None
    assert (await drafts.load(profile.id, "player"))["full_name"] == "Half typed"

    reopened = await service.open_editor(session)
    assert reopened.form.full_name == "Half typed"

    await service.submit(session)
    await session.settle()
    assert await drafts.load(profile.id, "player") is None


async def test_club_region_change_clears_and_reloads_leagues(service, session, rows, world_repo):
    profile = rows.add(make_profile("club", full_name="HC Utrecht", world_region_id=1, mens_league_id=10))
    signed_in(session, profile.id, role="club")

    leagues = {
        1: [WorldLeague(id=10, name="Region One League", province_id=1)],
        2: [WorldLeague(id=20, name="Region Two League", province_id=2)],
    }
    world_repo.get_claim_for_profile.return_value = WorldClub(
        id="00000000-0000-0000-0000-0000000000c1", club_name="HC Utrecht", country_id=1, province_id=1,
    )
    world_repo.country_has_regions.return_value = True
    world_repo.get_regions.return_value = [
        WorldProvince(id=1, country_id=1, name="One", slug="one"),
        WorldProvince(id=2, country_id=1, name="Two", slug="two"),
    ]
    world_repo.get_leagues_for_location.side_effect = lambda country_id, region_id: list(leagues[region_id])

    edit = await service.open_editor(session)
    assert [league.id for league in service.leagues_for_form(edit)] == [10]

    edit = await service.update_form(session, {"world_region_id": 2})
    assert isinstance(edit.form, ClubForm)
    assert edit.form.mens_league_id is None
    assert [league.id for league in service.leagues_for_form(edit)] == [20]


async def test_onboarding_creates_missing_profile(service, session, rows, profile_repo, user_id):
    signed_in(session, user_id)

    async def create(uid, email, role):
        return rows.add(make_profile(role, id=uid, full_name=None, onboarding_completed=False))

    profile_repo.create_for_new_user.side_effect = create
    form = OnboardingForm(
        role="player", full_name="Sam", city="Utrecht", nationality_country_id=None, position="forward", gender="m",
    )
    ok, error = await service.complete_onboarding(session, form)
    assert not ok and error == "Nationality is required."

    service._countries = []
    form.nationality_country_id = 5
    ok, destination = await service.complete_onboarding(session, form)
    assert ok and destination == "/dashboard/profile"
    assert session.profiles.get(user_id).onboarding_completed
    assert session.profiles.get(user_id).gender == "Men"


async def test_avatar_rejects_non_images(service, session, user_id):
    signed_in(session, user_id)
    ok, error = await service.upload_avatar(session, b"not an image")
    assert not ok
    assert "PNG or JPG" in error


# === BRAND ===

@pytest.fixture
def brand_repo():
    repo = AsyncMock()
    repo.get_my_brand.return_value = None
    repo.create.return_value = {"slug": "acme-sticks"}
    return repo


async def test_brand_onboarding_completes_profile(service, session, rows, profile_repo, brand_repo, user_id):
    signed_in(session, user_id, role="brand")
    form = OnboardingForm(role="brand", full_name="Acme Sticks", category="equipment")
    profile_repo.create_for_new_user.side_effect = (
        lambda uid, email, role: rows.add(make_profile(role, id=uid, full_name=None, onboarding_completed=False))
    )

    ok, destination = await service.complete_onboarding(session, form)
    assert ok and destination == "/dashboard/profile"

    ok, slug = await BrandService(brand_repo, profile_repo).save(session, form.brand_input())
    assert ok and slug == "acme-sticks"
    assert brand_repo.create.await_args.args[0]["category"] == "equipment"
    assert rows.rows[user_id].onboarding_completed
    assert rows.rows[user_id].role.value == "brand"


async def test_brand_create_marks_onboarding_done(session, profile_repo, brand_repo, rows, user_id):
    rows.add(make_profile("brand", id=user_id, full_name=None, onboarding_completed=False))
    signed_in(session, user_id, role="brand")

    ok, _ = await BrandService(brand_repo, profile_repo).save(session, BrandInput(name="Acme Sticks"))
    assert ok
    assert profile_repo.update.await_args.args[1]["onboarding_completed"] is True
    assert rows.rows[user_id].full_name == "Acme Sticks"


async def test_brand_update_leaves_onboarding_alone(session, profile_repo, brand_repo, rows, user_id):
    rows.add(make_profile("brand", id=user_id))
    signed_in(session, user_id, role="brand")
    brand_repo.get_my_brand.return_value = Brand(
        id=user_id, profile_id=user_id, name="Acme", slug="acme", category="equipment",
    )

    ok, slug = await BrandService(brand_repo, profile_repo).save(session, BrandInput(name="Acme Sticks"))
    assert ok and slug == "acme"
    assert "onboarding_completed" not in profile_repo.update.await_args.args[1]
    brand_repo.create.assert_not_awaited()


async def test_avatar_with_huge_dimensions_never_reaches_storage(service, session, user_id):
    signed_in(session, user_id)
    out = io.BytesIO()
    Image.new("1", (7000, 7000)).save(out, format="PNG")

    ok, error = await service.upload_avatar(session, out.getvalue())
    assert not ok
    assert error == AVATAR_UPLOAD_ERROR
    service.avatar_storage.upload.assert_not_awaited()
