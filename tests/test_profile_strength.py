from datetime import date
from unittest.mock import AsyncMock

import pytest

from core.domain.errors import BackendError
from core.domain.models import Brand, ProfileCounts, Role
from core.services.profile_strength import BUCKETS, ProfileStrengthService, profile_strength
from tests.factories import make_profile


@pytest.mark.parametrize("role", list(Role))
def test_weights_add_up_to_100(role):
    buckets = BUCKETS[role](make_profile(role.value), ProfileCounts(), None)
    assert sum(b.weight for b in buckets) == 100


def test_new_player_starts_at_zero():
    profile = make_profile(base_location=None)
    strength = profile_strength(profile, ProfileCounts())
    assert strength.percentage == 0
    assert strength.next_step.id == "highlight-video"


def test_player_buckets():
    profile = make_profile(
        nationality_country_id=5, position="forward", avatar_url="https://cdn.test/a.jpg",
        highlight_video_url="https://video.test/v",
    )
    strength = profile_strength(profile, ProfileCounts(journey=2, friends=1))
    done = {b.id for b in strength.buckets if b.completed}
    assert done == {"basic-info", "profile-photo", "highlight-video", "journey", "friends"}
    assert strength.percentage == 15 + 15 + 20 + 15 + 10


def test_legacy_nationality_text_counts():
    profile = make_profile(nationality="Dutch", position="defender")
    strength = profile_strength(profile, ProfileCounts())
    assert strength.buckets[0].completed


def test_blank_values_are_not_filled():
    profile = make_profile(nationality_country_id=5, position="  ", avatar_url=" ")
    strength = profile_strength(profile, ProfileCounts())
    assert strength.percentage == 0


def test_coach_buckets():
    profile = make_profile(
        "coach", nationality_country_id=5, date_of_birth=date(1985, 4, 2), gender="Women", bio="UEFA B",
    )
    strength = profile_strength(profile, ProfileCounts(gallery=1))
    assert {b.id for b in strength.buckets if b.completed} == {"basic", "bio", "gallery"}
    assert strength.percentage == 60


def test_club_needs_one_contact_method():
    profile = make_profile("club", nationality_country_id=5, year_founded=1931, club_bio="Since 1931")
    assert profile_strength(profile, ProfileCounts()).percentage == 20

    profile = profile.merged({"contact_email": "info@club.test"})
    assert profile_strength(profile, ProfileCounts()).percentage == 55


def test_brand_buckets():
    profile = make_profile("brand", nationality_country_id=5)
    brand = Brand(
        id=profile.id, profile_id=profile.id, name="Acme", slug="acme", category="equipment",
        logo_url="https://cdn.test/logo.png", bio="Short", instagram_url="https://instagram.com/acme",
    )
    strength = profile_strength(profile, ProfileCounts(), brand)
    assert {b.id for b in strength.buckets if b.completed} == {"identity", "contact", "location"}

    brand.bio = "Hand-made composite sticks for every level of the game."
    assert profile_strength(profile, ProfileCounts(), brand).percentage == 100


def test_brand_without_brand_row():
    profile = make_profile("brand")
    assert profile_strength(profile, ProfileCounts(), None).percentage == 0


async def test_service_counts_for_role():
    activity_repo = AsyncMock()
    activity_repo.count_activity.return_value = ProfileCounts(journey=1, gallery=1)
    brand_repo = AsyncMock()
    profile = make_profile("coach")

    strength = await ProfileStrengthService(activity_repo, brand_repo).get(profile)
    activity_repo.count_activity.assert_awaited_once_with(profile.id, Role.COACH)
    brand_repo.get_my_brand.assert_not_awaited()
    assert strength.percentage == 35


async def test_service_survives_count_failure():
    activity_repo = AsyncMock()
    activity_repo.count_activity.side_effect = BackendError("timeout")
    brand_repo = AsyncMock()
    brand_repo.get_my_brand.side_effect = BackendError("timeout")

    strength = await ProfileStrengthService(activity_repo, brand_repo).get(make_profile("brand"))
    assert strength.percentage == 0
    assert len(strength.buckets) == 4
