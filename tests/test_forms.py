from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.domain.forms import (
    ClubForm, CoachForm, OnboardingForm, PlayerForm,
    form_from_profile, merge_draft, normalize_gender, parse_form,
)
from core.domain.models import ClubClaimContext, Profile, WorldLeague
from tests.factories import make_profile


def test_parse_form_picks_variant_by_role():
    assert isinstance(parse_form({"role": "player", "full_name": "A"}), PlayerForm)
    assert isinstance(parse_form({"role": "coach", "full_name": "A"}), CoachForm)
    assert isinstance(parse_form({"role": "club", "full_name": "A"}), ClubForm)


def test_parse_form_rejects_unknown_role():
    with pytest.raises(ValidationError):
        parse_form({"role": "referee"})


def test_player_update_only_touches_player_columns():
    form = PlayerForm(full_name="Sam", position="defender", open_to_play=True)
    update = form.to_update()
    assert update["position"] == "defender"
    assert update["open_to_play"] is True
    assert "club_bio" not in update
    assert "open_to_coach" not in update


def test_same_primary_and_secondary_position_is_an_error():
    form = PlayerForm(full_name="Sam", position="forward", secondary_position="forward")
    assert "secondary_position" in form.validate_form()


def test_full_name_required():
    assert PlayerForm(full_name="  ").validate_form()["full_name"] == "Full name is required."


def test_club_region_change_clears_leagues():
    form = ClubForm(full_name="HC", world_region_id=1, mens_league_id=10, womens_league_id=11)
    form.select_region(2)
    assert form.world_region_id == 2
    assert form.mens_league_id is None
    assert form.womens_league_id is None


def test_club_same_region_keeps_leagues():
    form = ClubForm(full_name="HC", world_region_id=1, mens_league_id=10)
    form.select_region(1)
    assert form.mens_league_id == 10


def test_club_update_uses_claimed_league_names():
    claim = ClubClaimContext(
        world_club_id="00000000-0000-0000-0000-000000000001",
        country_id=1,
        has_regions=True,
        leagues=[WorldLeague(id=10, name="Hoofdklasse", province_id=1)],
    )
    form = ClubForm(full_name="HC", world_region_id=1, mens_league_id=10)
    update = form.to_update(claim)
    assert update["mens_league_division"] == "Hoofdklasse"
    assert update["womens_league_division"] is None
    assert update["world_region_id"] == 1


def test_draft_overlays_profile_values_but_not_role():
    profile = make_profile("player", full_name="Original")
    base = form_from_profile(profile)
    merged = merge_draft(base, {"full_name": "Draft name", "role": "club", "unknown": 1})
    assert isinstance(merged, PlayerForm)
    assert merged.full_name == "Draft name"


def test_onboarding_player_requires_position():
    form = OnboardingForm(role="player", full_name="Sam", city="Utrecht", nationality_country_id=1, gender="Men")
    assert form.validate_form() == "Position is required."


def test_onboarding_club_update_uses_club_name():
    form = OnboardingForm(
        role="club", club_name="HC Bloemendaal", city="Bloemendaal", country="NL",
        contact_email="club@example.com", year_founded="1910",
    )
    assert form.validate_form() is None
    update = form.to_update()
    assert update["full_name"] == "HC Bloemendaal"
    assert update["year_founded"] == 1910
    assert update["onboarding_completed"] is True


def test_onboarding_brand_requires_name():
    assert OnboardingForm(role="brand").validate_form() == "Brand name is required."
    assert OnboardingForm(role="brand", full_name="Acme", category="cars").validate_form() == (
        "Please choose a brand category."
    )


def test_onboarding_brand_update_and_brand_row():
    form = OnboardingForm(role="brand", full_name=" Acme Sticks ", category="equipment", website="https://acme.test")
    assert form.validate_form() is None
    update = form.to_update()
    assert update["role"] == "brand"
    assert update["onboarding_completed"] is True
    assert update["website"] == "https://acme.test"
    brand = form.brand_input()
    assert brand.name == "Acme Sticks"
    assert brand.category == "equipment"


@pytest.mark.parametrize("raw,expected", [("male", "Men"), ("W", "Women"), ("other", None)])
def test_normalize_gender(raw, expected):
    assert normalize_gender(raw) == expected


def test_profile_reads_from_attributes():
    row = SimpleNamespace(id=uuid4(), role="coach", full_name="Alex Kim", onboarding_completed=True)
    profile = Profile.model_validate(row)
    assert profile.role.value == "coach"
    assert profile.full_name == "Alex Kim"
