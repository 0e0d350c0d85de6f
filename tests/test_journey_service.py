from datetime import date
from unittest.mock import AsyncMock

import pytest

from core.domain.models import JourneyEntry
from core.services.journey_service import JourneyService, entry_duration, order_timeline
from tests.factories import signed_in


def _entry(entry_id, start=None, **fields):
    data = {
        "club_name": "HC Bloemendaal",
        "position_role": "Midfielder",
        "division_league": "Hoofdklasse",
        "start_date": start,
    }
    data.update(fields)
    return JourneyEntry(id=entry_id, **data)


@pytest.fixture
def journey_repo():
    return AsyncMock()


@pytest.fixture
def journey(journey_repo):
    return JourneyService(journey_repo)


def test_timeline_newest_first_undated_last():
    entries = [
        _entry("a", date(2018, 9, 1)),
        _entry("b"),
        _entry("c", date(2021, 3, 1)),
    ]
    assert [e.id for e in order_timeline(entries)] == ["c", "a", "b"]


@pytest.mark.parametrize("start,end,expected", [
    (date(2021, 3, 1), date(2023, 6, 1), "2 years 3m"),
    (date(2021, 3, 1), date(2022, 3, 1), "1 year"),
    (date(2021, 3, 1), date(2021, 8, 1), "5m"),
    (date(2021, 3, 1), date(2021, 3, 20), "Less than a month"),
])
def test_entry_duration(start, end, expected):
    assert entry_duration(_entry("x", start, end_date=end)) == expected


def test_open_entry_runs_until_today():
    assert entry_duration(_entry("x", date(2020, 1, 1)), today=date(2021, 1, 15)) == "1 year"


def test_validation_keys(journey):
    entries = [_entry("temp-1", date(2020, 1, 1)), _entry("temp-2", club_name=" ", position_role="")]
    errors = journey.validate(entries)
    assert errors == {
        "1-club_name": "Title is required",
        "1-position_role": "Role is required",
        "1-start_date": "Start month and year are required",
    }


async def test_save_requires_sign_in(journey, session):
    assert await journey.save(session, []) == (False, {"form": "Please sign in to continue."})


async def test_save_deletes_inserts_and_updates(journey, journey_repo, session, user_id):
    signed_in(session, user_id)
    journey_repo.list_for_user.return_value = [
        _entry("keep", date(2019, 1, 1)), _entry("gone", date(2015, 1, 1)),
    ]
    entries = [_entry("temp-99", date(2022, 8, 1)), _entry("keep", date(2019, 1, 1))]

    ok, errors = await journey.save(session, entries)

    assert ok and errors == {}
    journey_repo.delete_many.assert_awaited_once_with(["gone"])
    inserted = journey_repo.insert.await_args.args[0]
    assert inserted["years"] == "Aug 2022 - Present"
    assert inserted["display_order"] == 2
    journey_repo.update.assert_awaited_once()
    assert journey_repo.update.await_args.args[0] == "keep"
    assert [t.message for t in session.toasts.drain()] == ["Journey updated successfully."]


async def test_save_failure_toasts(journey, journey_repo, session, user_id):
    signed_in(session, user_id)
    journey_repo.list_for_user.return_value = []
    journey_repo.insert.side_effect = RuntimeError("insert failed")
    ok, _ = await journey.save(session, [_entry("temp-1", date(2022, 8, 1))])
    assert not ok
    assert [t.message for t in session.toasts.drain()] == ["Failed to save journey. Please try again."]
