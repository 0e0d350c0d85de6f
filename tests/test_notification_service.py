from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.domain.errors import BackendError, ValidationFailed
from core.domain.models import Notification, NotificationCounts, NotificationFilter
from core.services.notification_service import NotificationService
from tests.factories import signed_in


def _notification(kind="friend_request_received", **fields):
    data = {"id": uuid4(), "kind": kind, "created_at": datetime(2026, 3, 1, tzinfo=timezone.utc)}
    data.update(fields)
    return Notification.model_validate(data)


@pytest.fixture
def notification_repo():
    repo = AsyncMock()
    repo.counts.return_value = NotificationCounts(unread_count=3, total_count=10)
    return repo


@pytest.fixture
def notifications(notification_repo):
    return NotificationService(notification_repo, page_size=2)


def test_rpc_row_with_nulls():
    notification = _notification(metadata=None, actor=None)
    assert notification.metadata == {}
    assert notification.actor.full_name is None
    assert not notification.is_read


async def test_pages_until_a_short_page(notifications, notification_repo, session, user_id):
    signed_in(session, user_id)
    notification_repo.get_page.return_value = [_notification(), _notification()]
    first = await notifications.get_page(session)
    assert first.has_more
    notification_repo.get_page.assert_awaited_with(NotificationFilter.ALL, None, 2, 0)

    notification_repo.get_page.return_value = [_notification()]
    second = await notifications.get_page(session, page=1)
    assert not second.has_more
    notification_repo.get_page.assert_awaited_with(NotificationFilter.ALL, None, 2, 2)


async def test_by_type_waits_for_a_kind(notifications, notification_repo, session):
    page = await notifications.get_page(session, NotificationFilter.BY_TYPE)
    assert page.notifications == []
    notification_repo.get_page.assert_not_awaited()


async def test_unknown_kind_is_rejected(notifications, session):
    with pytest.raises(ValidationFailed):
        await notifications.get_page(session, NotificationFilter.BY_TYPE, kind="party_invite")


async def test_failed_page_shows_toast(notifications, notification_repo, session):
    notification_repo.get_page.side_effect = BackendError("timeout")
    page = await notifications.get_page(session)
    assert page.notifications == []
    assert [t.message for t in session.toasts.drain()] == ["Unable to load notifications. Please try again."]


async def test_counts_are_cached_and_adjusted(notifications, notification_repo, session):
    assert (await notifications.counts(session)).unread_count == 3
    notification_repo.mark_read.return_value = True
    assert await notifications.mark_read(session, uuid4())
    assert (await notifications.counts(session)).unread_count == 2
    notification_repo.counts.assert_awaited_once()

    notification_repo.mark_all_read.return_value = 5
    await notifications.mark_all_read(session)
    assert (await notifications.counts(session)).unread_count == 0


async def test_mark_read_of_read_notification_keeps_badge(notifications, notification_repo, session):
    await notifications.counts(session)
    notification_repo.mark_read.return_value = False
    assert not await notifications.mark_read(session, uuid4())
    assert (await notifications.counts(session)).unread_count == 3


async def test_clear_reloads_counts(notifications, notification_repo, session):
    await notifications.counts(session)
    ids = [uuid4()]
    notification_repo.clear.return_value = 1
    assert await notifications.clear(session, ids) == 1
    notification_repo.clear.assert_awaited_once_with(ids, None)

    await notifications.counts(session)
    assert notification_repo.counts.await_count == 2


async def test_counts_failure_falls_back(notifications, notification_repo, session):
    notification_repo.counts.side_effect = BackendError("timeout")
    assert await notifications.counts(session) == NotificationCounts()
