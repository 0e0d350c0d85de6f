from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.domain.errors import BackendError, UNIQUE_VIOLATION
from core.domain.models import (
    Conversation, FriendshipEdge, FriendshipStatus, Message, MessageStatus, ReferenceCard, ReferenceStatus,
)
from core.services.friendship_service import FriendshipService
from core.services.messaging_service import SEND_FAILED_TOAST, MessagingService
from core.services.reference_service import ReferenceService
from tests.factories import signed_in


def _messages(session):
    return [t.message for t in session.toasts.drain()]


def _edge(viewer_id, other_id, requester_id, status):
    return FriendshipEdge(
        id=uuid4(), profile_id=viewer_id, friend_id=other_id, requester_id=requester_id, status=status,
    )


# === FRIENDSHIPS ===

@pytest.fixture
def friendship_repo():
    repo = AsyncMock()
    repo.get_edge.return_value = None
    return repo


@pytest.fixture
def friendships(friendship_repo):
    return FriendshipService(friendship_repo)


async def test_friend_request_requires_sign_in(friendships, session, friendship_repo):
    await friendships.send_request(session, uuid4())
    assert _messages(session) == ["Sign in to connect with other members."]
    friendship_repo.send_request.assert_not_awaited()


async def test_cannot_befriend_yourself(friendships, session, user_id):
    signed_in(session, user_id)
    await friendships.send_request(session, user_id)
    assert _messages(session) == ["You cannot send a friend request to yourself."]


@pytest.mark.parametrize("status,requester,message", [
    (FriendshipStatus.ACCEPTED, "viewer", "You are already friends."),
    (FriendshipStatus.PENDING, "viewer", "Friend request already sent."),
    (FriendshipStatus.PENDING, "other", "This member already sent you a request. Check your notifications."),
])
async def test_friend_request_guards(friendships, session, friendship_repo, user_id, status, requester, message):
    other_id = uuid4()
    signed_in(session, user_id)
    friendship_repo.get_edge.return_value = _edge(
        user_id, other_id, user_id if requester == "viewer" else other_id, status,
    )
    await friendships.send_request(session, other_id)
    assert _messages(session) == [message]
    friendship_repo.send_request.assert_not_awaited()


async def test_friend_request_sent_and_refetched(friendships, session, friendship_repo, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    pending = _edge(user_id, other_id, user_id, FriendshipStatus.PENDING)
    friendship_repo.get_edge.side_effect = [None, pending]

    view = await friendships.send_request(session, other_id)

    friendship_repo.send_request.assert_awaited_once_with(user_id, other_id)
    assert view.is_outgoing_request
    assert _messages(session) == ["Friend request sent."]


async def test_accept_incoming_request(friendships, session, friendship_repo, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    incoming = _edge(user_id, other_id, other_id, FriendshipStatus.PENDING)
    friendship_repo.get_edge.side_effect = [incoming, incoming.model_copy(update={"status": FriendshipStatus.ACCEPTED})]

    view = await friendships.accept(session, other_id)

    friendship_repo.set_status.assert_awaited_once_with(incoming.id, FriendshipStatus.ACCEPTED)
    assert view.is_friend
    assert _messages(session) == ["Friend request accepted."]


async def test_update_failure_is_reported(friendships, session, friendship_repo, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    friendship_repo.get_edge.return_value = _edge(user_id, other_id, user_id, FriendshipStatus.PENDING)
    friendship_repo.set_status.side_effect = BackendError("rls")

    await friendships.cancel(session, other_id)
    assert _messages(session) == ["Unable to update friendship. Please try again."]


# === REFERENCES ===

def _reference(status):
    return ReferenceCard(id=uuid4(), relationship_type="Teammate", status=status)


@pytest.fixture
def reference_repo():
    repo = AsyncMock()
    repo.get_my_references.return_value = []
    repo.get_my_requests.return_value = []
    repo.get_given.return_value = []
    return repo


async def test_owner_board_splits_accepted_and_pending(session, reference_repo, user_id):
    signed_in(session, user_id)
    reference_repo.get_my_references.return_value = [
        _reference(ReferenceStatus.ACCEPTED), _reference(ReferenceStatus.PENDING),
    ]
    board = await ReferenceService(reference_repo).get_board(session, user_id)
    assert board.is_owner
    assert len(board.accepted) == 1
    assert len(board.pending) == 1
    assert board.can_add_more


async def test_reference_limit(session, reference_repo, user_id):
    signed_in(session, user_id)
    reference_repo.get_my_references.return_value = [_reference(ReferenceStatus.ACCEPTED) for _ in range(5)]
    ok = await ReferenceService(reference_repo).request(session, uuid4(), "Coach")
    assert not ok
    assert _messages(session) == ["You already have the maximum number of trusted references."]
    reference_repo.request.assert_not_awaited()


async def test_reference_request_needs_connection(session, reference_repo, user_id):
    signed_in(session, user_id)
    assert not await ReferenceService(reference_repo).request(session, None, "Coach")
    assert _messages(session) == ["Select a connection to continue."]


async def test_reference_request_sent(session, reference_repo, user_id):
    signed_in(session, user_id)
    target = uuid4()
    assert await ReferenceService(reference_repo).request(session, target, "Teammate", "  We won the cup  ")
    reference_repo.request.assert_awaited_once_with(target, "Teammate", "We won the cup")
    assert _messages(session) == ["Reference request sent."]


async def test_board_load_failure_shows_empty_board(session, reference_repo, user_id):
    signed_in(session, user_id)
    reference_repo.get_given.side_effect = BackendError("timeout")
    board = await ReferenceService(reference_repo).get_board(session, user_id)
    assert board.mine == [] and board.given == []
    assert _messages(session) == ["Unable to load references. Please try again."]


# === MESSAGES ===

@pytest.fixture
def conversation_repo():
    repo = AsyncMock()
    repo.find_between.return_value = None
    repo.list_messages.side_effect = lambda conversation_id, limit: []
    return repo


@pytest.fixture
def messaging(conversation_repo):
    return MessagingService(conversation_repo)


def _conversation(a, b):
    return Conversation(id=uuid4(), participant_one_id=a, participant_two_id=b)


def _persisted(conversation, sender_id, content):
    return Message(id=str(uuid4()), conversation_id=conversation.id, sender_id=sender_id, content=content)


async def test_first_message_creates_conversation(messaging, conversation_repo, session, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    conversation = _conversation(user_id, other_id)
    conversation_repo.create.return_value = conversation
    conversation_repo.insert_message.side_effect = lambda cid, sender, text, key: _persisted(conversation, sender, text)

    thread = await messaging.open_thread(session, other_id)
    assert thread.is_pending
    assert await messaging.send_message(session, thread, "  Hello!  ")

    assert not thread.is_pending
    assert [m.content for m in thread.messages] == ["Hello!"]
    assert thread.messages[0].status == MessageStatus.DELIVERED
    key = conversation_repo.insert_message.await_args.args[3]
    assert key.startswith(f"{user_id}-")


async def test_failed_send_marks_message_and_discards_new_conversation(messaging, conversation_repo, session, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    conversation = _conversation(user_id, other_id)
    conversation_repo.create.return_value = conversation
    conversation_repo.insert_message.side_effect = BackendError("insert failed")

    thread = await messaging.open_thread(session, other_id)
    assert not await messaging.send_message(session, thread, "Hello")

    assert thread.messages[0].status == MessageStatus.FAILED
    assert thread.is_pending
    conversation_repo.delete.assert_awaited_once_with(conversation.id)
    assert _messages(session) == [SEND_FAILED_TOAST]


async def test_retry_reuses_failed_message(messaging, conversation_repo, session, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    conversation = _conversation(user_id, other_id)
    conversation_repo.find_between.return_value = conversation
    conversation_repo.insert_message.side_effect = BackendError("offline")

    thread = await messaging.open_thread(session, other_id)
    await messaging.send_message(session, thread, "Hello")
    failed_id = thread.messages[0].id
    conversation_repo.delete.assert_not_awaited()

    conversation_repo.insert_message.side_effect = lambda cid, sender, text, key: _persisted(conversation, sender, text)
    assert await messaging.retry_message(session, thread, failed_id)
    assert len(thread.messages) == 1
    assert thread.messages[0].status == MessageStatus.DELIVERED


async def test_concurrent_conversation_creation_uses_existing(messaging, conversation_repo, session, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    existing = _conversation(other_id, user_id)
    conversation_repo.create.side_effect = BackendError("duplicate key", code=UNIQUE_VIOLATION)
    conversation_repo.find_between.side_effect = [None, existing]
    conversation_repo.insert_message.side_effect = lambda cid, sender, text, key: _persisted(existing, sender, text)

    thread = await messaging.open_thread(session, other_id)
    assert await messaging.send_message(session, thread, "Hi")
    assert thread.conversation.id == existing.id


async def test_too_long_message_is_rejected(messaging, conversation_repo, session, user_id):
    signed_in(session, user_id)
    thread = await messaging.open_thread(session, uuid4())
    assert not await messaging.send_message(session, thread, "x" * 1001)
    assert _messages(session) == ["Message is too long. Maximum 1000 characters."]
    conversation_repo.create.assert_not_awaited()


async def test_unsent_messages_survive_reload(messaging, conversation_repo, session, user_id):
    other_id = uuid4()
    signed_in(session, user_id)
    conversation_repo.find_between.return_value = _conversation(user_id, other_id)
    conversation_repo.insert_message.side_effect = BackendError("offline")

    thread = await messaging.open_thread(session, other_id)
    await messaging.send_message(session, thread, "Still here")
    reloaded = await messaging.open_thread(session, other_id)
    assert [m.content for m in reloaded.messages] == ["Still here"]

    messaging.delete_failed_message(reloaded, reloaded.messages[0].id)
    assert reloaded.messages == []
