"""
Messaging service - one-to-one conversations.

A thread with someone you have never messaged starts without a conversation
row; the row is created by the first send. Messages are appended
optimistically and reconciled with the inserted row.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from core.domain.constants import MAX_MESSAGE_LENGTH
from core.domain.errors import BackendError, is_unique_violation
from core.domain.models import Conversation, Message, MessageStatus
from core.interfaces.repositories import IConversationRepository
from core.state.session import ClientSession

logger = logging.getLogger(__name__)

SEND_FAILED_TOAST = "Failed to send message. Please try again."
OPTIMISTIC_PREFIX = "optimistic-"


@dataclass
class ChatThread:
    """Open chat with one other profile"""
    viewer_id: UUID
    other_id: UUID
    conversation: Optional[Conversation] = None
    messages: List[Message] = field(default_factory=list)
    sending: bool = False

    @property
    def is_pending(self) -> bool:
        """No conversation row exists yet"""
        return self.conversation is None

    def find(self, message_id: str) -> Optional[Message]:
        return next((m for m in self.messages if m.id == message_id), None)

    def replace(self, message_id: str, message: Message) -> None:
        self.messages = [message if m.id == message_id else m for m in self.messages]

    def set_status(self, message_id: str, status: MessageStatus) -> None:
        message = self.find(message_id)
        if message is not None:
            self.replace(message_id, message.model_copy(update={"status": status}))

    def to_dict(self) -> dict:
        return {
            "conversation_id": str(self.conversation.id) if self.conversation else None,
            "other_id": str(self.other_id),
            "is_pending": self.is_pending,
            "messages": [m.model_dump(mode="json") for m in self.messages],
        }


class MessagingService:

    def __init__(self, conversation_repo: IConversationRepository, page_size: int = 50):
        self.conversation_repo = conversation_repo
        self.page_size = page_size

    @staticmethod
    def _widget_key(other_id: UUID) -> str:
        return f"chat:{other_id}"

    async def list_conversations(self, session: ClientSession) -> List[Conversation]:
        if session.user_id is None:
            return []
        try:
            return await self.conversation_repo.list_for_profile(session.user_id)
        except BackendError as e:
            logger.error(f"[MESSAGES] Failed to list conversations for {session.user_id}: {e.message}")
            return []

    async def open_thread(self, session: ClientSession, other_id: UUID) -> Optional[ChatThread]:
        """Open (or reload) the thread with another profile."""
        viewer_id = session.user_id
        if viewer_id is None or viewer_id == other_id:
            return None

        thread = ChatThread(viewer_id=viewer_id, other_id=other_id)
        try:
            thread.conversation = await self.conversation_repo.find_between(viewer_id, other_id)
            if thread.conversation is not None:
                thread.messages = await self.conversation_repo.list_messages(thread.conversation.id, self.page_size)
        except BackendError as e:
            logger.error(f"[MESSAGES] Failed to load thread {viewer_id}<->{other_id}: {e.message}")
            session.toasts.error("Unable to load messages. Please try again.")

        previous = session.widgets.get(self._widget_key(other_id))
        if isinstance(previous, ChatThread):
            # Keep unsent messages across reloads
            thread.messages.extend(m for m in previous.messages if m.status != MessageStatus.DELIVERED)
        session.widgets[self._widget_key(other_id)] = thread
        return thread

    def get_thread(self, session: ClientSession, other_id: UUID) -> Optional[ChatThread]:
        thread = session.widgets.get(self._widget_key(other_id))
        return thread if isinstance(thread, ChatThread) else None

    async def _ensure_conversation(self, thread: ChatThread) -> Tuple[Conversation, bool]:
        """Conversation for the pair, and whether this call created it."""
        if thread.conversation is not None:
            return thread.conversation, False
        try:
            conversation = await self.conversation_repo.create(thread.viewer_id, thread.other_id)
            return conversation, True
        except BackendError as e:
            if not is_unique_violation(e):
                raise
            # Created concurrently by the other side
            logger.info(f"[MESSAGES] Conversation {thread.viewer_id}<->{thread.other_id} exists, refetching")
            existing = await self.conversation_repo.find_between(thread.viewer_id, thread.other_id)
            if existing is None:
                raise
            return existing, False

    async def send_message(
        self, session: ClientSession, thread: ChatThread, content: str, reuse_id: Optional[str] = None
    ) -> bool:
        text = (content or "").strip()
        if not text or thread.sending:
            return False
        if len(text) > MAX_MESSAGE_LENGTH:
            session.toasts.error(f"Message is too long. Maximum {MAX_MESSAGE_LENGTH} characters.")
            return False

        thread.sending = True
        optimistic_id = reuse_id
        created: Optional[Conversation] = None
        try:
            conversation, was_created = await self._ensure_conversation(thread)
            if was_created:
                created = conversation
            thread.conversation = conversation

            idempotency_key = f"{thread.viewer_id}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
            if optimistic_id is None:
                optimistic_id = f"{OPTIMISTIC_PREFIX}{idempotency_key}"
                thread.messages.append(Message(
                    id=optimistic_id,
                    conversation_id=conversation.id,
                    sender_id=thread.viewer_id,
                    content=text,
                    sent_at=datetime.now(timezone.utc),
                    status=MessageStatus.SENDING,
                ))
            else:
                thread.set_status(optimistic_id, MessageStatus.SENDING)

            persisted = await self.conversation_repo.insert_message(
                conversation.id, thread.viewer_id, text, idempotency_key
            )
            thread.replace(optimistic_id, persisted)
            logger.debug(f"[MESSAGES] Delivered message in {conversation.id}")
            return True
        except BackendError as e:
            logger.error(f"[MESSAGES] Send failed {thread.viewer_id}->{thread.other_id}: {e.message}")
            if optimistic_id is not None:
                thread.set_status(optimistic_id, MessageStatus.FAILED)
            if created is not None:
                await self._discard_conversation(thread, created)
            session.toasts.error(SEND_FAILED_TOAST)
            return False
        finally:
            thread.sending = False

    async def _discard_conversation(self, thread: ChatThread, conversation: Conversation) -> None:
        """Remove a conversation created only for a send that failed."""
        thread.conversation = None
        try:
            await self.conversation_repo.delete(conversation.id)
        except BackendError as e:
            logger.error(f"[MESSAGES] Failed to roll back empty conversation {conversation.id}: {e.message}")

    async def retry_message(self, session: ClientSession, thread: ChatThread, message_id: str) -> bool:
        message = thread.find(message_id)
        if message is None or message.status != MessageStatus.FAILED:
            return False
        return await self.send_message(session, thread, message.content, reuse_id=message_id)

    def delete_failed_message(self, thread: ChatThread, message_id: str) -> None:
        thread.messages = [
            m for m in thread.messages
            if not (m.id == message_id and m.status == MessageStatus.FAILED)
        ]
