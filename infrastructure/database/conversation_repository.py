"""
Supabase implementation of the conversation repository.
"""

from typing import List, Optional
from uuid import UUID
from core.domain.models import Conversation, Message, MessageStatus
from core.interfaces.repositories import IConversationRepository
from infrastructure.database.supabase_client import db, run_sync


def _pair_filter(a: UUID, b: UUID) -> str:
    """PostgREST or-filter matching the pair in either participant order."""
    return (
        f"and(participant_one_id.eq.{a},participant_two_id.eq.{b}),"
        f"and(participant_one_id.eq.{b},participant_two_id.eq.{a})"
    )


class SupabaseConversationRepository(IConversationRepository):

    def _message(self, data: dict) -> Message:
        row = dict(data)
        row["id"] = str(row["id"])
        row["status"] = MessageStatus.DELIVERED
        return Message.model_validate(row)

    @run_sync
    def _create_sync(self, participant_one_id: UUID, participant_two_id: UUID) -> dict:
        response = db().table("conversations").insert({
            "participant_one_id": str(participant_one_id),
            "participant_two_id": str(participant_two_id),
        }).execute()
        return response.data[0]

    async def create(self, participant_one_id: UUID, participant_two_id: UUID) -> Conversation:
        data = await self._create_sync(participant_one_id, participant_two_id)
        return Conversation.model_validate(data)

    @run_sync
    def _find_between_sync(self, a: UUID, b: UUID) -> Optional[dict]:
        response = db().table("conversations").select("*")\
            .or_(_pair_filter(a, b))\
            .limit(1)\
            .execute()
        return response.data[0] if response.data else None

    async def find_between(self, a: UUID, b: UUID) -> Optional[Conversation]:
        data = await self._find_between_sync(a, b)
        return Conversation.model_validate(data) if data else None

    @run_sync
    def _delete_sync(self, conversation_id: UUID) -> None:
        db().table("conversations").delete().eq("id", str(conversation_id)).execute()

    async def delete(self, conversation_id: UUID) -> None:
        await self._delete_sync(conversation_id)

    @run_sync
    def _list_for_profile_sync(self, profile_id: UUID) -> List[dict]:
        pid = str(profile_id)
        response = db().table("conversations").select("*")\
            .or_(f"participant_one_id.eq.{pid},participant_two_id.eq.{pid}")\
            .order("last_message_at", desc=True, nullsfirst=False)\
            .execute()
        return response.data or []

    async def list_for_profile(self, profile_id: UUID) -> List[Conversation]:
        rows = await self._list_for_profile_sync(profile_id)
        return [Conversation.model_validate(r) for r in rows]

    @run_sync
    def _list_messages_sync(self, conversation_id: UUID, limit: int) -> List[dict]:
        response = db().table("messages").select("*")\
            .eq("conversation_id", str(conversation_id))\
            .order("sent_at", desc=True)\
            .order("id", desc=True)\
            .limit(limit)\
            .execute()
        return response.data or []

    async def list_messages(self, conversation_id: UUID, limit: int = 50) -> List[Message]:
        rows = await self._list_messages_sync(conversation_id, limit)
        # Newest-first from the query, oldest-first for display
        return [self._message(r) for r in reversed(rows)]

    @run_sync
    def _insert_message_sync(self, conversation_id: UUID, sender_id: UUID, content: str,
                             idempotency_key: str) -> dict:
        response = db().table("messages").insert({
            "conversation_id": str(conversation_id),
            "sender_id": str(sender_id),
            "content": content,
            "idempotency_key": idempotency_key,
        }).execute()
        return response.data[0]

    async def insert_message(
        self, conversation_id: UUID, sender_id: UUID, content: str, idempotency_key: str
    ) -> Message:
        data = await self._insert_message_sync(conversation_id, sender_id, content, idempotency_key)
        return self._message(data)
