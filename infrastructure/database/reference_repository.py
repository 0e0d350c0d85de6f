"""
Supabase implementation of the trusted references repository.
Every call is an RPC keyed on the caller's identity.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
from core.domain.models import ReferenceCard
from core.interfaces.repositories import IReferenceRepository
from infrastructure.database.supabase_client import db, run_sync


class SupabaseReferenceRepository(IReferenceRepository):

    @run_sync
    def _rpc_sync(self, name: str, params: Dict[str, Any]):
        return db().rpc(name, params).execute().data

    async def _cards(self, name: str, params: Optional[Dict[str, Any]] = None) -> List[ReferenceCard]:
        rows = await self._rpc_sync(name, params or {})
        return [ReferenceCard.model_validate(r) for r in rows or []]

    async def get_my_references(self) -> List[ReferenceCard]:
        return await self._cards("get_my_references")

    async def get_my_requests(self) -> List[ReferenceCard]:
        return await self._cards("get_my_reference_requests")

    async def get_given(self) -> List[ReferenceCard]:
        return await self._cards("get_references_i_gave")

    async def get_for_profile(self, profile_id: UUID) -> List[ReferenceCard]:
        return await self._cards("get_profile_references", {"p_profile_id": str(profile_id)})

    async def request(self, reference_id: UUID, relationship_type: str, note: Optional[str]) -> None:
        await self._rpc_sync("request_reference", {
            "p_reference_id": str(reference_id),
            "p_relationship_type": relationship_type,
            "p_request_note": note,
        })

    async def respond(self, reference_id: UUID, accept: bool, endorsement: Optional[str]) -> None:
        await self._rpc_sync("respond_reference", {
            "p_reference_id": str(reference_id),
            "p_accept": accept,
            "p_endorsement": endorsement,
        })

    async def remove(self, reference_id: UUID) -> None:
        await self._rpc_sync("remove_reference", {"p_reference_id": str(reference_id)})

    async def withdraw(self, reference_id: UUID) -> None:
        await self._rpc_sync("withdraw_reference", {"p_reference_id": str(reference_id)})
