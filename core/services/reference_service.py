"""
Trusted references service.
A profile shows at most MAX_REFERENCES accepted references.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from core.domain.constants import MAX_REFERENCES
from core.domain.errors import BackendError
from core.domain.models import ReferenceCard, ReferenceStatus
from core.interfaces.repositories import IReferenceRepository
from core.state.session import ClientSession

logger = logging.getLogger(__name__)


@dataclass
class ReferenceBoard:
    """References shown on a profile page; the owner also sees requests and given ones"""
    profile_id: UUID
    is_owner: bool
    mine: List[ReferenceCard] = field(default_factory=list)
    public: List[ReferenceCard] = field(default_factory=list)
    incoming: List[ReferenceCard] = field(default_factory=list)
    given: List[ReferenceCard] = field(default_factory=list)

    @property
    def accepted(self) -> List[ReferenceCard]:
        if self.is_owner:
            return [r for r in self.mine if r.status == ReferenceStatus.ACCEPTED]
        return self.public

    @property
    def pending(self) -> List[ReferenceCard]:
        if not self.is_owner:
            return []
        return [r for r in self.mine if r.status == ReferenceStatus.PENDING]

    @property
    def can_add_more(self) -> bool:
        return self.is_owner and len(self.accepted) < MAX_REFERENCES

    def to_dict(self) -> dict:
        return {
            "profile_id": str(self.profile_id),
            "is_owner": self.is_owner,
            "accepted": [r.model_dump(mode="json") for r in self.accepted],
            "pending": [r.model_dump(mode="json") for r in self.pending],
            "incoming": [r.model_dump(mode="json") for r in self.incoming],
            "given": [r.model_dump(mode="json") for r in self.given],
            "can_add_more": self.can_add_more,
            "max_references": MAX_REFERENCES,
        }


class ReferenceService:

    def __init__(self, reference_repo: IReferenceRepository):
        self.reference_repo = reference_repo

    async def get_board(self, session: ClientSession, profile_id: UUID) -> ReferenceBoard:
        board = ReferenceBoard(profile_id=profile_id, is_owner=session.user_id == profile_id)
        try:
            if board.is_owner:
                board.mine, board.incoming, board.given = await asyncio.gather(
                    self.reference_repo.get_my_references(),
                    self.reference_repo.get_my_requests(),
                    self.reference_repo.get_given(),
                )
            else:
                board.public = await self.reference_repo.get_for_profile(profile_id)
        except BackendError as e:
            logger.error(f"[REFERENCES] Failed to load references for {profile_id}: {e.message}")
            session.toasts.error("Unable to load references. Please try again.")
            return ReferenceBoard(profile_id=profile_id, is_owner=board.is_owner)
        return board

    async def request(
        self, session: ClientSession, reference_id: Optional[UUID], relationship_type: str,
        note: Optional[str] = None,
    ) -> bool:
        user_id = session.user_id
        if user_id is None:
            return False
        if reference_id is None:
            session.toasts.error("Select a connection to continue.")
            return False

        board = await self.get_board(session, user_id)
        if not board.can_add_more:
            session.toasts.info("You already have the maximum number of trusted references.")
            return False

        try:
            await self.reference_repo.request(reference_id, relationship_type, (note or "").strip() or None)
        except BackendError as e:
            logger.error(f"[REFERENCES] Request to {reference_id} failed: {e.message}")
            session.toasts.error("Unable to send reference request. Please try again.")
            return False
        logger.info(f"[REFERENCES] {user_id} requested a reference from {reference_id}")
        session.toasts.success("Reference request sent.")
        return True

    async def respond(
        self, session: ClientSession, reference_id: UUID, accept: bool, endorsement: Optional[str] = None
    ) -> bool:
        try:
            await self.reference_repo.respond(reference_id, accept, (endorsement or "").strip() or None)
        except BackendError as e:
            logger.error(f"[REFERENCES] Response to {reference_id} failed: {e.message}")
            session.toasts.error("Unable to update reference request. Please try again.")
            return False
        session.toasts.success("Reference accepted." if accept else "Reference declined.")
        return True

    async def remove(self, session: ClientSession, reference_id: UUID) -> bool:
        try:
            await self.reference_repo.remove(reference_id)
        except BackendError as e:
            logger.error(f"[REFERENCES] Remove {reference_id} failed: {e.message}")
            session.toasts.error("Unable to remove reference. Please try again.")
            return False
        session.toasts.success("Reference removed.")
        return True

    async def withdraw(self, session: ClientSession, reference_id: UUID) -> bool:
        try:
            await self.reference_repo.withdraw(reference_id)
        except BackendError as e:
            logger.error(f"[REFERENCES] Withdraw {reference_id} failed: {e.message}")
            session.toasts.error("Unable to withdraw reference. Please try again.")
            return False
        session.toasts.success("Reference withdrawn.")
        return True
