"""
Friendship service - request, accept, reject, cancel and remove.
Guards and outcomes are reported as toasts; every mutation refetches the edge.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from core.domain.errors import BackendError
from core.domain.models import FriendshipEdge, FriendshipStatus
from core.interfaces.repositories import IFriendshipRepository
from core.state.session import ClientSession

logger = logging.getLogger(__name__)


@dataclass
class FriendshipView:
    """The viewer's relationship to another profile"""
    viewer_id: Optional[UUID]
    profile_id: UUID
    edge: Optional[FriendshipEdge] = None

    @property
    def is_authenticated(self) -> bool:
        return self.viewer_id is not None

    @property
    def is_own_profile(self) -> bool:
        return self.viewer_id is not None and self.viewer_id == self.profile_id

    @property
    def status(self) -> Optional[FriendshipStatus]:
        return self.edge.status if self.edge else None

    @property
    def is_friend(self) -> bool:
        return self.status == FriendshipStatus.ACCEPTED

    @property
    def is_outgoing_request(self) -> bool:
        return self.status == FriendshipStatus.PENDING and self.edge.requester_id == self.viewer_id

    @property
    def is_incoming_request(self) -> bool:
        return self.status == FriendshipStatus.PENDING and self.edge.requester_id != self.viewer_id

    def to_dict(self) -> dict:
        return {
            "profile_id": str(self.profile_id),
            "status": self.status.value if self.status else None,
            "is_friend": self.is_friend,
            "is_incoming_request": self.is_incoming_request,
            "is_outgoing_request": self.is_outgoing_request,
            "is_own_profile": self.is_own_profile,
        }


class FriendshipService:

    def __init__(self, friendship_repo: IFriendshipRepository):
        self.friendship_repo = friendship_repo

    async def get_view(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = FriendshipView(viewer_id=session.user_id, profile_id=profile_id)
        if not view.is_authenticated or view.is_own_profile:
            return view
        try:
            view.edge = await self.friendship_repo.get_edge(view.viewer_id, profile_id)
        except BackendError as e:
            logger.error(f"[FRIENDS] Failed to fetch friendship state {view.viewer_id}->{profile_id}: {e.message}")
            session.toasts.error("Unable to load friendship status.")
        return view

    async def list_friends(self, profile_id: UUID) -> List[FriendshipEdge]:
        try:
            return await self.friendship_repo.list_friends(profile_id)
        except BackendError as e:
            logger.error(f"[FRIENDS] Failed to list friends of {profile_id}: {e.message}")
            return []

    async def send_request(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = await self.get_view(session, profile_id)
        toasts = session.toasts
        if not view.is_authenticated:
            toasts.error("Sign in to connect with other members.")
            return view
        if view.is_own_profile:
            toasts.error("You cannot send a friend request to yourself.")
            return view
        if view.is_friend:
            toasts.info("You are already friends.")
            return view
        if view.is_outgoing_request:
            toasts.info("Friend request already sent.")
            return view
        if view.is_incoming_request:
            toasts.info("This member already sent you a request. Check your notifications.")
            return view

        try:
            await self.friendship_repo.send_request(view.viewer_id, profile_id)
        except BackendError as e:
            logger.error(f"[FRIENDS] Failed to send friend request {view.viewer_id}->{profile_id}: {e.message}")
            toasts.error("Unable to send friend request. Please try again.")
            return view

        toasts.success("Friend request sent.")
        return await self.get_view(session, profile_id)

    async def _update_status(
        self, session: ClientSession, view: FriendshipView, status: FriendshipStatus, success_message: str
    ) -> FriendshipView:
        if not view.is_authenticated:
            session.toasts.error("Sign in to manage connections.")
            return view
        if view.edge is None:
            session.toasts.error("Friendship state not found.")
            return view

        try:
            await self.friendship_repo.set_status(view.edge.id, status)
        except BackendError as e:
            logger.error(f"[FRIENDS] Failed to set {view.edge.id} to {status.value}: {e.message}")
            session.toasts.error("Unable to update friendship. Please try again.")
            return view

        logger.info(f"[FRIENDS] Friendship {view.edge.id} -> {status.value}")
        session.toasts.success(success_message)
        return await self.get_view(session, view.profile_id)

    async def accept(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = await self.get_view(session, profile_id)
        if not view.is_incoming_request:
            session.toasts.info("No incoming request to accept.")
            return view
        return await self._update_status(session, view, FriendshipStatus.ACCEPTED, "Friend request accepted.")

    async def reject(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = await self.get_view(session, profile_id)
        if not view.is_incoming_request:
            session.toasts.info("No incoming request to reject.")
            return view
        return await self._update_status(session, view, FriendshipStatus.REJECTED, "Friend request declined.")

    async def cancel(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = await self.get_view(session, profile_id)
        if not view.is_outgoing_request:
            session.toasts.info("No pending request to cancel.")
            return view
        return await self._update_status(session, view, FriendshipStatus.CANCELLED, "Friend request cancelled.")

    async def remove(self, session: ClientSession, profile_id: UUID) -> FriendshipView:
        view = await self.get_view(session, profile_id)
        if not view.is_friend:
            session.toasts.info("You are not connected yet.")
            return view
        return await self._update_status(session, view, FriendshipStatus.CANCELLED, "Friend removed.")
