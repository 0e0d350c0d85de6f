"""
Server-held visitor sessions keyed by a cookie.
"""

import logging
import secrets
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional
from uuid import UUID

from core.domain.models import Profile
from core.state.profile_store import ProfileStore
from core.state.session import ClientSession

logger = logging.getLogger(__name__)

MAX_SESSIONS = 10_000
REFRESH_MARGIN_SECONDS = 60


class SessionManager:
    """In-memory sessions, least recently used evicted first."""

    def __init__(
        self,
        profile_loader: Callable[[UUID], Awaitable[Optional[Profile]]],
        max_sessions: int = MAX_SESSIONS,
    ):
        self._profile_loader = profile_loader
        self._sessions: "OrderedDict[str, ClientSession]" = OrderedDict()
        self.max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: Optional[str]) -> Optional[ClientSession]:
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def new(self) -> ClientSession:
        """Session that is not tracked until `add` is called."""
        return ClientSession(id=secrets.token_urlsafe(32), profiles=ProfileStore(self._profile_loader))

    def create(self) -> ClientSession:
        return self.add(self.new())

    def add(self, session: ClientSession) -> ClientSession:
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            _, evicted = self._sessions.popitem(last=False)
            logger.debug(f"[SESSION] Evicted session for {evicted.user_id}")
        return session

    def drop(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            for task in list(session.background):
                task.cancel()

    @staticmethod
    def needs_refresh(session: ClientSession, now: Optional[float] = None) -> bool:
        auth = session.auth
        if auth is None or not auth.expires_at or not auth.refresh_token:
            return False
        now = time.time() if now is None else now
        return auth.expires_at - now < REFRESH_MARGIN_SECONDS
