"""
Per-visitor client state: everything a browser tab would keep in memory.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set
from uuid import UUID

from core.domain.forms import ProfileFormBase
from core.domain.models import ClubClaimContext
from core.interfaces.gateways import AuthSession
from core.state.drafts import DraftAutosaver
from core.state.profile_store import ProfileStore
from core.state.toasts import ToastStore


@dataclass
class ProfileEditState:
    """The open edit-profile modal"""
    profile_id: UUID
    role: str
    form: ProfileFormBase
    autosaver: DraftAutosaver
    claim: Optional[ClubClaimContext] = None
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass
class ClientSession:
    id: str
    profiles: ProfileStore
    toasts: ToastStore = field(default_factory=ToastStore)
    auth: Optional[AuthSession] = None
    # PKCE verifier kept between the OAuth redirect and the callback
    oauth_verifier: Optional[str] = None
    edit: Optional[ProfileEditState] = None
    widgets: Dict[str, Any] = field(default_factory=dict)
    background: Set[asyncio.Task] = field(default_factory=set)

    @property
    def user_id(self) -> Optional[UUID]:
        return self.auth.user_id if self.auth else None

    @property
    def access_token(self) -> Optional[str]:
        return self.auth.access_token if self.auth else None

    def spawn(self, coro) -> asyncio.Task:
        """Run work in the background, keeping a reference until it finishes."""
        task = asyncio.create_task(coro)
        self.background.add(task)
        task.add_done_callback(self.background.discard)
        return task

    @property
    def has_state(self) -> bool:
        """Whether anything here must survive until the next request."""
        return bool(
            self.auth or self.oauth_verifier or self.edit or self.widgets
            or self.background or self.toasts.pending()
        )

    async def settle(self) -> None:
        """Wait for background work started by this session."""
        while self.background:
            await asyncio.wait(set(self.background))
