"""Profile rows, signed-in sessions and in-memory fakes shared by the tests."""

from typing import Dict, Optional
from uuid import UUID, uuid4

from core.domain.models import Profile, Role
from core.interfaces.gateways import AuthSession
from core.state.session import ClientSession


def make_profile(role: str = "player", **fields) -> Profile:
    data = {
        "id": fields.pop("id", None) or uuid4(),
        "role": Role(role),
        "email": "sam@example.com",
        "full_name": "Sam Rivera",
        "base_location": "Amsterdam",
        "onboarding_completed": True,
    }
    data.update(fields)
    return Profile(**data)


class FakeProfileRows:
    """Profile rows by id; the loader a ProfileStore reads from."""

    def __init__(self):
        self.rows: Dict[UUID, Profile] = {}
        self.loads = 0

    def add(self, profile: Profile) -> Profile:
        self.rows[profile.id] = profile
        return profile

    async def load(self, profile_id: UUID) -> Optional[Profile]:
        self.loads += 1
        return self.rows.get(profile_id)


def signed_in(session: ClientSession, user_id: UUID, role: str = "player") -> ClientSession:
    session.auth = AuthSession(
        user_id=user_id, email="sam@example.com", access_token="token-1", refresh_token="refresh-1",
        expires_at=None, role=role,
    )
    return session
