"""
Supabase Auth gateway: email/password, OAuth (PKCE) and token refresh.
Each call uses a fresh client so session state never leaks between users.
"""

import logging
from typing import Dict, Optional, Tuple

from supabase import AuthError

from core.domain.errors import AuthFailure
from core.interfaces.gateways import AuthSession, IAuthGateway
from infrastructure.database.supabase_client import new_auth_client, run_sync

logger = logging.getLogger(__name__)


class _CapturingStorage:
    """In-memory auth storage we can read back (for the PKCE code verifier)."""

    def __init__(self):
        self.items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def code_verifier(self) -> Optional[str]:
        for key, value in self.items.items():
            if key.endswith("-code-verifier"):
                return value
        return None


def _failure(e: AuthError) -> AuthFailure:
    return AuthFailure(
        getattr(e, "message", None) or str(e),
        status=getattr(e, "status", None),
        code=getattr(e, "code", None),
    )


def _to_session(response) -> Optional[AuthSession]:
    user = getattr(response, "user", None)
    if user is None:
        return None
    session = getattr(response, "session", None)
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthSession(
        user_id=user.id,
        email=user.email,
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
        expires_at=session.expires_at if session else None,
        role=metadata.get("role"),
    )


class SupabaseAuthGateway(IAuthGateway):

    @run_sync
    def _sign_up_sync(self, email: str, password: str, role: str, redirect_to: str):
        client = new_auth_client()
        try:
            return client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": redirect_to,
                    "data": {"role": role},
                },
            })
        except AuthError as e:
            raise _failure(e) from e

    async def sign_up(self, email: str, password: str, role: str, redirect_to: str) -> Optional[AuthSession]:
        response = await self._sign_up_sync(email, password, role, redirect_to)
        session = _to_session(response)
        if session and session.access_token:
            return session
        # Confirmation email sent; no session until the link is clicked
        return None

    @run_sync
    def _sign_in_sync(self, email: str, password: str):
        client = new_auth_client()
        try:
            return client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise _failure(e) from e

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._sign_in_sync(email, password)
        session = _to_session(response)
        if session is None:
            raise AuthFailure("Sign in failed")
        return session

    @run_sync
    def _oauth_sync(self, provider: str, redirect_to: str) -> Tuple[str, Optional[str]]:
        storage = _CapturingStorage()
        client = new_auth_client(flow_type="pkce", storage=storage)
        try:
            response = client.auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": redirect_to},
            })
        except AuthError as e:
            raise _failure(e) from e
        return response.url, storage.code_verifier()

    async def oauth_start(self, provider: str, redirect_to: str) -> Tuple[str, Optional[str]]:
        """Provider URL plus the PKCE verifier to keep until the callback."""
        return await self._oauth_sync(provider, redirect_to)

    @run_sync
    def _exchange_code_sync(self, auth_code: str, code_verifier: Optional[str]):
        storage = _CapturingStorage()
        client = new_auth_client(flow_type="pkce", storage=storage)
        params = {"auth_code": auth_code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        try:
            return client.auth.exchange_code_for_session(params)
        except AuthError as e:
            raise _failure(e) from e

    async def exchange_code(self, auth_code: str, code_verifier: Optional[str] = None) -> AuthSession:
        response = await self._exchange_code_sync(auth_code, code_verifier)
        session = _to_session(response)
        if session is None:
            raise AuthFailure("Could not complete sign in")
        return session

    @run_sync
    def _refresh_sync(self, refresh_token: str):
        client = new_auth_client()
        try:
            return client.auth.refresh_session(refresh_token)
        except AuthError as e:
            raise _failure(e) from e

    async def refresh(self, refresh_token: str) -> AuthSession:
        response = await self._refresh_sync(refresh_token)
        session = _to_session(response)
        if session is None:
            raise AuthFailure("Session expired")
        return session

    @run_sync
    def _resend_sync(self, email: str, redirect_to: str) -> None:
        client = new_auth_client()
        try:
            client.auth.resend({
                "type": "signup",
                "email": email,
                "options": {"email_redirect_to": redirect_to},
            })
        except AuthError as e:
            raise _failure(e) from e

    async def resend_verification(self, email: str, redirect_to: str) -> None:
        await self._resend_sync(email, redirect_to)

    @run_sync
    def _reset_password_sync(self, email: str, redirect_to: str) -> None:
        client = new_auth_client()
        try:
            client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except AuthError as e:
            raise _failure(e) from e

    async def reset_password_email(self, email: str, redirect_to: str) -> None:
        await self._reset_password_sync(email, redirect_to)
