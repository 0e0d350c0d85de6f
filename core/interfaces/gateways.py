"""
Gateway interfaces - auth, storage and edge functions of the hosted backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel


class AuthSession(BaseModel):
    """Tokens and identity returned by the auth service"""
    user_id: UUID
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None  # unix seconds
    role: Optional[str] = None  # from user metadata


class IAuthGateway(ABC):
    """Interface for the managed authentication service"""

    @abstractmethod
    async def sign_up(self, email: str, password: str, role: str, redirect_to: str) -> Optional[AuthSession]:
        """Register; returns None when email confirmation is pending"""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Password sign-in; raises AuthFailure"""
        pass

    @abstractmethod
    async def oauth_start(self, provider: str, redirect_to: str) -> Tuple[str, Optional[str]]:
        """Provider URL and the PKCE verifier to keep until the callback"""
        pass

    @abstractmethod
    async def exchange_code(self, auth_code: str, code_verifier: Optional[str] = None) -> AuthSession:
        """Finish an OAuth / email-link flow"""
        pass

    @abstractmethod
    async def refresh(self, refresh_token: str) -> AuthSession:
        pass

    @abstractmethod
    async def resend_verification(self, email: str, redirect_to: str) -> None:
        pass

    @abstractmethod
    async def reset_password_email(self, email: str, redirect_to: str) -> None:
        pass


class IAvatarStorage(ABC):
    """Interface for the avatar storage bucket"""

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload and return the public URL"""
        pass

    @abstractmethod
    async def remove(self, path: str) -> None:
        pass

    @abstractmethod
    def path_from_url(self, url: str) -> str:
        """Object path for a public URL of this bucket, or ''"""
        pass


class IAdminActions(ABC):
    """Interface for privileged admin actions run by an edge function"""

    @abstractmethod
    async def invoke(
        self, action: str, target_id: str, access_token: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        pass
