"""
Auth service - signup, sign-in, OAuth and password reset.
Returns navigation targets and inline errors; never raises to the caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote
from uuid import UUID

from pydantic import BaseModel, EmailStr, ValidationError

from core.domain.constants import MIN_PASSWORD_LENGTH
from core.domain.errors import AuthFailure, BackendError
from core.domain.models import RateLimitResult, Role
from core.interfaces.gateways import AuthSession, IAuthGateway
from core.interfaces.repositories import IProfileRepository, IRateLimitRepository
from core.utils.rate_limit import format_rate_limit_error

logger = logging.getLogger(__name__)

DEFAULT_DESTINATION = "/dashboard/profile"
COMPLETE_PROFILE_PATH = "/complete-profile"


class _EmailCheck(BaseModel):
    email: EmailStr


def is_valid_email(email: str) -> bool:
    try:
        _EmailCheck(email=email)
    except ValidationError:
        return False
    return True


def verify_email_url(email: str, reason: Optional[str] = None) -> str:
    url = f"/verify-email?email={quote(email, safe='')}"
    if reason:
        url += f"&reason={reason}"
    return url


@dataclass
class AuthResult:
    """Outcome of an auth action"""
    success: bool
    redirect: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    session: Optional[AuthSession] = None


class AuthService:

    def __init__(
        self,
        auth_gateway: IAuthGateway,
        rate_limit_repo: IRateLimitRepository,
        profile_repo: IProfileRepository,
        site_url: str,
        rate_limits_enabled: bool = True,
    ):
        self.auth_gateway = auth_gateway
        self.rate_limit_repo = rate_limit_repo
        self.profile_repo = profile_repo
        self.site_url = site_url.rstrip("/")
        self.rate_limits_enabled = rate_limits_enabled

    @property
    def callback_url(self) -> str:
        return f"{self.site_url}/auth/callback"

    async def _rate_limit_error(self, kind: str, identifier: str) -> Optional[str]:
        """Error text when the backend says this attempt is over the limit."""
        if not self.rate_limits_enabled:
            return None
        data = await self.rate_limit_repo.check(kind, identifier)
        if not data:
            return None
        result = RateLimitResult.model_validate(data)
        if result.allowed or result.reset_at is None:
            return None
        logger.warning(f"[AUTH] {kind} rate limit hit for {identifier}")
        return format_rate_limit_error(result.reset_at)

    # === SIGN UP ===

    def validate_signup(self, role: Optional[str], email: str, password: str) -> Optional[str]:
        if role not in {r.value for r in Role}:
            return "Please select a role"
        if not is_valid_email(email):
            return "Please enter a valid email address"
        if len(password) < MIN_PASSWORD_LENGTH:
            return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        return None

    async def sign_up(self, role: Optional[str], email: str, password: str, client_id: str) -> AuthResult:
        email = (email or "").strip()
        error = self.validate_signup(role, email, password or "")
        if error:
            return AuthResult(success=False, error=error)

        limited = await self._rate_limit_error("signup", client_id)
        if limited:
            return AuthResult(success=False, error=limited)

        try:
            session = await self.auth_gateway.sign_up(email, password, role, self.callback_url)
        except AuthFailure as e:
            if e.is_already_registered or "already exists" in e.message:
                logger.info("[AUTH] Signup for an existing account")
                return AuthResult(
                    success=False,
                    error="This email is already registered. Please sign in instead.",
                    redirect=f"/?email={quote(email, safe='')}",
                )
            logger.error(f"[AUTH] Sign up failed: {e.message}")
            return AuthResult(success=False, error=e.message or "Failed to create account")
        except BackendError as e:
            logger.error(f"[AUTH] Sign up failed: {e.message}")
            return AuthResult(success=False, error="Failed to create account")

        logger.info(f"[AUTH] Account created with role {role}, verification pending")
        return AuthResult(
            success=True,
            redirect=verify_email_url(email),
            message=f"We've sent a verification link to {email}",
            session=session,
        )

    # === SIGN IN ===

    async def sign_in(self, email: str, password: str, client_id: str) -> AuthResult:
        email = (email or "").strip()
        if not email or not password:
            return AuthResult(success=False, error="Please enter your email and password")

        limited = await self._rate_limit_error("login", client_id)
        if limited:
            return AuthResult(success=False, error=limited)

        try:
            session = await self.auth_gateway.sign_in(email, password)
        except AuthFailure as e:
            if e.is_unconfirmed_email:
                logger.debug("[AUTH] Email not verified, redirecting to verification page")
                return AuthResult(success=False, redirect=verify_email_url(email, "unverified_signin"))
            logger.info(f"[AUTH] Sign in rejected: {e.message}")
            return AuthResult(success=False, error=e.message or "Failed to sign in")

        return AuthResult(success=True, session=session)

    async def destination_after_sign_in(self, user_id: UUID, redirect_to: Optional[str] = None) -> Tuple[str, Optional[str]]:
        """
        Where a freshly signed-in user lands: the complete-profile page for
        missing or incomplete profiles, otherwise the requested page.
        Returns (path, error).
        """
        try:
            profile = await self.profile_repo.get_by_id(user_id)
        except BackendError as e:
            logger.error(f"[AUTH] Error fetching profile for {user_id}: {e.message}")
            return "/", "Could not load your profile. Please try again or contact support if this persists."
        if profile is None or not profile.full_name:
            return COMPLETE_PROFILE_PATH, None
        if redirect_to and redirect_to.startswith("/") and not redirect_to.startswith("//"):
            return redirect_to, None
        return DEFAULT_DESTINATION, None

    # === OAUTH ===

    async def oauth_start(self, provider: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        """(provider URL, PKCE verifier, error)"""
        try:
            url, verifier = await self.auth_gateway.oauth_start(provider, self.callback_url)
        except AuthFailure as e:
            logger.error(f"[AUTH] OAuth start with {provider} failed: {e.message}")
            return None, None, e.message
        return url, verifier, None

    async def complete_callback(self, auth_code: str, code_verifier: Optional[str]) -> AuthResult:
        """Exchange the OAuth or email-link code for a session."""
        try:
            session = await self.auth_gateway.exchange_code(auth_code, code_verifier)
        except AuthFailure as e:
            logger.error(f"[AUTH] Code exchange failed: {e.message}")
            return AuthResult(success=False, redirect="/", error=e.message)
        return AuthResult(success=True, session=session)

    async def ensure_profile(self, session: AuthSession) -> None:
        """Create the profile for a new user. Must run as that user."""
        try:
            profile = await self.profile_repo.get_by_id(session.user_id)
            if profile is None and session.role:
                await self.profile_repo.create_for_new_user(session.user_id, session.email or "", session.role)
                logger.info(f"[AUTH] Created {session.role} profile for {session.user_id}")
        except BackendError as e:
            # Complete-profile handles a missing row
            logger.error(f"[AUTH] Could not ensure profile for {session.user_id}: {e.message}")

    # === MISC ===

    async def refresh(self, session: AuthSession) -> Optional[AuthSession]:
        if not session.refresh_token:
            return None
        try:
            return await self.auth_gateway.refresh(session.refresh_token)
        except AuthFailure as e:
            logger.info(f"[AUTH] Refresh failed for {session.user_id}: {e.message}")
            return None

    async def resend_verification(self, email: str) -> Tuple[bool, str]:
        if not is_valid_email(email or ""):
            return False, "Please enter a valid email address"
        try:
            await self.auth_gateway.resend_verification(email, self.callback_url)
        except AuthFailure as e:
            logger.error(f"[AUTH] Resend verification failed: {e.message}")
            return False, e.message
        return True, f"We've sent a new verification link to {email}"

    async def request_password_reset(self, email: str) -> Tuple[bool, str]:
        email = (email or "").strip()
        if not is_valid_email(email):
            return False, "Please enter a valid email address"

        limited = await self._rate_limit_error("password_reset", email)
        if limited:
            return False, limited

        try:
            await self.auth_gateway.reset_password_email(email, self.callback_url)
        except AuthFailure as e:
            logger.error(f"[AUTH] Password reset email failed: {e.message}")
            return False, e.message
        return True, f"We've sent a password reset link to {email}"
