from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from core.domain.errors import AuthFailure, BackendError
from core.interfaces.gateways import AuthSession
from core.services.auth_service import COMPLETE_PROFILE_PATH, DEFAULT_DESTINATION, AuthService
from tests.factories import make_profile


@pytest.fixture
def gateway():
    return AsyncMock()


@pytest.fixture
def rate_limits():
    repo = AsyncMock()
    repo.check.return_value = None
    return repo


@pytest.fixture
def profile_repo():
    return AsyncMock()


@pytest.fixture
def auth(gateway, rate_limits, profile_repo):
    return AuthService(gateway, rate_limits, profile_repo, site_url="https://playr.test/")


async def test_invalid_email_is_rejected_without_redirect(auth, gateway):
    result = await auth.sign_up("player", "not-an-email", "longenough", "1.2.3.4")
    assert not result.success
    assert result.redirect is None
    assert result.error == "Please enter a valid email address"
    gateway.sign_up.assert_not_awaited()


@pytest.mark.parametrize("role,password,error", [
    (None, "longenough", "Please select a role"),
    ("referee", "longenough", "Please select a role"),
    ("coach", "short", "Password must be at least 8 characters long"),
])
async def test_signup_validation(auth, role, password, error):
    result = await auth.sign_up(role, "sam@example.com", password, "1.2.3.4")
    assert result.error == error


async def test_signup_sends_to_verification_page(auth, gateway):
    gateway.sign_up.return_value = None
    result = await auth.sign_up("player", "sam@example.com", "longenough", "1.2.3.4")
    assert result.success
    assert result.redirect == "/verify-email?email=sam%40example.com"
    assert result.message == "We've sent a verification link to sam@example.com"
    gateway.sign_up.assert_awaited_once_with(
        "sam@example.com", "longenough", "player", "https://playr.test/auth/callback",
    )


async def test_signup_for_existing_account_links_to_sign_in(auth, gateway):
    gateway.sign_up.side_effect = AuthFailure("User already registered")
    result = await auth.sign_up("club", "sam@example.com", "longenough", "1.2.3.4")
    assert not result.success
    assert result.redirect == "/?email=sam%40example.com"
    assert "already registered" in result.error


async def test_signup_rate_limited(auth, gateway, rate_limits):
    reset_at = datetime.now(timezone.utc) + timedelta(minutes=5)
    rate_limits.check.return_value = {"allowed": False, "remaining": 0, "reset_at": reset_at.isoformat(), "limit": 3}
    result = await auth.sign_up("player", "sam@example.com", "longenough", "1.2.3.4")
    assert not result.success
    assert result.error
    gateway.sign_up.assert_not_awaited()


async def test_rate_limits_can_be_disabled(gateway, rate_limits, profile_repo):
    auth = AuthService(gateway, rate_limits, profile_repo, "https://playr.test", rate_limits_enabled=False)
    gateway.sign_up.return_value = None
    result = await auth.sign_up("player", "sam@example.com", "longenough", "1.2.3.4")
    assert result.success
    rate_limits.check.assert_not_awaited()


async def test_unverified_sign_in_goes_to_verification(auth, gateway):
    gateway.sign_in.side_effect = AuthFailure("Email not confirmed", code="email_not_confirmed")
    result = await auth.sign_in("sam@example.com", "longenough", "1.2.3.4")
    assert not result.success
    assert result.redirect == "/verify-email?email=sam%40example.com&reason=unverified_signin"


async def test_wrong_password_is_inline_error(auth, gateway):
    gateway.sign_in.side_effect = AuthFailure("Invalid login credentials")
    result = await auth.sign_in("sam@example.com", "wrongpass", "1.2.3.4")
    assert result.error == "Invalid login credentials"
    assert result.redirect is None


async def test_destination_for_incomplete_profile(auth, profile_repo, user_id):
    profile_repo.get_by_id.return_value = make_profile(full_name=None)
    assert await auth.destination_after_sign_in(user_id) == (COMPLETE_PROFILE_PATH, None)


async def test_destination_honours_local_redirect_only(auth, profile_repo, user_id):
    profile_repo.get_by_id.return_value = make_profile()
    assert await auth.destination_after_sign_in(user_id, "/world") == ("/world", None)
    assert await auth.destination_after_sign_in(user_id, "//evil.example") == (DEFAULT_DESTINATION, None)
    assert await auth.destination_after_sign_in(user_id, "https://evil.example") == (DEFAULT_DESTINATION, None)


async def test_destination_when_profile_lookup_fails(auth, profile_repo, user_id):
    profile_repo.get_by_id.side_effect = BackendError("timeout")
    path, error = await auth.destination_after_sign_in(user_id)
    assert path == "/"
    assert error


async def test_ensure_profile_creates_row_for_new_user(auth, profile_repo, user_id):
    profile_repo.get_by_id.return_value = None
    await auth.ensure_profile(AuthSession(user_id=user_id, email="sam@example.com", role="coach"))
    profile_repo.create_for_new_user.assert_awaited_once_with(user_id, "sam@example.com", "coach")


async def test_refresh_failure_signs_out(auth, gateway, user_id):
    gateway.refresh.side_effect = AuthFailure("Refresh token revoked")
    assert await auth.refresh(AuthSession(user_id=user_id, refresh_token="r")) is None


async def test_password_reset_requires_valid_email(auth, gateway):
    ok, message = await auth.request_password_reset("nope")
    assert not ok
    gateway.reset_password_email.assert_not_awaited()
    ok, message = await auth.request_password_reset("sam@example.com")
    assert ok
    assert message == "We've sent a password reset link to sam@example.com"
