from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from aiohttp.test_utils import TestClient, TestServer

from adapters.web.app import create_app
from adapters.web.context import Services
from adapters.web.middleware import Throttle
from adapters.web.sessions import SessionManager
from core.domain.errors import AuthFailure
from core.domain.models import CountryDirectoryEntry, NotificationCounts, ProfileCounts, WorldClub, WorldLeague
from core.interfaces.gateways import AuthSession
from core.services.admin_service import AdminService
from core.services.auth_service import AuthService
from core.services.brand_service import BrandService
from core.services.notification_service import NotificationService
from core.services.profile_service import ProfileService
from core.services.profile_strength import ProfileStrengthService
from core.services.world_service import WorldService
from core.state.drafts import DraftStore
from tests.factories import make_profile

USER_ID = uuid4()


@pytest.fixture
def auth_gateway():
    gateway = AsyncMock()
    gateway.sign_in.return_value = AuthSession(
        user_id=USER_ID, email="sam@example.com", access_token="token-1", refresh_token="refresh-1",
    )
    return gateway


@pytest.fixture
def profile_repo():
    repo = AsyncMock()
    repo.get_by_id.return_value = make_profile(id=USER_ID)
    return repo


@pytest.fixture
def admin_repo():
    repo = AsyncMock()
    repo.is_platform_admin.return_value = False
    return repo


@pytest.fixture
def svc(auth_gateway, profile_repo, admin_repo):
    rate_limits = AsyncMock()
    rate_limits.check.return_value = None
    return Services(
        auth=AuthService(auth_gateway, rate_limits, profile_repo, "http://playr.test"),
        profiles=MagicMock(),
        brands=MagicMock(),
        world=MagicMock(),
        journey=MagicMock(),
        friendships=MagicMock(),
        references=MagicMock(),
        messaging=MagicMock(),
        admin=AdminService(admin_repo, AsyncMock(), AsyncMock()),
        strength=MagicMock(),
        notifications=MagicMock(),
        sessions=SessionManager(profile_repo.get_by_id),
        world_directory_enabled=False,
    )


@pytest.fixture
async def client(svc):
    async with TestClient(TestServer(create_app(svc))) as client:
        yield client


async def _sign_in(client):
    response = await client.post(
        "/signin", data={"email": "sam@example.com", "password": "secret123"}, allow_redirects=False,
    )
    assert response.status == 302
    return response


# === AUTH PAGES ===

async def test_landing_links_to_signup(client):
    response = await client.get("/")
    assert response.status == 200
    assert "Create account" in await response.text()

    signup = await client.get("/signup")
    assert "Join PLAYR" in await signup.text()


async def test_signup_with_invalid_email_stays_on_form(client, auth_gateway):
    response = await client.post(
        "/signup", data={"role": "player", "email": "not-an-email", "password": "secret123"},
        allow_redirects=False,
    )
    assert response.status == 400
    assert "Location" not in response.headers
    assert "Please enter a valid email address" in await response.text()
    auth_gateway.sign_up.assert_not_awaited()


async def test_signup_goes_to_verify_email(client, auth_gateway):
    page = await client.get("/signup?role=player")
    assert "Join as Player" in await page.text()

    response = await client.post("/signup", data={"role": "player", "email": "sam@example.com", "password": "secret123"})
    assert response.status == 200
    assert response.url.path == "/verify-email"
    assert "sent a verification link to sam@example.com" in await response.text()
    auth_gateway.sign_up.assert_awaited_once()


async def test_existing_account_links_to_sign_in(client, auth_gateway):
    auth_gateway.sign_up.side_effect = AuthFailure("User already registered")
    response = await client.post(
        "/signup", data={"role": "coach", "email": "sam@example.com", "password": "secret123"},
        allow_redirects=False,
    )
    assert response.status == 400
    text = await response.text()
    assert "already registered" in text
    assert 'href="/?email=sam%40example.com"' in text


async def test_sign_in_sets_session_cookie(client, svc):
    response = await _sign_in(client)
    assert response.headers["Location"] == "/dashboard/profile"
    assert "playr_session" in response.cookies
    assert len(svc.sessions) == 1


async def test_unverified_sign_in_redirects(client, auth_gateway):
    auth_gateway.sign_in.side_effect = AuthFailure("Email not confirmed", code="email_not_confirmed")
    response = await client.post(
        "/signin", data={"email": "sam@example.com", "password": "secret123"}, allow_redirects=False,
    )
    assert response.headers["Location"] == "/verify-email?email=sam%40example.com&reason=unverified_signin"


# === ACCESS ===

async def test_api_requires_sign_in(client):
    response = await client.get("/api/profile")
    assert response.status == 401
    assert (await response.json())["error"] == "Please sign in to continue."


async def test_admin_api_forbidden_for_members(client, admin_repo):
    await _sign_in(client)
    response = await client.get("/api/admin/stats")
    assert response.status == 403
    assert (await response.json())["error"] == "You do not have access to the admin portal."
    admin_repo.is_platform_admin.assert_awaited_once()


async def test_admin_rejects_malformed_input(client, admin_repo):
    admin_repo.is_platform_admin.return_value = True
    await _sign_in(client)

    response = await client.get("/api/admin/audit-logs?page=two")
    assert response.status == 400
    assert (await response.json())["errors"] == {"page": "Must be a whole number"}

    response = await client.post("/api/admin/world/regions/filter", json={"value": 1})
    assert response.status == 400
    assert (await response.json())["errors"] == {"key": "Filter key is required"}

    response = await client.post("/api/admin/world/clubs/page", json={"page": "last"})
    assert response.status == 400

    response = await client.post("/api/admin/world/regions", json={"name": "North", "country_id": "abc"})
    assert response.status == 400
    assert (await response.json())["errors"] == {"country_id": "Must be a whole number"}

    response = await client.post("/api/admin/world/regions", data="{not json", headers={"Content-Type": "application/json"})
    assert response.status == 400


async def test_directory_disabled(client):
    response = await client.get("/world")
    assert response.status == 404


async def test_directory_league_drill_down(svc):
    club = WorldClub(id=uuid4(), club_name="Racing Club", country_id=2, men_league_id=5)
    world_repo = AsyncMock()
    world_repo.get_directory_countries.return_value = [
        CountryDirectoryEntry(country_id=2, country_code="BE", country_name="Belgium"),
    ]
    world_repo.get_regions.return_value = []
    world_repo.get_leagues_for_location.return_value = [WorldLeague(id=5, name="Eerste Klasse")]
    world_repo.get_clubs.return_value = [club]
    svc.world = WorldService(world_repo)
    svc.world_directory_enabled = True

    async with TestClient(TestServer(create_app(svc))) as client:
        country = await client.get("/world/be")
        assert '<a href="/world/be/eerste-klasse">Eerste Klasse</a>' in await country.text()

        linked = await client.get(f"/world/be?league=5&gender=men&club={club.id}")
        assert '<li class="highlight">Racing Club</li>' in await linked.text()

        women = await client.get("/world/be/eerste-klasse")
        assert women.status == 200
        assert "Racing Club" not in await women.text()

        men = await client.get("/world/be/eerste-klasse?gender=men")
        assert "Racing Club" in await men.text()

        assert (await client.get("/world/be/tweede-klasse")).status == 404


async def test_toasts_endpoint_returns_empty_queue(client):
    response = await client.get("/api/toasts")
    assert (await response.json()) == {"toasts": []}


# === ONBOARDING ===

async def test_brand_onboarding_reaches_dashboard(client, svc, profile_repo, tmp_path):
    profile_repo.get_by_id.return_value = None
    profile_repo.update.return_value = make_profile("brand", id=USER_ID, full_name="Acme Sticks")
    brand_repo = AsyncMock()
    brand_repo.get_my_brand.return_value = None
    brand_repo.create.return_value = {"slug": "acme-sticks"}
    svc.profiles = ProfileService(profile_repo, AsyncMock(), DraftStore(str(tmp_path)), AsyncMock())
    svc.brands = BrandService(brand_repo, profile_repo)
    await _sign_in(client)

    response = await client.post(
        "/complete-profile", data={"role": "brand", "full_name": "Acme Sticks", "category": "apparel"},
        allow_redirects=False,
    )
    assert response.status == 302
    assert response.headers["Location"] == "/dashboard/profile"
    profile_repo.create_for_new_user.assert_awaited_once_with(USER_ID, "sam@example.com", "brand")
    assert brand_repo.create.await_args.args[0]["name"] == "Acme Sticks"
    assert profile_repo.update.await_args.args[1]["onboarding_completed"] is True


async def test_brand_onboarding_needs_a_name(client, svc, profile_repo, tmp_path):
    svc.profiles = ProfileService(profile_repo, AsyncMock(), DraftStore(str(tmp_path)), AsyncMock())
    svc.brands = BrandService(AsyncMock(), profile_repo)
    await _sign_in(client)

    response = await client.post("/complete-profile", data={"role": "brand"}, allow_redirects=False)
    assert response.status == 400
    assert "Brand name is required." in await response.text()
    profile_repo.update.assert_not_awaited()


# === PROFILE STRENGTH AND NOTIFICATIONS ===

async def test_profile_strength_endpoint(client, svc, profile_repo, tmp_path):
    activity_repo = AsyncMock()
    activity_repo.count_activity.return_value = ProfileCounts(journey=1)
    svc.profiles = ProfileService(profile_repo, AsyncMock(), DraftStore(str(tmp_path)), AsyncMock())
    svc.strength = ProfileStrengthService(activity_repo, AsyncMock())
    await _sign_in(client)

    response = await client.get("/api/profile/strength")
    assert response.status == 200
    body = await response.json()
    assert body["percentage"] == 15
    assert body["next_step"]["id"] == "highlight-video"
    assert len(body["buckets"]) == 7


async def test_notification_routes(client, svc):
    repo = AsyncMock()
    repo.counts.return_value = NotificationCounts(unread_count=4, total_count=9)
    repo.mark_all_read.return_value = 4
    svc.notifications = NotificationService(repo)
    assert (await client.get("/api/notifications")).status == 401
    await _sign_in(client)

    assert (await client.get("/api/notifications?filter=starred")).status == 400
    assert (await client.get("/api/notifications?filter=by_type&kind=party_invite")).status == 400

    counts = await client.get("/api/notifications/counts")
    assert (await counts.json())["unread_count"] == 4

    response = await client.post("/api/notifications/read-all", json={})
    assert (await response.json())["updated"] == 4
    counts = await client.get("/api/notifications/counts")
    assert (await counts.json())["unread_count"] == 0
    repo.counts.assert_awaited_once()


# === THROTTLE ===

def test_throttle_limits_per_bucket():
    throttle = Throttle(default_limit=2, auth_limit=1, interval=60)
    assert throttle.hit("s1", "GET", "/api/profile", now=0)
    assert throttle.hit("s1", "GET", "/api/profile", now=1)
    assert not throttle.hit("s1", "GET", "/api/profile", now=2)
    # Auth posts have their own bucket
    assert throttle.hit("s1", "POST", "/signin", now=2)
    assert not throttle.hit("s1", "POST", "/signin", now=3)
    # Window slides
    assert throttle.hit("s1", "GET", "/api/profile", now=61)


def test_throttle_forgets_idle_clients():
    throttle = Throttle(default_limit=5, interval=60)
    for n in range(3):
        throttle.hit(f"client:10.0.0.{n}", "GET", "/", now=0)
    assert len(throttle) == 3
    throttle.hit("client:10.0.0.9", "GET", "/", now=120)
    assert len(throttle) == 1


async def test_throttled_requests_get_429(svc):
    app = create_app(svc, throttle=Throttle(default_limit=1))
    async with TestClient(TestServer(app)) as client:
        assert (await client.get("/api/toasts")).status == 200
        response = await client.get("/api/toasts")
        assert response.status == 429


async def test_auth_throttle_applies_without_cookie(svc):
    app = create_app(svc, throttle=Throttle(auth_limit=1))
    async with TestClient(TestServer(app)) as client:
        await _sign_in(client)
        client.session.cookie_jar.clear()
        response = await client.post(
            "/signin", data={"email": "sam@example.com", "password": "secret123"}, allow_redirects=False,
        )
        assert response.status == 429


# === SESSIONS ===

async def test_anonymous_visits_keep_no_session(client, svc):
    for _ in range(3):
        response = await client.get("/")
        assert response.status == 200
        assert "playr_session" not in response.cookies
    assert len(svc.sessions) == 0


def test_sessions_evict_least_recently_used():
    sessions = SessionManager(AsyncMock(), max_sessions=2)
    first = sessions.create()
    second = sessions.create()
    assert sessions.get(first.id) is first
    sessions.create()
    assert first.id in sessions
    assert second.id not in sessions


def test_needs_refresh_near_expiry(session, user_id):
    assert not SessionManager.needs_refresh(session)
    session.auth = AuthSession(user_id=user_id, refresh_token="refresh-1", expires_at=1_000)
    assert SessionManager.needs_refresh(session, now=970)
    assert not SessionManager.needs_refresh(session, now=800)
