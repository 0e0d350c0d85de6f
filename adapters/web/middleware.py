"""
Middleware for the web app.

- error_middleware: maps domain errors to JSON responses
- session_middleware: attaches the visitor session and binds its access token
- throttling_middleware: rate limiting per signed-in user or per client address
"""

import json
import logging
import time
from collections import defaultdict
from typing import Dict, List

from aiohttp import web

from adapters.web.context import SESSION_KEY, client_id, services
from core.domain.constants import (
    RATE_LIMIT_AUTH,
    RATE_LIMIT_INTERVAL_SECONDS,
    RATE_LIMIT_REQUESTS,
)
from core.domain.errors import AuthFailure, BackendError, ValidationFailed
from infrastructure.database.supabase_client import acting_as
from locales import t

logger = logging.getLogger(__name__)

AUTH_PATHS = ("/signup", "/signin", "/auth/", "/forgot-password")


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationFailed as e:
        return web.json_response({"error": e.message, "errors": e.errors}, status=400)
    except json.JSONDecodeError:
        return web.json_response({"error": "Request body is not valid JSON"}, status=400)
    except AuthFailure as e:
        logger.info(f"[WEB] Auth failure on {request.path}: {e.message}")
        return web.json_response({"error": e.message}, status=401)
    except BackendError as e:
        logger.error(f"[WEB] Backend error on {request.method} {request.path}: {e.message} (code={e.code})")
        return web.json_response({"error": e.message, "code": e.code}, status=502)


@web.middleware
async def session_middleware(request: web.Request, handler):
    svc = services(request)
    cookie = request.cookies.get(svc.session_cookie)
    session = svc.sessions.get(cookie)
    is_new = session is None
    if is_new:
        session = svc.sessions.new()

    if svc.sessions.needs_refresh(session):
        refreshed = await svc.auth.refresh(session.auth)
        if refreshed is None:
            logger.info(f"[SESSION] Refresh failed, signing out {session.user_id}")
        session.auth = refreshed

    request[SESSION_KEY] = session
    try:
        with acting_as(session.access_token):
            response = await handler(request)
    except web.HTTPException as e:
        # Redirects raised by handlers must carry the cookie too
        if is_new:
            _keep_new_session(e, svc, session)
        raise

    if is_new:
        _keep_new_session(response, svc, session)
    return response


def _keep_new_session(response: web.StreamResponse, svc, session) -> None:
    """Track a cookie-less visitor only once there is state to remember."""
    if not session.has_state:
        return
    svc.sessions.add(session)
    _set_session_cookie(response, svc, session.id)


def _set_session_cookie(response: web.StreamResponse, svc, session_id: str) -> None:
    response.set_cookie(
        svc.session_cookie, session_id,
        httponly=True, samesite="Lax", secure=svc.secure_cookies, path="/",
    )


class Throttle:
    """
    Simple rate limiter: tracks request timestamps per key.
    Rejects requests that exceed the limit within the interval.
    """

    def __init__(
        self,
        default_limit: int = RATE_LIMIT_REQUESTS,
        auth_limit: int = RATE_LIMIT_AUTH,
        interval: int = RATE_LIMIT_INTERVAL_SECONDS,
    ):
        self.default_limit = default_limit
        self.auth_limit = auth_limit
        self.interval = interval
        # {key: [timestamp, timestamp, ...]}
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._last_sweep = 0.0

    def __len__(self) -> int:
        """Number of keys with requests inside the current interval."""
        return len(self._requests)

    @staticmethod
    def is_auth_request(method: str, path: str) -> bool:
        """Auth form posts get the stricter limit."""
        return method == "POST" and path.startswith(AUTH_PATHS)

    def _cleanup(self, key: str, now: float):
        """Remove expired timestamps."""
        cutoff = now - self.interval
        alive = [ts for ts in self._requests.get(key, ()) if ts > cutoff]
        if alive:
            self._requests[key] = alive
        else:
            self._requests.pop(key, None)

    def _sweep(self, now: float):
        """Forget every key idle for a whole interval."""
        if now - self._last_sweep < self.interval:
            return
        self._last_sweep = now
        for key in list(self._requests):
            self._cleanup(key, now)

    def hit(self, key: str, method: str, path: str, now: float = None) -> bool:
        """Record a request. False when it is over the limit."""
        now = time.monotonic() if now is None else now
        is_auth = self.is_auth_request(method, path)
        bucket = f"{key}:auth" if is_auth else key
        limit = self.auth_limit if is_auth else self.default_limit
        self._sweep(now)
        self._cleanup(bucket, now)
        if len(self._requests[bucket]) >= limit:
            logger.warning(f"Rate limit hit for {key} (limit={limit})")
            return False
        self._requests[bucket].append(now)
        return True


def throttle_key(request: web.Request, throttle: Throttle) -> str:
    """Signed-in users are limited per user; auth posts and visitors per client address."""
    session = request.get(SESSION_KEY)
    user_id = session.user_id if session else None
    if user_id is None or throttle.is_auth_request(request.method, request.path):
        return f"client:{client_id(request)}"
    return f"user:{user_id}"


def throttling_middleware(throttle: Throttle = None):
    throttle = throttle or Throttle()

    @web.middleware
    async def middleware(request: web.Request, handler):
        key = throttle_key(request, throttle)
        if not throttle.hit(key, request.method, request.path):
            return web.json_response({"error": t("too_many_requests")}, status=429)
        return await handler(request)

    return middleware
