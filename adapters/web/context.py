"""
Request-scoped access to services and the visitor session.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from aiohttp import web

from adapters.web.sessions import SessionManager
from core.services import (
    AdminService, AuthService, BrandService, FriendshipService, JourneyService,
    MessagingService, NotificationService, ProfileService, ProfileStrengthService,
    ReferenceService, WorldService,
)
from core.state.session import ClientSession


@dataclass
class Services:
    auth: AuthService
    profiles: ProfileService
    brands: BrandService
    world: WorldService
    journey: JourneyService
    friendships: FriendshipService
    references: ReferenceService
    messaging: MessagingService
    admin: AdminService
    strength: ProfileStrengthService
    notifications: NotificationService
    sessions: SessionManager
    session_cookie: str = "playr_session"
    secure_cookies: bool = False
    world_directory_enabled: bool = True


SERVICES = web.AppKey("services", Services)
SESSION_KEY = "playr_session"


def services(request: web.Request) -> Services:
    return request.app[SERVICES]


def client_session(request: web.Request) -> ClientSession:
    return request[SESSION_KEY]


def client_id(request: web.Request) -> str:
    """Identifier for backend rate limits: forwarded client IP or peer address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote or "unknown"


def require_user(request: web.Request) -> UUID:
    user_id = client_session(request).user_id
    if user_id is None:
        raise web.HTTPUnauthorized(
            text='{"error": "Please sign in to continue."}', content_type="application/json",
        )
    return user_id


def parse_uuid(value: Optional[str]) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise web.HTTPNotFound()


def json_response(request: web.Request, data: Any = None, status: int = 200) -> web.Response:
    """JSON body with pending toasts attached."""
    body = dict(data) if isinstance(data, dict) else {"data": data}
    session = request.get(SESSION_KEY)
    body["toasts"] = [toast.to_dict() for toast in session.toasts.drain()] if session else []
    return web.json_response(body, status=status, dumps=_dumps)


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)
