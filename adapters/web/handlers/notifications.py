"""
Notification inbox routes: pages, unread badge, mark-read and clear.
"""

import logging
from typing import Any

from aiohttp import web

from adapters.web.context import client_session, json_response, parse_uuid, require_user, services
from core.domain.errors import ValidationFailed
from core.domain.models import NotificationFilter

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


def _filter(value: str) -> NotificationFilter:
    try:
        return NotificationFilter(value or NotificationFilter.ALL.value)
    except ValueError:
        raise ValidationFailed({"filter": "Use all, unread or by_type"})


def _page(value: Any) -> int:
    try:
        page = int(value or 0)
    except (TypeError, ValueError):
        raise ValidationFailed({"page": "Must be a whole number"})
    return max(page, 0)


async def _body(request: web.Request) -> dict:
    if not request.can_read_body:
        return {}
    body = await request.json()
    if not isinstance(body, dict):
        raise ValidationFailed({"body": "Expected a JSON object"})
    return body


@routes.get("/api/notifications")
async def list_notifications(request: web.Request) -> web.Response:
    require_user(request)
    query = request.query
    page = await services(request).notifications.get_page(
        client_session(request), _filter(query.get("filter", "")), query.get("kind") or None, _page(query.get("page")),
    )
    return json_response(request, page.to_dict())


@routes.get("/api/notifications/counts")
async def notification_counts(request: web.Request) -> web.Response:
    require_user(request)
    refresh = request.query.get("refresh") == "1"
    counts = await services(request).notifications.counts(client_session(request), refresh=refresh)
    return json_response(request, counts.model_dump())


@routes.post("/api/notifications/read-all")
async def mark_all_read(request: web.Request) -> web.Response:
    require_user(request)
    body = await _body(request)
    updated = await services(request).notifications.mark_all_read(client_session(request), body.get("kind") or None)
    return json_response(request, {"updated": updated})


@routes.post("/api/notifications/clear")
async def clear(request: web.Request) -> web.Response:
    require_user(request)
    body = await _body(request)
    ids = body.get("notification_ids") or []
    if not isinstance(ids, list):
        raise ValidationFailed({"notification_ids": "Expected a list of ids"})
    cleared = await services(request).notifications.clear(
        client_session(request), [parse_uuid(i) for i in ids], body.get("kind") or None,
    )
    return json_response(request, {"cleared": cleared})


@routes.post("/api/notifications/{notification_id}/read")
async def mark_read(request: web.Request) -> web.Response:
    require_user(request)
    notification_id = parse_uuid(request.match_info["notification_id"])
    updated = await services(request).notifications.mark_read(client_session(request), notification_id)
    return json_response(request, {"updated": updated})
