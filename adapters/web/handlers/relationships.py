"""
Friendships, trusted references and direct messages.
"""

import logging

from aiohttp import web

from adapters.web.context import client_session, json_response, parse_uuid, require_user, services
from core.services.messaging_service import ChatThread

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

FRIENDSHIP_ACTIONS = ("request", "accept", "reject", "cancel", "remove")


# === FRIENDS ===

@routes.get("/api/friendships/{profile_id}")
async def friendship_view(request: web.Request) -> web.Response:
    profile_id = parse_uuid(request.match_info["profile_id"])
    view = await services(request).friendships.get_view(client_session(request), profile_id)
    return json_response(request, view.to_dict())


@routes.post("/api/friendships/{profile_id}/{action}")
async def friendship_action(request: web.Request) -> web.Response:
    profile_id = parse_uuid(request.match_info["profile_id"])
    action = request.match_info["action"]
    if action not in FRIENDSHIP_ACTIONS:
        raise web.HTTPNotFound()

    friendships = services(request).friendships
    handler = {
        "request": friendships.send_request,
        "accept": friendships.accept,
        "reject": friendships.reject,
        "cancel": friendships.cancel,
        "remove": friendships.remove,
    }[action]
    view = await handler(client_session(request), profile_id)
    return json_response(request, view.to_dict())


@routes.get("/api/profiles/{profile_id}/friends")
async def friends(request: web.Request) -> web.Response:
    profile_id = parse_uuid(request.match_info["profile_id"])
    edges = await services(request).friendships.list_friends(profile_id)
    return json_response(request, {"friends": [e.model_dump(mode="json") for e in edges]})


# === REFERENCES ===

@routes.get("/api/profiles/{profile_id}/references")
async def references(request: web.Request) -> web.Response:
    profile_id = parse_uuid(request.match_info["profile_id"])
    board = await services(request).references.get_board(client_session(request), profile_id)
    return json_response(request, board.to_dict())


@routes.post("/api/references")
async def request_reference(request: web.Request) -> web.Response:
    require_user(request)
    body = await request.json()
    reference_id = parse_uuid(body["reference_id"]) if body.get("reference_id") else None
    ok = await services(request).references.request(
        client_session(request), reference_id, body.get("relationship_type", ""), body.get("note"),
    )
    return json_response(request, {"success": ok}, status=200 if ok else 400)


@routes.post("/api/references/{reference_id}/respond")
async def respond_reference(request: web.Request) -> web.Response:
    require_user(request)
    reference_id = parse_uuid(request.match_info["reference_id"])
    body = await request.json()
    ok = await services(request).references.respond(
        client_session(request), reference_id, bool(body.get("accept")), body.get("endorsement"),
    )
    return json_response(request, {"success": ok}, status=200 if ok else 400)


@routes.delete("/api/references/{reference_id}")
async def remove_reference(request: web.Request) -> web.Response:
    require_user(request)
    reference_id = parse_uuid(request.match_info["reference_id"])
    ok = await services(request).references.remove(client_session(request), reference_id)
    return json_response(request, {"success": ok}, status=200 if ok else 400)


@routes.post("/api/references/{reference_id}/withdraw")
async def withdraw_reference(request: web.Request) -> web.Response:
    require_user(request)
    reference_id = parse_uuid(request.match_info["reference_id"])
    ok = await services(request).references.withdraw(client_session(request), reference_id)
    return json_response(request, {"success": ok}, status=200 if ok else 400)


# === MESSAGES ===

@routes.get("/api/conversations")
async def conversations(request: web.Request) -> web.Response:
    require_user(request)
    found = await services(request).messaging.list_conversations(client_session(request))
    return json_response(request, {"conversations": [c.model_dump(mode="json") for c in found]})


@routes.get("/api/messages/{other_id}")
async def open_thread(request: web.Request) -> web.Response:
    require_user(request)
    other_id = parse_uuid(request.match_info["other_id"])
    thread = await services(request).messaging.open_thread(client_session(request), other_id)
    if thread is None:
        raise web.HTTPBadRequest(text="Cannot message this profile")
    return json_response(request, thread.to_dict())


async def _thread(request: web.Request) -> ChatThread:
    other_id = parse_uuid(request.match_info["other_id"])
    messaging = services(request).messaging
    session = client_session(request)
    thread = messaging.get_thread(session, other_id) or await messaging.open_thread(session, other_id)
    if thread is None:
        raise web.HTTPBadRequest(text="Cannot message this profile")
    return thread


@routes.post("/api/messages/{other_id}")
async def send_message(request: web.Request) -> web.Response:
    require_user(request)
    thread = await _thread(request)
    body = await request.json()
    ok = await services(request).messaging.send_message(client_session(request), thread, body.get("content", ""))
    return json_response(request, {"sent": ok, **thread.to_dict()}, status=200 if ok else 400)


@routes.post("/api/messages/{other_id}/{message_id}/retry")
async def retry_message(request: web.Request) -> web.Response:
    require_user(request)
    thread = await _thread(request)
    ok = await services(request).messaging.retry_message(
        client_session(request), thread, request.match_info["message_id"],
    )
    return json_response(request, {"sent": ok, **thread.to_dict()}, status=200 if ok else 400)


@routes.delete("/api/messages/{other_id}/{message_id}")
async def delete_failed_message(request: web.Request) -> web.Response:
    require_user(request)
    thread = await _thread(request)
    services(request).messaging.delete_failed_message(thread, request.match_info["message_id"])
    return json_response(request, thread.to_dict())
