"""
Admin portal routes.

Every route checks admin access first. Destructive actions open a
confirmation dialog kept in the session; a separate call confirms it.
"""

import logging
from typing import Any, Optional

from aiohttp import web
from pydantic import ValidationError

from adapters.web.context import client_session, json_response, parse_uuid, require_user, services
from adapters.web.pages import admin_overview_page
from core.domain.errors import ValidationFailed
from core.domain.models import (
    AdminProfileListItem, AuthOrphan, ProfileOrphan, ProfileSearchParams,
    WorldClub, WorldLeague, WorldProvince,
)
from core.state.confirm import ConfirmDialog
from core.state.table import TableController
from core.state.tabs import ADMIN_DATA_ISSUES_TABS, ADMIN_WORLD_TABS
from locales import t

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

DIALOG_WIDGET = "admin:dialog"
DIALOG_TABLE_WIDGET = "admin:dialog:table"
WORLD_TABLE_WIDGET = "admin:world:{kind}"

WORLD_ROW_MODELS = {
    "regions": WorldProvince,
    "leagues": WorldLeague,
    "clubs": WorldClub,
}


async def require_admin(request: web.Request) -> None:
    require_user(request)
    if not await services(request).admin.is_admin(client_session(request)):
        logger.warning(f"[ADMIN] Denied {request.path} for {client_session(request).user_id}")
        raise web.HTTPForbidden(
            text=f'{{"error": "{t("admin_not_allowed")}"}}', content_type="application/json",
        )


def _model(model, data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed({".".join(str(p) for p in err["loc"]) or "body": err["msg"] for err in e.errors()})


def _page(value: Any) -> int:
    try:
        page = int(value or 0)
    except (TypeError, ValueError):
        raise ValidationFailed({"page": "Must be a whole number"})
    if page < 0:
        raise ValidationFailed({"page": "Must not be negative"})
    return page


async def _json_object(request: web.Request) -> dict:
    body = await request.json()
    if not isinstance(body, dict):
        raise ValidationFailed({"body": "Expected a JSON object"})
    return body


# === OVERVIEW ===

@routes.get("/admin")
async def admin_index(request: web.Request) -> web.Response:
    if client_session(request).user_id is None:
        raise web.HTTPFound(f"/?redirect={request.path}")
    await require_admin(request)
    admin = services(request).admin
    overview = await admin.overview()
    report = await admin.data_issues()
    return web.Response(text=admin_overview_page(overview, report), content_type="text/html")


@routes.get("/api/admin/stats")
async def stats(request: web.Request) -> web.Response:
    await require_admin(request)
    overview = await services(request).admin.overview()
    return json_response(request, {
        "stats": overview.stats.model_dump(mode="json"),
        "trends": [d.model_dump(mode="json") for d in overview.trends],
        "top_countries": [c.model_dump() for c in overview.top_countries],
    })


@routes.get("/api/admin/engagement")
async def engagement(request: web.Request) -> web.Response:
    await require_admin(request)
    summary = await services(request).admin.engagement()
    return json_response(request, summary.model_dump(mode="json"))


@routes.get("/api/admin/audit-logs")
async def audit_logs(request: web.Request) -> web.Response:
    await require_admin(request)
    query = request.query
    admin_id = parse_uuid(query["admin_id"]) if query.get("admin_id") else None
    page = await services(request).admin.audit_logs(
        query.get("action") or None, query.get("target_type") or None, admin_id, _page(query.get("page")),
    )
    return json_response(request, page.model_dump(mode="json"))


# === DATA ISSUES ===

@routes.get("/api/admin/data-issues")
async def data_issues(request: web.Request) -> web.Response:
    await require_admin(request)
    tab = ADMIN_DATA_ISSUES_TABS.read(request.rel_url)
    report = await services(request).admin.data_issues()
    return json_response(request, {
        "tab": tab,
        "total_issues": report.total_issues,
        "counts": {
            "auth_orphans": len(report.auth_orphans),
            "profile_orphans": len(report.profile_orphans),
            "broken_references": report.broken_references.total,
        },
        "rows": report.model_dump(mode="json")[tab],
    })


@routes.post("/api/admin/data-issues/auth-orphans/delete")
async def delete_auth_orphan(request: web.Request) -> web.Response:
    await require_admin(request)
    orphan = _model(AuthOrphan, await request.json())
    dialog = services(request).admin.delete_auth_orphan_dialog(client_session(request), orphan)
    return _open_dialog(request, dialog)


@routes.post("/api/admin/data-issues/profile-orphans/delete")
async def delete_profile_orphan(request: web.Request) -> web.Response:
    await require_admin(request)
    orphan = _model(ProfileOrphan, await request.json())
    return _open_dialog(request, services(request).admin.delete_profile_orphan_dialog(orphan))


# === USERS ===

@routes.get("/api/admin/profiles")
async def search_profiles(request: web.Request) -> web.Response:
    await require_admin(request)
    params = _model(ProfileSearchParams, {k: v for k, v in request.query.items() if v != ""})
    page = await services(request).admin.search_profiles(params)
    return json_response(request, page.model_dump(mode="json"))


@routes.get("/api/admin/profiles/{profile_id}")
async def profile_details(request: web.Request) -> web.Response:
    await require_admin(request)
    details = await services(request).admin.profile_details(parse_uuid(request.match_info["profile_id"]))
    return json_response(request, details)


@routes.patch("/api/admin/profiles/{profile_id}")
async def update_profile(request: web.Request) -> web.Response:
    await require_admin(request)
    body = await request.json()
    result = await services(request).admin.update_profile(
        parse_uuid(request.match_info["profile_id"]), body.get("updates") or {}, body.get("reason"),
    )
    return json_response(request, result)


@routes.post("/api/admin/profiles/{profile_id}/block")
async def block(request: web.Request) -> web.Response:
    await require_admin(request)
    body = await request.json()
    profile = _model(AdminProfileListItem, {**body, "id": request.match_info["profile_id"]})
    return _open_dialog(request, services(request).admin.block_dialog(profile, body.get("reason")))


@routes.post("/api/admin/profiles/{profile_id}/unblock")
async def unblock(request: web.Request) -> web.Response:
    await require_admin(request)
    body = await request.json()
    profile = _model(AdminProfileListItem, {**body, "id": request.match_info["profile_id"]})
    return _open_dialog(request, services(request).admin.unblock_dialog(profile))


@routes.post("/api/admin/profiles/{profile_id}/test-account")
async def test_account(request: web.Request) -> web.Response:
    await require_admin(request)
    body = await request.json()
    profile = _model(AdminProfileListItem, {**body, "id": request.match_info["profile_id"]})
    dialog = services(request).admin.test_account_dialog(profile, bool(body.get("is_test", True)))
    return _open_dialog(request, dialog)


@routes.post("/api/admin/profiles/{profile_id}/admin-status")
async def admin_status(request: web.Request) -> web.Response:
    await require_admin(request)
    body = await request.json()
    result = await services(request).admin.set_admin_status(
        client_session(request), parse_uuid(request.match_info["profile_id"]), bool(body.get("is_admin")),
    )
    return json_response(request, result)


# === CONFIRM DIALOG ===

def _open_dialog(request: web.Request, dialog: ConfirmDialog, table: Optional[str] = None) -> web.Response:
    session = client_session(request)
    session.widgets[DIALOG_WIDGET] = dialog
    session.widgets[DIALOG_TABLE_WIDGET] = table
    return json_response(request, {"dialog": dialog.to_dict()})


def _dialog(request: web.Request) -> ConfirmDialog:
    dialog = client_session(request).widgets.get(DIALOG_WIDGET)
    if dialog is None or not dialog.is_open:
        raise web.HTTPConflict(text="No confirmation is open")
    return dialog


@routes.post("/api/admin/dialog/type")
async def dialog_type(request: web.Request) -> web.Response:
    await require_admin(request)
    dialog = _dialog(request)
    body = await request.json()
    dialog.type(body.get("value", ""))
    return json_response(request, {"dialog": dialog.to_dict()})


@routes.post("/api/admin/dialog/confirm")
async def dialog_confirm(request: web.Request) -> web.Response:
    await require_admin(request)
    session = client_session(request)
    dialog = _dialog(request)
    ok = await dialog.confirm()
    if ok:
        logger.info(f"[ADMIN] {session.user_id} confirmed: {dialog.title}")
        kind = session.widgets.pop(DIALOG_TABLE_WIDGET, None)
        session.widgets.pop(DIALOG_WIDGET, None)
        if kind:
            await _world_table(request, kind).load()
    return json_response(request, {"confirmed": ok, "dialog": dialog.to_dict()}, status=200 if ok else 400)


@routes.post("/api/admin/dialog/close")
async def dialog_close(request: web.Request) -> web.Response:
    await require_admin(request)
    session = client_session(request)
    dialog = session.widgets.get(DIALOG_WIDGET)
    if dialog is not None:
        dialog.close()
        if not dialog.is_open:
            session.widgets.pop(DIALOG_WIDGET, None)
            session.widgets.pop(DIALOG_TABLE_WIDGET, None)
    return json_response(request, {"closed": dialog is None or not dialog.is_open})


# === WORLD DIRECTORY ===

def _world_kind(request: web.Request) -> str:
    kind = request.match_info["kind"]
    if kind not in WORLD_ROW_MODELS:
        raise web.HTTPNotFound()
    return kind


def _world_table(request: web.Request, kind: str) -> TableController:
    session = client_session(request)
    key = WORLD_TABLE_WIDGET.format(kind=kind)
    table = session.widgets.get(key)
    if table is None:
        table = services(request).admin.world_table(kind)
        session.widgets[key] = table
    return table


def _table_payload(kind: str, table: TableController) -> dict:
    return {
        "tab": kind,
        "rows": [row.model_dump(mode="json") for row in table.rows],
        "filters": table.filters,
        "page": table.page,
        "total_pages": table.total_pages,
        "total_count": table.total_count,
        "showing": table.showing,
        "has_previous": table.has_previous,
        "has_next": table.has_next,
        "error": table.error,
    }


def _row(request: web.Request, kind: str, row_id: str):
    """A row from the currently loaded page of the table."""
    table = _world_table(request, kind)
    row = next((r for r in table.rows if str(r.id) == row_id), None)
    if row is None:
        raise web.HTTPNotFound(text="Row is not on the current page")
    return row


@routes.get("/api/admin/world")
async def world_table(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = ADMIN_WORLD_TABS.read(request.rel_url)
    table = _world_table(request, kind)
    await table.load()
    return json_response(request, _table_payload(kind, table))


@routes.post("/api/admin/world/{kind}/filter")
async def world_filter(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = _world_kind(request)
    body = await _json_object(request)
    if not body.get("key"):
        raise ValidationFailed({"key": "Filter key is required"})
    table = _world_table(request, kind)
    await table.set_filter(body["key"], body.get("value"))
    return json_response(request, _table_payload(kind, table))


@routes.get("/api/admin/world/{kind}/search")
async def world_search(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = _world_kind(request)
    table = _world_table(request, kind)
    rows = await table.set_search(request.query.get("q", ""))
    if rows is None:
        return json_response(request, {"superseded": True})
    return json_response(request, _table_payload(kind, table))


@routes.post("/api/admin/world/{kind}/page")
async def world_page(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = _world_kind(request)
    body = await _json_object(request)
    table = _world_table(request, kind)
    await table.go_to(_page(body.get("page")))
    return json_response(request, _table_payload(kind, table))


@routes.post("/api/admin/world/{kind}")
async def world_create(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = _world_kind(request)
    saved = await services(request).admin.save_world_row(kind, await request.json())
    await _world_table(request, kind).load()
    return json_response(request, {"row": saved}, status=201)


@routes.put("/api/admin/world/{kind}/{row_id}")
async def world_update(request: web.Request) -> web.Response:
    await require_admin(request)
    kind = _world_kind(request)
    saved = await services(request).admin.save_world_row(kind, await request.json(), request.match_info["row_id"])
    await _world_table(request, kind).load()
    return json_response(request, {"row": saved})


@routes.post("/api/admin/world/regions/{row_id}/delete")
async def delete_region(request: web.Request) -> web.Response:
    await require_admin(request)
    region = _row(request, "regions", request.match_info["row_id"])
    dialog = await services(request).admin.region_delete_dialog(region)
    return _open_dialog(request, dialog, table="regions")


@routes.post("/api/admin/world/leagues/{row_id}/delete")
async def delete_league(request: web.Request) -> web.Response:
    await require_admin(request)
    league = _row(request, "leagues", request.match_info["row_id"])
    return _open_dialog(request, services(request).admin.league_delete_dialog(league), table="leagues")


@routes.post("/api/admin/world/clubs/{row_id}/unclaim")
async def unclaim_club(request: web.Request) -> web.Response:
    await require_admin(request)
    club = _row(request, "clubs", request.match_info["row_id"])
    if not club.is_claimed:
        return json_response(request, {"error": "Club is not claimed."}, status=400)
    body = await request.json() if request.can_read_body else {}
    dialog = services(request).admin.unclaim_dialog(club, body.get("claimed_profile_name"))
    return _open_dialog(request, dialog, table="clubs")
