"""
World directory routes: browsable country/region pages, the header search
dropdown, the club picker used by forms, and club claims.
"""

import logging
from typing import Optional

from aiohttp import web

from adapters.web.context import client_session, json_response, parse_uuid, require_user, services
from adapters.web.pages import directory_page, world_index_page
from core.services.world_service import DEFAULT_GENDER
from core.state.search_select import ClubPicker, WorldSearchDropdown

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

DROPDOWN_WIDGET = "world:dropdown"
PICKER_WIDGET = "world:picker:{field}"


def _html(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


def _require_directory(request: web.Request) -> None:
    if not services(request).world_directory_enabled:
        raise web.HTTPNotFound()


def _optional_int(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise web.HTTPBadRequest(text=f"Invalid number: {value}")


# === DIRECTORY PAGES ===

@routes.get("/world")
async def world_index(request: web.Request) -> web.Response:
    _require_directory(request)
    countries = await services(request).world.get_directory_countries()
    return _html(world_index_page(countries))


@routes.get("/world/{country}")
async def world_country(request: web.Request) -> web.Response:
    _require_directory(request)
    query = request.query
    page = await services(request).world.country_page(
        request.match_info["country"], _optional_int(query.get("league")), query.get("gender", DEFAULT_GENDER),
    )
    if page is None:
        raise web.HTTPNotFound()
    return _html(directory_page(page, highlight=query.get("club", "")))


@routes.get("/world/{country}/{region}")
async def world_region(request: web.Request) -> web.Response:
    _require_directory(request)
    query = request.query
    page = await services(request).world.region_page(
        request.match_info["country"], request.match_info["region"],
        _optional_int(query.get("league")), query.get("gender", DEFAULT_GENDER),
    )
    if page is None:
        raise web.HTTPNotFound()
    return _html(directory_page(page, highlight=query.get("club", "")))


@routes.get("/world/{country}/{region}/{league}")
async def world_league(request: web.Request) -> web.Response:
    _require_directory(request)
    query = request.query
    page = await services(request).world.league_page(
        request.match_info["country"], request.match_info["region"], request.match_info["league"],
        query.get("gender", DEFAULT_GENDER),
    )
    if page is None:
        raise web.HTTPNotFound()
    return _html(directory_page(page, highlight=query.get("club", "")))


# === HEADER SEARCH ===

async def _dropdown(request: web.Request) -> WorldSearchDropdown:
    session = client_session(request)
    dropdown = session.widgets.get(DROPDOWN_WIDGET)
    if dropdown is None:
        dropdown = await services(request).world.search_dropdown()
        session.widgets[DROPDOWN_WIDGET] = dropdown
    return dropdown


def _dropdown_payload(dropdown: WorldSearchDropdown) -> dict:
    return {
        "query": dropdown.query,
        "open": dropdown.open,
        "highlighted": dropdown.highlighted,
        "items": [
            {"type": item.type, "data": item.data.model_dump(mode="json")}
            for item in dropdown.items
        ],
    }


@routes.get("/api/world/search")
async def world_search(request: web.Request) -> web.Response:
    _require_directory(request)
    dropdown = await _dropdown(request)
    items = await dropdown.type(request.query.get("q", ""))
    if items is None:
        # A newer query for this dropdown is in flight
        return json_response(request, {"superseded": True})
    return json_response(request, _dropdown_payload(dropdown))


@routes.post("/api/world/search/key")
async def world_search_key(request: web.Request) -> web.Response:
    dropdown = await _dropdown(request)
    body = await request.json()
    url = dropdown.key(body.get("key", ""))
    return json_response(request, {"navigate": url, **_dropdown_payload(dropdown)})


@routes.post("/api/world/search/select")
async def world_search_select(request: web.Request) -> web.Response:
    dropdown = await _dropdown(request)
    body = await request.json()
    url = dropdown.select(_optional_int(body.get("index")) or 0)
    if url is None:
        raise web.HTTPBadRequest(text="No such item")
    return json_response(request, {"navigate": url})


# === CLUB PICKER ===

def _picker(request: web.Request) -> ClubPicker:
    session = client_session(request)
    key = PICKER_WIDGET.format(field=request.query.get("field", "current_club"))
    picker = session.widgets.get(key)
    if picker is None:
        picker = services(request).world.club_picker()
        session.widgets[key] = picker
    return picker


def _picker_payload(picker: ClubPicker) -> dict:
    return {
        "text": picker.text,
        "open": picker.open,
        "highlighted": picker.highlighted,
        "selected": picker.selected.model_dump(mode="json") if picker.selected else None,
        "results": [c.model_dump(mode="json") for c in picker.items],
        "can_add_to_directory": picker.can_add_to_directory,
    }


@routes.get("/api/clubs/search")
async def club_search(request: web.Request) -> web.Response:
    picker = _picker(request)
    results = await picker.type(request.query.get("q", ""))
    if results is None:
        return json_response(request, {"superseded": True})
    return json_response(request, _picker_payload(picker))


@routes.post("/api/clubs/search/key")
async def club_search_key(request: web.Request) -> web.Response:
    picker = _picker(request)
    body = await request.json()
    picker.key(body.get("key", ""))
    return json_response(request, _picker_payload(picker))


@routes.post("/api/clubs/search/unlink")
async def club_search_unlink(request: web.Request) -> web.Response:
    picker = _picker(request)
    body = await request.json()
    picker.unlink(keep_text=bool(body.get("keep_text")))
    return json_response(request, _picker_payload(picker))


@routes.post("/api/clubs")
async def add_club(request: web.Request) -> web.Response:
    require_user(request)
    body = await request.json()
    club, error = await services(request).world.add_club_to_directory(
        body.get("club_name", ""),
        _optional_int(body.get("country_id")),
        _optional_int(body.get("province_id")),
    )
    if error:
        return json_response(request, {"error": error}, status=400)
    picker = _picker(request)
    picker.select(club)
    return json_response(request, {"club": club.model_dump(mode="json"), **_picker_payload(picker)}, status=201)


# === CLAIMS ===

@routes.post("/api/clubs/{club_id}/claim")
async def claim_club(request: web.Request) -> web.Response:
    user_id = require_user(request)
    club_id = parse_uuid(request.match_info["club_id"])
    body = await request.json()
    ok, message = await services(request).world.claim_club(
        user_id, club_id,
        _optional_int(body.get("men_league_id")),
        _optional_int(body.get("women_league_id")),
    )
    if ok:
        client_session(request).profiles.invalidate(user_id, "club claimed")
    return json_response(request, {"success": ok, "message": message}, status=200 if ok else 400)


@routes.post("/api/clubs/create-and-claim")
async def create_and_claim(request: web.Request) -> web.Response:
    user_id = require_user(request)
    body = await request.json()
    country_id = _optional_int(body.get("country_id"))
    if country_id is None:
        return json_response(request, {"success": False, "message": "Country is required."}, status=400)
    ok, message = await services(request).world.create_and_claim_club(
        user_id, body.get("club_name", ""), country_id,
        _optional_int(body.get("province_id")),
        _optional_int(body.get("men_league_id")),
        _optional_int(body.get("women_league_id")),
    )
    if ok:
        client_session(request).profiles.invalidate(user_id, "club claimed")
    return json_response(request, {"success": ok, "message": message}, status=200 if ok else 400)


@routes.get("/api/world/countries/{country_id}/regions")
async def regions(request: web.Request) -> web.Response:
    country_id = _optional_int(request.match_info["country_id"])
    found = await services(request).world.get_regions(country_id)
    return json_response(request, {"regions": [r.model_dump() for r in found]})
