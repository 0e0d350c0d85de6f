"""
Profile routes: onboarding, dashboard, edit modal, avatar, journey and brand.
"""

import logging

from aiohttp import web
from pydantic import ValidationError

from adapters.web.context import client_session, json_response, parse_uuid, require_user, services
from adapters.web.pages import complete_profile_page, dashboard_page
from core.domain.errors import ValidationFailed
from core.domain.forms import OnboardingForm
from core.domain.models import BrandInput, JourneyEntry
from core.state.session import ProfileEditState
from core.state.tabs import DASHBOARD_TABS
from core.utils.images import AVATAR_UPLOAD_ERROR

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


def _html(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


def _validation_errors(e: ValidationError) -> dict:
    return {".".join(str(p) for p in err["loc"]) or "form": err["msg"] for err in e.errors()}


# === ONBOARDING ===

@routes.get("/complete-profile")
async def complete_profile_form(request: web.Request) -> web.Response:
    session = client_session(request)
    if session.user_id is None:
        raise web.HTTPFound("/")
    profile = await services(request).profiles.get_profile(session)
    if profile is not None and profile.onboarding_completed:
        raise web.HTTPFound("/dashboard/profile")
    role = profile.role.value if profile else (session.auth.role or "player")
    return _html(complete_profile_page(role))


@routes.post("/complete-profile")
async def complete_profile(request: web.Request) -> web.Response:
    if client_session(request).user_id is None:
        raise web.HTTPFound("/")
    data = {k: v for k, v in (await request.post()).items() if v != ""}
    role = data.get("role", "player")
    try:
        form = OnboardingForm.model_validate(data)
    except ValidationError as e:
        return _html(complete_profile_page(role, error=next(iter(_validation_errors(e).values()))), status=400)

    session = client_session(request)
    ok, result = await services(request).profiles.complete_onboarding(session, form)
    if not ok:
        return _html(complete_profile_page(role, error=result), status=400)
    if form.role == "brand":
        # Brand rows reference the profile, so they are created once it exists
        brand_ok, error = await services(request).brands.save(session, form.brand_input())
        if not brand_ok:
            return _html(complete_profile_page(role, error=error), status=400)
    raise web.HTTPFound(result)


# === DASHBOARD ===

@routes.get("/dashboard/profile")
async def dashboard(request: web.Request) -> web.Response:
    session = client_session(request)
    if session.user_id is None:
        raise web.HTTPFound(f"/?redirect={request.path}")
    profile = await services(request).profiles.get_profile(session)
    if profile is None or not profile.onboarding_completed:
        raise web.HTTPFound("/complete-profile")

    tabs = DASHBOARD_TABS[profile.role.value]
    active = tabs.read(request.rel_url)
    strength = await services(request).strength.get(profile)
    return _html(dashboard_page(profile, request.rel_url, tabs, active, strength))


@routes.get("/api/profile")
async def get_profile(request: web.Request) -> web.Response:
    require_user(request)
    profile = await services(request).profiles.get_profile(client_session(request))
    if profile is None:
        raise web.HTTPNotFound()
    return json_response(request, {"profile": profile.model_dump(mode="json")})


@routes.get("/api/profile/strength")
async def get_strength(request: web.Request) -> web.Response:
    require_user(request)
    profile = await services(request).profiles.get_profile(client_session(request))
    if profile is None:
        raise web.HTTPNotFound()
    strength = await services(request).strength.get(profile)
    step = strength.next_step
    return json_response(request, {
        **strength.model_dump(mode="json"),
        "next_step": step.model_dump(mode="json") if step else None,
    })


@routes.get("/api/profiles/{profile_id}")
async def get_public_profile(request: web.Request) -> web.Response:
    profile_id = parse_uuid(request.match_info["profile_id"])
    profile = await services(request).profiles.get_profile(client_session(request), profile_id)
    if profile is None or profile.is_blocked:
        raise web.HTTPNotFound()
    return json_response(request, {"profile": profile.model_dump(mode="json")})


# === EDIT MODAL ===

def _edit_payload(request: web.Request, edit: ProfileEditState) -> dict:
    profiles = services(request).profiles
    return {
        "role": edit.role,
        "form": edit.form.model_dump(mode="json"),
        "errors": edit.errors,
        "regions": [r.model_dump() for r in edit.claim.regions] if edit.claim else [],
        "leagues": [league.model_dump() for league in profiles.leagues_for_form(edit)],
        "has_world_claim": edit.claim is not None,
    }


@routes.post("/api/profile/edit")
async def open_editor(request: web.Request) -> web.Response:
    require_user(request)
    edit = await services(request).profiles.open_editor(client_session(request))
    if edit is None:
        raise web.HTTPNotFound()
    return json_response(request, _edit_payload(request, edit))


@routes.patch("/api/profile/edit")
async def update_editor(request: web.Request) -> web.Response:
    require_user(request)
    values = await request.json()
    try:
        edit = await services(request).profiles.update_form(client_session(request), values)
    except ValidationError as e:
        raise ValidationFailed(_validation_errors(e))
    if edit is None:
        return json_response(request, {"error": "No profile is being edited."}, status=409)
    return json_response(request, _edit_payload(request, edit))


@routes.post("/api/profile/edit/cancel")
async def cancel_editor(request: web.Request) -> web.Response:
    require_user(request)
    await services(request).profiles.cancel_edit(client_session(request))
    return json_response(request, {"closed": True})


@routes.post("/api/profile/edit/submit")
async def submit_editor(request: web.Request) -> web.Response:
    require_user(request)
    session = client_session(request)
    errors = await services(request).profiles.submit(session)
    if errors:
        return json_response(request, {"errors": errors}, status=400)
    # Already showing the optimistic copy; persistence continues in the background
    profile = session.profiles.get(session.user_id)
    return json_response(request, {"closed": True, "profile": profile.model_dump(mode="json") if profile else None})


@routes.post("/api/profile/avatar")
async def upload_avatar(request: web.Request) -> web.Response:
    require_user(request)
    reader = await request.multipart()
    part = await reader.next()
    if part is None:
        return json_response(request, {"error": AVATAR_UPLOAD_ERROR}, status=400)
    data = await part.read(decode=True)
    ok, result = await services(request).profiles.upload_avatar(client_session(request), bytes(data))
    if not ok:
        return json_response(request, {"error": result}, status=400)
    return json_response(request, {"avatar_url": result})


# === JOURNEY ===

@routes.get("/api/journey/{user_id}")
async def get_journey(request: web.Request) -> web.Response:
    user_id = parse_uuid(request.match_info["user_id"])
    entries = await services(request).journey.get_timeline(user_id)
    return json_response(request, {"entries": [e.model_dump(mode="json") for e in entries]})


@routes.put("/api/journey")
async def save_journey(request: web.Request) -> web.Response:
    require_user(request)
    body = await request.json()
    try:
        entries = [JourneyEntry.model_validate(item) for item in body.get("entries", [])]
    except ValidationError as e:
        raise ValidationFailed(_validation_errors(e))
    ok, errors = await services(request).journey.save(client_session(request), entries)
    return json_response(request, {"success": ok, "errors": errors}, status=200 if ok else 400)


# === BRAND ===

@routes.get("/api/brand")
async def get_brand(request: web.Request) -> web.Response:
    require_user(request)
    brand = await services(request).brands.get_my_brand()
    return json_response(request, {"brand": brand.model_dump(mode="json") if brand else None})


@routes.put("/api/brand")
async def save_brand(request: web.Request) -> web.Response:
    require_user(request)
    try:
        data = BrandInput.model_validate(await request.json())
    except ValidationError as e:
        raise ValidationFailed(_validation_errors(e))
    ok, result = await services(request).brands.save(client_session(request), data)
    if not ok:
        return json_response(request, {"error": result}, status=400)
    return json_response(request, {"slug": result})


# === TOASTS ===

@routes.get("/api/toasts")
async def toasts(request: web.Request) -> web.Response:
    return json_response(request, {})
