"""
Auth routes: landing, signup, email verification, sign-in and OAuth.
"""

import logging

from aiohttp import web

from adapters.web.context import client_id, client_session, json_response, services
from adapters.web.pages import landing_page, signup_page, verify_email_page
from core.services.auth_service import DEFAULT_DESTINATION
from infrastructure.database.supabase_client import acting_as

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


def _html(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


@routes.get("/")
async def landing(request: web.Request) -> web.Response:
    if client_session(request).user_id is not None:
        raise web.HTTPFound(DEFAULT_DESTINATION)
    return _html(landing_page(email=request.query.get("email", "")))


# === SIGN UP ===

@routes.get("/signup")
async def signup_form(request: web.Request) -> web.Response:
    return _html(signup_page(role=request.query.get("role")))


@routes.post("/signup")
async def signup(request: web.Request) -> web.Response:
    form = await request.post()
    role = form.get("role") or None
    email = (form.get("email") or "").strip()

    result = await services(request).auth.sign_up(role, email, form.get("password") or "", client_id(request))
    if result.success:
        raise web.HTTPFound(result.redirect)

    # Stay on the form; an existing account gets a link back to sign-in
    page = signup_page(role=role, email=email, error=result.error, sign_in_url=result.redirect)
    return _html(page, status=400)


@routes.get("/verify-email")
async def verify_email(request: web.Request) -> web.Response:
    email = request.query.get("email", "")
    return _html(verify_email_page(email, reason=request.query.get("reason")))


@routes.post("/verify-email/resend")
async def resend_verification(request: web.Request) -> web.Response:
    form = await request.post()
    email = (form.get("email") or "").strip()
    ok, message = await services(request).auth.resend_verification(email)
    return _html(verify_email_page(email, notice=message), status=200 if ok else 400)


# === SIGN IN ===

async def _finish_sign_in(request: web.Request, redirect_to: str = None) -> web.Response:
    """Bind the new session and send the user where they belong."""
    session = client_session(request)
    auth = services(request).auth
    with acting_as(session.access_token):
        await auth.ensure_profile(session.auth)
        destination, error = await auth.destination_after_sign_in(session.user_id, redirect_to)
    if error:
        return _html(landing_page(error=error), status=502)
    raise web.HTTPFound(destination)


@routes.post("/signin")
async def signin(request: web.Request) -> web.Response:
    form = await request.post()
    email = (form.get("email") or "").strip()
    result = await services(request).auth.sign_in(email, form.get("password") or "", client_id(request))

    if result.redirect:
        raise web.HTTPFound(result.redirect)
    if not result.success:
        return _html(landing_page(email=email, error=result.error), status=400)

    client_session(request).auth = result.session
    logger.info(f"[AUTH] Signed in {result.session.user_id}")
    return await _finish_sign_in(request, request.query.get("redirect"))


@routes.post("/auth/oauth/{provider}")
async def oauth_start(request: web.Request) -> web.Response:
    url, verifier, error = await services(request).auth.oauth_start(request.match_info["provider"])
    if error:
        return _html(landing_page(error=error), status=400)
    client_session(request).oauth_verifier = verifier
    raise web.HTTPFound(url)


@routes.get("/auth/callback")
async def auth_callback(request: web.Request) -> web.Response:
    session = client_session(request)
    code = request.query.get("code")
    if not code:
        error = request.query.get("error_description") or "Sign-in link is invalid or has expired."
        return _html(landing_page(error=error), status=400)

    result = await services(request).auth.complete_callback(code, session.oauth_verifier)
    session.oauth_verifier = None
    if not result.success:
        return _html(landing_page(error=result.error), status=400)

    session.auth = result.session
    return await _finish_sign_in(request)


@routes.post("/signout")
async def signout(request: web.Request) -> web.Response:
    session = client_session(request)
    logger.info(f"[AUTH] Signed out {session.user_id}")
    services(request).sessions.drop(session.id)
    response = web.HTTPFound("/")
    response.del_cookie(services(request).session_cookie, path="/")
    raise response


@routes.post("/forgot-password")
async def forgot_password(request: web.Request) -> web.Response:
    data = await request.json()
    ok, message = await services(request).auth.request_password_reset(data.get("email") or "")
    return json_response(request, {"success": ok, "message": message}, status=200 if ok else 400)
