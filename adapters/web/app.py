"""
aiohttp application factory.
"""

from aiohttp import web

from adapters.web.context import SERVICES, Services
from adapters.web.handlers import routes
from adapters.web.middleware import Throttle, error_middleware, session_middleware, throttling_middleware


def create_app(svc: Services, throttle: Throttle = None) -> web.Application:
    # error_middleware is outermost so it also covers session refresh failures
    app = web.Application(middlewares=[
        error_middleware,
        session_middleware,
        throttling_middleware(throttle),
    ])
    app[SERVICES] = svc
    for table in routes:
        app.add_routes(table)
    return app
