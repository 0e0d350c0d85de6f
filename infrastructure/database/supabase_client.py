"""
Supabase client initialization.
Single point of database connection.

Requests made on behalf of a signed-in user go through a user-scoped client
so row level security and auth.uid()-based RPCs see the caller. The caller's
access token travels in a context variable set by the web layer.
"""

from supabase import create_client, Client
from postgrest.exceptions import APIError
import asyncio
import concurrent.futures
import contextvars
import logging
import os
import threading
from collections import OrderedDict
from contextlib import contextmanager
from functools import wraps
from typing import Optional

from core.domain.errors import BackendError

logger = logging.getLogger(__name__)

_client: Optional[Client] = None
_client_lock = threading.Lock()

# access token -> client, most recently used last
_user_clients: "OrderedDict[str, Client]" = OrderedDict()
MAX_USER_CLIENTS = 128

_access_token: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "supabase_access_token", default=None
)


def _credentials() -> tuple:
    url = os.environ.get("SUPABASE_URL", "")
    key = os.environ.get("SUPABASE_SERVICE_KEY") or os.environ.get("SUPABASE_KEY", "")
    if not url or not key:
        logger.error(
            "Supabase credentials not configured! "
            "Required env vars: SUPABASE_URL, SUPABASE_SERVICE_KEY (or SUPABASE_KEY). "
            f"SUPABASE_URL: {'set' if url else 'MISSING'}, SUPABASE_KEY: {'set' if key else 'MISSING'}"
        )
        raise RuntimeError("Supabase credentials not configured")
    return url, key


def _options(**kwargs):
    from supabase.lib.client_options import ClientOptions
    schema = os.environ.get("DB_SCHEMA", "public")
    return ClientOptions(schema=schema, **kwargs)


def get_supabase() -> Client:
    """Shared client for anonymous reads and maintenance scripts."""
    global _client
    with _client_lock:
        if _client is None:
            url, key = _credentials()
            _client = create_client(url, key, options=_options())
        return _client


def _anon_key() -> str:
    return os.environ.get("SUPABASE_KEY") or os.environ.get("SUPABASE_SERVICE_KEY", "")


def new_auth_client(**options) -> Client:
    """Fresh client for one auth call. Auth calls mutate client session state."""
    url, _ = _credentials()
    return create_client(
        url, _anon_key(),
        options=_options(auto_refresh_token=False, persist_session=False, **options),
    )


def _user_client(access_token: str) -> Client:
    with _client_lock:
        client = _user_clients.get(access_token)
        if client is not None:
            _user_clients.move_to_end(access_token)
            return client
    url, _ = _credentials()
    client = create_client(
        url, _anon_key(),
        options=_options(auto_refresh_token=False, persist_session=False),
    )
    client.postgrest.auth(access_token)
    with _client_lock:
        _user_clients[access_token] = client
        while len(_user_clients) > MAX_USER_CLIENTS:
            _user_clients.popitem(last=False)
    return client


def db() -> Client:
    """Client for the current caller: user-scoped when a token is bound."""
    token = _access_token.get()
    if token:
        return _user_client(token)
    return get_supabase()


@contextmanager
def acting_as(access_token: Optional[str]):
    """Bind the caller's access token for all repository calls in this block."""
    reset = _access_token.set(access_token)
    try:
        yield
    finally:
        _access_token.reset(reset)


def current_access_token() -> Optional[str]:
    return _access_token.get()


# Bounded pool for blocking SDK calls, separate from the default executor.
_db_executor = concurrent.futures.ThreadPoolExecutor(
    max_workers=10,
    thread_name_prefix="supabase-db",
)


def to_backend_error(e: APIError) -> BackendError:
    return BackendError(
        e.message or str(e),
        code=getattr(e, "code", None),
        details=getattr(e, "details", None),
        hint=getattr(e, "hint", None),
    )


def run_sync(func):
    """
    Decorator to run synchronous Supabase operations in async context.
    Supabase Python SDK is synchronous, so we need this wrapper.
    Uses a dedicated bounded thread pool instead of the default executor.
    The caller's context (bound access token) is carried into the worker thread.
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        try:
            return await loop.run_in_executor(_db_executor, lambda: ctx.run(func, *args, **kwargs))
        except APIError as e:
            raise to_backend_error(e) from e
    return wrapper
