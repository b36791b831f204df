"""Session-based redirects between auth pages and protected pages."""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from saas_starter.core.security import bearer_token
from saas_starter.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
HOME_PATH = "/dashboard"
PROTECTED_PREFIXES = ("/dashboard", "/subscription")
AUTH_PREFIX = "/auth"
# Reachable with or without a session
PASSTHROUGH_PATHS = ("/auth/callback", "/auth/signout")


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def is_protected(path: str) -> bool:
    return any(_matches(path, prefix) for prefix in PROTECTED_PREFIXES)


def is_auth_page(path: str) -> bool:
    if any(_matches(path, p) for p in PASSTHROUGH_PATHS):
        return False
    return _matches(path, AUTH_PREFIX)


def resolve_redirect(path: str, authenticated: bool) -> Optional[str]:
    """Where to send the request instead, or None to let it through."""
    if is_protected(path) and not authenticated:
        return LOGIN_PATH
    if is_auth_page(path) and authenticated:
        return HOME_PATH
    return None


def session_token(request: Request) -> Optional[str]:
    settings = request.app.state.settings
    return request.cookies.get(settings.access_cookie_name) or bearer_token(
        request.headers.get("Authorization")
    )


async def resolve_session_user(request: Request) -> Optional[AuthUser]:
    """Current principal, memoised on request.state. Any lookup failure means no session."""
    if hasattr(request.state, "auth_user"):
        return request.state.auth_user
    user = None
    token = session_token(request)
    gateway = getattr(request.app.state, "auth_gateway", None)
    if token and gateway is not None:
        try:
            user = await run_in_threadpool(gateway.get_user, token)
        except Exception as exc:
            logger.warning("Session check failed for %s: %s", request.url.path, exc)
            user = None
    request.state.auth_user = user
    return user


class RouteGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if is_protected(path) or is_auth_page(path):
            user = await resolve_session_user(request)
            target = resolve_redirect(path, user is not None)
            if target is not None:
                return RedirectResponse(url=target, status_code=302)
        return await call_next(request)
