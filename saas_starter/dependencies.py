"""FastAPI dependency injection: current user, auth gateway, subscription service."""

from typing import Annotated, Optional

from fastapi import Depends, Request

from saas_starter.config import Settings
from saas_starter.core.exceptions import not_authenticated_exception
from saas_starter.core.route_guard import resolve_session_user, session_token
from saas_starter.schemas.auth import AuthUser
from saas_starter.services.auth_gateway import AuthGateway
from saas_starter.services.subscription_service import SubscriptionService


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_auth_gateway(request: Request) -> AuthGateway:
    """Gateway built at startup (see main.create_app)."""
    return request.app.state.auth_gateway


def get_subscription_service(request: Request) -> SubscriptionService:
    return request.app.state.subscription_service


async def get_current_user_optional(request: Request) -> Optional[AuthUser]:
    """Return current user from the session cookie or bearer token; else None."""
    return await resolve_session_user(request)


def get_current_user(
    user: Annotated[Optional[AuthUser], Depends(get_current_user_optional)],
) -> AuthUser:
    """Require authenticated user; raise 401 if missing."""
    if user is None:
        raise not_authenticated_exception()
    return user


def get_access_token(request: Request) -> Optional[str]:
    return session_token(request)


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Gateway = Annotated[AuthGateway, Depends(get_auth_gateway)]
Subscriptions = Annotated[SubscriptionService, Depends(get_subscription_service)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
CurrentUserOptional = Annotated[Optional[AuthUser], Depends(get_current_user_optional)]
AccessToken = Annotated[Optional[str], Depends(get_access_token)]
