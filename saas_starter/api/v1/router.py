"""API v1 router: include all route modules, GET /me, GET /dashboard, GET /auth/status."""

from fastapi import APIRouter

from saas_starter.api.v1 import plans, subscriptions
from saas_starter.dependencies import AppSettings, CurrentUser, CurrentUserOptional, Subscriptions
from saas_starter.schemas.auth import AuthStatusResponse
from saas_starter.schemas.dashboard import DashboardResponse
from saas_starter.services.views import build_dashboard

api_router = APIRouter()

api_router.include_router(plans.router)
api_router.include_router(subscriptions.router)


@api_router.get("/me")
def me(user: CurrentUser, service: Subscriptions):
    """Return current user + subscription tier."""
    return {
        "user": user,
        "tier": service.get_user_tier(user.id),
        "hasActiveSubscription": service.has_active_subscription(user.id),
    }


@api_router.get("/dashboard", response_model=DashboardResponse)
def dashboard(user: CurrentUser, service: Subscriptions):
    return build_dashboard(user, service)


@api_router.get("/auth/status", response_model=AuthStatusResponse)
def auth_status(user: CurrentUserOptional, settings: AppSettings):
    """Session and configuration diagnostics. Never returns secret values."""
    return AuthStatusResponse(
        session={
            "exists": user is not None,
            "user": {"id": user.id, "email": user.email} if user else None,
        },
        environment={
            "SUPABASE_URL": "set" if settings.supabase_url else "missing",
            "SUPABASE_ANON_KEY": "set" if settings.supabase_anon_key else "missing",
            "SUPABASE_JWT_SECRET": "set" if settings.supabase_jwt_secret else "missing",
            "ENVIRONMENT": settings.environment,
            "SUBSCRIPTION_BACKEND": settings.subscription_backend,
        },
    )
