"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from saas_starter.api.v1 import auth, pages
from saas_starter.api.v1.router import api_router
from saas_starter.config import Settings, get_settings
from saas_starter.core.exceptions import register_exception_handlers
from saas_starter.core.route_guard import RouteGuardMiddleware
from saas_starter.services.auth_gateway import AuthGateway, SupabaseAuthGateway
from saas_starter.services.subscription_service import SubscriptionService, build_subscription_service

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = app.state.settings
    logger.info(
        "Starting %s (env=%s, subscriptions=%s)",
        settings.app_name,
        settings.environment,
        settings.subscription_backend,
    )
    if not settings.auth_configured:
        logger.warning("Auth provider not configured; sign-in will fail until SUPABASE_URL is set")
    yield
    logger.info("Shutting down %s", settings.app_name)


def create_app(
    settings: Optional[Settings] = None,
    auth_gateway: Optional[AuthGateway] = None,
    subscription_service: Optional[SubscriptionService] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        description="SaaS starter: auth, dashboard shell and subscription plans",
        version="0.1.0",
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.auth_gateway = auth_gateway or SupabaseAuthGateway(settings)
    app.state.subscription_service = subscription_service or build_subscription_service(settings)

    app.add_middleware(RouteGuardMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    app.include_router(auth.router)  # /auth/* (login, callback, signout)
    app.include_router(pages.router)  # /dashboard, /subscription

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
