"""Dashboard shell pages. Session redirects are handled by RouteGuardMiddleware."""

from fastapi import APIRouter

from saas_starter.dependencies import CurrentUser, Subscriptions
from saas_starter.schemas.dashboard import DashboardResponse
from saas_starter.services.plans import list_available_plans, list_plans
from saas_starter.services.views import build_dashboard, load_subscription_view

router = APIRouter(tags=["pages"])


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard_page(user: CurrentUser, service: Subscriptions):
    return build_dashboard(user, service)


@router.get("/subscription")
def subscription_page(user: CurrentUser, service: Subscriptions):
    """Current plan plus the catalog for the comparison table."""
    view = load_subscription_view(service, user.id)
    return {
        "current": view.model_dump(by_alias=True, mode="json"),
        "availablePlans": [p.model_dump(by_alias=True, mode="json") for p in list_available_plans()],
        "plans": [p.model_dump(by_alias=True, mode="json") for p in list_plans()],
        "comingSoon": not any(p.tier != "free" for p in list_available_plans()),
    }
