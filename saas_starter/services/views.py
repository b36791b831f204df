"""Dashboard and subscription page payloads."""

import logging
from typing import Optional

from saas_starter.core.exceptions import SubscriptionError
from saas_starter.schemas.auth import AuthUser
from saas_starter.schemas.dashboard import AccountInfo, DashboardResponse
from saas_starter.schemas.subscription import SubscriptionPlan, SubscriptionView, UserSubscription
from saas_starter.services.plans import get_free_plan, get_plan_by_id, get_plans_for_tier, get_tier_features
from saas_starter.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Could not load subscription. Showing the free plan."


def default_free_view(message: Optional[str] = None) -> SubscriptionView:
    plan = get_free_plan()
    return SubscriptionView(
        subscription=None,
        plan=plan,
        tier="free",
        status="active",
        features=plan.features,
        degraded=message is not None,
        message=message,
    )


def _plan_for(subscription: UserSubscription) -> SubscriptionPlan:
    plan = get_plan_by_id(subscription.plan_id)
    if plan is not None:
        return plan
    tier_plans = get_plans_for_tier(subscription.tier)
    return tier_plans[0] if tier_plans else get_free_plan()


def subscription_view(subscription: UserSubscription) -> SubscriptionView:
    return SubscriptionView(
        subscription=subscription,
        plan=_plan_for(subscription),
        tier=subscription.tier,
        status=subscription.status,
        features=get_tier_features(subscription.tier),
    )


def load_subscription_view(service: SubscriptionService, user_id: str) -> SubscriptionView:
    """Subscription for the page, creating the free one on first visit.

    Never fails the page: any service error yields the default free view.
    """
    try:
        subscription = service.get_or_create_subscription(user_id)
    except SubscriptionError:
        logger.warning("Could not load subscription for user %s", user_id, exc_info=True)
        return default_free_view(LOAD_ERROR_MESSAGE)
    return subscription_view(subscription)


def build_dashboard(user: AuthUser, service: SubscriptionService) -> DashboardResponse:
    view = load_subscription_view(service, user.id)
    return DashboardResponse(
        user=user,
        account=AccountInfo(
            email=user.email,
            userIdPrefix=f"{user.id[:8]}..." if user.id else "Unknown",
            lastSignInAt=user.lastSignInAt.date().isoformat() if user.lastSignInAt else "Never",
        ),
        subscription=view,
        showUpgrade=view.tier == "free",
    )
