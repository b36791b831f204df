"""Current user's subscription: view and cancel."""

import logging

from fastapi import APIRouter

from saas_starter.core.exceptions import (
    SubscriptionNotFoundError,
    SubscriptionStoreError,
    subscription_not_found_exception,
    subscription_unavailable_exception,
)
from saas_starter.dependencies import CurrentUser, Subscriptions
from saas_starter.schemas.subscription import SubscriptionCancelRequest, SubscriptionView, UserSubscription
from saas_starter.services.views import load_subscription_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["subscription"])


@router.get("", response_model=SubscriptionView)
def get_subscription(user: CurrentUser, service: Subscriptions):
    """Subscription view; created on first visit, free default on load failure."""
    return load_subscription_view(service, user.id)


@router.patch("", response_model=UserSubscription)
def update_subscription(body: SubscriptionCancelRequest, user: CurrentUser, service: Subscriptions):
    """Cancel the caller's subscription or toggle cancel-at-period-end. Unknown fields are rejected."""
    current = service.get_user_subscription(user.id)
    if current is None:
        raise subscription_not_found_exception()
    try:
        return service.update_subscription(current.id, body.to_update())
    except SubscriptionNotFoundError as e:
        raise subscription_not_found_exception(e.subscription_id)
    except SubscriptionStoreError:
        logger.exception("Failed to update subscription for user %s", user.id)
        raise subscription_unavailable_exception("Could not update subscription.")
