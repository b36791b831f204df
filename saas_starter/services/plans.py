"""Static subscription plan catalog and lookups."""

from typing import Optional

from saas_starter.schemas.subscription import (
    SubscriptionFeatures,
    SubscriptionPlan,
    SubscriptionTier,
)

TIER_FEATURES: dict[str, SubscriptionFeatures] = {
    "free": SubscriptionFeatures(
        max_projects=3,
        max_collaborators=1,
        max_storage_gb=5,
        advanced_analytics=False,
        priority_support=False,
        custom_domain=False,
        api_access=False,
        white_labeling=False,
    ),
    "basic": SubscriptionFeatures(
        max_projects=10,
        max_collaborators=5,
        max_storage_gb=20,
        advanced_analytics=False,
        priority_support=False,
        custom_domain=False,
        api_access=True,
        white_labeling=False,
    ),
    "pro": SubscriptionFeatures(
        max_projects=50,
        max_collaborators=20,
        max_storage_gb=100,
        advanced_analytics=True,
        priority_support=True,
        custom_domain=True,
        api_access=True,
        white_labeling=False,
    ),
    "enterprise": SubscriptionFeatures(
        max_projects=1000,
        max_collaborators=100,
        max_storage_gb=500,
        advanced_analytics=True,
        priority_support=True,
        custom_domain=True,
        api_access=True,
        white_labeling=True,
    ),
}

_DESCRIPTIONS = {
    "free": ("Freemium", "Basic features for personal use"),
    "basic": ("Basic", "Essential features for small teams"),
    "pro": ("Professional", "Advanced features for growing businesses"),
    "enterprise": ("Enterprise", "Complete solution for large organizations"),
}


def _plan(
    plan_id: str,
    tier: SubscriptionTier,
    price: int,
    interval: str,
    is_available: bool = False,
    is_popular: bool = False,
) -> SubscriptionPlan:
    name, description = _DESCRIPTIONS[tier]
    return SubscriptionPlan(
        id=plan_id,
        name=name,
        description=description,
        tier=tier,
        price=price,
        interval=interval,
        features=TIER_FEATURES[tier],
        is_popular=is_popular,
        is_available=is_available,
    )


# Paid plans are soft-launched: listed for comparison, not yet selectable.
# Yearly prices are ten months of the monthly price.
SUBSCRIPTION_PLANS: tuple[SubscriptionPlan, ...] = (
    _plan("price_free_monthly", "free", 0, "monthly", is_available=True),
    _plan("price_basic_monthly", "basic", 1900, "monthly"),
    _plan("price_pro_monthly", "pro", 4900, "monthly", is_popular=True),
    _plan("price_enterprise_monthly", "enterprise", 9900, "monthly"),
    _plan("price_basic_yearly", "basic", 19000, "yearly"),
    _plan("price_pro_yearly", "pro", 49000, "yearly"),
    _plan("price_enterprise_yearly", "enterprise", 99000, "yearly"),
)

FREE_PLAN_ID = "price_free_monthly"


def list_plans() -> list[SubscriptionPlan]:
    return list(SUBSCRIPTION_PLANS)


def list_available_plans() -> list[SubscriptionPlan]:
    """Plans that can currently be selected."""
    return [plan for plan in SUBSCRIPTION_PLANS if plan.is_available]


def get_plan_by_id(plan_id: str) -> Optional[SubscriptionPlan]:
    for plan in SUBSCRIPTION_PLANS:
        if plan.id == plan_id:
            return plan
    return None


def get_free_plan() -> SubscriptionPlan:
    for plan in SUBSCRIPTION_PLANS:
        if plan.tier == "free" and plan.interval == "monthly":
            return plan
    raise LookupError("Catalog has no free monthly plan")


def get_plans_for_tier(tier: str) -> list[SubscriptionPlan]:
    return [plan for plan in SUBSCRIPTION_PLANS if plan.tier == tier]


def get_tier_features(tier: str) -> SubscriptionFeatures:
    """Feature limits for a tier; unknown tiers get the free set."""
    return TIER_FEATURES.get(tier, TIER_FEATURES["free"])
