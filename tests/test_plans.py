"""
Tests for the static plan catalog.
"""
import pytest
from pydantic import ValidationError

from saas_starter.services.plans import (
    SUBSCRIPTION_PLANS,
    TIER_FEATURES,
    get_free_plan,
    get_plan_by_id,
    get_plans_for_tier,
    get_tier_features,
    list_available_plans,
    list_plans,
)


@pytest.mark.parametrize("plan_id", [plan.id for plan in SUBSCRIPTION_PLANS])
def test_plan_features_are_fixed_by_tier(plan_id):
    """Every catalog id resolves to a plan carrying its tier's feature set."""
    plan = get_plan_by_id(plan_id)
    assert plan is not None
    assert plan.features == TIER_FEATURES[plan.tier]


def test_available_plans_is_only_free_monthly():
    available = list_available_plans()
    assert [p.id for p in available] == ["price_free_monthly"]
    assert all(p.is_available for p in available)


def test_get_plan_by_id_unknown_returns_none():
    assert get_plan_by_id("price_unknown") is None


def test_free_plan():
    plan = get_free_plan()
    assert plan.id == "price_free_monthly"
    assert plan.tier == "free"
    assert plan.interval == "monthly"
    assert plan.price == 0


def test_reference_limits():
    assert TIER_FEATURES["free"].max_projects == 3
    assert TIER_FEATURES["free"].max_storage_gb == 5
    assert TIER_FEATURES["basic"].api_access is True
    assert TIER_FEATURES["pro"].white_labeling is False
    assert TIER_FEATURES["enterprise"].white_labeling is True
    assert TIER_FEATURES["enterprise"].max_projects == 1000


def test_yearly_price_is_ten_months():
    for tier in ("basic", "pro", "enterprise"):
        by_interval = {p.interval: p for p in get_plans_for_tier(tier)}
        assert by_interval["yearly"].price == by_interval["monthly"].price * 10


def test_only_pro_monthly_is_popular():
    assert [p.id for p in list_plans() if p.is_popular] == ["price_pro_monthly"]


def test_plan_ids_are_unique():
    ids = [p.id for p in list_plans()]
    assert len(ids) == len(set(ids))


def test_unknown_tier_features_default_to_free():
    assert get_tier_features("platinum") == TIER_FEATURES["free"]


def test_plans_are_immutable():
    plan = get_free_plan()
    with pytest.raises(ValidationError):
        plan.price = 100


def test_plans_api_uses_camel_case(client):
    resp = client.get("/api/v1/plans")
    assert resp.status_code == 200
    plans = resp.json()
    assert len(plans) == 7
    free = plans[0]
    assert free["id"] == "price_free_monthly"
    assert free["isAvailable"] is True
    assert free["features"]["maxStorageGB"] == 5
    assert free["features"]["maxProjects"] == 3


def test_available_plans_api(client):
    resp = client.get("/api/v1/plans/available")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["price_free_monthly"]


def test_plan_detail_api(client):
    resp = client.get("/api/v1/plans/price_pro_yearly")
    assert resp.status_code == 200
    body = resp.json()
    assert body["tier"] == "pro"
    assert body["price"] == 49000
    assert body["features"]["advancedAnalytics"] is True

    missing = client.get("/api/v1/plans/nope")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Plan not found", "details": {"planId": "nope"}}
