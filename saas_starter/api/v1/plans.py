"""Plan catalog endpoints (public)."""

from fastapi import APIRouter, status

from saas_starter.core.exceptions import ApiError
from saas_starter.schemas.subscription import SubscriptionPlan
from saas_starter.services.plans import get_plan_by_id, list_available_plans, list_plans

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=list[SubscriptionPlan])
def all_plans():
    """Full catalog, including plans not yet available, for comparison tables."""
    return list_plans()


@router.get("/available", response_model=list[SubscriptionPlan])
def available_plans():
    return list_available_plans()


@router.get("/{plan_id}", response_model=SubscriptionPlan)
def plan_detail(plan_id: str):
    plan = get_plan_by_id(plan_id)
    if plan is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Plan not found", {"planId": plan_id})
    return plan
