"""Plan catalog and user subscription schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SubscriptionTier = Literal["free", "basic", "pro", "enterprise"]
SubscriptionStatus = Literal["active", "canceled", "past_due", "trialing", "incomplete"]
BillingInterval = Literal["monthly", "yearly"]


class SubscriptionFeatures(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    max_projects: int
    max_collaborators: int
    max_storage_gb: int = Field(alias="maxStorageGB")
    advanced_analytics: bool
    priority_support: bool
    custom_domain: bool
    api_access: bool
    white_labeling: bool


class SubscriptionPlan(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    description: str
    tier: SubscriptionTier
    price: int  # cents
    interval: BillingInterval
    features: SubscriptionFeatures
    is_popular: bool = False
    is_available: bool


class UserSubscription(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    plan_id: str
    tier: SubscriptionTier
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False
    created_at: datetime
    updated_at: datetime


class SubscriptionUpdate(BaseModel):
    """Partial update; only fields explicitly set are merged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    plan_id: Optional[str] = None
    tier: Optional[SubscriptionTier] = None
    status: Optional[SubscriptionStatus] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None

    def changes(self) -> dict:
        """Explicitly provided, non-null fields keyed by attribute name."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class SubscriptionCancelRequest(BaseModel):
    """What a signed-in user may change on their own subscription. Plan and tier changes are server-side only."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    status: Optional[Literal["canceled"]] = None
    cancel_at_period_end: Optional[bool] = None

    def to_update(self) -> SubscriptionUpdate:
        return SubscriptionUpdate.model_validate(self.model_dump(exclude_unset=True))


class SubscriptionView(BaseModel):
    """Subscription page payload; `degraded` marks the default free view."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subscription: Optional[UserSubscription] = None
    plan: SubscriptionPlan
    tier: SubscriptionTier
    status: SubscriptionStatus
    features: SubscriptionFeatures
    degraded: bool = False
    message: Optional[str] = None
