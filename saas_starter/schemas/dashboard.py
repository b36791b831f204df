"""Dashboard payload schemas."""

from typing import Optional

from pydantic import BaseModel

from saas_starter.schemas.auth import AuthUser
from saas_starter.schemas.subscription import SubscriptionView


class AccountInfo(BaseModel):
    email: Optional[str] = None
    userIdPrefix: str
    lastSignInAt: Optional[str] = None


class DashboardResponse(BaseModel):
    user: AuthUser
    account: AccountInfo
    subscription: SubscriptionView
    showUpgrade: bool
