"""SQLAlchemy models - import all for Alembic."""

from saas_starter.db.base import Base
from saas_starter.db.models.subscription import UserSubscriptionRecord

__all__ = [
    "Base",
    "UserSubscriptionRecord",
]
