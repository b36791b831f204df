"""Per-user subscription lookup, creation and update.

Two interchangeable implementations share the `SubscriptionService` contract:

- `DatabaseSubscriptionService` persists to the `user_subscriptions` table.
  Lookup failures are soft (logged, returns None); create/update failures
  raise `SubscriptionStoreError` unless a fallback service is configured,
  in which case the call is retried once against the fallback.
- `InMemorySubscriptionService` keeps records in an injected
  `SubscriptionStore` and is used standalone or as the database fallback.

The variant is chosen once, when the service is built.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from saas_starter.config import Settings, get_settings
from saas_starter.core.exceptions import SubscriptionNotFoundError, SubscriptionStoreError
from saas_starter.db.base import SessionLocal
from saas_starter.db.models.subscription import UserSubscriptionRecord
from saas_starter.schemas.subscription import SubscriptionUpdate, UserSubscription
from saas_starter.services.plans import get_free_plan
from saas_starter.services.subscription_store import InMemorySubscriptionStore, SubscriptionStore

logger = logging.getLogger(__name__)

FREE_PERIOD_YEARS = 100

ACTIVE_LIKE_STATUSES = frozenset({"active", "trialing", "incomplete"})
DEGRADED_STATUSES = frozenset({"past_due"})
TERMINAL_STATUSES = frozenset({"canceled"})

# Public (camelCase) field -> user_subscriptions column
UPDATE_COLUMNS = {
    "planId": "plan_id",
    "tier": "tier",
    "status": "status",
    "currentPeriodStart": "current_period_start",
    "currentPeriodEnd": "current_period_end",
    "cancelAtPeriodEnd": "cancel_at_period_end",
}

UpdatePayload = Union[SubscriptionUpdate, dict]


def is_active_like(status: str) -> bool:
    return status in ACTIVE_LIKE_STATUSES


def is_degraded(status: str) -> bool:
    return status in DEGRADED_STATUSES


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def add_years(value: datetime, years: int) -> datetime:
    """Same calendar date `years` later.

    Feb 29 clamps to Feb 28 of the target year instead of rolling over to
    Mar 1. Free periods only need to be roughly a century long.
    """
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def build_free_subscription(
    user_id: str,
    subscription_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> UserSubscription:
    """Free tier subscription that effectively never expires."""
    now = now or datetime.now(timezone.utc)
    plan = get_free_plan()
    return UserSubscription(
        id=subscription_id or f"sub_{uuid.uuid4().hex[:13]}",
        user_id=user_id,
        plan_id=plan.id,
        tier="free",
        status="active",
        current_period_start=now,
        current_period_end=add_years(now, FREE_PERIOD_YEARS),
        cancel_at_period_end=False,
        created_at=now,
        updated_at=now,
    )


def _coerce_update(updates: UpdatePayload) -> SubscriptionUpdate:
    if isinstance(updates, SubscriptionUpdate):
        return updates
    return SubscriptionUpdate.model_validate(updates)


class SubscriptionService(ABC):
    def __init__(self) -> None:
        self._locks_guard = threading.Lock()
        self._user_locks: dict[str, threading.Lock] = {}
        self._lock_holders: dict[str, int] = {}

    @abstractmethod
    def get_user_subscription(self, user_id: str) -> Optional[UserSubscription]:
        """Return the user's subscription or None."""

    @abstractmethod
    def create_free_subscription(self, user_id: str) -> UserSubscription:
        """Create (or replace) the user's subscription with the free plan."""

    @abstractmethod
    def update_subscription(self, subscription_id: str, updates: UpdatePayload) -> UserSubscription:
        """Merge provided fields into an existing subscription."""

    def has_active_subscription(self, user_id: str) -> bool:
        subscription = self.get_user_subscription(user_id)
        return subscription is not None and subscription.status == "active"

    def get_user_tier(self, user_id: str) -> str:
        subscription = self.get_user_subscription(user_id)
        return subscription.tier if subscription else "free"

    @contextmanager
    def _user_lock(self, user_id: str) -> Iterator[None]:
        """Per-user critical section; the entry is dropped when the last holder leaves."""
        with self._locks_guard:
            lock = self._user_locks.setdefault(user_id, threading.Lock())
            self._lock_holders[user_id] = self._lock_holders.get(user_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                self._lock_holders[user_id] -= 1
                if not self._lock_holders[user_id]:
                    del self._lock_holders[user_id]
                    del self._user_locks[user_id]

    def get_or_create_subscription(self, user_id: str) -> UserSubscription:
        """Lazy creation on first dashboard visit; one record per user."""
        with self._user_lock(user_id):
            existing = self.get_user_subscription(user_id)
            if existing is not None:
                return existing
            try:
                return self.create_free_subscription(user_id)
            except SubscriptionStoreError:
                # Another process may have inserted the row first
                existing = self.get_user_subscription(user_id)
                if existing is None:
                    raise
                return existing


class InMemorySubscriptionService(SubscriptionService):
    def __init__(self, store: Optional[SubscriptionStore] = None):
        super().__init__()
        self.store = store if store is not None else InMemorySubscriptionStore()

    def get_user_subscription(self, user_id: str) -> Optional[UserSubscription]:
        return self.store.get(user_id)

    def create_free_subscription(self, user_id: str) -> UserSubscription:
        subscription = build_free_subscription(user_id)
        self.store.put(subscription)
        logger.info("Created in-memory free subscription %s for user %s", subscription.id, user_id)
        return subscription

    def update_subscription(self, subscription_id: str, updates: UpdatePayload) -> UserSubscription:
        current = self.store.find_by_id(subscription_id)
        if current is None:
            raise SubscriptionNotFoundError(subscription_id)
        changes = _coerce_update(updates).changes()
        changes["updated_at"] = datetime.now(timezone.utc)
        updated = current.model_copy(update=changes)
        self.store.put(updated)
        return updated


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; values are always written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def record_to_subscription(row: UserSubscriptionRecord) -> UserSubscription:
    return UserSubscription(
        id=str(row.id),
        user_id=row.user_id,
        plan_id=row.plan_id,
        tier=row.tier,
        status=row.status,
        current_period_start=_aware(row.current_period_start),
        current_period_end=_aware(row.current_period_end),
        cancel_at_period_end=row.cancel_at_period_end,
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )


def update_to_columns(updates: SubscriptionUpdate) -> dict:
    """Translate public field names of a partial update to column names."""
    public = updates.model_dump(by_alias=True, exclude_unset=True)
    return {
        UPDATE_COLUMNS[name]: value
        for name, value in public.items()
        if name in UPDATE_COLUMNS and value is not None
    }


class DatabaseSubscriptionService(SubscriptionService):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        fallback: Optional[SubscriptionService] = None,
    ):
        super().__init__()
        self._session_factory = session_factory
        self.fallback = fallback

    def get_user_subscription(self, user_id: str) -> Optional[UserSubscription]:
        try:
            with self._session_factory() as session:
                row = session.scalars(
                    select(UserSubscriptionRecord).where(UserSubscriptionRecord.user_id == user_id)
                ).first()
                return record_to_subscription(row) if row else None
        except SQLAlchemyError:
            logger.exception("Error fetching subscription for user %s", user_id)
            if self.fallback is not None:
                return self.fallback.get_user_subscription(user_id)
            return None

    def create_free_subscription(self, user_id: str) -> UserSubscription:
        subscription = build_free_subscription(user_id)
        try:
            with self._session_factory() as session:
                row = UserSubscriptionRecord(
                    user_id=user_id,
                    plan_id=subscription.plan_id,
                    tier=subscription.tier,
                    status=subscription.status,
                    current_period_start=subscription.current_period_start,
                    current_period_end=subscription.current_period_end,
                    cancel_at_period_end=subscription.cancel_at_period_end,
                    created_at=subscription.created_at,
                    updated_at=subscription.updated_at,
                )
                session.add(row)
                session.commit()
                created = record_to_subscription(row)
        except IntegrityError as exc:
            # Unique user_id: another request created it first
            logger.warning("Subscription already exists for user %s", user_id)
            raise SubscriptionStoreError("Subscription already exists") from exc
        except SQLAlchemyError as exc:
            logger.exception("Error creating free subscription for user %s", user_id)
            if self.fallback is not None:
                logger.warning("Falling back to in-memory subscription for user %s", user_id)
                return self.fallback.create_free_subscription(user_id)
            raise SubscriptionStoreError("Failed to create subscription") from exc
        logger.info("Created free subscription %s for user %s", created.id, user_id)
        return created

    def update_subscription(self, subscription_id: str, updates: UpdatePayload) -> UserSubscription:
        update = _coerce_update(updates)
        values = update_to_columns(update)
        values["updated_at"] = datetime.now(timezone.utc)
        try:
            key = uuid.UUID(subscription_id)
        except ValueError:
            key = None
        try:
            with self._session_factory() as session:
                row = session.get(UserSubscriptionRecord, key) if key else None
                if row is None:
                    if self.fallback is not None:
                        return self.fallback.update_subscription(subscription_id, update)
                    raise SubscriptionNotFoundError(subscription_id)
                for column, value in values.items():
                    setattr(row, column, value)
                session.commit()
                return record_to_subscription(row)
        except SQLAlchemyError as exc:
            logger.exception("Error updating subscription %s", subscription_id)
            if self.fallback is not None:
                logger.warning("Falling back to in-memory update for subscription %s", subscription_id)
                return self.fallback.update_subscription(subscription_id, update)
            raise SubscriptionStoreError("Failed to update subscription") from exc


def build_subscription_service(
    settings: Optional[Settings] = None,
    session_factory: Optional[Callable[[], Session]] = None,
    store: Optional[SubscriptionStore] = None,
) -> SubscriptionService:
    """Pick the implementation from settings.subscription_backend."""
    settings = settings or get_settings()
    if settings.subscription_backend == "memory":
        logger.info("Using in-memory subscription service")
        return InMemorySubscriptionService(store)
    if session_factory is None:
        session_factory = SessionLocal
    fallback = None
    if settings.subscription_fallback_to_memory:
        logger.warning("Subscription fallback to memory enabled; writes during outages are not durable")
        fallback = InMemorySubscriptionService(store)
    return DatabaseSubscriptionService(session_factory, fallback=fallback)
