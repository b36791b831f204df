"""Keyed storage for the in-memory subscription service."""

import threading
from typing import Iterator, Optional, Protocol

from saas_starter.schemas.subscription import UserSubscription


class SubscriptionStore(Protocol):
    """Mapping of user id -> subscription."""

    def get(self, user_id: str) -> Optional[UserSubscription]: ...

    def put(self, subscription: UserSubscription) -> None: ...

    def find_by_id(self, subscription_id: str) -> Optional[UserSubscription]: ...

    def values(self) -> Iterator[UserSubscription]: ...


class InMemorySubscriptionStore:
    """Process-local dict keyed by user id. put() replaces (last write wins)."""

    def __init__(self) -> None:
        self._items: dict[str, UserSubscription] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserSubscription]:
        with self._lock:
            return self._items.get(user_id)

    def put(self, subscription: UserSubscription) -> None:
        with self._lock:
            self._items[subscription.user_id] = subscription

    def find_by_id(self, subscription_id: str) -> Optional[UserSubscription]:
        with self._lock:
            for item in self._items.values():
                if item.id == subscription_id:
                    return item
        return None

    def values(self) -> Iterator[UserSubscription]:
        with self._lock:
            snapshot = list(self._items.values())
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
