"""One-off script to provision the free subscription for a user id from the auth provider."""
import sys
import os

# Ensure saas_starter is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from saas_starter.config import get_settings
from saas_starter.services.subscription_service import build_subscription_service


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("Usage: python scripts/create_free_subscription.py <user_id>")
        return 2
    user_id = argv[1]
    settings = get_settings()
    if settings.subscription_backend != "database":
        print("SUBSCRIPTION_BACKEND is not 'database'; nothing would be persisted.")
        return 1
    service = build_subscription_service(settings)
    existing = service.get_user_subscription(user_id)
    if existing:
        print(f"User {user_id} already has subscription {existing.id} ({existing.tier}, {existing.status})")
        return 0
    subscription = service.create_free_subscription(user_id)
    print("Created subscription:")
    print(f"  id: {subscription.id}")
    print(f"  planId: {subscription.plan_id}")
    print(f"  tier: {subscription.tier}")
    print(f"  currentPeriodEnd: {subscription.current_period_end.isoformat()}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
