"""
Tests for dashboard and subscription endpoints.
"""
from saas_starter.services.subscription_service import DatabaseSubscriptionService


def test_first_dashboard_visit_creates_free_subscription(client, store, auth_headers, alice):
    resp = client.get("/api/v1/dashboard", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["showUpgrade"] is True
    assert body["account"]["userIdPrefix"] == "a1b2c3d4..."
    assert body["account"]["lastSignInAt"] == "Never"
    sub = body["subscription"]
    assert sub["tier"] == "free"
    assert sub["status"] == "active"
    assert sub["degraded"] is False
    assert sub["features"]["maxProjects"] == 3
    assert sub["subscription"]["userId"] == alice.id
    assert len(store) == 1


def test_repeat_visits_keep_the_same_subscription(client, auth_headers):
    first = client.get("/api/v1/dashboard", headers=auth_headers).json()
    second = client.get("/api/v1/dashboard", headers=auth_headers).json()
    assert first["subscription"]["subscription"]["id"] == second["subscription"]["subscription"]["id"]


def test_dashboard_requires_session(client):
    assert client.get("/api/v1/dashboard").status_code == 401


def test_subscription_degrades_to_free_view_when_store_fails(make_client, broken_session_factory, auth_headers):
    client = make_client(DatabaseSubscriptionService(broken_session_factory))

    resp = client.get("/api/v1/subscription", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["degraded"] is True
    assert body["tier"] == "free"
    assert body["subscription"] is None
    assert body["plan"]["id"] == "price_free_monthly"
    assert body["message"]


def test_subscription_view_uses_subscription_tier_features(client, memory_service, auth_headers, alice):
    created = memory_service.create_free_subscription(alice.id)
    memory_service.update_subscription(created.id, {"tier": "pro", "planId": "price_pro_yearly"})

    body = client.get("/api/v1/subscription", headers=auth_headers).json()

    assert body["tier"] == "pro"
    assert body["plan"]["id"] == "price_pro_yearly"
    assert body["features"]["customDomain"] is True


def test_patch_subscription_cancels(client, memory_service, auth_headers, alice):
    created = memory_service.create_free_subscription(alice.id)

    resp = client.patch(
        "/api/v1/subscription",
        json={"status": "canceled", "cancelAtPeriodEnd": True},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "canceled"
    assert body["cancelAtPeriodEnd"] is True
    assert body["id"] == created.id
    assert memory_service.get_user_subscription(alice.id).status == "canceled"


def test_patch_without_subscription_is_404(client, auth_headers):
    resp = client.patch("/api/v1/subscription", json={"status": "canceled"}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "SUBSCRIPTION_NOT_FOUND"


def test_patch_rejects_invalid_status(client, memory_service, auth_headers, alice):
    memory_service.create_free_subscription(alice.id)
    resp = client.patch("/api/v1/subscription", json={"status": "paused"}, headers=auth_headers)
    assert resp.status_code == 422


def test_me_reports_tier(client, memory_service, auth_headers, alice):
    body = client.get("/api/v1/me", headers=auth_headers).json()
    assert body["tier"] == "free"
    assert body["hasActiveSubscription"] is False

    memory_service.create_free_subscription(alice.id)
    body = client.get("/api/v1/me", headers=auth_headers).json()
    assert body["hasActiveSubscription"] is True
    assert body["user"]["email"] == alice.email


def test_subscription_page_lists_catalog(client, auth_headers):
    body = client.get("/subscription", headers=auth_headers).json()

    assert body["current"]["tier"] == "free"
    assert [p["id"] for p in body["availablePlans"]] == ["price_free_monthly"]
    assert body["availablePlans"][0]["features"]["maxStorageGB"] == 5
    assert body["availablePlans"][0]["isAvailable"] is True
    assert body["current"]["plan"] == body["availablePlans"][0]
    assert len(body["plans"]) == 7
    assert body["comingSoon"] is True


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_patch_refuses_tier_and_plan_changes(client, memory_service, auth_headers, alice):
    created = memory_service.create_free_subscription(alice.id)

    for body in (
        {"tier": "enterprise", "planId": "price_enterprise_yearly"},
        {"tier": "pro"},
        {"planId": "price_pro_monthly"},
        {"currentPeriodEnd": "2200-01-01T00:00:00Z"},
        {"status": "active"},
    ):
        resp = client.patch("/api/v1/subscription", json=body, headers=auth_headers)
        assert resp.status_code == 422, body

    assert memory_service.get_user_subscription(alice.id) == created
    dashboard = client.get("/api/v1/dashboard", headers=auth_headers).json()
    assert dashboard["subscription"]["tier"] == "free"
    assert dashboard["subscription"]["features"]["whiteLabeling"] is False
