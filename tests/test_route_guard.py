import pytest

from saas_starter.core.route_guard import is_auth_page, is_protected, resolve_redirect


@pytest.mark.parametrize(
    "path,authenticated,expected",
    [
        ("/dashboard", False, "/auth/login"),
        ("/dashboard/settings", False, "/auth/login"),
        ("/subscription", False, "/auth/login"),
        ("/dashboard", True, None),
        ("/auth/login", True, "/dashboard"),
        ("/auth/magic-link", True, "/dashboard"),
        ("/auth/login", False, None),
        ("/auth/callback", True, None),
        ("/auth/signout", True, None),
        ("/", False, None),
        ("/dashboards", False, None),
        ("/api/v1/plans", False, None),
    ],
)
def test_resolve_redirect(path, authenticated, expected):
    assert resolve_redirect(path, authenticated) == expected


def test_path_classification():
    assert is_protected("/subscription/plans")
    assert not is_protected("/api/v1/subscription")
    assert is_auth_page("/auth/oauth/github")
    assert not is_auth_page("/auth/callback")


def test_protected_page_without_session_redirects_to_login(client):
    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/auth/login"


def test_protected_page_with_bearer_session(client, auth_headers):
    resp = client.get("/dashboard", headers=auth_headers, follow_redirects=False)
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "alice@example.com"


def test_protected_page_with_session_cookie(client):
    client.cookies.set("sb-access-token", "token-alice")
    resp = client.get("/subscription", follow_redirects=False)
    assert resp.status_code == 200
    assert resp.json()["current"]["tier"] == "free"


def test_invalid_token_redirects_to_login(client):
    resp = client.get("/dashboard", headers={"Authorization": "Bearer expired"}, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/auth/login"


def test_auth_page_with_session_redirects_to_dashboard(client, auth_headers):
    resp = client.get("/auth/login", headers=auth_headers, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/dashboard"


def test_auth_page_without_session_is_served(client):
    resp = client.get("/auth/login?error=Nope", follow_redirects=False)
    assert resp.status_code == 200
    assert resp.json()["error"] == "Nope"
    assert "github" in resp.json()["providers"]


def test_session_check_failure_counts_as_signed_out(client, gateway, auth_headers):
    gateway.fail_lookups = True
    resp = client.get("/dashboard", headers=auth_headers, follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/auth/login"


def test_api_routes_answer_401_instead_of_redirect(client):
    resp = client.get("/api/v1/subscription", follow_redirects=False)
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "NOT_AUTHENTICATED"
