from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from saas_starter.config import Settings
from saas_starter.core.exceptions import AuthGatewayError
from saas_starter.db.base import Base
from saas_starter.main import create_app
from saas_starter.schemas.auth import AuthSession, AuthUser
from saas_starter.services.auth_gateway import AuthGateway, OAuthRedirect
from saas_starter.services.subscription_service import InMemorySubscriptionService
from saas_starter.services.subscription_store import InMemorySubscriptionStore

ALICE = AuthUser(id="a1b2c3d4-0000-4000-8000-000000000001", email="alice@example.com")
ALICE_TOKEN = "token-alice"


class FakeAuthGateway(AuthGateway):
    """In-process stand-in for the auth provider."""

    def __init__(self):
        self.tokens = {ALICE_TOKEN: ALICE}
        self.passwords = {"alice@example.com": "correct-horse"}
        self.codes = {"good-code": ALICE_TOKEN}
        self.otp_requests: list[tuple[str, str]] = []
        self.signed_out: list[str] = []
        self.fail_lookups = False

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        if self.fail_lookups:
            raise AuthGatewayError("Auth provider unreachable")
        return self.tokens.get(access_token)

    def _session(self, token: str) -> AuthSession:
        return AuthSession(
            accessToken=token,
            refreshToken=f"refresh-{token}",
            expiresAt=2000000000,
            user=self.tokens[token],
        )

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        if self.passwords.get(email) != password:
            raise AuthGatewayError("Invalid login credentials", status_code=400)
        return self._session(ALICE_TOKEN)

    def sign_in_with_otp(self, email: str, redirect_url: str) -> str:
        self.otp_requests.append((email, redirect_url))
        return "otp-verifier"

    def sign_in_with_oauth(self, provider: str, redirect_url: str) -> OAuthRedirect:
        return OAuthRedirect(
            url=f"https://auth.example.com/authorize?provider={provider}",
            code_verifier="oauth-verifier",
        )

    def exchange_code_for_session(self, code: str, code_verifier: Optional[str] = None) -> AuthSession:
        token = self.codes.get(code)
        if token is None:
            raise AuthGatewayError("Invalid auth code", status_code=400)
        return self._session(token)

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)


@pytest.fixture
def gateway():
    return FakeAuthGateway()


@pytest.fixture
def store():
    return InMemorySubscriptionStore()


@pytest.fixture
def memory_service(store):
    return InMemorySubscriptionService(store)


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database with tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def broken_session_factory():
    """Sessions against a database without the user_subscriptions table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def make_client(gateway, memory_service):
    def _make(service=None) -> TestClient:
        app = create_app(
            settings=Settings(subscription_backend="memory"),
            auth_gateway=gateway,
            subscription_service=service or memory_service,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def alice():
    return ALICE
