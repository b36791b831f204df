"""Auth provider collaborator: password, magic-link and OAuth sign-in via Supabase GoTrue."""

import logging
from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional
from urllib.parse import urlencode

import httpx

from saas_starter.config import Settings, get_settings
from saas_starter.core.exceptions import AuthGatewayError
from saas_starter.core.security import code_challenge, decode_access_token, generate_code_verifier
from saas_starter.schemas.auth import AuthSession, AuthUser

logger = logging.getLogger(__name__)


class OAuthRedirect(NamedTuple):
    url: str
    code_verifier: str


class AuthGateway(ABC):
    """What the app needs from the auth provider: who is signed in, and how to sign in/out."""

    @abstractmethod
    def get_user(self, access_token: str) -> Optional[AuthUser]:
        """Principal for a session token, or None if the token is not valid."""

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    @abstractmethod
    def sign_in_with_otp(self, email: str, redirect_url: str) -> str:
        """Send a magic link; return the PKCE verifier to keep for the callback."""

    @abstractmethod
    def sign_in_with_oauth(self, provider: str, redirect_url: str) -> OAuthRedirect: ...

    @abstractmethod
    def exchange_code_for_session(self, code: str, code_verifier: Optional[str] = None) -> AuthSession: ...

    @abstractmethod
    def sign_out(self, access_token: str) -> None: ...


def _parse_user(data: dict[str, Any]) -> AuthUser:
    return AuthUser(
        id=str(data.get("id") or data.get("sub") or ""),
        email=data.get("email"),
        lastSignInAt=data.get("last_sign_in_at"),
        role=data.get("role"),
    )


def _parse_session(data: dict[str, Any]) -> AuthSession:
    user = data.get("user") or {}
    if not data.get("access_token") or not user.get("id"):
        raise AuthGatewayError("Auth provider returned no session")
    return AuthSession(
        accessToken=data["access_token"],
        refreshToken=data.get("refresh_token"),
        expiresAt=data.get("expires_at"),
        tokenType=data.get("token_type") or "bearer",
        user=_parse_user(user),
    )


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"HTTP {resp.status_code}"
    )


class SupabaseAuthGateway(AuthGateway):
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or get_settings()
        self._base = f"{self.settings.supabase_url.rstrip('/')}/auth/v1"
        self._client = client or httpx.Client(timeout=self.settings.auth_timeout_seconds)

    def _headers(self, access_token: Optional[str] = None) -> dict[str, str]:
        headers = {"apikey": self.settings.supabase_anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.settings.auth_configured:
            raise AuthGatewayError("Auth provider not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
        try:
            return self._client.request(method, f"{self._base}{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Auth provider request %s %s failed: %s", method, path, exc)
            raise AuthGatewayError("Auth provider unreachable") from exc

    def _checked(self, resp: httpx.Response) -> dict[str, Any]:
        if resp.status_code >= 400:
            raise AuthGatewayError(_error_message(resp), status_code=resp.status_code)
        if not resp.content:
            return {}
        return resp.json()

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        claims = decode_access_token(access_token, self.settings)
        if claims is not None:
            return AuthUser(id=claims["sub"], email=claims.get("email"), role=claims.get("role"))
        if self.settings.supabase_jwt_secret:
            # Local verification is authoritative when configured
            return None
        resp = self._request("GET", "/user", headers=self._headers(access_token))
        if resp.status_code in (401, 403):
            return None
        return _parse_user(self._checked(resp))

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        resp = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        return _parse_session(self._checked(resp))

    def sign_in_with_otp(self, email: str, redirect_url: str) -> str:
        verifier = generate_code_verifier()
        resp = self._request(
            "POST",
            "/otp",
            params={"redirect_to": redirect_url},
            headers=self._headers(),
            json={
                "email": email,
                "create_user": True,
                "code_challenge": code_challenge(verifier),
                "code_challenge_method": "s256",
            },
        )
        self._checked(resp)
        return verifier

    def sign_in_with_oauth(self, provider: str, redirect_url: str) -> OAuthRedirect:
        if not self.settings.auth_configured:
            raise AuthGatewayError("Auth provider not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
        verifier = generate_code_verifier()
        params = {
            "provider": provider,
            "redirect_to": redirect_url,
            "code_challenge": code_challenge(verifier),
            "code_challenge_method": "s256",
        }
        return OAuthRedirect(url=f"{self._base}/authorize?{urlencode(params)}", code_verifier=verifier)

    def exchange_code_for_session(self, code: str, code_verifier: Optional[str] = None) -> AuthSession:
        if not code_verifier:
            raise AuthGatewayError("Missing PKCE code verifier. Please sign in again.")
        resp = self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            headers=self._headers(),
            json={"auth_code": code, "code_verifier": code_verifier},
        )
        return _parse_session(self._checked(resp))

    def sign_out(self, access_token: str) -> None:
        resp = self._request("POST", "/logout", headers=self._headers(access_token))
        # Already-expired sessions are signed out as far as we are concerned
        if resp.status_code not in (401, 403, 404):
            self._checked(resp)

