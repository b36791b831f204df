"""Auth endpoints: password login, magic link, OAuth redirect, callback, sign out."""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from saas_starter.config import Settings
from saas_starter.core.exceptions import AuthGatewayError
from saas_starter.dependencies import AccessToken, AppSettings, Gateway
from saas_starter.schemas.auth import AuthSession, LoginRequest, MagicLinkRequest, MessageResponse, SessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

VERIFIER_COOKIE = "sb-code-verifier"
VERIFIER_MAX_AGE = 600  # 10 minutes


def _set_session_cookies(response: Response, session: AuthSession, settings: Settings) -> None:
    response.set_cookie(
        settings.access_cookie_name,
        session.accessToken,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    if session.refreshToken:
        response.set_cookie(
            settings.refresh_cookie_name,
            session.refreshToken,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def _clear_session_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.access_cookie_name)
    response.delete_cookie(settings.refresh_cookie_name)


def _set_verifier_cookie(response: Response, verifier: str, settings: Settings) -> None:
    response.set_cookie(
        VERIFIER_COOKIE,
        verifier,
        max_age=VERIFIER_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _gateway_http_error(exc: AuthGatewayError) -> HTTPException:
    if exc.status_code is None or exc.status_code >= 500:
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message)
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)


def _login_redirect(settings: Settings, error: Optional[str] = None) -> RedirectResponse:
    url = f"{settings.site_url.rstrip('/')}/auth/login"
    if error:
        url = f"{url}?error={quote(error)}"
    return RedirectResponse(url=url, status_code=302)


@router.get("/login")
def login_page(settings: AppSettings, error: Optional[str] = None):
    """Sign-in options for the login screen."""
    return {
        "providers": settings.oauth_providers,
        "magicLink": True,
        "password": True,
        "error": error,
    }


@router.post("/login", response_model=SessionResponse)
def login(body: LoginRequest, response: Response, gateway: Gateway, settings: AppSettings):
    try:
        session = gateway.sign_in_with_password(body.email, body.password)
    except AuthGatewayError as e:
        logger.info("Password sign-in failed for %s: %s", body.email, e.message)
        raise _gateway_http_error(e)
    _set_session_cookies(response, session, settings)
    return SessionResponse(user=session.user, expiresAt=session.expiresAt)


@router.post("/magic-link", response_model=MessageResponse)
def magic_link(body: MagicLinkRequest, response: Response, gateway: Gateway, settings: AppSettings):
    """Email a sign-in link that lands on /auth/callback."""
    try:
        verifier = gateway.sign_in_with_otp(body.email, body.redirectTo or settings.callback_url)
    except AuthGatewayError as e:
        raise _gateway_http_error(e)
    _set_verifier_cookie(response, verifier, settings)
    return MessageResponse(message="Check your email for the sign-in link.")


@router.get("/oauth/{provider}")
def oauth_start(provider: str, gateway: Gateway, settings: AppSettings):
    provider = (provider or "").lower()
    if provider not in settings.oauth_providers:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown provider: {provider}")
    try:
        redirect = gateway.sign_in_with_oauth(provider, settings.callback_url)
    except AuthGatewayError as e:
        raise _gateway_http_error(e)
    response = RedirectResponse(url=redirect.url, status_code=302)
    _set_verifier_cookie(response, redirect.code_verifier, settings)
    return response


@router.get("/callback")
def auth_callback(
    request: Request,
    gateway: Gateway,
    settings: AppSettings,
    code: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
):
    """OAuth and magic-link landing: exchange the code for a session."""
    if error:
        return _login_redirect(settings, error_description or "Authentication failed")
    if not code:
        return _login_redirect(settings)
    try:
        session = gateway.exchange_code_for_session(code, request.cookies.get(VERIFIER_COOKIE))
    except AuthGatewayError as e:
        logger.warning("Error processing authentication callback: %s", e.message)
        return _login_redirect(settings, "Authentication failed")
    response = RedirectResponse(url=f"{settings.site_url.rstrip('/')}/dashboard", status_code=302)
    _set_session_cookies(response, session, settings)
    response.delete_cookie(VERIFIER_COOKIE)
    return response


@router.post("/signout")
def sign_out(gateway: Gateway, access_token: AccessToken, settings: AppSettings):
    if access_token:
        try:
            gateway.sign_out(access_token)
        except AuthGatewayError as e:
            logger.warning("Sign-out at auth provider failed: %s", e.message)
    response = _login_redirect(settings)
    _clear_session_cookies(response, settings)
    return response
