"""Domain errors, API error contract and HTTP exception helpers."""

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SUBSCRIPTION_NOT_FOUND = "SUBSCRIPTION_NOT_FOUND"
SUBSCRIPTION_UNAVAILABLE = "SUBSCRIPTION_UNAVAILABLE"
NOT_AUTHENTICATED = "NOT_AUTHENTICATED"


class SubscriptionError(Exception):
    """Base for subscription service failures."""


class SubscriptionNotFoundError(SubscriptionError):
    def __init__(self, subscription_id: str):
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


class SubscriptionStoreError(SubscriptionError):
    """Persistent store unreachable or constraint violated."""


class AuthGatewayError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def not_authenticated_exception(message: Optional[str] = None) -> HTTPException:
    """401 with Bearer challenge."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": NOT_AUTHENTICATED, "message": message or "Not authenticated"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def subscription_not_found_exception(subscription_id: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "code": SUBSCRIPTION_NOT_FOUND,
            "subscriptionId": subscription_id,
            "message": "Subscription not found.",
        },
    )


def subscription_unavailable_exception(message: Optional[str] = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "code": SUBSCRIPTION_UNAVAILABLE,
            "message": message or "Could not load subscription.",
        },
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
