"""
Authentication error taxonomy and global exception handlers.

Handlers prevent stack-trace leakage to clients.  Authentication failures
keep their internal kind for the logs but collapse to one public message
so callers cannot tell an unknown account from a wrong password.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

INCORRECT_CREDENTIALS = "Incorrect email or password"


# ── Auth error taxonomy ─────────────────────────────────────────────
class AuthError(Exception):
    """Base class for login and token failures."""

    kind = "auth_error"
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Could not validate credentials"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.kind)
        self.reason = reason or self.kind


class MissingCredentials(AuthError):
    kind = "missing_credentials"
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Email and password are required"


class UnknownUser(AuthError):
    kind = "unknown_user"
    public_message = INCORRECT_CREDENTIALS


class InvalidPassword(AuthError):
    kind = "invalid_password"
    public_message = INCORRECT_CREDENTIALS


class TokenExpired(AuthError):
    kind = "token_expired"
    public_message = "Session expired, please log in again"


class InvalidToken(AuthError):
    kind = "invalid_token"


# ── Handlers ────────────────────────────────────────────────────────
async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    logger.info("Auth failure on %s: %s (%s)", request.url.path, exc.kind, exc.reason)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.public_message, "success": False},
        headers=headers,
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AuthError, _auth_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
