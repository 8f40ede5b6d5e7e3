"""
Auth endpoints — login, logout and the current session.
"""

# No postponed annotations here: slowapi wraps the login handler and
# FastAPI would resolve string annotations against slowapi's globals.
from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import COOKIE_NAME, get_db, require_view
from repopa.auth.authenticator import Authenticator
from repopa.auth.guard import permitted_actions
from repopa.auth.session import Session
from repopa.core.config import settings
from repopa.core.security import TOKEN_TTL
from repopa.repositories.credential_store import SqlCredentialStore
from repopa.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, SessionRead

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Verify email/password and return the session plus its signed token.

    Unknown accounts and wrong passwords produce the same 401 body.
    """
    session = await Authenticator(SqlCredentialStore(db)).authenticate(body.email, body.password)

    response.set_cookie(
        key=COOKIE_NAME,
        value=f"Bearer {session.token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="lax",
        max_age=int(TOKEN_TTL.total_seconds()),
    )

    return LoginResponse(
        subject=session.subject,
        name=session.name,
        email=session.email,
        role=session.role,
        token=session.token,
        expires_at=session.expires_at,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the auth cookie.  The token itself stays valid until it expires."""
    response.delete_cookie(COOKIE_NAME)
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=SessionRead)
async def read_current_session(session: Session = Depends(require_view)) -> SessionRead:
    """Return the session encoded in the caller's token."""
    return SessionRead(
        subject=session.subject,
        name=session.name,
        email=session.email,
        role=session.role,
        role_label=session.role.label,
        expires_at=session.expires_at,
        permissions=permitted_actions(session),
    )
