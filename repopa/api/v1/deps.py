"""
FastAPI dependencies — database session and role guards.

The session is rebuilt from the bearer token alone (signature + embedded
expiry); the database is not consulted.  Every record route declares
the action it performs and is checked against the role matrix here.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.auth.guard import Denial, authorize
from repopa.auth.roles import Action, roles_for
from repopa.auth.session import Session
from repopa.core.exceptions import InvalidToken, TokenExpired
from repopa.core.security import utcnow
from repopa.db.session import async_session_factory

logger = logging.getLogger(__name__)

# auto_error=False so we can fall back to the cookie when the header is missing
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

COOKIE_NAME = "access_token"


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def _extract_token(header_token: str | None, cookie_token: str | None) -> str | None:
    # Priority: Header > Cookie
    if header_token:
        return header_token
    if cookie_token:
        if cookie_token.startswith("Bearer "):
            return cookie_token.split(" ", 1)[1]
        return cookie_token
    return None


async def get_optional_session(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
) -> Session | None:
    """Decode the token if one was sent; ``None`` means anonymous.

    A token that is present but expired or forged raises, so a stale
    client is told to log in again rather than treated as anonymous.
    """
    raw = _extract_token(token, access_token)
    if raw is None:
        return None
    return Session.from_token(raw)


def require_action(action: Action):
    """Dependency factory: allow the request only if the session may do *action*."""
    allowed_roles = roles_for(action)

    async def _guard(session: Session | None = Depends(get_optional_session)) -> Session:
        decision = authorize(session, allowed_roles, now=utcnow())
        if decision:
            return session  # type: ignore[return-value]
        if decision.reason is Denial.ANONYMOUS:
            raise InvalidToken("no credentials supplied")
        if decision.reason is Denial.EXPIRED:
            raise TokenExpired()
        logger.info(
            "Denied %s to user %s (%s)",
            action.value,
            session.subject if session else "-",
            session.role.value if session else "-",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    return _guard


# Shorthands used by the routers
require_view = require_action(Action.VIEW)
require_create = require_action(Action.CREATE)
require_update = require_action(Action.UPDATE)
require_delete = require_action(Action.DELETE)
require_user_admin = require_action(Action.MANAGE_USERS)
