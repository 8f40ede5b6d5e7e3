"""
Session value and the process-wide client session holder.

A :class:`Session` is derived from one credential + role at login time and
is never persisted server-side.  :class:`SessionStore` is the single place
a client keeps the current session: set on login, cleared on logout or
once the token has expired.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from repopa.auth.roles import Role
from repopa.core.exceptions import InvalidToken
from repopa.core.security import decode_session_token, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    subject: int
    name: str
    email: str
    role: Role
    token: str
    expires_at: datetime
    issued_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def public_claims(self) -> dict[str, Any]:
        return {
            "sub": str(self.subject),
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }

    @classmethod
    def from_token(cls, token: str, now: datetime | None = None) -> Session:
        """Validate *token* standalone and rebuild the session it encodes."""
        payload = decode_session_token(token, now=now)
        try:
            subject = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken("non-numeric subject") from exc
        iat = payload.get("iat")
        return cls(
            subject=subject,
            name=payload.get("name") or "",
            email=payload.get("email") or "",
            role=Role.resolve(payload.get("role")),
            token=token,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc) if iat else None,
        )


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


class SessionStore:
    """Holds the current session for one client.

    Nothing else reads or writes the session; callers get it from here and
    pass it explicitly to the access guard.
    """

    def __init__(self) -> None:
        self._session: Session | None = None

    def begin(self, session: Session) -> None:
        if self._session is not None:
            logger.debug("Replacing session for %s", self._session.email)
        self._session = session

    def clear(self) -> None:
        self._session = None

    def state(self, now: datetime | None = None) -> SessionState:
        if self._session is None:
            return SessionState.ANONYMOUS
        if self._session.is_expired(now):
            return SessionState.EXPIRED
        return SessionState.AUTHENTICATED

    def current(self, now: datetime | None = None) -> Session | None:
        """Return the live session; an expired one is dropped on the way."""
        if self._session is not None and self._session.is_expired(now):
            logger.info("Session for %s expired", self._session.email)
            self._session = None
        return self._session

    def peek(self) -> Session | None:
        """Return whatever is held, expired or not."""
        return self._session
