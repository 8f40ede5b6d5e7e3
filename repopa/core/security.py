"""
Password hashing (bcrypt) and session token creation / verification (JWT).

Tokens are self-contained: identity, role and expiry travel inside the
signed payload, so validation never touches the database.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from repopa.core.config import settings
from repopa.core.exceptions import InvalidToken, TokenExpired

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TTL = timedelta(hours=1)
TOKEN_TYPE = "access"

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    """Return ``False`` for a mismatch and for hashes passlib cannot identify."""
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# Checked when no account matches the login email.
DUMMY_PASSWORD_HASH = get_password_hash(uuid.uuid4().hex)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_session_token(
    claims: dict[str, Any],
    issued_at: datetime | None = None,
) -> tuple[str, datetime]:
    """Sign *claims* into a token valid for :data:`TOKEN_TTL`.

    Returns the token and its expiry.  A random ``jti`` makes every token
    unique even when two are issued within the same second.
    """
    iat = issued_at or utcnow()
    expire = iat + TOKEN_TTL
    payload = {
        **claims,
        "iat": int(iat.timestamp()),
        "exp": int(expire.timestamp()),
        "jti": uuid.uuid4().hex,
        "type": TOKEN_TYPE,
    }
    token = jwt.encode(payload, _SECRET, algorithm=_ALGORITHM)
    return token, datetime.fromtimestamp(payload["exp"], tz=timezone.utc)


def decode_session_token(token: str, now: datetime | None = None) -> dict[str, Any]:
    """Return the payload of a valid access token.

    Raises :class:`InvalidToken` for bad signatures or malformed payloads
    and :class:`TokenExpired` once ``now >= exp``.
    """
    if not token:
        raise InvalidToken("empty token")
    try:
        payload = jwt.decode(
            token,
            _SECRET,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False, "verify_iat": False},
        )
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    if payload.get("type") != TOKEN_TYPE:
        raise InvalidToken("wrong token type")
    exp = payload.get("exp")
    if not isinstance(exp, (int, float)) or payload.get("sub") is None:
        raise InvalidToken("malformed payload")

    current = now or utcnow()
    if current.timestamp() >= exp:
        raise TokenExpired(f"expired at {int(exp)}")
    return payload
