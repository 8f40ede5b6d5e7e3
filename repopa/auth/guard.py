"""
Access guard — the role predicate applied before any gated operation.

A denial is an ordinary return value.  The HTTP layer turns it into a
401/403 response; the client uses it to refuse the call locally.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from repopa.auth.roles import Action, Role, roles_for
from repopa.auth.session import Session


class Denial(str, Enum):
    ANONYMOUS = "anonymous"
    EXPIRED = "token_expired"
    INSUFFICIENT_ROLE = "insufficient_role"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Denial | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = AccessDecision(allowed=True)


def authorize(
    session: Session | None,
    required_roles: Iterable[Role],
    now: datetime | None = None,
) -> AccessDecision:
    """Allow iff *session* exists, has not expired and holds a required role."""
    if session is None:
        return AccessDecision(False, Denial.ANONYMOUS)
    if session.is_expired(now):
        return AccessDecision(False, Denial.EXPIRED)
    if session.role not in frozenset(required_roles):
        return AccessDecision(False, Denial.INSUFFICIENT_ROLE)
    return ALLOWED


def can(session: Session | None, action: Action, now: datetime | None = None) -> AccessDecision:
    return authorize(session, roles_for(action), now=now)


def permitted_actions(session: Session | None, now: datetime | None = None) -> list[Action]:
    """Actions the holder of *session* may perform, in declaration order."""
    return [action for action in Action if can(session, action, now=now)]
