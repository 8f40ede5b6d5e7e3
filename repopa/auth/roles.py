"""
Closed role enumeration and the fixed role/action permission matrix.

The set of roles is known at deploy time and is never user-extensible.
Role values match the names stored in the ``roles`` table.
"""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMINISTRATOR = "ADMIN"
    DATA_ENTRY = "CAPTURISTA"
    READ_ONLY = "CONSULTA"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_name(cls, name: str | None) -> Role | None:
        """Map a stored role name to a member, ``None`` if it is not one of ours."""
        if not name:
            return None
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None

    @classmethod
    def resolve(cls, name: str | None) -> Role:
        """Like :meth:`from_name` but falls back to the least-privileged role."""
        role = cls.from_name(name)
        if role is None:
            logger.warning("Unresolvable role %r, defaulting to %s", name, cls.READ_ONLY.value)
            return cls.READ_ONLY
        return role


_LABELS: dict[Role, str] = {
    Role.ADMINISTRATOR: "Administrador",
    Role.DATA_ENTRY: "Capturista",
    Role.READ_ONLY: "Consulta",
}

_DESCRIPTIONS: dict[Role, str] = {
    Role.ADMINISTRATOR: "Acceso completo al sistema, incluyendo gestión de usuarios",
    Role.DATA_ENTRY: "Puede registrar y consultar información",
    Role.READ_ONLY: "Solo puede consultar información",
}


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE_USERS = "manage_users"


ALL_ROLES: frozenset[Role] = frozenset(Role)
EDITORS: frozenset[Role] = frozenset({Role.ADMINISTRATOR, Role.DATA_ENTRY})
ADMINS: frozenset[Role] = frozenset({Role.ADMINISTRATOR})

ROLE_MATRIX: dict[Action, frozenset[Role]] = {
    Action.VIEW: ALL_ROLES,
    Action.CREATE: EDITORS,
    Action.UPDATE: EDITORS,
    Action.DELETE: ADMINS,
    Action.MANAGE_USERS: ADMINS,
}

_missing = set(Action) - ROLE_MATRIX.keys()
if _missing:
    raise RuntimeError(f"Role matrix has no entry for: {sorted(a.value for a in _missing)}")
for _table in (_LABELS, _DESCRIPTIONS):
    if set(_table) != set(Role):
        raise RuntimeError("Every role needs a label and a description")


def roles_for(action: Action) -> frozenset[Role]:
    """Return the roles allowed to perform *action*."""
    return ROLE_MATRIX[action]
