"""
Credential store — read-only queries the authenticator needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.models.user import RoleRecord, User


@dataclass(frozen=True)
class Credential:
    id: int
    name: str
    email: str
    password_hash: str
    role_id: int | None
    active: bool


class CredentialStore(Protocol):
    async def find_active_credential_by_email(self, email: str) -> Credential | None: ...

    async def find_role_by_id(self, role_id: int | None) -> str | None: ...


def normalise_email(email: str) -> str:
    return email.strip().lower()


class SqlCredentialStore:
    """:class:`CredentialStore` backed by the ``usuarios`` / ``roles`` tables."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_active_credential_by_email(self, email: str) -> Credential | None:
        result = await self._db.execute(
            select(User).where(User.email == normalise_email(email), User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return Credential(
            id=user.id,
            name=user.full_name,
            email=user.email,
            password_hash=user.password_hash,
            role_id=user.role_id,
            active=bool(user.is_active),
        )

    async def find_role_by_id(self, role_id: int | None) -> str | None:
        if role_id is None:
            return None
        result = await self._db.execute(select(RoleRecord.name).where(RoleRecord.id == role_id))
        return result.scalar_one_or_none()
