"""
Login protocol: verify credentials, resolve the role, issue a session.

Each call is independent and stateless.  The only storage access is the
credential read; nothing is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from repopa.auth.roles import Role
from repopa.auth.session import Session
from repopa.core.exceptions import InvalidPassword, MissingCredentials, UnknownUser
from repopa.core.security import DUMMY_PASSWORD_HASH, create_session_token, utcnow, verify_password
from repopa.repositories.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class Authenticator:
    def __init__(
        self,
        store: CredentialStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    async def authenticate(self, email: str | None, password: str | None) -> Session:
        """Return a fresh :class:`Session` or raise an ``AuthError``.

        ``UnknownUser`` and ``InvalidPassword`` stay distinct here for the
        logs; the exception handler renders both with the same message.
        """
        if not email or not email.strip() or not password:
            raise MissingCredentials()

        credential = await self.store.find_active_credential_by_email(email)
        if credential is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            raise UnknownUser(f"no active account for {email.strip()!r}")

        if not verify_password(password, credential.password_hash):
            raise InvalidPassword(f"password mismatch for user {credential.id}")

        role = Role.resolve(await self.store.find_role_by_id(credential.role_id))

        issued_at = self.clock()
        claims = {
            "sub": str(credential.id),
            "name": credential.name,
            "email": credential.email,
            "role": role.value,
        }
        token, expires_at = create_session_token(claims, issued_at=issued_at)
        logger.info("User %d logged in as %s", credential.id, role.value)

        return Session(
            subject=credential.id,
            name=credential.name,
            email=credential.email,
            role=role,
            token=token,
            expires_at=expires_at,
            issued_at=issued_at,
        )
