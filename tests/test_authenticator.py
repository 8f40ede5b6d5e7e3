"""
Authenticator tests against an in-memory credential store.

Covers the login outcomes without HTTP: success, the two failure kinds
that must look identical to the caller, missing input and role fallback.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from repopa.auth import authenticator as authenticator_module
from repopa.auth.authenticator import Authenticator
from repopa.auth.roles import Role
from repopa.core.exceptions import (INCORRECT_CREDENTIALS, InvalidPassword,
                                    MissingCredentials, UnknownUser)
from repopa.core.security import DUMMY_PASSWORD_HASH, decode_session_token, get_password_hash
from repopa.repositories.credential_store import Credential, normalise_email

T0 = datetime(2026, 3, 1, 9, 30, 0, tzinfo=timezone.utc)
ROLES = {1: "ADMIN", 2: "CAPTURISTA", 3: "CONSULTA"}


class FakeCredentialStore:
    def __init__(self, credentials: list[Credential], roles: dict[int, str] = ROLES):
        self._by_email = {c.email: c for c in credentials}
        self._roles = roles
        self.lookups: list[str] = []

    async def find_active_credential_by_email(self, email):
        self.lookups.append(email)
        credential = self._by_email.get(normalise_email(email))
        if credential is None or not credential.active:
            return None
        return credential

    async def find_role_by_id(self, role_id):
        return self._roles.get(role_id)


def _credential(id=1, email="admin@x.com", password="correct", role_id=1, active=True):
    return Credential(
        id=id,
        name="Admin",
        email=email,
        password_hash=get_password_hash(password),
        role_id=role_id,
        active=active,
    )


@pytest.fixture
def store():
    return FakeCredentialStore(
        [
            _credential(),
            _credential(id=2, email="capture@x.com", role_id=2),
            _credential(id=3, email="orphan@x.com", role_id=99),
            _credential(id=4, email="gone@x.com", active=False),
        ]
    )


@pytest.mark.asyncio
async def test_successful_login_issues_one_hour_session(store):
    session = await Authenticator(store, clock=lambda: T0).authenticate("admin@x.com", "correct")

    assert session.subject == 1
    assert session.role is Role.ADMINISTRATOR
    assert session.token
    assert session.issued_at == T0
    assert session.expires_at == T0 + timedelta(hours=1)

    payload = decode_session_token(session.token, now=T0)
    assert payload["sub"] == "1"
    assert payload["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_email_lookup_ignores_case_and_whitespace(store):
    session = await Authenticator(store).authenticate("  Capture@X.com ", "correct")
    assert session.role is Role.DATA_ENTRY


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_user_look_the_same(store):
    auth = Authenticator(store)

    with pytest.raises(InvalidPassword) as wrong:
        await auth.authenticate("admin@x.com", "nope")
    with pytest.raises(UnknownUser) as unknown:
        await auth.authenticate("nobody@x.com", "correct")

    assert wrong.value.public_message == unknown.value.public_message == INCORRECT_CREDENTIALS
    assert wrong.value.status_code == unknown.value.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_is_unknown(store):
    with pytest.raises(UnknownUser):
        await Authenticator(store).authenticate("gone@x.com", "correct")


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [("", "correct"), ("admin@x.com", ""), (None, None), ("   ", "x")])
async def test_missing_credentials_skip_the_store(store, email, password):
    with pytest.raises(MissingCredentials) as exc:
        await Authenticator(store).authenticate(email, password)
    assert exc.value.status_code == 400
    assert store.lookups == []


@pytest.mark.asyncio
async def test_dangling_role_falls_back_to_read_only(store):
    session = await Authenticator(store).authenticate("orphan@x.com", "correct")
    assert session.role is Role.READ_ONLY


@pytest.mark.asyncio
async def test_consecutive_logins_get_distinct_tokens(store):
    auth = Authenticator(store, clock=lambda: T0)
    first = await auth.authenticate("admin@x.com", "correct")
    second = await auth.authenticate("admin@x.com", "correct")
    assert first.token != second.token
    assert first.expires_at == second.expires_at


@pytest.mark.asyncio
async def test_unknown_user_still_runs_a_password_check(store, monkeypatch):
    """Both failure paths pay for one bcrypt verification."""
    checked: list[str] = []
    real_verify = authenticator_module.verify_password

    def _counting_verify(plain, hashed):
        checked.append(hashed)
        return real_verify(plain, hashed)

    monkeypatch.setattr(authenticator_module, "verify_password", _counting_verify)
    auth = Authenticator(store)

    with pytest.raises(UnknownUser):
        await auth.authenticate("nobody@x.com", "correct")
    assert checked == [DUMMY_PASSWORD_HASH]

    checked.clear()
    with pytest.raises(InvalidPassword):
        await auth.authenticate("admin@x.com", "nope")
    assert len(checked) == 1
    assert checked[0] != DUMMY_PASSWORD_HASH


@pytest.mark.asyncio
async def test_dangling_role_is_logged_once(store, caplog):
    with caplog.at_level(logging.WARNING):
        await Authenticator(store).authenticate("orphan@x.com", "correct")
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "CONSULTA" in warnings[0].getMessage()
