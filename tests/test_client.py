"""
RepopaClient tests, driven against the app through ASGITransport.

The client refuses actions locally when the session's role does not
allow them, and forgets its session when the server rejects the token.
"""

from datetime import timedelta

import pytest
from httpx import ASGITransport

from repopa.auth.guard import Denial
from repopa.auth.roles import Action, Role
from repopa.auth.session import SessionState
from repopa.client import AccessDenied, ApiError, LoginFailed, RepopaClient, session_from_login
from repopa.core.security import create_session_token, utcnow
from repopa.main import app


@pytest.fixture
async def client(session_factory):
    async with RepopaClient("http://test", transport=ASGITransport(app=app)) as c:
        yield c


@pytest.mark.asyncio
async def test_login_populates_the_store(client: RepopaClient, make_user):
    await make_user("admin@x.com", "correct", Role.ADMINISTRATOR)

    session = await client.login("admin@x.com", "correct")

    assert session.role is Role.ADMINISTRATOR
    assert client.store.state() is SessionState.AUTHENTICATED
    assert client.permitted_actions() == list(Action)
    assert session.expires_at - session.issued_at == timedelta(hours=1)

    me = await client.me()
    assert me["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_failed_login_leaves_client_anonymous(client: RepopaClient, make_user):
    await make_user("admin@x.com", "correct")
    with pytest.raises(LoginFailed) as exc:
        await client.login("admin@x.com", "wrong")
    assert exc.value.status_code == 401
    assert exc.value.detail == "Incorrect email or password"
    assert client.session is None


@pytest.mark.asyncio
async def test_read_only_session_is_refused_locally(client: RepopaClient, make_user):
    await make_user("reader@x.com", "correct", Role.READ_ONLY)
    await client.login("reader@x.com", "correct")

    assert await client.list_records("entes") == []
    assert client.permitted_actions() == [Action.VIEW]

    with pytest.raises(AccessDenied) as exc:
        await client.create("entes", {"name": "X", "type": "OPD"})
    assert exc.value.action is Action.CREATE
    assert exc.value.decision.reason is Denial.INSUFFICIENT_ROLE

    with pytest.raises(AccessDenied):
        await client.manage_users("GET")


@pytest.mark.asyncio
async def test_data_entry_round_trip(client: RepopaClient, make_user):
    await make_user("capture@x.com", "correct", Role.DATA_ENTRY)
    await client.login("capture@x.com", "correct")

    created = await client.create("entes", {"name": "Casa de la Cultura", "type": "Organismo"})
    updated = await client.update("entes", created["id"], {"observations": "Revisado"})
    assert updated["type"] == "OPD"
    assert updated["observations"] == "Revisado"

    assert not client.can(Action.DELETE)
    with pytest.raises(AccessDenied):
        await client.delete("entes", created["id"])


@pytest.mark.asyncio
async def test_server_errors_surface_as_api_error(client: RepopaClient, make_user):
    await make_user("admin@x.com", "correct")
    await client.login("admin@x.com", "correct")
    with pytest.raises(ApiError) as exc:
        await client.request("GET", "/entes/999")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_anonymous_client_sends_nothing(client: RepopaClient):
    with pytest.raises(AccessDenied) as exc:
        await client.list_records("entes")
    assert exc.value.decision.reason is Denial.ANONYMOUS


@pytest.mark.asyncio
async def test_logout_clears_the_store(client: RepopaClient, make_user):
    await make_user("admin@x.com", "correct")
    await client.login("admin@x.com", "correct")
    await client.logout()
    assert client.store.state() is SessionState.ANONYMOUS
    assert client.permitted_actions() == []


@pytest.mark.asyncio
async def test_rejected_token_clears_the_store(client: RepopaClient, make_user):
    await make_user("admin@x.com", "correct")
    await client.login("admin@x.com", "correct")

    # Swap in a session the server will not accept
    forged = session_from_login(
        {
            "subject": 1,
            "role": "ADMIN",
            "token": create_session_token({"sub": "1", "role": "ADMIN"}, issued_at=utcnow())[0][:-4] + "AAAA",
        }
    )
    client.store.begin(forged)
    client._http.cookies.clear()

    with pytest.raises(AccessDenied) as exc:
        await client.list_records("entes")
    assert exc.value.decision.reason is Denial.EXPIRED
    assert client.session is None
