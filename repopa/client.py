"""
Async API client for REPOPA.

Keeps the logged-in session in a :class:`SessionStore` and asks the access
guard before sending a request, so a front end built on it can hide or
refuse controls the current role may not use.  The server repeats the
same check on every route.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from jose import jwt

from repopa.auth.guard import AccessDecision, Denial, can, permitted_actions
from repopa.auth.roles import Action, Role
from repopa.auth.session import Session, SessionStore

logger = logging.getLogger(__name__)

_METHOD_ACTIONS: dict[str, Action] = {
    "GET": Action.VIEW,
    "POST": Action.CREATE,
    "PUT": Action.UPDATE,
    "DELETE": Action.DELETE,
}


class ApiError(Exception):
    def __init__(self, status_code: int, detail: Any) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class LoginFailed(ApiError):
    pass


class AccessDenied(Exception):
    """Raised locally when the guard refuses an action; nothing was sent."""

    def __init__(self, action: Action, decision: AccessDecision) -> None:
        super().__init__(f"{action.value} denied: {decision.reason.value if decision.reason else '-'}")
        self.action = action
        self.decision = decision


def session_from_login(body: dict[str, Any]) -> Session:
    """Build a :class:`Session` from a login response.

    The client cannot verify the signature (it has no secret), so expiry
    is read from the token's unverified claims.
    """
    token = body["token"]
    claims = jwt.get_unverified_claims(token)
    iat = claims.get("iat")
    return Session(
        subject=int(body["subject"]),
        name=body.get("name") or "",
        email=body.get("email") or "",
        role=Role.resolve(body.get("role")),
        token=token,
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc) if iat else None,
    )


class RepopaClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api/v1",
        store: SessionStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.store = store or SessionStore()
        self._prefix = api_prefix.rstrip("/")
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> RepopaClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Session lifecycle ─────────────────────────────────────────
    async def login(self, email: str, password: str) -> Session:
        resp = await self._http.post(
            f"{self._prefix}/auth/login", json={"email": email, "password": password}
        )
        if resp.status_code != 200:
            self.store.clear()
            raise LoginFailed(resp.status_code, _detail(resp))
        session = session_from_login(resp.json())
        self.store.begin(session)
        return session

    async def logout(self) -> None:
        try:
            await self._http.post(f"{self._prefix}/auth/logout")
        finally:
            self.store.clear()

    @property
    def session(self) -> Session | None:
        return self.store.current()

    def can(self, action: Action) -> AccessDecision:
        return can(self.store.current(), action)

    def permitted_actions(self) -> list[Action]:
        return permitted_actions(self.store.current())

    # ── Requests ──────────────────────────────────────────────────
    async def request(
        self,
        method: str,
        path: str,
        *,
        action: Action | None = None,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send an authorised request and return the decoded JSON body.

        *action* defaults to the one implied by the HTTP method.
        """
        method = method.upper()
        action = action or _METHOD_ACTIONS[method]
        session = self.store.current()
        decision = can(session, action)
        if not decision:
            raise AccessDenied(action, decision)

        resp = await self._http.request(
            method,
            f"{self._prefix}{path}",
            json=json,
            params=params,
            headers={"Authorization": f"Bearer {session.token}"},  # type: ignore[union-attr]
        )
        if resp.status_code == 401:
            # Token rejected server-side: treat as logged out.
            logger.info("Server rejected the session token, clearing it")
            self.store.clear()
            raise AccessDenied(action, AccessDecision(False, Denial.EXPIRED))
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _detail(resp))
        return resp.json()

    async def me(self) -> dict[str, Any]:
        return await self.request("GET", "/auth/me")

    async def list_records(self, resource: str, **params: Any) -> list[dict[str, Any]]:
        return await self.request("GET", f"/{resource}", params=params or None)

    async def create(self, resource: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", f"/{resource}", json=data)

    async def update(self, resource: str, record_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return await self.request("PUT", f"/{resource}/{record_id}", json=data)

    async def delete(self, resource: str, record_id: int) -> dict[str, Any]:
        return await self.request("DELETE", f"/{resource}/{record_id}")

    async def manage_users(self, method: str, path: str = "", json: Any = None) -> Any:
        return await self.request(method, f"/usuarios{path}", action=Action.MANAGE_USERS, json=json)


def _detail(resp: httpx.Response) -> Any:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    return body.get("detail") if isinstance(body, dict) else body
