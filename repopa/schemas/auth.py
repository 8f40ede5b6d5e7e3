"""Pydantic schemas for login and the current session."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from repopa.auth.roles import Action, Role


class LoginRequest(BaseModel):
    # Optional so that blanks reach the authenticator and come back as 400.
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    subject: int
    name: str
    email: str
    role: Role
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class SessionRead(BaseModel):
    subject: int
    name: str
    email: str
    role: Role
    role_label: str
    expires_at: datetime
    permissions: list[Action]


class LogoutResponse(BaseModel):
    success: bool = True
    message: str
