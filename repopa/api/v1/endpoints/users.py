"""
User administration — administrators only.

Accounts are never physically removed; DELETE flips ``is_active``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_user_admin
from repopa.auth.roles import Role
from repopa.auth.session import Session
from repopa.core.security import get_password_hash
from repopa.models.user import RoleRecord, User
from repopa.schemas.records import DeleteResponse
from repopa.schemas.user import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/usuarios", tags=["users"])
logger = logging.getLogger(__name__)


async def _role_id(db: AsyncSession, role: Role) -> int:
    result = await db.execute(select(RoleRecord.id).where(RoleRecord.name == role.value))
    role_id = result.scalar_one_or_none()
    if role_id is None:
        raise HTTPException(status_code=400, detail=f"Role '{role.value}' is not configured")
    return role_id


async def _get_active_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


def _to_read(user: User, role_name: str | None) -> UserRead:
    return UserRead(
        id=user.id,
        name=user.full_name,
        email=user.email,
        role=Role.resolve(role_name),
        is_active=bool(user.is_active),
        created_at=user.created_at,
    )


@router.get("", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: Session = Depends(require_user_admin),
) -> list[UserRead]:
    result = await db.execute(
        select(User, RoleRecord.name)
        .outerjoin(RoleRecord, User.role_id == RoleRecord.id)
        .where(User.is_active.is_(True))
        .order_by(User.full_name)
    )
    return [_to_read(user, role_name) for user, role_name in result.all()]


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_user_admin),
) -> UserRead:
    """Create a login account with a bcrypt-hashed password."""
    if await _email_taken(db, body.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        full_name=body.name,
        email=body.email,
        password_hash=get_password_hash(body.password),
        role_id=await _role_id(db, body.role),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %d created by %d with role %s", user.id, admin.subject, body.role.value)
    return _to_read(user, body.role.value)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_user_admin),
) -> UserRead:
    """Update name, email or role; a non-blank ``password`` replaces the hash."""
    user = await _get_active_user(db, user_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("email") and await _email_taken(db, changes["email"], exclude_id=user_id):
        raise HTTPException(status_code=400, detail="Email already registered")

    if changes.get("name"):
        user.full_name = changes["name"].strip()
    if changes.get("email"):
        user.email = changes["email"]
    if body.role is not None:
        user.role_id = await _role_id(db, body.role)
    if body.password is not None:
        user.password_hash = get_password_hash(body.password)
        logger.info("Password of user %d changed by %d", user_id, admin.subject)

    await db.commit()
    await db.refresh(user)

    role_result = await db.execute(select(RoleRecord.name).where(RoleRecord.id == user.role_id))
    logger.info("Updated user %d", user_id)
    return _to_read(user, role_result.scalar_one_or_none())


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Session = Depends(require_user_admin),
) -> DeleteResponse:
    """Soft-delete (deactivate) an account."""
    user = await _get_active_user(db, user_id)
    if user.id == admin.subject:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user.is_active = False
    await db.commit()
    logger.info("Deactivated user %d (%s)", user_id, user.email)
    return DeleteResponse(success=True, message=f"User '{user.full_name}' deactivated")
