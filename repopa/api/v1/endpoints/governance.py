"""
Governing-body members (integrantes) and legal representatives.

Both belong to an ente; writes check that the ente exists first.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_create, require_delete, require_update, require_view
from repopa.api.v1.endpoints.entes import get_ente_or_404
from repopa.auth.session import Session
from repopa.models.governance import GoverningBodyMember, Representative
from repopa.schemas.records import (DeleteResponse, MemberCreate, MemberRead,
                                    MemberUpdate, RepresentativeCreate,
                                    RepresentativeRead, RepresentativeUpdate)

router = APIRouter(tags=["governance"])
logger = logging.getLogger(__name__)


# ── Governing-body members ─────────────────────────────────────────
async def _get_member(db: AsyncSession, member_id: int) -> GoverningBodyMember:
    member = await db.get(GoverningBodyMember, member_id)
    if member is None:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.get("/integrantes", response_model=list[MemberRead])
async def list_members(
    entity_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> list[GoverningBodyMember]:
    query = select(GoverningBodyMember).order_by(GoverningBodyMember.id.desc())
    if entity_id is not None:
        query = query.where(GoverningBodyMember.entity_id == entity_id)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/integrantes", response_model=MemberRead, status_code=201)
async def create_member(
    body: MemberCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_create),
) -> GoverningBodyMember:
    await get_ente_or_404(db, body.entity_id)
    member = GoverningBodyMember(**body.model_dump(exclude={"status"}), status=body.status.value)
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.info("Member %d added to ente %d by user %d", member.id, member.entity_id, session.subject)
    return member


@router.put("/integrantes/{member_id}", response_model=MemberRead)
async def update_member(
    member_id: int,
    body: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_update),
) -> GoverningBodyMember:
    member = await _get_member(db, member_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("entity_id") is not None:
        await get_ente_or_404(db, changes["entity_id"])

    for field, value in changes.items():
        if field in {"entity_id", "member_name", "position", "status"} and value is None:
            continue
        if field == "status":
            value = value.value
        setattr(member, field, value)

    await db.commit()
    await db.refresh(member)
    logger.info("Updated member %d by user %d", member_id, session.subject)
    return member


@router.delete("/integrantes/{member_id}", response_model=DeleteResponse)
async def delete_member(
    member_id: int,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_delete),
) -> DeleteResponse:
    member = await _get_member(db, member_id)
    await db.delete(member)
    await db.commit()
    logger.info("Deleted member %d by user %d", member_id, session.subject)
    return DeleteResponse(success=True, message="Member deleted")


# ── Representatives ─────────────────────────────────────────────────
async def _get_representative(db: AsyncSession, rep_id: int) -> Representative:
    rep = await db.get(Representative, rep_id)
    if rep is None:
        raise HTTPException(status_code=404, detail="Representative not found")
    return rep


@router.get("/representantes", response_model=list[RepresentativeRead])
async def list_representatives(
    entity_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> list[Representative]:
    query = select(Representative).order_by(
        Representative.start_date.desc(), Representative.id.desc()
    )
    if entity_id is not None:
        query = query.where(Representative.entity_id == entity_id)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/representantes", response_model=RepresentativeRead, status_code=201)
async def create_representative(
    body: RepresentativeCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_create),
) -> Representative:
    await get_ente_or_404(db, body.entity_id)
    rep = Representative(**body.model_dump())
    db.add(rep)
    await db.commit()
    await db.refresh(rep)
    logger.info("Representative %d added to ente %d by user %d", rep.id, rep.entity_id, session.subject)
    return rep


@router.put("/representantes/{rep_id}", response_model=RepresentativeRead)
async def update_representative(
    rep_id: int,
    body: RepresentativeUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_update),
) -> Representative:
    rep = await _get_representative(db, rep_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("entity_id") is not None:
        await get_ente_or_404(db, changes["entity_id"])

    start = changes.get("start_date", rep.start_date)
    end = changes.get("end_date", rep.end_date)
    if start and end and end < start:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    for field, value in changes.items():
        if field in {"entity_id", "name", "position"} and value is None:
            continue
        setattr(rep, field, value)

    await db.commit()
    await db.refresh(rep)
    logger.info("Updated representative %d by user %d", rep_id, session.subject)
    return rep


@router.delete("/representantes/{rep_id}", response_model=DeleteResponse)
async def delete_representative(
    rep_id: int,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_delete),
) -> DeleteResponse:
    rep = await _get_representative(db, rep_id)
    await db.delete(rep)
    await db.commit()
    logger.info("Deleted representative %d by user %d", rep_id, session.subject)
    return DeleteResponse(success=True, message="Representative deleted")
