"""
Powers of attorney (poderes) and the attorneys they name.

A power and its attorney rows are written in one commit, so an update
that replaces the attorney list either lands completely or not at all.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_create, require_delete, require_update, require_view
from repopa.api.v1.endpoints.entes import get_ente_or_404
from repopa.auth.session import Session
from repopa.models.power import Attorney, Power
from repopa.schemas.records import DeleteResponse, PowerRead, PowerWrite

router = APIRouter(prefix="/poderes", tags=["powers"])
logger = logging.getLogger(__name__)


def _to_read(power: Power) -> PowerRead:
    return PowerRead(
        id=power.id,
        entity_id=power.entity_id,
        power_type=power.power_type,
        attorneys=[a.name for a in power.attorneys],
        grant_date=power.grant_date,
        revocation_date=power.revocation_date,
        document=power.document,
        notes=power.notes,
    )


async def _get_power(db: AsyncSession, power_id: int) -> Power:
    result = await db.execute(select(Power).where(Power.id == power_id))
    power = result.scalar_one_or_none()
    if power is None:
        raise HTTPException(status_code=404, detail="Power not found")
    return power


@router.get("", response_model=list[PowerRead])
async def list_powers(
    entity_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> list[PowerRead]:
    query = select(Power).order_by(Power.created_at.desc(), Power.id.desc())
    if entity_id is not None:
        query = query.where(Power.entity_id == entity_id)
    result = await db.execute(query)
    return [_to_read(p) for p in result.scalars().all()]


@router.post("", response_model=PowerRead, status_code=201)
async def create_power(
    body: PowerWrite,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_create),
) -> PowerRead:
    await get_ente_or_404(db, body.entity_id)
    power = Power(
        **body.model_dump(exclude={"attorneys"}),
        attorneys=[Attorney(name=name) for name in body.attorneys],
    )
    db.add(power)
    await db.commit()
    logger.info(
        "Power %d granted by ente %d to %d attorney(s), user %d",
        power.id,
        power.entity_id,
        len(body.attorneys),
        session.subject,
    )
    return _to_read(power)


@router.put("/{power_id}", response_model=PowerRead)
async def update_power(
    power_id: int,
    body: PowerWrite,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_update),
) -> PowerRead:
    """Replace every field of the power, including its attorney list."""
    power = await _get_power(db, power_id)
    await get_ente_or_404(db, body.entity_id)

    for field, value in body.model_dump(exclude={"attorneys"}).items():
        setattr(power, field, value)
    power.attorneys = [Attorney(name=name) for name in body.attorneys]

    await db.commit()
    logger.info("Updated power %d by user %d", power_id, session.subject)
    return _to_read(power)


@router.delete("/{power_id}", response_model=DeleteResponse)
async def delete_power(
    power_id: int,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_delete),
) -> DeleteResponse:
    power = await _get_power(db, power_id)
    await db.delete(power)
    await db.commit()
    logger.info("Deleted power %d by user %d", power_id, session.subject)
    return DeleteResponse(success=True, message="Power deleted")
