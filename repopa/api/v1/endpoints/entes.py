"""
Ente CRUD — the registry of organisms, trusts and state companies.

- GET requires any authenticated role.
- POST / PUT require an editor role (administrator or data entry).
- DELETE requires administrator.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_create, require_delete, require_update, require_view
from repopa.auth.session import Session
from repopa.core.catalogs import EntityStatus, EntityType, normalise_entity_type
from repopa.models.ente import Ente
from repopa.schemas.records import DeleteResponse, EnteCreate, EnteCreated, EnteRead, EnteUpdate

router = APIRouter(prefix="/entes", tags=["entes"])
logger = logging.getLogger(__name__)

FOLIO_PREFIX = "REPOPA-"


async def _next_folio(db: AsyncSession) -> str:
    """``REPOPA-<epoch ms>``, bumped by one millisecond until unused."""
    stamp = int(time.time() * 1000)
    while True:
        folio = f"{FOLIO_PREFIX}{stamp}"
        result = await db.execute(select(Ente.id).where(Ente.folio == folio))
        if result.first() is None:
            return folio
        stamp += 1


async def get_ente_or_404(db: AsyncSession, ente_id: int) -> Ente:
    ente = await db.get(Ente, ente_id)
    if ente is None:
        raise HTTPException(status_code=404, detail="Ente not found")
    return ente


def _to_read(ente: Ente) -> EnteRead:
    canonical = normalise_entity_type(ente.entity_type)
    return EnteRead(
        id=ente.id,
        folio=ente.folio,
        name=ente.name,
        type=canonical.value if canonical else ente.entity_type,
        purpose=ente.purpose,
        address=ente.address,
        creation_instrument=ente.creation_instrument,
        creation_date=ente.creation_date,
        official_publication=ente.official_publication,
        observations=ente.observations,
        has_historical_records=bool(ente.has_historical_records),
        status=ente.status,
        created_at=ente.created_at,
    )


@router.get("", response_model=list[EnteRead])
async def list_entes(
    type: str | None = None,
    status: EntityStatus | None = None,
    search: str | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> list[EnteRead]:
    query = select(Ente).order_by(Ente.name).offset(skip).limit(limit)
    if type:
        canonical = normalise_entity_type(type)
        if canonical is None:
            raise HTTPException(status_code=422, detail=f"Unknown entity type '{type}'")
        query = query.where(Ente.entity_type == canonical.value)
    if status:
        query = query.where(Ente.status == status.value)
    if search:
        # Escape SQL LIKE metacharacters to prevent wildcard injection
        safe_search = search.replace("%", r"\%").replace("_", r"\_")
        query = query.where(Ente.name.ilike(f"%{safe_search}%", escape="\\"))
    result = await db.execute(query)
    return [_to_read(e) for e in result.scalars().all()]


@router.get("/{ente_id}", response_model=EnteRead)
async def get_ente(
    ente_id: int,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> EnteRead:
    return _to_read(await get_ente_or_404(db, ente_id))


@router.post("", response_model=EnteCreated, status_code=201)
async def create_ente(
    body: EnteCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_create),
) -> EnteCreated:
    data = body.model_dump(exclude={"type", "status"})
    ente = Ente(
        **data,
        folio=await _next_folio(db),
        entity_type=EntityType(body.type).value,
        status=EntityStatus(body.status).value,
    )
    db.add(ente)
    await db.commit()
    await db.refresh(ente)
    logger.info("Ente %d registered as %s by user %d", ente.id, ente.folio, session.subject)
    return EnteCreated(id=ente.id, folio=ente.folio)


@router.put("/{ente_id}", response_model=EnteRead)
async def update_ente(
    ente_id: int,
    body: EnteUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_update),
) -> EnteRead:
    ente = await get_ente_or_404(db, ente_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        if field == "type":
            if value is not None:
                ente.entity_type = EntityType(value).value
        elif field == "status":
            if value is not None:
                ente.status = EntityStatus(value).value
        elif field == "name":
            if value is not None:
                ente.name = value
        elif field == "has_historical_records":
            if value is not None:
                ente.has_historical_records = value
        else:
            setattr(ente, field, value)

    await db.commit()
    await db.refresh(ente)
    logger.info("Updated ente %d by user %d", ente_id, session.subject)
    return _to_read(ente)


@router.delete("/{ente_id}", response_model=DeleteResponse)
async def delete_ente(
    ente_id: int,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_delete),
) -> DeleteResponse:
    ente = await get_ente_or_404(db, ente_id)
    await db.delete(ente)
    await db.commit()
    logger.info("Deleted ente %d (%s) by user %d", ente_id, ente.folio, session.subject)
    return DeleteResponse(success=True, message=f"Ente '{ente.name}' deleted")
