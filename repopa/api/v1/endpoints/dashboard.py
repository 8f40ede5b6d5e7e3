"""
Dashboard figures — active entes per type and the latest registrations.
"""

from __future__ import annotations

from collections import Counter

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_view
from repopa.auth.session import Session
from repopa.core.catalogs import EntityStatus, EntityType, normalise_entity_type
from repopa.models.ente import Ente
from repopa.schemas.records import DashboardStats, RecentEnte

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_LIMIT = 5


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> DashboardStats:
    active = Ente.status == EntityStatus.ACTIVE.value

    # Stored codes may predate normalisation, so fold them here.
    grouped = await db.execute(
        select(Ente.entity_type, func.count(Ente.id)).where(active).group_by(Ente.entity_type)
    )
    per_type: Counter[EntityType | None] = Counter()
    total = 0
    for raw_type, count in grouped.all():
        per_type[normalise_entity_type(raw_type)] += count
        total += count

    recent = await db.execute(
        select(Ente).where(active).order_by(Ente.created_at.desc(), Ente.id.desc()).limit(RECENT_LIMIT)
    )
    recent_entities = []
    for ente in recent.scalars().all():
        canonical = normalise_entity_type(ente.entity_type)
        recent_entities.append(
            RecentEnte(
                id=ente.id,
                name=ente.name,
                folio=ente.folio,
                type=canonical.value if canonical else ente.entity_type,
            )
        )

    return DashboardStats(
        total_entities=total,
        active_organisms=per_type[EntityType.OPD],
        active_trusts=per_type[EntityType.FIDEICOMISO],
        active_epem=per_type[EntityType.EPEM],
        recent_entities=recent_entities,
    )
