"""
Regulatory framework documents (marco normativo).

Only the file reference is stored; uploads are handled elsewhere.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repopa.api.v1.deps import get_db, require_create, require_delete, require_update, require_view
from repopa.api.v1.endpoints.entes import get_ente_or_404
from repopa.auth.session import Session
from repopa.models.regulatory import RegulatoryDocument
from repopa.schemas.records import (DeleteResponse, RegulatoryDocumentCreate,
                                    RegulatoryDocumentRead,
                                    RegulatoryDocumentUpdate)

router = APIRouter(prefix="/marco-normativo", tags=["regulatory"])
logger = logging.getLogger(__name__)

_REQUIRED = {"entity_id", "document_type", "is_current"}


async def _get_document(db: AsyncSession, doc_id: int) -> RegulatoryDocument:
    doc = await db.get(RegulatoryDocument, doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return doc


@router.get("", response_model=list[RegulatoryDocumentRead])
async def list_documents(
    entity_id: int | None = None,
    current_only: bool = False,
    db: AsyncSession = Depends(get_db),
    _session: Session = Depends(require_view),
) -> list[RegulatoryDocument]:
    query = select(RegulatoryDocument).order_by(RegulatoryDocument.id.desc())
    if entity_id is not None:
        query = query.where(RegulatoryDocument.entity_id == entity_id)
    if current_only:
        query = query.where(RegulatoryDocument.is_current.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("", response_model=RegulatoryDocumentRead, status_code=201)
async def create_document(
    body: RegulatoryDocumentCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_create),
) -> RegulatoryDocument:
    await get_ente_or_404(db, body.entity_id)
    doc = RegulatoryDocument(**body.model_dump())
    db.add(doc)
    await db.commit()
    await db.refresh(doc)
    logger.info("Document %d filed for ente %d by user %d", doc.id, doc.entity_id, session.subject)
    return doc


@router.put("/{doc_id}", response_model=RegulatoryDocumentRead)
async def update_document(
    doc_id: int,
    body: RegulatoryDocumentUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_update),
) -> RegulatoryDocument:
    doc = await _get_document(db, doc_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("entity_id") is not None:
        await get_ente_or_404(db, changes["entity_id"])

    for field, value in changes.items():
        if field in _REQUIRED and value is None:
            continue
        setattr(doc, field, value)

    await db.commit()
    await db.refresh(doc)
    logger.info("Updated document %d by user %d", doc_id, session.subject)
    return doc


@router.delete("/{doc_id}", response_model=DeleteResponse)
async def delete_document(
    doc_id: int,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(require_delete),
) -> DeleteResponse:
    doc = await _get_document(db, doc_id)
    await db.delete(doc)
    await db.commit()
    logger.info("Deleted document %d by user %d", doc_id, session.subject)
    return DeleteResponse(success=True, message="Document deleted")
