"""
Regulatory framework documents (marco normativo) attached to an ente.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text

from repopa.db.base import Base


class RegulatoryDocument(Base):
    __tablename__ = "marco_normativo"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    entity_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("entes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_type: str = Column(String(150), nullable=False)  # type: ignore[assignment]
    issue_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    is_current: bool = Column(Boolean, default=True)  # type: ignore[assignment]
    file_ref: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
