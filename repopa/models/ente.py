"""
Ente model — a registered public organism, trust or state company.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, String, Text

from repopa.db.base import Base


class Ente(Base):
    __tablename__ = "entes"
    __table_args__ = (Index("ix_entes_tipo_estatus", "entity_type", "status"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    folio: str = Column(String(40), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    name: str = Column(String(300), nullable=False)  # type: ignore[assignment]
    entity_type: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # OPD | Fideicomiso | EPEM
    purpose: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    creation_instrument: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    creation_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    official_publication: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    observations: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    has_historical_records: bool = Column(Boolean, default=False)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="Activo")  # type: ignore[assignment]
    # Activo | Inactivo
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
