"""
Powers of attorney granted by an ente and the attorneys named in each.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from repopa.db.base import Base


class Power(Base):
    __tablename__ = "poderes"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    entity_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("entes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    power_type: str = Column(String(150), nullable=False)  # type: ignore[assignment]
    grant_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    revocation_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    document: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    notes: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    attorneys = relationship(
        "Attorney",
        back_populates="power",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Attorney.id",
    )


class Attorney(Base):
    __tablename__ = "apoderados"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    power_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("poderes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]

    power = relationship("Power", back_populates="attorneys")
