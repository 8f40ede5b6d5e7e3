"""
Governing-body members and legal representatives of an ente.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text

from repopa.db.base import Base


class GoverningBodyMember(Base):
    __tablename__ = "integrantes_organo"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    entity_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("entes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    body_type: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    member_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    position: str = Column(String(150), nullable=False)  # type: ignore[assignment]
    appointment_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    designation_instrument: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default="Activo")  # type: ignore[assignment]
    # Activo | Concluido
    observations: str | None = Column(Text, nullable=True)  # type: ignore[assignment]


class Representative(Base):
    __tablename__ = "representantes"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    entity_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("entes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    position: str = Column(String(150), nullable=False)  # type: ignore[assignment]
    responsibility_type: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    start_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    end_date: date | None = Column(Date, nullable=True)  # type: ignore[assignment]
    support_document: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    observations: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
