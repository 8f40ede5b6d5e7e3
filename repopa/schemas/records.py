"""Pydantic schemas for entes and their dependent records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from repopa.core.catalogs import EntityStatus, EntityType, MemberStatus, normalise_entity_type


def _blank_to_none(v: object) -> object:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _coerce_entity_type(v: object) -> object:
    if isinstance(v, str):
        canonical = normalise_entity_type(v)
        if canonical is None:
            raise ValueError("Type must be one of: OPD, Fideicomiso, EPEM")
        return canonical
    return v


def _required_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Field must not be empty")
    return v


def _optional_text(v: str | None) -> str | None:
    # None leaves the stored value alone; a blank string is rejected.
    return None if v is None else _required_text(v)


# Empty-string dates from HTML forms are read as null.
FormDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
EntityTypeCode = Annotated[EntityType, BeforeValidator(_coerce_entity_type)]


# ── Entes ───────────────────────────────────────────────────────────
class EnteCreate(BaseModel):
    name: str = Field(max_length=300)
    type: EntityTypeCode
    purpose: str | None = None
    address: str | None = None
    creation_instrument: str | None = None
    creation_date: FormDate = None
    official_publication: str | None = None
    observations: str | None = None
    has_historical_records: bool = False
    status: EntityStatus = EntityStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _required_text(v)


class EnteUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=300)
    type: EntityTypeCode | None = None
    purpose: str | None = None
    address: str | None = None
    creation_instrument: str | None = None
    creation_date: FormDate = None
    official_publication: str | None = None
    observations: str | None = None
    has_historical_records: bool | None = None
    status: EntityStatus | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return _optional_text(v)


class EnteRead(BaseModel):
    id: int
    folio: str
    name: str
    type: str
    purpose: str | None
    address: str | None
    creation_instrument: str | None
    creation_date: date | None
    official_publication: str | None
    observations: str | None
    has_historical_records: bool
    status: str
    created_at: datetime | None


class EnteCreated(BaseModel):
    id: int
    folio: str


# ── Governing-body members ─────────────────────────────────────────
class MemberCreate(BaseModel):
    entity_id: int
    body_type: str | None = None
    member_name: str
    position: str
    appointment_date: FormDate = None
    designation_instrument: str | None = None
    status: MemberStatus = MemberStatus.ACTIVE
    observations: str | None = None

    @field_validator("member_name", "position")
    @classmethod
    def _text(cls, v: str) -> str:
        return _required_text(v)


class MemberUpdate(BaseModel):
    entity_id: int | None = None
    body_type: str | None = None
    member_name: str | None = None
    position: str | None = None
    appointment_date: FormDate = None
    designation_instrument: str | None = None
    status: MemberStatus | None = None
    observations: str | None = None

    @field_validator("member_name", "position")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return _optional_text(v)


class MemberRead(BaseModel):
    id: int
    entity_id: int
    body_type: str | None
    member_name: str
    position: str
    appointment_date: date | None
    designation_instrument: str | None
    status: str
    observations: str | None

    model_config = {"from_attributes": True}


# ── Representatives ─────────────────────────────────────────────────
class RepresentativeCreate(BaseModel):
    entity_id: int
    name: str
    position: str
    responsibility_type: str | None = None
    start_date: FormDate = None
    end_date: FormDate = None
    support_document: str | None = None
    observations: str | None = None

    @field_validator("name", "position")
    @classmethod
    def _text(cls, v: str) -> str:
        return _required_text(v)

    @model_validator(mode="after")
    def _period(self) -> RepresentativeCreate:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RepresentativeUpdate(BaseModel):
    entity_id: int | None = None
    name: str | None = None
    position: str | None = None
    responsibility_type: str | None = None
    start_date: FormDate = None
    end_date: FormDate = None
    support_document: str | None = None
    observations: str | None = None

    @field_validator("name", "position")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return _optional_text(v)


class RepresentativeRead(BaseModel):
    id: int
    entity_id: int
    name: str
    position: str
    responsibility_type: str | None
    start_date: date | None
    end_date: date | None
    support_document: str | None
    observations: str | None

    model_config = {"from_attributes": True}


# ── Powers of attorney ─────────────────────────────────────────────
class PowerWrite(BaseModel):
    """Body for both create and update; attorneys are replaced wholesale."""

    entity_id: int
    power_type: str
    attorneys: list[str]
    grant_date: FormDate = None
    revocation_date: FormDate = None
    document: str | None = None
    notes: str | None = None

    @field_validator("power_type")
    @classmethod
    def _power_type(cls, v: str) -> str:
        return _required_text(v)

    @field_validator("attorneys")
    @classmethod
    def _attorneys(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v if name and name.strip()]
        if not names:
            raise ValueError("At least one attorney is required")
        return names


class PowerRead(BaseModel):
    id: int
    entity_id: int
    power_type: str
    attorneys: list[str]
    grant_date: date | None
    revocation_date: date | None
    document: str | None
    notes: str | None


# ── Regulatory documents ───────────────────────────────────────────
class RegulatoryDocumentCreate(BaseModel):
    entity_id: int
    document_type: str
    issue_date: FormDate = None
    is_current: bool = True
    file_ref: str | None = None
    notes: str | None = None

    @field_validator("document_type")
    @classmethod
    def _doc_type(cls, v: str) -> str:
        return _required_text(v)


class RegulatoryDocumentUpdate(BaseModel):
    entity_id: int | None = None
    document_type: str | None = None
    issue_date: FormDate = None
    is_current: bool | None = None
    file_ref: str | None = None
    notes: str | None = None


class RegulatoryDocumentRead(BaseModel):
    id: int
    entity_id: int
    document_type: str
    issue_date: date | None
    is_current: bool
    file_ref: str | None
    notes: str | None

    model_config = {"from_attributes": True}


# ── Dashboard ───────────────────────────────────────────────────────
class RecentEnte(BaseModel):
    id: int
    name: str
    folio: str
    type: str


class DashboardStats(BaseModel):
    total_entities: int
    active_organisms: int
    active_trusts: int
    active_epem: int
    recent_entities: list[RecentEnte]


# ── Generic ─────────────────────────────────────────────────────────
class DeleteResponse(BaseModel):
    success: bool
    message: str
