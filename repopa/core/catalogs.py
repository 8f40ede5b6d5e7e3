"""
Fixed catalogues used by the record-keeping tables.

Entity types arrive in several spellings (UI labels, legacy codes); they
are stored under one canonical code.
"""

from __future__ import annotations

import unicodedata
from enum import Enum


class EntityType(str, Enum):
    OPD = "OPD"
    FIDEICOMISO = "Fideicomiso"
    EPEM = "EPEM"


class EntityStatus(str, Enum):
    ACTIVE = "Activo"
    INACTIVE = "Inactivo"


class MemberStatus(str, Enum):
    ACTIVE = "Activo"
    CONCLUDED = "Concluido"


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip().upper()


_ENTITY_TYPE_ALIASES: dict[str, EntityType] = {
    "OPD": EntityType.OPD,
    "ORGANISMO": EntityType.OPD,
    "ORGANISMO DESCENTRALIZADO": EntityType.OPD,
    "ORGANISMO PUBLICO DESCENTRALIZADO": EntityType.OPD,
    "FIDEICOMISO": EntityType.FIDEICOMISO,
    "FI": EntityType.FIDEICOMISO,
    "EPEM": EntityType.EPEM,
    "EMPRESA PUBLICA": EntityType.EPEM,
    "EMPRESA DE PARTICIPACION ESTATAL": EntityType.EPEM,
    "EMPRESA DE PARTICIPACION ESTATAL MAYORITARIA": EntityType.EPEM,
}


def normalise_entity_type(raw: str | None) -> EntityType | None:
    """Return the canonical type for *raw*, or ``None`` if it is not recognised."""
    if not raw:
        return None
    return _ENTITY_TYPE_ALIASES.get(_fold(raw))
