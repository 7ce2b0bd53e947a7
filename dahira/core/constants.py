"""Application-wide constants and shared values."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum, StrEnum


class Gender(StrEnum):
    """Member gender categories; ``ENFANT`` marks a minor."""

    HOMME = "Homme"
    FEMME = "Femme"
    ENFANT = "Enfant"


class MemberRole(StrEnum):
    """Organizational functions a member can hold in the Dahira."""

    DIEUWRIGN = "Dieuwrign"
    TOPP_DIEUWRIGN = "Topp Dieuwrign"
    DIEUWRIGN_COM_COM = "Dieuwrign commission communication"
    DIEUWRIGN_COM_ORG = "Dieuwrign commission organisation"
    DIEUWRIGN_COM_FIN = "Dieuwrign commission finance"
    DIEUWRIGN_COM_SOC = "Dieuwrign commission sociale"
    DIEUWRIGN_COM_CULT = "Dieuwrign commission culturelle"
    DIEUWRIGN_SOKHNA_YI = "Dieuwrign Sokhna Yi"
    DIEUWRIGN_REL_EXT = "Dieuwrigne Commission relation exterieure"
    MEMBRE = "Membre"
    MEMBRE_COM_COM = "Membre commission communication"
    MEMBRE_COM_CONS = "Membre commission conservatoire"
    MEMBRE_COM_SOC = "Membre commission sociale"
    MEMBRE_COM_CULT = "Membre commission culturelle"


class UserRole(StrEnum):
    """Privilege levels of dashboard accounts."""

    SUPER_ADMIN = "Super Admin"
    ADMIN = "Administrateur"


DEFAULT_ANNUAL_FEE = 5000
MIN_PASSWORD_LENGTH = 6
PHONE_PATTERN = re.compile(r"^[0-9+ ]{8,15}$")

SUPER_ADMIN_FULL_NAME = "Super Administrateur"
FALLBACK_FULL_NAME = "Utilisateur"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Return enum values for SQLAlchemy enum configuration."""

    return [str(item.value) for item in enum_cls]


def utcnow() -> datetime:
    """Return timezone-aware current UTC datetime."""

    return datetime.now(UTC)
