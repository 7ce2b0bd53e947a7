"""Member form schemas.

These models only coerce and normalize raw form values. Business rules such
as the guardian requirement for minors are applied by ``member_service`` so
they can report one specific message in a fixed order. Fields those rules
check carry no length limit here.
"""

from __future__ import annotations

from datetime import date
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from dahira.core.constants import DEFAULT_ANNUAL_FEE, Gender, MemberRole


class MemberBaseInput(BaseModel):
    """Shared member form fields."""

    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    role: MemberRole = MemberRole.MEMBRE
    gender: Gender = Gender.HOMME
    annual_fee: int = Field(default=DEFAULT_ANNUAL_FEE, ge=0)
    card_number: str = ""
    join_date: date = Field(default_factory=date.today)
    profession: str | None = Field(default=None, max_length=150)
    photo_url: str | None = Field(default=None, max_length=500)
    guardian_name: str | None = None
    guardian_phone: str | None = None

    @field_validator("first_name", "last_name", "phone", "card_number", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("profession", "photo_url", "guardian_name", "guardian_phone", mode="before")
    @classmethod
    def _normalize_optional_text(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        return normalized or None

    @field_validator("annual_fee", mode="before")
    @classmethod
    def _default_blank_fee(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return DEFAULT_ANNUAL_FEE
        return value

    @field_validator("join_date", mode="before")
    @classmethod
    def _default_blank_join_date(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return date.today()
        return value

    @field_validator("photo_url")
    @classmethod
    def _validate_photo_url_scheme(cls, value: str | None) -> str | None:
        if value is None:
            return None

        parsed = urlsplit(value)
        if parsed.scheme in {"http", "https"} and parsed.netloc:
            return value
        if not parsed.scheme and value.startswith("/") and not value.startswith("//"):
            return value

        raise ValueError("photo_url must be a valid http(s) URL or root-relative path")

    @property
    def is_minor(self) -> bool:
        return self.gender == Gender.ENFANT


class MemberCreateInput(MemberBaseInput):
    """Member create form payload."""


class MemberUpdateInput(MemberBaseInput):
    """Member update form payload."""


class MemberFilterInput(BaseModel):
    """Query-string filters of the member list."""

    q: str = ""
    gender: Gender | None = None
    role: MemberRole | None = None
    page: int = Field(default=1)

    @field_validator("q", mode="before")
    @classmethod
    def _strip_query(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("gender", "role", mode="before")
    @classmethod
    def _all_means_no_filter(cls, value: object) -> object:
        if isinstance(value, str) and value.strip() in {"", "all"}:
            return None
        return value

    @field_validator("page", mode="before")
    @classmethod
    def _lenient_page(cls, value: object) -> object:
        if isinstance(value, str):
            return int(value) if value.strip().isdigit() else 1
        return value
