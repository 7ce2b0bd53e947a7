"""Auth provider identity model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String
from sqlmodel import Field, SQLModel

from dahira.core.constants import utcnow


def _new_identity_id() -> str:
    return str(uuid4())


class AuthIdentity(SQLModel, table=True):
    """Sign-in credentials, kept apart from the profile table."""

    __tablename__ = "auth_identity"

    id: str = Field(
        default_factory=_new_identity_id,
        sa_column=Column(String(36), primary_key=True),
    )
    email: str = Field(sa_column=Column(String(255), unique=True, nullable=False))
    password_hash: str = Field(sa_column=Column(String(255), nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    last_sign_in_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
