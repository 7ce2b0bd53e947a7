"""Dashboard user profile model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from dahira.core.constants import UserRole, enum_values, utcnow


class Profile(SQLModel, table=True):
    """Application profile keyed by the auth identity id."""

    __tablename__ = "profile"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    username: str = Field(default="", sa_column=Column(String(255), nullable=False, default=""))
    full_name: str = Field(sa_column=Column(String(150), nullable=False))
    role: UserRole = Field(
        default=UserRole.ADMIN,
        sa_column=Column(
            SAEnum(
                UserRole,
                name="user_role",
                native_enum=False,
                values_callable=enum_values,
            ),
            nullable=False,
        ),
    )
    photo_url: str | None = Field(default=None, sa_column=Column(String(500), nullable=True))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=utcnow),
    )
