"""Member model."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Column, Date, DateTime, Integer, String
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from dahira.core.constants import DEFAULT_ANNUAL_FEE, Gender, MemberRole, enum_values, utcnow


class Member(SQLModel, table=True):
    """Dahira member registry table."""

    __tablename__ = "member"

    id: int | None = Field(default=None, primary_key=True)
    first_name: str = Field(sa_column=Column(String(100), nullable=False))
    last_name: str = Field(sa_column=Column(String(100), nullable=False))
    phone: str = Field(default="", sa_column=Column(String(20), nullable=False, default=""))
    role: MemberRole = Field(
        sa_column=Column(
            SAEnum(
                MemberRole,
                name="member_role",
                native_enum=False,
                values_callable=enum_values,
            ),
            nullable=False,
        )
    )
    gender: Gender = Field(
        sa_column=Column(
            SAEnum(
                Gender,
                name="member_gender",
                native_enum=False,
                values_callable=enum_values,
            ),
            nullable=False,
        )
    )
    annual_fee: int = Field(
        default=DEFAULT_ANNUAL_FEE,
        sa_column=Column(Integer, nullable=False, default=DEFAULT_ANNUAL_FEE),
    )
    card_number: str = Field(sa_column=Column(String(50), unique=True, nullable=False))
    join_date: date = Field(sa_column=Column(Date, nullable=False))
    profession: str | None = Field(default=None, sa_column=Column(String(150), nullable=True))
    photo_url: str | None = Field(default=None, sa_column=Column(String(500), nullable=True))
    guardian_name: str | None = Field(default=None, sa_column=Column(String(200), nullable=True))
    guardian_phone: str | None = Field(default=None, sa_column=Column(String(20), nullable=True))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, onupdate=utcnow),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()
