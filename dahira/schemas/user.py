"""Dashboard account form schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dahira.core.constants import UserRole


class AdminUserCreateInput(BaseModel):
    """Account creation form of the access management page."""

    full_name: str = Field(min_length=1, max_length=150)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)
    role: UserRole = UserRole.ADMIN

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class AdminUserUpdateInput(BaseModel):
    """Account edit form; the username is not part of it."""

    full_name: str = Field(min_length=1, max_length=150)
    role: UserRole
    password: str | None = Field(default=None, max_length=128)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password_means_unchanged(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProfileUpdateInput(BaseModel):
    """Self-service profile form."""

    full_name: str = Field(min_length=1, max_length=150)
    photo_url: str | None = Field(default=None, max_length=500)
    password: str | None = Field(default=None, max_length=128)
    confirm_password: str | None = Field(default=None, max_length=128)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("photo_url", "password", "confirm_password", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
