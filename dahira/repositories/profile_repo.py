"""Database access helpers for dashboard profiles.

Every helper converts driver failures into ``ProfileStoreError`` so callers
can pick between surfacing the error and falling back.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from dahira.core.exceptions import ProfileStoreError
from dahira.models.profile import Profile


def get_profile_by_id(session: Session, profile_id: str) -> Profile | None:
    """Return profile by identity id."""

    try:
        return session.get(Profile, profile_id)
    except SQLAlchemyError as exc:
        session.rollback()
        raise ProfileStoreError.from_sqlalchemy(exc) from exc


def get_profile_by_username(session: Session, username: str) -> Profile | None:
    """Return profile by case-insensitive username."""

    try:
        return session.exec(
            select(Profile).where(func.lower(col(Profile.username)) == username.strip().lower())
        ).first()
    except SQLAlchemyError as exc:
        session.rollback()
        raise ProfileStoreError.from_sqlalchemy(exc) from exc


def list_profiles(session: Session) -> Sequence[Profile]:
    """Return all profiles sorted by display name."""

    try:
        return session.exec(
            select(Profile).order_by(col(Profile.full_name).asc(), col(Profile.username).asc())
        ).all()
    except SQLAlchemyError as exc:
        session.rollback()
        raise ProfileStoreError.from_sqlalchemy(exc) from exc


def save_profile(session: Session, profile: Profile) -> Profile:
    """Persist a new or updated profile."""

    try:
        session.add(profile)
        session.commit()
        session.refresh(profile)
    except SQLAlchemyError as exc:
        session.rollback()
        raise ProfileStoreError.from_sqlalchemy(exc) from exc
    return profile


def delete_profile(session: Session, profile: Profile) -> None:
    """Delete a profile row."""

    try:
        session.delete(profile)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise ProfileStoreError.from_sqlalchemy(exc) from exc
