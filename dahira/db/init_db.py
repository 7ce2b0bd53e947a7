"""Database initialization utilities for local development and tests."""

from __future__ import annotations

import logging

from sqlmodel import Session, SQLModel

from dahira.core.config import get_settings
from dahira.core.constants import SUPER_ADMIN_FULL_NAME, UserRole
from dahira.db.session import engine
from dahira.models import Profile
from dahira.services import auth_provider

logger = logging.getLogger(__name__)


def create_db_and_tables() -> None:
    """Create all tables from SQLModel metadata."""

    SQLModel.metadata.create_all(engine)


def create_initial_super_admin() -> None:
    """Seed the super-admin identity and profile when not present."""

    settings = get_settings()
    email = settings.normalized_super_admin_email

    with Session(engine) as session:
        identity = auth_provider.get_identity_by_email(session, email)
        if identity is None:
            identity = auth_provider.sign_up(session, email, settings.super_admin_password)
            logger.info("Seeded super-admin identity %s", email)

        if session.get(Profile, identity.id) is not None:
            return

        session.add(
            Profile(
                id=identity.id,
                username=email,
                full_name=SUPER_ADMIN_FULL_NAME,
                role=UserRole.SUPER_ADMIN,
            )
        )
        session.commit()


def init_db() -> None:
    """Initialize tables and seed the super-admin account."""

    create_db_and_tables()
    create_initial_super_admin()


if __name__ == "__main__":
    init_db()
