"""Credential store standing in for the external authentication service.

Identities live in their own table and are addressed by a uuid string. The
dashboard never reads passwords back; it only asks this module to sign in,
sign up or change a password, the same surface a hosted auth API offers.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from dahira.core.constants import MIN_PASSWORD_LENGTH, utcnow
from dahira.core.exceptions import AuthProviderError, driver_error_code
from dahira.core.security import hash_password, verify_password
from dahira.models.auth_identity import AuthIdentity

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_identity(session: Session, identity_id: str) -> AuthIdentity | None:
    """Return identity by id."""

    return session.get(AuthIdentity, identity_id)


def get_identity_by_email(session: Session, email: str) -> AuthIdentity | None:
    """Return identity by normalized email."""

    return session.exec(
        select(AuthIdentity).where(col(AuthIdentity.email) == normalize_email(email))
    ).first()


def sign_in_with_password(session: Session, email: str, password: str) -> AuthIdentity | None:
    """Return the identity matching the credentials, or ``None``."""

    identity = get_identity_by_email(session, email)
    if identity is None or not verify_password(password, identity.password_hash):
        return None

    identity.last_sign_in_at = utcnow()
    session.add(identity)
    session.commit()
    session.refresh(identity)
    return identity


def sign_up(session: Session, email: str, password: str) -> AuthIdentity:
    """Create a new identity or raise ``AuthProviderError``."""

    normalized_email = normalize_email(email)
    if not normalized_email or "@" not in normalized_email:
        raise AuthProviderError("Adresse e-mail invalide.", code="invalid_email")
    _ensure_password_strength(password)
    if get_identity_by_email(session, normalized_email) is not None:
        raise AuthProviderError(
            "Un compte existe déjà pour cet e-mail.",
            code="user_already_exists",
        )

    identity = AuthIdentity(email=normalized_email, password_hash=hash_password(password))
    try:
        session.add(identity)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise AuthProviderError(
            "Un compte existe déjà pour cet e-mail.",
            code="user_already_exists",
        ) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise AuthProviderError(
            "Le service d'authentification est indisponible.",
            code=driver_error_code(exc),
        ) from exc

    session.refresh(identity)
    return identity


def provision_identity(session: Session, email: str, password: str) -> AuthIdentity:
    """Sign up a new identity on its own session.

    The caller's session keeps its own transaction, so provisioning an account
    neither commits nor rolls back the acting administrator's pending work,
    and a later failure on the caller's session cannot undo the signup.
    """

    with Session(session.get_bind(), expire_on_commit=False) as isolated_session:
        identity = sign_up(isolated_session, email, password)
    logger.info("Provisioned auth identity %s for %s", identity.id, identity.email)
    return identity


def update_password(session: Session, identity_id: str, password: str) -> None:
    """Replace the password of an identity or raise ``AuthProviderError``."""

    _ensure_password_strength(password)
    identity = get_identity(session, identity_id)
    if identity is None:
        raise AuthProviderError("Compte d'authentification introuvable.", code="user_not_found")

    identity.password_hash = hash_password(password)
    session.add(identity)
    session.commit()


def _ensure_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthProviderError(
            f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères.",
            code="weak_password",
        )
