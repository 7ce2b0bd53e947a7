"""Access management for super-admins.

Accounts span two stores: the credential lives with the auth provider, the
display name and role live in the profile table. Creation writes both in
that order, deletion only removes the profile.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import ValidationError
from sqlmodel import Session

from dahira.core.constants import MIN_PASSWORD_LENGTH
from dahira.core.exceptions import AuthProviderError, ProfileStoreError
from dahira.models.profile import Profile
from dahira.repositories import profile_repo
from dahira.schemas.user import AdminUserCreateInput, AdminUserUpdateInput
from dahira.services import auth_provider
from dahira.services.session_resolver import CurrentUser, list_profiles_or_current

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Le nom complet, l'e-mail et le mot de passe sont requis."
INVALID_UPDATE_MESSAGE = "Le nom complet et le rôle sont requis."
DUPLICATE_USERNAME_MESSAGE = "Cet identifiant est déjà utilisé."
USER_NOT_FOUND_MESSAGE = "Utilisateur introuvable."
SELF_DELETE_MESSAGE = "Vous ne pouvez pas supprimer votre propre compte."
PROFILE_STORE_MESSAGE = "Le service des profils est indisponible. Veuillez réessayer."
PROFILE_NOT_SAVED_WARNING = (
    "Compte créé, mais le profil n'a pas pu être enregistré. "
    "L'utilisateur pourra se connecter avec le rôle Administrateur par défaut."
)
WEAK_PASSWORD_MESSAGE = (
    f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères."
)


@dataclass(frozen=True)
class CreateUserResult:
    """Outcome of an account creation.

    ``error_message`` means nothing was created. ``warning_message`` means the
    credential exists but its profile row is missing.
    """

    profile: Profile | None = None
    error_message: str | None = None
    warning_message: str | None = None


def parse_user_create_input(
    *,
    full_name: str,
    email: str,
    password: str,
    role: str,
) -> AdminUserCreateInput | None:
    """Return validated create payload or ``None``."""

    try:
        return AdminUserCreateInput(full_name=full_name, email=email, password=password, role=role)
    except ValidationError:
        return None


def parse_user_update_input(
    *,
    full_name: str,
    role: str,
    password: str | None,
) -> AdminUserUpdateInput | None:
    """Return validated update payload or ``None``."""

    try:
        return AdminUserUpdateInput(full_name=full_name, role=role, password=password)
    except ValidationError:
        return None


def list_users(session: Session, current_user: CurrentUser) -> Sequence[Profile]:
    """Return profiles sorted by display name."""

    return list_profiles_or_current(session, current_user)


def create_user(session: Session, input_data: AdminUserCreateInput) -> CreateUserResult:
    """Provision a credential, then write its profile."""

    try:
        if profile_repo.get_profile_by_username(session, input_data.email) is not None:
            return CreateUserResult(error_message=DUPLICATE_USERNAME_MESSAGE)
    except ProfileStoreError as exc:
        logger.warning("Username check skipped, profile store failed: %s", exc)

    try:
        identity = auth_provider.provision_identity(session, input_data.email, input_data.password)
    except AuthProviderError as exc:
        logger.warning("Auth provider refused account %s: %s", input_data.email, exc)
        return CreateUserResult(error_message=exc.message)

    profile = Profile(
        id=identity.id,
        username=identity.email,
        full_name=input_data.full_name,
        role=input_data.role,
    )
    try:
        profile = profile_repo.save_profile(session, profile)
    except ProfileStoreError as exc:
        logger.warning("Account %s created without profile row: %s", identity.email, exc)
        return CreateUserResult(warning_message=PROFILE_NOT_SAVED_WARNING)

    logger.info("Created %s account %s", profile.role, profile.username)
    return CreateUserResult(profile=profile)


def update_user(
    session: Session,
    profile_id: str,
    input_data: AdminUserUpdateInput,
) -> tuple[Profile | None, str | None]:
    """Update display name, role and optionally the password.

    The username never changes here. A credential whose profile row is
    missing gets one written, keyed on the credential's email.
    """

    if input_data.password is not None and len(input_data.password) < MIN_PASSWORD_LENGTH:
        return None, WEAK_PASSWORD_MESSAGE

    try:
        profile = profile_repo.get_profile_by_id(session, profile_id)
    except ProfileStoreError as exc:
        logger.warning("Profile %s could not be read for update: %s", profile_id, exc)
        return None, PROFILE_STORE_MESSAGE

    if profile is None:
        identity = auth_provider.get_identity(session, profile_id)
        if identity is None:
            return None, USER_NOT_FOUND_MESSAGE
        profile = Profile(id=identity.id, username=identity.email, full_name=input_data.full_name)

    profile.full_name = input_data.full_name
    profile.role = input_data.role
    try:
        profile = profile_repo.save_profile(session, profile)
    except ProfileStoreError as exc:
        logger.warning("Profile %s could not be saved: %s", profile_id, exc)
        return None, PROFILE_STORE_MESSAGE

    if input_data.password is not None:
        try:
            auth_provider.update_password(session, profile_id, input_data.password)
        except AuthProviderError as exc:
            return profile, exc.message
        logger.info("Password reset for %s", profile.username)

    return profile, None


def delete_user(session: Session, profile_id: str, current_user: CurrentUser) -> str | None:
    """Delete a profile row; the credential itself is left in place."""

    if profile_id == current_user.id:
        return SELF_DELETE_MESSAGE

    try:
        profile = profile_repo.get_profile_by_id(session, profile_id)
        if profile is None:
            return USER_NOT_FOUND_MESSAGE
        username = profile.username
        profile_repo.delete_profile(session, profile)
    except ProfileStoreError as exc:
        logger.warning("Profile %s could not be deleted: %s", profile_id, exc)
        return PROFILE_STORE_MESSAGE

    logger.info("Deleted profile of %s; auth identity kept", username)
    return None
