"""Self-service profile updates."""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlmodel import Session

from dahira.core.constants import MIN_PASSWORD_LENGTH
from dahira.core.exceptions import AuthProviderError, ProfileStoreError
from dahira.models.profile import Profile
from dahira.repositories import profile_repo
from dahira.schemas.user import ProfileUpdateInput
from dahira.services import auth_provider
from dahira.services.session_resolver import CurrentUser

logger = logging.getLogger(__name__)

PASSWORD_MISMATCH_MESSAGE = "Les mots de passe ne correspondent pas."
INVALID_PROFILE_MESSAGE = "Veuillez vérifier les informations du profil."
PROFILE_SAVE_FAILED_MESSAGE = "Le profil n'a pas pu être enregistré. Veuillez réessayer."


def parse_profile_input(
    *,
    full_name: str,
    photo_url: str | None,
    password: str | None,
    confirm_password: str | None,
) -> ProfileUpdateInput | None:
    try:
        return ProfileUpdateInput(
            full_name=full_name,
            photo_url=photo_url,
            password=password,
            confirm_password=confirm_password,
        )
    except ValidationError:
        return None


def update_own_profile(
    session: Session,
    current_user: CurrentUser,
    input_data: ProfileUpdateInput,
) -> tuple[Profile | None, str | None]:
    """Save the signed-in user's name, photo and optional new password."""

    if input_data.password is not None:
        if input_data.password != input_data.confirm_password:
            return None, PASSWORD_MISMATCH_MESSAGE
        if len(input_data.password) < MIN_PASSWORD_LENGTH:
            return None, (
                f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères."
            )

    try:
        profile = profile_repo.get_profile_by_id(session, current_user.id)
        if profile is None:
            profile = current_user.as_profile()
        profile.full_name = input_data.full_name
        profile.photo_url = input_data.photo_url
        profile = profile_repo.save_profile(session, profile)
    except ProfileStoreError as exc:
        logger.warning("Profile %s could not be saved: %s", current_user.id, exc)
        return None, PROFILE_SAVE_FAILED_MESSAGE

    if input_data.password is not None:
        try:
            auth_provider.update_password(session, current_user.id, input_data.password)
        except AuthProviderError as exc:
            return profile, exc.message

    return profile, None
