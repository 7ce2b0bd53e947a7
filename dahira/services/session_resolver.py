"""Resolve the dashboard user behind an authenticated identity.

Resolution order:

1. The configured super-admin address gets a synthesized super-admin context
   without touching the profile table. This works around a profile-table
   permission policy that fails with "infinite recursion detected in policy"
   on some deployments; the real fix belongs in that policy.
2. Otherwise the profile row keyed by the identity id is used.
3. A missing row or a failing read yields a degraded administrator context,
   so valid credentials are never locked out by the profile store.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlmodel import Session

from dahira.core.config import get_settings
from dahira.core.constants import FALLBACK_FULL_NAME, SUPER_ADMIN_FULL_NAME, UserRole
from dahira.core.exceptions import ProfileStoreError
from dahira.models.profile import Profile
from dahira.repositories import profile_repo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Per-request view of the signed-in account."""

    id: str
    username: str
    full_name: str
    role: UserRole
    photo_url: str | None = None
    degraded: bool = False

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def initial(self) -> str:
        return (self.full_name[:1] or self.username[:1]).upper()

    def as_profile(self) -> Profile:
        """Return an unsaved profile row carrying this context."""

        return Profile(
            id=self.id,
            username=self.username,
            full_name=self.full_name,
            role=self.role,
            photo_url=self.photo_url,
        )


def is_super_admin_email(email: str) -> bool:
    return email.strip().lower() == get_settings().normalized_super_admin_email


def resolve_current_user(session: Session, identity_id: str, email: str) -> CurrentUser:
    """Map an authenticated identity to its dashboard context."""

    if is_super_admin_email(email):
        logger.debug("Super-admin address %s resolved without profile lookup", email)
        return CurrentUser(
            id=identity_id,
            username=email,
            full_name=SUPER_ADMIN_FULL_NAME,
            role=UserRole.SUPER_ADMIN,
        )

    try:
        profile = profile_repo.get_profile_by_id(session, identity_id)
    except ProfileStoreError as exc:
        if exc.is_policy_recursion:
            logger.error(
                "Profile policy recursion while resolving %s; using fallback role",
                identity_id,
            )
        else:
            logger.warning("Profile lookup failed for %s: %s", identity_id, exc)
        return _fallback_user(identity_id, email)

    if profile is None:
        logger.warning("No profile row for identity %s; using fallback role", identity_id)
        return _fallback_user(identity_id, email)

    return CurrentUser(
        id=profile.id,
        username=profile.username or email,
        full_name=profile.full_name,
        role=profile.role,
        photo_url=profile.photo_url,
    )


def list_profiles_or_current(session: Session, current_user: CurrentUser) -> Sequence[Profile]:
    """Return all profiles, or only the current user when the store fails."""

    try:
        return profile_repo.list_profiles(session)
    except ProfileStoreError as exc:
        logger.warning("Profile listing failed, showing current user only: %s", exc)
        return [current_user.as_profile()]


def _fallback_user(identity_id: str, email: str) -> CurrentUser:
    return CurrentUser(
        id=identity_id,
        username=email,
        full_name=FALLBACK_FULL_NAME,
        role=UserRole.ADMIN,
        degraded=True,
    )
