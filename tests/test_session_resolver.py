"""Current-user resolution and its fallbacks when the profile store fails."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import DBAPIError, InvalidRequestError
from sqlmodel import Session

from dahira.core.config import get_settings
from dahira.core.constants import UserRole
from dahira.core.exceptions import POLICY_RECURSION_CODE, ProfileStoreError
from dahira.models.profile import Profile
from dahira.repositories import profile_repo
from dahira.services import session_resolver
from tests.helpers import AsgiClient, add_identity


class PolicyRecursionError(Exception):
    pgcode = POLICY_RECURSION_CODE


class ConnectionLostError(Exception):
    sqlstate = "08006"


def _policy_recursion() -> ProfileStoreError:
    return ProfileStoreError.from_sqlalchemy(
        DBAPIError(
            "SELECT * FROM profile",
            {},
            PolicyRecursionError('infinite recursion detected in policy for relation "profile"'),
        )
    )


def _raise_store_error(error: ProfileStoreError):
    def failing_lookup(*args, **kwargs):
        raise error

    return failing_lookup


def test_store_error_carries_driver_code():
    recursion = _policy_recursion()
    assert recursion.code == POLICY_RECURSION_CODE
    assert recursion.is_policy_recursion
    assert "infinite recursion detected in policy" in recursion.message

    lost = ProfileStoreError.from_sqlalchemy(
        DBAPIError("SELECT 1", {}, ConnectionLostError("server closed the connection"))
    )
    assert lost.code == "08006"
    assert not lost.is_policy_recursion

    orm_error = ProfileStoreError.from_sqlalchemy(InvalidRequestError("bad request"))
    assert orm_error.code is None
    assert orm_error.message.startswith("bad request")


def test_super_admin_email_is_matched_case_insensitively():
    email = get_settings().super_admin_email

    assert session_resolver.is_super_admin_email(f"  {email.upper()} ")
    assert not session_resolver.is_super_admin_email("admin@dahira.sn")


def test_super_admin_resolves_without_profile_store(session: Session, monkeypatch):
    monkeypatch.setattr(profile_repo, "get_profile_by_id", _raise_store_error(_policy_recursion()))

    current_user = session_resolver.resolve_current_user(
        session, "identity-1", get_settings().super_admin_email
    )

    assert current_user.role == UserRole.SUPER_ADMIN
    assert current_user.is_super_admin
    assert current_user.full_name == "Super Administrateur"
    assert not current_user.degraded


def test_profile_row_defines_the_current_user(session: Session):
    session.add(
        Profile(
            id="identity-2",
            username="",
            full_name="Cheikh Mbaye",
            role=UserRole.SUPER_ADMIN,
            photo_url="https://example.org/cheikh.png",
        )
    )
    session.commit()

    current_user = session_resolver.resolve_current_user(session, "identity-2", "cheikh@dahira.sn")

    assert current_user.username == "cheikh@dahira.sn"
    assert current_user.full_name == "Cheikh Mbaye"
    assert current_user.is_super_admin
    assert current_user.initial == "C"
    assert current_user.photo_url == "https://example.org/cheikh.png"


def test_missing_profile_falls_back_to_administrator(session: Session):
    current_user = session_resolver.resolve_current_user(session, "identity-3", "awa@dahira.sn")

    assert current_user.full_name == "Utilisateur"
    assert current_user.role == UserRole.ADMIN
    assert current_user.username == "awa@dahira.sn"
    assert current_user.degraded


@pytest.mark.parametrize(
    "error",
    [_policy_recursion(), ProfileStoreError("connection refused")],
)
def test_failing_profile_store_falls_back_to_administrator(
    session: Session, monkeypatch, error: ProfileStoreError
):
    monkeypatch.setattr(profile_repo, "get_profile_by_id", _raise_store_error(error))

    current_user = session_resolver.resolve_current_user(session, "identity-4", "awa@dahira.sn")

    assert current_user.role == UserRole.ADMIN
    assert current_user.degraded
    assert not current_user.is_super_admin


def test_profile_listing_falls_back_to_current_user(session: Session, monkeypatch):
    current_user = session_resolver.resolve_current_user(session, "identity-5", "awa@dahira.sn")
    monkeypatch.setattr(profile_repo, "list_profiles", _raise_store_error(_policy_recursion()))

    profiles = session_resolver.list_profiles_or_current(session, current_user)

    assert [(profile.id, profile.username) for profile in profiles] == [
        ("identity-5", "awa@dahira.sn")
    ]


def test_sign_in_without_profile_gets_degraded_dashboard(client: AsgiClient, app_and_engine):
    _, engine = app_and_engine
    with Session(engine) as session:
        add_identity(session, "sans-profil@dahira.sn", "secret-123")

    status_code, headers, _ = client.login("sans-profil@dahira.sn", "secret-123")
    assert status_code == 303
    assert headers["location"] == "/admin"

    status_code, _, body = client.get("/admin")
    assert status_code == 200
    assert "Utilisateur" in body
    assert "Administrateur" in body
    assert "Gestion Accès" not in body

    status_code, headers, _ = client.get("/admin/users")
    assert status_code == 303
    assert headers["location"] == "/admin"


def test_sign_in_survives_profile_policy_failure(
    client: AsgiClient, app_and_engine, monkeypatch
):
    monkeypatch.setattr(profile_repo, "get_profile_by_id", _raise_store_error(_policy_recursion()))

    client.login("admin@dahira.sn", "admin-password")
    status_code, _, body = client.get("/admin")

    assert status_code == 200
    assert "Utilisateur" in body
    assert "Fatou Ndiaye" not in body

    client.cookies.clear()
    client.login(get_settings().super_admin_email, "super-password")
    status_code, _, body = client.get("/admin/users")

    assert status_code == 200
    assert "Super Administrateur" in body
