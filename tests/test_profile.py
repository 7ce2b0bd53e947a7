"""Self-service profile page."""

from __future__ import annotations

from sqlmodel import Session, select

from dahira.models.auth_identity import AuthIdentity
from dahira.models.profile import Profile
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, AsgiClient, add_identity


def _profile_form(csrf_token: str, **overrides: str) -> dict[str, str]:
    form = {
        "csrf_token": csrf_token,
        "full_name": "Fatou Ndiaye",
        "photo_url": "",
        "password": "",
        "confirm_password": "",
    }
    form.update(overrides)
    return form


def test_profile_update_changes_name_and_photo(admin_client: AsgiClient, app_and_engine):
    _, engine = app_and_engine
    csrf_token = admin_client.csrf_token("/admin/profile")

    status_code, headers, _ = admin_client.post(
        "/admin/profile",
        _profile_form(
            csrf_token,
            full_name="Fatou Ndiaye Sall",
            photo_url="https://example.org/fatou.png",
        ),
    )
    assert status_code == 303
    assert headers["location"] == "/admin/profile"

    status_code, _, body = admin_client.get("/admin/profile")
    assert status_code == 200
    assert "Profil mis à jour avec succès !" in body
    assert 'value="Fatou Ndiaye Sall"' in body

    with Session(engine) as session:
        profile = session.exec(select(Profile).where(Profile.username == ADMIN_EMAIL)).one()
    assert profile.photo_url == "https://example.org/fatou.png"


def test_profile_password_change_requires_matching_confirmation(
    admin_client: AsgiClient, app_and_engine
):
    app, _ = app_and_engine
    csrf_token = admin_client.csrf_token("/admin/profile")

    status_code, _, body = admin_client.post(
        "/admin/profile",
        _profile_form(csrf_token, password="nouveau-secret", confirm_password="autre-secret"),
    )
    assert status_code == 400
    assert "Les mots de passe ne correspondent pas." in body

    status_code, _, body = admin_client.post(
        "/admin/profile",
        _profile_form(csrf_token, password="abc", confirm_password="abc"),
    )
    assert status_code == 400
    assert "Le mot de passe doit contenir au moins 6 caractères." in body

    status_code, _, _ = admin_client.post(
        "/admin/profile",
        _profile_form(csrf_token, password="nouveau-secret", confirm_password="nouveau-secret"),
    )
    assert status_code == 303

    other_client = AsgiClient(app)
    status_code, _, _ = other_client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert status_code == 401
    status_code, _, _ = other_client.login(ADMIN_EMAIL, "nouveau-secret")
    assert status_code == 303


def test_profile_update_rejects_blank_name(admin_client: AsgiClient):
    csrf_token = admin_client.csrf_token("/admin/profile")

    status_code, _, body = admin_client.post("/admin/profile", _profile_form(csrf_token, full_name=""))

    assert status_code == 400
    assert "Veuillez vérifier les informations du profil." in body


def test_profile_update_rejects_csrf_mismatch(admin_client: AsgiClient):
    status_code, _, _ = admin_client.post("/admin/profile", _profile_form("forged-token"))

    assert status_code == 403


def test_degraded_user_saving_profile_creates_the_row(client: AsgiClient, app_and_engine):
    _, engine = app_and_engine
    with Session(engine) as session:
        identity_id = add_identity(session, "sans-profil@dahira.sn", "secret-123").id
    client.login("sans-profil@dahira.sn", "secret-123")

    _, _, body = client.get("/admin/profile")
    assert "un rôle par défaut vous est attribué" in body
    csrf_token = client.csrf_token("/admin/profile")

    status_code, _, _ = client.post(
        "/admin/profile",
        _profile_form(csrf_token, full_name="Ousmane Gueye"),
    )
    assert status_code == 303

    with Session(engine) as session:
        profile = session.get(Profile, identity_id)
        identity = session.get(AuthIdentity, identity_id)
    assert profile is not None
    assert profile.full_name == "Ousmane Gueye"
    assert profile.username == identity.email

    _, _, body = client.get("/admin/profile")
    assert "un rôle par défaut vous est attribué" not in body
