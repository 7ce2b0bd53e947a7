"""Authentication, session and CSRF helper services."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
from hmac import compare_digest
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlmodel import Session

from dahira.db.session import get_session
from dahira.models.auth_identity import AuthIdentity
from dahira.schemas.auth import CsrfInput, LoginInput
from dahira.services import auth_provider
from dahira.services.session_resolver import CurrentUser, resolve_current_user

logger = logging.getLogger(__name__)

SESSION_IDENTITY_ID_KEY = "identity_id"
SESSION_EMAIL_KEY = "email"
SESSION_CSRF_TOKEN_KEY = "csrf_token"
SESSION_FLASH_KEY = "flash"


def decode_session_cookie(secret_key: str, raw_cookie: str | None) -> dict[str, Any]:
    """Decode and validate signed session cookie payload."""

    if raw_cookie is None or "." not in raw_cookie:
        return {}
    encoded_payload, signature = raw_cookie.rsplit(".", 1)
    if not compare_digest(_sign_payload(secret_key, encoded_payload), signature):
        return {}
    try:
        padding = "=" * (-len(encoded_payload) % 4)
        payload = base64.urlsafe_b64decode(f"{encoded_payload}{padding}".encode())
        data = json.loads(payload.decode("utf-8"))
    except (ValueError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(key): value for key, value in data.items()}


def encode_session_cookie(secret_key: str, session_data: dict[str, Any]) -> str:
    """Encode session dict and sign it for cookie storage."""

    raw_payload = json.dumps(session_data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    encoded_payload = base64.urlsafe_b64encode(raw_payload).decode("utf-8").rstrip("=")
    signature = _sign_payload(secret_key, encoded_payload)
    return f"{encoded_payload}.{signature}"


def has_identity(session_data: dict[str, Any]) -> bool:
    identity_id = session_data.get(SESSION_IDENTITY_ID_KEY)
    return isinstance(identity_id, str) and bool(identity_id)


def parse_login_input(email: str, password: str, csrf_token: str) -> LoginInput | None:
    """Return validated login input or ``None`` for invalid payload."""

    try:
        return LoginInput(email=email, password=password, csrf_token=csrf_token)
    except ValidationError:
        return None


def parse_csrf_input(csrf_token: str) -> CsrfInput | None:
    """Return validated CSRF input or ``None`` for invalid payload."""

    try:
        return CsrfInput(csrf_token=csrf_token)
    except ValidationError:
        return None


def authenticate(session: Session, email: str, password: str) -> AuthIdentity | None:
    """Check credentials against the auth provider."""

    identity = auth_provider.sign_in_with_password(session, email, password)
    if identity is None:
        logger.info("Rejected sign-in for %s", auth_provider.normalize_email(email))
        return None
    logger.info("Signed in %s", identity.email)
    return identity


def get_current_user(request: Request, session: Session) -> CurrentUser | None:
    """Rebuild the current user from the session cookie and the stores."""

    identity_id = request.session.get(SESSION_IDENTITY_ID_KEY)
    if not isinstance(identity_id, str) or not identity_id:
        return None
    identity = auth_provider.get_identity(session, identity_id)
    if identity is None:
        return None
    return resolve_current_user(session, identity.id, identity.email)


def require_current_user(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
) -> CurrentUser:
    """FastAPI dependency returning the signed-in user or redirecting to login."""

    current_user = get_current_user(request, session)
    if current_user is None:
        request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            headers={"Location": "/admin/login"},
        )
    return current_user


def require_super_admin(
    current_user: Annotated[CurrentUser, Depends(require_current_user)],
) -> CurrentUser:
    """FastAPI dependency hiding super-admin pages from other accounts."""

    if not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            headers={"Location": "/admin"},
        )
    return current_user


def login(request: Request, identity: AuthIdentity) -> None:
    """Persist login state in session."""

    request.session.clear()
    request.session[SESSION_IDENTITY_ID_KEY] = identity.id
    request.session[SESSION_EMAIL_KEY] = identity.email
    rotate_csrf_token(request)


def logout(request: Request) -> None:
    """Clear the session for logout."""

    request.session.clear()


def get_or_create_csrf_token(request: Request) -> str:
    """Return existing CSRF token or issue a new one."""

    csrf_token = request.session.get(SESSION_CSRF_TOKEN_KEY)
    if isinstance(csrf_token, str) and csrf_token:
        return csrf_token
    return rotate_csrf_token(request)


def rotate_csrf_token(request: Request) -> str:
    """Generate and store a fresh CSRF token."""

    csrf_token = secrets.token_urlsafe(32)
    request.session[SESSION_CSRF_TOKEN_KEY] = csrf_token
    return csrf_token


def validate_csrf_token(request: Request, csrf_token: str) -> bool:
    """Return whether submitted CSRF token matches server token."""

    validated_input = parse_csrf_input(csrf_token)
    if validated_input is None:
        return False
    session_token = request.session.get(SESSION_CSRF_TOKEN_KEY)
    if not isinstance(session_token, str) or not session_token:
        return False
    return compare_digest(session_token, validated_input.csrf_token)


def validate_or_raise_csrf(request: Request, csrf_token: str) -> None:
    """Raise 403 when the submitted CSRF token does not match."""

    if not validate_csrf_token(request, csrf_token):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid CSRF token")


def flash(request: Request, message: str) -> None:
    """Store a one-shot notice shown on the next rendered page."""

    request.session[SESSION_FLASH_KEY] = message


def pop_flash(request: Request) -> str | None:
    message = request.session.pop(SESSION_FLASH_KEY, None)
    return message if isinstance(message, str) else None


def _sign_payload(secret_key: str, payload: str) -> str:
    digest = hmac.new(secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()
