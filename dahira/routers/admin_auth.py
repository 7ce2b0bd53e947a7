"""Admin authentication and dashboard routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from dahira.db.session import get_session
from dahira.routers.rendering import render_page
from dahira.services import member_service, stats_service
from dahira.services.auth_service import (
    authenticate,
    get_current_user,
    login,
    logout,
    parse_login_input,
    require_current_user,
    validate_csrf_token,
)
from dahira.services.session_resolver import CurrentUser

router = APIRouter(prefix="/admin")

LOGIN_FAILED_MESSAGE = "Identifiant ou mot de passe incorrect"
LOGIN_INVALID_MESSAGE = "Veuillez saisir votre e-mail et votre mot de passe."


def _render_login_page(request: Request, error_message: str | None = None, status_code: int = 200):
    return render_page(
        request,
        "admin/login.html",
        {"error_message": error_message},
        status_code=status_code,
    )


@router.get("/login")
def login_page(request: Request, session: Annotated[Session, Depends(get_session)]):
    if get_current_user(request, session) is not None:
        return RedirectResponse(url="/admin", status_code=status.HTTP_303_SEE_OTHER)
    return _render_login_page(request)


@router.post("/login")
def login_submit(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
    csrf_token: Annotated[str, Form()],
):
    if not validate_csrf_token(request, csrf_token):
        raise HTTPException(status_code=403, detail="Invalid CSRF token")

    login_input = parse_login_input(email=email, password=password, csrf_token=csrf_token)
    if login_input is None:
        return _render_login_page(
            request,
            error_message=LOGIN_INVALID_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    identity = authenticate(session, email=login_input.email, password=login_input.password)
    if identity is None:
        return _render_login_page(
            request,
            error_message=LOGIN_FAILED_MESSAGE,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    login(request, identity)
    return RedirectResponse(url="/admin", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
def logout_submit(request: Request, csrf_token: Annotated[str, Form()]):
    if not validate_csrf_token(request, csrf_token):
        raise HTTPException(status_code=403, detail="Invalid CSRF token")
    logout(request)
    return RedirectResponse(url="/admin/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("")
def dashboard(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[CurrentUser, Depends(require_current_user)],
):
    stats = stats_service.compute_dashboard_stats(member_service.list_members(session))
    return render_page(
        request,
        "admin/dashboard.html",
        {"stats": stats},
        current_user=current_user,
    )
