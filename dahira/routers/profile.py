"""Self-service profile routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from dahira.db.session import get_session
from dahira.routers.rendering import render_page
from dahira.services import profile_service
from dahira.services.auth_service import flash, require_current_user, validate_or_raise_csrf
from dahira.services.session_resolver import CurrentUser

router = APIRouter(prefix="/admin/profile")


@router.get("")
def profile_page(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(require_current_user)],
):
    return render_page(request, "admin/profile.html", current_user=current_user)


@router.post("")
def update_profile(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[CurrentUser, Depends(require_current_user)],
    full_name: Annotated[str, Form()] = "",
    photo_url: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    confirm_password: Annotated[str | None, Form()] = None,
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    profile_input = profile_service.parse_profile_input(
        full_name=full_name,
        photo_url=photo_url,
        password=password,
        confirm_password=confirm_password,
    )
    if profile_input is None:
        return render_page(
            request,
            "admin/profile.html",
            {"error_message": profile_service.INVALID_PROFILE_MESSAGE},
            current_user=current_user,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    _, error_message = profile_service.update_own_profile(session, current_user, profile_input)
    if error_message is not None:
        return render_page(
            request,
            "admin/profile.html",
            {"error_message": error_message},
            current_user=current_user,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request, "Profil mis à jour avec succès !")
    return RedirectResponse(url="/admin/profile", status_code=status.HTTP_303_SEE_OTHER)
