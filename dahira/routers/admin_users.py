"""Access management routes, reserved to super-admins."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from dahira.db.session import get_session
from dahira.routers.rendering import render_page
from dahira.services import admin_service
from dahira.services.auth_service import flash, require_super_admin, validate_or_raise_csrf
from dahira.services.session_resolver import CurrentUser

router = APIRouter(prefix="/admin/users")

SuperAdminDep = Annotated[CurrentUser, Depends(require_super_admin)]
SessionDep = Annotated[Session, Depends(get_session)]


@router.get("")
def users_page(request: Request, session: SessionDep, current_user: SuperAdminDep):
    return _render_users_page(request, session, current_user)


@router.post("")
def create_user(
    request: Request,
    session: SessionDep,
    current_user: SuperAdminDep,
    full_name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    role: Annotated[str, Form()] = "Administrateur",
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    create_input = admin_service.parse_user_create_input(
        full_name=full_name,
        email=email,
        password=password,
        role=role,
    )
    if create_input is None:
        return _render_users_page(
            request,
            session,
            current_user,
            error_message=admin_service.REQUIRED_FIELDS_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    result = admin_service.create_user(session, create_input)
    if result.error_message is not None:
        return _render_users_page(
            request,
            session,
            current_user,
            error_message=result.error_message,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request, result.warning_message or "Utilisateur créé avec succès.")
    return RedirectResponse(url="/admin/users", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{id}/update")
def update_user(
    request: Request,
    id: str,
    session: SessionDep,
    current_user: SuperAdminDep,
    full_name: Annotated[str, Form()] = "",
    role: Annotated[str, Form()] = "",
    password: Annotated[str | None, Form()] = None,
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    update_input = admin_service.parse_user_update_input(
        full_name=full_name,
        role=role,
        password=password,
    )
    if update_input is None:
        return _render_users_page(
            request,
            session,
            current_user,
            error_message=admin_service.INVALID_UPDATE_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    _, error_message = admin_service.update_user(session, id, update_input)
    if error_message is not None:
        return _render_users_page(
            request,
            session,
            current_user,
            error_message=error_message,
            status_code=_status_for(error_message),
        )

    flash(request, "Utilisateur mis à jour.")
    return RedirectResponse(url="/admin/users", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{id}/delete")
def delete_user(
    request: Request,
    id: str,
    session: SessionDep,
    current_user: SuperAdminDep,
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    error_message = admin_service.delete_user(session, id, current_user)
    if error_message is not None:
        return _render_users_page(
            request,
            session,
            current_user,
            error_message=error_message,
            status_code=_status_for(error_message),
        )

    flash(request, "Utilisateur supprimé.")
    return RedirectResponse(url="/admin/users", status_code=status.HTTP_303_SEE_OTHER)


def _status_for(error_message: str) -> int:
    if error_message == admin_service.USER_NOT_FOUND_MESSAGE:
        return status.HTTP_404_NOT_FOUND
    if error_message == admin_service.PROFILE_STORE_MESSAGE:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def _render_users_page(
    request: Request,
    session: Session,
    current_user: CurrentUser,
    *,
    error_message: str | None = None,
    status_code: int = status.HTTP_200_OK,
):
    return render_page(
        request,
        "admin/users.html",
        {
            "error_message": error_message,
            "users": admin_service.list_users(session, current_user),
        },
        current_user=current_user,
        status_code=status_code,
    )
