"""Admin member routes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from dahira.core.config import get_settings
from dahira.core.constants import DEFAULT_ANNUAL_FEE, Gender, MemberRole
from dahira.core.exceptions import MemberStoreError
from dahira.db.session import get_session
from dahira.models.member import Member
from dahira.routers.rendering import render_page
from dahira.services import export_service, member_service
from dahira.services.auth_service import flash, require_current_user, validate_or_raise_csrf
from dahira.services.session_resolver import CurrentUser

router = APIRouter(prefix="/admin/members")

CurrentUserDep = Annotated[CurrentUser, Depends(require_current_user)]
SessionDep = Annotated[Session, Depends(get_session)]


@router.get("")
def members_page(request: Request, session: SessionDep, current_user: CurrentUserDep):
    return _render_members_page(request, session, current_user)


@router.post("")
async def create_member(
    request: Request,
    session: SessionDep,
    current_user: CurrentUserDep,
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)
    form_data = _form_values(await request.form())

    create_input = member_service.parse_member_create_input(form_data)
    if create_input is None:
        return _render_member_form(
            request,
            current_user,
            form_data,
            error_message=member_service.INVALID_INPUT_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        _, error_message = member_service.create_member(session, create_input)
    except MemberStoreError as exc:
        return _render_member_form(
            request,
            current_user,
            form_data,
            error_message=exc.message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if error_message is not None:
        return _render_member_form(
            request,
            current_user,
            form_data,
            error_message=error_message,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request, "Nouveau membre ajouté avec succès !")
    return RedirectResponse(url="/admin/members", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/new")
def new_member_page(request: Request, current_user: CurrentUserDep):
    return _render_member_form(request, current_user, _blank_form_values())


@router.get("/export")
def export_members(request: Request, session: SessionDep, current_user: CurrentUserDep):
    filters = member_service.parse_member_filters(request.query_params)
    members = member_service.filter_members(member_service.list_members(session), filters)
    return Response(
        content=export_service.members_to_csv(members),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename={export_service.export_filename()}",
        },
    )


@router.get("/{id}")
def member_detail_page(
    request: Request,
    id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
):
    member = member_service.get_member(session, id)
    if member is None:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=member_service.MEMBER_NOT_FOUND_MESSAGE,
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return render_page(
        request,
        "admin/member_detail.html",
        {"member": member, "whatsapp_number": member_service.contact_phone_digits(member)},
        current_user=current_user,
    )


@router.get("/{id}/edit")
def edit_member_page(
    request: Request,
    id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
):
    member = member_service.get_member(session, id)
    if member is None:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=member_service.MEMBER_NOT_FOUND_MESSAGE,
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return _render_member_form(request, current_user, _member_form_values(member), member_id=id)


@router.post("/{id}/update")
async def update_member(
    request: Request,
    id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)
    form_data = _form_values(await request.form())

    update_input = member_service.parse_member_update_input(form_data)
    if update_input is None:
        return _render_member_form(
            request,
            current_user,
            form_data,
            member_id=id,
            error_message=member_service.INVALID_INPUT_MESSAGE,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        _, error_message = member_service.update_member(session, id, update_input)
    except MemberStoreError as exc:
        return _render_member_form(
            request,
            current_user,
            form_data,
            member_id=id,
            error_message=exc.message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if error_message == member_service.MEMBER_NOT_FOUND_MESSAGE:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=error_message,
            status_code=status.HTTP_404_NOT_FOUND,
        )
    if error_message is not None:
        return _render_member_form(
            request,
            current_user,
            form_data,
            member_id=id,
            error_message=error_message,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    flash(request, "Membre mis à jour avec succès !")
    return RedirectResponse(url="/admin/members", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{id}/delete")
def delete_member(
    request: Request,
    id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
    csrf_token: Annotated[str, Form()] = "",
    confirm: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    member = member_service.get_member(session, id)
    if member is None:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=member_service.MEMBER_NOT_FOUND_MESSAGE,
            status_code=status.HTTP_404_NOT_FOUND,
        )
    if confirm != "yes":
        return render_page(
            request,
            "admin/member_confirm_delete.html",
            {"member": member},
            current_user=current_user,
        )

    try:
        error_message = member_service.delete_member(session, id)
    except MemberStoreError as exc:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=exc.message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if error_message is not None:
        return _render_members_page(
            request,
            session,
            current_user,
            error_message=error_message,
            status_code=status.HTTP_404_NOT_FOUND,
        )

    flash(request, "Membre supprimé.")
    return RedirectResponse(url="/admin/members", status_code=status.HTTP_303_SEE_OTHER)


def _render_members_page(
    request: Request,
    session: Session,
    current_user: CurrentUser,
    *,
    error_message: str | None = None,
    status_code: int = status.HTTP_200_OK,
):
    filters = member_service.parse_member_filters(request.query_params)
    matched = member_service.filter_members(member_service.list_members(session), filters)
    page = member_service.paginate_members(matched, filters.page, get_settings().members_page_size)
    return render_page(
        request,
        "admin/members.html",
        {
            "error_message": error_message,
            "filters": filters,
            "member_page": page,
            "export_query": request.url.query,
            "roles": list(MemberRole),
        },
        current_user=current_user,
        status_code=status_code,
    )


def _render_member_form(
    request: Request,
    current_user: CurrentUser,
    form_values: Mapping[str, Any],
    *,
    member_id: int | None = None,
    error_message: str | None = None,
    status_code: int = status.HTTP_200_OK,
):
    return render_page(
        request,
        "admin/member_form.html",
        {
            "form": form_values,
            "member_id": member_id,
            "error_message": error_message,
            "is_minor": form_values.get("gender") == Gender.ENFANT.value,
        },
        current_user=current_user,
        status_code=status_code,
    )


def _form_values(form_data: Mapping[str, Any]) -> dict[str, str]:
    values: dict[str, str] = {}
    for key in member_service.MEMBER_FIELDS:
        value = form_data.get(key)
        if isinstance(value, str):
            values[key] = value
    return values


def _blank_form_values() -> dict[str, str]:
    values = {key: "" for key in member_service.MEMBER_FIELDS}
    values["role"] = MemberRole.MEMBRE.value
    values["gender"] = Gender.HOMME.value
    values["annual_fee"] = str(DEFAULT_ANNUAL_FEE)
    return values


def _member_form_values(member: Member) -> dict[str, str]:
    return {
        "first_name": member.first_name,
        "last_name": member.last_name,
        "phone": member.phone,
        "role": str(member.role),
        "gender": str(member.gender),
        "annual_fee": str(member.annual_fee),
        "card_number": member.card_number,
        "join_date": member.join_date.isoformat(),
        "profession": member.profession or "",
        "photo_url": member.photo_url or "",
        "guardian_name": member.guardian_name or "",
        "guardian_phone": member.guardian_phone or "",
    }
