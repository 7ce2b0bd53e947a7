"""Template rendering shared by the admin routers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

from fastapi import Request, status
from fastapi.templating import Jinja2Templates

from dahira.core.constants import Gender, MemberRole, UserRole
from dahira.services.auth_service import get_or_create_csrf_token, pop_flash
from dahira.services.session_resolver import CurrentUser

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def format_fcfa(amount: int | None) -> str:
    """Format an amount the way receipts print it: ``12 500 F``."""

    return f"{amount or 0:,} F".replace(",", " ")


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["fcfa"] = format_fcfa
    templates.env.globals["genders"] = list(Gender)
    templates.env.globals["member_roles"] = list(MemberRole)
    templates.env.globals["user_roles"] = list(UserRole)
    return templates


def render_page(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    current_user: CurrentUser | None = None,
    status_code: int = status.HTTP_200_OK,
):
    templates = cast(Jinja2Templates, request.app.state.templates)
    page_context: dict[str, Any] = {
        "request": request,
        "csrf_token": get_or_create_csrf_token(request),
        "current_user": current_user,
        "flash_message": pop_flash(request),
        "error_message": None,
    }
    page_context.update(context or {})
    return templates.TemplateResponse(
        request,
        template_name,
        page_context,
        status_code=status_code,
    )
