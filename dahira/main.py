import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from dahira.core.config import get_settings
from dahira.core.logging import configure_logging
from dahira.db.init_db import init_db
from dahira.routers.admin_auth import router as admin_auth_router
from dahira.routers.admin_member import router as admin_member_router
from dahira.routers.admin_users import router as admin_users_router
from dahira.routers.profile import router as profile_router
from dahira.routers.rendering import build_templates
from dahira.services.auth_service import (
    decode_session_cookie,
    encode_session_cookie,
    has_identity,
)

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"
SESSION_COOKIE_NAME = "dahira_session"

logger = logging.getLogger(__name__)


def _is_admin_path(path: str) -> bool:
    return path == "/admin" or path.startswith("/admin/")


def _is_login_path(path: str) -> bool:
    return path == "/admin/login" or path.startswith("/admin/login/")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(title=settings.app_name, debug=settings.app_debug, lifespan=lifespan)

    @app.middleware("http")
    async def session_and_admin_guard(request: Request, call_next):
        request.scope["session"] = decode_session_cookie(
            settings.secret_key,
            request.cookies.get(SESSION_COOKIE_NAME),
        )

        path = request.url.path
        if _is_admin_path(path) and not _is_login_path(path):
            if not has_identity(request.session):
                return RedirectResponse(url="/admin/login", status_code=303)

        response = await call_next(request)
        session_data = request.scope.get("session")
        if isinstance(session_data, dict) and session_data:
            response.set_cookie(
                key=SESSION_COOKIE_NAME,
                value=encode_session_cookie(settings.secret_key, session_data),
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
                path="/",
            )
        else:
            response.delete_cookie(
                key=SESSION_COOKIE_NAME,
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
                path="/",
            )
        return response

    @app.get("/")
    def root():
        return RedirectResponse(url="/admin", status_code=303)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.state.templates = build_templates()
    app.include_router(admin_auth_router)
    app.include_router(admin_member_router)
    app.include_router(admin_users_router)
    app.include_router(profile_router)
    logger.debug("Application %s created (%s)", settings.app_name, settings.app_env)
    return app


app = create_app()
