"""Shared fixtures: in-memory database and signed-in clients."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from dahira.core.config import get_settings
from dahira.core.constants import UserRole
from dahira.db.session import get_session
from dahira.main import create_app
from tests.helpers import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    SUPER_ADMIN_PASSWORD,
    AsgiClient,
    add_identity,
)


@pytest.fixture
def engine() -> Engine:
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    return test_engine


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def app_and_engine(engine: Engine) -> tuple[FastAPI, Engine]:
    with Session(engine) as db_session:
        add_identity(
            db_session,
            get_settings().super_admin_email,
            SUPER_ADMIN_PASSWORD,
        )
        add_identity(
            db_session,
            ADMIN_EMAIL,
            ADMIN_PASSWORD,
            full_name="Fatou Ndiaye",
            role=UserRole.ADMIN,
        )

    app = create_app()

    def override_get_session():
        with Session(engine) as db_session:
            yield db_session

    app.dependency_overrides[get_session] = override_get_session
    return app, engine


@pytest.fixture
def client(app_and_engine: tuple[FastAPI, Engine]) -> AsgiClient:
    app, _ = app_and_engine
    return AsgiClient(app)


@pytest.fixture
def admin_client(client: AsgiClient) -> AsgiClient:
    status_code, headers, _ = client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert status_code == 303
    assert headers["location"] == "/admin"
    return client


@pytest.fixture
def super_admin_client(client: AsgiClient) -> AsgiClient:
    status_code, headers, _ = client.login(get_settings().super_admin_email, SUPER_ADMIN_PASSWORD)
    assert status_code == 303
    assert headers["location"] == "/admin"
    return client
