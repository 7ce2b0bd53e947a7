"""In-process ASGI client and data builders shared by the tests."""

from __future__ import annotations

import asyncio
import re
from datetime import date
from http.cookies import SimpleCookie
from urllib.parse import urlencode

from fastapi import FastAPI
from sqlmodel import Session
from starlette.types import Message, Receive, Scope, Send

from dahira.core.constants import Gender, MemberRole, UserRole
from dahira.core.security import hash_password
from dahira.models.auth_identity import AuthIdentity
from dahira.models.member import Member
from dahira.models.profile import Profile

ADMIN_EMAIL = "admin@dahira.sn"
ADMIN_PASSWORD = "admin-password"
SUPER_ADMIN_PASSWORD = "super-password"


class AsgiClient:
    """Drive the app through raw ASGI calls, keeping cookies between requests."""

    def __init__(self, app: FastAPI) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    def get(self, path: str) -> tuple[int, dict[str, str], str]:
        return self.request("GET", path)

    def post(self, path: str, form: dict[str, str]) -> tuple[int, dict[str, str], str]:
        return self.request("POST", path, form=form)

    def csrf_token(self, path: str = "/admin/login") -> str:
        status_code, _, body = self.get(path)
        assert status_code == 200
        return extract_csrf_token(body)

    def login(self, email: str, password: str) -> tuple[int, dict[str, str], str]:
        csrf_token = self.csrf_token("/admin/login")
        return self.post(
            "/admin/login",
            {"email": email, "password": password, "csrf_token": csrf_token},
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        form: dict[str, str] | None = None,
    ) -> tuple[int, dict[str, str], str]:
        raw_path, _, query_string = path.partition("?")
        headers: list[tuple[bytes, bytes]] = [(b"host", b"testserver")]
        request_body = b""

        if self.cookies:
            cookie_header = "; ".join(f"{name}={value}" for name, value in self.cookies.items())
            headers.append((b"cookie", cookie_header.encode("utf-8")))

        if form is not None:
            request_body = urlencode(form).encode("utf-8")
            headers.extend(
                [
                    (b"content-type", b"application/x-www-form-urlencoded"),
                    (b"content-length", str(len(request_body)).encode("utf-8")),
                ]
            )
        else:
            headers.append((b"content-length", b"0"))

        scope: Scope = {
            "type": "http",
            "asgi": {"version": "3.0", "spec_version": "2.3"},
            "http_version": "1.1",
            "method": method.upper(),
            "scheme": "http",
            "path": raw_path,
            "raw_path": raw_path.encode("utf-8"),
            "query_string": query_string.encode("utf-8"),
            "headers": headers,
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
            "root_path": "",
        }

        sent = False

        async def receive() -> Message:
            nonlocal sent
            if sent:
                return {"type": "http.request", "body": b"", "more_body": False}
            sent = True
            return {"type": "http.request", "body": request_body, "more_body": False}

        messages: list[Message] = []

        async def send(message: Message) -> None:
            messages.append(message)

        receive_fn: Receive = receive
        send_fn: Send = send
        asyncio.run(self.app(scope, receive_fn, send_fn))

        status_code = 500
        response_headers: dict[str, str] = {}
        body = b""
        for message in messages:
            if message["type"] == "http.response.start":
                status_code = message["status"]
                for key, value in message.get("headers", []):
                    name = key.decode("latin-1").lower()
                    decoded = value.decode("latin-1")
                    if name == "set-cookie":
                        self._store_cookie(decoded)
                    response_headers[name] = decoded
            if message["type"] == "http.response.body":
                body += message.get("body", b"")

        return status_code, response_headers, body.decode("utf-8", errors="ignore")

    def _store_cookie(self, raw_cookie: str) -> None:
        parsed_cookie = SimpleCookie()
        parsed_cookie.load(raw_cookie)
        for morsel in parsed_cookie.values():
            if morsel.value:
                self.cookies[morsel.key] = morsel.value
            else:
                self.cookies.pop(morsel.key, None)


def extract_csrf_token(body: str) -> str:
    match = re.search(r'name="csrf_token" value="([^"]+)"', body)
    assert match is not None
    return match.group(1)


def add_identity(
    session: Session,
    email: str,
    password: str,
    *,
    full_name: str | None = None,
    role: UserRole | None = None,
) -> AuthIdentity:
    """Insert a credential, and a profile row when ``full_name`` is given."""

    identity = AuthIdentity(email=email, password_hash=hash_password(password))
    session.add(identity)
    session.commit()
    session.refresh(identity)
    if full_name is not None:
        session.add(
            Profile(
                id=identity.id,
                username=email,
                full_name=full_name,
                role=role or UserRole.ADMIN,
            )
        )
        session.commit()
    return identity


def make_member(card_number: str, **overrides: object) -> Member:
    values: dict[str, object] = {
        "first_name": "Amadou",
        "last_name": "Sow",
        "phone": "771234567",
        "role": MemberRole.MEMBRE,
        "gender": Gender.HOMME,
        "annual_fee": 5000,
        "card_number": card_number,
        "join_date": date(2023, 1, 15),
    }
    values.update(overrides)
    return Member(**values)
