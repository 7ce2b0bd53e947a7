"""Error types raised at the auth and profile store boundaries."""

from __future__ import annotations

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

# PostgreSQL SQLSTATE for "infinite recursion detected in policy".
POLICY_RECURSION_CODE = "42P17"


class DahiraError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (code: {self.code})"
        return self.message


class AuthProviderError(DahiraError):
    """Sign-up, sign-in or password update rejected by the auth provider."""


class ProfileStoreError(DahiraError):
    """Reading or writing the profile table failed."""

    @property
    def is_policy_recursion(self) -> bool:
        return self.code == POLICY_RECURSION_CODE

    @classmethod
    def from_sqlalchemy(cls, exc: SQLAlchemyError) -> ProfileStoreError:
        return cls(str(exc).splitlines()[0], code=driver_error_code(exc))


def driver_error_code(exc: SQLAlchemyError) -> str | None:
    """Return the driver's SQLSTATE for ``exc`` when it exposes one."""

    if not isinstance(exc, DBAPIError):
        return None
    original = exc.orig
    for attribute in ("pgcode", "sqlstate"):
        code = getattr(original, attribute, None)
        if isinstance(code, str) and code:
            return code
    return None


class MemberStoreError(DahiraError):
    """Writing to the member table failed."""
