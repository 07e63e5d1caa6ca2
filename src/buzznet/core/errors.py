"""Typed failures raised by the account guard and the engagement engine.

Every exception carries the HTTP status the API layer answers with and a
stable machine-readable ``code``. Services raise these; ``buzznet.main``
renders them.
"""

from __future__ import annotations

from typing import ClassVar

from fastapi import status


class BuzzNetError(RuntimeError):
    """Base exception for all domain failures."""

    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: ClassVar[str] = "InternalError"
    default_detail: ClassVar[str] = "An unexpected server error occurred"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InternalError(BuzzNetError):
    """Unexpected failure; never raised for caller mistakes."""


class ValidationError(BuzzNetError):
    """Malformed or missing caller input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ValidationError"
    default_detail = "Validation Failed"


class AuthenticationError(BuzzNetError):
    """Base for every failure that answers 401."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "Unauthorized"
    default_detail = "Not authorized"


class InvalidCredentials(AuthenticationError):
    """Unknown email or wrong password; deliberately indistinguishable."""

    code = "InvalidCredentials"
    default_detail = "Invalid email or password"


class AccountLocked(AuthenticationError):
    """Too many failed logins; refused until the lockout window elapses."""

    code = "AccountLocked"
    default_detail = "Account temporarily locked due to too many failed login attempts"


class InvalidToken(AuthenticationError):
    """Bearer token is missing, malformed, expired or badly signed."""

    code = "InvalidToken"
    default_detail = "Could not validate credentials"


class UserNotFound(AuthenticationError):
    """Token is valid but the account it names no longer exists."""

    code = "UserNotFound"
    default_detail = "User associated with this token no longer exists"


class Forbidden(BuzzNetError):
    """Actor is authenticated but not allowed to perform the mutation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "Forbidden"
    default_detail = "You are not allowed to perform this action"


class NotFound(BuzzNetError):
    """Requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"
    default_detail = "Resource not found"


class DuplicateEmail(BuzzNetError):
    """Registration attempted with an email that is already taken."""

    status_code = status.HTTP_409_CONFLICT
    code = "DuplicateEmail"
    default_detail = "User already exists with this email"


class ConcurrentUpdate(BuzzNetError):
    """A post aggregate kept changing underneath every write attempt."""

    status_code = status.HTTP_409_CONFLICT
    code = "ConcurrentUpdate"
    default_detail = "The post was modified concurrently, please retry"
