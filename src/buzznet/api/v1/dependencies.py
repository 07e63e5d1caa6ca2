"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from buzznet.core.errors import InvalidToken
from buzznet.db.session import get_db
from buzznet.models import User
from buzznet.services.accounts import AccountGuard
from buzznet.services.engagement import EngagementService

# Missing or non-Bearer headers are reported by get_current_user as 401.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_account_guard(db: SessionDep) -> AccountGuard:
    """Return an account guard bound to the request session."""
    return AccountGuard(db)


def get_engagement_service(db: SessionDep) -> EngagementService:
    """Return an engagement engine bound to the request session."""
    return EngagementService(db)


AccountGuardDep = Annotated[AccountGuard, Depends(get_account_guard)]
EngagementDep = Annotated[EngagementService, Depends(get_engagement_service)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    guard: AccountGuardDep,
) -> User:
    """Resolve the acting user from the ``Authorization: Bearer`` header.

    Args:
        credentials: Parsed bearer credentials, or None if absent/malformed
        guard: Account guard used to verify the token and load the user

    Returns:
        User object for the authenticated user

    Raises:
        InvalidToken: If the header is missing or the token does not verify
        UserNotFound: If the token names an account that no longer exists
    """
    if credentials is None or not credentials.credentials.strip():
        raise InvalidToken("Not authorized, no bearer token provided")
    return guard.resolve_actor(credentials.credentials.strip())


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
