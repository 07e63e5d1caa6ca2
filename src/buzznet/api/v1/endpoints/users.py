# src/buzznet/api/v1/endpoints/users.py
"""Registration, login and profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from buzznet.api.v1.dependencies import AccountGuardDep, CurrentUserDep
from buzznet.models import User
from buzznet.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserProfile

router = APIRouter(prefix="/users", tags=["users"])


def _auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        token=token,
    )


@router.post(
    "/register",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
)
def register_user(payload: RegisterRequest, guard: AccountGuardDep) -> AuthResponse:
    """Create an account and return it with a bearer token."""
    user, token = guard.register(payload.username, payload.email, payload.password)
    return _auth_response(user, token)


@router.post(
    "/login",
    summary="Authenticate with email and password",
    response_model=AuthResponse,
)
def login_user(payload: LoginRequest, guard: AccountGuardDep) -> AuthResponse:
    """Exchange valid credentials for a bearer token."""
    user, token = guard.authenticate(payload.email, payload.password)
    return _auth_response(user, token)


@router.get("/profile", response_model=UserProfile)
def get_profile(current_user: CurrentUserDep) -> User:
    """Return the authenticated user's public profile."""
    return current_user
