"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from buzznet.models.user import UserRole


class RegisterRequest(BaseModel):
    """Registration payload. Content rules are enforced by the account guard."""

    username: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address, unique case-insensitively")
    password: str = Field(..., description="At least 8 characters with upper, lower and digit")


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    email: str
    password: str


class AuthResponse(BaseModel):
    """Public user projection plus a bearer token."""

    id: str
    username: str
    email: str
    role: UserRole
    token: str = Field(..., description="JWT bearer token")


class UserProfile(BaseModel):
    """Public user projection; never carries the password hash."""

    id: str
    username: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
