# src/buzznet/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import (
    AuthorSummary,
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostDeleted,
    PostResponse,
)
from .user import AuthResponse, LoginRequest, RegisterRequest, UserProfile

__all__ = [
    "AuthorSummary", "CommentCreate", "CommentResponse",
    "PostCreate", "PostDeleted", "PostResponse",
    "AuthResponse", "LoginRequest", "RegisterRequest", "UserProfile",
]
