# src/buzznet/models/__init__.py
"""SQLAlchemy models for the BuzzNet application."""

from .post import Comment, Post
from .reaction import CommentReaction, PostReaction, ReactionKind
from .user import User, UserRole

__all__ = [
    "Comment", "Post",
    "CommentReaction", "PostReaction", "ReactionKind",
    "User", "UserRole",
]
