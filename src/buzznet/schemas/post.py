# src/buzznet/schemas/post.py
"""Post and comment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., max_length=300, description="Post title")
    content: str = Field(..., max_length=20000, description="Post body")


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    text: str = Field(..., max_length=5000, description="Comment body")


class AuthorSummary(BaseModel):
    """Minimal author details embedded in posts and comments."""

    id: str
    username: str

    model_config = ConfigDict(from_attributes=True)


class CommentResponse(BaseModel):
    """Schema for a comment embedded in a post response."""

    id: str
    author: AuthorSummary
    text: str
    likes: int
    dislikes: int
    liked_by: list[str]
    disliked_by: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    author: AuthorSummary
    title: str
    content: str
    likes: int
    dislikes: int
    liked_by: list[str]
    disliked_by: list[str]
    comment_count: int
    comments: list[CommentResponse]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostDeleted(BaseModel):
    """Confirmation returned after a post is removed."""

    id: str
    message: str = "Post deleted successfully"
