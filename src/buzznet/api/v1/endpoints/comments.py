# src/buzznet/api/v1/endpoints/comments.py
"""Comment endpoints, nested under the owning post."""

from fastapi import APIRouter, status

from buzznet.api.v1.dependencies import CurrentUserDep, EngagementDep
from buzznet.models import Post
from buzznet.schemas.post import CommentCreate, PostResponse

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> Post:
    """Append a comment and return the parent post with its comments."""
    return engine.add_comment(current_user.id, post_id, comment_data.text)


@router.delete("/{comment_id}", response_model=PostResponse)
def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> Post:
    """Delete a comment; author or admin only."""
    return engine.delete_comment(current_user.id, current_user.role, post_id, comment_id)


@router.patch("/{comment_id}/like", response_model=PostResponse)
def like_comment(
    post_id: str,
    comment_id: str,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> Post:
    """Toggle the caller's like on a comment."""
    return engine.toggle_comment_like(current_user.id, post_id, comment_id)


@router.patch("/{comment_id}/dislike", response_model=PostResponse)
def dislike_comment(
    post_id: str,
    comment_id: str,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> Post:
    """Toggle the caller's dislike on a comment."""
    return engine.toggle_comment_dislike(current_user.id, post_id, comment_id)
