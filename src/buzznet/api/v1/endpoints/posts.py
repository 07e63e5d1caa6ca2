# src/buzznet/api/v1/endpoints/posts.py
"""Post-related endpoints for the BuzzNet API."""

from fastapi import APIRouter, status

from buzznet.api.v1.dependencies import CurrentUserDep, EngagementDep
from buzznet.models import Post
from buzznet.schemas.post import PostCreate, PostDeleted, PostResponse

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostResponse])
def list_posts(engine: EngagementDep) -> list[Post]:
    """List every post, newest first."""
    return engine.list_posts()


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, engine: EngagementDep) -> Post:
    """Get a specific post by ID.

    Raises:
        NotFound: If the post does not exist
    """
    return engine.get_post(post_id)


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> Post:
    """Create a new post authored by the caller."""
    return engine.create_post(current_user.id, post_data.title, post_data.content)


@router.delete("/{post_id}", response_model=PostDeleted)
def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    engine: EngagementDep,
) -> PostDeleted:
    """Delete a post and its comments.

    Only the author or an admin may delete; others get 403, unknown ids 404.
    """
    engine.delete_post(current_user.id, current_user.role, post_id)
    return PostDeleted(id=post_id)


@router.patch("/{post_id}/like", response_model=PostResponse)
def like_post(post_id: str, current_user: CurrentUserDep, engine: EngagementDep) -> Post:
    """Toggle the caller's like; replaces a dislike, a second call withdraws it."""
    return engine.toggle_like(current_user.id, post_id)


@router.patch("/{post_id}/dislike", response_model=PostResponse)
def dislike_post(post_id: str, current_user: CurrentUserDep, engine: EngagementDep) -> Post:
    """Toggle the caller's dislike; replaces a like, a second call withdraws it."""
    return engine.toggle_dislike(current_user.id, post_id)
