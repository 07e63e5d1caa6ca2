"""Engagement engine: posts, comments and like/dislike toggles.

A post and its embedded comments form one aggregate. Every mutation loads
the aggregate, changes it in memory, bumps ``Post.updated_at`` so the row is
rewritten under its ``version`` check, and commits once. A writer that loses
the compare-and-swap rolls back, waits a short jittered backoff and replays
the mutation against a fresh read, so the reaction sets and their cached
counters always agree.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from buzznet.core.errors import ConcurrentUpdate, Forbidden, NotFound, ValidationError
from buzznet.core.settings import Settings, settings
from buzznet.db.time import utcnow
from buzznet.models.post import Comment, Post
from buzznet.models.reaction import CommentReaction, PostReaction, ReactionKind
from buzznet.models.user import UserRole
from buzznet.services.policy import can_delete

logger = logging.getLogger(__name__)


def apply_toggle(
    item: Post | Comment,
    factory: type[PostReaction] | type[CommentReaction],
    user_id: str,
    kind: ReactionKind,
) -> None:
    """Toggle ``user_id``'s ``kind`` reaction on ``item`` and refresh its counters.

    An opposite reaction is replaced, the same reaction is withdrawn, and no
    reaction gains one; calling twice restores the original state.
    """
    existing = next((r for r in item.reactions if r.user_id == user_id), None)
    if existing is None:
        item.reactions.append(factory(user_id=user_id, kind=kind))
    elif existing.kind == kind:
        item.reactions.remove(existing)
    else:
        existing.kind = kind
    item.refresh_counters()


class EngagementService:
    """Owns post aggregates and every mutation applied to them."""

    def __init__(
        self,
        db: Session,
        *,
        config: Settings = settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.db = db
        self.config = config
        self.sleep = sleep

    def list_posts(self) -> list[Post]:
        """Return all posts, newest first."""
        return list(self.db.scalars(select(Post).order_by(Post.created_at.desc())))

    def get_post(self, post_id: str) -> Post:
        """Return the post with ``post_id`` or raise NotFound."""
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def create_post(self, author_id: str, title: str | None, content: str | None) -> Post:
        """Persist a new post with empty reaction sets and no comments."""
        title = (title or "").strip()
        content = (content or "").strip()
        if not title or not content:
            raise ValidationError("Please provide both title and content for the post.")

        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            likes=0,
            dislikes=0,
            comment_count=0,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("Post %s created by %s", post.id, author_id)
        return post

    def delete_post(self, actor_id: str, actor_role: UserRole | str, post_id: str) -> None:
        """Remove a post with all its comments and reactions.

        Raises:
            NotFound: No such post.
            Forbidden: The actor is neither the author nor an admin.
        """
        post = self.get_post(post_id)
        if not can_delete(actor_id, post.author_id, actor_role):
            raise Forbidden("You can only delete your own posts")

        removed_comments = len(post.comments)
        self.db.delete(post)
        try:
            self.db.commit()
        except StaleDataError as err:
            self.db.rollback()
            raise ConcurrentUpdate() from err
        logger.info(
            "Post %s deleted by %s (%d comments removed)", post_id, actor_id, removed_comments
        )

    def toggle_like(self, user_id: str, post_id: str) -> Post:
        """Like, unlike, or switch a dislike to a like."""
        return self._toggle_post(user_id, post_id, ReactionKind.LIKE)

    def toggle_dislike(self, user_id: str, post_id: str) -> Post:
        """Dislike, un-dislike, or switch a like to a dislike."""
        return self._toggle_post(user_id, post_id, ReactionKind.DISLIKE)

    def add_comment(self, author_id: str, post_id: str, text: str | None) -> Post:
        """Append a comment to the post and return the updated post."""
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text cannot be empty")

        def append(post: Post) -> None:
            post.comments.append(
                Comment(author_id=author_id, text=text, likes=0, dislikes=0)
            )
            post.comment_count = len(post.comments)

        return self._write_aggregate(post_id, append)

    def delete_comment(
        self,
        actor_id: str,
        actor_role: UserRole | str,
        post_id: str,
        comment_id: str,
    ) -> Post:
        """Remove one comment, applying the same author-or-admin rule as posts."""

        def remove(post: Post) -> None:
            comment = self._find_comment(post, comment_id)
            if not can_delete(actor_id, comment.author_id, actor_role):
                raise Forbidden("You can only delete your own comments")
            post.comments.remove(comment)
            post.comment_count = len(post.comments)

        post = self._write_aggregate(post_id, remove)
        logger.info("Comment %s on post %s deleted by %s", comment_id, post_id, actor_id)
        return post

    def toggle_comment_like(self, user_id: str, post_id: str, comment_id: str) -> Post:
        """Toggle a like on one comment of the post."""
        return self._toggle_comment(user_id, post_id, comment_id, ReactionKind.LIKE)

    def toggle_comment_dislike(self, user_id: str, post_id: str, comment_id: str) -> Post:
        """Toggle a dislike on one comment of the post."""
        return self._toggle_comment(user_id, post_id, comment_id, ReactionKind.DISLIKE)

    def _toggle_post(self, user_id: str, post_id: str, kind: ReactionKind) -> Post:
        return self._write_aggregate(
            post_id,
            lambda post: apply_toggle(post, PostReaction, user_id, kind),
        )

    def _toggle_comment(
        self,
        user_id: str,
        post_id: str,
        comment_id: str,
        kind: ReactionKind,
    ) -> Post:
        def toggle(post: Post) -> None:
            comment = self._find_comment(post, comment_id)
            apply_toggle(comment, CommentReaction, user_id, kind)
            comment.updated_at = utcnow()

        return self._write_aggregate(post_id, toggle)

    @staticmethod
    def _find_comment(post: Post, comment_id: str) -> Comment:
        comment = post.find_comment(comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        return comment

    def _load_for_update(self, post_id: str) -> Post:
        # FOR UPDATE OF post queues writers on backends with row locks; SQLite
        # omits the clause and relies on the version check alone.
        post = self.db.get(
            Post,
            post_id,
            populate_existing=True,
            with_for_update={"of": Post},
        )
        if post is None:
            raise NotFound("Post not found")
        return post

    def _backoff_seconds(self, retry: int) -> float:
        base = self.config.aggregate_retry_backoff_ms * 2 ** (retry - 1)
        return base * random.uniform(0.5, 1.5) / 1000

    def _write_aggregate(self, post_id: str, mutate: Callable[[Post], None]) -> Post:
        """Apply ``mutate`` to a fresh copy of the post and commit it atomically.

        Args:
            post_id: Aggregate root to mutate.
            mutate: Callback changing the loaded post in place; may raise
                domain errors, in which case nothing is written.

        Returns:
            The committed post.

        Raises:
            NotFound: The post (or a comment looked up by ``mutate``) is missing.
            ConcurrentUpdate: Every attempt lost its compare-and-swap.
        """
        attempts = self.config.aggregate_write_retries
        for attempt in range(1, attempts + 1):
            if attempt > 1:
                self.sleep(self._backoff_seconds(attempt - 1))
            post = self._load_for_update(post_id)
            try:
                mutate(post)
            except Exception:
                self.db.rollback()
                raise
            post.updated_at = utcnow()
            try:
                self.db.commit()
            except (StaleDataError, IntegrityError) as err:
                self.db.rollback()
                logger.info(
                    "Concurrent write on post %s (attempt %d/%d): %s",
                    post_id,
                    attempt,
                    attempts,
                    err,
                )
                continue
            return post

        logger.warning("Giving up on post %s after %d conflicting writes", post_id, attempts)
        raise ConcurrentUpdate()
