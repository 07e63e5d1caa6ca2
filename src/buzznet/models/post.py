# src/buzznet/models/post.py
"""SQLAlchemy models for the post aggregate: a post and its embedded comments."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buzznet.db.session import Base
from buzznet.db.time import utcnow
from buzznet.models.reaction import CommentReaction, PostReaction, ReactionKind
from buzznet.models.user import User, new_id


class ReactionCountersMixin:
    """Shared reads over a ``reactions`` collection and its cached counters."""

    if TYPE_CHECKING:
        reactions: list[PostReaction] | list[CommentReaction]
        likes: int
        dislikes: int

    def _user_ids(self, kind: ReactionKind) -> list[str]:
        return sorted(r.user_id for r in self.reactions if r.kind == kind)

    @property
    def liked_by(self) -> list[str]:
        """Ids of users currently liking this item."""
        return self._user_ids(ReactionKind.LIKE)

    @property
    def disliked_by(self) -> list[str]:
        """Ids of users currently disliking this item."""
        return self._user_ids(ReactionKind.DISLIKE)

    def refresh_counters(self) -> None:
        """Recompute ``likes``/``dislikes`` from the reaction rows."""
        self.likes = sum(1 for r in self.reactions if r.kind == ReactionKind.LIKE)
        self.dislikes = sum(1 for r in self.reactions if r.kind == ReactionKind.DISLIKE)


class Post(ReactionCountersMixin, Base):
    """Root of the aggregate. Every write bumps ``version`` (compare-and-swap)."""

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    author_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id"),
        index=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Cached from the reaction rows; never written independently.
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    reactions: Mapped[list[PostReaction]] = relationship(
        "PostReaction",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="post",
        order_by="Comment.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    def find_comment(self, comment_id: str) -> Comment | None:
        """Return the embedded comment with ``comment_id``, if any."""
        return next((c for c in self.comments if c.id == comment_id), None)


class Comment(ReactionCountersMixin, Base):
    """Comment owned by a post, kept in insertion order via ``position``."""

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("post.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="comments")
    author: Mapped[User] = relationship("User", lazy="joined")
    reactions: Mapped[list[CommentReaction]] = relationship(
        "CommentReaction",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
