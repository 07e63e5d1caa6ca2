"""Models capturing like/dislike reactions on posts and comments."""

from __future__ import annotations

import enum

from sqlalchemy import Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from buzznet.db.session import Base


class ReactionKind(str, enum.Enum):
    """The two mutually exclusive reactions a user can leave."""

    LIKE = "like"
    DISLIKE = "dislike"


def _kind_column() -> Mapped[ReactionKind]:
    return mapped_column(
        Enum(
            ReactionKind,
            native_enum=False,
            length=8,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )


class PostReaction(Base):
    """Per-user reaction on a post.

    The composite primary key allows one row per user and post, so a user
    can never sit in both the like and the dislike set.
    """

    __tablename__ = "post_reaction"
    __table_args__ = (Index("ix_post_reaction_post_id", "post_id"),)

    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    kind: Mapped[ReactionKind] = _kind_column()


class CommentReaction(Base):
    """Per-user reaction on a comment; same exclusivity as posts."""

    __tablename__ = "comment_reaction"
    __table_args__ = (Index("ix_comment_reaction_comment_id", "comment_id"),)

    comment_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("comment.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    kind: Mapped[ReactionKind] = _kind_column()
