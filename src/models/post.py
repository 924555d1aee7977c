"""Post models: posts, comments, reactions and read receipts."""

from typing import Optional, Dict, Any
from datetime import datetime
from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint, Index, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Post(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A communication sent to some or all of a tenant's locations.

    ``targeting`` is stored normalized: ``{"type": "global"}`` or
    ``{"type": "specific_locations", "location_ids": [...]}``.
    """
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_tenant_created", "tenant_id", "created_at"),
        Index(
            "ix_posts_targeting_location_ids",
            text("(targeting -> 'location_ids')"),
            postgresql_using="gin",
        ),
    )

    author_user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    body_rich: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    post_type: Mapped[str] = mapped_column(String(32), default="message", nullable=False)
    targeting: Mapped[Dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=lambda: {"type": "global"},
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.post_type}>"


class Comment(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A comment on a post, optionally replying to a top-level comment."""
    __tablename__ = "comments"

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_comment_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    author_user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    body_rich: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)


class Reaction(Base, UUIDMixin, TimestampMixin):
    """At most one reaction per user per post."""
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_reactions_post_user"),
    )

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)


class ReadReceipt(Base, UUIDMixin):
    """Last time a user read a post."""
    __tablename__ = "read_receipts"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_read_receipts_post_user"),
    )

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    read_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class PostType:
    """Post type values."""
    MESSAGE = "message"
    ANNOUNCEMENT = "announcement"
    REQUEST = "request"
    PERFORMANCE_UPDATE = "performance_update"

    ALL = (MESSAGE, ANNOUNCEMENT, REQUEST, PERFORMANCE_UPDATE)


class ReactionType:
    """Reaction type values."""
    LIKE = "like"
    ACKNOWLEDGE = "acknowledge"
    NEEDS_ATTENTION = "needs_attention"

    ALL = (LIKE, ACKNOWLEDGE, NEEDS_ATTENTION)


__all__ = ["Post", "Comment", "Reaction", "ReadReceipt", "PostType", "ReactionType"]
