"""Attachment model."""

from typing import Optional
from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Attachment(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A file in object storage, attached to a post, a comment or neither.

    ``virus_scan_status`` starts at ``pending`` and is moved forward once by
    the external scanner.
    """
    __tablename__ = "attachments"

    post_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    comment_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    uploader_user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(512), nullable=False)
    download_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    virus_scan_status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        comment="pending, clean, infected"
    )

    def __repr__(self) -> str:
        return f"<Attachment {self.original_filename} ({self.virus_scan_status})>"


class VirusScanStatus:
    """Virus scan status values."""
    PENDING = "pending"
    CLEAN = "clean"
    INFECTED = "infected"

    ALL = (PENDING, CLEAN, INFECTED)
    FINAL = (CLEAN, INFECTED)


__all__ = ["Attachment", "VirusScanStatus"]
