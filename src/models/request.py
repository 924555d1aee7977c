"""Request models: structured data collection attached to a post."""

from typing import Optional, Dict, Any, List
from datetime import datetime
from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class DataRequest(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A data-collection task sent to the locations a post targets.

    ``completion_stats`` holds ``total_locations``, ``submitted``,
    ``pending`` and ``overdue``; the three counters never sum past the total.
    """
    __tablename__ = "requests"
    __table_args__ = (
        CheckConstraint(
            "(completion_stats->>'submitted')::int + (completion_stats->>'pending')::int"
            " + (completion_stats->>'overdue')::int <= (completion_stats->>'total_locations')::int",
            name="ck_requests_completion_stats",
        ),
    )

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fields: Mapped[List[Dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        comment="active, closed"
    )
    completion_stats: Mapped[Dict[str, int]] = mapped_column(JSONB, nullable=False)

    def __repr__(self) -> str:
        return f"<DataRequest {self.title} ({self.status})>"


class RequestResponse(Base, UUIDMixin, TimestampMixin):
    """One location's submission for a request."""
    __tablename__ = "request_responses"
    __table_args__ = (
        UniqueConstraint("request_id", "location_id", name="uq_request_responses_request_location"),
    )

    request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    location_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
    )
    submitted_by: Mapped[str] = mapped_column(String(36), nullable=False)
    values: Mapped[Dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class RequestStatus:
    """Request status values."""
    ACTIVE = "active"
    CLOSED = "closed"

    ALL = (ACTIVE, CLOSED)


class FieldType:
    """Request field type values."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    FILE = "file"
    SELECT = "select"

    ALL = (TEXT, NUMBER, DATE, FILE, SELECT)


__all__ = ["DataRequest", "RequestResponse", "RequestStatus", "FieldType"]
