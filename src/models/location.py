"""Franchise location models."""

from typing import Optional, Dict, Any
from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Location(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """A physical franchise site."""
    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    state: Mapped[str] = mapped_column(String(64), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        comment="active, inactive"
    )
    settings: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, default=dict)

    def __repr__(self) -> str:
        return f"<Location {self.name} ({self.status})>"


class LocationMembership(Base, UUIDMixin, TimestampMixin):
    """Assigns a user to a location.

    Franchise-level users see location-targeted posts and answer requests
    through these rows.
    """
    __tablename__ = "location_memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "location_id", name="uq_location_memberships_user_location"),
    )

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    location_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(32), default="staff", nullable=False)


class LocationStatus:
    """Location status values."""
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = (ACTIVE, INACTIVE)


__all__ = ["Location", "LocationMembership", "LocationStatus"]
