"""Tenant model: a franchise organization, the root isolation boundary."""

from typing import Optional, Dict, Any
from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin


class Tenant(Base, UUIDMixin, TimestampMixin):
    """A franchise organization."""
    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
        comment="Human-readable tenant name"
    )
    slug: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        comment="URL-safe tenant identifier"
    )
    plan: Mapped[str] = mapped_column(
        String(32),
        default="trial",
        nullable=False,
    )

    # Plain strings; allowed values live on TenantStatus
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        comment="active, suspended, cancelled"
    )

    settings: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONB,
        default=dict,
        comment="Tenant-specific configuration"
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.slug} ({self.status})>"


class TenantStatus:
    """Tenant status values."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class TenantPlan:
    """Tenant plan values."""
    TRIAL = "trial"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


__all__ = ["Tenant", "TenantStatus", "TenantPlan"]
