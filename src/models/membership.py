"""Tenant membership model."""

from sqlalchemy import String, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin


class Membership(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Links a user to a tenant with a role.

    Suspended memberships grant nothing; every authorization decision is
    keyed off an active one.
    """
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_memberships_user_tenant"),
        Index(
            "ix_memberships_tenant_active",
            "tenant_id",
            postgresql_where=text("status = 'active'"),
        ),
    )

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
        comment="active, suspended"
    )

    def __repr__(self) -> str:
        return f"<Membership {self.user_id}@{self.tenant_id} {self.role} ({self.status})>"


class MembershipRole:
    """Membership role values."""
    TENANT_ADMIN = "tenant_admin"
    TENANT_STAFF = "tenant_staff"
    FRANCHISE_OWNER = "franchise_owner"
    FRANCHISE_STAFF = "franchise_staff"
    CORPORATE_ADMIN = "corporate_admin"
    CORPORATE_STAFF = "corporate_staff"
    CORPORATE_MANAGER = "corporate_manager"

    ALL = (
        TENANT_ADMIN,
        TENANT_STAFF,
        FRANCHISE_OWNER,
        FRANCHISE_STAFF,
        CORPORATE_ADMIN,
        CORPORATE_STAFF,
        CORPORATE_MANAGER,
    )


class MembershipStatus:
    """Membership status values."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


__all__ = ["Membership", "MembershipRole", "MembershipStatus"]
