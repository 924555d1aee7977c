"""Tenant service: current tenant lookup and onboarding."""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging

from core.exceptions import ConflictError
from core.security import AuthenticatedUser
from models.membership import Membership, MembershipRole, MembershipStatus
from models.tenant import Tenant, TenantPlan, TenantStatus
from schemas.tenant import TenantCreate
from services.user_service import UserService

logger = logging.getLogger(__name__)


class TenantService:
    """Tenant operations.

    Provides:
    - Get tenant by ID or slug
    - Create a tenant together with its first admin membership
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        """Get tenant by ID.

        Args:
            tenant_id: The tenant ID to look up

        Returns:
            Tenant if found, None otherwise
        """
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_tenant_by_slug(self, slug: str) -> Optional[Tenant]:
        result = await self.db.execute(
            select(Tenant).where(Tenant.slug == slug)
        )
        return result.scalar_one_or_none()

    async def create_tenant(self, data: TenantCreate, owner: AuthenticatedUser) -> Tenant:
        """Create a tenant and make ``owner`` its active tenant_admin.

        Both rows are written in one transaction. Must run on an admin
        session: the new tenant is invisible to the owner until the
        membership exists.

        Raises:
            ConflictError: if the slug is taken
        """
        if await self.get_tenant_by_slug(data.slug):
            raise ConflictError("A tenant with this slug already exists")

        tenant = Tenant(
            name=data.name,
            slug=data.slug,
            plan=TenantPlan.TRIAL,
            status=TenantStatus.ACTIVE,
            settings={},
        )
        try:
            await UserService(self.db).ensure_profile(owner)
            self.db.add(tenant)
            await self.db.flush()
            self.db.add(Membership(
                user_id=owner.id,
                tenant_id=tenant.id,
                role=MembershipRole.TENANT_ADMIN,
                status=MembershipStatus.ACTIVE,
            ))
            await self.db.commit()
        except IntegrityError:
            # Race condition - another request took the slug
            await self.db.rollback()
            raise ConflictError("A tenant with this slug already exists")

        await self.db.refresh(tenant)
        logger.info(f"Created tenant {tenant.slug} (id={tenant.id}) for user {owner.id}")
        return tenant
