"""Membership lookups and actor resolution."""

from typing import FrozenSet, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from models.location import Location, LocationMembership
from models.membership import Membership
from services.access import Actor, resolve_active_tenant

logger = logging.getLogger(__name__)


class MembershipService:
    """Resolves who the caller acts as.

    Provides:
    - The caller's memberships and the active one among them
    - The caller's location assignments within a tenant
    - The ``Actor`` consumed by ``services.access``
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_memberships(self, user_id: str) -> List[Membership]:
        result = await self.db.execute(
            select(Membership)
            .where(Membership.user_id == user_id)
            .order_by(Membership.created_at, Membership.id)
        )
        return list(result.scalars().all())

    async def get_active_membership(self, user_id: str) -> Optional[Membership]:
        """Get the membership the user currently acts through, if any."""
        return resolve_active_tenant(await self.list_memberships(user_id))

    async def list_location_ids(self, user_id: str, tenant_id: str) -> FrozenSet[str]:
        """Ids of the tenant's locations the user is assigned to."""
        result = await self.db.execute(
            select(LocationMembership.location_id)
            .join(Location, Location.id == LocationMembership.location_id)
            .where(
                LocationMembership.user_id == user_id,
                Location.tenant_id == tenant_id,
            )
        )
        return frozenset(str(location_id).lower() for location_id in result.scalars().all())

    async def get_actor(self, user_id: str) -> Optional[Actor]:
        """Build the authorization view of a user, or None without an active membership."""
        membership = await self.get_active_membership(user_id)
        if membership is None:
            logger.debug(f"No active membership for user {user_id}")
            return None

        location_ids = await self.list_location_ids(user_id, membership.tenant_id)
        return Actor(
            user_id=user_id,
            tenant_id=membership.tenant_id,
            role=membership.role,
            location_ids=location_ids,
        )
