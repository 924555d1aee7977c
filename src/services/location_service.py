"""Location service."""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from core.validation import is_uuid
from models.location import Location, LocationStatus
from schemas.location import LocationCreate
from services.access import Actor

logger = logging.getLogger(__name__)


@dataclass
class LocationFilter:
    tenant_id: str
    status: Optional[str] = None


class LocationService:
    """Location queries, always scoped to one tenant."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_locations(self, filters: LocationFilter) -> List[Location]:
        query = select(Location).where(Location.tenant_id == filters.tenant_id)
        if filters.status:
            query = query.where(Location.status == filters.status)
        result = await self.db.execute(query.order_by(Location.name, Location.id))
        return list(result.scalars().all())

    async def get_location(self, location_id: str, tenant_id: str) -> Optional[Location]:
        result = await self.db.execute(
            select(Location).where(Location.id == location_id, Location.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def resolve_location_ids(self, tenant_id: str, location_ids: Iterable[str]) -> List[str]:
        """Return the subset of ``location_ids`` that exist in the tenant.

        Ids that are not UUIDs cannot match a primary key and are dropped
        before the query.
        """
        location_ids = [location_id for location_id in location_ids if is_uuid(location_id)]
        if not location_ids:
            return []
        result = await self.db.execute(
            select(Location.id).where(
                Location.tenant_id == tenant_id,
                Location.id.in_(location_ids),
            )
        )
        return [str(location_id).lower() for location_id in result.scalars().all()]

    async def count_active_locations(self, tenant_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Location.id)).where(
                Location.tenant_id == tenant_id,
                Location.status == LocationStatus.ACTIVE,
            )
        )
        return result.scalar_one()

    async def create_location(self, actor: Actor, data: LocationCreate) -> Location:
        location = Location(
            tenant_id=actor.tenant_id,
            name=data.name,
            address=data.address,
            city=data.city,
            state=data.state,
            zip_code=data.zip_code,
            phone=data.phone,
            email=data.email,
            status=LocationStatus.ACTIVE,
            settings={},
        )
        self.db.add(location)
        await self.db.commit()
        await self.db.refresh(location)
        logger.info(f"Created location {location.id} in tenant {actor.tenant_id}")
        return location
