"""Request service: creation, listing, location responses and the overdue sweep."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_
from sqlalchemy.dialects.postgresql import array
from sqlalchemy.exc import IntegrityError
import logging

from core.exceptions import ConflictError
from models.post import Post
from models.request import DataRequest, RequestResponse, RequestStatus
from schemas.request import DataRequestCreate
from services.access import Actor
from services.post_service import visible_posts_clause
from services.targeting import GLOBAL, CompletionStats, CompletionStatsError

logger = logging.getLogger(__name__)


@dataclass
class RequestFilter:
    """Request listing for one actor.

    ``role`` narrows to requests the actor ``created`` or requests
    ``assigned`` to the actor's locations.
    """
    actor: Actor
    status: Optional[str] = None
    role: Optional[str] = None


def _assigned_clause(actor: Actor):
    conditions = [Post.targeting["type"].astext == GLOBAL]
    if actor.location_ids:
        conditions.append(
            Post.targeting["location_ids"].has_any(array(sorted(actor.location_ids)))
        )
    return or_(*conditions)


class RequestService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_requests(self, filters: RequestFilter) -> List[DataRequest]:
        actor = filters.actor
        query = (
            select(DataRequest)
            .join(Post, Post.id == DataRequest.post_id)
            .where(
                DataRequest.tenant_id == actor.tenant_id,
                visible_posts_clause(actor),
            )
        )
        if filters.status:
            query = query.where(DataRequest.status == filters.status)
        if filters.role == "created":
            query = query.where(DataRequest.created_by == actor.user_id)
        elif filters.role == "assigned":
            query = query.where(_assigned_clause(actor))

        result = await self.db.execute(query.order_by(DataRequest.created_at.desc(), DataRequest.id))
        return list(result.scalars().all())

    async def get_request(self, request_id: str, tenant_id: str) -> Optional[DataRequest]:
        result = await self.db.execute(
            select(DataRequest).where(DataRequest.id == request_id, DataRequest.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def create_request(
        self,
        actor: Actor,
        post: Post,
        data: DataRequestCreate,
        total_locations: int,
    ) -> DataRequest:
        """Create a request with freshly initialized completion stats."""
        stats = CompletionStats.initial(total_locations)
        request = DataRequest(
            tenant_id=actor.tenant_id,
            post_id=post.id,
            created_by=actor.user_id,
            title=data.title,
            description=data.description,
            fields=[field.model_dump(exclude_none=True) for field in data.fields],
            due_date=data.due_date,
            status=RequestStatus.ACTIVE,
            completion_stats=stats.to_dict(),
        )
        self.db.add(request)
        await self.db.commit()
        await self.db.refresh(request)
        logger.info(
            f"Created request {request.id} on post {post.id} "
            f"expecting {total_locations} locations"
        )
        return request

    async def submit_response(
        self,
        actor: Actor,
        request_id: str,
        location_id: str,
        values: Dict[str, Any],
    ) -> RequestResponse:
        """Record one location's response and count it in the stats.

        The request row is locked for the duration so concurrent
        submissions serialize on the counters.

        Raises:
            ConflictError: if the request is closed, the location already
                responded, or nothing is outstanding
        """
        result = await self.db.execute(
            select(DataRequest)
            .where(DataRequest.id == request_id, DataRequest.tenant_id == actor.tenant_id)
            .with_for_update()
        )
        request = result.scalar_one()
        if request.status != RequestStatus.ACTIVE:
            await self.db.rollback()
            raise ConflictError("Request is closed")

        try:
            stats = CompletionStats.from_dict(request.completion_stats).record_submission()
        except CompletionStatsError as e:
            await self.db.rollback()
            logger.warning(f"Submission rejected for request {request_id}: {e}")
            raise ConflictError("All targeted locations have already responded")

        response = RequestResponse(
            request_id=request.id,
            location_id=location_id,
            submitted_by=actor.user_id,
            values=values,
        )
        self.db.add(response)
        request.completion_stats = stats.to_dict()
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("This location has already responded to the request")

        await self.db.refresh(response)
        logger.info(f"Location {location_id} responded to request {request_id}")
        return response

    async def sweep_overdue(self, now: Optional[datetime] = None) -> int:
        """Move pending locations to overdue on active requests past due.

        Returns the number of requests updated. Meant for an admin session.
        A naive ``now`` is taken as UTC.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        result = await self.db.execute(
            select(DataRequest)
            .where(
                and_(
                    DataRequest.status == RequestStatus.ACTIVE,
                    DataRequest.due_date.is_not(None),
                    DataRequest.due_date < now,
                )
            )
            .with_for_update(skip_locked=True)
        )

        updated = 0
        for request in result.scalars().all():
            stats = CompletionStats.from_dict(request.completion_stats)
            swept = stats.mark_overdue()
            if swept != stats:
                request.completion_stats = swept.to_dict()
                updated += 1

        await self.db.commit()
        logger.info(f"Overdue sweep marked {updated} requests")
        return updated
