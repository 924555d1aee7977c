"""Post service: feed queries and post creation."""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, true
from sqlalchemy.dialects.postgresql import array
import logging

from models.post import Post
from schemas.post import PostCreate
from services.access import Actor, ResourceRef, can_access
from services.targeting import GLOBAL

logger = logging.getLogger(__name__)


@dataclass
class PostFilter:
    """Feed query for one actor."""
    actor: Actor
    post_type: Optional[str] = None
    search: Optional[str] = None
    limit: int = 20
    offset: int = 0


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def visible_posts_clause(actor: Actor):
    """SQL form of ``services.access.can_see_post`` (tenant filter excluded)."""
    if actor.is_tenant_level:
        return true()
    conditions = [
        Post.author_user_id == actor.user_id,
        Post.targeting["type"].astext == GLOBAL,
    ]
    if actor.location_ids:
        conditions.append(
            Post.targeting["location_ids"].has_any(array(sorted(actor.location_ids)))
        )
    return or_(*conditions)


class PostService:
    """Post operations scoped to the caller's tenant."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _feed_query(self, filters: PostFilter):
        actor = filters.actor
        query = select(Post).where(
            Post.tenant_id == actor.tenant_id,
            visible_posts_clause(actor),
        )
        if filters.post_type:
            query = query.where(Post.post_type == filters.post_type)
        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            query = query.where(or_(
                Post.title.ilike(pattern, escape="\\"),
                Post.body.ilike(pattern, escape="\\"),
            ))
        return query

    async def find_posts(self, filters: PostFilter) -> Tuple[List[Post], int]:
        """Page of visible posts, newest first, plus the total match count."""
        query = self._feed_query(filters)

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()

        result = await self.db.execute(
            query.order_by(Post.created_at.desc(), Post.id)
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all()), total

    async def get_post(self, post_id: str, tenant_id: str) -> Optional[Post]:
        result = await self.db.execute(
            select(Post).where(Post.id == post_id, Post.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_visible_post(self, post_id: str, actor: Actor) -> Optional[Post]:
        """The post if it exists in the actor's tenant and the actor may see it."""
        post = await self.get_post(post_id, actor.tenant_id)
        if post is None or not can_access(actor, ResourceRef.for_post(post)):
            return None
        return post

    async def create_post(self, actor: Actor, data: PostCreate) -> Post:
        """Persist a post whose targeting has already passed the access gate."""
        post = Post(
            tenant_id=actor.tenant_id,
            author_user_id=actor.user_id,
            title=data.title,
            body=data.body,
            body_rich=data.body_rich,
            post_type=data.post_type,
            targeting=data.targeting,
            due_date=data.due_date,
            status="active",
        )
        self.db.add(post)
        await self.db.commit()
        await self.db.refresh(post)
        logger.info(f"Created {post.post_type} post {post.id} in tenant {actor.tenant_id}")
        return post
