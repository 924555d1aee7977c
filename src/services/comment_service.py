"""Comment service."""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from models.post import Comment, Post
from schemas.post import CommentCreate
from services.access import Actor, ResourceRef, can_access

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_comment(self, comment_id: str, tenant_id: str) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id, Comment.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_visible_comment(self, comment_id: str, actor: Actor) -> Optional[Tuple[Comment, Post]]:
        """The comment and its post, if the actor may see the post."""
        result = await self.db.execute(
            select(Comment, Post)
            .join(Post, Post.id == Comment.post_id)
            .where(Comment.id == comment_id, Comment.tenant_id == actor.tenant_id)
        )
        row = result.first()
        if row is None:
            return None
        comment, post = row
        if not can_access(actor, ResourceRef.for_comment(comment, post)):
            return None
        return comment, post

    async def create_comment(self, actor: Actor, post: Post, data: CommentCreate) -> Comment:
        comment = Comment(
            tenant_id=post.tenant_id,
            post_id=post.id,
            parent_comment_id=data.parent_comment_id,
            author_user_id=actor.user_id,
            body=data.body,
            body_rich=data.body_rich,
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        logger.info(f"Created comment {comment.id} on post {post.id}")
        return comment
