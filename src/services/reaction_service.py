"""Reactions: one per user per post, replaced on re-add."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func
from sqlalchemy.dialects.postgresql import insert
import logging

from models.post import Reaction

logger = logging.getLogger(__name__)


class ReactionService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_reaction(self, post_id: str, user_id: str, reaction_type: str) -> None:
        """Set the user's reaction on a post, replacing any previous type."""
        stmt = insert(Reaction).values(post_id=post_id, user_id=user_id, type=reaction_type)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Reaction.post_id, Reaction.user_id],
            set_={"type": stmt.excluded.type, "updated_at": func.now()},
        )
        await self.db.execute(stmt)
        await self.db.commit()
        logger.debug(f"Reaction {reaction_type} set by {user_id} on post {post_id}")

    async def remove_reaction(self, post_id: str, user_id: str) -> bool:
        """Delete the user's reaction. Returns False when there was none."""
        result = await self.db.execute(
            delete(Reaction).where(Reaction.post_id == post_id, Reaction.user_id == user_id)
        )
        await self.db.commit()
        return result.rowcount > 0
