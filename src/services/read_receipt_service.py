"""Read receipts: one per user per post, timestamp only moves forward."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert

from models.post import ReadReceipt


class ReadReceiptService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def mark_read(self, post_id: str, user_id: str) -> ReadReceipt:
        stmt = insert(ReadReceipt).values(post_id=post_id, user_id=user_id, read_at=func.now())
        stmt = stmt.on_conflict_do_update(
            index_elements=[ReadReceipt.post_id, ReadReceipt.user_id],
            set_={"read_at": func.greatest(ReadReceipt.read_at, stmt.excluded.read_at)},
        ).returning(ReadReceipt)
        result = await self.db.execute(stmt)
        receipt = result.scalar_one()
        await self.db.commit()
        return receipt
