"""User profile service."""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
import logging

from core.security import AuthenticatedUser
from models.user import User
from schemas.user import UserProfile

logger = logging.getLogger(__name__)


def profile_from_claims(user: AuthenticatedUser) -> UserProfile:
    """Profile built from the access token when no row is mirrored yet."""
    metadata = user.user_metadata
    return UserProfile(
        id=user.id,
        email=user.email,
        name=metadata.get("full_name") or metadata.get("name"),
        avatar_url=metadata.get("avatar_url"),
        source="auth",
    )


class UserService:
    """Reads and mirrors user profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_profile(self, user: AuthenticatedUser) -> UserProfile:
        """Profile row if mirrored, else the token's view of the user."""
        row = await self.get_user(user.id)
        if row is None:
            logger.info(f"No profile row for user {user.id}, using token claims")
            return profile_from_claims(user)
        return UserProfile.model_validate(row)

    async def ensure_profile(self, user: AuthenticatedUser) -> None:
        """Mirror the caller's profile row if it is missing.

        Does not commit; callers include it in their own transaction.
        """
        profile = profile_from_claims(user)
        stmt = insert(User).values(
            id=user.id,
            email=profile.email or "",
            name=profile.name,
            avatar_url=profile.avatar_url,
        ).on_conflict_do_nothing(index_elements=[User.id])
        await self.db.execute(stmt)
