"""Authentication endpoints."""

from fastapi import APIRouter, Depends
import logging

from core.dependencies import get_user_service
from core.security import AuthenticatedUser, get_current_user
from schemas.user import UserProfile
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_me(
    current_user: AuthenticatedUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Profile of the signed-in user.

    Falls back to the token claims when the profile row has not been
    mirrored yet.
    """
    return await users.get_profile(current_user)
