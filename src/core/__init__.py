"""Core functionality for the franchise communications API."""

from .config import get_settings
from .database import get_db, get_admin_db, get_session_maker
from .security import get_current_user, AuthenticatedUser

__all__ = [
    "get_settings",
    "get_db",
    "get_admin_db",
    "get_session_maker",
    "get_current_user",
    "AuthenticatedUser",
]
