"""Request-scoped caller identity.

The row-level-security policies in the database key off the caller's user
id. ``RequestContextMiddleware`` stores the verified id here and
``core.database.get_db`` copies it onto every session it hands out.

Usage:
    from core.request_context import get_current_user_id, set_current_user_id

    # In middleware (automatic)
    set_current_user_id(user_id_from_jwt)

    # Manual context (scripts, tests)
    with UserContext(user_id):
        ...
"""

from contextvars import ContextVar
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_current_user_id: ContextVar[Optional[str]] = ContextVar(
    'current_user_id',
    default=None
)


def get_current_user_id() -> Optional[str]:
    """Get the verified user id of the current request, if any."""
    return _current_user_id.get()


def set_current_user_id(user_id: Optional[str]) -> None:
    """Set the verified user id for the current request."""
    _current_user_id.set(user_id)
    logger.debug(f"User context set to: {user_id}")


def clear_request_context() -> None:
    """Clear the user context at the end of request processing."""
    _current_user_id.set(None)


class UserContext:
    """Context manager that scopes database sessions to a user.

        async def run_as(user_id: str):
            with UserContext(user_id):
                async for db in get_db():
                    ...

    The previous value is restored on exit.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self._token = None

    def __enter__(self):
        self._token = _current_user_id.set(self.user_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _current_user_id.reset(self._token)
        return False

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)


__all__ = [
    "get_current_user_id",
    "set_current_user_id",
    "clear_request_context",
    "UserContext",
]
