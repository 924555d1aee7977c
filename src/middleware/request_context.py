"""Request context middleware.

Verifies the caller's access token (if any) and stores the user id in the
request context, where ``core.database.get_db`` picks it up for the
row-level-security session variables. Rejecting unauthenticated calls is
left to the ``get_current_user`` dependency.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import logging

from core.exceptions import UnauthorizedError
from core.request_context import set_current_user_id, clear_request_context
from core.security import decode_access_token, extract_token

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to set the verified user id for the request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        user_id = None
        token = extract_token(request)
        if token:
            try:
                user_id = str(decode_access_token(token)["sub"])
            except UnauthorizedError as e:
                logger.debug(f"No user context for {request.url.path}: {e.message}")

        set_current_user_id(user_id)
        request.state.user_id = user_id

        try:
            return await call_next(request)
        finally:
            # Always clear context after request
            clear_request_context()
