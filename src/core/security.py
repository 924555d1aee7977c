"""Security utilities for authentication.

Access tokens are issued by Supabase Auth; this service only verifies
them. A token is accepted from the ``Authorization: Bearer`` header or,
for browser sessions, from the access-token cookie.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from .config import get_settings
from .exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header falls through to the cookie
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Verified caller identity taken from the access token."""

    id: str
    email: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_metadata(self) -> Dict[str, Any]:
        return self.claims.get("user_metadata") or {}


def extract_token(request: Request) -> Optional[str]:
    """Return the raw access token carried by the request, if any."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    cookie = request.cookies.get(get_settings().ACCESS_TOKEN_COOKIE)
    return cookie or None


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify a Supabase access token and return its claims.

    Raises:
        UnauthorizedError: if the signature, audience or expiry is invalid,
            or the token carries no subject.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Session expired")
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise UnauthorizedError("Invalid authentication token")

    if not payload.get("sub"):
        raise UnauthorizedError("Invalid authentication token")
    return payload


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """Resolve the verified caller or fail with 401.

    Runs before any body parsing, validation or lookup.
    """
    token = credentials.credentials if credentials else extract_token(request)
    if not token:
        raise UnauthorizedError("Authentication required")

    payload = decode_access_token(token)
    return AuthenticatedUser(
        id=str(payload["sub"]),
        email=payload.get("email"),
        claims=payload,
    )


__all__ = [
    "AuthenticatedUser",
    "bearer_scheme",
    "extract_token",
    "decode_access_token",
    "get_current_user",
]
