"""User profile schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """Profile returned by ``/auth/me``.

    ``source`` is ``database`` for a mirrored profile row and ``auth`` when
    the row is missing and the fields come from the token claims.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    source: str = "database"
