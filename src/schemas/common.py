"""Common Pydantic schemas."""

from typing import Dict, List, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone


T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Error envelope returned by every endpoint."""
    error: str = Field(..., description="Error kind, e.g. 'Bad Request'")
    message: str


class Pagination(BaseModel):
    """Offset pagination metadata."""
    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)


class DataResponse(BaseModel, Generic[T]):
    """List wrapper: ``{"data": [...]}``."""
    model_config = ConfigDict(from_attributes=True)

    data: List[T]


class PaginatedResponse(DataResponse[T], Generic[T]):
    """List wrapper with pagination metadata."""
    pagination: Pagination


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    services: Dict[str, str] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
