"""Request (data collection) schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class RequestField(BaseModel):
    name: str
    type: str
    required: bool
    options: Optional[List[str]] = None


class CompletionStatsSchema(BaseModel):
    total_locations: int
    submitted: int
    pending: int
    overdue: int


class DataRequestCreate(BaseModel):
    post_id: str
    title: str
    description: Optional[str] = None
    fields: List[RequestField]
    due_date: Optional[datetime] = None


class DataRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    post_id: str
    created_by: str
    title: str
    description: Optional[str] = None
    fields: List[RequestField]
    due_date: Optional[datetime] = None
    status: str
    completion_stats: CompletionStatsSchema
    created_at: datetime
    updated_at: datetime


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    request_id: str
    location_id: str
    submitted_by: str
    values: Dict[str, Any]
    submitted_at: datetime
