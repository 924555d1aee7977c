"""Tenant schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class TenantCreate(BaseModel):
    """Onboarding payload."""
    name: str
    slug: str


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    plan: str
    status: str
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class CurrentTenantResponse(TenantResponse):
    """Tenant plus the caller's role in it."""
    role: str
