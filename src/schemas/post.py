"""Post, comment, reaction and read-receipt schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Validated post payload; ``targeting`` is already normalized."""
    title: Optional[str] = None
    body: str
    body_rich: Optional[Dict[str, Any]] = None
    post_type: str
    targeting: Dict[str, Any] = Field(default_factory=lambda: {"type": "global"})
    due_date: Optional[datetime] = None


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    author_user_id: str
    title: Optional[str] = None
    body: str
    body_rich: Optional[Dict[str, Any]] = None
    post_type: str
    targeting: Dict[str, Any]
    due_date: Optional[datetime] = None
    status: str
    created_at: datetime
    updated_at: datetime


class CommentCreate(BaseModel):
    body: str
    body_rich: Optional[Dict[str, Any]] = None
    parent_comment_id: Optional[str] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    parent_comment_id: Optional[str] = None
    author_user_id: str
    body: str
    body_rich: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class ReactionResult(BaseModel):
    """Outcome of an add/remove reaction call."""
    message: str
    post_id: str
    action: str
    type: str


class ReadReceiptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message: str = "Post marked as read successfully"
    post_id: str
    user_id: str
    read_at: datetime
