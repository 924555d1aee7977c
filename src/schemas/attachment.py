"""Attachment schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AttachmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    uploader_user_id: str
    filename: str
    original_filename: str
    file_size: int
    mime_type: str
    download_url: str
    virus_scan_status: str
    created_at: datetime


class PendingAttachmentResponse(BaseModel):
    """Metadata returned while a scan is still running (``accept-pending``)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    original_filename: str
    file_size: int
    mime_type: str
    virus_scan_status: str
    message: str = "File is being scanned for viruses"
