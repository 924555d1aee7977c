"""Attachment service: upload records and virus scan status."""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging
import os
import re
import uuid

from core.exceptions import ConflictError, NotFoundError
from models.attachment import Attachment, VirusScanStatus
from services.access import Actor
from services.storage import StorageClient

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 255


def sanitize_filename(filename: str) -> str:
    """Strip path components and control characters from a client filename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = re.sub(r'[\x00-\x1f]', '', name)
    if len(name) > MAX_FILENAME_LENGTH:
        base, ext = os.path.splitext(name)
        name = base[:MAX_FILENAME_LENGTH - len(ext)] + ext
    return name or "unnamed"


def generate_filename(original_filename: str) -> str:
    """Collision-resistant storage name keeping the original extension."""
    ext = os.path.splitext(original_filename)[1].lower()
    if not re.fullmatch(r"\.[a-z0-9]{1,10}", ext):
        ext = ""
    return f"{uuid.uuid4()}{ext}"


def advance_scan_status(current: str, new: str) -> str:
    """Apply a scanner verdict.

    ``pending`` moves to ``clean`` or ``infected`` once; repeating the
    current verdict is a no-op; anything else is refused.
    """
    if new == current:
        return current
    if current == VirusScanStatus.PENDING and new in VirusScanStatus.FINAL:
        return new
    raise ConflictError(f"Cannot change virus scan status from {current} to {new}")


class AttachmentService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_attachment(self, attachment_id: str, tenant_id: Optional[str] = None) -> Optional[Attachment]:
        """Look up an attachment, scoped to ``tenant_id`` unless it is None."""
        query = select(Attachment).where(Attachment.id == attachment_id)
        if tenant_id is not None:
            query = query.where(Attachment.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create_attachment(
        self,
        actor: Actor,
        storage: StorageClient,
        content: bytes,
        original_filename: str,
        mime_type: str,
        post_id: Optional[str] = None,
        comment_id: Optional[str] = None,
    ) -> Attachment:
        """Store the file and record it with a pending scan status."""
        original_filename = sanitize_filename(original_filename)
        filename = generate_filename(original_filename)
        storage_path = f"attachments/{filename}"

        await storage.upload(storage_path, content, mime_type)

        attachment = Attachment(
            tenant_id=actor.tenant_id,
            post_id=post_id,
            comment_id=comment_id,
            uploader_user_id=actor.user_id,
            filename=filename,
            original_filename=original_filename,
            file_size=len(content),
            mime_type=mime_type,
            storage_path=storage_path,
            download_url=storage.public_url(storage_path),
            virus_scan_status=VirusScanStatus.PENDING,
        )
        self.db.add(attachment)
        await self.db.commit()
        await self.db.refresh(attachment)
        logger.info(
            f"Attachment {attachment.id} stored ({mime_type}, {len(content)} bytes) "
            f"by user {actor.user_id}"
        )
        return attachment

    async def record_scan_result(self, attachment_id: str, status: str) -> Attachment:
        """Store the scanner's verdict for an attachment (any tenant)."""
        result = await self.db.execute(
            select(Attachment).where(Attachment.id == attachment_id).with_for_update()
        )
        attachment = result.scalar_one_or_none()
        if attachment is None:
            raise NotFoundError("Attachment not found")

        new_status = advance_scan_status(attachment.virus_scan_status, status)
        if new_status != attachment.virus_scan_status:
            attachment.virus_scan_status = new_status
            await self.db.commit()
            await self.db.refresh(attachment)
            log = logger.warning if new_status == VirusScanStatus.INFECTED else logger.info
            log(f"Attachment {attachment_id} scanned: {new_status}")
        return attachment
