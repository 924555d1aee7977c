"""Attachment download and virus scan callback endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
import hmac
import logging

from core.config import get_settings
from core.dependencies import (
    get_attachment_service,
    get_comment_service,
    get_membership_service,
    get_post_service,
    get_scanner_attachment_service,
    valid_attachment_id,
)
from core.exceptions import ForbiddenError, LockedError, NotFoundError, UnauthorizedError
from core.security import AuthenticatedUser, get_current_user
from core.validation import parse_bool_param, read_json_body, require_enum, require_fields
from models.attachment import VirusScanStatus
from schemas.attachment import AttachmentResponse, PendingAttachmentResponse
from services.access import Actor
from services.attachment_service import AttachmentService
from services.comment_service import CommentService
from services.membership_service import MembershipService
from services.post_service import PostService
from services.storage import StorageClient, get_storage_client

logger = logging.getLogger(__name__)

router = APIRouter()


async def _parent_visible(
    attachment,
    actor: Actor,
    posts: PostService,
    comments: CommentService,
) -> bool:
    if attachment.comment_id:
        return await comments.get_visible_comment(attachment.comment_id, actor) is not None
    if attachment.post_id:
        return await posts.get_visible_post(attachment.post_id, actor) is not None
    return True


@router.get("/{attachment_id}/download")
async def download_attachment(
    attachment_id: str = Depends(valid_attachment_id),
    accept_pending: Optional[str] = Query(None, alias="accept-pending"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    comments: CommentService = Depends(get_comment_service),
    attachments: AttachmentService = Depends(get_attachment_service),
    storage: StorageClient = Depends(get_storage_client),
):
    """Redirect to a short-lived signed URL once the file scanned clean.

    Infected files are never served. While the scan is pending the
    response is ``423``, or ``202`` with the file's metadata when
    ``accept-pending=true``.
    """
    wants_pending = parse_bool_param(accept_pending)

    actor = await memberships.get_actor(current_user.id)
    attachment = await attachments.get_attachment(attachment_id, actor.tenant_id) if actor else None
    if attachment is None or not await _parent_visible(attachment, actor, posts, comments):
        raise NotFoundError("Attachment not found")

    if attachment.virus_scan_status == VirusScanStatus.INFECTED:
        logger.warning(f"Blocked download of infected attachment {attachment.id} by user {actor.user_id}")
        raise ForbiddenError("File failed virus scan and cannot be downloaded")

    if attachment.virus_scan_status != VirusScanStatus.CLEAN:
        if wants_pending:
            return JSONResponse(
                status_code=202,
                content=PendingAttachmentResponse.model_validate(attachment).model_dump(),
            )
        raise LockedError("Virus scan in progress, please try again later")

    signed_url = await storage.create_signed_url(attachment.storage_path)
    logger.info(f"Issued download URL for attachment {attachment.id} to user {actor.user_id}")
    return RedirectResponse(url=signed_url, status_code=302)


@router.post("/{attachment_id}/scan-result", response_model=AttachmentResponse)
async def record_scan_result(
    request: Request,
    attachment_id: str = Depends(valid_attachment_id),
    x_scanner_token: Optional[str] = Header(None),
    attachments: AttachmentService = Depends(get_scanner_attachment_service),
):
    """Callback for the virus scanner. Authenticated by ``X-Scanner-Token``."""
    expected = get_settings().SCANNER_TOKEN
    if not expected or not x_scanner_token or not hmac.compare_digest(
        x_scanner_token.encode(), expected.encode()
    ):
        raise UnauthorizedError("Invalid scanner token")

    payload = await read_json_body(request)
    require_fields(payload, ("status",))
    status = require_enum(payload["status"], "status", VirusScanStatus.FINAL)

    attachment = await attachments.record_scan_result(attachment_id, status)
    return AttachmentResponse.model_validate(attachment)
