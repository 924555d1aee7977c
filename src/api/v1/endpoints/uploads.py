"""File upload endpoint for post and comment attachments."""

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
import logging

from core.config import get_settings
from core.dependencies import (
    get_attachment_service,
    get_comment_service,
    get_membership_service,
    get_post_service,
)
from core.exceptions import BadRequestError, FileTooLargeError, NotFoundError
from core.security import AuthenticatedUser, get_current_user
from core.validation import optional_uuid
from schemas.attachment import AttachmentResponse
from services.access import require_actor
from services.attachment_service import AttachmentService
from services.comment_service import CommentService
from services.membership_service import MembershipService
from services.post_service import PostService
from services.storage import StorageClient, get_storage_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AttachmentResponse, status_code=201)
async def upload_file(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    comments: CommentService = Depends(get_comment_service),
    attachments: AttachmentService = Depends(get_attachment_service),
    storage: StorageClient = Depends(get_storage_client),
):
    """Upload a file and attach it to a post or comment.

    Multipart fields: ``file`` (required), ``post_id`` and ``comment_id``
    (optional UUIDs). The attachment starts out ``pending`` a virus scan.
    """
    settings = get_settings()
    try:
        form = await request.form()
    except Exception as e:
        logger.warning(f"Malformed multipart body from user {current_user.id}: {e}")
        raise BadRequestError("Invalid multipart form data")

    file = form.get("file")
    if not isinstance(file, UploadFile):
        raise BadRequestError("file is required")

    content = await file.read()
    if not content:
        raise BadRequestError("file must not be empty")

    post_id = optional_uuid(form.get("post_id"), "post_id")
    comment_id = optional_uuid(form.get("comment_id"), "comment_id")

    if len(content) > settings.MAX_UPLOAD_SIZE:
        logger.warning(f"Upload rejected: too large ({len(content)} bytes) from user {current_user.id}")
        raise FileTooLargeError(
            f"File too large. Max size: {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB"
        )

    mime_type = (file.content_type or "").split(";")[0].strip().lower()
    if mime_type not in settings.ALLOWED_UPLOAD_TYPES:
        logger.warning(f"Upload rejected: unsupported type {mime_type!r} from user {current_user.id}")
        raise BadRequestError(f"Unsupported file type: {mime_type or 'unknown'}")

    actor = require_actor(await memberships.get_actor(current_user.id))

    if comment_id:
        visible = await comments.get_visible_comment(comment_id, actor)
        if visible is None:
            raise NotFoundError("Comment not found")
        comment, post = visible
        if post_id and post_id != post.id:
            raise BadRequestError("comment_id does not belong to post_id")
        post_id = post.id
    elif post_id:
        if await posts.get_visible_post(post_id, actor) is None:
            raise NotFoundError("Post not found")

    attachment = await attachments.create_attachment(
        actor,
        storage,
        content,
        file.filename or "unnamed",
        mime_type,
        post_id=post_id,
        comment_id=comment_id,
    )
    return AttachmentResponse.model_validate(attachment)
