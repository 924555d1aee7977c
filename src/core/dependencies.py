"""Common dependencies for FastAPI endpoints.

Path-id validators are declared ahead of ``get_current_user`` in endpoint
signatures: a malformed id is rejected with 400 before auth, body parsing
or any database work. Service providers come last, so nothing opens a
session for a request that fails earlier.
"""

from fastapi import Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_admin_db, get_db
from .validation import require_uuid
from services.attachment_service import AttachmentService
from services.comment_service import CommentService
from services.location_service import LocationService
from services.membership_service import MembershipService
from services.post_service import PostService
from services.reaction_service import ReactionService
from services.read_receipt_service import ReadReceiptService
from services.request_service import RequestService
from services.tenant_service import TenantService
from services.user_service import UserService


def valid_post_id(post_id: str = Path(...)) -> str:
    return require_uuid(post_id, "post ID")


def valid_request_id(request_id: str = Path(...)) -> str:
    return require_uuid(request_id, "request ID")


def valid_attachment_id(attachment_id: str = Path(...)) -> str:
    return require_uuid(attachment_id, "attachment ID")


def get_membership_service(db: AsyncSession = Depends(get_db)) -> MembershipService:
    return MembershipService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_tenant_service(db: AsyncSession = Depends(get_db)) -> TenantService:
    return TenantService(db)


def get_onboarding_service(db: AsyncSession = Depends(get_admin_db)) -> TenantService:
    """Tenant service on an admin session, for creating tenants."""
    return TenantService(db)


def get_location_service(db: AsyncSession = Depends(get_db)) -> LocationService:
    return LocationService(db)


def get_post_service(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


def get_reaction_service(db: AsyncSession = Depends(get_db)) -> ReactionService:
    return ReactionService(db)


def get_read_receipt_service(db: AsyncSession = Depends(get_db)) -> ReadReceiptService:
    return ReadReceiptService(db)


def get_request_service(db: AsyncSession = Depends(get_db)) -> RequestService:
    return RequestService(db)


def get_attachment_service(db: AsyncSession = Depends(get_db)) -> AttachmentService:
    return AttachmentService(db)


def get_scanner_attachment_service(db: AsyncSession = Depends(get_admin_db)) -> AttachmentService:
    """Attachment service on an admin session, for scanner callbacks."""
    return AttachmentService(db)
