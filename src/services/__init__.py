"""Service layer for business logic."""

from .membership_service import MembershipService
from .user_service import UserService
from .tenant_service import TenantService
from .location_service import LocationService
from .post_service import PostService
from .comment_service import CommentService
from .reaction_service import ReactionService
from .read_receipt_service import ReadReceiptService
from .request_service import RequestService
from .attachment_service import AttachmentService
from .storage import StorageClient

__all__ = [
    "MembershipService",
    "UserService",
    "TenantService",
    "LocationService",
    "PostService",
    "CommentService",
    "ReactionService",
    "ReadReceiptService",
    "RequestService",
    "AttachmentService",
    "StorageClient",
]
