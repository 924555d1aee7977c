"""Database models for the franchise communications API."""

from .base import Base
from .tenant import Tenant, TenantStatus, TenantPlan
from .user import User
from .membership import Membership, MembershipRole, MembershipStatus
from .location import Location, LocationMembership, LocationStatus
from .post import Post, Comment, Reaction, ReadReceipt, PostType, ReactionType
from .attachment import Attachment, VirusScanStatus
from .request import DataRequest, RequestResponse, RequestStatus, FieldType

__all__ = [
    "Base",
    "Tenant",
    "TenantStatus",
    "TenantPlan",
    "User",
    "Membership",
    "MembershipRole",
    "MembershipStatus",
    "Location",
    "LocationMembership",
    "LocationStatus",
    "Post",
    "Comment",
    "Reaction",
    "ReadReceipt",
    "PostType",
    "ReactionType",
    "Attachment",
    "VirusScanStatus",
    "DataRequest",
    "RequestResponse",
    "RequestStatus",
    "FieldType",
]
