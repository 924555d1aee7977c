"""Authorization policy.

Application-level restatement of the row-level-security policies, so
handlers can decide access without relying on the database alone:

* a caller acts through one active membership (``resolve_active_tenant``);
* every resource must belong to that tenant;
* tenant-level roles and the author see every post of the tenant,
  franchise-level roles see global posts and posts targeting one of their
  locations;
* comments, requests and attachments are visible when their parent is.

Handlers turn a ``False`` from ``can_access`` into ``404 Not Found`` so the
existence of other tenants' rows is never confirmed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, FrozenSet, Iterable, Optional
import logging

from core.exceptions import ForbiddenError
from models.membership import MembershipRole, MembershipStatus
from services.targeting import Targeting

logger = logging.getLogger(__name__)

TENANT_LEVEL_ROLES = frozenset({
    MembershipRole.TENANT_ADMIN,
    MembershipRole.TENANT_STAFF,
    MembershipRole.CORPORATE_ADMIN,
    MembershipRole.CORPORATE_STAFF,
    MembershipRole.CORPORATE_MANAGER,
})
FRANCHISE_LEVEL_ROLES = frozenset({
    MembershipRole.FRANCHISE_OWNER,
    MembershipRole.FRANCHISE_STAFF,
})
CORPORATE_ROLES = frozenset({
    MembershipRole.CORPORATE_ADMIN,
    MembershipRole.CORPORATE_STAFF,
    MembershipRole.CORPORATE_MANAGER,
})
LOCATION_MANAGER_ROLES = frozenset({
    MembershipRole.TENANT_ADMIN,
    MembershipRole.FRANCHISE_OWNER,
})

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _membership_order(membership: Any):
    created_at = getattr(membership, "created_at", None) or _EPOCH
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (created_at, str(getattr(membership, "id", "")))


def resolve_active_tenant(memberships: Iterable[Any]) -> Optional[Any]:
    """Pick the membership a caller acts through.

    Only active memberships count; among several, the oldest wins (ties
    broken by id) so the choice is stable across requests.
    """
    active = [m for m in memberships if m.status == MembershipStatus.ACTIVE]
    if not active:
        return None
    return min(active, key=_membership_order)


@dataclass(frozen=True)
class Actor:
    """The caller as seen by authorization checks."""

    user_id: str
    tenant_id: str
    role: str
    location_ids: FrozenSet[str] = frozenset()

    @property
    def is_tenant_level(self) -> bool:
        return self.role in TENANT_LEVEL_ROLES


def require_actor(actor: Optional[Actor]) -> Actor:
    if actor is None:
        raise ForbiddenError("No active membership found")
    return actor


def require_role(actor: Actor, allowed: FrozenSet[str], message: str) -> None:
    """Fail with 403 unless the actor's role is in ``allowed``."""
    if actor.role not in allowed:
        logger.warning(f"Role {actor.role} denied for user {actor.user_id}: {message}")
        raise ForbiddenError(message)


@dataclass(frozen=True)
class ResourceRef:
    """What ``can_access`` needs to know about a row."""

    kind: str
    tenant_id: str
    author_user_id: Optional[str] = None
    targeting: Optional[Targeting] = None
    parent: Optional["ResourceRef"] = None

    POST = "post"
    COMMENT = "comment"
    REQUEST = "request"
    ATTACHMENT = "attachment"
    LOCATION = "location"

    @classmethod
    def for_post(cls, post) -> "ResourceRef":
        return cls(
            kind=cls.POST,
            tenant_id=post.tenant_id,
            author_user_id=post.author_user_id,
            targeting=Targeting.from_stored(post.targeting),
        )

    @classmethod
    def for_comment(cls, comment, post) -> "ResourceRef":
        return cls(
            kind=cls.COMMENT,
            tenant_id=comment.tenant_id,
            author_user_id=comment.author_user_id,
            parent=cls.for_post(post),
        )

    @classmethod
    def for_request(cls, request, post) -> "ResourceRef":
        return cls(kind=cls.REQUEST, tenant_id=request.tenant_id, parent=cls.for_post(post))

    @classmethod
    def for_attachment(cls, attachment, parent: Optional["ResourceRef"] = None) -> "ResourceRef":
        return cls(
            kind=cls.ATTACHMENT,
            tenant_id=attachment.tenant_id,
            author_user_id=attachment.uploader_user_id,
            parent=parent,
        )

    @classmethod
    def for_location(cls, location) -> "ResourceRef":
        return cls(kind=cls.LOCATION, tenant_id=location.tenant_id)


def can_see_post(actor: Actor, author_user_id: Optional[str], targeting: Targeting) -> bool:
    if actor.is_tenant_level or author_user_id == actor.user_id:
        return True
    return targeting.reaches_any(actor.location_ids)


def can_access(actor: Optional[Actor], resource: ResourceRef) -> bool:
    """Whether ``actor`` may see ``resource``."""
    if actor is None or resource.tenant_id != actor.tenant_id:
        return False
    if resource.parent is not None and not can_access(actor, resource.parent):
        return False
    if resource.kind == ResourceRef.POST:
        return can_see_post(actor, resource.author_user_id, resource.targeting or Targeting())
    return True


def can_respond_for_location(actor: Actor, location_id: str) -> bool:
    """Whether the actor may submit a request response on behalf of a location."""
    return actor.is_tenant_level or location_id.lower() in actor.location_ids


__all__ = [
    "TENANT_LEVEL_ROLES",
    "FRANCHISE_LEVEL_ROLES",
    "CORPORATE_ROLES",
    "LOCATION_MANAGER_ROLES",
    "resolve_active_tenant",
    "Actor",
    "require_actor",
    "require_role",
    "ResourceRef",
    "can_see_post",
    "can_access",
    "can_respond_for_location",
]
