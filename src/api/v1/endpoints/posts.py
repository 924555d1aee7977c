"""Post endpoints: feed, creation, comments, reactions and read receipts."""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
import logging

from core.dependencies import (
    get_comment_service,
    get_location_service,
    get_membership_service,
    get_post_service,
    get_reaction_service,
    get_read_receipt_service,
    valid_post_id,
)
from core.exceptions import BadRequestError, NotFoundError
from core.security import AuthenticatedUser, get_current_user
from core.validation import (
    optional_enum,
    optional_uuid,
    parse_int_param,
    parse_iso_datetime,
    read_json_body,
    require_enum,
    require_fields,
    require_string,
)
from models.post import PostType, ReactionType
from schemas.common import PaginatedResponse, Pagination
from schemas.post import (
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostResponse,
    ReactionResult,
    ReadReceiptResponse,
)
from services.access import require_actor
from services.comment_service import CommentService
from services.location_service import LocationService
from services.membership_service import MembershipService
from services.post_service import PostFilter, PostService
from services.reaction_service import ReactionService
from services.read_receipt_service import ReadReceiptService
from services.targeting import Targeting, check_location_access, parse_targeting

logger = logging.getLogger(__name__)

router = APIRouter()

REACTION_ACTIONS = ("add", "remove")


def _optional_object(payload: dict, field: str) -> Optional[dict]:
    value = payload.get(field)
    if value is not None and not isinstance(value, dict):
        raise BadRequestError(f"{field} must be an object")
    return value


@router.get("", response_model=PaginatedResponse[PostResponse])
async def list_posts(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
):
    """Posts visible to the caller, newest first."""
    limit = parse_int_param(limit, "limit", default=20, minimum=1, maximum=100)
    offset = parse_int_param(offset, "offset", default=0, minimum=0)
    post_type = optional_enum(type, "type", PostType.ALL)
    search = search.strip() if search else None

    actor = await memberships.get_actor(current_user.id)
    if actor is None:
        return PaginatedResponse[PostResponse](data=[], pagination=Pagination.build(0, limit, offset))

    rows, total = await posts.find_posts(PostFilter(
        actor=actor,
        post_type=post_type,
        search=search or None,
        limit=limit,
        offset=offset,
    ))
    return PaginatedResponse[PostResponse](
        data=[PostResponse.model_validate(row) for row in rows],
        pagination=Pagination.build(total, limit, offset),
    )


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    locations: LocationService = Depends(get_location_service),
    posts: PostService = Depends(get_post_service),
):
    """Create a post targeted at all or some of the tenant's locations."""
    payload = await read_json_body(request)
    require_fields(payload, ("body", "post_type", "targeting"))

    body = require_string(payload, "body")
    post_type = require_enum(payload["post_type"], "post_type", PostType.ALL)
    targeting = parse_targeting(payload["targeting"])
    body_rich = _optional_object(payload, "body_rich")
    title = require_string(payload, "title", max_length=500, required=False) or None
    due_date = None
    if payload.get("due_date") is not None:
        due_date = parse_iso_datetime(payload["due_date"], "due_date")

    actor = require_actor(await memberships.get_actor(current_user.id))

    if not targeting.is_global:
        resolved = await locations.resolve_location_ids(actor.tenant_id, targeting.location_ids)
        resolved = set(check_location_access(targeting, resolved))
        targeting = Targeting(
            targeting.type,
            tuple(location_id for location_id in targeting.location_ids if location_id in resolved),
        )

    post = await posts.create_post(actor, PostCreate(
        title=title,
        body=body,
        body_rich=body_rich,
        post_type=post_type,
        targeting=targeting.to_dict(),
        due_date=due_date,
    ))
    return PostResponse.model_validate(post)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    request: Request,
    post_id: str = Depends(valid_post_id),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    comments: CommentService = Depends(get_comment_service),
):
    """Comment on a post, or reply to one of its top-level comments."""
    payload = await read_json_body(request)
    require_fields(payload, ("body",))
    body = require_string(payload, "body")
    body_rich = _optional_object(payload, "body_rich")
    parent_comment_id = optional_uuid(payload.get("parent_comment_id"), "parent_comment_id")

    actor = await memberships.get_actor(current_user.id)
    post = await posts.get_visible_post(post_id, actor) if actor else None
    if post is None:
        raise NotFoundError("Post not found")

    if parent_comment_id:
        parent = await comments.get_comment(parent_comment_id, actor.tenant_id)
        if parent is None or parent.post_id != post.id:
            raise BadRequestError("parent_comment_id must reference a comment on the same post")
        if parent.parent_comment_id is not None:
            raise BadRequestError("Replies can only be made to top-level comments")

    comment = await comments.create_comment(actor, post, CommentCreate(
        body=body,
        body_rich=body_rich,
        parent_comment_id=parent_comment_id,
    ))
    return CommentResponse.model_validate(comment)


@router.post("/{post_id}/reactions", response_model=ReactionResult)
async def react_to_post(
    request: Request,
    post_id: str = Depends(valid_post_id),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    reactions: ReactionService = Depends(get_reaction_service),
):
    """Add or remove the caller's reaction. Both actions are idempotent."""
    payload = await read_json_body(request)
    require_fields(payload, ("type", "action"))
    reaction_type = require_enum(payload["type"], "type", ReactionType.ALL)
    action = require_enum(payload["action"], "action", REACTION_ACTIONS)

    actor = await memberships.get_actor(current_user.id)
    post = await posts.get_visible_post(post_id, actor) if actor else None
    if post is None:
        raise NotFoundError("Post not found")

    if action == "add":
        await reactions.add_reaction(post.id, actor.user_id, reaction_type)
        message = "Reaction added successfully"
    else:
        await reactions.remove_reaction(post.id, actor.user_id)
        message = "Reaction removed successfully"

    return ReactionResult(message=message, post_id=post.id, action=action, type=reaction_type)


@router.post("/{post_id}/read", response_model=ReadReceiptResponse)
async def mark_post_read(
    post_id: str = Depends(valid_post_id),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    receipts: ReadReceiptService = Depends(get_read_receipt_service),
):
    """Record that the caller read the post. Safe to repeat."""
    actor = await memberships.get_actor(current_user.id)
    post = await posts.get_visible_post(post_id, actor) if actor else None
    if post is None:
        raise NotFoundError("Post not found")

    receipt = await receipts.mark_read(post.id, actor.user_id)
    return ReadReceiptResponse.model_validate(receipt)
