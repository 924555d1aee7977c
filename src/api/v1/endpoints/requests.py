"""Data collection request endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
import logging

from core.dependencies import (
    get_location_service,
    get_membership_service,
    get_post_service,
    get_request_service,
    valid_request_id,
)
from core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from core.security import AuthenticatedUser, get_current_user
from core.validation import (
    optional_enum,
    parse_iso_datetime,
    read_json_body,
    require_fields,
    require_string,
    require_uuid,
)
from models.request import RequestStatus
from schemas.common import DataResponse
from schemas.request import DataRequestCreate, DataRequestResponse, SubmissionResponse
from services.access import CORPORATE_ROLES, can_respond_for_location, require_actor, require_role
from services.location_service import LocationService
from services.membership_service import MembershipService
from services.post_service import PostService
from services.request_fields import parse_fields, validate_values
from services.request_service import RequestFilter, RequestService
from services.targeting import Targeting, total_locations_for

logger = logging.getLogger(__name__)

router = APIRouter()

REQUEST_ROLES = ("created", "assigned")


@router.get("", response_model=DataResponse[DataRequestResponse])
async def list_requests(
    status: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    requests: RequestService = Depends(get_request_service),
):
    """Requests on posts visible to the caller."""
    status = optional_enum(status, "status", RequestStatus.ALL)
    role = optional_enum(role, "role", REQUEST_ROLES)

    actor = await memberships.get_actor(current_user.id)
    if actor is None:
        return DataResponse[DataRequestResponse](data=[])

    rows = await requests.list_requests(RequestFilter(actor=actor, status=status, role=role))
    return DataResponse[DataRequestResponse](
        data=[DataRequestResponse.model_validate(row) for row in rows]
    )


@router.post("", response_model=DataRequestResponse, status_code=201)
async def create_request(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    locations: LocationService = Depends(get_location_service),
    requests: RequestService = Depends(get_request_service),
):
    """Attach a data collection request to a post. Corporate roles only.

    ``total_locations`` is fixed here from the post's targeting and never
    recomputed.
    """
    payload = await read_json_body(request)
    require_fields(payload, ("post_id", "title", "fields"))

    title = require_string(payload, "title", max_length=500)
    description = require_string(payload, "description", required=False) or None
    fields = parse_fields(payload["fields"])
    post_id = require_uuid(payload["post_id"], "post_id")
    due_date = None
    if payload.get("due_date") is not None:
        due_date = parse_iso_datetime(payload["due_date"], "due_date")

    actor = require_actor(await memberships.get_actor(current_user.id))
    require_role(actor, CORPORATE_ROLES, "Only corporate staff can create requests")

    post = await posts.get_visible_post(post_id, actor)
    if post is None:
        raise NotFoundError("Post not found")

    targeting = Targeting.from_stored(post.targeting)
    active_count = await locations.count_active_locations(actor.tenant_id) if targeting.is_global else 0

    data_request = await requests.create_request(
        actor,
        post,
        DataRequestCreate(
            post_id=post.id,
            title=title,
            description=description,
            fields=fields,
            due_date=due_date,
        ),
        total_locations_for(targeting, active_count),
    )
    return DataRequestResponse.model_validate(data_request)


@router.post("/{request_id}/responses", response_model=SubmissionResponse, status_code=201)
async def submit_response(
    request: Request,
    request_id: str = Depends(valid_request_id),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    posts: PostService = Depends(get_post_service),
    locations: LocationService = Depends(get_location_service),
    requests: RequestService = Depends(get_request_service),
):
    """Submit one location's answers to a request."""
    payload = await read_json_body(request)
    require_fields(payload, ("location_id", "values"))
    location_id = require_uuid(payload["location_id"], "location_id")
    if not isinstance(payload["values"], dict):
        raise BadRequestError("values must be an object")

    actor = await memberships.get_actor(current_user.id)
    data_request = await requests.get_request(request_id, actor.tenant_id) if actor else None
    post = await posts.get_visible_post(data_request.post_id, actor) if data_request else None
    if post is None:
        raise NotFoundError("Request not found")

    location = await locations.get_location(location_id, actor.tenant_id)
    if location is None:
        raise NotFoundError("Location not found")
    if not Targeting.from_stored(post.targeting).targets(location.id):
        raise BadRequestError("Location is not targeted by this request")
    if not can_respond_for_location(actor, location.id):
        logger.warning(f"User {actor.user_id} cannot respond for location {location.id}")
        raise ForbiddenError("You do not have access to this location")

    values = validate_values(data_request.fields, payload["values"])
    response = await requests.submit_response(actor, data_request.id, location.id, values)
    return SubmissionResponse.model_validate(response)
