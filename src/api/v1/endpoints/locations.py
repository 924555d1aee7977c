"""Location endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
import logging

from core.dependencies import get_location_service, get_membership_service
from core.security import AuthenticatedUser, get_current_user
from core.validation import optional_enum, read_json_body, require_fields, require_string
from models.location import LocationStatus
from schemas.common import DataResponse
from schemas.location import LocationCreate, LocationResponse
from services.access import LOCATION_MANAGER_ROLES, require_actor, require_role
from services.location_service import LocationFilter, LocationService
from services.membership_service import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_FIELDS = ("name", "address", "city", "state", "zip_code")


@router.get("", response_model=DataResponse[LocationResponse])
async def list_locations(
    status: Optional[str] = Query(None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    locations: LocationService = Depends(get_location_service),
):
    """Locations of the caller's tenant, optionally filtered by status."""
    status = optional_enum(status, "status", LocationStatus.ALL)

    actor = await memberships.get_actor(current_user.id)
    if actor is None:
        return DataResponse[LocationResponse](data=[])

    rows = await locations.list_locations(LocationFilter(tenant_id=actor.tenant_id, status=status))
    return DataResponse[LocationResponse](
        data=[LocationResponse.model_validate(row) for row in rows]
    )


@router.post("", response_model=LocationResponse, status_code=201)
async def create_location(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    locations: LocationService = Depends(get_location_service),
):
    """Create a location. Tenant admins and franchise owners only."""
    payload = await read_json_body(request)
    require_fields(payload, REQUIRED_FIELDS)
    values = {field: require_string(payload, field, max_length=512) for field in REQUIRED_FIELDS}
    values["phone"] = require_string(payload, "phone", max_length=32, required=False) or None
    values["email"] = require_string(payload, "email", max_length=320, required=False) or None

    actor = require_actor(await memberships.get_actor(current_user.id))
    require_role(actor, LOCATION_MANAGER_ROLES, "Only tenant admins and franchise owners can create locations")

    location = await locations.create_location(actor, LocationCreate(**values))
    return LocationResponse.model_validate(location)
