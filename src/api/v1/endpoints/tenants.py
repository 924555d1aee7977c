"""Tenant endpoints: current tenant and onboarding."""

from fastapi import APIRouter, Depends, Request
import logging
import re

from core.dependencies import get_membership_service, get_onboarding_service, get_tenant_service
from core.exceptions import BadRequestError, NotFoundError
from core.security import AuthenticatedUser, get_current_user
from core.validation import read_json_body, require_fields, require_string
from schemas.tenant import CurrentTenantResponse, TenantCreate, TenantResponse
from services.membership_service import MembershipService
from services.tenant_service import TenantService

logger = logging.getLogger(__name__)

router = APIRouter()

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


@router.get("/current", response_model=CurrentTenantResponse)
async def get_current_tenant(
    current_user: AuthenticatedUser = Depends(get_current_user),
    memberships: MembershipService = Depends(get_membership_service),
    tenants: TenantService = Depends(get_tenant_service),
):
    """The tenant the caller acts in, with the caller's role."""
    membership = await memberships.get_active_membership(current_user.id)
    if membership is None:
        raise NotFoundError("No active tenant membership found")

    tenant = await tenants.get_tenant(membership.tenant_id)
    if tenant is None:
        logger.error(f"Membership {membership.id} points at missing tenant {membership.tenant_id}")
        raise NotFoundError("Tenant not found")

    return CurrentTenantResponse(
        **TenantResponse.model_validate(tenant).model_dump(),
        role=membership.role,
    )


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    tenants: TenantService = Depends(get_onboarding_service),
):
    """Create a tenant with the caller as its admin."""
    payload = await read_json_body(request)
    require_fields(payload, ("name", "slug"))
    name = require_string(payload, "name", min_length=2, max_length=256)
    slug = require_string(payload, "slug", min_length=2, max_length=128)
    if not SLUG_PATTERN.match(slug):
        raise BadRequestError("slug must contain only lowercase letters, numbers, and hyphens")

    tenant = await tenants.create_tenant(TenantCreate(name=name, slug=slug), current_user)
    return TenantResponse.model_validate(tenant)
