"""Pytest configuration for tests.

Endpoint tests run the real application over ``httpx.ASGITransport`` with
every service replaced through ``app.dependency_overrides``, so no database
or storage backend is needed. Access tokens are real HS256 JWTs signed with
the test secret.
"""

import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
import uuid

# Set test environment before any application module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-key"
os.environ["SCANNER_TOKEN"] = "test-scanner-token"

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from core.app import create_app
from core.database import get_db
from core.dependencies import (
    get_attachment_service,
    get_comment_service,
    get_location_service,
    get_membership_service,
    get_onboarding_service,
    get_post_service,
    get_reaction_service,
    get_read_receipt_service,
    get_request_service,
    get_scanner_attachment_service,
    get_tenant_service,
    get_user_service,
)
from models import (
    Attachment,
    Comment,
    DataRequest,
    Location,
    Membership,
    Post,
    ReadReceipt,
    RequestResponse,
    Tenant,
)
from services.access import Actor
from services.attachment_service import AttachmentService
from services.comment_service import CommentService
from services.location_service import LocationService
from services.membership_service import MembershipService
from services.post_service import PostService
from services.reaction_service import ReactionService
from services.read_receipt_service import ReadReceiptService
from services.request_service import RequestService
from services.storage import StorageClient, get_storage_client
from services.targeting import CompletionStats
from services.tenant_service import TenantService
from services.user_service import UserService

TEST_JWT_SECRET = "test-jwt-secret"
SCANNER_TOKEN = "test-scanner-token"

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"
TENANT_ID = "33333333-3333-4333-8333-333333333333"
OTHER_TENANT_ID = "44444444-4444-4444-8444-444444444444"
LOCATION_A = "aaaaaaaa-0000-4000-8000-000000000001"
LOCATION_B = "aaaaaaaa-0000-4000-8000-000000000002"
POST_ID = "bbbbbbbb-0000-4000-8000-000000000001"
COMMENT_ID = "cccccccc-0000-4000-8000-000000000001"
REQUEST_ID = "dddddddd-0000-4000-8000-000000000001"
ATTACHMENT_ID = "eeeeeeee-0000-4000-8000-000000000001"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def make_token(
    user_id: str = USER_ID,
    email: str = "owner@example.com",
    expires_in: int = 3600,
    audience: str = "authenticated",
    secret: str = TEST_JWT_SECRET,
    **claims,
) -> str:
    """Mint a Supabase-style access token."""
    issued = _now()
    payload = {
        "sub": user_id,
        "email": email,
        "aud": audience,
        "role": "authenticated",
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(seconds=expires_in)).timestamp()),
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def ids():
    """Fixed identifiers shared by the fixtures below."""
    return SimpleNamespace(
        user=USER_ID,
        other_user=OTHER_USER_ID,
        tenant=TENANT_ID,
        other_tenant=OTHER_TENANT_ID,
        location_a=LOCATION_A,
        location_b=LOCATION_B,
        post=POST_ID,
        comment=COMMENT_ID,
        request=REQUEST_ID,
        attachment=ATTACHMENT_ID,
        scanner_token=SCANNER_TOKEN,
    )


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def services():
    """Service doubles, one per provider dependency."""
    return SimpleNamespace(
        memberships=MagicMock(spec=MembershipService),
        users=MagicMock(spec=UserService),
        tenants=MagicMock(spec=TenantService),
        onboarding=MagicMock(spec=TenantService),
        locations=MagicMock(spec=LocationService),
        posts=MagicMock(spec=PostService),
        comments=MagicMock(spec=CommentService),
        reactions=MagicMock(spec=ReactionService),
        receipts=MagicMock(spec=ReadReceiptService),
        requests=MagicMock(spec=RequestService),
        attachments=MagicMock(spec=AttachmentService),
        scanner=MagicMock(spec=AttachmentService),
        storage=MagicMock(spec=StorageClient),
        db=AsyncMock(),
    )


@pytest.fixture
def app(services):
    """Application with every service dependency overridden."""
    application = create_app()

    async def override_get_db():
        yield services.db

    application.dependency_overrides.update({
        get_db: override_get_db,
        get_membership_service: lambda: services.memberships,
        get_user_service: lambda: services.users,
        get_tenant_service: lambda: services.tenants,
        get_onboarding_service: lambda: services.onboarding,
        get_location_service: lambda: services.locations,
        get_post_service: lambda: services.posts,
        get_comment_service: lambda: services.comments,
        get_reaction_service: lambda: services.reactions,
        get_read_receipt_service: lambda: services.receipts,
        get_request_service: lambda: services.requests,
        get_attachment_service: lambda: services.attachments,
        get_scanner_attachment_service: lambda: services.scanner,
        get_storage_client: lambda: services.storage,
    })
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_actor():
    def factory(role: str = "tenant_admin", location_ids=(), user_id: str = USER_ID, tenant_id: str = TENANT_ID):
        return Actor(
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            location_ids=frozenset(location_ids),
        )
    return factory


@pytest.fixture
def as_actor(services, make_actor):
    """Make the caller act with the given role and locations."""
    def factory(role: str = "tenant_admin", location_ids=()):
        actor = make_actor(role, location_ids)
        services.memberships.get_actor.return_value = actor
        return actor
    return factory


@pytest.fixture
def no_membership(services):
    services.memberships.get_actor.return_value = None
    services.memberships.get_active_membership.return_value = None


@pytest.fixture
def make_tenant():
    def factory(**overrides):
        values = dict(
            id=TENANT_ID,
            name="Acme Franchising",
            slug="acme",
            plan="trial",
            status="active",
            settings={},
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Tenant(**values)
    return factory


@pytest.fixture
def make_membership():
    def factory(**overrides):
        values = dict(
            id=str(uuid.uuid4()),
            tenant_id=TENANT_ID,
            user_id=USER_ID,
            role="tenant_admin",
            status="active",
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Membership(**values)
    return factory


@pytest.fixture
def make_location():
    def factory(**overrides):
        values = dict(
            id=LOCATION_A,
            tenant_id=TENANT_ID,
            name="Downtown",
            address="1 Main St",
            city="Springfield",
            state="IL",
            zip_code="62701",
            status="active",
            settings={},
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Location(**values)
    return factory


@pytest.fixture
def make_post():
    def factory(**overrides):
        values = dict(
            id=POST_ID,
            tenant_id=TENANT_ID,
            author_user_id=OTHER_USER_ID,
            title="Weekly update",
            body="Numbers are in",
            post_type="announcement",
            targeting={"type": "global"},
            status="active",
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Post(**values)
    return factory


@pytest.fixture
def make_comment():
    def factory(**overrides):
        values = dict(
            id=COMMENT_ID,
            tenant_id=TENANT_ID,
            post_id=POST_ID,
            parent_comment_id=None,
            author_user_id=USER_ID,
            body="Looks good",
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Comment(**values)
    return factory


@pytest.fixture
def make_receipt():
    def factory(**overrides):
        values = dict(id=str(uuid.uuid4()), post_id=POST_ID, user_id=USER_ID, read_at=_now())
        values.update(overrides)
        return ReadReceipt(**values)
    return factory


@pytest.fixture
def make_request_row():
    def factory(total_locations: int = 2, **overrides):
        values = dict(
            id=REQUEST_ID,
            tenant_id=TENANT_ID,
            post_id=POST_ID,
            created_by=USER_ID,
            title="Monthly sales",
            description=None,
            fields=[{"name": "revenue", "type": "number", "required": True}],
            due_date=None,
            status="active",
            completion_stats=CompletionStats.initial(total_locations).to_dict(),
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return DataRequest(**values)
    return factory


@pytest.fixture
def make_response_row():
    def factory(**overrides):
        values = dict(
            id=str(uuid.uuid4()),
            request_id=REQUEST_ID,
            location_id=LOCATION_A,
            submitted_by=USER_ID,
            values={"revenue": 1200},
            submitted_at=_now(),
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return RequestResponse(**values)
    return factory


@pytest.fixture
def make_attachment():
    def factory(**overrides):
        values = dict(
            id=ATTACHMENT_ID,
            tenant_id=TENANT_ID,
            post_id=POST_ID,
            comment_id=None,
            uploader_user_id=USER_ID,
            filename="f3a1.pdf",
            original_filename="report.pdf",
            file_size=2048,
            mime_type="application/pdf",
            storage_path="attachments/f3a1.pdf",
            download_url="https://project.supabase.co/storage/v1/object/public/attachments/attachments/f3a1.pdf",
            virus_scan_status="pending",
            created_at=_now(),
            updated_at=_now(),
        )
        values.update(overrides)
        return Attachment(**values)
    return factory
