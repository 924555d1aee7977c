"""
API v1 router.

Every router is mounted under ``settings.API_PREFIX`` by ``core.app``.
"""

from fastapi import APIRouter

from .endpoints import (
    auth,
    tenants,
    locations,
    posts,
    requests,
    uploads,
    attachments,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tenants.router, prefix="/tenants", tags=["tenants"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(requests.router, prefix="/requests", tags=["requests"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(attachments.router, prefix="/attachments", tags=["attachments"])
