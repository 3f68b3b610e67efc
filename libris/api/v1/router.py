"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. The admin
router is mounted before the user router so /auth/admin paths resolve first.
"""

from fastapi import APIRouter

from libris.api.v1.endpoints import admin_auth, auth, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(admin_auth.router, prefix="/auth/admin", tags=["admin-auth"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
