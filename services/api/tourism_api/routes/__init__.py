"""API routes."""

from fastapi import APIRouter

from tourism_api.routes import admin, guides

api_router = APIRouter()

# Guide dashboard endpoints (dashboard key)
api_router.include_router(guides.router, prefix="/v1/guides", tags=["guides"])

# Admin endpoints (settings, founders, contributions, monthly runs)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
