"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import capability_readiness

router = APIRouter()

# Capability readiness, gap analysis and evidence validation routes
router.include_router(capability_readiness.router, tags=["capability_readiness"])
