"""
Top‑level router for the API.

This is the route table: it maps each resource's router to its path
prefix.  The application mounts it under ``/api``.
"""

from fastapi import APIRouter

from .endpoints import categories, dashboard, services


router = APIRouter()

router.include_router(services.router, prefix="/services", tags=["services"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
