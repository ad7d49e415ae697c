"""
API v1 routes.
"""

from fastapi import APIRouter

from src.api.v1 import projects, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
