"""API routers for the ProteQ backend."""
from fastapi import APIRouter

from . import activity_logs, auth, health


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(activity_logs.router)
    api_router.include_router(auth.router)
    return api_router
