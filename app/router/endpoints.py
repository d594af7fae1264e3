"""
API Router - all endpoints.
"""
from fastapi import APIRouter
from app.router.api.v1 import auth, community, admin, assistant

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

api_router.include_router(
    community.router,
    prefix="/community",
    tags=["Community"],
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)

api_router.include_router(
    assistant.router,
    prefix="/assistant",
    tags=["Assistant"],
)
