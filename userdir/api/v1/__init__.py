"""
API v1 package.

Exports the main API router that aggregates all v1 endpoints.
"""

from fastapi import APIRouter, status

from userdir.api.v1.endpoints import users
from userdir.api.v1.schemas import ErrorResponse

# Error bodies rendered by the application-wide ServiceError handler
ERROR_RESPONSES: dict = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Malformed identifier"},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "Bad credentials or session"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "User or session not found"},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Email already registered"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Store failure"},
    status.HTTP_504_GATEWAY_TIMEOUT: {"model": ErrorResponse, "description": "Deadline exceeded"},
}

# Create the main v1 router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
    responses=ERROR_RESPONSES,
)

__all__ = ["api_router"]
