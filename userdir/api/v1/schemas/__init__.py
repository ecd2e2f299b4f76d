"""
API v1 schemas.
"""

from userdir.api.v1.schemas.users import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UpdateRequest,
    UpdateRoleRequest,
    UserResponse,
    UsersListResponse,
)

__all__ = [
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "UpdateRequest",
    "UpdateRoleRequest",
    "UserResponse",
    "UsersListResponse",
]
