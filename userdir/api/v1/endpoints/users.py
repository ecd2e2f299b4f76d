"""
User directory endpoints.

Handlers only translate between HTTP and the services; errors propagate as
ServiceError and are rendered by the application-wide handler.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from userdir.api.v1.dependencies.auth import get_current_session, get_session_token
from userdir.api.v1.schemas.users import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UpdateRequest,
    UpdateRoleRequest,
    UserResponse,
    UsersListResponse,
)
from userdir.core.config import Settings
from userdir.core.container import (
    get_request_context_dep,
    get_session_service_dep,
    get_settings_dep,
    get_user_service_dep,
)
from userdir.core.context import RequestContext
from userdir.models.pagination import PaginationQuery
from userdir.models.session import Session
from userdir.models.user import UserRoleUpdate, UserUpdate, parse_user_id
from userdir.services.session_service import SessionService
from userdir.services.user_service import UserService


router = APIRouter()


def get_pagination(
    page: int = Query(default=1, ge=0, description="1-based page number"),
    size: int = Query(default=0, ge=0, le=100, description="Page size, 0 for the default"),
    order_by: Optional[str] = Query(default=None, description="Column to order by"),
) -> PaginationQuery:
    """Build a PaginationQuery from query parameters."""
    return PaginationQuery(page=page, size=size, order_by=order_by)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UserResponse:
    """Register a new user."""
    created = await users.register(ctx, request.to_user())
    return UserResponse.from_user(created)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
    sessions: SessionService = Depends(get_session_service_dep),
    settings: Settings = Depends(get_settings_dep),
) -> LoginResponse:
    """Verify credentials and open a session."""
    user = await users.login(ctx, request.email, request.password)
    session_id = await sessions.create_session(
        ctx, user.user_id, settings.session.expire_seconds
    )
    return LoginResponse(user=UserResponse.from_user(user), session_id=session_id)


@router.get("/me", response_model=UserResponse)
async def get_me(
    session: Session = Depends(get_current_session),
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UserResponse:
    """Return the user owning the current session."""
    user = await users.get_by_id(ctx, session.user_id)
    return UserResponse.from_user(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_session_token),
    ctx: RequestContext = Depends(get_request_context_dep),
    sessions: SessionService = Depends(get_session_service_dep),
) -> MessageResponse:
    """Delete the current session."""
    await sessions.delete_session(ctx, token)
    return MessageResponse(message="Logged out")


@router.get("/search", response_model=UsersListResponse)
async def find_by_name(
    name: str = Query(default="", max_length=64, description="Substring of first or last name"),
    pagination: PaginationQuery = Depends(get_pagination),
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UsersListResponse:
    """Search users by name."""
    result = await users.find_by_name(ctx, name, pagination)
    return UsersListResponse.from_list(result)


@router.get("", response_model=UsersListResponse)
async def get_users(
    pagination: PaginationQuery = Depends(get_pagination),
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UsersListResponse:
    """List all users."""
    result = await users.get_users(ctx, pagination)
    return UsersListResponse.from_list(result)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UserResponse:
    """Get a user by id."""
    user = await users.get_by_id(ctx, parse_user_id(user_id))
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateRequest,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UserResponse:
    """Update a user's profile. Omitted fields keep their values."""
    update = UserUpdate(user_id=parse_user_id(user_id), **request.model_dump())
    updated = await users.update(ctx, update)
    return UserResponse.from_user(updated)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    request: UpdateRoleRequest,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> UserResponse:
    """Change a user's role."""
    update = UserRoleUpdate(user_id=parse_user_id(user_id), role=request.role)
    updated = await users.update_role(ctx, update)
    return UserResponse.from_user(updated)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context_dep),
    users: UserService = Depends(get_user_service_dep),
) -> MessageResponse:
    """Delete a user."""
    await users.delete(ctx, parse_user_id(user_id))
    return MessageResponse(message="User deleted")
