"""
Pydantic models for the user directory service.
"""

from userdir.models.pagination import (
    DEFAULT_PAGE_SIZE,
    ORDERABLE_COLUMNS,
    PaginationQuery,
    get_has_more,
    get_total_pages,
)
from userdir.models.session import Session
from userdir.models.user import (
    DEFAULT_ROLE,
    User,
    UserRoleUpdate,
    UsersList,
    UserUpdate,
    normalize_email,
    parse_user_id,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_ROLE",
    "ORDERABLE_COLUMNS",
    "PaginationQuery",
    "Session",
    "User",
    "UserRoleUpdate",
    "UserUpdate",
    "UsersList",
    "get_has_more",
    "get_total_pages",
    "normalize_email",
    "parse_user_id",
]
