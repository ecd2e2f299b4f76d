"""
User domain models.

Defines the stored user record, partial-update inputs and the paginated
listing envelope. The password field holds a one-way hash; sanitized()
returns the copy that may leave the service.
"""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from userdir.core.errors import InvalidArgumentError

DEFAULT_ROLE = "user"


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def normalize_email(email: str | None) -> str:
    """Lowercase and trim an email address before any comparison or write."""
    return (email or "").strip().lower()


def parse_user_id(value: str | UUID) -> UUID:
    """
    Parse a user identifier.

    Args:
        value: UUID or its string form.

    Returns:
        The parsed UUID.

    Raises:
        InvalidArgumentError: If the value is not a valid UUID.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid user id: {value!r}") from e


class User(BaseModel):
    """
    User record as held by the durable store and the user cache.

    Attributes:
        user_id: Identifier generated at registration, immutable.
        first_name: Given name.
        last_name: Family name.
        email: Unique, normalized email address.
        password: One-way password hash. Cleared in sanitized copies.
        role: Authorization role, "user" by default.
        about..birthday: Optional profile fields.
        created_at: Registration timestamp.
        updated_at: Last modification timestamp.
        login_date: Last login timestamp.
    """

    model_config = ConfigDict(frozen=False)

    user_id: Optional[UUID] = Field(default=None, description="User identifier")
    first_name: str = Field(default="", description="First name")
    last_name: str = Field(default="", description="Last name")
    email: str = Field(default="", description="Normalized email address")
    password: Optional[str] = Field(default=None, description="Password hash")
    role: str = Field(default=DEFAULT_ROLE, description="User role")
    about: Optional[str] = None
    avatar: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    gender: Optional[str] = None
    postcode: Optional[int] = None
    birthday: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    login_date: Optional[datetime] = None

    def sanitized(self) -> "User":
        """Return a copy with the password hash cleared."""
        return self.model_copy(update={"password": None})

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"


class UserUpdate(BaseModel):
    """
    Coalesce-style partial update of a user's profile.

    Fields left as None, empty strings or a zero postcode keep the stored value.
    """

    user_id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    about: Optional[str] = None
    avatar: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    gender: Optional[str] = None
    postcode: Optional[int] = None
    birthday: Optional[date] = None

    def normalized(self) -> "UserUpdate":
        """
        Return a copy with the email normalized and text fields trimmed.

        Empty results become None so they coalesce to the stored value.
        """
        updates: dict = {"email": normalize_email(self.email) or None}
        for name in COALESCE_TEXT_FIELDS:
            if name == "email":
                continue
            value = getattr(self, name)
            if isinstance(value, str):
                value = value.strip() or None
            updates[name] = value
        if not self.postcode:
            updates["postcode"] = None
        return self.model_copy(update=updates)


class UserRoleUpdate(BaseModel):
    """Role change for a single user. A blank role keeps the stored value."""

    user_id: UUID
    role: Optional[str] = None


COALESCE_TEXT_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "about",
    "avatar",
    "phone_number",
    "address",
    "city",
    "country",
    "gender",
)


class UsersList(BaseModel):
    """One page of users with pagination metadata."""

    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)
    has_more: bool
    users: list[User] = Field(default_factory=list)
