"""
User schemas for request and response models.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from userdir.models.user import User, UsersList


class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=72, description="User password")
    first_name: str = Field(..., min_length=1, max_length=32, description="First name")
    last_name: str = Field(..., min_length=1, max_length=32, description="Last name")
    role: Optional[str] = Field(default=None, max_length=10, description="Role, 'user' if omitted")
    gender: Optional[str] = Field(default=None, max_length=20, description="Gender")

    def to_user(self) -> User:
        return User(
            email=self.email,
            password=self.password,
            first_name=self.first_name,
            last_name=self.last_name,
            role=self.role or "",
            gender=self.gender,
        )


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=72, description="User password")


class UpdateRequest(BaseModel):
    """
    Profile update request schema.

    Omitted or empty fields keep their stored values.
    """

    first_name: Optional[str] = Field(default=None, max_length=32)
    last_name: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = Field(default=None)
    about: Optional[str] = Field(default=None, max_length=1024)
    avatar: Optional[str] = Field(default=None, max_length=512)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=250)
    city: Optional[str] = Field(default=None, max_length=24)
    country: Optional[str] = Field(default=None, max_length=24)
    gender: Optional[str] = Field(default=None, max_length=20)
    postcode: Optional[int] = Field(default=None, ge=0)
    birthday: Optional[date] = Field(default=None)


class UpdateRoleRequest(BaseModel):
    """Role update request schema."""

    role: str = Field(..., min_length=1, max_length=10, description="New role")


class UserResponse(BaseModel):
    """
    User response schema.

    Has no password field, so a hash can never be serialized outward.
    """

    user_id: str = Field(..., description="User ID (UUID)")
    first_name: str
    last_name: str
    email: str
    role: str
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

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        data = user.model_dump(exclude={"password", "user_id"})
        return cls(user_id=str(user.user_id), **data)


class LoginResponse(BaseModel):
    """Login response schema."""

    user: UserResponse = Field(..., description="Authenticated user")
    session_id: str = Field(..., description="Session token; send it back in the session header")


class UsersListResponse(BaseModel):
    """Paginated users response schema."""

    total_count: int
    total_pages: int
    page: int
    size: int
    has_more: bool
    users: list[UserResponse]

    @classmethod
    def from_list(cls, users: UsersList) -> "UsersListResponse":
        return cls(
            total_count=users.total_count,
            total_pages=users.total_pages,
            page=users.page,
            size=users.size,
            has_more=users.has_more,
            users=[UserResponse.from_user(u) for u in users.users],
        )


class MessageResponse(BaseModel):
    """Generic message response schema."""

    message: str = Field(..., description="Response message")


class ErrorResponse(BaseModel):
    """Error response schema."""

    code: str = Field(..., description="Error code")
    detail: str = Field(..., description="Human-readable cause")
