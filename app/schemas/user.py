from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from app.models.user import Role, UserStatus
from app.schemas.base import BaseSchema


class UserLogin(BaseSchema):
    """Schema for user login."""

    email: EmailStr
    password: str


class UserUpdate(BaseSchema):
    """Schema for updating one's own account."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=200)


class UserResponse(BaseSchema):
    """Schema for user response."""

    id: str
    email: str
    display_name: str
    role: Role
    status: UserStatus
    last_login_at: Optional[datetime] = None
    created_at: datetime


class UserListResponse(BaseSchema):
    items: List[UserResponse]
    total: int


class RoleChangeRequest(BaseSchema):
    """Schema for an admin changing a user's role."""

    role: Role


class TokenResponse(BaseSchema):
    """Schema for authentication token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseSchema):
    refresh_token: str
