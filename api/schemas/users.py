"""Legajos - User and authentication schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from api.schemas.base import CamelModel, InputModel, normalize_email
from core.database.models import UserRole


class UserSummary(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole


class UserResponse(UserSummary):
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserEnvelope(CamelModel):
    user: UserResponse


class UserListResponse(CamelModel):
    users: list[UserResponse]


class UserCreate(CamelModel):
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.OPERATOR

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserUpdate(InputModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class PasswordReset(CamelModel):
    new_password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginResponse(CamelModel):
    access_token: str
    user: UserSummary


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=8, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)
