"""User-related Pydantic schemas."""

import re
from datetime import datetime
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from threadline.core.enums import Role, UserStatus

_LOGIN_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _normalize_email(value: str) -> str:
    # Stored and looked up lower-cased; see UserRepository.
    return value.strip().lower()


def _check_login(value: str) -> str:
    value = value.strip()
    if not _LOGIN_RE.match(value):
        raise ValueError("Login may only contain letters, digits, '.', '_' and '-'")
    return value


def _check_password(value: str) -> str:
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain a lowercase letter")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain an uppercase letter")
    if not re.search(r"[^A-Za-z]", value):
        raise ValueError("Password must contain a digit or a symbol")
    return value


Email = Annotated[EmailStr, AfterValidator(_normalize_email)]
Login = Annotated[str, Field(min_length=3, max_length=64), AfterValidator(_check_login)]
Password = Annotated[str, Field(min_length=8, max_length=128), AfterValidator(_check_password)]


class RegisterRequest(BaseModel):
    """Schema for self-registration."""

    login: Login
    email: Email
    full_name: str = Field(..., min_length=3, max_length=64)
    password: Password
    password_confirmation: str

    @field_validator("full_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Full name must be at least 3 characters")
        return value

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class AdminUserCreate(RegisterRequest):
    """Schema used by administrators to create accounts of any role."""

    role: Role = Role.USER


class LoginRequest(BaseModel):
    """Schema for login submissions; ``login`` may also be the email address."""

    login: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    user_id: int
    role: Role


class PasswordResetRequest(BaseModel):
    """Ask for a password reset link."""

    email: Email


class PasswordResetConfirm(BaseModel):
    """Choose a new password with a reset token."""

    token: str = Field(..., min_length=1)
    password: Password
    password_confirmation: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "PasswordResetConfirm":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class ProfileUpdateRequest(BaseModel):
    """Schema for updating the caller's own profile."""

    login: Login | None = None
    email: Email | None = None
    full_name: str | None = Field(None, min_length=3, max_length=64)
    profile_picture: str | None = Field(None, max_length=2048)


class RoleUpdateRequest(BaseModel):
    """Administrative role change."""

    role: Role


class UserResponse(BaseModel):
    """Public view of an account; the password hash is never included."""

    id: int
    login: str
    email: str
    full_name: str
    role: Role
    status: UserStatus
    profile_picture: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthorSummary(BaseModel):
    """Author reference embedded in posts, comments and reactions."""

    id: int
    login: str
    full_name: str

    model_config = ConfigDict(from_attributes=True)
