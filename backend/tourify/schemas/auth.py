"""Authentication request and response schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from ._strict_base import StrictRequestModel
from .user import ProfileUpdate, SelfServiceRole, UserResponse


class RegisterRequest(ProfileUpdate):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: SelfServiceRole = "TOURIST"

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshTokenRequest(StrictRequestModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(StrictRequestModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    need_password_change: bool = False


class AuthResponse(TokenResponse):
    user: UserResponse
