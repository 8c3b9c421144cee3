"""
User schemas.

Request models forbid unknown fields; responses are built from ORM rows.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.enums import Gender, UserRole, UserStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel, non_negative_money


class BadgeSummary(StandardizedModel):
    id: str
    name: str
    icon: Optional[str] = None


class PublicUserResponse(StandardizedModel):
    """Profile fields safe to show to anyone."""

    id: str
    name: str
    role: UserRole
    photo: Optional[str] = None
    bio: Optional[str] = None
    expertise: List[str] = Field(default_factory=list)
    languages_spoken: List[str] = Field(default_factory=list)
    daily_rate: Optional[Money] = None
    badges: List[BadgeSummary] = Field(default_factory=list)
    created_at: datetime


class UserResponse(PublicUserResponse):
    email: str
    contact_no: Optional[str] = None
    status: UserStatus
    is_verified: bool
    need_password_change: bool
    address: Optional[str] = None
    gender: Optional[Gender] = None
    travel_preferences: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


class _ProfileFields(StrictRequestModel):
    contact_no: Optional[str] = Field(default=None, max_length=30)
    photo: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=2000)
    address: Optional[str] = Field(default=None, max_length=255)
    gender: Optional[Gender] = None
    expertise: Optional[List[str]] = None
    languages_spoken: Optional[List[str]] = None
    daily_rate: Optional[Money] = None
    travel_preferences: Optional[List[str]] = None

    @field_validator("daily_rate")
    @classmethod
    def _daily_rate_not_negative(cls, value):
        return non_negative_money(value)


class UserCreate(_ProfileFields):
    """Account creation by an administrator (admins and guides)."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ProfileUpdate(_ProfileFields):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class AdminUserUpdate(ProfileUpdate):
    """Fields an administrator may change on any account."""

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)
    is_verified: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value


class UserStatusUpdate(StrictRequestModel):
    status: UserStatus


class UserRoleUpdate(StrictRequestModel):
    role: UserRole


SelfServiceRole = Literal["TOURIST", "GUIDE"]
