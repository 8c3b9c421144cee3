"""Badge schemas."""

import datetime as dt
from typing import List, Optional

from pydantic import Field

from ..core.enums import UserRole
from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class BadgeCreate(StrictRequestModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    icon: Optional[str] = Field(default=None, max_length=500)


class BadgeUpdate(StrictRequestModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    icon: Optional[str] = Field(default=None, max_length=500)


class BadgeAssignRequest(StrictRequestModel):
    user_id: str = Field(min_length=1)


class BadgeHolder(StandardizedModel):
    id: str
    name: str
    role: UserRole
    photo: Optional[str] = None


class BadgeResponse(StandardizedModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class BadgeDetailResponse(BadgeResponse):
    users: List[BadgeHolder] = Field(default_factory=list)
