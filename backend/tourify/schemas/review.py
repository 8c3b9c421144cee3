"""Review schemas."""

import datetime as dt
from typing import Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


class ReviewCreate(StrictRequestModel):
    booking_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewUpdate(StrictRequestModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class Reviewer(StandardizedModel):
    id: str
    name: str
    photo: Optional[str] = None


class ReviewedListing(StandardizedModel):
    id: str
    title: str


class ReviewResponse(StandardizedModel):
    id: str
    booking_id: str
    listing_id: str
    tourist_id: str
    rating: int
    comment: Optional[str] = None
    tourist: Optional[Reviewer] = None
    listing: Optional[ReviewedListing] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
