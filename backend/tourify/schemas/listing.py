"""Listing schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.enums import ListingStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel, non_negative_money


class ListingBase(StrictRequestModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10)
    itinerary: Optional[str] = None
    price: Money
    duration_hours: float = Field(gt=0, le=24 * 14)
    max_group_size: Optional[int] = Field(default=None, gt=0)
    meeting_point: str = Field(min_length=1, max_length=255)
    location: str = Field(min_length=1, max_length=255)
    category: str
    languages: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("price")
    @classmethod
    def _price_not_negative(cls, value):
        return non_negative_money(value)


class ListingCreate(ListingBase):
    @model_validator(mode="after")
    def _coordinates_paired(self) -> "ListingCreate":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class ListingUpdate(StrictRequestModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10)
    itinerary: Optional[str] = None
    price: Optional[Money] = None
    duration_hours: Optional[float] = Field(default=None, gt=0, le=24 * 14)
    max_group_size: Optional[int] = Field(default=None, gt=0)
    meeting_point: Optional[str] = Field(default=None, min_length=1, max_length=255)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = None
    languages: Optional[List[str]] = None
    images: Optional[List[str]] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("price")
    @classmethod
    def _price_not_negative(cls, value):
        return non_negative_money(value)


class ListingStatusUpdate(StrictRequestModel):
    status: ListingStatus


class GuideContact(StandardizedModel):
    id: str
    name: str
    email: str
    contact_no: Optional[str] = None
    photo: Optional[str] = None


class ListingResponse(StandardizedModel):
    id: str
    guide_id: str
    title: str
    description: str
    itinerary: Optional[str] = None
    price: Money
    duration_hours: float
    max_group_size: Optional[int] = None
    meeting_point: str
    location: str
    category: str
    languages: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: ListingStatus
    guide: Optional[GuideContact] = None
    average_rating: float = 0.0
    total_reviews: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class ListingMapPoint(StandardizedModel):
    id: str
    title: str
    price: Money
    category: str
    location: str
    latitude: float
    longitude: float
    images: List[str] = Field(default_factory=list)
