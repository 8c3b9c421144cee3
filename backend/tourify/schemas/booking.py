"""
Booking schemas.

`date` accepts either a calendar date ("2026-05-01") or a local datetime
("2026-05-01T09:00:00"). Whether a time component is required depends on
the booking rules in force. Times are tour-local wall-clock times: hourly
bookings reject a UTC offset ("09:00Z"), and whole-day bookings only take
the date as written.
"""

import datetime as dt
from typing import Any, List, Optional, Union

from pydantic import Field, field_validator

from ..core.enums import BookingStatus, PaymentStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel
from .listing import GuideContact

RequestedDate = Union[dt.datetime, dt.date]


def parse_requested_date(value: Any) -> Any:
    """Parse ISO strings to date or datetime depending on whether they carry a time."""
    if isinstance(value, str):
        text = value.strip()
        if "T" in text or " " in text:
            return dt.datetime.fromisoformat(text.replace("Z", "+00:00"))
        return dt.date.fromisoformat(text)
    return value


class BookingCreate(StrictRequestModel):
    """
    Request to book a listing.

    listing_id and date are optional at the schema level so the booking
    engine can report missing fields with its own error.
    """

    listing_id: Optional[str] = None
    date: Optional[RequestedDate] = None
    group_size: int = 1
    note: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        try:
            return parse_requested_date(value)
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value}") from exc


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus


class BookingListingSummary(StandardizedModel):
    id: str
    title: str
    price: Money
    location: str
    meeting_point: str
    max_group_size: Optional[int] = None
    guide: Optional[GuideContact] = None


class TouristContact(StandardizedModel):
    id: str
    name: str
    email: str
    contact_no: Optional[str] = None


class BookingPaymentSummary(StandardizedModel):
    id: str
    status: PaymentStatus
    amount: Money
    transaction_id: str


class BookingResponse(StandardizedModel):
    id: str
    listing_id: str
    tourist_id: str
    booking_date: dt.date
    start_at: dt.datetime
    end_at: dt.datetime
    group_size: int
    total_price: Money
    status: BookingStatus
    note: Optional[str] = None
    listing: Optional[BookingListingSummary] = None
    tourist: Optional[TouristContact] = None
    payment: Optional[BookingPaymentSummary] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    confirmed_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    cancelled_at: Optional[dt.datetime] = None


class SlotCapacity(StandardizedModel):
    start_at: dt.datetime
    end_at: dt.datetime
    booked: int
    available: int


class BookedSlotsResponse(StandardizedModel):
    listing_id: str
    date: dt.date
    max_group_size: Optional[int] = None
    slots: List[SlotCapacity] = Field(default_factory=list)


class GuideBookedDatesResponse(StandardizedModel):
    guide_id: str
    dates: List[dt.date] = Field(default_factory=list)
