"""Availability slot schemas."""

import datetime as dt
from typing import Optional

from pydantic import model_validator

from ._strict_base import StrictRequestModel
from .base import StandardizedModel


def _check_window(start: Optional[dt.time], end: Optional[dt.time]) -> None:
    if (start is None) != (end is None):
        raise ValueError("start_time and end_time must be provided together")
    if start is not None and end is not None and start >= end:
        raise ValueError("start_time must be before end_time")


class AvailabilityCreate(StrictRequestModel):
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: bool = True

    @model_validator(mode="after")
    def _window_is_ordered(self) -> "AvailabilityCreate":
        _check_window(self.start_time, self.end_time)
        return self


class AvailabilityUpdate(StrictRequestModel):
    """Partial update; the merged slot is validated again by the service."""

    date: Optional[dt.date] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: Optional[bool] = None


class AvailabilityResponse(StandardizedModel):
    id: str
    guide_id: str
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    is_available: bool
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
