# backend/tourify/domain/booking_window.py
"""
Date and slot normalisation for bookings.

Every booking occupies a half-open interval [start_at, end_at) of naive,
tour-local wall-clock time. Capacity is summed over bookings whose
intervals overlap, so whole-day and hourly bookings are compared the same
way. Which shape a request resolves to is decided by BookingRules.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from ..core.config import BookingRules
from ..core.exceptions import ValidationException

RequestedDate = Union[date, datetime]


@dataclass(frozen=True)
class AdmissionWindow:
    booking_date: date
    start_at: datetime
    end_at: datetime

    def overlaps(self, start_at: datetime, end_at: datetime) -> bool:
        return intervals_overlap(self.start_at, self.end_at, start_at, end_at)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    return a_start < b_end and a_end > b_start


def _strip_tz(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo is not None else value


def whole_day(day: date) -> AdmissionWindow:
    start = datetime.combine(day, time.min)
    return AdmissionWindow(booking_date=day, start_at=start, end_at=start + timedelta(days=1))


def requested_day(requested: RequestedDate) -> date:
    """Calendar date of a request, ignoring any time component."""
    if isinstance(requested, datetime):
        return _strip_tz(requested).date()
    return requested


def resolve_window(requested: RequestedDate, rules: BookingRules) -> AdmissionWindow:
    """
    Turn a requested date or datetime into the interval the booking occupies.

    In hour scope raises ValidationException when the time is missing, carries a
    UTC offset, is off the hour, or falls outside the daily window. In day scope
    any time component is ignored and an offset only keeps its wall-clock date.
    """
    day = requested_day(requested)
    if rules.admission_scope == "day":
        return whole_day(day)

    if not isinstance(requested, datetime):
        raise ValidationException(
            "A start time is required for hourly bookings", code="BOOKING_TIME_REQUIRED"
        )
    if requested.tzinfo is not None:
        raise ValidationException(
            "Hourly bookings take a local time without a UTC offset",
            code="BOOKING_TIME_NOT_LOCAL",
        )
    moment = requested
    if moment.minute or moment.second or moment.microsecond:
        raise ValidationException(
            "Bookings must start exactly on the hour", code="BOOKING_TIME_NOT_ON_HOUR"
        )
    if not rules.day_start_hour <= moment.hour < rules.day_end_hour:
        raise ValidationException(
            f"Bookings are only available between {rules.day_start_hour:02d}:00 "
            f"and {rules.day_end_hour:02d}:00",
            code="BOOKING_TIME_OUTSIDE_WINDOW",
            details={"start_hour": rules.day_start_hour, "end_hour": rules.day_end_hour},
        )
    return AdmissionWindow(
        booking_date=day,
        start_at=moment,
        end_at=moment + timedelta(minutes=rules.slot_minutes),
    )


def day_slots(day: date, rules: BookingRules) -> List[AdmissionWindow]:
    """All admission windows a listing offers on a given day."""
    if rules.admission_scope == "day":
        return [whole_day(day)]
    slots: List[AdmissionWindow] = []
    midnight = datetime.combine(day, time.min)
    cursor = midnight + timedelta(hours=rules.day_start_hour)
    close = midnight + timedelta(hours=rules.day_end_hour)
    step = timedelta(minutes=rules.slot_minutes)
    while cursor < close:
        slots.append(AdmissionWindow(booking_date=day, start_at=cursor, end_at=cursor + step))
        cursor += timedelta(hours=1)
    return slots


def slot_covers(
    slot_date: date,
    start: Optional[time],
    end: Optional[time],
    window: AdmissionWindow,
) -> bool:
    """True when an availability slot's date and optional times contain the window."""
    if slot_date != window.booking_date:
        return False
    if start is None or end is None:
        return True
    slot_start = datetime.combine(slot_date, start)
    slot_end = datetime.combine(slot_date, end)
    day_window = whole_day(window.booking_date)
    if window.start_at == day_window.start_at and window.end_at == day_window.end_at:
        # A whole-day booking only needs the guide to be working that day.
        return True
    return slot_start <= window.start_at and window.end_at <= slot_end
