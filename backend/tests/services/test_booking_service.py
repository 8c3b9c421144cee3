"""
Tests for BookingService admission and status changes.

Capacity is summed over PENDING and CONFIRMED bookings whose admission
windows overlap the requested one.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from tourify.core.config import BookingRules
from tourify.core.enums import BookingStatus, ListingStatus, UserRole
from tourify.core.exceptions import (
    CapacityExceededException,
    ForbiddenException,
    InvalidStatusTransitionException,
    NotFoundException,
    ValidationException,
)
from tourify.schemas.booking import BookingCreate
from tourify.services.booking_service import BookingService
from tourify.utils.pagination import page_options


@pytest.fixture
def booking_service(db, day_rules) -> BookingService:
    return BookingService(db, rules=day_rules)


@pytest.fixture
def hourly_service(db, hour_rules) -> BookingService:
    return BookingService(db, rules=hour_rules)


def _request(listing, on, group_size=1, **extra) -> BookingCreate:
    return BookingCreate(listing_id=listing.id, date=on, group_size=group_size, **extra)


class TestCreateBooking:
    def test_creates_pending_booking_with_total_price(
        self, booking_service, tourist, listing, tour_date, guide_available
    ):
        booking = booking_service.create_booking(tourist, _request(listing, tour_date, 3))

        assert booking.status == BookingStatus.PENDING.value
        assert booking.group_size == 3
        assert Decimal(booking.total_price) == Decimal("75.00")
        assert booking.booking_date == tour_date
        assert booking.start_at == datetime.combine(tour_date, time.min)
        assert booking.end_at == datetime.combine(tour_date + timedelta(days=1), time.min)
        assert booking.listing.guide.id == listing.guide_id
        assert booking.tourist.id == tourist.id

    def test_rejects_when_capacity_exceeded_and_reports_available(
        self, booking_service, tourist, other_tourist, listing, tour_date, guide_available, make_booking
    ):
        make_booking(other_tourist, listing, tour_date, group_size=3)

        with pytest.raises(CapacityExceededException) as exc:
            booking_service.create_booking(tourist, _request(listing, tour_date, 2))

        assert exc.value.available == 1
        assert exc.value.details == {"available": 1}

    def test_fills_remaining_capacity_exactly(
        self, booking_service, tourist, other_tourist, listing, tour_date, guide_available, make_booking
    ):
        make_booking(other_tourist, listing, tour_date, group_size=3)
        booking = booking_service.create_booking(tourist, _request(listing, tour_date, 1))
        assert booking.group_size == 1

    def test_cancelled_and_completed_bookings_free_capacity(
        self, booking_service, tourist, other_tourist, listing, tour_date, guide_available, make_booking
    ):
        make_booking(other_tourist, listing, tour_date, group_size=4, status=BookingStatus.CANCELLED)
        make_booking(other_tourist, listing, tour_date, group_size=4, status=BookingStatus.COMPLETED)
        booking = booking_service.create_booking(tourist, _request(listing, tour_date, 4))
        assert booking.group_size == 4

    def test_bookings_on_other_days_do_not_count(
        self, booking_service, tourist, other_tourist, listing, tour_date, guide_available, make_booking
    ):
        make_booking(other_tourist, listing, tour_date + timedelta(days=1), group_size=4)
        booking = booking_service.create_booking(tourist, _request(listing, tour_date, 4))
        assert booking.group_size == 4

    def test_cannot_book_own_listing(self, booking_service, make_user, make_listing, tour_date):
        guide = make_user(UserRole.GUIDE)
        own_listing = make_listing(guide)
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(guide, _request(own_listing, tour_date))
        assert exc.value.message == "You cannot book your own listing!"
        assert exc.value.code == "OWN_LISTING"

    def test_missing_fields(self, booking_service, tourist, listing):
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, BookingCreate(listing_id=listing.id))
        assert exc.value.code == "MISSING_FIELDS"

    @pytest.mark.parametrize("group_size", [0, -2])
    def test_rejects_non_positive_group_size(self, booking_service, tourist, listing, tour_date, group_size):
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(listing, tour_date, group_size))
        assert exc.value.code == "INVALID_GROUP_SIZE"

    def test_rejects_past_date(self, booking_service, tourist, listing):
        yesterday = date.today() - timedelta(days=1)
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(listing, yesterday))
        assert exc.value.code == "DATE_IN_PAST"

    def test_unknown_listing(self, booking_service, tourist, tour_date):
        with pytest.raises(NotFoundException):
            booking_service.create_booking(
                tourist, BookingCreate(listing_id="01HZZZZZZZZZZZZZZZZZZZZZZZ", date=tour_date)
            )

    def test_unknown_listing_reported_before_past_date(self, booking_service, tourist):
        yesterday = date.today() - timedelta(days=1)
        with pytest.raises(NotFoundException) as exc:
            booking_service.create_booking(
                tourist, BookingCreate(listing_id="01HZZZZZZZZZZZZZZZZZZZZZZZ", date=yesterday)
            )
        assert exc.value.code == "LISTING_NOT_FOUND"

    def test_blocked_listing_cannot_be_booked(
        self, booking_service, tourist, guide, make_listing, tour_date, guide_available
    ):
        blocked = make_listing(guide, status=ListingStatus.BLOCKED.value)
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(blocked, tour_date))
        assert exc.value.code == "LISTING_BLOCKED"
        assert booking_service.repository.count_for_tourist(tourist.id) == 0

    def test_listing_without_capacity(self, booking_service, tourist, guide, make_listing, tour_date):
        unlimited = make_listing(guide, max_group_size=None)
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(unlimited, tour_date))
        assert exc.value.code == "CAPACITY_UNDEFINED"

    def test_group_larger_than_listing(self, booking_service, tourist, listing, tour_date, guide_available):
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(listing, tour_date, 5))
        assert exc.value.code == "GROUP_TOO_LARGE"

    def test_guide_must_be_available(self, booking_service, tourist, listing, tour_date):
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(listing, tour_date))
        assert exc.value.message == "The guide is not available for booking on this date!"

    def test_unavailable_slot_does_not_count(self, booking_service, tourist, guide, listing, tour_date, make_slot):
        make_slot(guide, tour_date, is_available=False)
        with pytest.raises(ValidationException) as exc:
            booking_service.create_booking(tourist, _request(listing, tour_date))
        assert exc.value.code == "GUIDE_UNAVAILABLE"

    def test_availability_check_can_be_disabled(self, db, tourist, listing, tour_date):
        service = BookingService(db, rules=BookingRules(require_guide_availability=False))
        booking = service.create_booking(tourist, _request(listing, tour_date))
        assert booking.status == BookingStatus.PENDING.value


class TestHourlyAdmission:
    def test_hour_slots_are_independent(
        self, hourly_service, tourist, other_tourist, guide, listing, tour_date, make_slot, make_booking
    ):
        make_slot(guide, tour_date, time(8), time(16))
        nine = datetime.combine(tour_date, time(9))
        make_booking(
            other_tourist, listing, tour_date, group_size=4,
            start_at=nine, end_at=nine + timedelta(hours=1),
        )

        with pytest.raises(CapacityExceededException) as exc:
            hourly_service.create_booking(tourist, _request(listing, nine))
        assert exc.value.available == 0

        ten = hourly_service.create_booking(tourist, _request(listing, nine + timedelta(hours=1), 4))
        assert ten.start_at == datetime.combine(tour_date, time(10))
        assert ten.end_at == datetime.combine(tour_date, time(11))

    def test_whole_day_booking_blocks_hourly_slots(
        self, hourly_service, tourist, other_tourist, guide, listing, tour_date, make_slot, make_booking
    ):
        make_slot(guide, tour_date)
        make_booking(other_tourist, listing, tour_date, group_size=3)
        with pytest.raises(CapacityExceededException) as exc:
            hourly_service.create_booking(
                tourist, _request(listing, datetime.combine(tour_date, time(9)), 2)
            )
        assert exc.value.available == 1

    def test_requires_time_component(self, hourly_service, tourist, guide, listing, tour_date, make_slot):
        make_slot(guide, tour_date)
        with pytest.raises(ValidationException) as exc:
            hourly_service.create_booking(tourist, _request(listing, tour_date))
        assert exc.value.code == "BOOKING_TIME_REQUIRED"

    def test_rejects_time_with_utc_offset(self, hourly_service, tourist, guide, listing, tour_date, make_slot):
        make_slot(guide, tour_date)
        with pytest.raises(ValidationException) as exc:
            hourly_service.create_booking(tourist, _request(listing, f"{tour_date.isoformat()}T09:00:00Z"))
        assert exc.value.code == "BOOKING_TIME_NOT_LOCAL"

    def test_rejects_hour_outside_operating_window(
        self, hourly_service, tourist, guide, listing, tour_date, make_slot
    ):
        make_slot(guide, tour_date)
        with pytest.raises(ValidationException) as exc:
            hourly_service.create_booking(
                tourist, _request(listing, datetime.combine(tour_date, time(18)))
            )
        assert exc.value.code == "BOOKING_TIME_OUTSIDE_WINDOW"

    def test_guide_slot_must_cover_requested_hour(
        self, hourly_service, tourist, guide, listing, tour_date, make_slot
    ):
        make_slot(guide, tour_date, time(9), time(12))
        with pytest.raises(ValidationException) as exc:
            hourly_service.create_booking(
                tourist, _request(listing, datetime.combine(tour_date, time(13)))
            )
        assert exc.value.message == "The guide is not available at the selected time!"


class TestChangeStatus:
    def test_guide_confirms_pending_booking(self, booking_service, guide, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        updated = booking_service.change_status(guide, booking.id, BookingStatus.CONFIRMED)
        assert updated.status == BookingStatus.CONFIRMED.value
        assert updated.confirmed_at is not None

    def test_tourist_cancels_own_pending_booking(self, booking_service, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        updated = booking_service.change_status(tourist, booking.id, BookingStatus.CANCELLED)
        assert updated.status == BookingStatus.CANCELLED.value
        assert updated.cancelled_by_id == tourist.id

    def test_tourist_cannot_confirm(self, booking_service, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        with pytest.raises(InvalidStatusTransitionException):
            booking_service.change_status(tourist, booking.id, BookingStatus.CONFIRMED)

    def test_pending_cannot_jump_to_completed(self, booking_service, guide, tourist, listing, make_booking):
        past = date.today() - timedelta(days=3)
        booking = make_booking(tourist, listing, past)
        with pytest.raises(InvalidStatusTransitionException):
            booking_service.change_status(guide, booking.id, BookingStatus.COMPLETED)

    def test_terminal_status_is_final(self, booking_service, admin, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date, status=BookingStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransitionException):
            booking_service.change_status(admin, booking.id, BookingStatus.CONFIRMED)

    def test_other_tourist_is_forbidden(self, booking_service, other_tourist, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        with pytest.raises(ForbiddenException):
            booking_service.change_status(other_tourist, booking.id, BookingStatus.CANCELLED)

    def test_other_guide_is_forbidden(self, booking_service, other_guide, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        with pytest.raises(ForbiddenException):
            booking_service.change_status(other_guide, booking.id, BookingStatus.CONFIRMED)

    def test_confirm_rechecks_confirmed_capacity(
        self, booking_service, guide, tourist, other_tourist, listing, tour_date, make_booking
    ):
        make_booking(other_tourist, listing, tour_date, group_size=3, status=BookingStatus.CONFIRMED)
        pending = make_booking(tourist, listing, tour_date, group_size=2)

        with pytest.raises(CapacityExceededException) as exc:
            booking_service.change_status(guide, pending.id, BookingStatus.CONFIRMED)
        assert exc.value.available == 1

    def test_confirm_ignores_other_pending_bookings(
        self, booking_service, guide, tourist, other_tourist, listing, tour_date, make_booking
    ):
        make_booking(other_tourist, listing, tour_date, group_size=3)
        pending = make_booking(tourist, listing, tour_date, group_size=2)
        updated = booking_service.change_status(guide, pending.id, BookingStatus.CONFIRMED)
        assert updated.status == BookingStatus.CONFIRMED.value

    def test_complete_requires_tour_to_have_ended(
        self, booking_service, guide, tourist, listing, tour_date, make_booking
    ):
        booking = make_booking(tourist, listing, tour_date, status=BookingStatus.CONFIRMED)
        with pytest.raises(ValidationException) as exc:
            booking_service.change_status(guide, booking.id, BookingStatus.COMPLETED)
        assert exc.value.code == "BOOKING_NOT_ELAPSED"

        later = datetime.combine(tour_date + timedelta(days=2), time(12))
        updated = booking_service.change_status(guide, booking.id, BookingStatus.COMPLETED, now=later)
        assert updated.status == BookingStatus.COMPLETED.value

    def test_admin_may_act_on_any_booking(self, booking_service, admin, tourist, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        updated = booking_service.change_status(admin, booking.id, BookingStatus.CANCELLED)
        assert updated.cancelled_by_id == admin.id

    def test_unknown_booking(self, booking_service, admin):
        with pytest.raises(NotFoundException):
            booking_service.change_status(admin, "missing", BookingStatus.CANCELLED)


class TestQueries:
    def test_list_bookings_is_role_scoped(
        self, booking_service, tourist, other_tourist, guide, other_guide, admin, listing, make_listing, tour_date, make_booking
    ):
        other_listing = make_listing(other_guide)
        make_booking(tourist, listing, tour_date)
        make_booking(other_tourist, other_listing, tour_date)

        options = page_options(None, None, None, None)
        assert booking_service.list_bookings(tourist, {}, options)[1] == 1
        assert booking_service.list_bookings(guide, {}, options)[1] == 1
        assert booking_service.list_bookings(other_guide, {}, options)[1] == 1
        assert booking_service.list_bookings(admin, {}, options)[1] == 2

    def test_get_booking_checks_visibility(self, booking_service, tourist, other_tourist, guide, listing, tour_date, make_booking):
        booking = make_booking(tourist, listing, tour_date)
        assert booking_service.get_booking(guide, booking.id).id == booking.id
        with pytest.raises(ForbiddenException):
            booking_service.get_booking(other_tourist, booking.id)

    def test_guide_booked_dates_skip_cancelled(
        self, booking_service, tourist, guide, listing, tour_date, make_booking
    ):
        make_booking(tourist, listing, tour_date)
        make_booking(tourist, listing, tour_date + timedelta(days=1), status=BookingStatus.CANCELLED)
        make_booking(tourist, listing, tour_date + timedelta(days=2), status=BookingStatus.CONFIRMED)

        dates = booking_service.guide_booked_dates(guide.id)
        assert dates == [tour_date, tour_date + timedelta(days=2)]

    def test_guide_booked_dates_unknown_guide(self, booking_service, tourist):
        with pytest.raises(NotFoundException):
            booking_service.guide_booked_dates(tourist.id)

    def test_booked_slots_day_scope(self, booking_service, tourist, listing, tour_date, make_booking):
        make_booking(tourist, listing, tour_date, group_size=3)
        summary = booking_service.booked_slots(listing.id, tour_date)
        assert summary["max_group_size"] == 4
        assert len(summary["slots"]) == 1
        assert summary["slots"][0]["booked"] == 3
        assert summary["slots"][0]["available"] == 1

    def test_booked_slots_hour_scope(self, hourly_service, tourist, listing, tour_date, make_booking):
        nine = datetime.combine(tour_date, time(9))
        make_booking(tourist, listing, tour_date, group_size=2, start_at=nine, end_at=nine + timedelta(hours=1))
        summary = hourly_service.booked_slots(listing.id, tour_date)
        by_hour = {slot["start_at"].hour: slot for slot in summary["slots"]}
        assert by_hour[9]["booked"] == 2
        assert by_hour[9]["available"] == 2
        assert by_hour[10]["booked"] == 0
