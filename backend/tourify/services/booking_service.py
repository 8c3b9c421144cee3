# backend/tourify/services/booking_service.py
"""
Booking Service for the Tourify platform.

Admits new bookings against listing capacity and drives booking status
changes. Capacity is the sum of group sizes of PENDING and CONFIRMED
bookings whose [start_at, end_at) interval overlaps the requested one;
it must never exceed the listing's max_group_size.

Admission and confirmation lock the listing row first, so the
read-sum-write sequence for one listing runs one request at a time.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import BookingRules, settings
from ..core.enums import (
    CAPACITY_HOLDING_STATUSES,
    CONFIRMED_CAPACITY_STATUSES,
    BookingStatus,
    ListingStatus,
    UserRole,
)
from ..core.exceptions import (
    CapacityExceededException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..domain.booking_status import ensure_transition_allowed
from ..domain.booking_window import (
    AdmissionWindow,
    day_slots,
    requested_day,
    resolve_window,
    slot_covers,
)
from ..models.booking import Booking
from ..models.listing import Listing
from ..models.user import User
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.listing_repository import ListingRepository
from ..repositories.user_repository import UserRepository
from ..schemas.booking import BookingCreate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class BookingService(BaseService):
    """
    Service layer for booking admission and status changes.
    """

    def __init__(
        self,
        db: Session,
        rules: Optional[BookingRules] = None,
        repository: Optional[BookingRepository] = None,
        listing_repository: Optional[ListingRepository] = None,
        availability_repository: Optional[AvailabilityRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.rules = rules or settings.booking_rules()
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.listing_repository = (
            listing_repository or RepositoryFactory.create_listing_repository(db)
        )
        self.availability_repository = (
            availability_repository or RepositoryFactory.create_availability_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self, tourist: User, data: BookingCreate, *, today: Optional[date] = None
    ) -> Booking:
        """
        Admit a booking request.

        Checks run in a fixed order and the first failure is reported:
        required fields, group size, listing exists, listing active, date not in
        the past, listing capacity defined, not the tourist's own listing, group
        size within capacity, guide availability, hourly time window, remaining
        capacity.

        Raises:
            ValidationException: invalid request or broken business rule
            NotFoundException: listing does not exist
            CapacityExceededException: not enough places left; details carry "available"
        """
        if not data.listing_id or data.date is None:
            raise ValidationException("listing_id and date are required", code="MISSING_FIELDS")

        group_size = data.group_size
        if isinstance(group_size, bool) or not isinstance(group_size, int) or group_size < 1:
            raise ValidationException(
                "group_size must be a positive integer", code="INVALID_GROUP_SIZE"
            )

        with self.transaction():
            listing = self.listing_repository.get_for_update(data.listing_id)
            if not listing:
                raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")

            if listing.status != ListingStatus.ACTIVE.value:
                raise ValidationException(
                    "This listing is not open for booking", code="LISTING_BLOCKED"
                )

            day = requested_day(data.date)
            if day < (today or date.today()):
                raise ValidationException(
                    "Booking date cannot be in the past", code="DATE_IN_PAST"
                )

            if listing.max_group_size is None:
                raise ValidationException(
                    "This listing does not define a maximum group size",
                    code="CAPACITY_UNDEFINED",
                )

            if listing.guide_id == tourist.id:
                raise ValidationException(
                    "You cannot book your own listing!", code="OWN_LISTING"
                )

            if group_size > listing.max_group_size:
                raise ValidationException(
                    f"Group size cannot exceed {listing.max_group_size} for this tour",
                    code="GROUP_TOO_LARGE",
                    details={"max_group_size": listing.max_group_size},
                )

            if self.rules.require_guide_availability:
                self._ensure_guide_available_on(listing.guide_id, day)

            window = resolve_window(data.date, self.rules)

            if self.rules.require_guide_availability and self.rules.admission_scope == "hour":
                self._ensure_guide_available_for(listing.guide_id, window)

            available = self._available_places(listing, window)
            if group_size > available:
                self.logger.info(
                    f"Rejecting booking on listing {listing.id}: requested {group_size}, "
                    f"available {available}"
                )
                raise CapacityExceededException(available)

            booking = self.repository.create(
                tourist_id=tourist.id,
                listing_id=listing.id,
                booking_date=window.booking_date,
                start_at=window.start_at,
                end_at=window.end_at,
                group_size=group_size,
                total_price=self.compute_total_price(listing.price, group_size),
                status=BookingStatus.PENDING.value,
                note=data.note,
            )
            booking_id = booking.id

        self.log_operation(
            "create_booking", booking_id=booking_id, listing_id=data.listing_id, size=group_size
        )
        return self._load(booking_id)

    @staticmethod
    def compute_total_price(price: Any, group_size: int) -> Decimal:
        unit = price if isinstance(price, Decimal) else Decimal(str(price))
        return (unit * group_size).quantize(CENT, rounding=ROUND_HALF_UP)

    def _ensure_guide_available_on(self, guide_id: str, day: date) -> None:
        slots = self.availability_repository.slots_on(guide_id, day, only_available=True)
        if not slots:
            raise ValidationException(
                "The guide is not available for booking on this date!",
                code="GUIDE_UNAVAILABLE",
            )

    def _ensure_guide_available_for(self, guide_id: str, window: AdmissionWindow) -> None:
        slots = self.availability_repository.slots_on(
            guide_id, window.booking_date, only_available=True
        )
        if not any(slot_covers(s.date, s.start_time, s.end_time, window) for s in slots):
            raise ValidationException(
                "The guide is not available at the selected time!",
                code="GUIDE_UNAVAILABLE",
            )

    def _available_places(self, listing: Listing, window: AdmissionWindow) -> int:
        booked = self.repository.sum_overlapping_group_size(
            listing.id, window.start_at, window.end_at, CAPACITY_HOLDING_STATUSES
        )
        return max(listing.max_group_size - booked, 0)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @BaseService.measure_operation("change_booking_status")
    def change_status(
        self,
        actor: User,
        booking_id: str,
        requested: BookingStatus,
        *,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Move a booking to a new status on behalf of actor.

        Raises:
            NotFoundException: booking does not exist
            ForbiddenException: actor does not own the booking or its listing
            InvalidStatusTransitionException: edge not allowed from the current status
            CapacityExceededException: confirming would overfill the slot
            ValidationException: completing before the tour has taken place
        """
        requested = BookingStatus(requested)
        with self.transaction():
            booking = self.repository.get_by_id(booking_id)
            if not booking:
                raise NotFoundException("Booking not found!", code="BOOKING_NOT_FOUND")

            role = self._acting_role(actor, booking)
            ensure_transition_allowed(role, booking.status, requested)

            if requested == BookingStatus.CONFIRMED:
                listing = self.listing_repository.get_for_update(booking.listing_id)
                self._ensure_confirm_capacity(listing, booking)
                booking.confirm()
            elif requested == BookingStatus.COMPLETED:
                current_time = now or datetime.now()
                if booking.end_at > current_time:
                    raise ValidationException(
                        "A booking can only be completed after the tour date has passed",
                        code="BOOKING_NOT_ELAPSED",
                    )
                booking.complete()
            else:
                booking.cancel(actor.id)
            self.db.flush()

        self.log_operation(
            "change_booking_status", booking_id=booking_id, status=requested.value, actor=actor.id
        )
        return self._load(booking_id)

    def _acting_role(self, actor: User, booking: Booking) -> UserRole:
        """Role the actor acts under for this booking, or ForbiddenException."""
        if actor.is_admin:
            return UserRole(actor.role)
        if actor.is_guide:
            if booking.listing is None or booking.listing.guide_id != actor.id:
                raise ForbiddenException(
                    "You can only manage bookings for your own listings",
                    code="NOT_LISTING_OWNER",
                )
            return UserRole.GUIDE
        if actor.is_tourist:
            if booking.tourist_id != actor.id:
                raise ForbiddenException(
                    "You can only manage your own bookings", code="NOT_BOOKING_OWNER"
                )
            return UserRole.TOURIST
        raise ForbiddenException("Forbidden access!")

    def _ensure_confirm_capacity(self, listing: Optional[Listing], booking: Booking) -> None:
        if listing is None:
            raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
        if listing.max_group_size is None:
            raise ValidationException(
                "This listing does not define a maximum group size",
                code="CAPACITY_UNDEFINED",
            )
        confirmed = self.repository.sum_overlapping_group_size(
            listing.id,
            booking.start_at,
            booking.end_at,
            CONFIRMED_CAPACITY_STATUSES,
            exclude_booking_id=booking.id,
        )
        available = max(listing.max_group_size - confirmed, 0)
        if booking.group_size > available:
            raise CapacityExceededException(available)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _load(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found!", code="BOOKING_NOT_FOUND")
        return booking

    def ensure_can_view(self, actor: User, booking: Booking) -> None:
        if actor.is_admin:
            return
        if actor.is_tourist and booking.tourist_id == actor.id:
            return
        if actor.is_guide and booking.listing is not None and booking.listing.guide_id == actor.id:
            return
        raise ForbiddenException("You are not allowed to view this booking")

    def get_booking(self, actor: User, booking_id: str) -> Booking:
        booking = self._load(booking_id)
        self.ensure_can_view(actor, booking)
        return booking

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self, actor: User, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[Booking], int]:
        """Tourists see their bookings, guides the bookings on their listings, admins all."""
        if actor.is_admin:
            return self.repository.search(options, filters=filters)
        if actor.is_guide:
            return self.repository.search(options, guide_id=actor.id, filters=filters)
        return self.repository.search(options, tourist_id=actor.id, filters=filters)

    def guide_booked_dates(self, guide_id: str, from_date: Optional[date] = None) -> List[date]:
        guide = self.user_repository.get_by_id(guide_id, load_relationships=False)
        if not guide or not guide.is_guide:
            raise NotFoundException("Guide not found!", code="GUIDE_NOT_FOUND")
        return self.repository.booked_dates_for_guide(guide_id, from_date or date.today())

    def booked_slots(self, listing_id: str, on_date: date) -> Dict[str, Any]:
        """Booked and remaining capacity for each admission slot of a listing on a date."""
        listing = self.listing_repository.get_by_id(listing_id, load_relationships=False)
        if not listing:
            raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")

        bookings = self.repository.bookings_on(listing_id, on_date, CAPACITY_HOLDING_STATUSES)
        slots = []
        for window in day_slots(on_date, self.rules):
            booked = sum(
                b.group_size for b in bookings if window.overlaps(b.start_at, b.end_at)
            )
            capacity = listing.max_group_size or 0
            slots.append(
                {
                    "start_at": window.start_at,
                    "end_at": window.end_at,
                    "booked": booked,
                    "available": max(capacity - booked, 0),
                }
            )
        return {
            "listing_id": listing_id,
            "date": on_date,
            "max_group_size": listing.max_group_size,
            "slots": slots,
        }
