# backend/tourify/repositories/booking_repository.py
"""
Booking Repository for the Tourify platform.

Capacity sums are always computed over interval overlap against
[start_at, end_at), so the same query serves admission, confirmation
and the booked-slots view.
"""

from datetime import date, datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.enums import BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.listing import Listing
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

BOOKING_SORTABLE_FIELDS = (
    "created_at",
    "updated_at",
    "booking_date",
    "start_at",
    "total_price",
    "group_size",
    "status",
)


def _status_values(statuses: Iterable[BookingStatus]) -> List[str]:
    return [BookingStatus(status).value for status in statuses]


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query):
        return query.options(
            joinedload(Booking.listing).joinedload(Listing.guide),
            joinedload(Booking.tourist),
            joinedload(Booking.payment),
        )

    def sum_overlapping_group_size(
        self,
        listing_id: str,
        start_at: datetime,
        end_at: datetime,
        statuses: Iterable[BookingStatus],
        *,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """
        Total group size of bookings on a listing whose interval overlaps [start_at, end_at).
        """
        try:
            query = self.db.query(func.coalesce(func.sum(Booking.group_size), 0)).filter(
                Booking.listing_id == listing_id,
                Booking.status.in_(_status_values(statuses)),
                Booking.start_at < end_at,
                Booking.end_at > start_at,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return int(query.scalar() or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error summing booked capacity: {str(e)}")
            raise RepositoryException(f"Failed to compute booked capacity: {str(e)}")

    def bookings_on(
        self, listing_id: str, on_date: date, statuses: Iterable[BookingStatus]
    ) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.listing_id == listing_id,
                Booking.booking_date == on_date,
                Booking.status.in_(_status_values(statuses)),
            )
            .order_by(Booking.start_at.asc())
            .all()
        )

    def search(
        self,
        options: PageOptions,
        *,
        tourist_id: Optional[str] = None,
        guide_id: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[Booking], int]:
        """Bookings visible to a tourist, a guide (via their listings) or everyone."""
        filters = filters or {}
        query = self._apply_eager_loading(self._build_query())
        if tourist_id:
            query = query.filter(Booking.tourist_id == tourist_id)
        if guide_id:
            query = query.join(Listing, Booking.listing_id == Listing.id).filter(
                Listing.guide_id == guide_id
            )
        if filters.get("status"):
            query = query.filter(Booking.status == filters["status"])
        if filters.get("listing_id"):
            query = query.filter(Booking.listing_id == filters["listing_id"])
        if filters.get("booking_date"):
            query = query.filter(Booking.booking_date == filters["booking_date"])
        return self._paginate(
            query, options, sortable=BOOKING_SORTABLE_FIELDS, default_sort="created_at"
        )

    def booked_dates_for_guide(self, guide_id: str, from_date: Optional[date] = None) -> List[date]:
        """Distinct dates with a non-cancelled booking on any of the guide's listings."""
        query = (
            self.db.query(Booking.booking_date)
            .join(Listing, Booking.listing_id == Listing.id)
            .filter(
                Listing.guide_id == guide_id,
                Booking.status != BookingStatus.CANCELLED.value,
            )
        )
        if from_date:
            query = query.filter(Booking.booking_date >= from_date)
        rows = query.distinct().order_by(Booking.booking_date.asc()).all()
        return [row[0] for row in rows]

    def count_for_guide(self, guide_id: str) -> int:
        return (
            self.db.query(Booking)
            .join(Listing, Booking.listing_id == Listing.id)
            .filter(Listing.guide_id == guide_id)
            .count()
        )

    def count_for_tourist(
        self,
        tourist_id: str,
        *,
        status: Optional[BookingStatus] = None,
        from_date: Optional[date] = None,
    ) -> int:
        query = self.db.query(Booking).filter(Booking.tourist_id == tourist_id)
        if status:
            query = query.filter(Booking.status == BookingStatus(status).value)
        if from_date:
            query = query.filter(Booking.booking_date >= from_date)
        return query.count()
