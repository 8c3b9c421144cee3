# backend/tourify/repositories/listing_repository.py
"""
Listing Repository for the Tourify platform.

Catalog search, rating aggregates and the row lock used to serialise
capacity checks on a listing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.enums import ListingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.listing import Listing
from ..models.review import Review
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

LISTING_SEARCHABLE_FIELDS = ("title", "description", "location", "category")
LISTING_SORTABLE_FIELDS = (
    "created_at",
    "updated_at",
    "price",
    "title",
    "duration_hours",
    "max_group_size",
)
LISTING_EXACT_FILTERS = ("category", "guide_id", "status", "location")


class ListingRepository(BaseRepository[Listing]):
    def __init__(self, db: Session):
        super().__init__(db, Listing)

    def _apply_eager_loading(self, query):
        return query.options(joinedload(Listing.guide))

    def get_for_update(self, listing_id: str) -> Optional[Listing]:
        """
        Load a listing and lock its row until the current transaction ends.

        Concurrent booking admissions for the same listing queue behind this lock.
        """
        try:
            return (
                self.db.query(Listing)
                .filter(Listing.id == listing_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking listing {listing_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock listing: {str(e)}")

    def search(self, filters: Dict[str, Any], options: PageOptions) -> Tuple[List[Listing], int]:
        """
        Catalog search.

        search_term matches title, description, location or category; min_price and
        max_price bound the price; language matches any spoken language; remaining
        filters are exact matches.
        """
        query = self._apply_eager_loading(self._build_query())

        search_term = filters.get("search_term")
        if search_term:
            pattern = f"%{search_term}%"
            query = query.filter(
                or_(*[getattr(Listing, field).ilike(pattern) for field in LISTING_SEARCHABLE_FIELDS])
            )

        min_price = filters.get("min_price")
        if min_price is not None:
            query = query.filter(Listing.price >= min_price)
        max_price = filters.get("max_price")
        if max_price is not None:
            query = query.filter(Listing.price <= max_price)

        language = filters.get("language")
        if language:
            # languages is a JSON array; match the quoted element in its text form.
            query = query.filter(cast(Listing.languages, String).like(f'%"{language}"%'))

        for field in LISTING_EXACT_FILTERS:
            value = filters.get(field)
            if value:
                query = query.filter(getattr(Listing, field) == value)

        return self._paginate(
            query, options, sortable=LISTING_SORTABLE_FIELDS, default_sort="created_at"
        )

    def rating_summaries(self, listing_ids: Iterable[str]) -> Dict[str, Tuple[float, int]]:
        """Average rating and review count keyed by listing id."""
        ids = list(listing_ids)
        if not ids:
            return {}
        rows = (
            self.db.query(Review.listing_id, func.avg(Review.rating), func.count(Review.id))
            .filter(Review.listing_id.in_(ids))
            .group_by(Review.listing_id)
            .all()
        )
        return {listing_id: (float(avg or 0), int(count)) for listing_id, avg, count in rows}

    def with_coordinates(self) -> List[Listing]:
        return (
            self.db.query(Listing)
            .filter(
                Listing.latitude.isnot(None),
                Listing.longitude.isnot(None),
                Listing.status == ListingStatus.ACTIVE.value,
            )
            .order_by(Listing.created_at.desc())
            .all()
        )

    def has_bookings(self, listing_id: str) -> bool:
        return (
            self.db.query(Booking.id).filter(Booking.listing_id == listing_id).first() is not None
        )

    def count_for_guide(self, guide_id: str) -> int:
        return self.db.query(Listing).filter(Listing.guide_id == guide_id).count()
