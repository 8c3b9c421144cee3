# backend/tourify/repositories/review_repository.py
"""
Review Repository for the Tourify platform.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models.listing import Listing
from ..models.review import Review
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

REVIEW_SORTABLE_FIELDS = ("created_at", "updated_at", "rating")


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)

    def _apply_eager_loading(self, query):
        return query.options(joinedload(Review.tourist), joinedload(Review.listing))

    def get_by_booking_id(self, booking_id: str) -> Optional[Review]:
        return self.db.query(Review).filter(Review.booking_id == booking_id).first()

    def search(
        self, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[Review], int]:
        """Filter by listing_id, tourist_id, guide_id and rating."""
        query = self._apply_eager_loading(self._build_query())
        if filters.get("listing_id"):
            query = query.filter(Review.listing_id == filters["listing_id"])
        if filters.get("tourist_id"):
            query = query.filter(Review.tourist_id == filters["tourist_id"])
        if filters.get("guide_id"):
            query = query.join(Listing, Review.listing_id == Listing.id).filter(
                Listing.guide_id == filters["guide_id"]
            )
        if filters.get("rating"):
            query = query.filter(Review.rating == filters["rating"])
        return self._paginate(
            query, options, sortable=REVIEW_SORTABLE_FIELDS, default_sort="created_at"
        )

    def guide_rating_summary(self, guide_id: str) -> Tuple[float, int]:
        """Average rating and review count across all of a guide's listings."""
        avg, count = (
            self.db.query(func.avg(Review.rating), func.count(Review.id))
            .join(Listing, Review.listing_id == Listing.id)
            .filter(Listing.guide_id == guide_id)
            .one()
        )
        return float(avg or 0), int(count or 0)
