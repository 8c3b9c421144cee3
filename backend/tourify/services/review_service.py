# backend/tourify/services/review_service.py
"""
Review Service for the Tourify platform.

A tourist may review each of their completed bookings once.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.enums import BookingStatus
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.review import Review
from ..models.user import User
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.listing_repository import ListingRepository
from ..repositories.review_repository import ReviewRepository
from ..schemas.review import ReviewCreate, ReviewUpdate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[ReviewRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        listing_repository: Optional[ListingRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_review_repository(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.listing_repository = (
            listing_repository or RepositoryFactory.create_listing_repository(db)
        )

    @BaseService.measure_operation("create_review")
    def create_review(self, tourist: User, data: ReviewCreate) -> Review:
        """
        Review a completed booking.

        Raises:
            NotFoundException: booking does not exist
            ValidationException: booking is not the tourist's or not COMPLETED
            ConflictException: the booking already has a review
        """
        with self.transaction():
            booking = self.booking_repository.get_by_id(data.booking_id, load_relationships=False)
            if not booking:
                raise NotFoundException("Booking not found!", code="BOOKING_NOT_FOUND")
            if (
                booking.tourist_id != tourist.id
                or booking.status != BookingStatus.COMPLETED.value
            ):
                raise ValidationException(
                    "You can only review a tour after completing it!",
                    code="BOOKING_NOT_COMPLETED",
                )
            if self.repository.get_by_booking_id(booking.id):
                raise ConflictException(
                    "You have already reviewed this booking!", code="ALREADY_REVIEWED"
                )
            review = self.repository.create(
                booking_id=booking.id,
                listing_id=booking.listing_id,
                tourist_id=tourist.id,
                rating=data.rating,
                comment=data.comment,
            )
            review_id = review.id
        self.log_operation("create_review", review_id=review_id, booking_id=data.booking_id)
        return self.get_review(review_id)

    def get_review(self, review_id: str) -> Review:
        review = self.repository.get_by_id(review_id)
        if not review:
            raise NotFoundException("Review not found!", code="REVIEW_NOT_FOUND")
        return review

    def list_reviews(
        self, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[Review], int]:
        return self.repository.search(filters, options)

    def listing_reviews(self, listing_id: str, options: PageOptions) -> Tuple[List[Review], int]:
        if not self.listing_repository.exists(id=listing_id):
            raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
        return self.repository.search({"listing_id": listing_id}, options)

    def my_reviews(self, tourist: User, options: PageOptions) -> Tuple[List[Review], int]:
        return self.repository.search({"tourist_id": tourist.id}, options)

    def _editable(self, actor: User, review_id: str, action: str) -> Review:
        review = self.repository.get_by_id(review_id, load_relationships=False)
        if not review:
            raise NotFoundException("Review not found!", code="REVIEW_NOT_FOUND")
        if not actor.is_admin and review.tourist_id != actor.id:
            raise ForbiddenException(f"You can only {action} your own review!")
        return review

    @BaseService.measure_operation("update_review")
    def update_review(self, actor: User, review_id: str, data: ReviewUpdate) -> Review:
        with self.transaction():
            review = self._editable(actor, review_id, "update")
            self.repository.apply_changes(review, data.model_dump(exclude_unset=True))
            self.db.flush()
        return self.get_review(review_id)

    @BaseService.measure_operation("delete_review")
    def delete_review(self, actor: User, review_id: str) -> None:
        with self.transaction():
            review = self._editable(actor, review_id, "delete")
            self.db.delete(review)
            self.db.flush()
        self.log_operation("delete_review", review_id=review_id, actor=actor.id)
