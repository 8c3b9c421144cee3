"""
Tests for ReviewService: one review per completed booking.
"""

from datetime import date, timedelta

import pytest

from tourify.core.enums import BookingStatus
from tourify.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from tourify.schemas.review import ReviewCreate, ReviewUpdate
from tourify.services.review_service import ReviewService
from tourify.utils.pagination import page_options


@pytest.fixture
def review_service(db) -> ReviewService:
    return ReviewService(db)


@pytest.fixture
def completed_booking(tourist, listing, make_booking):
    past = date.today() - timedelta(days=2)
    return make_booking(tourist, listing, past, status=BookingStatus.COMPLETED)


class TestCreateReview:
    def test_review_completed_booking(self, review_service, tourist, listing, completed_booking):
        review = review_service.create_review(
            tourist, ReviewCreate(booking_id=completed_booking.id, rating=5, comment="Superb")
        )
        assert review.listing_id == listing.id
        assert review.tourist_id == tourist.id
        assert review.rating == 5
        assert review.tourist.name == "Test Tourist"

    @pytest.mark.parametrize(
        "status", [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELLED]
    )
    def test_unfinished_booking_rejected(
        self, review_service, tourist, listing, tour_date, make_booking, status
    ):
        booking = make_booking(tourist, listing, tour_date, status=status)
        with pytest.raises(ValidationException) as exc:
            review_service.create_review(tourist, ReviewCreate(booking_id=booking.id, rating=4))
        assert exc.value.message == "You can only review a tour after completing it!"

    def test_someone_elses_booking_rejected(
        self, review_service, other_tourist, completed_booking
    ):
        with pytest.raises(ValidationException):
            review_service.create_review(
                other_tourist, ReviewCreate(booking_id=completed_booking.id, rating=4)
            )

    def test_second_review_conflicts(self, review_service, tourist, completed_booking):
        review_service.create_review(tourist, ReviewCreate(booking_id=completed_booking.id, rating=4))
        with pytest.raises(ConflictException):
            review_service.create_review(
                tourist, ReviewCreate(booking_id=completed_booking.id, rating=2)
            )

    def test_unknown_booking(self, review_service, tourist):
        with pytest.raises(NotFoundException):
            review_service.create_review(tourist, ReviewCreate(booking_id="missing", rating=4))

    def test_rating_bounds(self):
        with pytest.raises(ValueError):
            ReviewCreate(booking_id="b", rating=6)
        with pytest.raises(ValueError):
            ReviewCreate(booking_id="b", rating=0)


class TestManageReviews:
    @pytest.fixture
    def review(self, review_service, tourist, completed_booking):
        return review_service.create_review(
            tourist, ReviewCreate(booking_id=completed_booking.id, rating=3)
        )

    def test_author_updates_review(self, review_service, tourist, review):
        updated = review_service.update_review(
            tourist, review.id, ReviewUpdate(rating=4, comment="Better on reflection")
        )
        assert updated.rating == 4
        assert updated.comment == "Better on reflection"

    def test_other_tourist_cannot_update(self, review_service, other_tourist, review):
        with pytest.raises(ForbiddenException) as exc:
            review_service.update_review(other_tourist, review.id, ReviewUpdate(rating=1))
        assert exc.value.message == "You can only update your own review!"

    def test_admin_deletes_review(self, review_service, admin, review):
        review_service.delete_review(admin, review.id)
        with pytest.raises(NotFoundException):
            review_service.get_review(review.id)

    def test_listing_reviews(self, review_service, listing, review):
        reviews, total = review_service.listing_reviews(
            listing.id, page_options(None, None, None, None)
        )
        assert total == 1
        assert reviews[0].id == review.id

    def test_listing_reviews_unknown_listing(self, review_service):
        with pytest.raises(NotFoundException):
            review_service.listing_reviews("missing", page_options(None, None, None, None))

    def test_my_reviews(self, review_service, tourist, other_tourist, review):
        options = page_options(None, None, None, None)
        assert review_service.my_reviews(tourist, options)[1] == 1
        assert review_service.my_reviews(other_tourist, options)[1] == 0
