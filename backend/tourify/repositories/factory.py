# backend/tourify/repositories/factory.py
"""
Repository Factory for the Tourify platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .availability_repository import AvailabilityRepository
from .badge_repository import BadgeRepository
from .booking_repository import BookingRepository
from .listing_repository import ListingRepository
from .payment_repository import PaymentRepository
from .review_repository import ReviewRepository
from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Services call these instead of constructing repositories directly so
    tests can patch a single seam.
    """

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_listing_repository(db: Session) -> ListingRepository:
        return ListingRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> AvailabilityRepository:
        return AvailabilityRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        return BookingRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> PaymentRepository:
        return PaymentRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> ReviewRepository:
        return ReviewRepository(db)

    @staticmethod
    def create_badge_repository(db: Session) -> BadgeRepository:
        return BadgeRepository(db)
