# backend/tourify/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a service bound to the request's database session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.badge_service import BadgeService
from ...services.booking_service import BookingService
from ...services.listing_service import ListingService
from ...services.meta_service import MetaService
from ...services.payment_service import PaymentService
from ...services.review_service import ReviewService
from ...services.user_service import UserService
from .database import get_db


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_listing_service(db: Session = Depends(get_db)) -> ListingService:
    return ListingService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Booking rules come from settings; override this dependency to run the
    API under different rules.
    """
    return BookingService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_badge_service(db: Session = Depends(get_db)) -> BadgeService:
    return BadgeService(db)


def get_meta_service(db: Session = Depends(get_db)) -> MetaService:
    return MetaService(db)
