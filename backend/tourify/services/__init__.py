# backend/tourify/services/__init__.py
"""
Service layer for the Tourify platform.

Services hold the business rules and own transaction boundaries;
repositories underneath them only query and flush.
"""

from .auth_service import AuthService
from .availability_service import AvailabilityService
from .badge_service import BadgeService
from .base import BaseService
from .booking_service import BookingService
from .listing_service import ListingService
from .meta_service import MetaService
from .payment_service import PaymentService
from .review_service import ReviewService
from .stripe_service import StripeGateway
from .user_service import UserService

__all__ = [
    "AuthService",
    "AvailabilityService",
    "BadgeService",
    "BaseService",
    "BookingService",
    "ListingService",
    "MetaService",
    "PaymentService",
    "ReviewService",
    "StripeGateway",
    "UserService",
]
