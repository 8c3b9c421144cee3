# backend/tourify/repositories/__init__.py
"""
Repository layer for the Tourify platform.

Repositories own every query; services own every transaction.
"""

from .availability_repository import AvailabilityRepository
from .badge_repository import BadgeRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .listing_repository import ListingRepository
from .payment_repository import PaymentRepository
from .review_repository import ReviewRepository
from .user_repository import UserRepository

__all__ = [
    "AvailabilityRepository",
    "BadgeRepository",
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "ListingRepository",
    "PaymentRepository",
    "RepositoryFactory",
    "ReviewRepository",
    "UserRepository",
]
