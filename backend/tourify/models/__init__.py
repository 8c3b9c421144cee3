# backend/tourify/models/__init__.py
"""
Database models for the Tourify platform.

Importing this package registers every table on Base.metadata.
"""

from .availability import AvailabilitySlot
from .badge import Badge, user_badges
from .booking import Booking
from .listing import Listing
from .payment import Payment
from .review import Review
from .user import User

__all__ = [
    "AvailabilitySlot",
    "Badge",
    "Booking",
    "Listing",
    "Payment",
    "Review",
    "User",
    "user_badges",
]
