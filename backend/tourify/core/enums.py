# backend/tourify/core/enums.py
"""
Core enums for the Tourify platform.

Values are stored as plain strings in the database so that they read
the same in SQL, JSON payloads and logs.
"""

from enum import Enum


class UserRole(str, Enum):
    """Roles a user account can hold."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    GUIDE = "GUIDE"
    TOURIST = "TOURIST"

    @property
    def is_admin(self) -> bool:
        return self in (UserRole.SUPER_ADMIN, UserRole.ADMIN)


ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.ADMIN)


class UserStatus(str, Enum):
    """Account lifecycle states."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLOCKED = "BLOCKED"
    DELETED = "DELETED"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class ListingStatus(str, Enum):
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# Statuses that hold a place against listing capacity at admission time.
CAPACITY_HOLDING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

# Statuses counted when a guide confirms a pending booking.
CONFIRMED_CAPACITY_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class PaymentGateway(str, Enum):
    STRIPE = "STRIPE"
    SSLCOMMERZ = "SSLCOMMERZ"
    MANUAL = "MANUAL"
