# backend/tourify/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_current_active_user, get_current_active_user_optional, get_current_user
from .authz import require_admin, require_guide, require_roles, require_super_admin, require_tourist
from .database import get_db
from .services import (
    get_auth_service,
    get_availability_service,
    get_badge_service,
    get_booking_service,
    get_listing_service,
    get_meta_service,
    get_payment_service,
    get_review_service,
    get_user_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_current_active_user",
    "get_current_active_user_optional",
    "require_roles",
    "require_admin",
    "require_super_admin",
    "require_guide",
    "require_tourist",
    # Database
    "get_db",
    # Services
    "get_auth_service",
    "get_availability_service",
    "get_badge_service",
    "get_booking_service",
    "get_listing_service",
    "get_meta_service",
    "get_payment_service",
    "get_review_service",
    "get_user_service",
]
