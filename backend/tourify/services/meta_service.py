# backend/tourify/services/meta_service.py
"""
Dashboard statistics for the Tourify platform, shaped by the caller's role.
"""

from datetime import date
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.enums import BookingStatus, UserRole
from ..models.booking import Booking
from ..models.listing import Listing
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class MetaService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.listing_repository = RepositoryFactory.create_listing_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.review_repository = RepositoryFactory.create_review_repository(db)

    @BaseService.measure_operation("dashboard")
    def dashboard(self, user: User, *, today: Optional[date] = None) -> Dict[str, Any]:
        role = UserRole(user.role)
        if role.is_admin:
            return self._admin_stats(role)
        if role == UserRole.GUIDE:
            return self._guide_stats(user.id)
        return self._tourist_stats(user.id, today or date.today())

    def _admin_stats(self, role: UserRole) -> Dict[str, Any]:
        return {
            "role": role.value,
            "total_users": self.user_repository.count(),
            "total_listings": self.db.query(Listing).count(),
            "total_bookings": self.db.query(Booking).count(),
            "total_revenue": self.payment_repository.total_paid(),
        }

    def _guide_stats(self, guide_id: str) -> Dict[str, Any]:
        average, total_reviews = self.review_repository.guide_rating_summary(guide_id)
        return {
            "role": UserRole.GUIDE.value,
            "total_listings": self.listing_repository.count_for_guide(guide_id),
            "total_bookings": self.booking_repository.count_for_guide(guide_id),
            "total_reviews": total_reviews,
            "average_rating": round(average, 2) if total_reviews else 0.0,
        }

    def _tourist_stats(self, tourist_id: str, today: date) -> Dict[str, Any]:
        return {
            "role": UserRole.TOURIST.value,
            "total_bookings": self.booking_repository.count_for_tourist(tourist_id),
            "completed_trips": self.booking_repository.count_for_tourist(
                tourist_id, status=BookingStatus.COMPLETED
            ),
            "upcoming_trips": self.booking_repository.count_for_tourist(
                tourist_id, status=BookingStatus.CONFIRMED, from_date=today
            ),
            "total_spend": self.payment_repository.total_paid(tourist_id),
        }
