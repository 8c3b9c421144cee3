# backend/tourify/repositories/payment_repository.py
"""
Payment Repository for the Tourify platform.
"""

from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..core.enums import PaymentStatus
from ..models.booking import Booking
from ..models.listing import Listing
from ..models.payment import Payment
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

PAYMENT_SORTABLE_FIELDS = ("created_at", "updated_at", "amount", "status", "paid_at")


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def _apply_eager_loading(self, query):
        return query.options(
            joinedload(Payment.booking).joinedload(Booking.listing),
        )

    def get_by_booking_id(self, booking_id: str) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.booking_id == booking_id).first()

    def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        return self._apply_eager_loading(
            self.db.query(Payment).filter(Payment.transaction_id == transaction_id)
        ).first()

    def search(
        self,
        options: PageOptions,
        *,
        tourist_id: Optional[str] = None,
        guide_id: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[Payment], int]:
        filters = filters or {}
        query = self._apply_eager_loading(self._build_query()).join(
            Booking, Payment.booking_id == Booking.id
        )
        if tourist_id:
            query = query.filter(Booking.tourist_id == tourist_id)
        if guide_id:
            query = query.join(Listing, Booking.listing_id == Listing.id).filter(
                Listing.guide_id == guide_id
            )
        if filters.get("status"):
            query = query.filter(Payment.status == filters["status"])
        if filters.get("gateway"):
            query = query.filter(Payment.gateway == filters["gateway"])
        return self._paginate(
            query, options, sortable=PAYMENT_SORTABLE_FIELDS, default_sort="created_at"
        )

    def total_paid(self, tourist_id: Optional[str] = None) -> Decimal:
        """Sum of PAID amounts, optionally for one tourist's bookings."""
        query = self.db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
            Payment.status == PaymentStatus.PAID.value
        )
        if tourist_id:
            query = query.join(Booking, Payment.booking_id == Booking.id).filter(
                Booking.tourist_id == tourist_id
            )
        return Decimal(str(self._execute_scalar(query) or 0))
