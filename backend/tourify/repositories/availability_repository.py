# backend/tourify/repositories/availability_repository.py
"""
Availability Repository for the Tourify platform.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..models.availability import AvailabilitySlot
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

AVAILABILITY_SORTABLE_FIELDS = ("date", "start_time", "end_time", "created_at")


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilitySlot)

    def slots_on(
        self,
        guide_id: str,
        on_date: date,
        *,
        exclude_slot_id: Optional[str] = None,
        only_available: bool = False,
    ) -> List[AvailabilitySlot]:
        query = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.guide_id == guide_id,
            AvailabilitySlot.date == on_date,
        )
        if exclude_slot_id:
            query = query.filter(AvailabilitySlot.id != exclude_slot_id)
        if only_available:
            query = query.filter(AvailabilitySlot.is_available.is_(True))
        return query.order_by(AvailabilitySlot.start_time.asc()).all()

    def search(
        self, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[AvailabilitySlot], int]:
        """Filter by guide_id, date and is_available."""
        query = self._build_query()
        if filters.get("guide_id"):
            query = query.filter(AvailabilitySlot.guide_id == filters["guide_id"])
        if filters.get("date"):
            query = query.filter(AvailabilitySlot.date == filters["date"])
        if filters.get("is_available") is not None:
            query = query.filter(AvailabilitySlot.is_available.is_(bool(filters["is_available"])))
        return self._paginate(
            query,
            options,
            sortable=AVAILABILITY_SORTABLE_FIELDS,
            default_sort="date",
            secondary_sort="start_time",
        )
