# backend/tourify/services/availability_service.py
"""
Availability Service for the Tourify platform.

Guides publish the dates, optionally narrowed to a time window, on which
they lead tours. Slots of one guide on one date never overlap; a slot
without times occupies the whole day.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import (
    AvailabilityOverlapException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..domain.booking_window import intervals_overlap
from ..models.availability import AvailabilitySlot
from ..models.user import User
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityCreate, AvailabilityUpdate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)


def slot_interval(
    on_date: date, start: Optional[time], end: Optional[time]
) -> Tuple[datetime, datetime]:
    if start is None or end is None:
        midnight = datetime.combine(on_date, time.min)
        return midnight, midnight + timedelta(days=1)
    return datetime.combine(on_date, start), datetime.combine(on_date, end)


def _range_label(start: Optional[time], end: Optional[time]) -> str:
    if start is None or end is None:
        return "all day"
    return f"{start:%H:%M}-{end:%H:%M}"


class AvailabilityService(BaseService):
    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    def _ensure_no_overlap(
        self,
        guide_id: str,
        on_date: date,
        start: Optional[time],
        end: Optional[time],
        *,
        exclude_slot_id: Optional[str] = None,
    ) -> None:
        new_start, new_end = slot_interval(on_date, start, end)
        for other in self.repository.slots_on(guide_id, on_date, exclude_slot_id=exclude_slot_id):
            other_start, other_end = slot_interval(other.date, other.start_time, other.end_time)
            if intervals_overlap(new_start, new_end, other_start, other_end):
                raise AvailabilityOverlapException(
                    specific_date=on_date.isoformat(),
                    new_range=_range_label(start, end),
                    conflicting_range=_range_label(other.start_time, other.end_time),
                )

    @BaseService.measure_operation("create_availability")
    def create_slot(self, guide: User, data: AvailabilityCreate) -> AvailabilitySlot:
        with self.transaction():
            self._ensure_no_overlap(guide.id, data.date, data.start_time, data.end_time)
            slot = self.repository.create(
                guide_id=guide.id,
                date=data.date,
                start_time=data.start_time,
                end_time=data.end_time,
                is_available=data.is_available,
            )
        self.log_operation("create_availability", slot_id=slot.id, guide_id=guide.id)
        return slot

    def _owned_slot(self, guide: User, slot_id: str, action: str) -> AvailabilitySlot:
        slot = self.get_slot(slot_id)
        if slot.guide_id != guide.id:
            raise ForbiddenException(f"You can only {action} your own availability slots!")
        return slot

    @BaseService.measure_operation("update_availability")
    def update_slot(self, guide: User, slot_id: str, data: AvailabilityUpdate) -> AvailabilitySlot:
        changes = data.model_dump(exclude_unset=True)
        with self.transaction():
            slot = self._owned_slot(guide, slot_id, "update")

            new_date = changes.get("date") or slot.date
            new_start = changes["start_time"] if "start_time" in changes else slot.start_time
            new_end = changes["end_time"] if "end_time" in changes else slot.end_time
            if (new_start is None) != (new_end is None):
                raise ValidationException("start_time and end_time must be provided together")
            if new_start is not None and new_start >= new_end:
                raise ValidationException("start_time must be before end_time")

            if {"date", "start_time", "end_time"} & changes.keys():
                self._ensure_no_overlap(
                    guide.id, new_date, new_start, new_end, exclude_slot_id=slot.id
                )
            self.repository.apply_changes(slot, changes)
            self.db.flush()
        return slot

    @BaseService.measure_operation("delete_availability")
    def delete_slot(self, guide: User, slot_id: str) -> None:
        with self.transaction():
            slot = self._owned_slot(guide, slot_id, "delete")
            self.db.delete(slot)
            self.db.flush()
        self.log_operation("delete_availability", slot_id=slot_id, guide_id=guide.id)

    def get_slot(self, slot_id: str) -> AvailabilitySlot:
        slot = self.repository.get_by_id(slot_id)
        if not slot:
            raise NotFoundException("Availability slot not found!", code="AVAILABILITY_NOT_FOUND")
        return slot

    def my_slots(self, guide: User, options: PageOptions) -> Tuple[List[AvailabilitySlot], int]:
        return self.repository.search({"guide_id": guide.id}, options)

    def list_slots(
        self, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[AvailabilitySlot], int]:
        return self.repository.search(filters, options)
