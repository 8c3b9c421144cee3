# backend/tourify/models/availability.py
"""
Availability slot model.

A guide declares the dates (optionally narrowed to a time window) on which
they can lead tours. A slot without times covers the whole day.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, String, Time
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class AvailabilitySlot(Base):
    __tablename__ = "availability_slots"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    guide_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    guide = relationship("User", back_populates="availability_slots")

    __table_args__ = (Index("idx_availability_guide_date", "guide_id", "date"),)

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.debug(f"Creating availability slot for guide {self.guide_id} on {self.date}")

    def __repr__(self) -> str:
        window = "all day" if self.start_time is None else f"{self.start_time}-{self.end_time}"
        return f"<AvailabilitySlot {self.guide_id} {self.date} {window}>"

    @property
    def covers_whole_day(self) -> bool:
        return self.start_time is None or self.end_time is None
