# backend/tourify/models/listing.py
"""
Listing model: a bookable tour offered by a guide.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..core.enums import ListingStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class Listing(Base):
    """
    Tour offering.

    max_group_size is the capacity ceiling per admission slot. A listing
    without one cannot take bookings.
    """

    __tablename__ = "listings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    guide_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    itinerary = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_hours = Column(Float, nullable=False)
    max_group_size = Column(Integer, nullable=True)
    meeting_point = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    languages = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default=ListingStatus.ACTIVE.value, index=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    guide = relationship("User", back_populates="listings")
    bookings = relationship("Booking", back_populates="listing", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="listing", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_listings_price_non_negative"),
        CheckConstraint("duration_hours > 0", name="ck_listings_duration_positive"),
        CheckConstraint(
            "max_group_size IS NULL OR max_group_size > 0", name="ck_listings_group_size_positive"
        ),
        CheckConstraint("status IN ('ACTIVE', 'BLOCKED')", name="ck_listings_status"),
        Index("idx_listings_guide", "guide_id"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.info(f"Creating listing '{self.title}' for guide {self.guide_id}")

    def __repr__(self) -> str:
        return f"<Listing {self.id}: {self.title} guide={self.guide_id}>"
