# backend/tourify/models/booking.py
"""
Booking model for the Tourify platform.

A booking reserves places on a listing for one admission interval
[start_at, end_at). The interval is whole-day or a single hourly slot
depending on the booking rules in force when the booking was made; capacity
is always checked by interval overlap so both shapes compare correctly.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..core.enums import BookingStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class Booking(Base):
    """
    Tourist reservation against a listing.

    start_at and end_at are naive wall-clock datetimes in the tour's local time.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    tourist_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    listing_id = Column(String(26), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)

    booking_date = Column(Date, nullable=False, index=True)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    group_size = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    note = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    tourist = relationship("User", foreign_keys=[tourist_id], back_populates="bookings")
    listing = relationship("Listing", back_populates="bookings")
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])
    payment = relationship(
        "Payment", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )
    review = relationship(
        "Review", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name="ck_bookings_status",
        ),
        CheckConstraint("group_size > 0", name="ck_bookings_group_size_positive"),
        CheckConstraint("total_price >= 0", name="ck_bookings_price_non_negative"),
        CheckConstraint("start_at < end_at", name="ck_bookings_interval_order"),
        Index("idx_bookings_listing_window", "listing_id", "start_at", "end_at"),
        Index("idx_bookings_tourist", "tourist_id"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        logger.info(
            f"Creating booking for tourist {self.tourist_id} on listing {self.listing_id}"
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: tourist={self.tourist_id}, listing={self.listing_id}, "
            f"window={self.start_at}-{self.end_at}, size={self.group_size}, status={self.status}>"
        )

    def confirm(self) -> None:
        self.status = BookingStatus.CONFIRMED.value
        self.confirmed_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} confirmed")

    def cancel(self, cancelled_by_user_id: str) -> None:
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancelled_by_id = cancelled_by_user_id
        logger.info(f"Booking {self.id} cancelled by user {cancelled_by_user_id}")

    def complete(self) -> None:
        self.status = BookingStatus.COMPLETED.value
        self.completed_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} marked as completed")
