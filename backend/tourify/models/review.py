# backend/tourify/models/review.py
"""
Review model.

One review per booking, enforced by a unique constraint on booking_id.
listing_id and tourist_id are denormalised from the booking for listing
pages and rating aggregates.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    booking_id = Column(String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    listing_id = Column(String(26), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    tourist_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    booking = relationship("Booking", back_populates="review")
    listing = relationship("Listing", back_populates="reviews")
    tourist = relationship("User", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_reviews_booking"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        Index("idx_reviews_listing", "listing_id"),
        Index("idx_reviews_tourist", "tourist_id"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id}: booking={self.booking_id} rating={self.rating}>"
