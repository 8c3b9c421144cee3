# backend/tourify/models/user.py
"""
User model for the Tourify platform.

A single table holds tourists, guides and administrators. Guide-facing
profile fields (expertise, daily rate, languages) are nullable and simply
unused for other roles.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..core.enums import ADMIN_ROLES, UserRole, UserStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Platform account.

    Relationships:
        listings: tours published by a guide
        bookings: reservations made by a tourist
        badges: badges awarded by an administrator
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    contact_no = Column(String(30), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.TOURIST.value, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value, index=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    need_password_change = Column(Boolean, nullable=False, default=False)

    # Profile
    photo = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    gender = Column(String(10), nullable=True)

    # Guide profile
    expertise = Column(JSON, nullable=False, default=list)
    languages_spoken = Column(JSON, nullable=False, default=list)
    daily_rate = Column(Numeric(10, 2), nullable=True)

    # Tourist profile
    travel_preferences = Column(JSON, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    listings = relationship("Listing", back_populates="guide", cascade="all, delete-orphan")
    bookings = relationship(
        "Booking",
        foreign_keys="Booking.tourist_id",
        back_populates="tourist",
        cascade="all, delete-orphan",
    )
    availability_slots = relationship(
        "AvailabilitySlot", back_populates="guide", cascade="all, delete-orphan"
    )
    reviews = relationship("Review", back_populates="tourist", cascade="all, delete-orphan")
    badges = relationship("Badge", secondary="user_badges", back_populates="users")

    __table_args__ = (
        CheckConstraint(
            "role IN ('SUPER_ADMIN', 'ADMIN', 'GUIDE', 'TOURIST')",
            name="ck_users_role",
        ),
        CheckConstraint(
            "status IN ('ACTIVE', 'INACTIVE', 'BLOCKED', 'DELETED')",
            name="ck_users_status",
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.info(f"Creating user with email {self.email} and role {self.role}")

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"

    @property
    def is_admin(self) -> bool:
        return self.role in {role.value for role in ADMIN_ROLES}

    @property
    def is_guide(self) -> bool:
        return self.role == UserRole.GUIDE.value

    @property
    def is_tourist(self) -> bool:
        return self.role == UserRole.TOURIST.value

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
