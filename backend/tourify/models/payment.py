# backend/tourify/models/payment.py
"""
Payment model.

One payment per booking. gateway_data is an opaque blob owned by the
gateway integration: checkout session ids, receipt URLs and payout records
live there. Reassign the whole dict when changing it so SQLAlchemy notices.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from ..core.enums import PaymentStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_id = Column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    transaction_id = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    gateway = Column(String(20), nullable=True)
    gateway_data = Column(JSON, nullable=False, default=dict)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    booking = relationship("Booking", back_populates="payment")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
        CheckConstraint("status IN ('PENDING', 'PAID')", name="ck_payments_status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.info(f"Creating payment {self.transaction_id} for booking {self.booking_id}")

    def __repr__(self) -> str:
        return f"<Payment {self.id}: booking={self.booking_id} {self.status} {self.amount}>"

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID.value

    def merge_gateway_data(self, **values: Any) -> None:
        self.gateway_data = {**(self.gateway_data or {}), **values}
