"""Payment schemas."""

import datetime as dt
from typing import Any, Dict, Optional

from pydantic import Field

from ..core.enums import BookingStatus, PaymentGateway, PaymentStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel


class PaymentInitiateRequest(StrictRequestModel):
    booking_id: str = Field(min_length=1)


class PaymentConfirmRequest(StrictRequestModel):
    payment_id: str = Field(min_length=1)


class StripeConfirmRequest(StrictRequestModel):
    session_id: str = Field(min_length=1)


class PaymentInitiateResponse(StandardizedModel):
    payment_id: str
    transaction_id: str
    amount: Money
    gateway: PaymentGateway
    status: PaymentStatus
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None
    message: str = "Payment initiated successfully. Proceed to gateway."


class PaymentResponse(StandardizedModel):
    id: str
    booking_id: str
    amount: Money
    transaction_id: str
    status: PaymentStatus
    gateway: Optional[PaymentGateway] = None
    paid_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class PaymentStatusResponse(StandardizedModel):
    payment_id: str
    booking_id: str
    status: PaymentStatus
    booking_status: BookingStatus
    amount: Money
    gateway: Optional[PaymentGateway] = None
    paid_at: Optional[dt.datetime] = None


class PayoutResponse(StandardizedModel):
    payment_id: str
    guide_id: str
    gross_amount: Money
    platform_fee: Money
    net_amount: Money
    released_at: dt.datetime
    released_by: str


class WebhookAck(StandardizedModel):
    received: bool = True
    event_type: Optional[str] = None
    handled: bool = False
    details: Dict[str, Any] = Field(default_factory=dict)
