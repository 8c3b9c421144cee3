# backend/tourify/services/payment_service.py
"""
Payment Service for the Tourify platform.

Bridges bookings to the payment gateways. A booking has at most one
payment. Initiation creates or reuses a PENDING payment and hands back a
gateway checkout reference; confirmation from any source (manual, Stripe
session, Stripe webhook, SSLCommerz callback) funnels into _mark_paid,
which is idempotent and moves a PENDING booking to CONFIRMED.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
import logging
import secrets
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import BookingRules, settings
from ..core.enums import BookingStatus, PaymentGateway, PaymentStatus
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    PaymentGatewayException,
    ServiceException,
    ValidationException,
)
from ..integrations.sslcommerz_client import SSLCommerzClient, SSLCommerzError
from ..models.booking import Booking
from ..models.payment import Payment
from ..models.user import User
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.payment_repository import PaymentRepository
from ..utils.pagination import PageOptions
from .base import BaseService
from .stripe_service import StripeGateway

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

PAYABLE_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


def generate_transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


class PaymentService(BaseService):
    """
    Payment orchestration over Stripe Checkout and SSLCommerz.
    """

    def __init__(
        self,
        db: Session,
        rules: Optional[BookingRules] = None,
        stripe_gateway: Optional[StripeGateway] = None,
        sslcommerz_client: Optional[SSLCommerzClient] = None,
        repository: Optional[PaymentRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.rules = rules or settings.booking_rules()
        self.repository = repository or RepositoryFactory.create_payment_repository(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self._stripe_gateway = stripe_gateway
        self._sslcommerz_client = sslcommerz_client

    @property
    def stripe(self) -> StripeGateway:
        if self._stripe_gateway is None:
            self._stripe_gateway = StripeGateway()
        return self._stripe_gateway

    @property
    def sslcommerz(self) -> SSLCommerzClient:
        if self._sslcommerz_client is None:
            if not settings.sslcommerz_store_id or not settings.sslcommerz_store_pass:
                raise ServiceException(
                    "SSLCommerz is not configured. Please set STORE_ID and STORE_PASS.",
                    code="SSLCOMMERZ_NOT_CONFIGURED",
                )
            self._sslcommerz_client = SSLCommerzClient(
                store_id=settings.sslcommerz_store_id,
                store_pass=settings.sslcommerz_store_pass,
                payment_api=settings.sslcommerz_payment_api,
                validation_api=settings.sslcommerz_validation_api,
            )
        return self._sslcommerz_client

    # ------------------------------------------------------------------
    # Initiation
    # ------------------------------------------------------------------

    def _prepare_payment(self, actor: User, booking_id: str, gateway: PaymentGateway) -> Payment:
        """Create or reuse the PENDING payment for a payable booking."""
        with self.transaction():
            booking = self.booking_repository.get_by_id(booking_id)
            if not booking:
                raise NotFoundException("Booking not found!", code="BOOKING_NOT_FOUND")
            if booking.tourist_id != actor.id:
                raise ForbiddenException(
                    "You can only pay for your own bookings", code="NOT_BOOKING_OWNER"
                )
            if booking.status == BookingStatus.CANCELLED.value:
                raise ValidationException(
                    "Cannot pay for a cancelled booking!", code="BOOKING_CANCELLED"
                )
            if (
                self.rules.require_confirmation_before_payment
                and booking.status not in PAYABLE_BOOKING_STATUSES
            ):
                raise ValidationException(
                    "The guide must confirm this booking before it can be paid",
                    code="BOOKING_NOT_CONFIRMED",
                )

            payment = self.repository.get_by_booking_id(booking.id)
            if payment and payment.is_paid:
                raise ConflictException("Booking is already paid!", code="ALREADY_PAID")

            if payment:
                # Each gateway attempt needs a fresh transaction reference.
                payment.transaction_id = generate_transaction_id()
                payment.amount = booking.total_price
                payment.gateway = gateway.value
                self.db.flush()
            else:
                payment = self.repository.create(
                    booking_id=booking.id,
                    amount=booking.total_price,
                    transaction_id=generate_transaction_id(),
                    status=PaymentStatus.PENDING.value,
                    gateway=gateway.value,
                    gateway_data={},
                )
        return payment

    @BaseService.measure_operation("initiate_stripe_payment")
    def initiate_stripe(self, actor: User, booking_id: str) -> Dict[str, Any]:
        payment = self._prepare_payment(actor, booking_id, PaymentGateway.STRIPE)
        booking = payment.booking or self.booking_repository.get_by_id(payment.booking_id)
        title = booking.listing.title if booking and booking.listing else "Tour booking"

        session = self.stripe.create_checkout_session(
            amount=Decimal(payment.amount),
            transaction_id=payment.transaction_id,
            payment_id=payment.id,
            booking_id=payment.booking_id,
            product_name=title,
            customer_email=actor.email,
            success_url=f"{settings.client_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.client_url}/payment/cancelled?transactionId={payment.transaction_id}",
        )
        with self.transaction():
            payment.merge_gateway_data(
                stripe_session_id=session["id"], checkout_url=session["url"]
            )
            self.db.flush()

        self.log_operation("initiate_stripe_payment", payment_id=payment.id, booking_id=booking_id)
        return self._initiate_response(
            payment, checkout_url=session["url"], session_id=session["id"]
        )

    @BaseService.measure_operation("initiate_sslcommerz_payment")
    def initiate_sslcommerz(self, actor: User, booking_id: str) -> Dict[str, Any]:
        client = self.sslcommerz
        payment = self._prepare_payment(actor, booking_id, PaymentGateway.SSLCOMMERZ)
        booking = payment.booking or self.booking_repository.get_by_id(payment.booking_id)
        title = booking.listing.title if booking and booking.listing else "Tour booking"

        try:
            session = client.create_session(
                amount=Decimal(payment.amount),
                currency=settings.sslcommerz_currency,
                transaction_id=payment.transaction_id,
                success_url=settings.sslcommerz_success_url,
                fail_url=settings.sslcommerz_fail_url,
                cancel_url=settings.sslcommerz_cancel_url,
                customer_name=actor.name,
                customer_email=actor.email,
                customer_phone=actor.contact_no,
                product_name=title,
            )
        except SSLCommerzError as e:
            raise PaymentGatewayException(
                "Could not start SSLCommerz checkout", code="SSLCOMMERZ_ERROR"
            ) from e

        gateway_url = session["GatewayPageURL"]
        with self.transaction():
            payment.merge_gateway_data(
                sslcommerz_session_key=session.get("sessionkey"), checkout_url=gateway_url
            )
            self.db.flush()

        self.log_operation(
            "initiate_sslcommerz_payment", payment_id=payment.id, booking_id=booking_id
        )
        return self._initiate_response(payment, checkout_url=gateway_url)

    def initiate(self, actor: User, booking_id: str, gateway: PaymentGateway) -> Dict[str, Any]:
        if PaymentGateway(gateway) == PaymentGateway.SSLCOMMERZ:
            return self.initiate_sslcommerz(actor, booking_id)
        return self.initiate_stripe(actor, booking_id)

    @staticmethod
    def _initiate_response(payment: Payment, **extra: Any) -> Dict[str, Any]:
        return {
            "payment_id": payment.id,
            "transaction_id": payment.transaction_id,
            "amount": payment.amount,
            "gateway": payment.gateway,
            "status": payment.status,
            **extra,
        }

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def _mark_paid(self, payment: Payment, gateway: PaymentGateway, **gateway_data: Any) -> Payment:
        """
        Mark a payment PAID and confirm its booking. Must run inside a transaction.

        A payment that is already PAID is left untouched.
        """
        if payment.is_paid:
            self.logger.info(f"Payment {payment.id} already PAID; ignoring repeat confirmation")
            return payment

        payment.status = PaymentStatus.PAID.value
        payment.paid_at = datetime.now(timezone.utc)
        payment.gateway = gateway.value
        if gateway_data:
            payment.merge_gateway_data(**gateway_data)

        booking: Optional[Booking] = payment.booking
        if booking is not None:
            if booking.status == BookingStatus.PENDING.value:
                booking.confirm()
            elif booking.status == BookingStatus.CANCELLED.value:
                self.logger.warning(
                    f"Payment {payment.id} received for cancelled booking {booking.id}"
                )
        self.db.flush()
        self.logger.info(f"Payment {payment.id} marked PAID via {gateway.value}")
        return payment

    @BaseService.measure_operation("confirm_payment")
    def confirm(self, actor: User, payment_id: str) -> Payment:
        """Manual confirmation by the paying tourist or an administrator."""
        with self.transaction():
            payment = self._get(payment_id)
            booking = payment.booking
            if not actor.is_admin and (booking is None or booking.tourist_id != actor.id):
                raise ForbiddenException(
                    "You can only confirm your own payments", code="NOT_PAYMENT_OWNER"
                )
            gateway = PaymentGateway(payment.gateway) if payment.gateway else PaymentGateway.MANUAL
            self._mark_paid(payment, gateway, confirmed_by=actor.id)
        return payment

    @BaseService.measure_operation("confirm_stripe_session")
    def confirm_stripe_session(self, session_id: str) -> Payment:
        session = self.stripe.retrieve_session(session_id)
        if session.get("payment_status") != "paid":
            raise ValidationException(
                "Stripe payment has not been completed", code="STRIPE_SESSION_UNPAID"
            )

        with self.transaction():
            payment = None
            if session.get("payment_id"):
                payment = self.repository.get_by_id(session["payment_id"])
            if payment is None and session.get("client_reference_id"):
                payment = self.repository.get_by_transaction_id(session["client_reference_id"])
            if payment is None:
                raise NotFoundException(
                    "Payment not found for Stripe session", code="PAYMENT_NOT_FOUND"
                )
            self._mark_paid(
                payment,
                PaymentGateway.STRIPE,
                stripe_session_id=session["id"],
                stripe_payment_intent=session.get("payment_intent"),
            )
        return payment

    @BaseService.measure_operation("handle_stripe_webhook")
    def handle_stripe_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify a Stripe webhook and apply checkout.session.completed events."""
        event = self.stripe.construct_event(payload, signature)
        event_type = event["type"]
        self.logger.info(f"Processing Stripe webhook event: {event_type}")

        if event_type == "checkout.session.completed":
            session_id = event["data"]["object"]["id"]
            payment = self.confirm_stripe_session(session_id)
            return {"event_type": event_type, "handled": True, "details": {"payment_id": payment.id}}

        self.logger.info(f"Unhandled Stripe webhook event type: {event_type}")
        return {"event_type": event_type, "handled": False, "details": {}}

    @BaseService.measure_operation("handle_sslcommerz_success")
    def handle_sslcommerz_success(self, form: Mapping[str, Any]) -> Payment:
        """Validate an SSLCommerz success callback and mark the payment PAID."""
        val_id = form.get("val_id")
        tran_id = form.get("tran_id")
        if not val_id or not tran_id:
            raise ValidationException(
                "val_id and tran_id are required", code="SSLCOMMERZ_CALLBACK_INVALID"
            )

        try:
            validation = self.sslcommerz.validate(str(val_id))
        except SSLCommerzError as e:
            raise PaymentGatewayException(
                "Could not validate SSLCommerz payment", code="SSLCOMMERZ_ERROR"
            ) from e

        if not SSLCommerzClient.is_valid(validation):
            self.logger.warning(f"SSLCommerz validation rejected for {tran_id}: {validation}")
            raise ValidationException(
                "SSLCommerz payment could not be validated", code="SSLCOMMERZ_NOT_VALID"
            )
        if validation.get("tran_id") and validation["tran_id"] != tran_id:
            raise ValidationException(
                "SSLCommerz transaction mismatch", code="SSLCOMMERZ_TRANSACTION_MISMATCH"
            )

        with self.transaction():
            payment = self.repository.get_by_transaction_id(str(tran_id))
            if payment is None:
                raise NotFoundException("Payment not found!", code="PAYMENT_NOT_FOUND")
            paid_amount = validation.get("amount")
            if paid_amount is not None and Decimal(str(paid_amount)) < Decimal(payment.amount):
                raise ValidationException(
                    "SSLCommerz paid amount does not cover the booking",
                    code="SSLCOMMERZ_AMOUNT_MISMATCH",
                )
            self._mark_paid(
                payment,
                PaymentGateway.SSLCOMMERZ,
                sslcommerz_val_id=str(val_id),
                sslcommerz_bank_tran_id=validation.get("bank_tran_id"),
            )
        return payment

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _get(self, payment_id: str) -> Payment:
        payment = self.repository.get_by_id(payment_id)
        if not payment:
            raise NotFoundException("Payment not found!", code="PAYMENT_NOT_FOUND")
        return payment

    def _ensure_can_view(self, actor: User, payment: Payment) -> None:
        if actor.is_admin:
            return
        booking = payment.booking
        if booking is not None:
            if actor.is_tourist and booking.tourist_id == actor.id:
                return
            if actor.is_guide and booking.listing is not None and booking.listing.guide_id == actor.id:
                return
        raise ForbiddenException("You are not allowed to view this payment")

    def get_status(self, actor: User, payment_id: str) -> Dict[str, Any]:
        payment = self._get(payment_id)
        self._ensure_can_view(actor, payment)
        return {
            "payment_id": payment.id,
            "booking_id": payment.booking_id,
            "status": payment.status,
            "booking_status": payment.booking.status,
            "amount": payment.amount,
            "gateway": payment.gateway,
            "paid_at": payment.paid_at,
        }

    @BaseService.measure_operation("list_payments")
    def list_payments(
        self, actor: User, filters: Dict[str, Any], options: PageOptions
    ) -> Tuple[List[Payment], int]:
        if actor.is_admin:
            return self.repository.search(options, filters=filters)
        if actor.is_guide:
            return self.repository.search(options, guide_id=actor.id, filters=filters)
        return self.repository.search(options, tourist_id=actor.id, filters=filters)

    def receipt_url(self, actor: User, payment_id: str) -> str:
        """Stripe receipt URL; fetched from Stripe once and kept in gateway_data."""
        payment = self._get(payment_id)
        self._ensure_can_view(actor, payment)
        if not payment.is_paid:
            raise ValidationException("Payment has not been completed", code="PAYMENT_NOT_PAID")

        data = payment.gateway_data or {}
        if data.get("receipt_url"):
            return data["receipt_url"]

        intent_id = data.get("stripe_payment_intent")
        if payment.gateway != PaymentGateway.STRIPE.value or not intent_id:
            raise NotFoundException(
                "Receipt not available for this payment", code="RECEIPT_NOT_AVAILABLE"
            )

        url = self.stripe.receipt_url(intent_id)
        if not url:
            raise NotFoundException(
                "Receipt not available for this payment", code="RECEIPT_NOT_AVAILABLE"
            )
        with self.transaction():
            payment.merge_gateway_data(receipt_url=url)
            self.db.flush()
        return url

    @BaseService.measure_operation("release_payout")
    def release_payout(self, actor: User, payment_id: str) -> Dict[str, Any]:
        """
        Record the guide payout for a completed, paid booking.

        The payout is recorded once; later calls return the existing record.
        """
        with self.transaction():
            payment = self._get(payment_id)
            if not payment.is_paid:
                raise ValidationException(
                    "Payment has not been completed", code="PAYMENT_NOT_PAID"
                )
            booking = payment.booking
            if booking is None or booking.status != BookingStatus.COMPLETED.value:
                raise ValidationException(
                    "Payout can only be released after the tour is completed",
                    code="BOOKING_NOT_COMPLETED",
                )

            existing = (payment.gateway_data or {}).get("payout")
            if existing:
                return {"payment_id": payment.id, **existing}

            gross = Decimal(payment.amount)
            fee = (gross * Decimal(str(settings.platform_fee_percent)) / 100).quantize(
                CENT, rounding=ROUND_HALF_UP
            )
            payout = {
                "guide_id": booking.listing.guide_id,
                "gross_amount": str(gross.quantize(CENT)),
                "platform_fee": str(fee),
                "net_amount": str((gross - fee).quantize(CENT)),
                "released_at": datetime.now(timezone.utc).isoformat(),
                "released_by": actor.id,
            }
            payment.merge_gateway_data(payout=payout)
            self.db.flush()

        self.log_operation("release_payout", payment_id=payment_id, guide_id=payout["guide_id"])
        return {"payment_id": payment_id, **payout}
