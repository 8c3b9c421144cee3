# backend/tourify/services/stripe_service.py
"""
Stripe gateway for the Tourify platform.

Thin wrapper over the stripe SDK used by PaymentService: Checkout session
creation and lookup, webhook signature verification, and receipt URLs.
Bookkeeping lives in PaymentService; this class never touches the database.
"""

from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Any, Dict, Optional

from pydantic import SecretStr
import stripe

from ..core.config import settings
from ..core.exceptions import PaymentGatewayException, ServiceException, ValidationException

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Stripe amounts are integers in the currency's smallest unit."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    try:
        return obj[key]
    except (KeyError, TypeError):
        return getattr(obj, key, default)


class StripeGateway:
    """Stripe Checkout integration."""

    def __init__(
        self,
        *,
        secret_key: Optional[SecretStr] = None,
        webhook_secret: Optional[SecretStr] = None,
        currency: Optional[str] = None,
    ) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        key = secret_key if secret_key is not None else settings.stripe_secret_key
        self._webhook_secret = (
            webhook_secret if webhook_secret is not None else settings.stripe_webhook_secret
        )
        self.currency = (currency or settings.stripe_currency).lower()

        self.configured = False
        if key and key.get_secret_value():
            stripe.api_key = key.get_secret_value()
            stripe.max_network_retries = 1
            self.configured = True
            self.logger.info("Stripe gateway configured")
        else:
            self.logger.warning("Stripe secret key not configured - Stripe payments disabled")

    def _check_configured(self) -> None:
        if not self.configured:
            raise ServiceException(
                "Stripe is not configured. Please set STRIPE_SECRET_KEY.",
                code="STRIPE_NOT_CONFIGURED",
            )

    def create_checkout_session(
        self,
        *,
        amount: Decimal,
        transaction_id: str,
        payment_id: str,
        booking_id: str,
        product_name: str,
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a one-off Checkout session; returns {"id", "url"}."""
        self._check_configured()
        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": self.currency,
                            "product_data": {"name": product_name},
                            "unit_amount": to_minor_units(amount),
                        },
                        "quantity": 1,
                    }
                ],
                client_reference_id=transaction_id,
                customer_email=customer_email,
                metadata={
                    "payment_id": payment_id,
                    "booking_id": booking_id,
                    "transaction_id": transaction_id,
                },
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as e:
            self.logger.error(f"Stripe checkout session creation failed: {str(e)}")
            raise PaymentGatewayException(
                "Could not start Stripe checkout", code="STRIPE_ERROR"
            ) from e

        self.logger.info(f"Created Stripe checkout session {_get(session, 'id')} for {transaction_id}")
        return {"id": _get(session, "id"), "url": _get(session, "url")}

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        """Fetch a Checkout session and flatten the fields payments care about."""
        self._check_configured()
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.InvalidRequestError as e:
            raise ValidationException(
                "Unknown Stripe checkout session", code="STRIPE_SESSION_NOT_FOUND"
            ) from e
        except stripe.StripeError as e:
            self.logger.error(f"Stripe session lookup failed for {session_id}: {str(e)}")
            raise PaymentGatewayException(
                "Could not retrieve Stripe checkout session", code="STRIPE_ERROR"
            ) from e

        metadata = _get(session, "metadata") or {}
        return {
            "id": _get(session, "id"),
            "payment_status": _get(session, "payment_status"),
            "client_reference_id": _get(session, "client_reference_id"),
            "payment_id": _get(metadata, "payment_id"),
            "payment_intent": _get(session, "payment_intent"),
        }

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Any:
        """
        Verify a webhook payload against the configured signing secret.

        Raises:
            ServiceException: webhook secret missing
            ValidationException: bad signature or malformed payload
        """
        secret = self._webhook_secret.get_secret_value() if self._webhook_secret else None
        if not secret:
            raise ServiceException("Webhook secret not configured", code="WEBHOOK_NOT_CONFIGURED")
        if not signature:
            raise ValidationException("Missing Stripe signature", code="WEBHOOK_SIGNATURE_MISSING")
        try:
            return stripe.Webhook.construct_event(payload, signature, secret)
        except stripe.SignatureVerificationError as e:
            self.logger.warning("Invalid webhook signature")
            raise ValidationException(
                "Invalid webhook signature", code="WEBHOOK_SIGNATURE_INVALID"
            ) from e
        except ValueError as e:
            self.logger.warning(f"Invalid webhook payload: {str(e)}")
            raise ValidationException("Invalid webhook payload", code="WEBHOOK_PAYLOAD_INVALID") from e

    def receipt_url(self, payment_intent_id: str) -> Optional[str]:
        """Receipt URL of the charge behind a PaymentIntent, if Stripe has issued one."""
        self._check_configured()
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id, expand=["latest_charge"])
        except stripe.StripeError as e:
            self.logger.error(f"Receipt lookup failed for {payment_intent_id}: {str(e)}")
            raise PaymentGatewayException(
                "Could not retrieve Stripe receipt", code="STRIPE_ERROR"
            ) from e
        return _get(_get(intent, "latest_charge"), "receipt_url")
