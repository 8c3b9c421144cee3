"""
Tests for the payment endpoints and gateway callbacks.
"""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from tourify.api.dependencies.services import get_payment_service
from tourify.core.enums import BookingStatus, PaymentGateway, PaymentStatus
from tourify.main import app
from tourify.services.payment_service import PaymentService
from tourify.services.stripe_service import StripeGateway


@pytest.fixture
def stripe_gateway() -> MagicMock:
    gateway = MagicMock(spec=StripeGateway)
    gateway.create_checkout_session.return_value = {
        "id": "cs_route_1",
        "url": "https://checkout.stripe.test/cs_route_1",
    }
    return gateway


@pytest.fixture
def mocked_payments(client, db, stripe_gateway):
    app.dependency_overrides[get_payment_service] = lambda: PaymentService(
        db, stripe_gateway=stripe_gateway
    )
    yield stripe_gateway
    app.dependency_overrides.pop(get_payment_service, None)


@pytest.fixture
def confirmed_booking(tourist, listing, tour_date, make_booking):
    return make_booking(tourist, listing, tour_date, group_size=2, status=BookingStatus.CONFIRMED)


def test_stripe_initiate(client, mocked_payments, confirmed_booking, auth_headers_tourist):
    response = client.post(
        "/api/v1/payments/stripe/initiate",
        json={"booking_id": confirmed_booking.id},
        headers=auth_headers_tourist,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["checkout_url"] == "https://checkout.stripe.test/cs_route_1"
    assert body["amount"] == 50.0
    assert body["status"] == PaymentStatus.PENDING.value


def test_initiate_requires_confirmed_booking(
    client, mocked_payments, tourist, listing, tour_date, make_booking, auth_headers_tourist
):
    booking = make_booking(tourist, listing, tour_date)
    response = client.post(
        "/api/v1/payments/stripe/initiate",
        json={"booking_id": booking.id},
        headers=auth_headers_tourist,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "BOOKING_NOT_CONFIRMED"


def test_stripe_not_configured(client, confirmed_booking, auth_headers_tourist):
    response = client.post(
        "/api/v1/payments/stripe/initiate",
        json={"booking_id": confirmed_booking.id},
        headers=auth_headers_tourist,
    )
    assert response.status_code == 500
    assert response.json()["code"] == "STRIPE_NOT_CONFIGURED"


def test_sslcommerz_not_configured(client, confirmed_booking, auth_headers_tourist):
    response = client.post(
        "/api/v1/payments/sslcommerz/initiate",
        json={"booking_id": confirmed_booking.id},
        headers=auth_headers_tourist,
    )
    assert response.status_code == 500
    assert response.json()["code"] == "SSLCOMMERZ_NOT_CONFIGURED"


def test_manual_confirm(client, confirmed_booking, make_payment, auth_headers_tourist):
    payment = make_payment(confirmed_booking)
    response = client.post(
        "/api/v1/payments/confirm", json={"payment_id": payment.id}, headers=auth_headers_tourist
    )
    assert response.status_code == 200
    assert response.json()["status"] == PaymentStatus.PAID.value


def test_payment_status(client, confirmed_booking, make_payment, auth_headers_tourist):
    payment = make_payment(confirmed_booking)
    response = client.get(f"/api/v1/payments/{payment.id}/status", headers=auth_headers_tourist)
    assert response.status_code == 200
    body = response.json()
    assert body["payment_id"] == payment.id
    assert body["booking_status"] == BookingStatus.CONFIRMED.value


def test_other_tourist_cannot_see_payment(
    client, other_tourist, confirmed_booking, make_payment, auth_headers
):
    payment = make_payment(confirmed_booking)
    response = client.get(
        f"/api/v1/payments/{payment.id}/status", headers=auth_headers(other_tourist)
    )
    assert response.status_code == 403


def test_sslcommerz_fail_redirects(client):
    response = client.post(
        "/api/v1/payments/sslcommerz-fail",
        data={"tran_id": "TXN-1-AAAAAA"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == (
        "http://client.test/payment/failed?transactionId=TXN-1-AAAAAA"
    )


def test_sslcommerz_cancel_redirects(client):
    response = client.post(
        "/api/v1/payments/sslcommerz-cancel",
        data={"tran_id": "TXN-1-BBBBBB"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"].endswith("/payment/cancelled?transactionId=TXN-1-BBBBBB")


def test_sslcommerz_success_without_validation_id(client):
    response = client.post(
        "/api/v1/payments/sslcommerz-success",
        data={"tran_id": "TXN-1-CCCCCC"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"].endswith("/payment/failed?transactionId=TXN-1-CCCCCC")


def test_webhook_without_secret(client):
    response = client.post(
        "/api/v1/payments/stripe/webhook",
        content=b"{}",
        headers={"stripe-signature": "t=1,v1=abc"},
    )
    assert response.status_code == 500
    assert response.json()["code"] == "WEBHOOK_NOT_CONFIGURED"


def test_webhook_acknowledges_event(client, mocked_payments):
    mocked_payments.construct_event.return_value = {"type": "payment_intent.created", "data": {}}
    response = client.post(
        "/api/v1/payments/stripe/webhook",
        content=b"{}",
        headers={"stripe-signature": "t=1,v1=abc"},
    )
    assert response.status_code == 200
    assert response.json() == {
        "received": True,
        "event_type": "payment_intent.created",
        "handled": False,
        "details": {},
    }


def test_receipt_redirect(client, mocked_payments, confirmed_booking, make_payment, auth_headers_tourist):
    payment = make_payment(
        confirmed_booking,
        status=PaymentStatus.PAID,
        gateway=PaymentGateway.STRIPE.value,
        gateway_data={"receipt_url": "https://pay.stripe.test/receipts/9"},
    )
    response = client.get(
        f"/api/v1/payments/{payment.id}/receipt",
        params={"redirect": "true"},
        headers=auth_headers_tourist,
        follow_redirects=False,
    )
    assert response.status_code == 307
    assert response.headers["location"] == "https://pay.stripe.test/receipts/9"

    response = client.get(f"/api/v1/payments/{payment.id}/receipt", headers=auth_headers_tourist)
    assert response.json()["data"] == {"receipt_url": "https://pay.stripe.test/receipts/9"}


def test_admin_releases_payout(
    client, tourist, guide, listing, make_booking, make_payment, auth_headers_admin
):
    booking = make_booking(
        tourist, listing, date.today() - timedelta(days=1), status=BookingStatus.COMPLETED
    )
    payment = make_payment(booking, status=PaymentStatus.PAID)
    response = client.post(f"/api/v1/payments/{payment.id}/payout", headers=auth_headers_admin)
    assert response.status_code == 200
    body = response.json()
    assert body["guide_id"] == guide.id
    assert body["platform_fee"] == 2.5
    assert body["net_amount"] == 22.5


def test_tourist_cannot_release_payout(client, confirmed_booking, make_payment, auth_headers_tourist):
    payment = make_payment(confirmed_booking, status=PaymentStatus.PAID)
    response = client.post(f"/api/v1/payments/{payment.id}/payout", headers=auth_headers_tourist)
    assert response.status_code == 403
