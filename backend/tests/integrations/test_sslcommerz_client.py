"""
Tests for the SSLCommerz HTTP client against an httpx.MockTransport.
"""

from decimal import Decimal

import httpx
from pydantic import SecretStr
import pytest

from tourify.integrations.sslcommerz_client import SSLCommerzClient, SSLCommerzError


def build_client(handler) -> SSLCommerzClient:
    return SSLCommerzClient(
        store_id="store",
        store_pass=SecretStr("secret"),
        payment_api="https://sslcommerz.test/session",
        validation_api="https://sslcommerz.test/validate",
        transport=httpx.MockTransport(handler),
    )


def session_kwargs():
    return {
        "amount": Decimal("1500"),
        "currency": "BDT",
        "transaction_id": "TXN-1-ABCDEF",
        "success_url": "https://api.test/success",
        "fail_url": "https://api.test/fail",
        "cancel_url": "https://api.test/cancel",
        "customer_name": "Test Tourist",
        "customer_email": "test.tourist@example.com",
    }


def test_requires_credentials():
    with pytest.raises(ValueError):
        SSLCommerzClient(store_id="", store_pass="x", payment_api="a", validation_api="b")


def test_create_session_posts_form():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["form"] = dict(httpx.QueryParams(request.content.decode()))
        return httpx.Response(
            200, json={"status": "SUCCESS", "GatewayPageURL": "https://pay.test/x"}
        )

    payload = build_client(handler).create_session(**session_kwargs())

    assert payload["GatewayPageURL"] == "https://pay.test/x"
    assert seen["method"] == "POST"
    assert seen["form"]["store_passwd"] == "secret"
    assert seen["form"]["total_amount"] == "1500.00"
    assert seen["form"]["cus_phone"] == "N/A"


def test_rejected_session_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "FAILED", "failedreason": "Store inactive"})

    with pytest.raises(SSLCommerzError) as exc:
        build_client(handler).create_session(**session_kwargs())
    assert "Store inactive" in str(exc.value)


def test_validate_passes_val_id():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["val_id"] == "VAL-9"
        assert request.url.params["format"] == "json"
        return httpx.Response(200, json={"status": "VALIDATED", "tran_id": "TXN-1"})

    client = build_client(handler)
    validation = client.validate("VAL-9")
    assert SSLCommerzClient.is_valid(validation)


def test_is_valid_rejects_other_statuses():
    assert not SSLCommerzClient.is_valid({"status": "INVALID_TRANSACTION"})
    assert not SSLCommerzClient.is_valid({})


def test_http_error_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with pytest.raises(SSLCommerzError) as exc:
        build_client(handler).validate("VAL-1")
    assert exc.value.status_code == 503


def test_network_error_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(SSLCommerzError):
        build_client(handler).validate("VAL-1")


def test_malformed_json_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(SSLCommerzError):
        build_client(handler).validate("VAL-1")
