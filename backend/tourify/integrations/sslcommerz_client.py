"""Minimal SSLCommerz client for hosted checkout and payment validation."""

from __future__ import annotations

from decimal import Decimal
import json
import logging
from typing import Any, Dict, Optional, cast

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)

VALID_STATUSES = frozenset({"VALID", "VALIDATED"})


class SSLCommerzError(RuntimeError):
    """Raised when SSLCommerz rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_body = error_body


class SSLCommerzClient:
    """Thin client for the SSLCommerz session and validation APIs."""

    def __init__(
        self,
        *,
        store_id: str,
        store_pass: str | SecretStr,
        payment_api: str,
        validation_api: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = (
            store_pass.get_secret_value() if isinstance(store_pass, SecretStr) else store_pass
        )
        if not store_id or not secret_value:
            raise ValueError("SSLCommerz store id and password must be provided")

        self._store_id = store_id
        self._store_pass = secret_value
        self._payment_api = payment_api
        self._validation_api = validation_api
        self._timeout = timeout
        self._transport = transport

    def create_session(
        self,
        *,
        amount: Decimal,
        currency: str,
        transaction_id: str,
        success_url: str,
        fail_url: str,
        cancel_url: str,
        customer_name: str,
        customer_email: str,
        customer_phone: Optional[str] = None,
        product_name: str = "Tour booking",
    ) -> Dict[str, Any]:
        """Open a hosted checkout session; the response carries GatewayPageURL."""

        form = {
            "store_id": self._store_id,
            "store_passwd": self._store_pass,
            "total_amount": f"{Decimal(amount):.2f}",
            "currency": currency,
            "tran_id": transaction_id,
            "success_url": success_url,
            "fail_url": fail_url,
            "cancel_url": cancel_url,
            "cus_name": customer_name,
            "cus_email": customer_email,
            "cus_phone": customer_phone or "N/A",
            "cus_add1": "N/A",
            "cus_city": "N/A",
            "cus_country": "Bangladesh",
            "shipping_method": "NO",
            "num_of_item": "1",
            "product_name": product_name,
            "product_category": "Tour",
            "product_profile": "non-physical-goods",
        }
        payload = self.request("POST", self._payment_api, data=form)
        if payload.get("status") != "SUCCESS" or not payload.get("GatewayPageURL"):
            reason = payload.get("failedreason") or "unknown reason"
            logger.error("SSLCommerz session rejected for %s: %s", transaction_id, reason)
            raise SSLCommerzError(f"SSLCommerz rejected the session: {reason}", error_body=payload)
        return payload

    def validate(self, val_id: str) -> Dict[str, Any]:
        """Look up a completed transaction by the val_id SSLCommerz posted back."""

        if not val_id:
            raise ValueError("val_id must be provided")
        return self.request(
            "GET",
            self._validation_api,
            params={
                "val_id": val_id,
                "store_id": self._store_id,
                "store_passwd": self._store_pass,
                "format": "json",
            },
        )

    @staticmethod
    def is_valid(validation: Dict[str, Any]) -> bool:
        return str(validation.get("status", "")).upper() in VALID_STATUSES

    def request(
        self,
        method: str,
        url: str,
        *,
        data: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Perform a raw SSLCommerz request and return the parsed JSON payload."""

        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        ) as client:
            try:
                response = client.request(method, url, data=data, params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                logger.error(
                    "SSLCommerz API error %s for %s %s: %s",
                    status,
                    method,
                    url,
                    exc.response.text[:500],
                )
                raise SSLCommerzError(
                    f"SSLCommerz responded with status {status}",
                    status_code=status,
                    error_body=exc.response.text,
                ) from exc
            except httpx.RequestError as exc:
                logger.error("SSLCommerz request failure for %s %s: %s", method, url, str(exc))
                raise SSLCommerzError("Failed to reach SSLCommerz") from exc

        try:
            return cast(Dict[str, Any], response.json())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from SSLCommerz for %s %s: %s", method, url, response.text)
            raise SSLCommerzError("Received malformed JSON from SSLCommerz") from exc
