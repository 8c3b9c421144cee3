# backend/tourify/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /stripe/initiate        → Start a Stripe Checkout payment (tourist)
    POST /sslcommerz/initiate    → Start an SSLCommerz payment (tourist)
    POST /confirm                → Manual confirmation (owner tourist or admin)
    POST /stripe/confirm         → Confirm a completed Checkout session
    POST /stripe/webhook         → Stripe event receiver
    POST /sslcommerz-success     → SSLCommerz browser callback
    POST /sslcommerz-fail        → SSLCommerz browser callback
    POST /sslcommerz-cancel      → SSLCommerz browser callback
    GET /                        → Payments visible to the caller
    GET /{payment_id}/status     → Payment and booking status
    GET /{payment_id}/receipt    → Stripe receipt URL
    POST /{payment_id}/payout    → Release the guide payout (admin)
"""

import asyncio
import logging
from typing import NoReturn, Optional, Union

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse

from ...api.dependencies import (
    get_current_active_user,
    get_payment_service,
    require_admin,
    require_tourist,
)
from ...core.config import settings
from ...core.enums import PaymentGateway, PaymentStatus
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import PaginatedResponse, SuccessResponse
from ...schemas.payment import (
    PaymentConfirmRequest,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentResponse,
    PaymentStatusResponse,
    PayoutResponse,
    StripeConfirmRequest,
    WebhookAck,
)
from ...services.payment_service import PaymentService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _client_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"{settings.client_url.rstrip('/')}{path}", status_code=status.HTTP_303_SEE_OTHER
    )


# ============================================================================
# Initiation and confirmation
# ============================================================================


@router.post("/stripe/initiate", response_model=PaymentInitiateResponse)
async def initiate_stripe_payment(
    payload: PaymentInitiateRequest = Body(...),
    current_user: User = Depends(require_tourist),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentInitiateResponse:
    try:
        result = await asyncio.to_thread(
            payment_service.initiate, current_user, payload.booking_id, PaymentGateway.STRIPE
        )
        return PaymentInitiateResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/sslcommerz/initiate", response_model=PaymentInitiateResponse)
async def initiate_sslcommerz_payment(
    payload: PaymentInitiateRequest = Body(...),
    current_user: User = Depends(require_tourist),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentInitiateResponse:
    try:
        result = await asyncio.to_thread(
            payment_service.initiate, current_user, payload.booking_id, PaymentGateway.SSLCOMMERZ
        )
        return PaymentInitiateResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/confirm", response_model=PaymentResponse)
async def confirm_payment(
    payload: PaymentConfirmRequest = Body(...),
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        payment = await asyncio.to_thread(
            payment_service.confirm, current_user, payload.payment_id
        )
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/stripe/confirm", response_model=PaymentResponse)
async def confirm_stripe_payment(
    payload: StripeConfirmRequest = Body(...),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    """Called by the client's success page with the Checkout session id."""
    try:
        payment = await asyncio.to_thread(
            payment_service.confirm_stripe_session, payload.session_id
        )
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Gateway callbacks
# ============================================================================


@router.post("/stripe/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    payment_service: PaymentService = Depends(get_payment_service),
) -> WebhookAck:
    payload = await request.body()
    try:
        result = await asyncio.to_thread(
            payment_service.handle_stripe_webhook, payload, stripe_signature
        )
        return WebhookAck(**result)
    except DomainException as e:
        logger.error(f"Stripe webhook failed: {str(e)}")
        handle_domain_exception(e)


@router.post("/sslcommerz-success")
async def sslcommerz_success(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service),
) -> RedirectResponse:
    form = dict(await request.form())
    try:
        payment = await asyncio.to_thread(payment_service.handle_sslcommerz_success, form)
    except DomainException as e:
        logger.warning(f"SSLCommerz success callback rejected: {str(e)}")
        return _client_redirect(f"/payment/failed?transactionId={form.get('tran_id', '')}")
    return _client_redirect(f"/payment/success?paymentId={payment.id}")


@router.post("/sslcommerz-fail")
async def sslcommerz_fail(request: Request) -> RedirectResponse:
    form = await request.form()
    tran_id = form.get("tran_id", "")
    logger.info(f"SSLCommerz reported a failed payment for transaction {tran_id}")
    return _client_redirect(f"/payment/failed?transactionId={tran_id}")


@router.post("/sslcommerz-cancel")
async def sslcommerz_cancel(request: Request) -> RedirectResponse:
    form = await request.form()
    tran_id = form.get("tran_id", "")
    logger.info(f"SSLCommerz payment cancelled for transaction {tran_id}")
    return _client_redirect(f"/payment/cancelled?transactionId={tran_id}")


# ============================================================================
# Queries and payouts
# ============================================================================


@router.get("", response_model=PaginatedResponse[PaymentResponse])
async def list_payments(
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    gateway: Optional[PaymentGateway] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaginatedResponse[PaymentResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    filters = {
        "status": payment_status.value if payment_status else None,
        "gateway": gateway.value if gateway else None,
    }
    payments, total = await asyncio.to_thread(
        payment_service.list_payments, current_user, filters, options
    )
    return PaginatedResponse[PaymentResponse].build(
        [PaymentResponse.model_validate(payment) for payment in payments], total, options
    )


@router.get("/{payment_id}/status", response_model=PaymentStatusResponse)
async def get_payment_status(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentStatusResponse:
    try:
        result = await asyncio.to_thread(payment_service.get_status, current_user, payment_id)
        return PaymentStatusResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{payment_id}/receipt", response_model=None)
async def get_payment_receipt(
    payment_id: str,
    redirect: bool = Query(False, description="Redirect to the receipt instead of returning it"),
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> Union[RedirectResponse, SuccessResponse]:
    try:
        url = await asyncio.to_thread(payment_service.receipt_url, current_user, payment_id)
    except DomainException as e:
        handle_domain_exception(e)
    if redirect:
        return RedirectResponse(url=url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    return SuccessResponse(message="Receipt retrieved successfully", data={"receipt_url": url})


@router.post("/{payment_id}/payout", response_model=PayoutResponse)
async def release_payout(
    payment_id: str,
    current_user: User = Depends(require_admin),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PayoutResponse:
    try:
        result = await asyncio.to_thread(payment_service.release_payout, current_user, payment_id)
        return PayoutResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)
