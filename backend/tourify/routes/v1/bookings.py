# backend/tourify/routes/v1/bookings.py
"""
Booking routes - API v1

Endpoints:
    POST /                                → Book a listing (tourist)
    GET /                                 → Bookings visible to the caller
    GET /guide-booked-dates/{guide_id}    → Dates a guide is already booked
    GET /booked-slots/{listing_id}?date=  → Remaining capacity per slot
    GET /{booking_id}                     → Booking details
    PATCH /{booking_id}/status            → Status transition
"""

import asyncio
import datetime as dt
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_booking_service, get_current_active_user, require_tourist
from ...core.enums import BookingStatus
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import PaginatedResponse
from ...schemas.booking import (
    BookedSlotsResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    GuideBookedDatesResponse,
)
from ...services.booking_service import BookingService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate = Body(...),
    current_user: User = Depends(require_tourist),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a PENDING booking.

    Rejected with 400 when the listing is the caller's own, when the guide
    is unavailable or when the requested slot lacks capacity; in the last
    case `errors.available` carries the remaining places.
    """
    try:
        booking = await asyncio.to_thread(booking_service.create_booking, current_user, payload)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[BookingResponse])
async def list_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    listing_id: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    filters = {
        "status": booking_status.value if booking_status else None,
        "listing_id": listing_id,
    }
    bookings, total = await asyncio.to_thread(
        booking_service.list_bookings, current_user, filters, options
    )
    return PaginatedResponse[BookingResponse].build(
        [BookingResponse.model_validate(booking) for booking in bookings], total, options
    )


@router.get("/guide-booked-dates/{guide_id}", response_model=GuideBookedDatesResponse)
async def guide_booked_dates(
    guide_id: str,
    from_date: Optional[dt.date] = Query(None, description="Defaults to today"),
    booking_service: BookingService = Depends(get_booking_service),
) -> GuideBookedDatesResponse:
    try:
        dates = await asyncio.to_thread(booking_service.guide_booked_dates, guide_id, from_date)
        return GuideBookedDatesResponse(guide_id=guide_id, dates=dates)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/booked-slots/{listing_id}", response_model=BookedSlotsResponse)
async def booked_slots(
    listing_id: str,
    on_date: dt.date = Query(..., alias="date"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookedSlotsResponse:
    try:
        summary = await asyncio.to_thread(booking_service.booked_slots, listing_id, on_date)
        return BookedSlotsResponse.model_validate(summary)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, current_user, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def change_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate = Body(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.change_status, current_user, booking_id, payload.status
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
