# backend/tourify/routes/v1/availability.py
"""
Availability routes - API v1

Guides publish the dates (optionally a time window) on which they can be
booked. Slot listings are ordered by date, then start time.
"""

import asyncio
import datetime as dt
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_availability_service, require_guide
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.availability import AvailabilityCreate, AvailabilityResponse, AvailabilityUpdate
from ...schemas.base_responses import DeleteResponse, PaginatedResponse
from ...services.availability_service import AvailabilityService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
async def create_availability(
    payload: AvailabilityCreate = Body(...),
    current_user: User = Depends(require_guide),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        slot = await asyncio.to_thread(availability_service.create_slot, current_user, payload)
        return AvailabilityResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[AvailabilityResponse])
async def list_availability(
    guide_id: Optional[str] = Query(None),
    on_date: Optional[dt.date] = Query(None, alias="date"),
    is_available: Optional[bool] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> PaginatedResponse[AvailabilityResponse]:
    options = page_options(page, limit, sort_by, sort_order, default_sort_order="asc")
    filters = {"guide_id": guide_id, "date": on_date, "is_available": is_available}
    slots, total = await asyncio.to_thread(availability_service.list_slots, filters, options)
    return PaginatedResponse[AvailabilityResponse].build(
        [AvailabilityResponse.model_validate(slot) for slot in slots], total, options
    )


@router.get("/my-availability", response_model=PaginatedResponse[AvailabilityResponse])
async def my_availability(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    current_user: User = Depends(require_guide),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> PaginatedResponse[AvailabilityResponse]:
    options = page_options(page, limit, sort_by, sort_order, default_sort_order="asc")
    slots, total = await asyncio.to_thread(availability_service.my_slots, current_user, options)
    return PaginatedResponse[AvailabilityResponse].build(
        [AvailabilityResponse.model_validate(slot) for slot in slots], total, options
    )


@router.get("/{slot_id}", response_model=AvailabilityResponse)
async def get_availability(
    slot_id: str,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        slot = await asyncio.to_thread(availability_service.get_slot, slot_id)
        return AvailabilityResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{slot_id}", response_model=AvailabilityResponse)
async def update_availability(
    slot_id: str,
    payload: AvailabilityUpdate = Body(...),
    current_user: User = Depends(require_guide),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        slot = await asyncio.to_thread(
            availability_service.update_slot, current_user, slot_id, payload
        )
        return AvailabilityResponse.model_validate(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{slot_id}", response_model=DeleteResponse)
async def delete_availability(
    slot_id: str,
    current_user: User = Depends(require_guide),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(availability_service.delete_slot, current_user, slot_id)
        return DeleteResponse(message="Availability slot deleted successfully!")
    except DomainException as e:
        handle_domain_exception(e)
