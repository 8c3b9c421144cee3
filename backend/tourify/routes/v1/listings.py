# backend/tourify/routes/v1/listings.py
"""
Listing routes - API v1

Public catalog browsing plus guide-side listing management. Static paths
are declared before /{listing_id} so they are not captured as ids.
"""

import asyncio
from decimal import Decimal
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_current_active_user,
    get_listing_service,
    require_admin,
    require_guide,
)
from ...core.enums import ListingStatus
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import DeleteResponse, PaginatedResponse
from ...schemas.listing import (
    ListingCreate,
    ListingMapPoint,
    ListingResponse,
    ListingStatusUpdate,
    ListingUpdate,
)
from ...services.listing_service import ListingService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["listings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    payload: ListingCreate = Body(...),
    current_user: User = Depends(require_guide),
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    try:
        listing = await asyncio.to_thread(listing_service.create_listing, current_user, payload)
        return ListingResponse.model_validate(listing)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[ListingResponse])
async def list_listings(
    search_term: Optional[str] = Query(None, description="Matches title, description or location"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    category: Optional[str] = Query(None),
    language: Optional[str] = Query(None),
    guide_id: Optional[str] = Query(None),
    listing_status: Optional[ListingStatus] = Query(None, alias="status"),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    listing_service: ListingService = Depends(get_listing_service),
) -> PaginatedResponse[ListingResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    filters = {
        "search_term": search_term,
        "min_price": min_price,
        "max_price": max_price,
        "category": category,
        "language": language,
        "guide_id": guide_id,
        "status": listing_status.value if listing_status else None,
    }
    listings, total = await asyncio.to_thread(listing_service.list_listings, filters, options)
    return PaginatedResponse[ListingResponse].build(
        [ListingResponse.model_validate(listing) for listing in listings], total, options
    )


@router.get("/my-listings", response_model=PaginatedResponse[ListingResponse])
async def my_listings(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    current_user: User = Depends(require_guide),
    listing_service: ListingService = Depends(get_listing_service),
) -> PaginatedResponse[ListingResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    listings, total = await asyncio.to_thread(listing_service.my_listings, current_user, options)
    return PaginatedResponse[ListingResponse].build(
        [ListingResponse.model_validate(listing) for listing in listings], total, options
    )


@router.get("/categories", response_model=List[str])
async def list_categories(
    listing_service: ListingService = Depends(get_listing_service),
) -> List[str]:
    return listing_service.categories()


@router.get("/languages", response_model=List[str])
async def list_languages(
    listing_service: ListingService = Depends(get_listing_service),
) -> List[str]:
    return listing_service.languages()


@router.get("/map-data", response_model=List[ListingMapPoint])
async def map_data(
    listing_service: ListingService = Depends(get_listing_service),
) -> List[ListingMapPoint]:
    listings = await asyncio.to_thread(listing_service.map_points)
    return [ListingMapPoint.model_validate(listing) for listing in listings]


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: str,
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    try:
        listing = await asyncio.to_thread(listing_service.get_listing, listing_id)
        return ListingResponse.model_validate(listing)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: str,
    payload: ListingUpdate = Body(...),
    current_user: User = Depends(require_guide),
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    try:
        listing = await asyncio.to_thread(
            listing_service.update_listing, current_user, listing_id, payload
        )
        return ListingResponse.model_validate(listing)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{listing_id}/status", response_model=ListingResponse)
async def change_listing_status(
    listing_id: str,
    payload: ListingStatusUpdate = Body(...),
    _: User = Depends(require_admin),
    listing_service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    try:
        listing = await asyncio.to_thread(
            listing_service.change_status, listing_id, payload.status
        )
        return ListingResponse.model_validate(listing)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{listing_id}", response_model=DeleteResponse)
async def delete_listing(
    listing_id: str,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(listing_service.delete_listing, current_user, listing_id)
        return DeleteResponse(message="Listing deleted successfully!")
    except DomainException as e:
        handle_domain_exception(e)
