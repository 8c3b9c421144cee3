# backend/tourify/routes/v1/reviews.py
"""
Review routes - API v1

Tourists review completed bookings; listing reviews are public.
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_current_active_user,
    get_review_service,
    require_admin,
    require_tourist,
)
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import DeleteResponse, PaginatedResponse
from ...schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from ...services.review_service import ReviewService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reviews-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate = Body(...),
    current_user: User = Depends(require_tourist),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await asyncio.to_thread(review_service.create_review, current_user, payload)
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[ReviewResponse])
async def list_reviews(
    listing_id: Optional[str] = Query(None),
    tourist_id: Optional[str] = Query(None),
    guide_id: Optional[str] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    _: User = Depends(require_admin),
    review_service: ReviewService = Depends(get_review_service),
) -> PaginatedResponse[ReviewResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    filters = {
        "listing_id": listing_id,
        "tourist_id": tourist_id,
        "guide_id": guide_id,
        "rating": rating,
    }
    reviews, total = await asyncio.to_thread(review_service.list_reviews, filters, options)
    return PaginatedResponse[ReviewResponse].build(
        [ReviewResponse.model_validate(review) for review in reviews], total, options
    )


@router.get("/my", response_model=PaginatedResponse[ReviewResponse])
async def my_reviews(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    current_user: User = Depends(require_tourist),
    review_service: ReviewService = Depends(get_review_service),
) -> PaginatedResponse[ReviewResponse]:
    options = page_options(page, limit, None, None)
    reviews, total = await asyncio.to_thread(review_service.my_reviews, current_user, options)
    return PaginatedResponse[ReviewResponse].build(
        [ReviewResponse.model_validate(review) for review in reviews], total, options
    )


@router.get("/listing/{listing_id}", response_model=PaginatedResponse[ReviewResponse])
async def listing_reviews(
    listing_id: str,
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    review_service: ReviewService = Depends(get_review_service),
) -> PaginatedResponse[ReviewResponse]:
    options = page_options(page, limit, None, None)
    try:
        reviews, total = await asyncio.to_thread(
            review_service.listing_reviews, listing_id, options
        )
    except DomainException as e:
        handle_domain_exception(e)
    return PaginatedResponse[ReviewResponse].build(
        [ReviewResponse.model_validate(review) for review in reviews], total, options
    )


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: str,
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await asyncio.to_thread(review_service.get_review, review_id)
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    payload: ReviewUpdate = Body(...),
    current_user: User = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    try:
        review = await asyncio.to_thread(
            review_service.update_review, current_user, review_id, payload
        )
        return ReviewResponse.model_validate(review)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{review_id}", response_model=DeleteResponse)
async def delete_review(
    review_id: str,
    current_user: User = Depends(get_current_active_user),
    review_service: ReviewService = Depends(get_review_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(review_service.delete_review, current_user, review_id)
        return DeleteResponse(message="Review deleted successfully!")
    except DomainException as e:
        handle_domain_exception(e)
