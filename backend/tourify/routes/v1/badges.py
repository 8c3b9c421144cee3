# backend/tourify/routes/v1/badges.py
"""
Badge routes - API v1

Badges are public to browse; only administrators manage and award them.
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_badge_service, require_admin
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.badge import (
    BadgeAssignRequest,
    BadgeCreate,
    BadgeDetailResponse,
    BadgeResponse,
    BadgeUpdate,
)
from ...schemas.base_responses import DeleteResponse, PaginatedResponse
from ...services.badge_service import BadgeService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["badges-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=BadgeResponse, status_code=status.HTTP_201_CREATED)
async def create_badge(
    payload: BadgeCreate = Body(...),
    _: User = Depends(require_admin),
    badge_service: BadgeService = Depends(get_badge_service),
) -> BadgeResponse:
    try:
        badge = await asyncio.to_thread(badge_service.create_badge, payload)
        return BadgeResponse.model_validate(badge)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[BadgeResponse])
async def list_badges(
    search_term: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    badge_service: BadgeService = Depends(get_badge_service),
) -> PaginatedResponse[BadgeResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    badges, total = await asyncio.to_thread(badge_service.list_badges, search_term, options)
    return PaginatedResponse[BadgeResponse].build(
        [BadgeResponse.model_validate(badge) for badge in badges], total, options
    )


@router.get("/{badge_id}", response_model=BadgeDetailResponse)
async def get_badge(
    badge_id: str,
    badge_service: BadgeService = Depends(get_badge_service),
) -> BadgeDetailResponse:
    try:
        badge = await asyncio.to_thread(badge_service.get_badge, badge_id)
        return BadgeDetailResponse.model_validate(badge)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{badge_id}", response_model=BadgeResponse)
async def update_badge(
    badge_id: str,
    payload: BadgeUpdate = Body(...),
    _: User = Depends(require_admin),
    badge_service: BadgeService = Depends(get_badge_service),
) -> BadgeResponse:
    try:
        badge = await asyncio.to_thread(badge_service.update_badge, badge_id, payload)
        return BadgeResponse.model_validate(badge)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{badge_id}", response_model=DeleteResponse)
async def delete_badge(
    badge_id: str,
    _: User = Depends(require_admin),
    badge_service: BadgeService = Depends(get_badge_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(badge_service.delete_badge, badge_id)
        return DeleteResponse(message="Badge deleted successfully")
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{badge_id}/assign", response_model=BadgeDetailResponse)
async def assign_badge(
    badge_id: str,
    payload: BadgeAssignRequest = Body(...),
    _: User = Depends(require_admin),
    badge_service: BadgeService = Depends(get_badge_service),
) -> BadgeDetailResponse:
    try:
        badge = await asyncio.to_thread(badge_service.assign_badge, badge_id, payload.user_id)
        return BadgeDetailResponse.model_validate(badge)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{badge_id}/users/{user_id}", response_model=BadgeDetailResponse)
async def revoke_badge(
    badge_id: str,
    user_id: str,
    _: User = Depends(require_admin),
    badge_service: BadgeService = Depends(get_badge_service),
) -> BadgeDetailResponse:
    try:
        badge = await asyncio.to_thread(badge_service.revoke_badge, badge_id, user_id)
        return BadgeDetailResponse.model_validate(badge)
    except DomainException as e:
        handle_domain_exception(e)
