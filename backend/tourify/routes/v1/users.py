# backend/tourify/routes/v1/users.py
"""
User routes - API v1

Endpoints:
    POST /admins             → Create an admin (super admin)
    POST /guides             → Create a guide (admin)
    GET /                    → User directory (admin)
    GET /me                  → Own profile
    PATCH /me                → Update own profile
    GET /public/{user_id}    → Public profile
    GET /{user_id}           → Full profile (admin)
    PATCH /{user_id}         → Update any account (admin)
    PATCH /{user_id}/status  → Change account status (admin)
    PATCH /{user_id}/role    → Change account role (admin)
    DELETE /{user_id}/soft   → Block an account (admin)
    DELETE /{user_id}        → Permanently delete an account (admin)
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_current_active_user,
    get_user_service,
    require_admin,
    require_super_admin,
)
from ...core.enums import UserRole, UserStatus
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base_responses import DeleteResponse, PaginatedResponse
from ...schemas.user import (
    AdminUserUpdate,
    ProfileUpdate,
    PublicUserResponse,
    UserCreate,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)
from ...services.user_service import UserService
from ...utils.pagination import page_options

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# Static routes
# ============================================================================


@router.post("/admins", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    payload: UserCreate = Body(...),
    _: User = Depends(require_super_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.create_admin, payload)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/guides", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_guide(
    payload: UserCreate = Body(...),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.create_guide, payload)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    search_term: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    email: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    sort_by: Optional[str] = Query(None),
    sort_order: Optional[str] = Query(None),
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> PaginatedResponse[UserResponse]:
    options = page_options(page, limit, sort_by, sort_order)
    filters = {
        "search_term": search_term,
        "role": role.value if role else None,
        "status": user_status.value if user_status else None,
        "email": email,
    }
    users, total = await asyncio.to_thread(user_service.list_users, filters, options)
    return PaginatedResponse[UserResponse].build(
        [UserResponse.model_validate(user) for user in users], total, options
    )


@router.get("/me", response_model=UserResponse)
async def get_my_profile(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    payload: ProfileUpdate = Body(...),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.update_my_profile, current_user, payload)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/public/{user_id}", response_model=PublicUserResponse)
async def get_public_profile(
    user_id: str,
    user_service: UserService = Depends(get_user_service),
) -> PublicUserResponse:
    try:
        user = await asyncio.to_thread(user_service.public_profile, user_id)
        return PublicUserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Dynamic routes
# ============================================================================


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.get_user, user_id)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: AdminUserUpdate = Body(...),
    current_user: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.update_user, current_user, user_id, payload)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def change_user_status(
    user_id: str,
    payload: UserStatusUpdate = Body(...),
    current_user: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(
            user_service.change_status, current_user, user_id, payload.status
        )
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: str,
    payload: UserRoleUpdate = Body(...),
    current_user: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(
            user_service.change_role, current_user, user_id, payload.role
        )
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{user_id}/soft", response_model=UserResponse)
async def soft_delete_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(user_service.soft_delete, current_user, user_id)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> DeleteResponse:
    try:
        await asyncio.to_thread(user_service.hard_delete, current_user, user_id)
        return DeleteResponse(message="User deleted successfully!")
    except DomainException as e:
        handle_domain_exception(e)
