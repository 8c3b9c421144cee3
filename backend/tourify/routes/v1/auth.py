# backend/tourify/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register        → Self-service registration (tourist or guide)
    POST /login           → Email/password login; sets session cookies
    POST /refresh-token   → New token pair from a refresh token
    POST /change-password → Change password for the authenticated user
    GET /me               → Current user profile
"""

import asyncio
import logging
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status

from ...api.dependencies import get_auth_service, get_current_active_user
from ...core.config import settings
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
)
from ...schemas.base_responses import SuccessResponse
from ...schemas.user import UserResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _set_session_cookies(response: Response, tokens: Dict[str, Any]) -> None:
    cookie_options = {
        "httponly": True,
        "secure": settings.session_cookie_secure,
        "samesite": "none" if settings.session_cookie_secure else "lax",
    }
    response.set_cookie(
        settings.session_cookie_name,
        tokens["access_token"],
        max_age=settings.access_token_expire_minutes * 60,
        **cookie_options,
    )
    response.set_cookie(
        settings.refresh_cookie_name,
        tokens["refresh_token"],
        max_age=settings.refresh_token_expire_minutes * 60,
        **cookie_options,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Register a new tourist or guide account."""
    try:
        user = await asyncio.to_thread(auth_service.register, payload)
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/login", response_model=AuthResponse)
async def login(
    response: Response,
    payload: LoginRequest = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Log in with email and password."""
    try:
        user, tokens = await asyncio.to_thread(auth_service.login, payload.email, payload.password)
    except DomainException as e:
        handle_domain_exception(e)
    _set_session_cookies(response, tokens)
    return AuthResponse(**tokens, user=UserResponse.model_validate(user))


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = Body(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange a refresh token (body or cookie) for a new token pair."""
    token = (payload.refresh_token if payload else None) or request.cookies.get(
        settings.refresh_cookie_name
    )
    try:
        tokens = await asyncio.to_thread(auth_service.refresh, token)
    except DomainException as e:
        handle_domain_exception(e)
    _set_session_cookies(response, tokens)
    return TokenResponse(**tokens)


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest = Body(...),
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(
            auth_service.change_password,
            current_user,
            payload.old_password,
            payload.new_password,
        )
        return SuccessResponse(message="Password changed successfully!")
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
