# backend/tourify/api/dependencies/auth.py
"""
Authentication dependencies.

The JWT only carries the user id; the account is reloaded on every request
so that blocked or deleted users lose access immediately.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jwt import PyJWTError
from sqlalchemy.orm import Session

from ...auth import decode_access_token, get_current_user as auth_get_current_user
from ...auth import oauth2_scheme_optional
from ...core.config import settings
from ...core.enums import UserStatus
from ...models.user import User
from ...repositories.user_repository import UserRepository
from .database import get_db

logger = logging.getLogger(__name__)


def _unauthorized(detail: str = "You are not authorized!") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    current_user_id: str = Depends(auth_get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the authenticated user from the database.

    Raises:
        HTTPException: 401 if the account no longer exists
    """
    user = await asyncio.to_thread(UserRepository(db).get_by_id, current_user_id)
    if not user:
        logger.warning(f"Token subject {current_user_id} has no matching user")
        raise _unauthorized()
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Require an ACTIVE account.

    Raises:
        HTTPException: 401 for inactive, blocked or deleted accounts
    """
    if current_user.status != UserStatus.ACTIVE.value:
        logger.info(f"Rejected {current_user.status} account {current_user.id}")
        raise _unauthorized(f"Your account is {current_user.status.lower()}!")
    return current_user


async def get_current_active_user_optional(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_active_user, but anonymous callers get None."""
    token = token or request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    try:
        user_id = decode_access_token(token).get("sub")
    except PyJWTError as e:
        logger.debug(f"Ignoring invalid optional token: {str(e)}")
        return None
    if not user_id:
        return None
    user = await asyncio.to_thread(UserRepository(db).get_by_id, str(user_id))
    if not user or user.status != UserStatus.ACTIVE.value:
        return None
    return user
