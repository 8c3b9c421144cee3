# backend/tourify/api/dependencies/authz.py
"""
Role enforcement for API routes.
"""

from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, status

from ...core.enums import UserRole
from ...models.user import User
from .auth import get_current_active_user

RoleDependency = Callable[..., Awaitable[User]]


def require_roles(*roles: UserRole) -> RoleDependency:
    """Ensure the current user holds one of the provided roles."""

    required = {UserRole(role).value for role in roles}

    async def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in required:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden access!",
            )
        return current_user

    return checker


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_super_admin = require_roles(UserRole.SUPER_ADMIN)
require_guide = require_roles(UserRole.GUIDE)
require_tourist = require_roles(UserRole.TOURIST)
