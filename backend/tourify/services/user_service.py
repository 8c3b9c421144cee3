# backend/tourify/services/user_service.py
"""
User Service for the Tourify platform.

Profile management and the administrator's user directory. Nobody but a
super admin may modify a super admin account, and only a super admin may
hand out administrator roles.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..auth import get_password_hash
from ..core.enums import UserRole, UserStatus
from ..core.exceptions import ConflictException, ForbiddenException, NotFoundException
from ..models.user import User
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.user import AdminUserUpdate, ProfileUpdate, UserCreate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[UserRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_user_repository(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    def create_account(self, data: Dict[str, Any], role: UserRole) -> User:
        """
        Create an account with a hashed password. Must run inside a transaction.

        Raises:
            ConflictException: email already registered
        """
        if self.repository.email_exists(data["email"]):
            raise ConflictException("User with this email already exists!", code="EMAIL_TAKEN")
        fields = {key: value for key, value in data.items() if value is not None}
        password = fields.pop("password")
        fields.pop("role", None)
        return self.repository.create(
            **fields,
            hashed_password=get_password_hash(password),
            role=UserRole(role).value,
            status=UserStatus.ACTIVE.value,
        )

    @BaseService.measure_operation("create_admin")
    def create_admin(self, data: UserCreate) -> User:
        with self.transaction():
            user = self.create_account(data.model_dump(), UserRole.ADMIN)
        self.log_operation("create_admin", user_id=user.id)
        return self.get_user(user.id)

    @BaseService.measure_operation("create_guide")
    def create_guide(self, data: UserCreate) -> User:
        with self.transaction():
            user = self.create_account(data.model_dump(), UserRole.GUIDE)
        self.log_operation("create_guide", user_id=user.id)
        return self.get_user(user.id)

    def get_user(self, user_id: str) -> User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found!", code="USER_NOT_FOUND")
        return user

    def public_profile(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user.status == UserStatus.DELETED.value:
            raise NotFoundException("User not found!", code="USER_NOT_FOUND")
        return user

    def list_users(self, filters: Dict[str, Any], options: PageOptions) -> Tuple[List[User], int]:
        return self.repository.search(filters, options)

    @BaseService.measure_operation("update_my_profile")
    def update_my_profile(self, user: User, data: ProfileUpdate) -> User:
        with self.transaction():
            target = self.get_user(user.id)
            self.repository.apply_changes(target, data.model_dump(exclude_unset=True))
            self.db.flush()
        return self.get_user(user.id)

    def _ensure_can_manage(self, actor: User, target: User) -> None:
        if target.is_super_admin and not actor.is_super_admin:
            raise ForbiddenException(
                "Admins cannot modify a super admin account", code="SUPER_ADMIN_PROTECTED"
            )

    @BaseService.measure_operation("update_user")
    def update_user(self, actor: User, user_id: str, data: AdminUserUpdate) -> User:
        changes = data.model_dump(exclude_unset=True)
        with self.transaction():
            target = self.get_user(user_id)
            self._ensure_can_manage(actor, target)
            if changes.get("email") and self.repository.email_exists(
                changes["email"], exclude_user_id=user_id
            ):
                raise ConflictException("User with this email already exists!", code="EMAIL_TAKEN")
            password = changes.pop("password", None)
            if password:
                target.hashed_password = get_password_hash(password)
            self.repository.apply_changes(target, changes)
            self.db.flush()
        return self.get_user(user_id)

    @BaseService.measure_operation("change_user_status")
    def change_status(self, actor: User, user_id: str, status: UserStatus) -> User:
        with self.transaction():
            target = self.get_user(user_id)
            self._ensure_can_manage(actor, target)
            target.status = UserStatus(status).value
            self.db.flush()
        self.log_operation("change_user_status", user_id=user_id, status=UserStatus(status).value)
        return self.get_user(user_id)

    @BaseService.measure_operation("change_user_role")
    def change_role(self, actor: User, user_id: str, role: UserRole) -> User:
        role = UserRole(role)
        with self.transaction():
            target = self.get_user(user_id)
            self._ensure_can_manage(actor, target)
            if role.is_admin and not actor.is_super_admin:
                raise ForbiddenException(
                    "Only a super admin can grant administrator roles", code="ROLE_NOT_GRANTABLE"
                )
            target.role = role.value
            self.db.flush()
        self.log_operation("change_user_role", user_id=user_id, role=role.value)
        return self.get_user(user_id)

    def soft_delete(self, actor: User, user_id: str) -> User:
        """Block the account; its bookings, listings and reviews stay."""
        return self.change_status(actor, user_id, UserStatus.BLOCKED)

    @BaseService.measure_operation("delete_user")
    def hard_delete(self, actor: User, user_id: str) -> None:
        with self.transaction():
            target = self.get_user(user_id)
            self._ensure_can_manage(actor, target)
            if target.id == actor.id:
                raise ForbiddenException("You cannot delete your own account")
            if self.booking_repository.count_for_tourist(
                user_id
            ) or self.booking_repository.count_for_guide(user_id):
                raise ConflictException(
                    "User has bookings and cannot be deleted; block the account instead",
                    code="USER_HAS_BOOKINGS",
                )
            self.db.delete(target)
            self.db.flush()
        self.log_operation("delete_user", user_id=user_id, actor=actor.id)
