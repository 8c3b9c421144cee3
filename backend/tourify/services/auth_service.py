# backend/tourify/services/auth_service.py
"""
Authentication Service for the Tourify platform.

Handles self-service registration, credential checks, token issuance and
password changes. Only ACTIVE accounts may authenticate.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jwt import PyJWTError
from sqlalchemy.orm import Session

from ..auth import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from ..core.enums import UserRole, UserStatus
from ..core.exceptions import UnauthorizedException, ValidationException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.auth import RegisterRequest
from .base import BaseService
from .user_service import UserService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[UserRepository] = None,
        user_service: Optional[UserService] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_user_repository(db)
        self.user_service = user_service or UserService(db, repository=self.repository)

    @BaseService.measure_operation("register_user")
    def register(self, data: RegisterRequest) -> User:
        """
        Register a tourist or guide account.

        Raises:
            ConflictException: email already registered
        """
        self.logger.info(f"Registering new {data.role} account: {data.email}")
        with self.transaction():
            user = self.user_service.create_account(data.model_dump(), UserRole(data.role))
            user_id = user.id
        return self.user_service.get_user(user_id)

    @staticmethod
    def ensure_active(user: User) -> None:
        if user.status != UserStatus.ACTIVE.value:
            raise UnauthorizedException(
                f"Your account is {user.status.lower()}!", code="ACCOUNT_NOT_ACTIVE"
            )

    @BaseService.measure_operation("authenticate_user")
    def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            UnauthorizedException: unknown email, wrong password or inactive account
        """
        self.logger.info(f"Authentication attempt for user: {email}")
        user = self.repository.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            self.logger.warning(f"Authentication failed for user: {email}")
            raise UnauthorizedException("Invalid email or password", code="INVALID_CREDENTIALS")
        self.ensure_active(user)
        return user

    @staticmethod
    def issue_tokens(user: User) -> Dict[str, Any]:
        claims = {"sub": user.id, "email": user.email, "role": user.role}
        return {
            "access_token": create_access_token(claims),
            "refresh_token": create_refresh_token({"sub": user.id}),
            "token_type": "bearer",
            "need_password_change": bool(user.need_password_change),
        }

    def login(self, email: str, password: str) -> Tuple[User, Dict[str, Any]]:
        user = self.authenticate(email, password)
        return user, self.issue_tokens(user)

    @BaseService.measure_operation("refresh_token")
    def refresh(self, refresh_token: Optional[str]) -> Dict[str, Any]:
        if not refresh_token:
            raise UnauthorizedException("You are not authorized!", code="REFRESH_TOKEN_MISSING")
        try:
            payload = decode_refresh_token(refresh_token)
        except PyJWTError as e:
            self.logger.warning(f"Refresh token rejected: {str(e)}")
            raise UnauthorizedException("You are not authorized!", code="REFRESH_TOKEN_INVALID")

        user = self.repository.get_by_id(str(payload.get("sub")), load_relationships=False)
        if not user:
            raise UnauthorizedException("You are not authorized!", code="USER_NOT_FOUND")
        self.ensure_active(user)
        return self.issue_tokens(user)

    @BaseService.measure_operation("change_password")
    def change_password(self, user: User, old_password: str, new_password: str) -> None:
        with self.transaction():
            target = self.repository.get_by_id(user.id, load_relationships=False)
            if not target or not verify_password(old_password, target.hashed_password):
                raise ValidationException("Old password is incorrect", code="WRONG_PASSWORD")
            target.hashed_password = get_password_hash(new_password)
            target.need_password_change = False
            self.db.flush()
        self.log_operation("change_password", user_id=user.id)
