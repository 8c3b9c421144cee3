# backend/tourify/services/badge_service.py
"""
Badge Service for the Tourify platform.

Administrators define badges and award them to users.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..models.badge import Badge
from ..repositories.badge_repository import BadgeRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.badge import BadgeCreate, BadgeUpdate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)


class BadgeService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[BadgeRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_badge_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    def _ensure_name_free(self, name: str, exclude_badge_id: Optional[str] = None) -> None:
        if self.repository.get_by_name(name, exclude_badge_id=exclude_badge_id):
            raise ConflictException("Badge name already exists", code="BADGE_NAME_TAKEN")

    @BaseService.measure_operation("create_badge")
    def create_badge(self, data: BadgeCreate) -> Badge:
        with self.transaction():
            self._ensure_name_free(data.name)
            badge = self.repository.create(**data.model_dump())
        self.log_operation("create_badge", badge_id=badge.id, name=badge.name)
        return badge

    def list_badges(
        self, search_term: Optional[str], options: PageOptions
    ) -> Tuple[List[Badge], int]:
        return self.repository.search(search_term, options)

    def get_badge(self, badge_id: str) -> Badge:
        badge = self.repository.get_by_id(badge_id)
        if not badge:
            raise NotFoundException("Badge not found", code="BADGE_NOT_FOUND")
        return badge

    @BaseService.measure_operation("update_badge")
    def update_badge(self, badge_id: str, data: BadgeUpdate) -> Badge:
        changes = data.model_dump(exclude_unset=True)
        with self.transaction():
            badge = self.get_badge(badge_id)
            if changes.get("name"):
                self._ensure_name_free(changes["name"], exclude_badge_id=badge_id)
            self.repository.apply_changes(badge, changes)
            self.db.flush()
        return badge

    @BaseService.measure_operation("delete_badge")
    def delete_badge(self, badge_id: str) -> None:
        with self.transaction():
            badge = self.get_badge(badge_id)
            self.db.delete(badge)
            self.db.flush()
        self.log_operation("delete_badge", badge_id=badge_id)

    @BaseService.measure_operation("assign_badge")
    def assign_badge(self, badge_id: str, user_id: str) -> Badge:
        """Award a badge. Awarding a badge the user already holds is a no-op."""
        with self.transaction():
            badge = self.get_badge(badge_id)
            user = self.user_repository.get_by_id(user_id, load_relationships=False)
            if not user:
                raise NotFoundException("User not found", code="USER_NOT_FOUND")
            if user not in badge.users:
                badge.users.append(user)
                self.db.flush()
                self.logger.info(f"Badge {badge.name} awarded to user {user_id}")
        return badge

    @BaseService.measure_operation("revoke_badge")
    def revoke_badge(self, badge_id: str, user_id: str) -> Badge:
        with self.transaction():
            badge = self.get_badge(badge_id)
            holder = next((user for user in badge.users if user.id == user_id), None)
            if holder is None:
                raise NotFoundException("User does not have this badge", code="BADGE_NOT_HELD")
            badge.users.remove(holder)
            self.db.flush()
        return badge
