# backend/tourify/repositories/user_repository.py
"""
User Repository for the Tourify platform.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.user import User
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

USER_SORTABLE_FIELDS = ("created_at", "updated_at", "name", "email", "role", "status")


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def _apply_eager_loading(self, query):
        return query.options(selectinload(User.badges))

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.email == email.strip().lower()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to get user by email: {str(e)}")

    def email_exists(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        query = self.db.query(User.id).filter(User.email == email.strip().lower())
        if exclude_user_id:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def search(self, filters: Dict[str, Any], options: PageOptions) -> Tuple[List[User], int]:
        """
        Filter users for the admin directory.

        Supported filters: search_term (name, email, contact number), role, status, email.
        """
        query = self._build_query()
        search_term = filters.get("search_term")
        if search_term:
            pattern = f"%{search_term}%"
            query = query.filter(
                or_(
                    User.name.ilike(pattern),
                    User.email.ilike(pattern),
                    User.contact_no.ilike(pattern),
                )
            )
        for field in ("role", "status", "email"):
            value = filters.get(field)
            if value:
                query = query.filter(getattr(User, field) == value)
        return self._paginate(
            query, options, sortable=USER_SORTABLE_FIELDS, default_sort="created_at"
        )
