# backend/tourify/repositories/badge_repository.py
"""
Badge Repository for the Tourify platform.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ..models.badge import Badge
from ..utils.pagination import PageOptions
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

BADGE_SORTABLE_FIELDS = ("created_at", "updated_at", "name")


class BadgeRepository(BaseRepository[Badge]):
    def __init__(self, db: Session):
        super().__init__(db, Badge)

    def _apply_eager_loading(self, query):
        return query.options(selectinload(Badge.users))

    def get_by_name(self, name: str, exclude_badge_id: Optional[str] = None) -> Optional[Badge]:
        query = self.db.query(Badge).filter(Badge.name == name)
        if exclude_badge_id:
            query = query.filter(Badge.id != exclude_badge_id)
        return query.first()

    def search(
        self, search_term: Optional[str], options: PageOptions
    ) -> Tuple[List[Badge], int]:
        query = self._build_query()
        if search_term:
            pattern = f"%{search_term}%"
            query = query.filter(or_(Badge.name.ilike(pattern), Badge.description.ilike(pattern)))
        return self._paginate(
            query, options, sortable=BADGE_SORTABLE_FIELDS, default_sort="created_at"
        )
