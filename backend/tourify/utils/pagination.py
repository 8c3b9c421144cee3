# backend/tourify/utils/pagination.py
"""
Page/limit/sort options shared by every list endpoint.
"""

from dataclasses import dataclass
import math
from typing import Iterable, Literal, Optional

SortOrder = Literal["asc", "desc"]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageOptions:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: Optional[str] = None
    sort_order: SortOrder = "desc"

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def resolve_sort(self, allowed: Iterable[str], default: str) -> str:
        """Return sort_by when it names an allowed column, otherwise the default."""
        allowed_fields = set(allowed)
        if self.sort_by and self.sort_by in allowed_fields:
            return self.sort_by
        return default


def page_options(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    *,
    default_sort_order: SortOrder = "desc",
) -> PageOptions:
    """Normalise raw query values, clamping page and limit to sane bounds."""
    resolved_page = max(int(page or DEFAULT_PAGE), 1)
    resolved_limit = min(max(int(limit or DEFAULT_LIMIT), 1), MAX_LIMIT)
    order = (sort_order or default_sort_order).lower()
    if order not in ("asc", "desc"):
        order = default_sort_order
    return PageOptions(
        page=resolved_page,
        limit=resolved_limit,
        sort_by=sort_by,
        sort_order=order,  # type: ignore[arg-type]
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
