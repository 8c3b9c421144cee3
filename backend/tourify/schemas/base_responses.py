"""
Base response schemas for standardized API responses.

These schemas ensure consistent response formats across all API endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from ..utils.pagination import PageOptions, total_pages

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Standard paginated response for all list endpoints.
    """

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of items")
    page: int = Field(default=1, description="Current page number", ge=1)
    per_page: int = Field(default=10, description="Items per page", ge=1, le=100)
    total_pages: int = Field(default=0, description="Number of pages")
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    @classmethod
    def build(cls, items: Sequence[Any], total: int, options: PageOptions) -> "PaginatedResponse[T]":
        pages = total_pages(total, options.limit)
        return cls(
            items=list(items),
            total=total,
            page=options.page,
            per_page=options.limit,
            total_pages=pages,
            has_next=options.page < pages,
            has_prev=options.page > 1,
        )


class SuccessResponse(BaseModel):
    """Standard success response for operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(description="Human-readable success message")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Optional additional data")


class DeleteResponse(BaseModel):
    """Standard response for delete operations."""

    success: bool = Field(default=True, description="Deletion success status")
    message: str = Field(description="Human-readable deletion message")
    deleted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Deletion timestamp"
    )
