# backend/tourify/services/listing_service.py
"""
Listing Service for the Tourify platform.

Guides publish tours; the public browses them. Category and language
values are checked against CatalogRules. Listings handed back to callers
carry average_rating and total_reviews computed from their reviews.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import CatalogRules, settings
from ..core.enums import ListingStatus
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..models.listing import Listing
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.listing_repository import ListingRepository
from ..schemas.listing import ListingCreate, ListingUpdate
from ..utils.pagination import PageOptions
from .base import BaseService

logger = logging.getLogger(__name__)


class ListingService(BaseService):
    """
    Service layer for the tour catalog.
    """

    def __init__(
        self,
        db: Session,
        catalog: Optional[CatalogRules] = None,
        repository: Optional[ListingRepository] = None,
    ):
        super().__init__(db)
        self.catalog = catalog or settings.catalog_rules()
        self.repository = repository or RepositoryFactory.create_listing_repository(db)

    def _validate_catalog_values(
        self, category: Optional[str], languages: Optional[List[str]]
    ) -> None:
        if category is not None and not self.catalog.is_valid_category(category):
            raise ValidationException("Invalid category!", code="INVALID_CATEGORY")
        if languages:
            invalid = self.catalog.invalid_languages(languages)
            if invalid:
                raise ValidationException(
                    f"Invalid language(s): {', '.join(invalid)}",
                    code="INVALID_LANGUAGE",
                    details={"invalid_languages": invalid},
                )

    def attach_ratings(self, listings: Iterable[Listing]) -> None:
        """Set average_rating (1 decimal) and total_reviews on each listing."""
        items = list(listings)
        summaries = self.repository.rating_summaries(listing.id for listing in items)
        for listing in items:
            average, count = summaries.get(listing.id, (0.0, 0))
            listing.average_rating = round(average, 1)
            listing.total_reviews = count

    @BaseService.measure_operation("create_listing")
    def create_listing(self, guide: User, data: ListingCreate) -> Listing:
        self._validate_catalog_values(data.category, data.languages)
        with self.transaction():
            listing = self.repository.create(
                guide_id=guide.id,
                status=ListingStatus.ACTIVE.value,
                **data.model_dump(),
            )
            listing_id = listing.id
        self.log_operation("create_listing", listing_id=listing_id, guide_id=guide.id)
        return self.get_listing(listing_id)

    @BaseService.measure_operation("search_listings")
    def list_listings(
        self, filters: Dict[str, Any], options: PageOptions, *, include_blocked: bool = False
    ) -> Tuple[List[Listing], int]:
        """Public catalog search. Blocked listings are hidden unless include_blocked."""
        criteria = dict(filters)
        if not include_blocked and not criteria.get("status"):
            criteria["status"] = ListingStatus.ACTIVE.value
        listings, total = self.repository.search(criteria, options)
        self.attach_ratings(listings)
        return listings, total

    def my_listings(self, guide: User, options: PageOptions) -> Tuple[List[Listing], int]:
        listings, total = self.repository.search({"guide_id": guide.id}, options)
        self.attach_ratings(listings)
        return listings, total

    def get_listing(self, listing_id: str) -> Listing:
        listing = self.repository.get_by_id(listing_id)
        if not listing:
            raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
        self.attach_ratings([listing])
        return listing

    @BaseService.measure_operation("update_listing")
    def update_listing(self, guide: User, listing_id: str, data: ListingUpdate) -> Listing:
        changes = data.model_dump(exclude_unset=True)
        self._validate_catalog_values(changes.get("category"), changes.get("languages"))

        with self.transaction():
            listing = self.repository.get_by_id(listing_id, load_relationships=False)
            if not listing:
                raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
            if listing.guide_id != guide.id:
                raise ForbiddenException("You can only update your own listing!")

            latitude = changes.get("latitude", listing.latitude)
            longitude = changes.get("longitude", listing.longitude)
            if (latitude is None) != (longitude is None):
                raise ValidationException("latitude and longitude must be provided together")

            self.repository.apply_changes(listing, changes)
            self.db.flush()
        return self.get_listing(listing_id)

    @BaseService.measure_operation("change_listing_status")
    def change_status(self, listing_id: str, status: ListingStatus) -> Listing:
        with self.transaction():
            listing = self.repository.update(listing_id, status=ListingStatus(status).value)
            if not listing:
                raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
        return self.get_listing(listing_id)

    @BaseService.measure_operation("delete_listing")
    def delete_listing(self, actor: User, listing_id: str) -> None:
        """Owner guide or admin. Listings that have bookings are kept."""
        with self.transaction():
            listing = self.repository.get_by_id(listing_id, load_relationships=False)
            if not listing:
                raise NotFoundException("Listing not found!", code="LISTING_NOT_FOUND")
            if not actor.is_admin and listing.guide_id != actor.id:
                raise ForbiddenException("You are not authorized to delete this listing!")
            if self.repository.has_bookings(listing_id):
                raise ConflictException(
                    "Listing has bookings and cannot be deleted; block it instead",
                    code="LISTING_HAS_BOOKINGS",
                )
            self.repository.delete(listing_id)
        self.log_operation("delete_listing", listing_id=listing_id, actor=actor.id)

    def categories(self) -> List[str]:
        return list(self.catalog.categories)

    def languages(self) -> List[str]:
        return list(self.catalog.languages)

    def map_points(self) -> List[Listing]:
        return self.repository.with_coordinates()
