"""Dashboard statistics, one shape per role."""

from typing import Literal, Union

from .base import Money, StandardizedModel


class AdminDashboard(StandardizedModel):
    role: Literal["ADMIN", "SUPER_ADMIN"]
    total_users: int
    total_listings: int
    total_bookings: int
    total_revenue: Money


class GuideDashboard(StandardizedModel):
    role: Literal["GUIDE"] = "GUIDE"
    total_listings: int
    total_bookings: int
    total_reviews: int
    average_rating: float


class TouristDashboard(StandardizedModel):
    role: Literal["TOURIST"] = "TOURIST"
    total_bookings: int
    completed_trips: int
    upcoming_trips: int
    total_spend: Money


DashboardResponse = Union[AdminDashboard, GuideDashboard, TouristDashboard]
