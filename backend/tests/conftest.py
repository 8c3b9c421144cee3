# backend/tests/conftest.py
"""
Pytest configuration for the Tourify backend.

Tests run against a fresh in-memory SQLite database per test. The
environment is configured BEFORE any tourify import so that settings pick
up the test values.
"""

import os

# CRITICAL: Set test configuration BEFORE any tourify imports!
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_SEED_ADMIN"] = "false"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["CLIENT_URL"] = "http://client.test"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("STRIPE_WEBHOOK_SECRET", None)
os.environ.pop("STORE_ID", None)
os.environ.pop("STORE_PASS", None)

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tourify.api.dependencies.database import get_db
from tourify.auth import create_access_token, get_password_hash
from tourify.core.config import BookingRules
from tourify.core.enums import BookingStatus, PaymentStatus, UserRole, UserStatus
from tourify.database import Base
from tourify.main import app
from tourify.models.availability import AvailabilitySlot
from tourify.models.booking import Booking
from tourify.models.listing import Listing
from tourify.models.payment import Payment
from tourify.models.user import User

TEST_PASSWORD = "TestPassword123!"

test_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)


# ============================================================================
# Database and client
# ============================================================================


@pytest.fixture(scope="function")
def db():
    """Create a new database session with empty tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - lifespan (admin seeding) stays off
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def test_password() -> str:
    """Standard test password for all test users."""
    return TEST_PASSWORD


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(
        role: UserRole = UserRole.TOURIST,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        status: UserStatus = UserStatus.ACTIVE,
        password: str = TEST_PASSWORD,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            name=name or f"Test {role.value.title()} {counter['n']}",
            hashed_password=get_password_hash(password),
            role=role.value,
            status=status.value,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def tourist(make_user) -> User:
    return make_user(UserRole.TOURIST, email="test.tourist@example.com", name="Test Tourist")


@pytest.fixture
def other_tourist(make_user) -> User:
    return make_user(UserRole.TOURIST, email="other.tourist@example.com", name="Other Tourist")


@pytest.fixture
def guide(make_user) -> User:
    return make_user(UserRole.GUIDE, email="test.guide@example.com", name="Test Guide")


@pytest.fixture
def other_guide(make_user) -> User:
    return make_user(UserRole.GUIDE, email="other.guide@example.com", name="Other Guide")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, email="test.admin@example.com", name="Test Admin")


@pytest.fixture
def super_admin(make_user) -> User:
    return make_user(UserRole.SUPER_ADMIN, email="super.admin@example.com", name="Super Admin")


@pytest.fixture
def make_listing(db: Session) -> Callable[..., Listing]:
    def _make_listing(guide: User, **overrides: Any) -> Listing:
        fields: Dict[str, Any] = {
            "guide_id": guide.id,
            "title": "Old Town Walking Tour",
            "description": "A walk through the historic old town.",
            "price": Decimal("25.00"),
            "duration_hours": 3.0,
            "max_group_size": 4,
            "meeting_point": "Main Square fountain",
            "location": "Lisbon",
            "category": "History",
            "languages": ["English"],
            "images": [],
        }
        fields.update(overrides)
        listing = Listing(**fields)
        db.add(listing)
        db.commit()
        return listing

    return _make_listing


@pytest.fixture
def listing(guide: User, make_listing) -> Listing:
    return make_listing(guide)


@pytest.fixture
def tour_date() -> date:
    return date.today() + timedelta(days=7)


@pytest.fixture
def make_slot(db: Session) -> Callable[..., AvailabilitySlot]:
    def _make_slot(
        guide: User,
        on_date: date,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        is_available: bool = True,
    ) -> AvailabilitySlot:
        slot = AvailabilitySlot(
            guide_id=guide.id,
            date=on_date,
            start_time=start_time,
            end_time=end_time,
            is_available=is_available,
        )
        db.add(slot)
        db.commit()
        return slot

    return _make_slot


@pytest.fixture
def guide_available(guide: User, tour_date: date, make_slot) -> AvailabilitySlot:
    """Whole-day availability for the default guide on the default tour date."""
    return make_slot(guide, tour_date)


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing admission checks."""

    def _make_booking(
        tourist: User,
        listing: Listing,
        on_date: date,
        *,
        group_size: int = 1,
        status: BookingStatus = BookingStatus.PENDING,
        start_at: Optional[datetime] = None,
        end_at: Optional[datetime] = None,
    ) -> Booking:
        start = start_at or datetime.combine(on_date, time.min)
        end = end_at or start + timedelta(days=1)
        booking = Booking(
            tourist_id=tourist.id,
            listing_id=listing.id,
            booking_date=on_date,
            start_at=start,
            end_at=end,
            group_size=group_size,
            total_price=Decimal(listing.price) * group_size,
            status=status.value,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make_booking


@pytest.fixture
def make_payment(db: Session) -> Callable[..., Payment]:
    counter = {"n": 0}

    def _make_payment(
        booking: Booking,
        *,
        status: PaymentStatus = PaymentStatus.PENDING,
        gateway: Optional[str] = None,
        gateway_data: Optional[Dict[str, Any]] = None,
    ) -> Payment:
        counter["n"] += 1
        payment = Payment(
            booking_id=booking.id,
            amount=booking.total_price,
            transaction_id=f"TXN-TEST-{counter['n']:04d}",
            status=status.value,
            gateway=gateway,
            gateway_data=gateway_data or {},
        )
        db.add(payment)
        db.commit()
        return payment

    return _make_payment


# ============================================================================
# Rules and auth
# ============================================================================


@pytest.fixture
def day_rules() -> BookingRules:
    return BookingRules(admission_scope="day")


@pytest.fixture
def hour_rules() -> BookingRules:
    return BookingRules(admission_scope="hour", day_start_hour=7, day_end_hour=17, slot_minutes=60)


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": user.id, "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_tourist(tourist: User) -> Dict[str, str]:
    return auth_headers_for(tourist)


@pytest.fixture
def auth_headers_guide(guide: User) -> Dict[str, str]:
    return auth_headers_for(guide)


@pytest.fixture
def auth_headers_admin(admin: User) -> Dict[str, str]:
    return auth_headers_for(admin)


@pytest.fixture
def auth_headers_super_admin(super_admin: User) -> Dict[str, str]:
    return auth_headers_for(super_admin)


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build auth headers for any user."""
    return auth_headers_for
