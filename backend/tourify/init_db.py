# backend/tourify/init_db.py
"""
Create database tables and seed the super admin account.

Run directly with ``python -m tourify.init_db``. The seed is idempotent: an
existing account with the configured email is left untouched.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .auth import get_password_hash
from .core.config import settings
from .core.enums import UserRole, UserStatus
from .database import Base, SessionLocal, engine
from .models.user import User
from .repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


def create_tables() -> None:
    # Import models so every table is registered on the metadata.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def seed_super_admin(db: Session) -> Optional[User]:
    """Create the configured super admin if it does not exist yet."""
    if not settings.admin_email or not settings.admin_password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping super admin seed")
        return None

    repository = RepositoryFactory.create_user_repository(db)
    existing = repository.get_by_email(settings.admin_email)
    if existing:
        logger.info(f"Super admin already exists: {settings.admin_email}")
        return existing

    user = repository.create(
        name="Super Admin",
        email=settings.admin_email,
        hashed_password=get_password_hash(settings.admin_password.get_secret_value()),
        role=UserRole.SUPER_ADMIN.value,
        status=UserStatus.ACTIVE.value,
        is_verified=True,
    )
    db.commit()
    logger.info(f"Super admin created: {settings.admin_email}")
    return user


def init_db() -> None:
    create_tables()
    db = SessionLocal()
    try:
        seed_super_admin(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
