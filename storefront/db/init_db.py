"""
Database initialization helpers.

Models are imported so their tables get registered on Base.metadata before
``create_all`` runs.
"""

from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.repositories import UserRepository
from storefront.db.session import engine
from storefront.models.base import Base
from storefront.models import order, user  # noqa: F401
from storefront.models.user import UserRole
from storefront.services.user_service import UserService

logger = get_logger(__name__)


def init_db() -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=engine)


def seed_initial_data(db: Session) -> None:
    """
    Create the first administrator if no account uses the configured email yet.
    """
    users = UserRepository(db)
    if users.get_by_email(settings.first_admin_email) is not None:
        return

    admin = UserService(users).create_user(
        full_name=settings.first_admin_name,
        email=settings.first_admin_email,
        password=settings.first_admin_password,
        role=UserRole.ADMIN,
    )
    logger.info("admin_seeded", user_id=admin.id, email=admin.email)
