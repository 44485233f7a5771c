# File: storefront/api/deps.py

from collections.abc import Callable, Generator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import Forbidden, Unauthenticated
from storefront.core.logging import bind_request_context, get_logger
from storefront.core.security import Identity
from storefront.db.repositories import OrderRepository, UserRepository
from storefront.db.session import SessionLocal
from storefront.models.user import User, UserRole
from storefront.services.auth_service import Authenticator
from storefront.services.order_service import OrderEngine
from storefront.services.user_service import UserService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_order_repository(db: Session = Depends(get_db)) -> OrderRepository:
    return OrderRepository(db)


def get_authenticator(users: UserRepository = Depends(get_user_repository)) -> Authenticator:
    return Authenticator(users)


def get_user_service(users: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(users)


def get_order_engine(
    orders: OrderRepository = Depends(get_order_repository),
    users: UserRepository = Depends(get_user_repository),
) -> OrderEngine:
    return OrderEngine(
        orders,
        users,
        strict_transitions=settings.strict_status_transitions,
        enforce_ownership=settings.enforce_order_ownership,
    )


# ---------- Authorization gate ----------

def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """
    Require a valid ``Authorization: Bearer <token>`` header.

    The decoded identity is returned and also attached to ``request.state``.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    identity = Authenticator.verify_token(credentials.credentials)
    request.state.identity = identity
    bind_request_context(user_id=identity.subject_id)
    return identity


def get_current_user(
    identity: Identity = Depends(get_current_identity),
    authenticator: Authenticator = Depends(get_authenticator),
) -> User:
    """Authenticated identity plus a fresh copy of its user record."""
    return authenticator.current_user(identity)


def require_role(role: UserRole) -> Callable[..., Identity]:
    """
    Build a dependency that lets the request through only for ``role``.

    Runs after get_current_identity and checks the role claim of the token.
    """

    def check_role(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role != role.value:
            logger.warning(
                "role_denied",
                user_id=identity.subject_id,
                role=identity.role,
                required=role.value,
            )
            raise Forbidden("Forbidden: Access is restricted to administrators.")
        return identity

    return check_role


require_admin = require_role(UserRole.ADMIN)
