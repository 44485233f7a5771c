# File: storefront/services/auth_service.py

"""
Authentication service.

Turns an email/password pair into a signed session token, and a session
token back into a verified identity and user record.
"""

from dataclasses import dataclass
from typing import Optional

from storefront.core.exceptions import InvalidCredentials, MissingField, UserNotFound
from storefront.core.logging import get_logger
from storefront.core.security import (
    Identity,
    burn_password_check,
    create_access_token,
    decode_access_token,
    verify_password,
)
from storefront.db.repositories import UserRepository
from storefront.models.user import User, UserRole
from storefront.services.user_service import UserService

logger = get_logger(__name__)


@dataclass
class AuthResult:
    token: str
    user: User


class Authenticator:
    def __init__(self, users: UserRepository):
        self.users = users

    def issue_token(self, user: User) -> str:
        return create_access_token(subject=user.id, email=user.email, role=user.role.value)

    def login(self, *, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Verify credentials and issue a token.

        An unknown email and a wrong password raise the same error, and both
        pay for one bcrypt comparison.
        """
        if not email or not password:
            raise MissingField(
                "Email and password are required",
                field="email" if not email else "password",
            )

        user = self.users.get_by_email(email)
        if user is None:
            burn_password_check(password)
            logger.warning("login_failed", reason="unknown_email")
            raise InvalidCredentials(field="email")

        if not verify_password(password, user.password_hash):
            logger.warning("login_failed", reason="bad_password", user_id=user.id)
            raise InvalidCredentials(field="email")

        logger.info("login_succeeded", user_id=user.id)
        return AuthResult(token=self.issue_token(user), user=user)

    def signup(
        self,
        *,
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult:
        """Create a customer account and log it in."""
        user = UserService(self.users).create_user(
            full_name=full_name,
            email=email,
            password=password,
            role=UserRole.CUSTOMER,
        )
        return AuthResult(token=self.issue_token(user), user=user)

    @staticmethod
    def verify_token(token: str) -> Identity:
        return decode_access_token(token)

    def current_user(self, identity: Identity) -> User:
        """
        Re-fetch the user behind a token so profile edits made after issuance
        are visible. A deleted user raises UserNotFound.
        """
        user = self.users.get(identity.subject_id)
        if user is None:
            logger.info("token_user_missing", user_id=identity.subject_id)
            raise UserNotFound()
        return user
