# File: storefront/services/user_service.py

"""
User account management.

Account creation is shared by public signup (role forced to customer) and the
admin back office (role selectable), so the validation rules live here once.
"""

import re
import uuid
from datetime import date
from typing import List, Mapping, Optional, Union

from sqlalchemy.exc import IntegrityError

from storefront.core.exceptions import (
    EmailTaken,
    InvalidEmail,
    MissingField,
    UserNotFound,
    ValidationError,
    WeakPassword,
)
from storefront.core.logging import get_logger
from storefront.core.security import hash_password
from storefront.db.repositories import UserRepository
from storefront.models.user import User, UserRole

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
ADDRESS_FIELDS = ("street", "city", "state", "postal_code")


def new_user_id() -> str:
    return f"user_{uuid.uuid4().hex[:16]}"


def validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email.strip()):
        raise InvalidEmail(field="email")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword(field="password")


def _coerce_role(role: Union[UserRole, str]) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError(f"Unknown role '{role}'", field="role") from None


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def list_users(self) -> List[User]:
        return self.users.list()

    def create_user(
        self,
        *,
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Union[UserRole, str] = UserRole.CUSTOMER,
        shipping_address: Optional[Mapping[str, str]] = None,
    ) -> User:
        """
        Validate and store a new account.

        Checks run in order: required fields, email shape, password length,
        email uniqueness. Nothing is hashed or stored unless all pass.

        Raises:
            MissingField, InvalidEmail, WeakPassword: 400
            EmailTaken: 409
            PasswordHashingError: 500, nothing stored
        """
        if not full_name or not full_name.strip():
            raise MissingField("Full name, email, and password are required", field="fullName")
        if not email or not email.strip():
            raise MissingField("Full name, email, and password are required", field="email")
        if not password:
            raise MissingField("Full name, email, and password are required", field="password")

        validate_email(email)
        validate_password(password)
        role = _coerce_role(role)

        if self.users.get_by_email(email) is not None:
            raise EmailTaken(field="email")

        user = User(
            id=new_user_id(),
            full_name=full_name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            member_since=date.today(),
        )
        self._apply_address(user, shipping_address)

        try:
            user = self.users.add(user)
        except IntegrityError:
            # Lost a race against a concurrent signup with the same email
            self.users.db.rollback()
            raise EmailTaken(field="email") from None

        logger.info("user_created", user_id=user.id, role=user.role.value)
        return user

    def update_user(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[Union[UserRole, str]] = None,
        shipping_address: Optional[Mapping[str, str]] = None,
    ) -> User:
        """Admin edit. Only the arguments that are not None are changed."""
        user = self.get_user(user_id)

        if full_name is not None:
            if not full_name.strip():
                raise MissingField("Full name cannot be empty", field="fullName")
            user.full_name = full_name.strip()

        if email is not None:
            validate_email(email)
            existing = self.users.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise EmailTaken(field="email")
            user.email = email

        if password is not None:
            validate_password(password)
            user.password_hash = hash_password(password)

        if role is not None:
            user.role = _coerce_role(role)

        self._apply_address(user, shipping_address)

        try:
            user = self.users.save(user)
        except IntegrityError:
            self.users.db.rollback()
            raise EmailTaken(field="email") from None

        logger.info("user_updated", user_id=user.id)
        return user

    def update_profile(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        shipping_address: Optional[Mapping[str, str]] = None,
    ) -> User:
        """Self-service edit: name and shipping address only."""
        return self.update_user(user_id, full_name=full_name, shipping_address=shipping_address)

    def delete_user(self, user_id: str) -> None:
        user = self.get_user(user_id)
        self.users.delete(user)
        # Tokens already issued to this user stay valid until they expire;
        # anything that re-fetches the user will now get UserNotFound.
        logger.info("user_deleted", user_id=user_id)

    @staticmethod
    def _apply_address(user: User, shipping_address: Optional[Mapping[str, str]]) -> None:
        if shipping_address is None:
            return
        for key in ADDRESS_FIELDS:
            value = shipping_address.get(key)
            if value is not None:
                setattr(user, key, value)
