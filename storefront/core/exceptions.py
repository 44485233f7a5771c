# File: storefront/core/exceptions.py

"""
Error taxonomy for the storefront API.

Every error carries the HTTP status it maps to, a human readable message and,
where it makes sense, the request field the client should highlight. The
handler in ``storefront.main`` renders them as ``{"message", "field"}``.
"""

from typing import Optional


class StorefrontError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, "field": self.field}


# ---------- 400 ----------

class ValidationError(StorefrontError):
    status_code = 400
    default_message = "Invalid request"


class MissingField(ValidationError):
    default_message = "A required field is missing"


class InvalidEmail(ValidationError):
    default_message = "Please enter a valid email address"


class WeakPassword(ValidationError):
    default_message = "Password must be at least 8 characters long"


class EmptyOrder(ValidationError):
    default_message = "An order needs at least one item"


class InvalidTransition(ValidationError):
    default_message = "Invalid order status"


# ---------- 401 ----------

class InvalidCredentials(StorefrontError):
    status_code = 401
    default_message = "Invalid email or password"


class Unauthenticated(StorefrontError):
    status_code = 401
    default_message = "Not authenticated"


class TokenInvalid(Unauthenticated):
    # Same client-facing message as TokenExpired; the subclass is for logs only.
    default_message = "Could not validate credentials"


class TokenExpired(Unauthenticated):
    default_message = "Could not validate credentials"


# ---------- 403 ----------

class Forbidden(StorefrontError):
    status_code = 403
    default_message = "Forbidden"


# ---------- 404 ----------

class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class OwnerNotFound(NotFound):
    default_message = "User not found"


class OrderNotFound(NotFound):
    default_message = "Order not found"


# ---------- 409 ----------

class Conflict(StorefrontError):
    status_code = 409
    default_message = "Conflict"


class EmailTaken(Conflict):
    default_message = "User with this email already exists"


# ---------- 500 ----------

class PasswordHashingError(StorefrontError):
    status_code = 500
    default_message = "Failed to create user. Please try again later."
