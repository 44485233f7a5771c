# File: storefront/schemas/auth.py

from typing import Optional

from storefront.schemas.base import APIModel
from storefront.schemas.user import UserRead


# Fields are optional here so that a missing value reaches the
# authenticator and comes back as a MissingField error naming the field.

class LoginRequest(APIModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SignupRequest(APIModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(APIModel):
    token: str
    token_type: str = "bearer"
    user: UserRead
