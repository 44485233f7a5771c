# File: storefront/schemas/user.py

from datetime import date
from typing import Optional

from pydantic import EmailStr

from storefront.models.user import UserRole
from storefront.schemas.base import APIModel


class ShippingAddress(APIModel):
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""


class ShippingAddressUpdate(APIModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class UserBase(APIModel):
    full_name: str
    email: str


class UserRead(UserBase):
    # Never carries the password hash
    id: str
    role: UserRole
    member_since: date
    shipping_address: ShippingAddress


class UserCreate(APIModel):
    full_name: str
    email: EmailStr
    password: str
    role: UserRole = UserRole.CUSTOMER
    shipping_address: Optional[ShippingAddressUpdate] = None


class UserUpdate(APIModel):
    id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    shipping_address: Optional[ShippingAddressUpdate] = None


class ProfileUpdate(APIModel):
    full_name: Optional[str] = None
    shipping_address: Optional[ShippingAddressUpdate] = None
