# File: storefront/api/v1/routes_auth.py

"""
Auth API routes: login, signup and the current user's profile.
"""

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_authenticator, get_current_user, get_user_service
from storefront.models.user import User
from storefront.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from storefront.schemas.user import ProfileUpdate, UserRead
from storefront.services.auth_service import Authenticator
from storefront.services.user_service import UserService

router = APIRouter()


@router.post("/login", response_model=TokenResponse, summary="Log in with email and password")
def login(
    payload: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
):
    result = authenticator.login(email=payload.email, password=payload.password)
    return TokenResponse(token=result.token, user=UserRead.model_validate(result.user))


@router.post(
    "/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer account",
)
def signup(
    payload: SignupRequest,
    authenticator: Authenticator = Depends(get_authenticator),
):
    result = authenticator.signup(
        full_name=payload.full_name,
        email=payload.email,
        password=payload.password,
    )
    return TokenResponse(token=result.token, user=UserRead.model_validate(result.user))


@router.get("/me", response_model=UserRead, summary="Current user's profile")
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserRead, summary="Update own name and shipping address")
def update_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    return users.update_profile(
        current_user.id,
        full_name=payload.full_name,
        shipping_address=address,
    )
