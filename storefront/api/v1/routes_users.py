# File: storefront/api/v1/routes_users.py

"""
Admin back-office user management. Every route requires an admin token.
"""

from fastapi import APIRouter, Depends, Response, status

from storefront.api.deps import get_user_service, require_admin
from storefront.core.exceptions import ValidationError
from storefront.schemas.user import UserCreate, UserRead, UserUpdate
from storefront.services.user_service import UserService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=list[UserRead], summary="List users")
def list_users(users: UserService = Depends(get_user_service)):
    return users.list_users()


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED, summary="Create user")
def create_user(payload: UserCreate, users: UserService = Depends(get_user_service)):
    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    return users.create_user(
        full_name=payload.full_name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        shipping_address=address,
    )


@router.get("/{user_id}", response_model=UserRead, summary="Fetch user")
def get_user(user_id: str, users: UserService = Depends(get_user_service)):
    return users.get_user(user_id)


@router.put("/{user_id}", response_model=UserRead, summary="Update user")
def update_user(
    user_id: str,
    payload: UserUpdate,
    users: UserService = Depends(get_user_service),
):
    if payload.id is not None and payload.id != user_id:
        raise ValidationError("User ID mismatch", field="id")

    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    return users.update_user(
        user_id,
        full_name=payload.full_name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        shipping_address=address,
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
def delete_user(user_id: str, users: UserService = Depends(get_user_service)):
    users.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
