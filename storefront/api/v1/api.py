from fastapi import APIRouter

from storefront.api.v1.routes_auth import router as auth_router
from storefront.api.v1.routes_orders import router as orders_router
from storefront.api.v1.routes_users import router as users_router


api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(orders_router, prefix="/orders", tags=["orders"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
