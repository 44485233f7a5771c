# File: storefront/api/v1/routes_orders.py

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_current_identity, get_order_engine, require_admin
from storefront.core.security import Identity
from storefront.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from storefront.services.order_service import OrderEngine

router = APIRouter()


@router.get("", response_model=list[OrderRead], summary="List all orders (admin)")
def list_orders(
    identity: Identity = Depends(require_admin),
    engine: OrderEngine = Depends(get_order_engine),
):
    return engine.list_orders(identity)


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order for yourself",
)
def create_order(
    payload: OrderCreate,
    identity: Identity = Depends(get_current_identity),
    engine: OrderEngine = Depends(get_order_engine),
):
    items = [item.model_dump() for item in payload.items]
    return engine.create_order(identity, payload.user_id, items)


@router.get("/mine", response_model=list[OrderRead], summary="List your own orders")
def list_my_orders(
    identity: Identity = Depends(get_current_identity),
    engine: OrderEngine = Depends(get_order_engine),
):
    return engine.list_own_orders(identity)


@router.get("/{order_id}", response_model=OrderRead, summary="Fetch one order")
def get_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    engine: OrderEngine = Depends(get_order_engine),
):
    return engine.get_order(identity, order_id)


@router.put("/{order_id}/status", response_model=OrderRead, summary="Change order status (admin)")
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    identity: Identity = Depends(require_admin),
    engine: OrderEngine = Depends(get_order_engine),
):
    return engine.update_status(identity, order_id, payload.status)
