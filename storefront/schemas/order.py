# File: storefront/schemas/order.py

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import AliasChoices, ConfigDict, Field

from storefront.models.order import OrderStatus
from storefront.schemas.base import APIModel
from storefront.services.order_service import MAX_QUANTITY, MAX_UNIT_PRICE


class LineItem(APIModel):
    """Product snapshot as it was in the cart; extra catalog fields are dropped."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    category: str = ""
    price: float = Field(ge=0, le=MAX_UNIT_PRICE, allow_inf_nan=False)
    image_url: str = ""
    quantity: int = Field(ge=1, le=MAX_QUANTITY)


class OrderCreate(APIModel):
    user_id: str
    items: List[LineItem] = []


class OrderStatusUpdate(APIModel):
    status: Optional[str] = None


class OrderRead(APIModel):
    id: str
    order_date: date = Field(
        validation_alias=AliasChoices("order_date", "date"),
        serialization_alias="date",
    )
    customer_name: str
    user_id: str
    status: OrderStatus
    items: List[LineItem]
    subtotal: float
    shipping: float
    taxes: float
    total: float
    created_at: datetime
