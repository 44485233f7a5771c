# File: storefront/services/order_service.py

"""
Order engine: pricing and status lifecycle.

Pricing policy (flat, no jurisdiction lookup):
  subtotal = sum(unit price * quantity) over the snapshotted line items
  shipping = 5.00 when subtotal > 0, otherwise 0 (free orders ship free)
  taxes    = 8% of subtotal
  total    = subtotal + shipping + taxes, rounded half-up to cents

Status lifecycle: Processing, Shipped, Delivered, Cancelled. By default an
admin may move an order between any two states. With strict transitions
enabled, Delivered and Cancelled are final.
"""

import secrets
import time
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Sequence, Union

from storefront.core.exceptions import (
    EmptyOrder,
    Forbidden,
    InvalidTransition,
    OrderNotFound,
    OwnerNotFound,
    ValidationError,
)
from storefront.core.logging import get_logger
from storefront.core.security import Identity
from storefront.db.repositories import OrderRepository, UserRepository
from storefront.models.order import Order, OrderStatus
from storefront.models.user import UserRole

logger = get_logger(__name__)

SHIPPING_FLAT_RATE = Decimal("5.00")
TAX_RATE = Decimal("0.08")
CENTS = Decimal("0.01")

# Upper bounds on a single line item. They keep every total well inside the
# default decimal precision.
MAX_UNIT_PRICE = 1_000_000
MAX_QUANTITY = 10_000

ALLOWED_TRANSITIONS = {
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.PROCESSING, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Decimal
    shipping: Decimal
    taxes: Decimal
    total: Decimal


def round_currency(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_pricing(items: Sequence[Mapping[str, Any]]) -> OrderPricing:
    """Price a list of line items using each item's own snapshotted price."""
    subtotal = sum(
        (Decimal(str(item["price"])) * int(item["quantity"]) for item in items),
        Decimal("0"),
    )
    shipping = SHIPPING_FLAT_RATE if subtotal > 0 else Decimal("0")
    taxes = subtotal * TAX_RATE
    total = round_currency(subtotal + shipping + taxes)
    return OrderPricing(
        subtotal=round_currency(subtotal),
        shipping=round_currency(shipping),
        taxes=round_currency(taxes),
        total=total,
    )


def new_order_id() -> str:
    return f"KYT-{int(time.time() * 1000)}-{secrets.token_hex(2).upper()}"


def parse_status(value: Union[OrderStatus, str, None]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidTransition(f"Status must be one of: {allowed}", field="status") from None


def is_transition_allowed(current: OrderStatus, new: OrderStatus) -> bool:
    # Re-applying the current status is always a no-op, never an error.
    return current == new or new in ALLOWED_TRANSITIONS[current]


def _snapshot(item: Mapping[str, Any]) -> Dict[str, Any]:
    for key in ("id", "name", "price", "quantity"):
        if item.get(key) is None:
            raise ValidationError(f"Line item is missing '{key}'", field="items")
    quantity = int(item["quantity"])
    if not 1 <= quantity <= MAX_QUANTITY:
        raise ValidationError(f"Line item quantity must be between 1 and {MAX_QUANTITY}", field="items")
    price = Decimal(str(item["price"]))
    if not price.is_finite() or not 0 <= price <= MAX_UNIT_PRICE:
        raise ValidationError(f"Line item price must be between 0 and {MAX_UNIT_PRICE}", field="items")
    return {
        "id": str(item["id"]),
        "name": item["name"],
        "category": item.get("category") or "",
        "price": float(price),
        "image_url": item.get("image_url") or "",
        "quantity": quantity,
    }


class OrderEngine:
    def __init__(
        self,
        orders: OrderRepository,
        users: UserRepository,
        *,
        strict_transitions: bool = False,
        enforce_ownership: bool = False,
    ):
        self.orders = orders
        self.users = users
        self.strict_transitions = strict_transitions
        self.enforce_ownership = enforce_ownership

    @staticmethod
    def _require_admin(identity: Identity) -> None:
        if identity.role != UserRole.ADMIN.value:
            logger.warning("order_admin_denied", user_id=identity.subject_id, role=identity.role)
            raise Forbidden("Forbidden: Access is restricted to administrators.")

    def create_order(
        self,
        identity: Identity,
        owner_id: str,
        line_items: Sequence[Mapping[str, Any]],
    ) -> Order:
        """
        Price and store a new order placed by ``identity`` for itself.

        Raises:
            EmptyOrder: no line items
            Forbidden: acting user is not the owner
            OwnerNotFound: owner id does not resolve (e.g. deleted account)
        """
        if not line_items:
            raise EmptyOrder(field="items")

        if identity.subject_id != owner_id:
            logger.warning("order_owner_mismatch", user_id=identity.subject_id, owner_id=owner_id)
            raise Forbidden("Forbidden: You can only create orders for yourself.", field="userId")

        owner = self.users.get(owner_id)
        if owner is None:
            raise OwnerNotFound(field="userId")

        items = [_snapshot(item) for item in line_items]
        pricing = compute_pricing(items)

        order = Order(
            id=new_order_id(),
            order_date=date.today(),
            customer_name=owner.full_name,
            user_id=owner.id,
            status=OrderStatus.PROCESSING,
            items=items,
            subtotal=float(pricing.subtotal),
            shipping=float(pricing.shipping),
            taxes=float(pricing.taxes),
            total=float(pricing.total),
        )
        order = self.orders.add(order)
        logger.info("order_created", order_id=order.id, user_id=owner.id, total=order.total)
        return order

    def update_status(
        self,
        identity: Identity,
        order_id: str,
        new_status: Union[OrderStatus, str, None],
    ) -> Order:
        """
        Move an order to ``new_status`` (admin only).

        The write is a single conditional UPDATE by id, so two admins editing
        the same order cannot lose each other's change to a stale read.
        """
        self._require_admin(identity)

        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound()

        status = parse_status(new_status)
        previous = order.status
        expected = None
        if self.strict_transitions:
            if not is_transition_allowed(order.status, status):
                raise InvalidTransition(
                    f"Cannot move order from {order.status.value} to {status.value}",
                    field="status",
                )
            expected = [order.status]

        if not self.orders.update_status(order_id, status, expected=expected):
            if self.orders.get(order_id) is None:
                raise OrderNotFound()
            raise InvalidTransition("Order status changed concurrently, retry", field="status")

        updated = self.orders.get(order_id)
        logger.info(
            "order_status_updated",
            order_id=order_id,
            from_status=previous.value,
            to_status=updated.status.value,
            admin_id=identity.subject_id,
        )
        return updated

    def list_orders(self, identity: Identity) -> List[Order]:
        """All orders, newest first (admin only)."""
        self._require_admin(identity)
        return self.orders.list()

    def list_own_orders(self, identity: Identity) -> List[Order]:
        return self.orders.list_for_user(identity.subject_id)

    def get_order(self, identity: Identity, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound()
        if (
            self.enforce_ownership
            and order.user_id != identity.subject_id
            and identity.role != UserRole.ADMIN.value
        ):
            raise Forbidden("Forbidden: You can only view your own orders.")
        return order
