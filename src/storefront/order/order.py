"""Order aggregate: the purchase record the review gate reads.

Cart, checkout and payment live elsewhere. Here an order is only placed and
moved through its fulfilment statuses, which is all the purchase ledger
needs to decide whether a customer has received a product.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.shared.errors import ConflictError


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    PACKED = "packed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


_TERMINAL_STATES = {OrderStatus.REFUNDED}

# Status -> timestamp field stamped on entry
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def generate_order_number(now=None) -> str:
    now = now or datetime.now(UTC)
    return f"SF-{now:%y%m%d}-{uuid.uuid4().hex[:6].upper()}"


@storefront.entity(part_of="Order")
class OrderItem:
    """A line item snapshot taken when the order was placed."""

    product_id = Identifier(required=True)
    variant_sku = String(max_length=64)
    title = String(required=True, max_length=255)
    size = String(max_length=20)
    color = String(max_length=50)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=40, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)

    placed_at = DateTime()
    confirmed_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, customer_id, items, order_number=None):
        """Place an order from a list of item dicts.

        Each item needs ``product_id``, ``title``, ``unit_price`` and
        ``quantity``; ``variant_sku``, ``size`` and ``color`` are optional.
        """
        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number or generate_order_number(now),
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            placed_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id),
                item_count=len(order.items),
                total=order.total,
                placed_at=now,
            )
        )
        return order

    @property
    def total(self) -> float:
        return round(sum(item.subtotal for item in self.items), 2)

    def contains_product(self, product_id) -> bool:
        return any(str(item.product_id) == str(product_id) for item in self.items)

    def update_status(self, new_status):
        target = OrderStatus(new_status)
        current = OrderStatus(self.status)
        if current in _TERMINAL_STATES:
            raise ConflictError(
                f"Order {self.order_number} is {current.value} and can no longer change",
                reason="order_closed",
            )
        if target == current:
            return

        now = datetime.now(UTC)
        self.status = target.value
        stamp = _STATUS_TIMESTAMPS.get(target)
        if stamp:
            setattr(self, stamp, now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                previous_status=current.value,
                status=target.value,
                changed_at=now,
            )
        )
