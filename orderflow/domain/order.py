"""Order aggregate.

State machine:
    PENDING -> CONFIRMED | CANCELLED
    CONFIRMED -> CANCELLED
    CANCELLED is absorbing; cancelling it again is a no-op.
    COMPLETED is reserved for fulfillment tracking and has no creation path yet.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from orderflow.core.clock import now_utc
from orderflow.domain.errors import (
    AmountOutOfRange,
    CannotConfirmEmptyOrder,
    CompletedOrdersReadonly,
    InsufficientStock,
    InvalidQuantity,
    OnlyPendingCanConfirm,
)
from orderflow.domain.product import MAX_AMOUNT, Product, ProductSnapshot


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass
class OrderItem:
    """A line of an order, priced from the product snapshot taken at add time."""

    order_id: uuid.UUID
    product_id: uuid.UUID
    product_snapshot: ProductSnapshot
    quantity: int
    price_per_item: int
    total: int
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=now_utc)


@dataclass
class Order:
    user_id: uuid.UUID
    status: OrderStatus = OrderStatus.PENDING
    total: int = 0
    items: list[OrderItem] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    def add_item(self, product: Product, quantity: int) -> OrderItem:
        """Append a line for ``quantity`` units of ``product``.

        The availability check runs against whatever product state is passed
        in; the race-safe check is the reservation made under the row lock.
        """
        if quantity <= 0:
            raise InvalidQuantity()
        if not product.is_available(quantity):
            raise InsufficientStock()

        snapshot = product.snapshot()
        line_total = snapshot.price * quantity
        if line_total > MAX_AMOUNT or self.total + line_total > MAX_AMOUNT:
            raise AmountOutOfRange()

        item = OrderItem(
            order_id=self.id,
            product_id=product.id,
            product_snapshot=snapshot,
            quantity=quantity,
            price_per_item=snapshot.price,
            total=line_total,
        )
        self.items.append(item)
        self._calculate_total()
        self.updated_at = now_utc()
        return item

    def _calculate_total(self) -> None:
        self.total = sum(item.total for item in self.items)

    def confirm(self) -> None:
        if self.status != OrderStatus.PENDING:
            raise OnlyPendingCanConfirm()
        if not self.items:
            raise CannotConfirmEmptyOrder()
        self.status = OrderStatus.CONFIRMED
        self.updated_at = now_utc()

    def cancel(self) -> None:
        if self.status == OrderStatus.COMPLETED:
            raise CompletedOrdersReadonly()
        self.status = OrderStatus.CANCELLED
        self.updated_at = now_utc()
