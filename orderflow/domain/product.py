"""Product entity: catalogue attributes plus the available-quantity ledger."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from orderflow.core.clock import now_utc
from orderflow.domain.errors import (
    AmountOutOfRange,
    DescriptionRequired,
    InsufficientQuantity,
    InvalidQuantity,
    PriceInvalid,
    QuantityNegative,
)


# Column ranges: money is int64, stock counts are int32.
MAX_AMOUNT = 2**63 - 1
MAX_QUANTITY = 2**31 - 1

@dataclass(frozen=True)
class ProductSnapshot:
    """Product attributes as the customer saw them when the item was ordered.

    Stored with the order item and never refreshed from the live product.
    """

    id: uuid.UUID
    description: str
    tags: tuple[str, ...]
    price: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "description": self.description,
            "tags": list(self.tags),
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductSnapshot":
        return cls(
            id=uuid.UUID(str(data["id"])),
            description=data.get("description", ""),
            tags=tuple(data.get("tags") or ()),
            price=int(data["price"]),
        )


@dataclass
class Product:
    description: str
    price: int
    quantity: int = 0
    tags: list[str] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    def validate_for_creation(self) -> None:
        if not self.description:
            raise DescriptionRequired()
        if self.price <= 0:
            raise PriceInvalid()
        if self.quantity < 0:
            raise QuantityNegative()
        if self.price > MAX_AMOUNT or self.quantity > MAX_QUANTITY:
            raise AmountOutOfRange()

    def is_available(self, requested: int) -> bool:
        return self.quantity >= requested

    def reserve_quantity(self, requested: int) -> None:
        """Take ``requested`` units out of the available quantity.

        The only mutator of ``quantity`` on the order path: either the whole
        amount is reserved or nothing changes.
        """
        if requested <= 0:
            raise InvalidQuantity()
        if not self.is_available(requested):
            raise InsufficientQuantity()
        self.quantity -= requested
        self.updated_at = now_utc()

    def update_details(
        self,
        description: str | None = None,
        tags: list[str] | None = None,
        quantity: int | None = None,
        price: int | None = None,
    ) -> None:
        """Administrative update. Validated as a whole before anything is applied."""
        candidate = Product(
            id=self.id,
            description=self.description if description is None else description,
            tags=list(self.tags if tags is None else tags),
            quantity=self.quantity if quantity is None else quantity,
            price=self.price if price is None else price,
        )
        candidate.validate_for_creation()

        self.description = candidate.description
        self.tags = candidate.tags
        self.quantity = candidate.quantity
        self.price = candidate.price
        self.updated_at = now_utc()

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id,
            description=self.description,
            tags=tuple(self.tags),
            price=self.price,
        )
