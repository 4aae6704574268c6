from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class OrderItem:
    beer_id: int
    quantity: int


@dataclass(frozen=True)
class PlaceOrderCommand:
    customer_ref: str
    items: list[OrderItem] = field(default_factory=list)

    def beer_ids(self) -> list[int]:
        """Distinct requested beer ids, in request order."""
        return list(dict.fromkeys(item.beer_id for item in self.items))


# Sentinel for "field not supplied" in partial updates (None is a valid value)
UNSET = object()


@dataclass(frozen=True)
class UpdateOrderCommand:
    version: int
    customer_ref: str | object = UNSET
    payment_amount: Decimal | None | object = UNSET
