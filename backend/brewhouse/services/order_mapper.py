# backend/brewhouse/services/order_mapper.py
"""
Presentation mapping for beer orders.

Three shapes meet here:
- the persisted aggregate (BeerOrder / BeerOrderLine models),
- the service-level view (BeerOrderView), which is what the workflow
  returns once it is done with the database,
- the wire JSON (camelCase), produced and parsed by the HTTP layer.

to_view() expects a fully loaded aggregate (see order_store.find_order_by_id)
and raises if a line has lost its beer.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from brewhouse.time_utils import to_utc_z
from ..models import BeerOrder, BeerOrderLine
from ..validation import MAX_DB_INT, ValidationError, coerce_decimal, in_id_range
from .order_commands import UNSET, OrderItem, PlaceOrderCommand, UpdateOrderCommand


@dataclass(frozen=True)
class BeerOrderLineView:
    beer_id: int
    beer_name: str
    order_quantity: int
    status: str


@dataclass(frozen=True)
class BeerOrderView:
    id: int
    version: int
    customer_ref: str
    status: str
    payment_amount: Decimal | None
    created_date: datetime | None
    updated_date: datetime | None
    lines: tuple[BeerOrderLineView, ...]


# ---------------------------------------------------------------------------
# aggregate -> view
# ---------------------------------------------------------------------------

def line_to_view(line: BeerOrderLine) -> BeerOrderLineView:
    if line.beer is None:
        raise ValueError(f"Order line for beer {line.beer_id} has no beer loaded")
    return BeerOrderLineView(
        beer_id=line.beer_id,
        beer_name=line.beer.name,
        order_quantity=line.order_quantity,
        status=line.status.name,
    )


def to_view(order: BeerOrder) -> BeerOrderView:
    return BeerOrderView(
        id=order.id,
        version=order.version,
        customer_ref=order.customer_ref,
        status=order.status.name,
        payment_amount=order.payment_amount,
        created_date=order.created_date,
        updated_date=order.updated_date,
        lines=tuple(line_to_view(line) for line in order.lines),
    )


# ---------------------------------------------------------------------------
# view -> wire
# ---------------------------------------------------------------------------

def view_to_response(view: BeerOrderView) -> dict:
    return {
        "id": view.id,
        "version": view.version,
        "customerRef": view.customer_ref,
        "status": view.status,
        "paymentAmount": str(view.payment_amount) if view.payment_amount is not None else None,
        "createdDate": to_utc_z(view.created_date),
        "updatedDate": to_utc_z(view.updated_date),
        "lines": [
            {
                "beerId": line.beer_id,
                "beerName": line.beer_name,
                "orderQuantity": line.order_quantity,
                "status": line.status,
            }
            for line in view.lines
        ],
    }


# ---------------------------------------------------------------------------
# wire -> command
# ---------------------------------------------------------------------------

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def request_to_place_command(payload: Any) -> PlaceOrderCommand:
    """
    Parse and shape-check a placement request body.

    Collects every field problem before failing so the client sees them all
    at once. Business rules (blank ref, empty items, quantity > 0) are
    checked again by the workflow service, which does not trust its callers.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors: dict[str, str] = {}

    customer_ref = payload.get("customerRef")
    if not isinstance(customer_ref, str) or not customer_ref.strip():
        errors["customerRef"] = "must not be blank"

    raw_items = payload.get("items")
    items: list[OrderItem] = []
    if not isinstance(raw_items, list) or not raw_items:
        errors["items"] = "must not be empty"
    else:
        for i, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                errors[f"items[{i}]"] = "must be an object"
                continue
            beer_id = raw.get("beerId")
            quantity = raw.get("quantity")
            if not _is_int(beer_id) or beer_id <= 0:
                errors[f"items[{i}].beerId"] = "must be a positive integer"
            elif not in_id_range(beer_id):
                errors[f"items[{i}].beerId"] = "is out of range"
            if not _is_int(quantity) or quantity <= 0:
                message = "must be a positive integer"
                if _is_int(beer_id):
                    message += f" for beerId {beer_id}"
                errors[f"items[{i}].quantity"] = message
            elif quantity > MAX_DB_INT:
                errors[f"items[{i}].quantity"] = "is out of range"
            if _is_int(beer_id) and _is_int(quantity):
                items.append(OrderItem(beer_id=beer_id, quantity=quantity))

    if errors:
        detail = ", ".join(f"{field}: {message}" for field, message in errors.items())
        raise ValidationError(detail, fields=errors)

    return PlaceOrderCommand(customer_ref=customer_ref, items=items)


def request_to_update_command(payload: Any) -> UpdateOrderCommand:
    """Parse a PATCH body: required `version`, optional customerRef / paymentAmount."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    allowed = {"version", "customerRef", "paymentAmount"}
    unknown = sorted(k for k in payload if k not in allowed)
    if unknown:
        raise ValidationError(
            f"Field not allowed: {', '.join(unknown)}",
            fields={k: "is not allowed" for k in unknown},
        )

    version = payload.get("version")
    if not _is_int(version) or version < 1:
        raise ValidationError("version must be a positive integer", fields={"version": "must be a positive integer"})

    customer_ref: str | object = UNSET
    if "customerRef" in payload:
        customer_ref = payload["customerRef"]
        if not isinstance(customer_ref, str):
            raise ValidationError("customerRef must be a string", fields={"customerRef": "must be a string"})

    payment_amount: Decimal | None | object = UNSET
    if "paymentAmount" in payload:
        raw = payload["paymentAmount"]
        payment_amount = None if raw is None else coerce_decimal("paymentAmount", raw)

    return UpdateOrderCommand(version=version, customer_ref=customer_ref, payment_amount=payment_amount)
