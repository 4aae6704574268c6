# backend/brewhouse/services/order_builder.py
"""
Order Aggregate Builder.

Turns a validated placement command plus the resolved beers into a new,
unsaved BeerOrder with one NEW line per requested item. Lines are attached
to the order but have no key yet: beer_order_id is filled in when the Order
Store flushes the order.
"""
from __future__ import annotations

from ..models import Beer, BeerOrder, BeerOrderLine, BeerOrderLineStatus, BeerOrderStatus
from .order_commands import OrderItem, PlaceOrderCommand


class OrderAssemblyError(RuntimeError):
    """
    Internal invariant failure: the builder was handed an item whose beer
    was not resolved. Callers must check the catalog before building, so
    this signals a sequencing bug, not bad input.
    """


def build_line(item: OrderItem, beers_by_id: dict[int, Beer]) -> BeerOrderLine:
    beer = beers_by_id.get(item.beer_id)
    if beer is None or beer.id is None:
        raise OrderAssemblyError(f"Beer {item.beer_id} was not resolved before building the order")
    return BeerOrderLine(
        beer_id=beer.id,
        beer=beer,
        order_quantity=item.quantity,
        status=BeerOrderLineStatus.NEW,
    )


def build_order(command: PlaceOrderCommand, beers_by_id: dict[int, Beer]) -> BeerOrder:
    order = BeerOrder(
        customer_ref=command.customer_ref,
        payment_amount=None,
        status=BeerOrderStatus.NEW,
    )
    for item in command.items:
        order.add_line(build_line(item, beers_by_id))
    return order
