# backend/brewhouse/services/order_service.py
"""
Order workflow service: placement and retrieval of beer orders.

place_order() runs as one unit of work:
1. validate the command (no database access yet),
2. resolve every distinct beer id through the catalog lookup and reject the
   whole order if any is missing,
3. build the aggregate and save it; the store assigns the order id and
   completes each line's composite key,
4. reload the order with its lines eagerly and map it to a view before the
   transaction ends.

Every function returns a BeerOrderView, never a model instance, so nothing
lazily loaded escapes the session.
"""
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..models import BeerOrder
from ..validation import ValidationError
from . import order_store
from .catalog_service import BeerNotFoundError, find_beers_by_ids
from .concurrency import check_version, run_with_retry, transaction
from .order_builder import build_order
from .order_commands import UNSET, PlaceOrderCommand, UpdateOrderCommand
from .order_mapper import BeerOrderView, to_view
from .order_store import OrderNotFoundError


def validate_place_command(command: PlaceOrderCommand) -> None:
    """
    Reject malformed placement requests before any catalog lookup.

    Raises:
        ValidationError: blank customer_ref, no items, a quantity <= 0, or the
            same beer requested twice (one line per beer per order)
    """
    if not command.customer_ref or not command.customer_ref.strip():
        raise ValidationError("customerRef must not be blank", fields={"customerRef": "must not be blank"})

    if not command.items:
        raise ValidationError("items must not be empty", fields={"items": "must not be empty"})

    for i, item in enumerate(command.items):
        if item.quantity <= 0:
            raise ValidationError(
                f"quantity must be > 0 for beerId {item.beer_id}",
                fields={f"items[{i}].quantity": f"must be > 0 for beerId {item.beer_id}"},
            )

    seen: set[int] = set()
    for i, item in enumerate(command.items):
        if item.beer_id in seen:
            raise ValidationError(
                f"beerId {item.beer_id} appears more than once",
                fields={f"items[{i}].beerId": f"duplicate beerId {item.beer_id}"},
            )
        seen.add(item.beer_id)


def _load_view(order_id: int) -> BeerOrderView:
    order = order_store.find_order_by_id(order_id, populate_existing=True)
    if order is None:
        raise OrderNotFoundError(order_id)
    return to_view(order)


def _require_order(order_id: int) -> BeerOrder:
    order = order_store.find_order_by_id(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def place_order(command: PlaceOrderCommand) -> BeerOrderView:
    """
    Place a new order with status NEW.

    Raises:
        ValidationError: The command is malformed (nothing is read or written)
        BeerNotFoundError: Any requested beer is missing; lists every missing id
        OrderAssemblyError: Internal sequencing bug in the builder
    """
    validate_place_command(command)
    beer_ids = command.beer_ids()

    def _op() -> BeerOrderView:
        with transaction("BeerOrder"):
            beers_by_id = find_beers_by_ids(beer_ids)
            missing = [beer_id for beer_id in beer_ids if beer_id not in beers_by_id]
            if missing:
                raise BeerNotFoundError(missing)

            order = build_order(command, beers_by_id)
            order_store.save_order(order)
            return _load_view(order.id)

    view = run_with_retry(
        _op,
        attempts=current_app.config.get("ORDER_WRITE_RETRY_ATTEMPTS", 3),
        backoff_base=current_app.config.get("ORDER_WRITE_RETRY_BACKOFF", 0.1),
    )
    current_app.logger.info(
        "Placed beer order id=%s customer_ref=%s lines=%s",
        view.id, view.customer_ref, len(view.lines),
    )
    return view


def get_order(order_id: int) -> BeerOrderView:
    """
    Raises:
        OrderNotFoundError: No order with that id
    """
    with transaction("BeerOrder", order_id):
        return _load_view(order_id)


def update_order(order_id: int, command: UpdateOrderCommand) -> BeerOrderView:
    """
    Change customer_ref and/or payment_amount. Status is never touched.

    Raises:
        OrderNotFoundError: No order with that id
        OptimisticLockError: command.version is not the order's current version
        ValidationError: blank customer_ref or negative payment amount
    """
    with transaction("BeerOrder", order_id):
        order = _require_order(order_id)
        check_version("BeerOrder", order, command.version)

        if command.customer_ref is not UNSET:
            if not command.customer_ref.strip():
                raise ValidationError("customerRef must not be blank", fields={"customerRef": "must not be blank"})
            order.customer_ref = command.customer_ref

        if command.payment_amount is not UNSET:
            amount = command.payment_amount
            if amount is not None and amount < Decimal("0"):
                raise ValidationError("paymentAmount must be >= 0", fields={"paymentAmount": "must be >= 0"})
            order.payment_amount = amount

        order_store.save_order(order)
        view = _load_view(order_id)

    current_app.logger.info("Updated beer order id=%s version=%s", view.id, view.version)
    return view


def remove_order_line(order_id: int, beer_id: int, version: int) -> BeerOrderView:
    """
    Remove one line; its row is deleted with the same commit. An order must
    keep at least one line.

    Raises:
        OrderNotFoundError / OrderLineNotFoundError
        OptimisticLockError: `version` is stale
        ValidationError: the line is the order's last one
    """
    with transaction("BeerOrder", order_id):
        order = _require_order(order_id)
        check_version("BeerOrder", order, version)

        if order.find_line(beer_id) is not None and len(order.lines) == 1:
            raise ValidationError(
                "An order must keep at least one line; delete the order instead",
                fields={"beerId": "is the order's only line"},
            )
        order_store.remove_line(order, beer_id)
        order_store.touch(order)
        order_store.save_order(order)
        view = _load_view(order_id)

    current_app.logger.info("Removed beer %s from order id=%s", beer_id, order_id)
    return view


def delete_order(order_id: int, version: int | None = None) -> None:
    """
    Delete an order and every line it owns.

    Raises:
        OrderNotFoundError: No order with that id
        OptimisticLockError: `version` given and stale
    """
    with transaction("BeerOrder", order_id):
        order = _require_order(order_id)
        check_version("BeerOrder", order, version)
        order_store.delete_order(order)

    current_app.logger.info("Deleted beer order id=%s", order_id)
