# backend/brewhouse/services/order_store.py
"""
Order Store: persistence of a BeerOrder together with the lines it owns.

Rules this module keeps:
- save_order() assigns the order id and completes every line's composite key
  (beer_order_id, beer_id) in the same flush.
- An order leaves this module fully loaded: find_order_by_id() eagerly loads
  lines and each line's beer, so no lazy collection crosses the boundary.
- Lines are owned. remove_line() detaches a line and the flush deletes its
  row; delete_order() deletes the order and all its lines.
- Absence is not an error here: find_* return None. The workflow layer
  decides what a missing order means.

Nothing here commits; the calling service owns the transaction.
"""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import BeerOrder, BeerOrderLine, BeerOrderLineKey
from ..validation import NotFoundError, in_id_range
from .concurrency import OptimisticLockError


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class OrderLineNotFoundError(NotFoundError):
    def __init__(self, order_id: int, beer_id: int):
        super().__init__(f"Order {order_id} has no line for beer {beer_id}")
        self.order_id = order_id
        self.beer_id = beer_id


def _order_with_lines():
    return select(BeerOrder).options(
        selectinload(BeerOrder.lines).joinedload(BeerOrderLine.beer)
    )


def find_order_by_id(order_id: int, *, populate_existing: bool = False) -> BeerOrder | None:
    """
    Load an order with its lines and their beers in one go.
    Ids outside the key column range cannot exist and give None.

    populate_existing refreshes an instance already in the identity map
    (e.g. right after save_order()) so relationships reflect the database.
    """
    if not in_id_range(order_id):
        return None
    stmt = _order_with_lines().where(BeerOrder.id == order_id)
    if populate_existing:
        stmt = stmt.execution_options(populate_existing=True)
    return db.session.execute(stmt).scalars().first()


def order_exists(order_id: int) -> bool:
    if not in_id_range(order_id):
        return False
    stmt = select(BeerOrder.id).where(BeerOrder.id == order_id)
    return db.session.execute(stmt).first() is not None


def find_line(key: BeerOrderLineKey) -> BeerOrderLine | None:
    if not (in_id_range(key.beer_order_id) and in_id_range(key.beer_id)):
        return None
    return db.session.get(BeerOrderLine, key.identity())


def save_order(order: BeerOrder) -> BeerOrder:
    """
    Insert or update an order and its lines.

    For a new order the INSERT of beer_orders runs first; the ORM then copies
    the generated id into each line's beer_order_id before inserting lines.

    Raises:
        OrderNotFoundError: The order was deleted underneath this write
        OptimisticLockError: The order or one of its lines changed since it was read
    """
    db.session.add(order)
    order_id = order.id
    try:
        db.session.flush()
    except StaleDataError as exc:
        db.session.rollback()
        if order_id is not None and not order_exists(order_id):
            raise OrderNotFoundError(order_id) from exc
        raise OptimisticLockError("BeerOrder", order_id) from exc
    return order


def remove_line(order: BeerOrder, beer_id: int) -> BeerOrderLine:
    """
    Detach the line for `beer_id`; orphan removal deletes its row on the
    next flush.

    Raises:
        OrderLineNotFoundError: The order has no line for that beer
    """
    line = order.find_line(beer_id)
    if line is None:
        raise OrderLineNotFoundError(order.id, beer_id)
    order.remove_line(line)
    return line


def delete_order(order: BeerOrder) -> None:
    """Delete an order; the lines it owns are deleted with it."""
    order_id = order.id
    db.session.delete(order)
    try:
        db.session.flush()
    except StaleDataError as exc:
        db.session.rollback()
        if not order_exists(order_id):
            raise OrderNotFoundError(order_id) from exc
        raise OptimisticLockError("BeerOrder", order_id) from exc


def touch(order: BeerOrder) -> None:
    """
    Mark the aggregate root changed so the next flush UPDATEs beer_orders.

    Line changes alone do not write the order row; touching it makes the
    flush version-check and bump the order's version as well.
    """
    order.updated_date = db.func.now()
