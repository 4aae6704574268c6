from __future__ import annotations

import enum
from dataclasses import dataclass

from ..extensions import db
from .identity import SurrogateIdentityMixin


class BeerOrderStatus(str, enum.Enum):
    """
    Order lifecycle states. Placement only ever assigns NEW; the later
    states are stored and reported but never transitioned to here.
    """
    NEW = "NEW"
    VALIDATION_PENDING = "VALIDATION_PENDING"
    VALIDATED = "VALIDATED"
    ALLOCATION_PENDING = "ALLOCATION_PENDING"
    ALLOCATED = "ALLOCATED"
    PICKED_UP = "PICKED_UP"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class BeerOrderLineStatus(str, enum.Enum):
    NEW = "NEW"
    ALLOCATED = "ALLOCATED"
    PICKED_UP = "PICKED_UP"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class BeerOrderLineKey:
    """Composite identity of an order line: (owning order id, beer id)."""
    beer_order_id: int
    beer_id: int

    def identity(self) -> tuple[int, int]:
        # Column order of the beer_order_lines primary key, for Session.get()
        return (self.beer_order_id, self.beer_id)


class UnsavedOrderLineError(RuntimeError):
    """Raised when a line's key is requested before its order has an id."""


class BeerOrder(SurrogateIdentityMixin, db.Model):
    """
    Beer order aggregate root.

    The order exclusively owns its lines: removing a line from `lines`
    deletes its row on flush (orphan removal) and deleting the order deletes
    every line. `customer_ref` is a free-text tag, not a foreign key.

    `lines` is lazy by default; anything handing an order across the
    storage boundary must load it through order_store.find_order_by_id(),
    which loads lines and their beers eagerly.
    """
    __tablename__ = "beer_orders"
    __table_args__ = (
        db.Index("ix_beer_orders_customer_ref", "customer_ref"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    customer_ref = db.Column(db.String(255), nullable=False)
    payment_amount = db.Column(db.Numeric(19, 2), nullable=True)
    status = db.Column(
        db.Enum(BeerOrderStatus, native_enum=False, length=32),
        nullable=False,
        default=BeerOrderStatus.NEW,
    )

    created_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    lines = db.relationship(
        "BeerOrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="BeerOrderLine.beer_id",
        lazy="select",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<BeerOrder id={self.id} customer_ref={self.customer_ref!r} status={self.status}>"

    def add_line(self, line: "BeerOrderLine") -> None:
        # back_populates sets line.order
        self.lines.append(line)

    def remove_line(self, line: "BeerOrderLine") -> None:
        self.lines.remove(line)

    def find_line(self, beer_id: int) -> "BeerOrderLine | None":
        for line in self.lines:
            if line.beer_id == beer_id:
                return line
        return None


class BeerOrderLine(db.Model):
    """
    One beer on one order. Primary key is (beer_order_id, beer_id), so an
    order holds at most one line per beer.

    beer_order_id is only known once the owning order has been flushed; the
    ORM copies it from `order` into the key during that same flush.
    """
    __tablename__ = "beer_order_lines"
    __table_args__ = (
        db.CheckConstraint("order_quantity > 0", name="ck_beer_order_lines_quantity_positive"),
        db.Index("ix_beer_order_lines_order", "beer_order_id"),
        db.Index("ix_beer_order_lines_beer", "beer_id"),
    )

    beer_order_id = db.Column(
        db.Integer,
        db.ForeignKey("beer_orders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    beer_id = db.Column(db.Integer, db.ForeignKey("beers.id"), primary_key=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    order_quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.Enum(BeerOrderLineStatus, native_enum=False, length=32),
        nullable=False,
        default=BeerOrderLineStatus.NEW,
    )

    created_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    order = db.relationship("BeerOrder", back_populates="lines")
    beer = db.relationship("Beer")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<BeerOrderLine order={self.beer_order_id} beer={self.beer_id} qty={self.order_quantity}>"

    @property
    def key(self) -> BeerOrderLineKey:
        if self.beer_order_id is None or self.beer_id is None:
            raise UnsavedOrderLineError("Order line has no key until its order is saved")
        return BeerOrderLineKey(beer_order_id=self.beer_order_id, beer_id=self.beer_id)
