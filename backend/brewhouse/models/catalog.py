from __future__ import annotations

from ..extensions import db
from brewhouse.time_utils import to_utc_z


class Beer(db.Model):
    """
    Catalog entry. Referenced (never owned) by beer order lines.

    Price is fixed-point with 2 fractional digits; quantity_on_hand is
    informational only and is never decremented by order placement.
    """
    __tablename__ = "beers"
    __table_args__ = (
        db.UniqueConstraint("upc", name="uq_beers_upc"),
        db.Index("ix_beers_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    name = db.Column(db.String(255), nullable=False)
    style = db.Column(db.String(64), nullable=False)
    upc = db.Column(db.String(64), nullable=False)
    quantity_on_hand = db.Column(db.Integer, nullable=True)
    price = db.Column(db.Numeric(19, 2), nullable=False)

    created_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_date = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Beer id={self.id} upc={self.upc!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "style": self.style,
            "upc": self.upc,
            "quantity_on_hand": self.quantity_on_hand,
            "price": str(self.price) if self.price is not None else None,
            "version": self.version,
            "created_date": to_utc_z(self.created_date),
            "updated_date": to_utc_z(self.updated_date),
        }
