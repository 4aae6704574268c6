from __future__ import annotations

from ..extensions import db
from brewhouse.time_utils import to_utc_z
from .identity import SurrogateIdentityMixin


class Customer(SurrogateIdentityMixin, db.Model):
    """
    Customer master data.

    Email uniqueness is a service-layer rule (see customer_service), so the
    column carries an index but no unique constraint. Orders reference
    customers by a free-text customer_ref, not by foreign key.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_email", "email"),
        db.Index("ix_customers_phone", "phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    address_line1 = db.Column(db.String(255), nullable=False)
    address_line2 = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=False)
    state = db.Column(db.String(64), nullable=False)
    postal_code = db.Column(db.String(32), nullable=False)

    created_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "version": self.version,
            "created_date": to_utc_z(self.created_date),
            "updated_date": to_utc_z(self.updated_date),
        }
