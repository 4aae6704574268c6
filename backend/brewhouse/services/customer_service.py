# backend/brewhouse/services/customer_service.py
"""
Customer service.

Email uniqueness is enforced here, before create and update, rather than by
a storage constraint. Customers are not linked to orders: an order's
customer_ref is free text, so deleting a customer leaves orders untouched.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Customer
from ..validation import ConflictError, NotFoundError, in_id_range
from .concurrency import check_version, transaction

CUSTOMER_MUTABLE_FIELDS = {
    "name", "email", "phone",
    "address_line1", "address_line2", "city", "state", "postal_code",
}


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: int):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


def _find_customer(customer_id: int) -> Customer | None:
    if not in_id_range(customer_id):
        return None
    return db.session.get(Customer, customer_id)


def apply_customer_patch(c: Customer, patch: dict) -> None:
    for k, v in patch.items():
        if k not in CUSTOMER_MUTABLE_FIELDS:
            continue
        setattr(c, k, v)


def find_customer_by_email(email: str) -> Customer | None:
    return db.session.query(Customer).filter(Customer.email == email.lower()).first()


def _require_unique_email(email: str | None, *, exclude_id: int | None = None) -> None:
    if not email:
        return
    existing = find_customer_by_email(email)
    if existing and existing.id != exclude_id:
        raise ConflictError(f"Email '{email}' is already in use by customer {existing.id}")


def list_customers() -> list[dict]:
    customers = db.session.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()
    return [c.to_dict() for c in customers]


def get_customer(customer_id: int) -> dict:
    c = _find_customer(customer_id)
    if c is None:
        raise CustomerNotFoundError(customer_id)
    return c.to_dict()


def create_customer(*, patch: dict) -> dict:
    """
    Create a customer from a validated patch dict.

    Raises:
        ConflictError: If the email is already used by another customer
    """
    with transaction("Customer"):
        _require_unique_email(patch.get("email"))
        c = Customer()
        apply_customer_patch(c, patch)
        db.session.add(c)
        db.session.flush()

    current_app.logger.info("Created customer id=%s", c.id)
    return c.to_dict()


def update_customer(*, customer_id: int, patch: dict, expected_version: int | None = None) -> dict:
    """
    Update a customer.

    Raises:
        CustomerNotFoundError: If the customer does not exist
        ConflictError: If the email belongs to another customer
        OptimisticLockError: On a stale version
    """
    with transaction("Customer", customer_id):
        c = _find_customer(customer_id)
        if c is None:
            raise CustomerNotFoundError(customer_id)
        check_version("Customer", c, expected_version)
        if "email" in patch:
            _require_unique_email(patch["email"], exclude_id=c.id)
        apply_customer_patch(c, patch)
        db.session.flush()

    current_app.logger.info("Updated customer id=%s version=%s", c.id, c.version)
    return c.to_dict()


def delete_customer(*, customer_id: int) -> None:
    with transaction("Customer", customer_id):
        c = _find_customer(customer_id)
        if c is None:
            raise CustomerNotFoundError(customer_id)
        db.session.delete(c)

    current_app.logger.info("Deleted customer id=%s", customer_id)
