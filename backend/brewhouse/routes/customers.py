# Overview: Flask API routes for customers; parses input and returns JSON responses.

# backend/brewhouse/routes/customers.py
"""
Customer CRUD routes.

PUT replaces the customer's fields (name and address fields are required,
as on create). Duplicate emails are a 409.
"""
from flask import Blueprint, request

from ..services import customer_service
from ..services.concurrency import OptimisticLockError
from ..models import Customer
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    pop_expected_version,
    enforce_rules_customer,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..problems import problem, validation_problem

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "email", "phone",
        "address_line1", "address_line2", "city", "state", "postal_code",
    },
    required_on_create={"name", "address_line1", "city", "state", "postal_code"},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/v1/customers")


@customers_bp.get("")
def list_customers():
    return {"items": customer_service.list_customers()}


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    try:
        return customer_service.get_customer(customer_id)
    except NotFoundError as e:
        return problem(404, str(e))


@customers_bp.post("")
def create_customer_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        enforce_rules_customer(patch)
        created = customer_service.create_customer(patch=patch)
    except ValidationError as e:
        return validation_problem(e)
    except ConflictError as e:
        return problem(409, str(e))

    return created, 201, {"Location": f"{customers_bp.url_prefix}/{created['id']}"}


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        expected_version = pop_expected_version(payload)
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        enforce_rules_customer(patch)
        updated = customer_service.update_customer(
            customer_id=customer_id, patch=patch, expected_version=expected_version
        )
    except ValidationError as e:
        return validation_problem(e)
    except NotFoundError as e:
        return problem(404, str(e))
    except ConflictError as e:
        return problem(409, str(e))
    except OptimisticLockError as e:
        return problem(409, str(e), title="Optimistic lock conflict")

    return updated, 200


@customers_bp.delete("/<int:customer_id>")
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(customer_id=customer_id)
    except NotFoundError as e:
        return problem(404, str(e))

    return "", 204
