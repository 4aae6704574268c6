# Overview: Flask API routes for the beer catalog; parses input and returns JSON responses.

# backend/brewhouse/routes/beers.py
"""Beer catalog CRUD routes."""
from flask import Blueprint, request

from ..services import catalog_service
from ..services.concurrency import OptimisticLockError
from ..models import Beer
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    pop_expected_version,
    enforce_rules_beer,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..problems import problem, validation_problem

BEER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "style", "upc", "quantity_on_hand", "price"},
    required_on_create={"name", "style", "upc", "price"},
)

beers_bp = Blueprint("beers", __name__, url_prefix="/api/v1/beers")


@beers_bp.get("")
def list_beers():
    return {"items": catalog_service.list_beers()}


@beers_bp.get("/<int:beer_id>")
def get_beer_route(beer_id: int):
    try:
        return catalog_service.get_beer(beer_id)
    except NotFoundError as e:
        return problem(404, str(e))


@beers_bp.post("")
def create_beer_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Beer, payload=payload, policy=BEER_POLICY, partial=False)
        enforce_rules_beer(patch)
        created = catalog_service.create_beer(patch=patch)
    except ValidationError as e:
        return validation_problem(e)
    except ConflictError as e:
        return problem(409, str(e))

    return created, 201, {"Location": f"{beers_bp.url_prefix}/{created['id']}"}


@beers_bp.put("/<int:beer_id>")
def update_beer_route(beer_id: int):
    """
    Update a beer. Send the `version` you read to make the write conditional.
    """
    payload = request.get_json(silent=True) or {}

    try:
        expected_version = pop_expected_version(payload)
        patch = validate_payload(model=Beer, payload=payload, policy=BEER_POLICY, partial=True)
        enforce_rules_beer(patch)
        updated = catalog_service.update_beer(beer_id=beer_id, patch=patch, expected_version=expected_version)
    except ValidationError as e:
        return validation_problem(e)
    except NotFoundError as e:
        return problem(404, str(e))
    except ConflictError as e:
        return problem(409, str(e))
    except OptimisticLockError as e:
        return problem(409, str(e), title="Optimistic lock conflict")

    return updated, 200


@beers_bp.delete("/<int:beer_id>")
def delete_beer_route(beer_id: int):
    try:
        catalog_service.delete_beer(beer_id=beer_id)
    except NotFoundError as e:
        return problem(404, str(e))
    except ConflictError as e:
        return problem(409, str(e))

    return "", 204
