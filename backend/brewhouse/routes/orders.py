# Overview: Flask API routes for beer orders; parses input and returns JSON responses.

# backend/brewhouse/routes/orders.py
"""
Beer order routes.

Wire format is camelCase JSON (customerRef, items[].beerId, ...). Request
shape errors and business-rule errors both come back as 400 problems with
per-field `errors`; unknown beers as a 404 problem listing `missingBeerIds`.
"""
from flask import Blueprint, request, current_app

from ..services import order_service
from ..services.catalog_service import BeerNotFoundError
from ..services.concurrency import OptimisticLockError
from ..services.order_mapper import (
    request_to_place_command,
    request_to_update_command,
    view_to_response,
)
from ..validation import NotFoundError, ValidationError
from ..problems import problem, validation_problem

beer_orders_bp = Blueprint("beer_orders", __name__, url_prefix="/api/v1/beer-orders")


def _version_arg(*, required: bool):
    """
    Read the `version` query parameter. A value that is present but not a
    positive integer is rejected, never treated as absent.
    """
    raw = request.args.get("version")
    if raw is None:
        if required:
            raise ValidationError("version query parameter is required", fields={"version": "is required"})
        return None
    if not (raw.isascii() and raw.isdigit()) or int(raw) < 1:
        raise ValidationError("version must be a positive integer", fields={"version": "must be a positive integer"})
    return int(raw)


def _conflict(e: OptimisticLockError):
    extra = {}
    if e.actual_version is not None:
        extra["currentVersion"] = e.actual_version
    return problem(409, str(e), title="Optimistic lock conflict", **extra)


@beer_orders_bp.post("")
def place_order_route():
    """
    Place a new order.

    Body: {"customerRef": str, "items": [{"beerId": int, "quantity": int}, ...]}
    Returns 201 with the order and a Location header.
    """
    payload = request.get_json(silent=True)

    try:
        command = request_to_place_command(payload)
        view = order_service.place_order(command)
    except ValidationError as e:
        return validation_problem(e)
    except BeerNotFoundError as e:
        return problem(404, str(e), missingBeerIds=e.missing_ids)
    except Exception:
        current_app.logger.exception("Failed to place beer order")
        return problem(500, "Internal server error")

    location = f"{beer_orders_bp.url_prefix}/{view.id}"
    return view_to_response(view), 201, {"Location": location}


@beer_orders_bp.get("/<int:order_id>")
def get_order_route(order_id: int):
    try:
        view = order_service.get_order(order_id)
    except NotFoundError as e:
        return problem(404, str(e))

    return view_to_response(view), 200


@beer_orders_bp.patch("/<int:order_id>")
def update_order_route(order_id: int):
    """
    Update customerRef and/or paymentAmount.

    Body must carry the `version` the client read; a stale version is a 409.
    """
    payload = request.get_json(silent=True)

    try:
        command = request_to_update_command(payload)
        view = order_service.update_order(order_id, command)
    except ValidationError as e:
        return validation_problem(e)
    except NotFoundError as e:
        return problem(404, str(e))
    except OptimisticLockError as e:
        return _conflict(e)

    return view_to_response(view), 200


@beer_orders_bp.delete("/<int:order_id>/lines/<int:beer_id>")
def remove_order_line_route(order_id: int, beer_id: int):
    """Remove one line. Query param `version` (required) is the order version the client read."""
    try:
        version = _version_arg(required=True)
        view = order_service.remove_order_line(order_id, beer_id, version)
    except ValidationError as e:
        return validation_problem(e)
    except NotFoundError as e:
        return problem(404, str(e))
    except OptimisticLockError as e:
        return _conflict(e)

    return view_to_response(view), 200


@beer_orders_bp.delete("/<int:order_id>")
def delete_order_route(order_id: int):
    """Delete an order and its lines. Optional query param `version`."""
    try:
        version = _version_arg(required=False)
        order_service.delete_order(order_id, version)
    except ValidationError as e:
        return validation_problem(e)
    except NotFoundError as e:
        return problem(404, str(e))
    except OptimisticLockError as e:
        return _conflict(e)

    return "", 204
