# backend/brewhouse/services/catalog_service.py
"""
Beer catalog service.

find_beers_by_ids() is the catalog lookup used by order placement: it is
read-only and never fails on a partial match, so callers detect missing ids
by set difference. The remaining functions are plain catalog CRUD.
"""
from __future__ import annotations

from typing import Iterable

from flask import current_app

from ..extensions import db
from ..models import Beer, BeerOrderLine
from ..validation import ConflictError, NotFoundError, in_id_range
from .concurrency import check_version, transaction

BEER_MUTABLE_FIELDS = {"name", "style", "upc", "quantity_on_hand", "price"}


class BeerNotFoundError(NotFoundError):
    """One or more beer ids do not exist in the catalog."""

    def __init__(self, missing_ids: Iterable[int]):
        self.missing_ids = sorted(set(missing_ids))
        super().__init__(f"Beer(s) not found: {', '.join(str(i) for i in self.missing_ids)}")


def find_beers_by_ids(beer_ids: Iterable[int]) -> dict[int, Beer]:
    """Return the catalog rows matching `beer_ids`, keyed by id."""
    wanted = {i for i in beer_ids if in_id_range(i)}
    if not wanted:
        return {}
    beers = db.session.query(Beer).filter(Beer.id.in_(wanted)).all()
    return {b.id: b for b in beers}


def _find_beer(beer_id: int) -> Beer | None:
    if not in_id_range(beer_id):
        return None
    return db.session.get(Beer, beer_id)


def apply_beer_patch(beer: Beer, patch: dict) -> None:
    for k, v in patch.items():
        if k not in BEER_MUTABLE_FIELDS:
            continue
        setattr(beer, k, v)


def _require_unique_upc(upc: str | None, *, exclude_id: int | None = None) -> None:
    if upc is None:
        return
    query = db.session.query(Beer).filter(Beer.upc == upc)
    if exclude_id is not None:
        query = query.filter(Beer.id != exclude_id)
    existing = query.first()
    if existing:
        raise ConflictError(f"UPC '{upc}' is already in use by beer {existing.id}")


def list_beers() -> list[dict]:
    beers = db.session.query(Beer).order_by(Beer.name.asc(), Beer.id.asc()).all()
    return [b.to_dict() for b in beers]


def get_beer(beer_id: int) -> dict:
    beer = _find_beer(beer_id)
    if beer is None:
        raise BeerNotFoundError([beer_id])
    return beer.to_dict()


def create_beer(*, patch: dict) -> dict:
    """
    Create a beer from a validated patch dict.

    Raises:
        ConflictError: If the UPC already exists
    """
    with transaction("Beer"):
        _require_unique_upc(patch.get("upc"))
        beer = Beer()
        apply_beer_patch(beer, patch)
        db.session.add(beer)
        db.session.flush()

    current_app.logger.info("Created beer id=%s upc=%s", beer.id, beer.upc)
    return beer.to_dict()


def update_beer(*, beer_id: int, patch: dict, expected_version: int | None = None) -> dict:
    """
    Update a beer. With `expected_version` the write only succeeds if the
    row is still at that version.

    Raises:
        BeerNotFoundError: If the beer does not exist
        ConflictError: If the new UPC belongs to another beer
        OptimisticLockError: On a stale version
    """
    with transaction("Beer", beer_id):
        beer = _find_beer(beer_id)
        if beer is None:
            raise BeerNotFoundError([beer_id])
        check_version("Beer", beer, expected_version)
        if "upc" in patch:
            _require_unique_upc(patch["upc"], exclude_id=beer.id)
        apply_beer_patch(beer, patch)
        db.session.flush()

    current_app.logger.info("Updated beer id=%s version=%s", beer.id, beer.version)
    return beer.to_dict()


def delete_beer(*, beer_id: int) -> None:
    """
    Delete a beer that no order line references.

    Raises:
        BeerNotFoundError: If the beer does not exist
        ConflictError: If any order line still references the beer
    """
    with transaction("Beer", beer_id):
        beer = _find_beer(beer_id)
        if beer is None:
            raise BeerNotFoundError([beer_id])
        referenced = (
            db.session.query(BeerOrderLine.beer_order_id)
            .filter(BeerOrderLine.beer_id == beer_id)
            .first()
        )
        if referenced:
            raise ConflictError(f"Beer {beer_id} is referenced by order {referenced.beer_order_id}")
        db.session.delete(beer)

    current_app.logger.info("Deleted beer id=%s", beer_id)
