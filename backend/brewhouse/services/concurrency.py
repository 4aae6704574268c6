# Overview: Transaction boundaries and optimistic-lock handling shared by the services.

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class OptimisticLockError(Exception):
    """
    409-level: the row changed since the caller read it.

    Distinct from NotFoundError so callers can re-fetch and retry. Never
    retried by the services themselves.
    """
    def __init__(self, entity: str, entity_id, expected_version: int | None = None, actual_version: int | None = None):
        message = f"{entity} {entity_id} was modified concurrently" if entity_id is not None else f"{entity} was modified concurrently"
        if expected_version is not None and actual_version is not None:
            message += f" (expected version {expected_version}, found {actual_version})"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


def check_version(entity: str, row, expected_version: int | None) -> None:
    """Reject a write based on a version other than the row's current one."""
    if expected_version is None:
        return
    if row.version != expected_version:
        current_app.logger.warning(
            "Stale write rejected: %s id=%s expected_version=%s actual_version=%s",
            entity, row.id, expected_version, row.version,
        )
        raise OptimisticLockError(entity, row.id, expected_version, row.version)


@contextmanager
def transaction(entity: str = "Row", entity_id=None):
    """
    One unit of work: commit on success, roll back on any failure.

    A StaleDataError raised by a flush inside the block or by the commit
    (a versioned UPDATE/DELETE matched zero rows) surfaces as
    OptimisticLockError. Callers that need to tell a vanished row apart
    from a stale one check existence themselves (see order_store.save_order).
    """
    try:
        yield db.session
        db.session.commit()
    except StaleDataError as exc:
        db.session.rollback()
        current_app.logger.warning("Optimistic lock conflict: %s", exc)
        raise OptimisticLockError(entity, entity_id) from exc
    except Exception:
        db.session.rollback()
        raise


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on transient storage failures.

    Retries OperationalError only (deadlocks, "database is locked").
    StaleDataError / OptimisticLockError propagate immediately: a stale
    version means the caller's view is out of date.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning("Transient storage error, retrying (attempt %s of %s)", attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))
