# Overview: Pytest coverage for transaction boundaries and retry of transient storage errors.

import sqlite3

import pytest
from sqlalchemy.exc import OperationalError

from brewhouse.models import BeerOrder
from brewhouse.services import order_service
from brewhouse.services.concurrency import OptimisticLockError, run_with_retry, transaction
from brewhouse.services.order_commands import OrderItem, PlaceOrderCommand


def locked_error():
    return OperationalError("INSERT INTO beer_orders", {}, sqlite3.OperationalError("database is locked"))


class Counter:
    """Callable that fails `failures` times before returning 'done'."""

    def __init__(self, exc_factory, failures):
        self.exc_factory = exc_factory
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_factory()
        return "done"


class TestRunWithRetry:
    """Only transient storage errors are retried."""

    def test_recovers_after_transient_errors(self, db_session):
        func = Counter(locked_error, failures=2)
        assert run_with_retry(func, attempts=3, backoff_base=0) == "done"
        assert func.calls == 3

    def test_gives_up_after_all_attempts(self, db_session):
        func = Counter(locked_error, failures=10)
        with pytest.raises(OperationalError):
            run_with_retry(func, attempts=3, backoff_base=0)
        assert func.calls == 3

    def test_optimistic_lock_is_never_retried(self, db_session):
        func = Counter(lambda: OptimisticLockError("BeerOrder", 1, 1, 2), failures=1)
        with pytest.raises(OptimisticLockError):
            run_with_retry(func, attempts=3, backoff_base=0)
        assert func.calls == 1


class TestPlacementRetry:
    """place_order() retries up to ORDER_WRITE_RETRY_ATTEMPTS."""

    def _flaky_lookup(self, monkeypatch, failures):
        real_lookup = order_service.find_beers_by_ids
        calls = {"n": 0}

        def lookup(beer_ids):
            calls["n"] += 1
            if calls["n"] <= failures:
                raise locked_error()
            return real_lookup(beer_ids)

        monkeypatch.setattr(order_service, "find_beers_by_ids", lookup)
        return calls

    def test_placement_succeeds_after_transient_error(self, app, db_session, beer_a, monkeypatch):
        calls = self._flaky_lookup(monkeypatch, failures=1)

        view = order_service.place_order(PlaceOrderCommand(customer_ref="c", items=[OrderItem(beer_a.id, 1)]))

        assert calls["n"] == 2
        assert db_session.query(BeerOrder).filter_by(id=view.id).count() == 1

    def test_attempts_come_from_config(self, app, db_session, beer_a, monkeypatch):
        monkeypatch.setitem(app.config, "ORDER_WRITE_RETRY_ATTEMPTS", 2)
        calls = self._flaky_lookup(monkeypatch, failures=5)

        with pytest.raises(OperationalError):
            order_service.place_order(PlaceOrderCommand(customer_ref="c", items=[OrderItem(beer_a.id, 1)]))

        assert calls["n"] == 2
        assert db_session.query(BeerOrder).count() == 0


class TestTransaction:

    def test_rolls_back_on_failure(self, db_session):
        with pytest.raises(RuntimeError):
            with transaction("BeerOrder") as session:
                session.add(BeerOrder(customer_ref="never saved"))
                session.flush()
                raise RuntimeError("boom")

        assert db_session.query(BeerOrder).count() == 0
