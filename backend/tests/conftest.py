"""
Pytest fixtures for brewhouse backend tests.

Provides an in-memory application, per-test table wipe, catalog/customer
fixtures, and a test client.
"""

from decimal import Decimal

import pytest
from brewhouse import create_app
from brewhouse.extensions import db
from brewhouse.models import Beer, Customer


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ORDER_WRITE_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_beer(session, name, upc, *, style="IPA", price="12.95", quantity_on_hand=100):
    beer = Beer(
        name=name,
        style=style,
        upc=upc,
        price=Decimal(price),
        quantity_on_hand=quantity_on_hand,
    )
    session.add(beer)
    session.commit()
    return beer


@pytest.fixture(scope='function')
def beer_a(db_session):
    """First catalog beer."""
    return make_beer(db_session, "Mango Bobs", "UPC-A", style="ALE")


@pytest.fixture(scope='function')
def beer_b(db_session):
    """Second catalog beer."""
    return make_beer(db_session, "Galaxy Cat", "UPC-B", style="PALE_ALE", price="11.50")


@pytest.fixture(scope='function')
def beer_c(db_session):
    """Third catalog beer."""
    return make_beer(db_session, "Pinball Porter", "UPC-C", style="PORTER")


@pytest.fixture(scope='function')
def customer(db_session):
    """A customer with an email."""
    c = Customer(
        name="Jane Brewer",
        email="jane@example.com",
        phone="555-0100",
        address_line1="1 Hop Street",
        city="Portland",
        state="OR",
        postal_code="97201",
    )
    db_session.add(c)
    db_session.commit()
    return c


# An id no fixture ever reaches
MISSING_BEER_ID = 999999
