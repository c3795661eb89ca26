"""
Pytest configuration and fixtures for backend tests.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from rest_api.main import create_app
from rest_api.models import Base, Location, Table
from rest_api.services.domain import FantasyNameService, OrderService
from shared.infrastructure.db import Database
from shared.security.rate_limit import limiter
from shared.utils.schemas import OrderItemInput


# SQLite in-memory database for testing (one shared connection, StaticPool)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True, scope="session")
def disable_rate_limiting():
    """Rate limits are exercised explicitly, never by accident."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(scope="function")
def database():
    """
    Fresh in-memory database for each test.
    """
    database = Database(SQLALCHEMY_DATABASE_URL)
    Base.metadata.create_all(bind=database.engine)
    try:
        yield database
    finally:
        Base.metadata.drop_all(bind=database.engine)
        database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    """Session on the test database; services commit through it."""
    session = database.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(database):
    """
    Create a test client bound to the test database.
    """
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def names():
    """Deterministic name generator."""
    import random

    return FantasyNameService(rng=random.Random(1234))


@pytest.fixture
def seed_location(db_session):
    """Create a test location."""
    location = Location(name="Test Bistro", address="123 Test St")
    db_session.add(location)
    db_session.commit()
    return location


@pytest.fixture
def make_table(db_session, seed_location):
    """Factory for tables of the test location."""

    def _make_table(number: str = "1", capacity: int = 4, is_active: bool = True) -> Table:
        table = Table(
            location_id=seed_location.id,
            number=number,
            capacity=capacity,
            is_active=is_active,
        )
        db_session.add(table)
        db_session.commit()
        return table

    return _make_table


@pytest.fixture
def seed_table(make_table):
    """A four-seat table."""
    return make_table(number="1", capacity=4)


@pytest.fixture
def small_table(make_table):
    """A two-seat table."""
    return make_table(number="2", capacity=2)


@pytest.fixture
def place_order(db_session):
    """Place a one-line order for a participant; returns the OrderOutput."""

    def _place_order(participant_id: int, price: str, quantity: int = 1, menu_item_id: str = "dish-1"):
        return OrderService(db_session).create_order(
            participant_id,
            [OrderItemInput(menu_item_id=menu_item_id, quantity=quantity, unit_price=Decimal(price))],
        )

    return _place_order


@pytest.fixture
def set_order_status(db_session):
    """Move an order to a status through the order service."""

    def _set_status(order_id: int, status: str):
        return OrderService(db_session).update_status(order_id, status)

    return _set_status
