"""Pytest configuration and fixtures for the Layback Garments backend tests.

This module provides reusable fixtures for testing:
- Settings built from a fixed test environment
- An in-memory SQLite store with the schema created and orders seeded
- A TestClient wrapped around a fully started application
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert, select

from shared.config import Settings, load_settings
from shared.models.tables import orders
from shared.services.database import DatabaseService

# === Environment Setup ===

# Only set fake credentials for moto if no real credentials are present
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


# === Test Configuration ===

TEST_ENVIRON: dict[str, str] = {
    "ENVIRONMENT": "test",
    "LOG_LEVEL": "DEBUG",
    "JWT_SECRET": "jwt_test_secret",
    "PAYSTACK_SECRET_KEY": "sk_test_paystack_secret",
    "STRIPE_SECRET_KEY": "sk_test_stripe_secret",
    "STRIPE_WEBHOOK_SECRET": "whsec_test_secret_for_testing",
}

UNPAID_ORDER_ID = 42
PAID_ORDER_ID = 7
MISSING_ORDER_ID = 999


# === Settings Fixtures ===


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir: Path) -> Settings:
    """Settings for a test process with resumes written under tmp_path."""
    return load_settings({**TEST_ENVIRON, "UPLOAD_DIR": str(upload_dir)})


@pytest.fixture
def paystack_secret(settings: Settings) -> str:
    return settings.paystack_secret_key.get_secret_value()


@pytest.fixture
def stripe_webhook_secret(settings: Settings) -> str:
    return settings.stripe_webhook_secret.get_secret_value()


# === Database Fixtures ===


@pytest.fixture
def database() -> Generator[DatabaseService, None, None]:
    """In-memory SQLite store with the schema created."""
    db = DatabaseService("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def seeded_orders(database: DatabaseService) -> dict[str, int]:
    """Insert one unpaid and one paid order.

    Returns:
        Order IDs keyed by their initial status.
    """
    database.insert(insert(orders).values(OrderID=UNPAID_ORDER_ID, PaymentStatus="Unpaid"))
    database.insert(insert(orders).values(OrderID=PAID_ORDER_ID, PaymentStatus="Paid"))
    return {"Unpaid": UNPAID_ORDER_ID, "Paid": PAID_ORDER_ID}


@pytest.fixture
def order_status(database: DatabaseService):
    """Return a lookup of an order's current PaymentStatus (None if absent)."""

    def _lookup(order_id: int) -> Any:
        row = database.fetch_one(
            select(orders.c.PaymentStatus).where(orders.c.OrderID == order_id)
        )
        return row["PaymentStatus"] if row else None

    return _lookup


# === API Fixtures ===


@pytest.fixture
def client(
    settings: Settings,
    database: DatabaseService,
    seeded_orders: dict[str, int],
) -> Generator[TestClient, None, None]:
    """TestClient for an app whose lifespan has run against the test store."""
    from api.main import create_app

    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client
