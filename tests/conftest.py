"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from database.models import create_fixed_cost, set_product_cost
from services.schemas import LineItem, Order

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "database" / "schema.sql"

SHOP = "test-store.myshopify.com"


@pytest.fixture
def db() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite database with the full schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    schema = _SCHEMA_PATH.read_text()
    conn.executescript(schema)
    yield conn
    conn.close()


def make_order(
    order_id: str = "1001",
    total: str = "100.00",
    gateway: str = "shopify_payments",
    items: list[tuple[str | None, int]] | None = None,
) -> Order:
    """Build an Order with (variant_id, quantity) line items."""
    line_items = [
        LineItem(variant_id=variant_id, quantity=quantity, price=Decimal("10.00"))
        for variant_id, quantity in (items or [])
    ]
    return Order(id=order_id, total_price=Decimal(total), gateway=gateway, line_items=line_items)


@pytest.fixture
def sample_orders() -> list[Order]:
    """Two paid orders: one Shopify Payments, one PayPal."""
    return [
        make_order("1001", "100.00", "shopify_payments", [("v1", 2), ("v2", 1)]),
        make_order("1002", "50.00", "paypal", [("v1", 1)]),
    ]


@pytest.fixture
def sample_cost(db: sqlite3.Connection) -> dict[str, Any]:
    """Insert and return a unit cost for variant v1."""
    return set_product_cost(db, SHOP, "v1", "12.50", product_id="p1", sku="TEE-BLK-M", product_title="Tee")


@pytest.fixture
def sample_fixed_cost(db: sqlite3.Connection) -> dict[str, Any]:
    """Insert and return a 300/month software subscription."""
    return create_fixed_cost(db, SHOP, "Shopify plan", "300", "monthly", "software")
