"""Database CRUD operations.

Implements all data-access functions for product costs, fixed costs,
ad spend and daily profit metrics. Every row is scoped to a shop.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

MAX_BULK_COSTS = 500
_IN_CLAUSE_CHUNK = 500

VALID_FREQUENCIES = ("daily", "weekly", "monthly", "yearly")


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    """Convert a sqlite3.Row to a plain dict, or return None."""
    if row is None:
        return None
    return dict(row)


def _rows_to_list(rows: list[sqlite3.Row]) -> list[dict[str, Any]]:
    """Convert a list of sqlite3.Row to a list of dicts."""
    return [dict(r) for r in rows]


def _now() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")


def _money(value: Any, field: str) -> str:
    """Validate a non-negative money value and return it as a decimal string."""
    if isinstance(value, bool) or value is None:
        msg = f"{field} must be a non-negative number"
        raise ValueError(msg)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        msg = f"{field} must be a non-negative number"
        raise ValueError(msg) from None
    if not amount.is_finite() or amount < 0:
        msg = f"{field} must be a non-negative number"
        raise ValueError(msg)
    return str(amount)


def _build_update(
    table: str,
    keys: dict[str, Any],
    fields: dict[str, Any],
    allowed: set[str],
) -> tuple[str, list[Any]]:
    """Build a dynamic UPDATE statement from validated field names.

    Only columns in *allowed* are accepted; this whitelist check prevents
    SQL injection even though column names are interpolated into the query.
    *keys* become the WHERE clause.

    Returns (sql, params) ready for ``conn.execute()``.
    """
    to_set: dict[str, Any] = {}
    for key, value in fields.items():
        if key in allowed:
            to_set[key] = value
    if not to_set:
        msg = "No valid fields to update"
        raise ValueError(msg)

    clauses = [f"{col} = ?" for col in to_set]
    where = [f"{col} = ?" for col in keys]
    params = list(to_set.values()) + list(keys.values())
    sql = f"UPDATE {table} SET {', '.join(clauses)} WHERE {' AND '.join(where)}"  # noqa: S608
    return sql, params


# ---------------------------------------------------------------------------
# Product costs (COGS)
# ---------------------------------------------------------------------------


def set_product_cost(
    conn: sqlite3.Connection,
    shop: str,
    variant_id: str,
    cogs: Any,
    product_id: str | None = None,
    sku: str = "",
    product_title: str = "",
    commit: bool = True,
) -> dict[str, Any]:
    """Insert or merge the unit cost for a variant and return the row."""
    if not variant_id:
        msg = "Variant ID is required"
        raise ValueError(msg)
    cogs_str = _money(cogs, "COGS")
    conn.execute(
        """
        INSERT INTO product_costs
            (shop, variant_id, product_id, sku, product_title, cogs, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (shop, variant_id) DO UPDATE SET
            product_id    = COALESCE(excluded.product_id, product_costs.product_id),
            sku           = excluded.sku,
            product_title = excluded.product_title,
            cogs          = excluded.cogs,
            updated_at    = excluded.updated_at
        """,
        (shop, str(variant_id), product_id, sku or "", product_title or "", cogs_str, _now()),
    )
    if commit:
        conn.commit()
    return get_product_cost(conn, shop, str(variant_id))  # type: ignore[return-value]


def set_product_costs_bulk(
    conn: sqlite3.Connection,
    shop: str,
    products: list[dict[str, Any]],
) -> int:
    """Upsert many variant costs in one transaction. Invalid rows are skipped.

    Returns the number of rows written. Raises ValueError when *products* is
    empty or larger than MAX_BULK_COSTS.
    """
    if not products:
        msg = "Products list is required"
        raise ValueError(msg)
    if len(products) > MAX_BULK_COSTS:
        msg = f"Maximum {MAX_BULK_COSTS} products per batch"
        raise ValueError(msg)

    written = 0
    try:
        for product in products:
            try:
                set_product_cost(
                    conn,
                    shop,
                    product.get("variant_id"),  # type: ignore[arg-type]
                    product.get("cogs"),
                    product_id=product.get("product_id"),
                    sku=product.get("sku", ""),
                    product_title=product.get("product_title", ""),
                    commit=False,
                )
            except ValueError:
                continue
            written += 1
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    return written


def get_product_cost(
    conn: sqlite3.Connection,
    shop: str,
    variant_id: str,
) -> dict[str, Any] | None:
    """Return the cost row for a single variant."""
    return _row_to_dict(
        conn.execute(
            "SELECT * FROM product_costs WHERE shop = ? AND variant_id = ?",
            (shop, str(variant_id)),
        ).fetchone()
    )


def list_product_costs(conn: sqlite3.Connection, shop: str) -> list[dict[str, Any]]:
    """Return all cost rows for a shop, most recently updated first."""
    return _rows_to_list(
        conn.execute(
            "SELECT * FROM product_costs WHERE shop = ? ORDER BY updated_at DESC, variant_id",
            (shop,),
        ).fetchall()
    )


def delete_product_cost(conn: sqlite3.Connection, shop: str, variant_id: str) -> bool:
    """Delete a variant cost. Returns True if a row was deleted."""
    cur = conn.execute(
        "DELETE FROM product_costs WHERE shop = ? AND variant_id = ?",
        (shop, str(variant_id)),
    )
    conn.commit()
    return cur.rowcount > 0


def get_cost_map(
    conn: sqlite3.Connection,
    shop: str,
    variant_ids: Iterable[str],
) -> dict[str, str]:
    """Return ``{variant_id: cogs}`` for the variants that have a stored cost.

    Variants without a row are absent from the result, never mapped to zero.
    """
    ids = list(dict.fromkeys(str(v) for v in variant_ids if v))
    cost_map: dict[str, str] = {}
    for i in range(0, len(ids), _IN_CLAUSE_CHUNK):
        chunk = ids[i:i + _IN_CLAUSE_CHUNK]
        placeholders = ", ".join("?" for _ in chunk)
        rows = conn.execute(
            f"SELECT variant_id, cogs FROM product_costs "  # noqa: S608
            f"WHERE shop = ? AND variant_id IN ({placeholders})",
            (shop, *chunk),
        ).fetchall()
        for row in rows:
            cost_map[row["variant_id"]] = row["cogs"]
    return cost_map


# ---------------------------------------------------------------------------
# Fixed costs
# ---------------------------------------------------------------------------

_FIXED_COST_UPDATE_ALLOWED = {
    "description",
    "amount",
    "frequency",
    "category",
    "active",
    "updated_at",
}


def create_fixed_cost(
    conn: sqlite3.Connection,
    shop: str,
    description: str,
    amount: Any,
    frequency: str = "monthly",
    category: str | None = None,
) -> dict[str, Any]:
    """Insert a new active fixed cost and return it."""
    if not description or not isinstance(description, str):
        msg = "Description is required"
        raise ValueError(msg)
    amount_str = _money(amount, "Amount")
    if frequency not in VALID_FREQUENCIES:
        msg = f"Invalid frequency: {frequency!r}"
        raise ValueError(msg)

    cur = conn.execute(
        """
        INSERT INTO fixed_costs (shop, description, amount, frequency, category)
        VALUES (?, ?, ?, ?, ?)
        """,
        (shop, description, amount_str, frequency, category or "other"),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM fixed_costs WHERE id = ?", (cur.lastrowid,)).fetchone()
    return dict(row)


def get_fixed_cost(
    conn: sqlite3.Connection,
    shop: str,
    cost_id: int,
) -> dict[str, Any] | None:
    """Return a single fixed cost by ID."""
    return _row_to_dict(
        conn.execute(
            "SELECT * FROM fixed_costs WHERE shop = ? AND id = ?",
            (shop, cost_id),
        ).fetchone()
    )


def list_fixed_costs(
    conn: sqlite3.Connection,
    shop: str,
    active_only: bool = True,
) -> list[dict[str, Any]]:
    """Return fixed costs ordered newest first, optionally only active ones."""
    if active_only:
        return _rows_to_list(
            conn.execute(
                "SELECT * FROM fixed_costs WHERE shop = ? AND active = 1 "
                "ORDER BY created_at DESC, id DESC",
                (shop,),
            ).fetchall()
        )
    return _rows_to_list(
        conn.execute(
            "SELECT * FROM fixed_costs WHERE shop = ? ORDER BY created_at DESC, id DESC",
            (shop,),
        ).fetchall()
    )


def update_fixed_cost(
    conn: sqlite3.Connection,
    shop: str,
    cost_id: int,
    **fields: Any,
) -> dict[str, Any] | None:
    """Update a fixed cost's fields and return the updated row."""
    if "amount" in fields:
        fields["amount"] = _money(fields["amount"], "Amount")
    if "frequency" in fields and fields["frequency"] not in VALID_FREQUENCIES:
        msg = f"Invalid frequency: {fields['frequency']!r}"
        raise ValueError(msg)
    if "active" in fields:
        fields["active"] = 1 if fields["active"] else 0
    fields["updated_at"] = _now()
    sql, params = _build_update(
        "fixed_costs", {"shop": shop, "id": cost_id}, fields, _FIXED_COST_UPDATE_ALLOWED
    )
    conn.execute(sql, params)
    conn.commit()
    return get_fixed_cost(conn, shop, cost_id)


def delete_fixed_cost(
    conn: sqlite3.Connection,
    shop: str,
    cost_id: int,
    permanent: bool = False,
) -> bool:
    """Deactivate a fixed cost, or remove it entirely when *permanent*.

    Returns True if a row was affected.
    """
    if permanent:
        cur = conn.execute(
            "DELETE FROM fixed_costs WHERE shop = ? AND id = ?",
            (shop, cost_id),
        )
    else:
        cur = conn.execute(
            "UPDATE fixed_costs SET active = 0, deleted_at = ?, updated_at = ? "
            "WHERE shop = ? AND id = ?",
            (_now(), _now(), shop, cost_id),
        )
    conn.commit()
    return cur.rowcount > 0


# ---------------------------------------------------------------------------
# Ad spend
# ---------------------------------------------------------------------------


def upsert_ad_spend(
    conn: sqlite3.Connection,
    shop: str,
    platform: str,
    date: str,
    spend: Any,
    impressions: int = 0,
    clicks: int = 0,
) -> dict[str, Any]:
    """Record one platform's spend for one day, replacing any earlier sync."""
    if not platform:
        msg = "Platform is required"
        raise ValueError(msg)
    spend_str = _money(spend, "Spend")
    conn.execute(
        """
        INSERT INTO ad_spend (shop, platform, date, spend, impressions, clicks, synced_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (shop, platform, date) DO UPDATE SET
            spend       = excluded.spend,
            impressions = excluded.impressions,
            clicks      = excluded.clicks,
            synced_at   = excluded.synced_at
        """,
        (shop, platform, date, spend_str, int(impressions), int(clicks), _now()),
    )
    conn.commit()
    row = conn.execute(
        "SELECT * FROM ad_spend WHERE shop = ? AND platform = ? AND date = ?",
        (shop, platform, date),
    ).fetchone()
    return dict(row)


def list_ad_spend(conn: sqlite3.Connection, shop: str, date: str) -> list[dict[str, Any]]:
    """Return every platform's spend for one day, in first-recorded order."""
    return _rows_to_list(
        conn.execute(
            "SELECT * FROM ad_spend WHERE shop = ? AND date = ? ORDER BY rowid",
            (shop, date),
        ).fetchall()
    )


# ---------------------------------------------------------------------------
# Daily metrics (stored profit reports)
# ---------------------------------------------------------------------------


def upsert_daily_metrics(
    conn: sqlite3.Connection,
    shop: str,
    date: str,
    payload: str,
    revenue: str,
    net_profit: str,
) -> None:
    """Write a day's report as one statement so readers never see half of it."""
    conn.execute(
        """
        INSERT INTO daily_metrics (shop, date, revenue, net_profit, payload, calculated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT (shop, date) DO UPDATE SET
            revenue       = excluded.revenue,
            net_profit    = excluded.net_profit,
            payload       = excluded.payload,
            calculated_at = excluded.calculated_at
        """,
        (shop, date, revenue, net_profit, payload, _now()),
    )
    conn.commit()


def get_daily_metrics(
    conn: sqlite3.Connection,
    shop: str,
    date: str,
) -> dict[str, Any] | None:
    """Return the stored report row for one day."""
    return _row_to_dict(
        conn.execute(
            "SELECT * FROM daily_metrics WHERE shop = ? AND date = ?",
            (shop, date),
        ).fetchone()
    )


def list_daily_metrics(
    conn: sqlite3.Connection,
    shop: str,
    start_date: str,
    end_date: str,
) -> list[dict[str, Any]]:
    """Return stored report rows with start_date <= date <= end_date, oldest first."""
    return _rows_to_list(
        conn.execute(
            """
            SELECT * FROM daily_metrics
            WHERE shop = ? AND date >= ? AND date <= ?
            ORDER BY date ASC
            """,
            (shop, start_date, end_date),
        ).fetchall()
    )


# ---------------------------------------------------------------------------
# Data retention
# ---------------------------------------------------------------------------

_SHOP_TABLES = ("product_costs", "fixed_costs", "ad_spend", "daily_metrics")


def delete_shop_data(conn: sqlite3.Connection, shop: str) -> dict[str, int]:
    """Erase every row belonging to *shop*. Returns deleted counts per table."""
    counts: dict[str, int] = {}
    try:
        for table in _SHOP_TABLES:
            cur = conn.execute(f"DELETE FROM {table} WHERE shop = ?", (shop,))  # noqa: S608
            counts[table] = cur.rowcount
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    return counts
