"""CLI entry point for the Shopify profit engine."""

from __future__ import annotations

import functools
import json
import logging
import sqlite3
from datetime import date as date_cls
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

import database.models as models
from config import settings
from database import apply_schema, get_db, init_database
from services.errors import AppError, NotFoundError, ValidationError
from services.report_cache import InMemoryReportCache, cache_key

logger = logging.getLogger(__name__)

# Shared by every command run in this process
_report_cache = InMemoryReportCache()


def handle_errors(f):
    """Decorator that turns known exceptions into a message and exit code."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except AppError as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(exc.exit_code) from exc
        except sqlite3.IntegrityError as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(ValidationError.exit_code) from exc
        except ValueError as exc:
            click.echo(f"Error: {exc}", err=True)
            raise SystemExit(ValidationError.exit_code) from exc
        except sqlite3.OperationalError as exc:
            logger.warning("Database operational error in %s: %s", f.__name__, exc)
            click.echo("Error: Database unavailable", err=True)
            raise SystemExit(1) from exc
        except Exception as exc:
            logger.exception("Unexpected error in %s", f.__name__)
            raise SystemExit(1) from exc

    return wrapper


def _open_db() -> sqlite3.Connection:
    Path(settings.database_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_db(settings.database_path)
    apply_schema(conn)
    return conn


def _build_engine(conn: sqlite3.Connection):
    from services.profit_engine import ProfitEngine
    from services.shopify_orders import ShopifyOrderSource
    from services.sqlite_sources import (
        SqliteAdSpendSource,
        SqliteCostSource,
        SqliteFixedCostSource,
        SqliteReportStore,
    )

    return ProfitEngine(
        orders=ShopifyOrderSource(),
        costs=SqliteCostSource(conn),
        ad_spend=SqliteAdSpendSource(conn),
        fixed_costs=SqliteFixedCostSource(conn),
        store=SqliteReportStore(conn),
        cache=_report_cache,
        currency=settings.default_currency,
    )


def _forget_reports(shop: str) -> None:
    """Drop cached reports for *shop* after its cost inputs change."""
    _report_cache.invalidate(cache_key(shop, ""))


def _parse_amount(value: str, field: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        msg = f"{field} must be a number, got {value!r}"
        raise ValidationError(msg) from None


@click.group()
def cli() -> None:
    """Shopify real-profit reporting."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
def init_db() -> None:
    """Initialise the SQLite database (creates tables if missing)."""
    init_database(settings.database_path)
    click.echo(f"Database initialised at {settings.database_path}")


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("shop")
@click.argument("date")
@click.option("--cached", is_flag=True, help="Reuse a report computed within the cache TTL.")
@handle_errors
def compute(shop: str, date: str, cached: bool) -> None:
    """Compute, store and print the profit report for SHOP on DATE."""
    conn = _open_db()
    try:
        engine = _build_engine(conn)
        if cached:
            report = engine.get_daily_report(shop, date, settings.report_cache_ttl_seconds)
        else:
            report = engine.calculate_profit(shop, date)
        click.echo(report.model_dump_json(indent=2))
    finally:
        conn.close()


@cli.command("range")
@click.argument("shop")
@click.argument("start_date")
@click.argument("end_date")
@click.option("--with-days", is_flag=True, help="Include every stored day in the output.")
@handle_errors
def range_(shop: str, start_date: str, end_date: str, with_days: bool) -> None:
    """Summarise stored daily reports from START_DATE to END_DATE inclusive."""
    conn = _open_db()
    try:
        summary = _build_engine(conn).aggregate_range(shop, start_date, end_date)
        exclude = None if with_days else {"days"}
        click.echo(summary.model_dump_json(indent=2, exclude=exclude))
    finally:
        conn.close()


@cli.command()
@click.argument("shop")
@click.option("--today", "today_str", default=None, help="Override today's date (YYYY-MM-DD).")
@handle_errors
def dashboard(shop: str, today_str: str | None) -> None:
    """Print today's report with week-to-date and month-to-date totals."""
    from utils.dates import require_date

    today = date_cls.fromisoformat(require_date(today_str)) if today_str else None
    conn = _open_db()
    try:
        summary = _build_engine(conn).dashboard_summary(shop, today)
        click.echo(json.dumps({
            "today": summary["today"].model_dump(mode="json"),
            "this_week": summary["this_week"].model_dump(mode="json", exclude={"days"}),
            "this_month": summary["this_month"].model_dump(mode="json", exclude={"days"}),
        }, indent=2))
    finally:
        conn.close()


@cli.command()
@click.argument("shop")
@click.argument("start_date")
@click.argument("end_date")
@click.option(
    "--output",
    "output_path",
    default=None,
    help="Write CSV to this file (or a default-named file in this directory) instead of stdout.",
)
@handle_errors
def export(shop: str, start_date: str, end_date: str, output_path: str | None) -> None:
    """Export stored daily reports as CSV with a TOTAL row."""
    from services.exports import export_filename, generate_csv

    conn = _open_db()
    try:
        summary = _build_engine(conn).aggregate_range(shop, start_date, end_date)
    finally:
        conn.close()

    content = generate_csv(summary.days)
    if output_path:
        path = Path(output_path)
        if path.is_dir():
            path = path / export_filename(start_date, end_date)
        path.write_text(content)
        click.echo(f"Wrote {summary.days_count} days to {path}")
    else:
        click.echo(content, nl=False)


# ---------------------------------------------------------------------------
# Cost records
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("shop")
@click.argument("variant_id")
@click.argument("cost")
@click.option("--sku", default="", help="Variant SKU.")
@click.option("--product-id", default=None, help="Shopify product ID.")
@click.option("--title", default="", help="Product title.")
@handle_errors
def set_cost(shop: str, variant_id: str, cost: str, sku: str, product_id: str | None, title: str) -> None:
    """Set the unit cost (COGS) for a variant."""
    conn = _open_db()
    try:
        row = models.set_product_cost(
            conn,
            shop,
            variant_id,
            _parse_amount(cost, "COGS"),
            product_id=product_id,
            sku=sku,
            product_title=title,
        )
    finally:
        conn.close()
    _forget_reports(shop)
    click.echo(f"COGS for variant {row['variant_id']} set to {row['cogs']}")


@cli.command()
@click.argument("shop")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@handle_errors
def import_costs(shop: str, path: str) -> None:
    """Bulk-load variant costs from a JSON list of {variant_id, cogs, ...} objects.

    Rows with a missing variant or an invalid cost are skipped.
    """
    products = json.loads(Path(path).read_text())
    if not isinstance(products, list) or not all(isinstance(p, dict) for p in products):
        msg = "Cost file must hold a JSON list of objects"
        raise ValidationError(msg)

    conn = _open_db()
    try:
        written = models.set_product_costs_bulk(conn, shop, products)
    finally:
        conn.close()
    _forget_reports(shop)
    click.echo(f"Imported {written} of {len(products)} cost records")


@cli.command()
@click.argument("shop")
@handle_errors
def list_costs(shop: str) -> None:
    """List stored variant costs, most recently updated first."""
    conn = _open_db()
    try:
        rows = models.list_product_costs(conn, shop)
    finally:
        conn.close()
    for row in rows:
        click.echo(f"{row['variant_id']:<20} {row['sku']:<20} {row['cogs']:>10}  {row['product_title']}")
    click.echo(f"\n{len(rows)} variants with a cost")


@cli.command()
@click.argument("shop")
@click.argument("variant_id")
@handle_errors
def remove_cost(shop: str, variant_id: str) -> None:
    """Delete the stored cost for a variant."""
    conn = _open_db()
    try:
        removed = models.delete_product_cost(conn, shop, variant_id)
    finally:
        conn.close()
    if not removed:
        msg = f"No cost stored for variant {variant_id}"
        raise NotFoundError(msg)
    _forget_reports(shop)
    click.echo(f"Cost for variant {variant_id} removed")


@cli.command()
@click.argument("shop")
@click.argument("description")
@click.argument("amount")
@click.option(
    "--frequency",
    type=click.Choice(models.VALID_FREQUENCIES),
    default="monthly",
    show_default=True,
)
@click.option("--category", default="other", show_default=True)
@handle_errors
def add_fixed_cost(shop: str, description: str, amount: str, frequency: str, category: str) -> None:
    """Add a recurring fixed cost."""
    conn = _open_db()
    try:
        row = models.create_fixed_cost(
            conn, shop, description, _parse_amount(amount, "Amount"), frequency, category
        )
    finally:
        conn.close()
    _forget_reports(shop)
    click.echo(f"Added fixed cost #{row['id']}: {row['description']} {row['amount']} ({row['frequency']})")


@cli.command()
@click.argument("shop")
@click.argument("cost_id", type=int)
@click.option("--description", default=None)
@click.option("--amount", default=None)
@click.option("--frequency", type=click.Choice(models.VALID_FREQUENCIES), default=None)
@click.option("--category", default=None)
@click.option("--active/--inactive", default=None, help="Reactivate or deactivate.")
@handle_errors
def update_fixed_cost(
    shop: str,
    cost_id: int,
    description: str | None,
    amount: str | None,
    frequency: str | None,
    category: str | None,
    active: bool | None,
) -> None:
    """Change fields of an existing fixed cost."""
    fields = {
        "description": description,
        "frequency": frequency,
        "category": category,
        "active": active,
    }
    if amount is not None:
        fields["amount"] = _parse_amount(amount, "Amount")
    fields = {k: v for k, v in fields.items() if v is not None}
    if not fields:
        msg = "Nothing to update; pass at least one option"
        raise ValidationError(msg)

    conn = _open_db()
    try:
        if models.get_fixed_cost(conn, shop, cost_id) is None:
            msg = f"Fixed cost #{cost_id} not found"
            raise NotFoundError(msg)
        row = models.update_fixed_cost(conn, shop, cost_id, **fields)
    finally:
        conn.close()
    _forget_reports(shop)
    click.echo(f"Updated fixed cost #{row['id']}: {row['description']} {row['amount']} ({row['frequency']})")


@cli.command()
@click.argument("shop")
@handle_errors
def list_fixed_costs(shop: str) -> None:
    """List active fixed costs with daily/monthly/yearly totals."""
    from services.cost_normalizer import normalize_fixed_costs
    from services.sqlite_sources import SqliteFixedCostSource

    conn = _open_db()
    try:
        rows = models.list_fixed_costs(conn, shop)
        totals = normalize_fixed_costs(SqliteFixedCostSource(conn).get_active_fixed_costs(shop))
    finally:
        conn.close()

    for row in rows:
        click.echo(f"#{row['id']:<4} {row['description']:<30} {row['amount']:>10} {row['frequency']}")
    click.echo(f"\nDaily:   {totals.daily}")
    click.echo(f"Monthly: {totals.monthly}")
    click.echo(f"Yearly:  {totals.yearly}")


@cli.command()
@click.argument("shop")
@click.argument("cost_id", type=int)
@click.option("--permanent", is_flag=True, help="Delete instead of deactivating.")
@handle_errors
def remove_fixed_cost(shop: str, cost_id: int, permanent: bool) -> None:
    """Deactivate (or permanently delete) a fixed cost."""
    conn = _open_db()
    try:
        removed = models.delete_fixed_cost(conn, shop, cost_id, permanent=permanent)
    finally:
        conn.close()
    if not removed:
        msg = f"Fixed cost #{cost_id} not found"
        raise NotFoundError(msg)
    _forget_reports(shop)
    click.echo(f"Fixed cost #{cost_id} {'deleted' if permanent else 'deactivated'}")


@cli.command()
@click.argument("shop")
@click.argument("platform")
@click.argument("date")
@click.argument("spend")
@click.option("--impressions", type=int, default=0)
@click.option("--clicks", type=int, default=0)
@handle_errors
def record_ad_spend(
    shop: str, platform: str, date: str, spend: str, impressions: int, clicks: int
) -> None:
    """Record one ad platform's spend for one day."""
    from utils.dates import require_date

    require_date(date)
    conn = _open_db()
    try:
        row = models.upsert_ad_spend(
            conn, shop, platform, date, _parse_amount(spend, "Spend"), impressions, clicks
        )
    finally:
        conn.close()
    _forget_reports(shop)
    click.echo(f"Recorded {row['platform']} spend {row['spend']} for {row['date']}")


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


@cli.command()
def fee_rates() -> None:
    """Show the fee model used for each payment gateway."""
    from services.gateway_fees import fee_rates as rates

    for gateway, rate in rates().items():
        click.echo(f"{gateway:<18} {rate['formula']}")


@cli.command()
@click.argument("amount")
@click.option("--gateway", default="shopify_payments", show_default=True)
@handle_errors
def estimate_fee(amount: str, gateway: str) -> None:
    """Estimate the gateway fee and net payout for AMOUNT."""
    from services.gateway_fees import estimate_fees

    result = estimate_fees(_parse_amount(amount, "Amount"), gateway)
    click.echo(f"Amount: {result['amount']}  Fee: {result['fee']}  Net: {result['net']}")


# ---------------------------------------------------------------------------
# Data retention
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("shop")
@click.confirmation_option(prompt="Delete ALL stored data for this shop?")
@handle_errors
def purge_shop(shop: str) -> None:
    """Erase every stored cost record and report for SHOP."""
    conn = _open_db()
    try:
        counts = models.delete_shop_data(conn, shop)
    finally:
        conn.close()
    _forget_reports(shop)
    for table, count in counts.items():
        click.echo(f"{table}: {count} rows deleted")


if __name__ == "__main__":
    cli()
