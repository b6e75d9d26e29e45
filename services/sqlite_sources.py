"""SQLite implementations of the profit engine's collaborator ports."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from decimal import Decimal

import database.models as models
from services.ports import AdSpendSource, CostSource, FixedCostSource, ReportStore
from services.schemas import AdSpendEntry, FixedCostEntry, ProfitReport

logger = logging.getLogger(__name__)


class SqliteCostSource(CostSource):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get_cost_lookup(self, shop: str, variant_ids: Iterable[str]) -> dict[str, Decimal]:
        return {
            variant_id: Decimal(cogs)
            for variant_id, cogs in models.get_cost_map(self.conn, shop, variant_ids).items()
        }


class SqliteAdSpendSource(AdSpendSource):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get_ad_spend(self, shop: str, date: str) -> list[AdSpendEntry]:
        return [
            AdSpendEntry(
                platform=row["platform"],
                date=row["date"],
                spend=Decimal(row["spend"]),
                impressions=row["impressions"],
                clicks=row["clicks"],
            )
            for row in models.list_ad_spend(self.conn, shop, date)
        ]


class SqliteFixedCostSource(FixedCostSource):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get_active_fixed_costs(self, shop: str) -> list[FixedCostEntry]:
        return [
            FixedCostEntry(
                description=row["description"],
                amount=Decimal(row["amount"]),
                frequency=row["frequency"],
                category=row["category"],
                active=bool(row["active"]),
            )
            for row in models.list_fixed_costs(self.conn, shop, active_only=True)
        ]


class SqliteReportStore(ReportStore):
    """Stores each report as one JSON document per (shop, date)."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def put_profit_report(self, shop: str, date: str, report: ProfitReport) -> None:
        models.upsert_daily_metrics(
            self.conn,
            shop,
            date,
            payload=report.model_dump_json(),
            revenue=str(report.revenue),
            net_profit=str(report.net_profit),
        )
        logger.info("Stored profit report for %s on %s (net %s)", shop, date, report.net_profit)

    def get_profit_report(self, shop: str, date: str) -> ProfitReport | None:
        row = models.get_daily_metrics(self.conn, shop, date)
        if row is None:
            return None
        return ProfitReport.model_validate_json(row["payload"])

    def scan(self, shop: str, date_low: str, date_high: str) -> list[ProfitReport]:
        return [
            ProfitReport.model_validate_json(row["payload"])
            for row in models.list_daily_metrics(self.conn, shop, date_low, date_high)
        ]
