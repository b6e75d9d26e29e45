"""Profit engine: fetch inputs, compute, persist, cache.

The engine owns the order of side effects around the pure calculator:

* the date is validated before any collaborator is called;
* every input is fetched before anything is written, and a failing
  collaborator aborts the run as a ComputationError naming it;
* the finished report is written with a single upsert, then cached.

Range requests only read stored reports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date as date_cls
from typing import Any, TypeVar

from services import profit_calculator
from services.errors import ComputationError
from services.ports import AdSpendSource, CostSource, FixedCostSource, OrderSource, ReportStore
from services.range_aggregator import aggregate_reports
from services.report_cache import InMemoryReportCache, ReportCache, cache_key
from services.schemas import ProfitReport, RangeSummary
from utils.dates import month_start, require_date, require_range, week_start

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _fetch(source: str, call: Callable[[], T]) -> T:
    """Run a collaborator call, turning any failure into a ComputationError."""
    try:
        return call()
    except ComputationError:
        raise
    except Exception as exc:
        logger.warning("Fetching %s failed: %s", source, exc)
        raise ComputationError(source, str(exc)) from exc


class ProfitEngine:
    def __init__(
        self,
        orders: OrderSource,
        costs: CostSource,
        ad_spend: AdSpendSource,
        fixed_costs: FixedCostSource,
        store: ReportStore,
        cache: ReportCache | None = None,
        currency: str = "USD",
    ) -> None:
        self.orders = orders
        self.costs = costs
        self.ad_spend = ad_spend
        self.fixed_costs = fixed_costs
        self.store = store
        self.cache = cache if cache is not None else InMemoryReportCache()
        self.currency = currency

    # ------------------------------------------------------------------
    # Daily reports
    # ------------------------------------------------------------------

    def calculate_profit(self, shop: str, date: str) -> ProfitReport:
        """Compute, store and return the profit report for *shop* on *date*."""
        require_date(date)

        orders = _fetch("orders", lambda: self.orders.fetch_orders_for_date(shop, date))
        variant_ids = list(dict.fromkeys(
            item.variant_id
            for order in orders
            for item in order.line_items
            if item.variant_id
        ))
        cost_lookup = _fetch("costs", lambda: self.costs.get_cost_lookup(shop, variant_ids))
        ad_spend = _fetch("ad_spend", lambda: self.ad_spend.get_ad_spend(shop, date))
        fixed_costs = _fetch("fixed_costs", lambda: self.fixed_costs.get_active_fixed_costs(shop))

        report = profit_calculator.compute_daily_report(
            shop,
            date,
            orders,
            cost_lookup,
            [entry for entry in ad_spend if entry.date == date],
            fixed_costs,
            currency=self.currency,
        )

        self.store.put_profit_report(shop, date, report)
        self.cache.put(cache_key(shop, date), report)
        return report

    def get_daily_report(self, shop: str, date: str, ttl: float) -> ProfitReport:
        """Return a cached report younger than *ttl* seconds, else recompute."""
        require_date(date)
        cached = self.cache.get(cache_key(shop, date), ttl)
        if cached is not None:
            logger.debug("Cache hit for %s on %s", shop, date)
            return cached
        return self.calculate_profit(shop, date)

    # ------------------------------------------------------------------
    # Ranges
    # ------------------------------------------------------------------

    def aggregate_range(self, shop: str, start_date: str, end_date: str) -> RangeSummary:
        """Fold the stored daily reports in [start_date, end_date]."""
        start_date, end_date = require_range(start_date, end_date)
        reports = self.store.scan(shop, start_date, end_date)
        return aggregate_reports(reports, start_date, end_date)

    def dashboard_summary(self, shop: str, today: date_cls | None = None) -> dict[str, Any]:
        """Today's stored report plus week-to-date and month-to-date roll-ups."""
        today = today or date_cls.today()
        today_s = today.isoformat()

        today_report = self.store.get_profit_report(shop, today_s)
        if today_report is None:
            today_report = ProfitReport.placeholder(today_s, self.currency)

        return {
            "today": today_report,
            "this_week": self.aggregate_range(shop, week_start(today), today_s),
            "this_month": self.aggregate_range(shop, month_start(today), today_s),
        }
