"""Roll stored daily reports up into a date-range summary.

Only reports that were actually computed and stored are folded. A day
nobody computed is absent from the totals and from ``days_count``; the
aggregator never recomputes or backfills.
"""

from __future__ import annotations

from collections.abc import Sequence

from services.profit_calculator import margin
from services.schemas import ZERO, ProfitReport, RangeSummary, quantize


def aggregate_reports(reports: Sequence[ProfitReport], start_date: str, end_date: str) -> RangeSummary:
    """Sum the money fields of *reports* and recompute margin from the totals.

    Margin is net profit over summed revenue, not an average of daily margins,
    so high-revenue days weigh more.
    """
    revenue = cogs = ad_spend = fees = fixed_costs = net_profit = ZERO
    order_count = 0

    for day in reports:
        revenue += day.revenue
        cogs += day.cogs
        ad_spend += day.ad_spend
        fees += day.fees
        fixed_costs += day.fixed_costs
        net_profit += day.net_profit
        order_count += day.order_count

    return RangeSummary(
        start_date=start_date,
        end_date=end_date,
        days_count=len(reports),
        revenue=quantize(revenue),
        cogs=quantize(cogs),
        ad_spend=quantize(ad_spend),
        fees=quantize(fees),
        fixed_costs=quantize(fixed_costs),
        net_profit=quantize(net_profit),
        profit_margin=quantize(margin(net_profit, revenue)),
        order_count=order_count,
        is_profitable=net_profit >= 0,
        days=list(reports),
    )
