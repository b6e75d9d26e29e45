"""CSV export of stored daily profit reports."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from services.profit_calculator import margin
from services.schemas import ZERO, ProfitReport, quantize

HEADERS = [
    "Date",
    "Revenue",
    "COGS",
    "Gross Profit",
    "Ad Spend",
    "Gateway Fees",
    "Fixed Costs",
    "Net Profit",
    "Profit Margin %",
    "Order Count",
]


def _totals_row(days: Sequence[ProfitReport]) -> list[object]:
    revenue = cogs = gross = ad_spend = fees = fixed = net = ZERO
    orders = 0
    for day in days:
        revenue += day.revenue
        cogs += day.cogs
        gross += day.gross_profit
        ad_spend += day.ad_spend
        fees += day.fees
        fixed += day.fixed_costs
        net += day.net_profit
        orders += day.order_count
    return [
        "TOTAL",
        quantize(revenue),
        quantize(cogs),
        quantize(gross),
        quantize(ad_spend),
        quantize(fees),
        quantize(fixed),
        quantize(net),
        quantize(margin(net, revenue)),
        orders,
    ]


def generate_csv(days: Sequence[ProfitReport]) -> str:
    """One row per stored day, oldest first, followed by a TOTAL row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADERS)
    for day in days:
        writer.writerow([
            day.date,
            day.revenue,
            day.cogs,
            day.gross_profit,
            day.ad_spend,
            day.fees,
            day.fixed_costs,
            day.net_profit,
            day.profit_margin,
            day.order_count,
        ])
    writer.writerow(_totals_row(days))
    return buf.getvalue()


def export_filename(start_date: str, end_date: str) -> str:
    return f"profit-report-{start_date}-to-{end_date}.csv"
