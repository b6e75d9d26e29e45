"""Threshold alerts attached to each daily profit report."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from services.schemas import HUNDRED, ZERO, Alert

MIN_COGS_COVERAGE = Decimal("50")
MAX_AD_SPEND_RATIO = Decimal("30")
LOW_MARGIN = Decimal("10")


class AlertInputs(NamedTuple):
    line_items: int
    matched_items: int
    revenue: Decimal
    ad_spend: Decimal
    net_profit: Decimal
    profit_margin: Decimal


def _whole_percent(value: Decimal) -> str:
    return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def generate_alerts(metrics: AlertInputs) -> list[Alert]:
    """Evaluate every rule in order; several may fire on the same day."""
    alerts: list[Alert] = []

    if metrics.line_items > 0:
        coverage = Decimal(metrics.matched_items) / Decimal(metrics.line_items) * HUNDRED
        if coverage < MIN_COGS_COVERAGE:
            alerts.append(Alert(
                type="warning",
                message=f"Only {_whole_percent(coverage)}% of products have COGS configured",
                action="Add product costs for accurate profit calculation",
            ))

    if metrics.net_profit < 0:
        alerts.append(Alert(
            type="error",
            message="You are losing money today",
            action="Review your costs and pricing strategy",
        ))

    if metrics.revenue > 0:
        ad_ratio = metrics.ad_spend / metrics.revenue * HUNDRED
        if ad_ratio > MAX_AD_SPEND_RATIO:
            alerts.append(Alert(
                type="warning",
                message=f"Ad spend is {_whole_percent(ad_ratio)}% of revenue",
                action="Consider optimizing your ad campaigns",
            ))

    if ZERO < metrics.profit_margin < LOW_MARGIN:
        alerts.append(Alert(
            type="info",
            message="Profit margin is below 10%",
            action="Consider increasing prices or reducing costs",
        ))

    return alerts
