"""Tests for services.range_aggregator."""

from __future__ import annotations

from decimal import Decimal

from services.range_aggregator import aggregate_reports
from services.schemas import ProfitReport


def _report(date: str, revenue: str, net_profit: str, orders: int = 1) -> ProfitReport:
    return ProfitReport(
        date=date,
        revenue=Decimal(revenue),
        net_profit=Decimal(net_profit),
        order_count=orders,
        cogs=Decimal("1.00"),
        fees=Decimal("0.50"),
        fixed_costs=Decimal("10.00"),
    )


def test_margin_from_totals_not_average() -> None:
    reports = [_report("2024-03-01", "100", "10"), _report("2024-03-03", "200", "-5")]
    summary = aggregate_reports(reports, "2024-03-01", "2024-03-03")
    assert summary.revenue == Decimal("300.00")
    assert summary.net_profit == Decimal("5.00")
    assert summary.profit_margin == Decimal("1.67")
    assert summary.days_count == 2
    assert summary.is_profitable is True


def test_sums_cost_fields_and_orders() -> None:
    reports = [_report("2024-03-01", "100", "10", orders=3), _report("2024-03-02", "200", "-5", orders=4)]
    summary = aggregate_reports(reports, "2024-03-01", "2024-03-02")
    assert summary.cogs == Decimal("2.00")
    assert summary.fees == Decimal("1.00")
    assert summary.fixed_costs == Decimal("20.00")
    assert summary.ad_spend == Decimal("0.00")
    assert summary.order_count == 7


def test_empty_range() -> None:
    summary = aggregate_reports([], "2024-03-01", "2024-03-31")
    assert summary.days_count == 0
    assert summary.revenue == Decimal("0.00")
    assert summary.profit_margin == Decimal("0.00")
    assert summary.is_profitable is True
    assert summary.days == []


def test_losing_range() -> None:
    summary = aggregate_reports([_report("2024-03-01", "0", "-10")], "2024-03-01", "2024-03-01")
    assert summary.net_profit == Decimal("-10.00")
    assert summary.profit_margin == Decimal("0.00")
    assert summary.is_profitable is False


def test_days_kept_in_order() -> None:
    reports = [_report("2024-03-01", "1", "1"), _report("2024-03-02", "2", "2")]
    summary = aggregate_reports(reports, "2024-03-01", "2024-03-02")
    assert [d.date for d in summary.days] == ["2024-03-01", "2024-03-02"]
    assert summary.start_date == "2024-03-01"
    assert summary.end_date == "2024-03-02"
