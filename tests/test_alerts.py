"""Tests for services.alerts."""

from __future__ import annotations

from decimal import Decimal

from services.alerts import AlertInputs, generate_alerts


def _inputs(**overrides: object) -> AlertInputs:
    values = {
        "line_items": 4,
        "matched_items": 4,
        "revenue": Decimal("1000"),
        "ad_spend": Decimal("100"),
        "net_profit": Decimal("300"),
        "profit_margin": Decimal("30"),
    }
    values.update(overrides)
    return AlertInputs(**values)  # type: ignore[arg-type]


def test_healthy_day_has_no_alerts() -> None:
    assert generate_alerts(_inputs()) == []


def test_low_cogs_coverage_warning() -> None:
    alerts = generate_alerts(_inputs(line_items=3, matched_items=1))
    assert len(alerts) == 1
    assert alerts[0].type == "warning"
    assert alerts[0].message == "Only 33% of products have COGS configured"


def test_exactly_half_coverage_does_not_warn() -> None:
    assert generate_alerts(_inputs(line_items=4, matched_items=2)) == []


def test_no_line_items_skips_coverage_rule() -> None:
    assert generate_alerts(_inputs(line_items=0, matched_items=0)) == []


def test_losing_money_error() -> None:
    alerts = generate_alerts(_inputs(net_profit=Decimal("-5"), profit_margin=Decimal("-0.5")))
    assert [a.type for a in alerts] == ["error"]
    assert alerts[0].message == "You are losing money today"


def test_losing_money_on_zero_revenue_day() -> None:
    alerts = generate_alerts(_inputs(
        line_items=0,
        matched_items=0,
        revenue=Decimal("0"),
        ad_spend=Decimal("0"),
        net_profit=Decimal("-10"),
        profit_margin=Decimal("0"),
    ))
    assert [a.type for a in alerts] == ["error"]


def test_ad_spend_ratio_threshold() -> None:
    alerts = generate_alerts(_inputs(ad_spend=Decimal("350")))
    assert [a.message for a in alerts] == ["Ad spend is 35% of revenue"]
    assert generate_alerts(_inputs(ad_spend=Decimal("250"))) == []
    assert generate_alerts(_inputs(ad_spend=Decimal("300"))) == []


def test_low_margin_info() -> None:
    alerts = generate_alerts(_inputs(net_profit=Decimal("50"), profit_margin=Decimal("5")))
    assert [a.type for a in alerts] == ["info"]
    assert alerts[0].message == "Profit margin is below 10%"


def test_margin_exactly_ten_is_not_low() -> None:
    assert generate_alerts(_inputs(net_profit=Decimal("100"), profit_margin=Decimal("10"))) == []


def test_margin_just_below_ten_is_low() -> None:
    alerts = generate_alerts(_inputs(net_profit=Decimal("99.9"), profit_margin=Decimal("9.99")))
    assert [a.type for a in alerts] == ["info"]


def test_coverage_just_below_half_warns() -> None:
    alerts = generate_alerts(_inputs(line_items=101, matched_items=50))
    assert [a.message for a in alerts] == ["Only 50% of products have COGS configured"]


def test_zero_margin_is_not_low_margin() -> None:
    assert generate_alerts(_inputs(net_profit=Decimal("0"), profit_margin=Decimal("0"))) == []


def test_rules_fire_in_order() -> None:
    alerts = generate_alerts(_inputs(
        line_items=4,
        matched_items=1,
        ad_spend=Decimal("600"),
        net_profit=Decimal("-50"),
        profit_margin=Decimal("-5"),
    ))
    assert [a.type for a in alerts] == ["warning", "error", "warning"]
    assert alerts[2].message == "Ad spend is 60% of revenue"
