"""Daily profit calculation.

Combines sales, product cost, ad spend, gateway fees and amortised fixed
costs into one ``ProfitReport``. Everything here is a pure function of its
arguments; fetching inputs and persisting the result is the engine's job
(see ``services.profit_engine``).

Step order matters for numeric reproducibility:

1. reduce orders to revenue and item metrics
2. flatten line items and match COGS
3. sum ad spend, keeping the platform breakdown in first-seen order
4. estimate gateway fees over the same orders
5. normalise fixed costs and take the daily figure
6. derive gross/net profit and margins at full precision
7. run the alert policy
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from services.alerts import AlertInputs, generate_alerts
from services.cogs_matcher import match_cogs
from services.cost_normalizer import normalize_fixed_costs
from services.gateway_fees import is_known_gateway, normalize_gateway, total_fees
from services.order_metrics import calculate_order_metrics, extract_line_items
from services.schemas import (
    HUNDRED,
    ZERO,
    AdSpendEntry,
    FixedCostEntry,
    Order,
    ProfitReport,
    quantize,
    to_decimal,
)

logger = logging.getLogger(__name__)

AdSpendInput = Iterable[AdSpendEntry] | Mapping[str, Decimal]


def sum_ad_spend(ad_spend: AdSpendInput) -> tuple[Decimal, dict[str, Decimal]]:
    """Total spend plus a per-platform breakdown in first-seen order.

    Accepts entries already scoped to the report date, or a plain
    ``{platform: spend}`` mapping. Repeated platforms add up.
    """
    if isinstance(ad_spend, Mapping):
        pairs = [(platform, to_decimal(spend)) for platform, spend in ad_spend.items()]
    else:
        pairs = [(entry.platform, entry.spend) for entry in ad_spend]

    by_platform: dict[str, Decimal] = {}
    total = ZERO
    for platform, spend in pairs:
        by_platform[platform] = by_platform.get(platform, ZERO) + spend
        total += spend
    return total, by_platform


def margin(amount: Decimal, revenue: Decimal) -> Decimal:
    """``amount`` as a percentage of revenue; 0 when there is no revenue."""
    if revenue > 0:
        return amount / revenue * HUNDRED
    return ZERO


def compute_daily_report(
    shop: str,
    date: str,
    orders: Sequence[Order],
    cost_lookup: Mapping[str, Decimal],
    ad_spend: AdSpendInput,
    fixed_costs: Iterable[FixedCostEntry],
    currency: str = "USD",
) -> ProfitReport:
    """Compute the profit report for *shop* on *date* from already-fetched inputs."""
    metrics = calculate_order_metrics(orders)

    line_items = extract_line_items(orders)
    cogs = match_cogs(line_items, cost_lookup)

    ad_total, ad_by_platform = sum_ad_spend(ad_spend)

    fees = total_fees(orders)
    data_quality = [
        f"Gateway '{name}' not recognised; fees estimated at {normalize_gateway(name)} rates"
        for name in dict.fromkeys(o.gateway for o in orders if o.gateway)
        if not is_known_gateway(name)
    ]

    fixed = normalize_fixed_costs(fixed_costs)
    data_quality.extend(fixed.skipped)

    revenue = metrics.revenue
    gross_profit = revenue - cogs.total
    net_profit = gross_profit - ad_total - fees.total - fixed.daily
    gross_margin = margin(gross_profit, revenue)
    profit_margin = margin(net_profit, revenue)

    alerts = generate_alerts(AlertInputs(
        line_items=cogs.total_items,
        matched_items=cogs.matched_items,
        revenue=revenue,
        ad_spend=ad_total,
        net_profit=net_profit,
        profit_margin=profit_margin,
    ))

    report = ProfitReport(
        date=date,
        currency=currency,
        revenue=quantize(revenue),
        order_count=metrics.order_count,
        items_sold=metrics.items_sold,
        average_order_value=metrics.average_order_value,
        cogs=quantize(cogs.total),
        cogs_match_rate=quantize(cogs.match_rate),
        ad_spend=quantize(ad_total),
        ad_spend_by_platform={k: quantize(v) for k, v in ad_by_platform.items()},
        fees=fees.total,
        fee_breakdown=fees.breakdown,
        fixed_costs=fixed.daily,
        gross_profit=quantize(gross_profit),
        gross_margin=quantize(gross_margin),
        net_profit=quantize(net_profit),
        profit_margin=quantize(profit_margin),
        is_profitable=net_profit >= 0,
        alerts=alerts,
        data_quality=data_quality,
    )
    logger.debug("Computed profit for %s on %s: net %s", shop, date, report.net_profit)
    return report
