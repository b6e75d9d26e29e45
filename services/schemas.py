"""Domain models shared by the profit engine.

Money is carried as ``Decimal`` end to end. Pydantic serialises Decimal
fields as fixed-point strings in JSON mode, which keeps stored reports
byte-stable across recomputation.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TWO_DP = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def quantize(value: Decimal) -> Decimal:
    """Round to 2 fraction digits, half up."""
    return value.quantize(TWO_DP, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Parse a Shopify money value; missing or garbage reads as zero."""
    if value is None or value == "":
        return ZERO
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unparseable money value %r, treating as 0", value)
        return ZERO
    if not result.is_finite():
        logger.warning("Non-finite money value %r, treating as 0", value)
        return ZERO
    return result


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class LineItem(BaseModel):
    variant_id: str | None = None
    product_id: str | None = None
    sku: str = ""
    title: str = ""
    quantity: int = 0
    price: Decimal = ZERO


class Order(BaseModel):
    """A paid order, reduced to the fields profit calculation reads."""

    id: str
    total_price: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_shipping: Decimal = ZERO
    total_discounts: Decimal = ZERO
    gateway: str = ""
    line_items: list[LineItem] = Field(default_factory=list)

    @classmethod
    def from_shopify(cls, payload: dict[str, Any]) -> Order:
        """Build an Order from a Shopify Admin REST order payload."""
        shipping = (
            ((payload.get("total_shipping_price_set") or {}).get("shop_money") or {}).get("amount")
        )
        gateway = payload.get("gateway") or next(iter(payload.get("payment_gateway_names") or []), "")

        items = []
        for item in payload.get("line_items") or []:
            variant_id = item.get("variant_id")
            product_id = item.get("product_id")
            items.append(
                LineItem(
                    variant_id=str(variant_id) if variant_id is not None else None,
                    product_id=str(product_id) if product_id is not None else None,
                    sku=item.get("sku") or "",
                    title=item.get("title") or "",
                    quantity=int(item.get("quantity") or 0),
                    price=to_decimal(item.get("price")),
                )
            )

        return cls(
            id=str(payload.get("id", "")),
            total_price=to_decimal(payload.get("total_price")),
            total_tax=to_decimal(payload.get("total_tax")),
            total_shipping=to_decimal(shipping),
            total_discounts=to_decimal(payload.get("total_discounts")),
            gateway=gateway or "",
            line_items=items,
        )


class LineItemRecord(BaseModel):
    """One sold line item; the unit COGS matching works on."""

    order_id: str
    variant_id: str | None = None
    sku: str = ""
    quantity: int = 0
    price: Decimal = ZERO


class AdSpendEntry(BaseModel):
    platform: str
    date: str
    spend: Decimal = Field(default=ZERO, ge=0)
    impressions: int = 0
    clicks: int = 0


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class FixedCostEntry(BaseModel):
    description: str
    amount: Decimal = Field(default=ZERO, ge=0)
    # Kept as a raw string so bad stored values degrade instead of failing validation.
    frequency: str = Frequency.MONTHLY.value
    category: str = "other"
    active: bool = True


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class Alert(BaseModel):
    type: str
    message: str
    action: str


class GatewayFeeSummary(BaseModel):
    count: int = 0
    order_total: Decimal = ZERO
    fees: Decimal = ZERO


class ProfitReport(BaseModel):
    """Profit for one shop and one calendar day."""

    date: str
    currency: str = "USD"

    revenue: Decimal = ZERO
    order_count: int = 0
    items_sold: int = 0
    average_order_value: Decimal = ZERO

    cogs: Decimal = ZERO
    cogs_match_rate: Decimal = Decimal("100.00")
    ad_spend: Decimal = ZERO
    ad_spend_by_platform: dict[str, Decimal] = Field(default_factory=dict)
    fees: Decimal = ZERO
    fee_breakdown: dict[str, GatewayFeeSummary] = Field(default_factory=dict)
    fixed_costs: Decimal = ZERO

    gross_profit: Decimal = ZERO
    gross_margin: Decimal = ZERO
    net_profit: Decimal = ZERO
    profit_margin: Decimal = ZERO

    is_profitable: bool = True
    alerts: list[Alert] = Field(default_factory=list)
    data_quality: list[str] = Field(default_factory=list)

    @classmethod
    def placeholder(cls, date: str, currency: str = "USD") -> ProfitReport:
        """Zeroed report for a day nobody has computed yet."""
        return cls(
            date=date,
            currency=currency,
            revenue=Decimal("0.00"),
            cogs=Decimal("0.00"),
            ad_spend=Decimal("0.00"),
            fees=Decimal("0.00"),
            fixed_costs=Decimal("0.00"),
            gross_profit=Decimal("0.00"),
            net_profit=Decimal("0.00"),
            average_order_value=Decimal("0.00"),
            gross_margin=Decimal("0.00"),
            profit_margin=Decimal("0.00"),
        )


class RangeSummary(BaseModel):
    start_date: str
    end_date: str
    days_count: int = 0

    revenue: Decimal = ZERO
    cogs: Decimal = ZERO
    ad_spend: Decimal = ZERO
    fees: Decimal = ZERO
    fixed_costs: Decimal = ZERO
    net_profit: Decimal = ZERO
    profit_margin: Decimal = ZERO
    order_count: int = 0
    is_profitable: bool = True

    days: list[ProfitReport] = Field(default_factory=list)
