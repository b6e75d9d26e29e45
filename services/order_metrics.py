"""Reduce a day's orders to revenue and item totals."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from pydantic import BaseModel

from services.schemas import ZERO, LineItemRecord, Order, quantize


class OrderMetrics(BaseModel):
    order_count: int = 0
    items_sold: int = 0
    # Unrounded; profit is derived from this before any display rounding.
    revenue: Decimal = ZERO
    total_revenue: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_shipping: Decimal = ZERO
    total_discounts: Decimal = ZERO
    average_order_value: Decimal = Decimal("0.00")


def calculate_order_metrics(orders: Sequence[Order]) -> OrderMetrics:
    """Sum price, tax, shipping and discounts across *orders*."""
    revenue = tax = shipping = discounts = ZERO
    items_sold = 0

    for order in orders:
        revenue += order.total_price
        tax += order.total_tax
        shipping += order.total_shipping
        discounts += order.total_discounts
        for item in order.line_items:
            items_sold += item.quantity

    count = len(orders)
    return OrderMetrics(
        order_count=count,
        items_sold=items_sold,
        revenue=revenue,
        total_revenue=quantize(revenue),
        total_tax=quantize(tax),
        total_shipping=quantize(shipping),
        total_discounts=quantize(discounts),
        average_order_value=quantize(revenue / count) if count else Decimal("0.00"),
    )


def extract_line_items(orders: Sequence[Order]) -> list[LineItemRecord]:
    """Flatten orders into one record per line item."""
    return [
        LineItemRecord(
            order_id=order.id,
            variant_id=item.variant_id,
            sku=item.sku,
            quantity=item.quantity,
            price=item.price,
        )
        for order in orders
        for item in order.line_items
    ]
