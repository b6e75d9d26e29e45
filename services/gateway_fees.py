"""Payment-gateway fee estimation.

Shopify reports the gateway that settled an order as a free-form name
("shopify_payments", "PayPal Express Checkout", "mercado_pago_basic", ...).
Names are folded onto a small set of canonical gateways, each with a static
percentage + fixed fee model. Anything unrecognised is treated as Shopify
Payments, the platform's native processor.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from services.schemas import ZERO, GatewayFeeSummary, Order, quantize

SHOPIFY_PAYMENTS = "shopify_payments"
STRIPE = "stripe"
PAYPAL = "paypal"
MERCADOPAGO = "mercadopago"


class FeeModel(NamedTuple):
    percentage: Decimal
    fixed: Decimal


DEFAULT_FEE = FeeModel(Decimal("0.029"), Decimal("0.30"))

GATEWAY_FEES: dict[str, FeeModel] = {
    SHOPIFY_PAYMENTS: FeeModel(Decimal("0.029"), Decimal("0.30")),
    STRIPE: FeeModel(Decimal("0.029"), Decimal("0.30")),
    PAYPAL: FeeModel(Decimal("0.0349"), Decimal("0.49")),
    MERCADOPAGO: FeeModel(Decimal("0.0499"), Decimal("0.00")),
}

_ALIASES: dict[str, str] = {
    "shopifypayments": SHOPIFY_PAYMENTS,
    "stripe": STRIPE,
    "paypal": PAYPAL,
    "paypalexpress": PAYPAL,
    "paypalcommerce": PAYPAL,
    "mercadopago": MERCADOPAGO,
    "mercadopagobasic": MERCADOPAGO,
}

_NON_LETTERS = re.compile(r"[^a-z]")


class FeeTotals(NamedTuple):
    total: Decimal
    breakdown: dict[str, GatewayFeeSummary]


def normalize_gateway(name: str | None) -> str:
    """Map a raw gateway name to its canonical gateway."""
    if not name:
        return SHOPIFY_PAYMENTS
    key = _NON_LETTERS.sub("", name.lower())
    return _ALIASES.get(key, SHOPIFY_PAYMENTS)


def is_known_gateway(name: str | None) -> bool:
    """True if *name* maps to a canonical gateway by alias rather than by default."""
    if not name:
        return False
    return _NON_LETTERS.sub("", name.lower()) in _ALIASES


def fee_for(gateway: str | None) -> FeeModel:
    return GATEWAY_FEES.get(normalize_gateway(gateway), DEFAULT_FEE)


def order_fee(total: Decimal, gateway: str | None) -> Decimal:
    """Fee charged on one order, rounded to cents."""
    model = fee_for(gateway)
    return quantize(total * model.percentage + model.fixed)


def total_fees(orders: Iterable[Order]) -> FeeTotals:
    """Sum per-order fees and break them down by canonical gateway.

    Breakdown values are rounded only after every order has been added.
    """
    running: dict[str, list] = {}
    total = ZERO

    for order in orders:
        fee = order_fee(order.total_price, order.gateway)
        gateway = normalize_gateway(order.gateway)
        bucket = running.setdefault(gateway, [0, ZERO, ZERO])
        bucket[0] += 1
        bucket[1] += order.total_price
        bucket[2] += fee
        total += fee

    breakdown = {
        gateway: GatewayFeeSummary(
            count=count,
            order_total=quantize(order_total),
            fees=quantize(fees),
        )
        for gateway, (count, order_total, fees) in running.items()
    }
    return FeeTotals(quantize(total), breakdown)


def estimate_fees(amount: Decimal, gateway: str = SHOPIFY_PAYMENTS) -> dict[str, Decimal]:
    """Fee and net payout for a hypothetical charge of *amount*."""
    fee = order_fee(amount, gateway)
    return {
        "amount": quantize(amount),
        "fee": fee,
        "net": quantize(amount - fee),
    }


def fee_rates() -> dict[str, dict[str, str]]:
    """Human-readable fee table for every canonical gateway."""
    rates = {}
    for gateway, model in GATEWAY_FEES.items():
        pct = (model.percentage * 100).quantize(Decimal("0.1"))
        fixed = quantize(model.fixed)
        rates[gateway] = {
            "percentage": f"{pct}%",
            "fixed": f"${fixed}",
            "formula": f"{pct}% + ${fixed}",
        }
    return rates
