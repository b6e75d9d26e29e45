"""Fixed-cost amortisation across billing frequencies."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

from services.schemas import ZERO, FixedCostEntry, Frequency, quantize

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = Decimal("7")
DAYS_PER_MONTH = Decimal("30")
DAYS_PER_YEAR = Decimal("365")
WEEKS_PER_MONTH = Decimal("4.33")
WEEKS_PER_YEAR = Decimal("52")
MONTHS_PER_YEAR = Decimal("12")
ONE = Decimal("1")


class Ratio(NamedTuple):
    multiply: Decimal
    divide: Decimal

    def apply(self, amount: Decimal) -> Decimal:
        return amount * self.multiply / self.divide


class Conversion(NamedTuple):
    """How one billing period maps onto a day, a month and a year."""

    daily: Ratio
    monthly: Ratio
    yearly: Ratio


_CONVERSIONS: dict[Frequency, Conversion] = {
    Frequency.DAILY: Conversion(
        daily=Ratio(ONE, ONE),
        monthly=Ratio(DAYS_PER_MONTH, ONE),
        yearly=Ratio(DAYS_PER_YEAR, ONE),
    ),
    Frequency.WEEKLY: Conversion(
        daily=Ratio(ONE, DAYS_PER_WEEK),
        monthly=Ratio(WEEKS_PER_MONTH, ONE),
        yearly=Ratio(WEEKS_PER_YEAR, ONE),
    ),
    Frequency.MONTHLY: Conversion(
        daily=Ratio(ONE, DAYS_PER_MONTH),
        monthly=Ratio(ONE, ONE),
        yearly=Ratio(MONTHS_PER_YEAR, ONE),
    ),
    Frequency.YEARLY: Conversion(
        daily=Ratio(ONE, DAYS_PER_YEAR),
        monthly=Ratio(ONE, MONTHS_PER_YEAR),
        yearly=Ratio(ONE, ONE),
    ),
}

_unmapped = set(Frequency) - set(_CONVERSIONS)
if _unmapped:
    raise RuntimeError(f"No conversion for frequencies: {sorted(f.value for f in _unmapped)}")


class FixedCostTotals(NamedTuple):
    daily: Decimal
    monthly: Decimal
    yearly: Decimal
    skipped: list[str]


def parse_frequency(value: str | None) -> Frequency | None:
    """Return the Frequency for *value*, or None if it is not one we know."""
    try:
        return Frequency((value or "").strip().lower())
    except ValueError:
        return None


def amortize(amount: Decimal, frequency: Frequency) -> tuple[Decimal, Decimal, Decimal]:
    """Spread a single cost over a day, a month and a year (unrounded)."""
    conversion = _CONVERSIONS[frequency]
    return (
        conversion.daily.apply(amount),
        conversion.monthly.apply(amount),
        conversion.yearly.apply(amount),
    )


def normalize_fixed_costs(entries: Iterable[FixedCostEntry]) -> FixedCostTotals:
    """Sum active fixed costs into daily/monthly/yearly equivalents.

    Totals are kept at full precision and rounded once at the end. Entries with
    an unknown frequency are left out and listed in ``skipped``.
    """
    daily = monthly = yearly = ZERO
    skipped: list[str] = []

    for entry in entries:
        if not entry.active:
            continue
        frequency = parse_frequency(entry.frequency)
        if frequency is None:
            logger.warning(
                "Skipping fixed cost %r with unknown frequency %r",
                entry.description, entry.frequency,
            )
            skipped.append(
                f"Fixed cost '{entry.description}' has unknown frequency '{entry.frequency}'"
            )
            continue
        d, m, y = amortize(entry.amount, frequency)
        daily += d
        monthly += m
        yearly += y

    return FixedCostTotals(quantize(daily), quantize(monthly), quantize(yearly), skipped)
