"""Join sold line items against per-variant unit costs."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import NamedTuple

from services.schemas import HUNDRED, ZERO, LineItemRecord


class CogsMatch(NamedTuple):
    total: Decimal
    matched_items: int
    missing_items: int

    @property
    def total_items(self) -> int:
        return self.matched_items + self.missing_items

    @property
    def match_rate(self) -> Decimal:
        """Percentage of line items with a known cost; 100 when nothing sold."""
        if self.total_items == 0:
            return HUNDRED
        return Decimal(self.matched_items) / Decimal(self.total_items) * HUNDRED


def match_cogs(records: Sequence[LineItemRecord], cost_lookup: Mapping[str, Decimal]) -> CogsMatch:
    """Accumulate ``unit cost × quantity`` for every line item with a known cost.

    Lookup is by variant id only. A missing key or a cost of zero both count
    as "no cost configured".
    """
    total = ZERO
    matched = missing = 0

    for record in records:
        cost = cost_lookup.get(record.variant_id) if record.variant_id else None
        if cost is not None and cost > 0:
            total += cost * record.quantity
            matched += 1
        else:
            missing += 1

    return CogsMatch(total, matched, missing)
