"""Tests for services.cost_normalizer."""

from __future__ import annotations

from decimal import Decimal

from services.cost_normalizer import amortize, normalize_fixed_costs, parse_frequency
from services.schemas import FixedCostEntry, Frequency


def _entry(amount: str, frequency: str, active: bool = True, description: str = "Rent") -> FixedCostEntry:
    return FixedCostEntry(description=description, amount=Decimal(amount), frequency=frequency, active=active)


class TestParseFrequency:
    def test_known_values(self) -> None:
        assert parse_frequency("daily") is Frequency.DAILY
        assert parse_frequency("yearly") is Frequency.YEARLY

    def test_case_and_whitespace_insensitive(self) -> None:
        assert parse_frequency(" Monthly ") is Frequency.MONTHLY

    def test_unknown_returns_none(self) -> None:
        assert parse_frequency("quarterly") is None
        assert parse_frequency(None) is None


class TestAmortize:
    def test_weekly(self) -> None:
        daily, monthly, yearly = amortize(Decimal("70"), Frequency.WEEKLY)
        assert daily == Decimal("10")
        assert monthly == Decimal("303.10")
        assert yearly == Decimal("3640")

    def test_daily(self) -> None:
        daily, monthly, yearly = amortize(Decimal("2"), Frequency.DAILY)
        assert (daily, monthly, yearly) == (Decimal("2"), Decimal("60"), Decimal("730"))


class TestNormalizeFixedCosts:
    def test_monthly_300(self) -> None:
        totals = normalize_fixed_costs([_entry("300", "monthly")])
        assert totals.daily == Decimal("10.00")
        assert totals.monthly == Decimal("300.00")
        assert totals.yearly == Decimal("3600.00")
        assert totals.skipped == []

    def test_yearly_365(self) -> None:
        totals = normalize_fixed_costs([_entry("365", "yearly")])
        assert totals.daily == Decimal("1.00")
        assert totals.monthly == Decimal("30.42")
        assert totals.yearly == Decimal("365.00")

    def test_empty_is_zero(self) -> None:
        totals = normalize_fixed_costs([])
        assert totals.daily == Decimal("0.00")
        assert totals.monthly == Decimal("0.00")
        assert totals.yearly == Decimal("0.00")

    def test_inactive_entries_ignored(self) -> None:
        totals = normalize_fixed_costs([_entry("300", "monthly", active=False)])
        assert totals.daily == Decimal("0.00")

    def test_rounds_once_after_summing(self) -> None:
        # Three 10/month costs are 0.333... each per day; rounding each first would give 0.99
        totals = normalize_fixed_costs([_entry("10", "monthly") for _ in range(3)])
        assert totals.daily == Decimal("1.00")

    def test_unknown_frequency_skipped_and_reported(self) -> None:
        totals = normalize_fixed_costs([
            _entry("300", "monthly"),
            _entry("900", "quarterly", description="Accountant"),
        ])
        assert totals.daily == Decimal("10.00")
        assert totals.skipped == ["Fixed cost 'Accountant' has unknown frequency 'quarterly'"]

    def test_mixed_frequencies(self) -> None:
        totals = normalize_fixed_costs([
            _entry("300", "monthly"),
            _entry("5", "daily"),
            _entry("70", "weekly"),
        ])
        assert totals.daily == Decimal("25.00")
