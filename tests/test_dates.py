"""Tests for utils.dates."""

from __future__ import annotations

from datetime import date

import pytest

from services.errors import ValidationError
from utils.dates import is_valid_date, month_start, require_date, require_range, week_start


@pytest.mark.parametrize("value", ["2024-03-15", "2024-02-29", "1999-12-31"])
def test_valid_dates(value: str) -> None:
    assert is_valid_date(value)


@pytest.mark.parametrize("value", ["2023-02-29", "2024-13-01", "2024-3-15", "20240315", "", None, 20240315])
def test_invalid_dates(value: object) -> None:
    assert not is_valid_date(value)


def test_require_date_message() -> None:
    with pytest.raises(ValidationError, match="Use YYYY-MM-DD"):
        require_date("yesterday")


def test_require_range_allows_single_day() -> None:
    assert require_range("2024-03-01", "2024-03-01") == ("2024-03-01", "2024-03-01")


def test_require_range_rejects_inverted() -> None:
    with pytest.raises(ValidationError, match="inverted"):
        require_range("2024-03-02", "2024-03-01")


def test_week_start_is_monday() -> None:
    assert week_start(date(2024, 3, 17)) == "2024-03-11"
    assert week_start(date(2024, 3, 11)) == "2024-03-11"


def test_month_start() -> None:
    assert month_start(date(2024, 2, 29)) == "2024-02-01"
