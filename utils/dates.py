"""ISO calendar date helpers."""

from __future__ import annotations

import re
from datetime import date, timedelta

from services.errors import ValidationError

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date(value: object) -> bool:
    """Return True if *value* is a real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def require_date(value: object, field: str = "date") -> str:
    """Return *value* unchanged or raise ValidationError."""
    if not is_valid_date(value):
        msg = f"Invalid {field} {value!r}. Use YYYY-MM-DD"
        raise ValidationError(msg)
    return value  # type: ignore[return-value]


def require_range(start: object, end: object) -> tuple[str, str]:
    """Validate an inclusive date window; start must not be after end."""
    start_s = require_date(start, "start date")
    end_s = require_date(end, "end date")
    if start_s > end_s:
        msg = f"Date range is inverted: {start_s} is after {end_s}"
        raise ValidationError(msg)
    return start_s, end_s


def week_start(day: date) -> str:
    """Monday of the week containing *day*."""
    return (day - timedelta(days=day.weekday())).isoformat()


def month_start(day: date) -> str:
    return day.replace(day=1).isoformat()
