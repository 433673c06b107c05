"""Utility functions for the loan simulator.

This module provides helpers for parsing user input into Python data types and
for handling dates: adding months with end-of-month clamping, advancing a date
by one repayment period and parsing ISO-8601 date strings.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal, getcontext

from .data_models import FREQUENCY_FORTNIGHTLY, FREQUENCY_WEEKLY

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def period_date(start: date, frequency: str, periods: int) -> date:
    """Return the date ``periods`` repayment periods after ``start``.

    Weekly and fortnightly periods are 7 and 14 days. Monthly periods are
    counted from ``start`` rather than chained, so a loan starting on the 31st
    falls on the last day of short months and returns to the 31st afterwards.
    """
    if frequency == FREQUENCY_WEEKLY:
        return start + timedelta(days=7 * periods)
    if frequency == FREQUENCY_FORTNIGHTLY:
        return start + timedelta(days=14 * periods)
    return add_months(start, periods)


def parse_iso_date(value) -> date:
    """Parse an ISO-8601 date or date/time string into a ``date``.

    ``date`` and ``datetime`` instances are accepted as-is; the time of day is
    dropped.

    Raises
    ------
    ValueError
        If the value is not a valid ISO-8601 date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        if "T" in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except Exception as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def to_iso_timestamp(dt: date) -> str:
    """Return ``dt`` as a full ISO timestamp at midnight."""
    return datetime(dt.year, dt.month, dt.day).isoformat()


def to_decimal(value) -> Decimal:
    """Convert an int, float, string or Decimal into a ``Decimal``.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, int):
        return Decimal(value)
    return decimal_from_str(str(value))


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        result = Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("500000") and shorthand such as "500k" meaning
    500_000 or "1.2m" meaning 1_200_000.
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return decimal_from_str(text) * factor
