"""Per-period lookups consulted by the amortisation engine.

``resolve_rate`` answers which annual rate applies on a date given a list of
dated rate changes, and ``extra_for_date`` sums the extra repayments that fall
on a date. Both are pure: they never reorder or modify the lists passed in.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from .data_models import ExtraRepayment, RateChange


def _sort_rate_changes(rate_changes: Iterable[RateChange]) -> List[RateChange]:
    # sorted() is stable, so changes sharing a date keep their input order
    return sorted(rate_changes, key=lambda c: c.effective_date)


def resolve_rate(
    base_rate: Decimal, rate_changes: Optional[Iterable[RateChange]], on: date
) -> Decimal:
    """Return the annual rate (percent) in effect on ``on``.

    The latest change whose effective date is on or before ``on`` wins; when
    several changes share that date, the last one listed wins. Without a
    qualifying change the base rate applies.
    """
    rate = base_rate
    if not rate_changes:
        return rate
    for change in _sort_rate_changes(rate_changes):
        if change.effective_date > on:
            break
        rate = change.annual_rate
    return rate


def _matches(extra: ExtraRepayment, on: date) -> bool:
    if not extra.recurring:
        return on == extra.effective_date
    if on < extra.effective_date:
        return False
    return extra.end_date is None or on <= extra.end_date


def extra_for_date(extras: Optional[Iterable[ExtraRepayment]], on: date) -> Decimal:
    """Return the total extra repayment due on ``on``."""
    total = Decimal("0")
    if not extras:
        return total
    for extra in extras:
        if _matches(extra, on):
            total += extra.amount
    return total
