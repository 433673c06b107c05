from datetime import date
from decimal import Decimal

from loan_sim.data_models import ExtraRepayment, RateChange
from loan_sim.schedule_rules import extra_for_date, resolve_rate

BASE = Decimal("6")


def test_base_rate_without_changes():
    assert resolve_rate(BASE, None, date(2030, 1, 1)) == BASE
    assert resolve_rate(BASE, [], date(2030, 1, 1)) == BASE


def test_latest_change_on_or_before_date_wins():
    changes = [
        RateChange(date(2026, 1, 1), Decimal("5")),
        RateChange(date(2025, 1, 1), Decimal("7")),
    ]

    assert resolve_rate(BASE, changes, date(2024, 12, 31)) == BASE
    assert resolve_rate(BASE, changes, date(2025, 1, 1)) == Decimal("7")
    assert resolve_rate(BASE, changes, date(2025, 12, 31)) == Decimal("7")
    assert resolve_rate(BASE, changes, date(2026, 1, 1)) == Decimal("5")
    # input order is left untouched
    assert changes[0].effective_date == date(2026, 1, 1)


def test_same_day_changes_resolve_to_last_listed():
    changes = [
        RateChange(date(2025, 1, 1), Decimal("7")),
        RateChange(date(2025, 1, 1), Decimal("6.5")),
    ]

    assert resolve_rate(BASE, changes, date(2025, 6, 1)) == Decimal("6.5")


def test_one_off_matches_exact_day_only():
    extras = [ExtraRepayment(date(2025, 3, 15), Decimal("1000"))]

    assert extra_for_date(extras, date(2025, 3, 15)) == Decimal("1000")
    assert extra_for_date(extras, date(2025, 3, 14)) == 0
    assert extra_for_date(extras, date(2025, 4, 15)) == 0


def test_recurring_respects_start_and_end():
    extras = [
        ExtraRepayment(date(2025, 1, 1), Decimal("200"), recurring=True, end_date=date(2025, 6, 1))
    ]

    assert extra_for_date(extras, date(2024, 12, 1)) == 0
    assert extra_for_date(extras, date(2025, 1, 1)) == Decimal("200")
    assert extra_for_date(extras, date(2025, 6, 1)) == Decimal("200")
    assert extra_for_date(extras, date(2025, 7, 1)) == 0


def test_matching_entries_sum():
    extras = [
        ExtraRepayment(date(2025, 1, 1), Decimal("200"), recurring=True),
        ExtraRepayment(date(2025, 2, 1), Decimal("50"), recurring=True),
        ExtraRepayment(date(2025, 2, 1), Decimal("5000")),
    ]

    assert extra_for_date(extras, date(2025, 2, 1)) == Decimal("5250")
    assert extra_for_date(extras, date(2025, 3, 1)) == Decimal("250")
    assert extra_for_date(None, date(2025, 3, 1)) == 0
