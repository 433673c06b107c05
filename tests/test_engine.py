from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loan_sim.data_models import (
    FREQUENCY_MONTHLY,
    FREQUENCY_WEEKLY,
    REPAYMENT_INTEREST_ONLY,
    REPAYMENT_PRINCIPAL_AND_INTEREST,
    STRATEGY_REDUCE_REPAYMENT,
    STRATEGY_REDUCE_TERM,
    ExtraRepayment,
    FeeConfig,
    LoanInputs,
    OffsetConfig,
    RateChange,
)
from loan_sim.engine import calculate_payment, generate_amortisation, initial_payment, yearly_breakdown


def make_inputs(**overrides) -> LoanInputs:
    inputs = LoanInputs(
        amount=Decimal("500000"),
        annual_rate=Decimal("6"),
        years=30,
        frequency=FREQUENCY_MONTHLY,
        repayment_type=REPAYMENT_PRINCIPAL_AND_INTEREST,
        repayment_strategy=STRATEGY_REDUCE_TERM,
        start_date=date(2024, 1, 1),
    )
    return replace(inputs, **overrides)


def test_standard_thirty_year_loan():
    result = generate_amortisation(make_inputs())
    first = result.schedule[0]

    assert float(result.summary.regular_payment) == pytest.approx(2997.75, abs=0.01)
    assert first.interest_charged == Decimal("2500")
    assert float(first.principal_paid) == pytest.approx(497.75, abs=0.01)
    assert len(result.schedule) == 360
    assert float(result.schedule[-1].closing_balance) == pytest.approx(0, abs=1e-6)
    assert result.summary.payoff_date == date(2053, 12, 1)


def test_balances_chain_and_never_go_negative():
    inputs = make_inputs(
        extra_repayments=[ExtraRepayment(date(2026, 6, 1), Decimal("1500"), recurring=True)],
        offset=OffsetConfig(Decimal("10000"), Decimal("250")),
    )
    schedule = generate_amortisation(inputs).schedule

    for row in schedule:
        assert row.closing_balance >= 0
        assert row.closing_balance == row.opening_balance - row.principal_paid
        assert row.principal_paid >= 0
    for previous, current in zip(schedule, schedule[1:]):
        assert current.period_index == previous.period_index + 1
        assert current.opening_balance == previous.closing_balance


def test_zero_rate_is_straight_line():
    inputs = make_inputs(amount=Decimal("120000"), annual_rate=Decimal("0"), years=10)
    result = generate_amortisation(inputs)

    assert result.summary.regular_payment == Decimal("120000") / (10 * 12)
    assert result.summary.total_interest == 0
    assert len(result.schedule) == 120
    assert result.schedule[-1].closing_balance == 0


def test_reduce_term_totals_reconcile():
    result = generate_amortisation(make_inputs())
    summary = result.summary
    principal_total = sum(row.principal_paid for row in result.schedule)

    assert float(summary.total_paid) == pytest.approx(
        float(summary.regular_payment * len(result.schedule)), rel=1e-9
    )
    assert float(principal_total) == pytest.approx(500000, abs=1e-6)
    assert float(summary.total_interest + principal_total) == pytest.approx(
        float(summary.total_paid), abs=0.01
    )


def test_reduce_repayment_keeps_term_and_lowers_payment():
    baseline = generate_amortisation(make_inputs())
    inputs = make_inputs(
        repayment_strategy=STRATEGY_REDUCE_REPAYMENT,
        extra_repayments=[ExtraRepayment(date(2025, 1, 1), Decimal("50000"))],
    )
    result = generate_amortisation(inputs)

    assert result.summary.total_interest < baseline.summary.total_interest
    assert len(result.schedule) == 360
    assert result.schedule[12].extra_repayment == Decimal("50000")
    assert result.summary.regular_payment < baseline.summary.regular_payment


def test_reduce_term_extra_shortens_schedule():
    inputs = make_inputs(extra_repayments=[ExtraRepayment(date(2025, 1, 1), Decimal("50000"))])
    result = generate_amortisation(inputs)

    assert len(result.schedule) < 360
    assert result.schedule[-1].closing_balance == 0


def test_interest_only_never_reduces_principal_without_extras():
    inputs = make_inputs(repayment_type=REPAYMENT_INTEREST_ONLY)
    result = generate_amortisation(inputs)

    assert len(result.schedule) == 360
    assert result.summary.regular_payment == Decimal("2500")
    for row in result.schedule:
        assert row.principal_paid == row.extra_repayment == 0
        assert row.closing_balance == row.opening_balance


def test_interest_only_principal_is_the_extra():
    inputs = make_inputs(
        repayment_type=REPAYMENT_INTEREST_ONLY,
        extra_repayments=[ExtraRepayment(date(2024, 3, 1), Decimal("1000"), recurring=True)],
    )
    schedule = generate_amortisation(inputs).schedule

    for row in schedule:
        assert row.principal_paid == row.extra_repayment
    assert schedule[1].principal_paid == 0
    assert schedule[2].principal_paid == Decimal("1000")


def test_offset_reduces_interest():
    plain = generate_amortisation(make_inputs()).schedule
    with_offset = generate_amortisation(
        make_inputs(offset=OffsetConfig(Decimal("20000"), Decimal("500")))
    ).schedule

    assert with_offset[0].offset_balance == Decimal("20500")
    assert with_offset[1].offset_balance == Decimal("21000")
    assert with_offset[1].interest_charged == (
        with_offset[1].opening_balance - Decimal("20500")
    ) * Decimal("0.005")
    for k in range(1, 24):
        assert with_offset[k].interest_charged < plain[k].interest_charged


def test_offset_contributions_only_apply_to_monthly_loans():
    inputs = make_inputs(
        frequency=FREQUENCY_WEEKLY, offset=OffsetConfig(Decimal("20000"), Decimal("500"))
    )
    schedule = generate_amortisation(inputs).schedule

    assert all(row.offset_balance == Decimal("20000") for row in schedule[:60])


def test_offset_larger_than_balance_charges_no_interest():
    inputs = make_inputs(amount=Decimal("10000"), offset=OffsetConfig(Decimal("50000")))
    schedule = generate_amortisation(inputs).schedule

    assert all(row.interest_charged == 0 for row in schedule)


def test_fees_monthly_loan():
    fees = FeeConfig(upfront_fee=Decimal("600"), monthly_fee=Decimal("10"), annual_fee=Decimal("395"))
    result = generate_amortisation(make_inputs(fees=fees))
    schedule = result.schedule

    assert schedule[0].fees_applied == Decimal("405")
    assert schedule[1].fees_applied == Decimal("10")
    assert schedule[11].fees_applied == Decimal("10")
    assert schedule[12].fees_applied == Decimal("405")
    assert result.summary.total_fees == Decimal("600") + sum(row.fees_applied for row in schedule)


def test_fees_weekly_loan_prorated():
    fees = FeeConfig(monthly_fee=Decimal("10"), annual_fee=Decimal("100"))
    schedule = generate_amortisation(make_inputs(frequency=FREQUENCY_WEEKLY, fees=fees)).schedule
    weekly_fee = Decimal("10") * 12 / 52

    assert schedule[1].fees_applied == weekly_fee
    assert schedule[0].fees_applied == weekly_fee + 100
    assert schedule[52].fees_applied == weekly_fee + 100


def test_upfront_fee_seeds_totals():
    inputs = make_inputs(amount=Decimal("0"), fees=FeeConfig(upfront_fee=Decimal("750")))
    result = generate_amortisation(inputs)

    assert result.schedule == []
    assert result.summary.total_fees == Decimal("750")
    assert result.summary.total_paid == Decimal("750")
    assert result.summary.payoff_date == date(2024, 1, 1)


def test_rate_change_applies_from_effective_date():
    inputs = make_inputs(rate_changes=[RateChange(date(2025, 1, 1), Decimal("7.2"))])
    schedule = generate_amortisation(inputs).schedule

    assert schedule[11].interest_charged == schedule[11].opening_balance * Decimal("0.005")
    assert schedule[12].interest_charged == schedule[12].opening_balance * Decimal("0.006")
    # a fixed payment no longer clears the loan within the term
    assert len(schedule) == 360
    assert schedule[-1].closing_balance > 0


def test_reduce_repayment_follows_rate_changes():
    inputs = make_inputs(
        repayment_strategy=STRATEGY_REDUCE_REPAYMENT,
        rate_changes=[RateChange(date(2025, 1, 1), Decimal("7"))],
    )
    result = generate_amortisation(inputs)
    baseline_payment = calculate_payment(Decimal("500000"), Decimal("6"), 30, 12)

    assert result.summary.regular_payment > baseline_payment
    assert float(result.schedule[-1].closing_balance) == pytest.approx(0, abs=1e-6)


def test_loan_paid_off_early_stops_schedule():
    inputs = make_inputs(
        amount=Decimal("100000"),
        extra_repayments=[ExtraRepayment(date(2024, 2, 1), Decimal("200000"))],
    )
    result = generate_amortisation(inputs)

    assert len(result.schedule) == 2
    assert result.schedule[-1].closing_balance == 0
    assert result.summary.payoff_date == date(2024, 2, 1)


def test_weekly_dates_advance_seven_days():
    schedule = generate_amortisation(make_inputs(frequency=FREQUENCY_WEEKLY)).schedule

    assert schedule[0].date == date(2024, 1, 1)
    assert schedule[1].date == date(2024, 1, 8)
    assert len(schedule) == 30 * 52


def test_month_end_start_dates_are_clamped():
    schedule = generate_amortisation(make_inputs(start_date=date(2024, 1, 31))).schedule

    assert [row.date for row in schedule[:4]] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]


def test_calculate_payment_fractional_term():
    payment = calculate_payment(Decimal("1000"), Decimal("12"), Decimal("0.5"), 12)

    assert float(payment) == pytest.approx(172.55, abs=0.01)


def test_yearly_breakdown_matches_schedule():
    inputs = make_inputs(amount=Decimal("120000"), annual_rate=Decimal("0"), years=10)
    schedule = generate_amortisation(inputs).schedule
    breakdown = yearly_breakdown(schedule)

    assert [year.year for year in breakdown] == list(range(2024, 2034))
    assert all(year.principal == Decimal("12000") for year in breakdown)
    assert sum(year.principal for year in breakdown) == Decimal("120000")


def test_reduce_repayment_payment_drops_to_zero_once_paid_off():
    inputs = make_inputs(
        amount=Decimal("100000"),
        repayment_strategy=STRATEGY_REDUCE_REPAYMENT,
        extra_repayments=[ExtraRepayment(date(2024, 3, 1), Decimal("200000"))],
    )
    result = generate_amortisation(inputs)

    assert len(result.schedule) == 3
    assert result.schedule[-1].closing_balance == 0
    assert result.summary.regular_payment == 0


def test_initial_payment_uses_rate_on_start_date():
    assert initial_payment(make_inputs()) == calculate_payment(Decimal("500000"), Decimal("6"), 30, 12)
    assert initial_payment(make_inputs(repayment_type=REPAYMENT_INTEREST_ONLY)) == Decimal("2500")
    repriced = make_inputs(rate_changes=[RateChange(date(2024, 1, 1), Decimal("7"))])
    assert initial_payment(repriced) == calculate_payment(Decimal("500000"), Decimal("7"), 30, 12)
