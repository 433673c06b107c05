"""Core calculation engine for the loan simulator.

This module implements the period-by-period amortisation of a loan repaid
weekly, fortnightly or monthly. Each period resolves the rate in effect,
charges interest on the balance net of any offset account, applies the
scheduled payment, extra repayments and fees, and, under the reduce-repayment
strategy, re-amortises the remaining balance over the remaining term. Results
are returned as an ``AmortisationResult`` holding the schedule rows and a
summary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, getcontext
from typing import Dict, Iterable, List, Optional

from .data_models import (
    FREQUENCY_MONTHLY,
    REPAYMENT_INTEREST_ONLY,
    REPAYMENT_PRINCIPAL_AND_INTEREST,
    STRATEGY_REDUCE_REPAYMENT,
    AmortisationResult,
    AmortisationSummary,
    FeeConfig,
    LoanInputs,
    PeriodRow,
    YearlyBreakdown,
)
from .schedule_rules import extra_for_date, resolve_rate
from .utils import period_date, to_decimal

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def calculate_payment(principal: Decimal, annual_rate: Decimal, years, payments_per_year: int) -> Decimal:
    """Return the level payment amortising ``principal`` over ``years``.

    The formula is:

        payment = P * r / (1 - (1 + r)^-n)

    where ``P`` is the principal, ``r`` is the periodic rate
    (``annual_rate / 100 / payments_per_year``) and ``n`` is
    ``years * payments_per_year``. ``n`` may be fractional when re-amortising
    over a remaining term. When the rate is zero the payment simplifies to
    ``P / n``.
    """
    n = to_decimal(years) * payments_per_year
    rate = to_decimal(annual_rate) / Decimal(100) / Decimal(payments_per_year)
    if rate == 0:
        return principal / n
    return principal * rate / (1 - (1 + rate) ** -n)


def _periodic_rate(annual_rate: Decimal, payments_per_year: int) -> Decimal:
    return annual_rate / Decimal(100) / Decimal(payments_per_year)


def _period_fee(fees: Optional[FeeConfig], period_index: int, payments_per_year: int) -> Decimal:
    """Return the fees charged in ``period_index``.

    The monthly fee is pro-rated to the repayment frequency. The annual fee is
    charged in the first period of every 12-month cycle counted from the loan
    start, not on calendar years.
    """
    if fees is None:
        return ZERO
    fee = to_decimal(fees.monthly_fee) * 12 / payments_per_year
    if period_index % payments_per_year == 1:
        fee += to_decimal(fees.annual_fee)
    return fee


def initial_payment(inputs: LoanInputs) -> Decimal:
    """Return the regular payment of the first period.

    This is the annuity payment over the full term at the rate in effect on
    the start date, or the first period's interest for interest-only loans.
    """
    ppy = inputs.payments_per_year
    amount = to_decimal(inputs.amount)
    start_rate = resolve_rate(to_decimal(inputs.annual_rate), inputs.rate_changes, inputs.start_date)
    if inputs.repayment_type == REPAYMENT_INTEREST_ONLY:
        return amount * _periodic_rate(start_rate, ppy)
    return calculate_payment(amount, start_rate, inputs.years, ppy)


@dataclass
class _SimulationState:
    """Running values of one simulation, owned by a single call."""

    balance: Decimal
    offset_balance: Decimal
    current_date: date
    payment: Decimal
    total_interest: Decimal
    total_fees: Decimal
    total_paid: Decimal


def generate_amortisation(inputs: LoanInputs) -> AmortisationResult:
    """Simulate the loan period by period.

    Parameters
    ----------
    inputs: LoanInputs
        The loan to simulate. Inputs are not validated here; see
        ``loan_sim.validation`` for the boundary checks.

    Returns
    -------
    AmortisationResult
        The schedule (one ``PeriodRow`` per simulated period, stopping early
        once the balance reaches zero) and the summary.
    """
    ppy = inputs.payments_per_year
    max_periods = inputs.years * ppy
    amount = to_decimal(inputs.amount)
    base_rate = to_decimal(inputs.annual_rate)
    upfront_fee = to_decimal(inputs.fees.upfront_fee) if inputs.fees else ZERO

    state = _SimulationState(
        balance=amount,
        offset_balance=to_decimal(inputs.offset.starting_balance) if inputs.offset else ZERO,
        current_date=inputs.start_date,
        payment=initial_payment(inputs),
        total_interest=ZERO,
        total_fees=upfront_fee,
        total_paid=upfront_fee,
    )
    reduce_repayment = (
        inputs.repayment_strategy == STRATEGY_REDUCE_REPAYMENT
        and inputs.repayment_type == REPAYMENT_PRINCIPAL_AND_INTEREST
    )
    offset_contribution = ZERO
    if inputs.offset is not None and inputs.frequency == FREQUENCY_MONTHLY:
        offset_contribution = to_decimal(inputs.offset.monthly_contribution)

    schedule: List[PeriodRow] = []
    i = 0
    while i < max_periods and state.balance > 0:
        period_index = i + 1
        opening_balance = state.balance

        annual_rate = resolve_rate(base_rate, inputs.rate_changes, state.current_date)
        effective_balance = max(ZERO, opening_balance - state.offset_balance)
        interest = effective_balance * _periodic_rate(annual_rate, ppy)

        if inputs.repayment_type == REPAYMENT_INTEREST_ONLY:
            payment = interest
        else:
            payment = state.payment

        extra = extra_for_date(inputs.extra_repayments, state.current_date)
        fee = _period_fee(inputs.fees, period_index, ppy)
        state.offset_balance += offset_contribution

        principal = min(max(payment - interest, ZERO) + extra, opening_balance)
        closing_balance = opening_balance - principal

        schedule.append(
            PeriodRow(
                date=state.current_date,
                period_index=period_index,
                opening_balance=opening_balance,
                interest_charged=interest,
                principal_paid=principal,
                extra_repayment=extra,
                fees_applied=fee,
                offset_balance=state.offset_balance,
                closing_balance=closing_balance,
            )
        )

        state.total_interest += interest
        state.total_fees += fee
        state.total_paid += payment + extra + fee

        if reduce_repayment and period_index < max_periods:
            remaining_years = Decimal(max_periods - period_index) / Decimal(ppy)
            state.payment = calculate_payment(closing_balance, annual_rate, remaining_years, ppy)

        state.balance = closing_balance
        state.current_date = period_date(inputs.start_date, inputs.frequency, period_index)
        i += 1

    payoff_date = schedule[-1].date if schedule else inputs.start_date
    summary = AmortisationSummary(
        regular_payment=state.payment,
        total_interest=state.total_interest,
        total_fees=state.total_fees,
        total_paid=state.total_paid,
        payoff_date=payoff_date,
    )
    logger.debug(
        "Simulated %d of %d periods: interest=%.2f paid=%.2f payoff=%s",
        len(schedule),
        max_periods,
        summary.total_interest,
        summary.total_paid,
        payoff_date.isoformat(),
    )
    return AmortisationResult(summary=summary, schedule=schedule)


def yearly_breakdown(schedule: Iterable[PeriodRow]) -> List[YearlyBreakdown]:
    """Group a schedule by calendar year.

    ``principal`` includes extra repayments, which are also reported on their
    own in ``extra``. Years are returned in ascending order.
    """
    totals: Dict[int, Dict[str, Decimal]] = {}
    for row in schedule:
        year = totals.setdefault(
            row.date.year,
            {"principal": ZERO, "interest": ZERO, "extra": ZERO, "fees": ZERO},
        )
        year["principal"] += row.principal_paid
        year["interest"] += row.interest_charged
        year["extra"] += row.extra_repayment
        year["fees"] += row.fees_applied
    return [
        YearlyBreakdown(year=y, **values) for y, values in sorted(totals.items())
    ]
