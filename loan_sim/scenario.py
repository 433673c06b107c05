"""Scenario comparison: the same loan with and without extra repayment rules.

Extra rules are expressed in months from the loan start and at their own
frequency (e.g. "$100 a week from month 6"). ``translate_extra_rules`` turns
them into dated ``ExtraRepayment`` entries with a per-period amount matching
the loan's repayment frequency, and ``generate_scenario_with_extras`` runs the
engine twice and reports what the extras save.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional, Sequence

from .data_models import (
    EXTRA_ANNUAL,
    EXTRA_CUSTOM_MONTHS,
    EXTRA_FORTNIGHTLY,
    EXTRA_ONE_OFF,
    EXTRA_WEEKLY,
    FREQUENCY_MONTHLY,
    AmortisationResult,
    ExtraRepayment,
    ExtraRule,
    LoanInputs,
    ScenarioComparison,
    ScenarioResult,
    SplitLoanComparison,
    SplitLoanInputs,
    SplitLoanSummary,
)
from .engine import generate_amortisation, initial_payment
from .utils import add_months, to_decimal

logger = logging.getLogger(__name__)


def _per_period_amount(rule: ExtraRule, frequency: str, payments_per_year: int) -> Decimal:
    """Scale a recurring rule's amount to one loan repayment period.

    Monthly loans convert each frequency class to a monthly amount.
    Weekly and fortnightly loans scale every rule by ``12 / payments_per_year``
    whatever its own frequency.
    """
    amount = to_decimal(rule.amount)
    if frequency != FREQUENCY_MONTHLY:
        return amount * 12 / payments_per_year
    if rule.frequency == EXTRA_WEEKLY:
        return amount * 52 / 12
    if rule.frequency == EXTRA_FORTNIGHTLY:
        return amount * 26 / 12
    if rule.frequency == EXTRA_ANNUAL:
        return amount / 12
    if rule.frequency == EXTRA_CUSTOM_MONTHS:
        interval = rule.interval_months if rule.interval_months and rule.interval_months > 0 else 1
        return amount / interval
    return amount


def translate_extra_rules(inputs: LoanInputs, rules: Sequence[ExtraRule]) -> List[ExtraRepayment]:
    """Return one ``ExtraRepayment`` per rule, dated from the loan start."""
    extras: List[ExtraRepayment] = []
    for rule in rules:
        effective_date = add_months(inputs.start_date, rule.start_month)
        end_date = None
        if rule.end_month is not None:
            end_date = add_months(inputs.start_date, rule.end_month)
        if rule.frequency == EXTRA_ONE_OFF:
            extras.append(
                ExtraRepayment(
                    effective_date=effective_date,
                    amount=to_decimal(rule.amount),
                    recurring=False,
                    end_date=end_date,
                )
            )
            continue
        extras.append(
            ExtraRepayment(
                effective_date=effective_date,
                amount=_per_period_amount(rule, inputs.frequency, inputs.payments_per_year),
                recurring=True,
                end_date=end_date,
            )
        )
    return extras


def _compare(
    baseline: AmortisationResult, with_extras: AmortisationResult, payments_per_year: int
) -> ScenarioComparison:
    periods_saved = len(baseline.schedule) - len(with_extras.schedule)
    return ScenarioComparison(
        interest_saved=baseline.summary.total_interest - with_extras.summary.total_interest,
        total_paid_saved=baseline.summary.total_paid - with_extras.summary.total_paid,
        periods_saved=periods_saved,
        years_saved=Decimal(periods_saved) / Decimal(payments_per_year),
        baseline_payoff_year=baseline.summary.payoff_date.year,
        with_extras_payoff_year=with_extras.summary.payoff_date.year,
    )


def generate_scenario_with_extras(
    inputs: LoanInputs, extra_rules: Optional[Sequence[ExtraRule]] = None
) -> ScenarioResult:
    """Simulate ``inputs`` with and without ``extra_rules``.

    With no rules, ``with_extras`` is the baseline result itself and every
    saving is zero. Otherwise the translated rules are added to the extra
    repayments already present on ``inputs``.
    """
    baseline = generate_amortisation(inputs)
    if not extra_rules:
        with_extras = baseline
    else:
        extras = translate_extra_rules(inputs, extra_rules)
        logger.debug("Translated %d extra rules into repayments", len(extras))
        with_extras = generate_amortisation(
            replace(inputs, extra_repayments=list(inputs.extra_repayments) + extras)
        )
    return ScenarioResult(
        baseline=baseline,
        with_extras=with_extras,
        comparison=_compare(baseline, with_extras, inputs.payments_per_year),
    )


def _split_loan(inputs: SplitLoanInputs, amount: Decimal, rate: Decimal, years: int) -> LoanInputs:
    return LoanInputs(
        amount=amount,
        annual_rate=to_decimal(rate),
        years=years,
        frequency=inputs.frequency,
        repayment_type=inputs.repayment_type,
        repayment_strategy=inputs.repayment_strategy,
        start_date=inputs.start_date,
    )


def compare_mortgage_vs_personal_loan(inputs: SplitLoanInputs) -> SplitLoanComparison:
    """Compare one full mortgage with a smaller mortgage plus a personal loan.

    The split mortgage borrows ``full_mortgage_amount - personal_loan_amount``
    at the mortgage rate and term; the personal loan runs at its own rate and
    term. Payments are the first-period regular payments of each loan, and the
    combined figures add the two split loans together.
    """
    total = to_decimal(inputs.full_mortgage_amount)
    personal_amount = to_decimal(inputs.personal_loan_amount)
    mortgage_amount = total - personal_amount

    full_inputs = _split_loan(inputs, total, inputs.mortgage_rate, inputs.mortgage_term_years)
    mortgage_inputs = _split_loan(inputs, mortgage_amount, inputs.mortgage_rate, inputs.mortgage_term_years)
    personal_inputs = _split_loan(
        inputs, personal_amount, inputs.personal_loan_rate, inputs.personal_loan_term_years
    )
    full = generate_amortisation(full_inputs)
    split_mortgage = generate_amortisation(mortgage_inputs)
    split_personal = generate_amortisation(personal_inputs)

    mortgage_payment = initial_payment(mortgage_inputs)
    personal_payment = initial_payment(personal_inputs)
    summary = SplitLoanSummary(
        total_amount=total,
        split_mortgage_amount=mortgage_amount,
        split_personal_amount=personal_amount,
        full_mortgage_payment=initial_payment(full_inputs),
        full_mortgage_total_interest=full.summary.total_interest,
        full_mortgage_total_paid=full.summary.total_paid,
        split_mortgage_payment=mortgage_payment,
        split_personal_payment=personal_payment,
        split_combined_payment_initial=mortgage_payment + personal_payment,
        split_combined_total_interest=(
            split_mortgage.summary.total_interest + split_personal.summary.total_interest
        ),
        split_combined_total_paid=split_mortgage.summary.total_paid + split_personal.summary.total_paid,
    )
    logger.debug(
        "Split loan comparison: full interest=%.2f split interest=%.2f",
        summary.full_mortgage_total_interest,
        summary.split_combined_total_interest,
    )
    return SplitLoanComparison(
        summary=summary,
        full_mortgage=full,
        split_mortgage=split_mortgage,
        split_personal=split_personal,
    )
