"""Data models for the loan simulator.

This module defines dataclasses representing the entities used by the
simulator: the loan inputs and their optional features (rate changes, extra
repayments, an offset account and fees), the rows and summary produced by the
amortisation engine, and the inputs and outputs of the scenario comparator.
Money is carried as ``Decimal`` throughout.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

# Repayment frequencies and the number of payments each makes per year
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_FORTNIGHTLY = "fortnightly"
FREQUENCY_MONTHLY = "monthly"

PAYMENTS_PER_YEAR = {
    FREQUENCY_WEEKLY: 52,
    FREQUENCY_FORTNIGHTLY: 26,
    FREQUENCY_MONTHLY: 12,
}

REPAYMENT_PRINCIPAL_AND_INTEREST = "principal_and_interest"
REPAYMENT_INTEREST_ONLY = "interest_only"

STRATEGY_REDUCE_TERM = "reduce_term"
STRATEGY_REDUCE_REPAYMENT = "reduce_repayment"

# Frequency classes accepted by ``ExtraRule``
EXTRA_ONE_OFF = "one_off"
EXTRA_WEEKLY = "weekly"
EXTRA_FORTNIGHTLY = "fortnightly"
EXTRA_MONTHLY = "monthly"
EXTRA_ANNUAL = "annual"
EXTRA_CUSTOM_MONTHS = "custom_months"


@dataclass(frozen=True)
class RateChange:
    """A change to the annual nominal rate taking effect on ``effective_date``.

    Attributes
    ----------
    effective_date: date
        First date on which ``annual_rate`` applies.
    annual_rate: Decimal
        The new annual nominal rate in percent (``Decimal("6.5")`` is 6.5 %).
    """

    effective_date: date
    annual_rate: Decimal


@dataclass(frozen=True)
class ExtraRepayment:
    """An extra principal contribution.

    A one-off entry (``recurring=False``) applies only in the period falling on
    exactly ``effective_date``. A recurring entry applies in every period dated
    on or after ``effective_date`` and, when ``end_date`` is set, on or before
    ``end_date``.
    """

    effective_date: date
    amount: Decimal
    recurring: bool = False
    end_date: Optional[date] = None


@dataclass(frozen=True)
class OffsetConfig:
    """An offset account linked to the loan.

    The offset balance reduces the balance interest is charged on without
    reducing the loan itself. ``monthly_contribution`` is added once per
    simulated month.
    """

    starting_balance: Decimal
    monthly_contribution: Decimal = Decimal("0")


@dataclass(frozen=True)
class FeeConfig:
    upfront_fee: Decimal = Decimal("0")
    monthly_fee: Decimal = Decimal("0")
    annual_fee: Decimal = Decimal("0")


@dataclass(frozen=True)
class LoanInputs:
    """All inputs of one simulation.

    ``amount`` is the financed principal. ``annual_rate`` is the base annual
    nominal rate in percent; ``rate_changes`` override it from their effective
    dates onward. ``start_date`` is the date of the first repayment period.
    """

    amount: Decimal
    annual_rate: Decimal
    years: int
    frequency: str  # 'weekly', 'fortnightly' or 'monthly'
    repayment_type: str  # 'principal_and_interest' or 'interest_only'
    repayment_strategy: str  # 'reduce_term' or 'reduce_repayment'
    start_date: date
    rate_changes: List[RateChange] = field(default_factory=list)
    offset: Optional[OffsetConfig] = None
    extra_repayments: List[ExtraRepayment] = field(default_factory=list)
    fees: Optional[FeeConfig] = None

    @property
    def payments_per_year(self) -> int:
        return PAYMENTS_PER_YEAR[self.frequency]


@dataclass(frozen=True)
class PeriodRow:
    """One simulated repayment period.

    ``principal_paid`` includes ``extra_repayment``. ``offset_balance`` is the
    offset balance after this period's contribution.
    """

    date: date
    period_index: int
    opening_balance: Decimal
    interest_charged: Decimal
    principal_paid: Decimal
    extra_repayment: Decimal
    fees_applied: Decimal
    offset_balance: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class AmortisationSummary:
    """Aggregate results of a simulation.

    ``regular_payment`` is the running payment at the end of the simulation,
    which differs from the initial payment under the reduce-repayment
    strategy. ``total_fees`` and ``total_paid`` include the upfront fee.
    """

    regular_payment: Decimal
    total_interest: Decimal
    total_fees: Decimal
    total_paid: Decimal
    payoff_date: date


@dataclass(frozen=True)
class AmortisationResult:
    summary: AmortisationSummary
    schedule: List[PeriodRow]


@dataclass(frozen=True)
class ExtraRule:
    """A higher-level extra repayment rule used by the scenario comparator.

    Attributes
    ----------
    start_month: int
        Months after the loan start date when the rule starts.
    amount: Decimal
        The amount paid at the rule's own frequency.
    frequency: str
        One of ``"one_off"``, ``"weekly"``, ``"fortnightly"``, ``"monthly"``,
        ``"annual"`` or ``"custom_months"``.
    interval_months: int, optional
        Interval for ``"custom_months"`` rules.
    end_month: int, optional
        Months after the loan start date when a recurring rule stops.
    """

    start_month: int
    amount: Decimal
    frequency: str
    interval_months: Optional[int] = None
    end_month: Optional[int] = None


@dataclass(frozen=True)
class ScenarioComparison:
    interest_saved: Decimal
    total_paid_saved: Decimal
    periods_saved: int
    years_saved: Decimal
    baseline_payoff_year: int
    with_extras_payoff_year: int


@dataclass(frozen=True)
class ScenarioResult:
    baseline: AmortisationResult
    with_extras: AmortisationResult
    comparison: ScenarioComparison


@dataclass(frozen=True)
class YearlyBreakdown:
    """Schedule totals for one calendar year."""

    year: int
    principal: Decimal
    interest: Decimal
    extra: Decimal
    fees: Decimal


@dataclass(frozen=True)
class SplitLoanInputs:
    """Two ways of funding the same purchase.

    Either the whole ``full_mortgage_amount`` is borrowed as a mortgage, or
    ``personal_loan_amount`` of it is borrowed as a personal loan and the rest
    as a smaller mortgage. Both loans share the repayment frequency, type,
    strategy and start date.
    """

    full_mortgage_amount: Decimal
    mortgage_rate: Decimal
    mortgage_term_years: int
    personal_loan_amount: Decimal
    personal_loan_rate: Decimal
    personal_loan_term_years: int
    frequency: str
    repayment_type: str
    repayment_strategy: str
    start_date: date


@dataclass(frozen=True)
class SplitLoanSummary:
    total_amount: Decimal
    split_mortgage_amount: Decimal
    split_personal_amount: Decimal
    full_mortgage_payment: Decimal
    full_mortgage_total_interest: Decimal
    full_mortgage_total_paid: Decimal
    split_mortgage_payment: Decimal
    split_personal_payment: Decimal
    split_combined_payment_initial: Decimal
    split_combined_total_interest: Decimal
    split_combined_total_paid: Decimal


@dataclass(frozen=True)
class SplitLoanComparison:
    summary: SplitLoanSummary
    full_mortgage: AmortisationResult
    split_mortgage: AmortisationResult
    split_personal: AmortisationResult
