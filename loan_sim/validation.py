"""Boundary checks run before a simulation.

The engine itself accepts any inputs and lets degenerate values flow through
the arithmetic. The CLI and the web API call ``validate_inputs`` first so that
user mistakes are reported as ``InvalidInput`` instead.
"""

from __future__ import annotations

from .data_models import (
    PAYMENTS_PER_YEAR,
    REPAYMENT_INTEREST_ONLY,
    REPAYMENT_PRINCIPAL_AND_INTEREST,
    STRATEGY_REDUCE_REPAYMENT,
    STRATEGY_REDUCE_TERM,
    LoanInputs,
    SplitLoanInputs,
)


class InvalidInput(ValueError):
    """Raised when loan inputs cannot describe a real loan."""


def validate_inputs(inputs: LoanInputs) -> None:
    if inputs.amount <= 0:
        raise InvalidInput("Loan amount must be positive")
    if inputs.years <= 0:
        raise InvalidInput("Loan term must be positive")
    if inputs.annual_rate < 0:
        raise InvalidInput("Interest rate cannot be negative")
    for change in inputs.rate_changes:
        if change.annual_rate < 0:
            raise InvalidInput(
                f"Rate change on {change.effective_date.isoformat()} has a negative rate"
            )
    if inputs.frequency not in PAYMENTS_PER_YEAR:
        raise InvalidInput(f"Unknown repayment frequency: {inputs.frequency}")
    if inputs.repayment_type not in (REPAYMENT_PRINCIPAL_AND_INTEREST, REPAYMENT_INTEREST_ONLY):
        raise InvalidInput(f"Unknown repayment type: {inputs.repayment_type}")
    if inputs.repayment_strategy not in (STRATEGY_REDUCE_TERM, STRATEGY_REDUCE_REPAYMENT):
        raise InvalidInput(f"Unknown repayment strategy: {inputs.repayment_strategy}")


def validate_split_inputs(inputs: SplitLoanInputs) -> None:
    """Check a mortgage-versus-personal-loan comparison.

    The personal loan is carved out of the full amount, so it may be zero but
    never more than the full mortgage.
    """
    if inputs.full_mortgage_amount <= 0:
        raise InvalidInput("Full mortgage amount must be positive")
    if inputs.personal_loan_amount < 0:
        raise InvalidInput("Personal loan amount cannot be negative")
    if inputs.personal_loan_amount > inputs.full_mortgage_amount:
        raise InvalidInput("Personal loan amount cannot exceed the full mortgage amount")
    if inputs.mortgage_term_years <= 0 or inputs.personal_loan_term_years <= 0:
        raise InvalidInput("Loan terms must be positive")
    if inputs.mortgage_rate < 0 or inputs.personal_loan_rate < 0:
        raise InvalidInput("Interest rates cannot be negative")
    if inputs.frequency not in PAYMENTS_PER_YEAR:
        raise InvalidInput(f"Unknown repayment frequency: {inputs.frequency}")
    if inputs.repayment_type not in (REPAYMENT_PRINCIPAL_AND_INTEREST, REPAYMENT_INTEREST_ONLY):
        raise InvalidInput(f"Unknown repayment type: {inputs.repayment_type}")
    if inputs.repayment_strategy not in (STRATEGY_REDUCE_TERM, STRATEGY_REDUCE_REPAYMENT):
        raise InvalidInput(f"Unknown repayment strategy: {inputs.repayment_strategy}")
