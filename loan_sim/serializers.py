"""Conversion between the JSON wire shapes and the simulator's dataclasses.

The wire format uses camelCase keys, camelCase enum values
(``principalAndInterest``, ``reduceRepayment``, ``oneOff``...) and ISO-8601
date strings. Money is emitted as floats. Parsing errors raise ``ValueError``
naming the offending field.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .data_models import (
    EXTRA_ANNUAL,
    EXTRA_CUSTOM_MONTHS,
    EXTRA_FORTNIGHTLY,
    EXTRA_MONTHLY,
    EXTRA_ONE_OFF,
    EXTRA_WEEKLY,
    FREQUENCY_FORTNIGHTLY,
    FREQUENCY_MONTHLY,
    FREQUENCY_WEEKLY,
    REPAYMENT_INTEREST_ONLY,
    REPAYMENT_PRINCIPAL_AND_INTEREST,
    STRATEGY_REDUCE_REPAYMENT,
    STRATEGY_REDUCE_TERM,
    AmortisationResult,
    ExtraRepayment,
    ExtraRule,
    FeeConfig,
    LoanInputs,
    OffsetConfig,
    PeriodRow,
    RateChange,
    ScenarioResult,
    SplitLoanComparison,
    SplitLoanInputs,
    YearlyBreakdown,
)
from .utils import parse_iso_date, to_decimal, to_iso_timestamp

FREQUENCIES = {
    "weekly": FREQUENCY_WEEKLY,
    "fortnightly": FREQUENCY_FORTNIGHTLY,
    "monthly": FREQUENCY_MONTHLY,
}

REPAYMENT_TYPES = {
    "principalAndInterest": REPAYMENT_PRINCIPAL_AND_INTEREST,
    "interestOnly": REPAYMENT_INTEREST_ONLY,
}

STRATEGIES = {
    "reduceTerm": STRATEGY_REDUCE_TERM,
    "reduceRepayment": STRATEGY_REDUCE_REPAYMENT,
}

EXTRA_FREQUENCIES = {
    "oneOff": EXTRA_ONE_OFF,
    "weekly": EXTRA_WEEKLY,
    "fortnightly": EXTRA_FORTNIGHTLY,
    "monthly": EXTRA_MONTHLY,
    "annual": EXTRA_ANNUAL,
    "customMonths": EXTRA_CUSTOM_MONTHS,
}


def _choice(data: Mapping[str, Any], key: str, options: Dict[str, str], default: Optional[str] = None) -> str:
    value = data.get(key, default)
    if value in options:
        return options[value]
    # internal snake_case names are accepted as well
    if value in options.values():
        return value
    raise ValueError(f"Invalid {key}: {value!r}; expected one of {', '.join(options)}")


def _required(data: Mapping[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise ValueError(f"Missing required field: {key}")
    return data[key]


def _decimal_field(data: Mapping[str, Any], key: str, default=None):
    value = data.get(key)
    if value is None:
        if default is None:
            raise ValueError(f"Missing required field: {key}")
        return to_decimal(default)
    return to_decimal(value)


def _whole_number(value: Any, key: str) -> int:
    """Return ``value`` as an int, rejecting fractions such as ``30.7``."""
    try:
        number = to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key}: {value!r}") from exc
    if number != number.to_integral_value():
        raise ValueError(f"Invalid {key}: {value!r}; expected a whole number")
    return int(number)


def _optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    return _whole_number(value, key)


def loan_inputs_from_dict(data: Mapping[str, Any]) -> LoanInputs:
    """Build ``LoanInputs`` from the camelCase wire shape."""
    if not isinstance(data, Mapping):
        raise ValueError("Loan inputs must be a JSON object")
    offset = None
    if data.get("offset"):
        offset = OffsetConfig(
            starting_balance=_decimal_field(data["offset"], "startingBalance", 0),
            monthly_contribution=_decimal_field(data["offset"], "monthlyContribution", 0),
        )
    fees = None
    if data.get("fees"):
        fees = FeeConfig(
            upfront_fee=_decimal_field(data["fees"], "upfrontFee", 0),
            monthly_fee=_decimal_field(data["fees"], "monthlyFee", 0),
            annual_fee=_decimal_field(data["fees"], "annualFee", 0),
        )
    rate_changes = [
        RateChange(
            effective_date=parse_iso_date(_required(item, "effectiveDate")),
            annual_rate=_decimal_field(item, "annualRate"),
        )
        for item in data.get("rateChanges") or []
    ]
    extras = [
        ExtraRepayment(
            effective_date=parse_iso_date(_required(item, "effectiveDate")),
            amount=_decimal_field(item, "amount"),
            recurring=bool(item.get("recurring", False)),
            end_date=parse_iso_date(item["endDate"]) if item.get("endDate") else None,
        )
        for item in data.get("extraRepayments") or []
    ]
    years = _whole_number(_required(data, "years"), "years")
    return LoanInputs(
        amount=_decimal_field(data, "amount"),
        annual_rate=_decimal_field(data, "annualRate"),
        years=years,
        frequency=_choice(data, "frequency", FREQUENCIES, "monthly"),
        repayment_type=_choice(data, "repaymentType", REPAYMENT_TYPES, "principalAndInterest"),
        repayment_strategy=_choice(data, "repaymentStrategy", STRATEGIES, "reduceTerm"),
        start_date=parse_iso_date(_required(data, "startDate")),
        rate_changes=rate_changes,
        offset=offset,
        extra_repayments=extras,
        fees=fees,
    )


def extra_rules_from_list(items: Optional[Sequence[Mapping[str, Any]]]) -> List[ExtraRule]:
    """Build ``ExtraRule`` objects from the camelCase wire shape."""
    rules: List[ExtraRule] = []
    for item in items or []:
        rules.append(
            ExtraRule(
                start_month=_whole_number(_required(item, "startMonth"), "startMonth"),
                amount=_decimal_field(item, "amount"),
                frequency=_choice(item, "frequency", EXTRA_FREQUENCIES),
                interval_months=_optional_int(item, "intervalMonths"),
                end_month=_optional_int(item, "endMonth"),
            )
        )
    return rules


def split_inputs_from_dict(data: Mapping[str, Any]) -> SplitLoanInputs:
    """Build ``SplitLoanInputs`` from the camelCase wire shape."""
    if not isinstance(data, Mapping):
        raise ValueError("Comparison inputs must be a JSON object")
    return SplitLoanInputs(
        full_mortgage_amount=_decimal_field(data, "fullMortgageAmount"),
        mortgage_rate=_decimal_field(data, "mortgageRate"),
        mortgage_term_years=_whole_number(_required(data, "mortgageTermYears"), "mortgageTermYears"),
        personal_loan_amount=_decimal_field(data, "personalLoanAmount"),
        personal_loan_rate=_decimal_field(data, "personalLoanRate"),
        personal_loan_term_years=_whole_number(
            _required(data, "personalLoanTermYears"), "personalLoanTermYears"
        ),
        frequency=_choice(data, "frequency", FREQUENCIES, "monthly"),
        repayment_type=_choice(data, "repaymentType", REPAYMENT_TYPES, "principalAndInterest"),
        repayment_strategy=_choice(data, "repaymentStrategy", STRATEGIES, "reduceTerm"),
        start_date=parse_iso_date(_required(data, "startDate")),
    )


def period_row_to_dict(row: PeriodRow) -> Dict[str, Any]:
    return {
        "date": to_iso_timestamp(row.date),
        "periodIndex": row.period_index,
        "openingBalance": float(row.opening_balance),
        "interestCharged": float(row.interest_charged),
        "principalPaid": float(row.principal_paid),
        "extraRepayment": float(row.extra_repayment),
        "feesApplied": float(row.fees_applied),
        "offsetBalance": float(row.offset_balance),
        "closingBalance": float(row.closing_balance),
    }


def result_to_dict(result: AmortisationResult) -> Dict[str, Any]:
    summary = result.summary
    return {
        "summary": {
            "regularPayment": float(summary.regular_payment),
            "totalInterest": float(summary.total_interest),
            "totalFees": float(summary.total_fees),
            "totalPaid": float(summary.total_paid),
            "payoffDate": to_iso_timestamp(summary.payoff_date),
        },
        "schedule": [period_row_to_dict(row) for row in result.schedule],
    }


def scenario_to_dict(scenario: ScenarioResult) -> Dict[str, Any]:
    comparison = scenario.comparison
    return {
        "baseline": result_to_dict(scenario.baseline),
        "withExtras": result_to_dict(scenario.with_extras),
        "comparison": {
            "interestSaved": float(comparison.interest_saved),
            "totalPaidSaved": float(comparison.total_paid_saved),
            "periodsSaved": comparison.periods_saved,
            "yearsSaved": float(comparison.years_saved),
            "baselinePayoffYear": comparison.baseline_payoff_year,
            "withExtrasPayoffYear": comparison.with_extras_payoff_year,
        },
    }


def split_comparison_to_dict(comparison: SplitLoanComparison) -> Dict[str, Any]:
    summary = comparison.summary
    return {
        "summary": {
            "totalAmount": float(summary.total_amount),
            "splitMortgageAmount": float(summary.split_mortgage_amount),
            "splitPersonalAmount": float(summary.split_personal_amount),
            "fullMortgagePayment": float(summary.full_mortgage_payment),
            "fullMortgageTotalInterest": float(summary.full_mortgage_total_interest),
            "fullMortgageTotalPaid": float(summary.full_mortgage_total_paid),
            "splitMortgagePayment": float(summary.split_mortgage_payment),
            "splitPersonalPayment": float(summary.split_personal_payment),
            "splitCombinedPaymentInitial": float(summary.split_combined_payment_initial),
            "splitCombinedTotalInterest": float(summary.split_combined_total_interest),
            "splitCombinedTotalPaid": float(summary.split_combined_total_paid),
        },
        "fullMortgage": result_to_dict(comparison.full_mortgage),
        "splitMortgage": result_to_dict(comparison.split_mortgage),
        "splitPersonal": result_to_dict(comparison.split_personal),
    }


def yearly_to_list(breakdown: Sequence[YearlyBreakdown]) -> List[Dict[str, Any]]:
    return [
        {
            "year": year.year,
            "principal": float(year.principal),
            "interest": float(year.interest),
            "extra": float(year.extra),
            "fees": float(year.fees),
        }
        for year in breakdown
    ]
