"""Command-line interface for the loan simulator.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute full amortisation schedules, view summaries, compare a
loan with and without extra repayment rules, or weigh one mortgage against a
smaller mortgage plus a personal loan. Results can be printed to the
terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import functools
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .data_models import (
    FeeConfig,
    ExtraRepayment,
    ExtraRule,
    LoanInputs,
    OffsetConfig,
    PeriodRow,
    RateChange,
    SplitLoanInputs,
)
from .engine import generate_amortisation, yearly_breakdown
from .formatter import (
    print_comparison,
    print_schedule,
    print_split_comparison,
    print_summary,
    print_yearly,
)
from .scenario import compare_mortgage_vs_personal_loan, generate_scenario_with_extras
from .serializers import (
    EXTRA_FREQUENCIES,
    REPAYMENT_TYPES,
    STRATEGIES,
    result_to_dict,
    split_comparison_to_dict,
)
from .utils import parse_amount, parse_iso_date
from .validation import InvalidInput, validate_inputs, validate_split_inputs

MAX_PRINTED_ROWS = 120


def _parse_or_fail(func, value: str):
    try:
        return func(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_rate_change_strings(values: Tuple[str, ...]) -> List[RateChange]:
    changes: List[RateChange] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 2:
            raise click.BadParameter(f"Rate change must be in YYYY-MM-DD:RATE format; got {item}")
        when, rate = parts
        changes.append(
            RateChange(
                effective_date=_parse_or_fail(parse_iso_date, when),
                annual_rate=_parse_or_fail(parse_amount, rate),
            )
        )
    return changes


def parse_extra_repayment_strings(values: Tuple[str, ...]) -> List[ExtraRepayment]:
    extras: List[ExtraRepayment] = []
    for item in values:
        parts = item.split(":")
        if not 2 <= len(parts) <= 4:
            raise click.BadParameter(
                f"Extra repayment must be in YYYY-MM-DD:AMOUNT[:recurring[:YYYY-MM-DD]] format; got {item}"
            )
        recurring = False
        end_date = None
        if len(parts) >= 3:
            if parts[2].lower() not in ("recurring", "once"):
                raise click.BadParameter(f"Extra repayment kind must be 'recurring' or 'once'; got {parts[2]}")
            recurring = parts[2].lower() == "recurring"
        if len(parts) == 4:
            end_date = _parse_or_fail(parse_iso_date, parts[3])
        extras.append(
            ExtraRepayment(
                effective_date=_parse_or_fail(parse_iso_date, parts[0]),
                amount=_parse_or_fail(parse_amount, parts[1]),
                recurring=recurring,
                end_date=end_date,
            )
        )
    return extras


def parse_extra_rule_strings(values: Tuple[str, ...]) -> List[ExtraRule]:
    """Parse ``KIND:START_MONTH:AMOUNT[:INTERVAL[:END_MONTH]]`` rule strings."""
    rules: List[ExtraRule] = []
    for item in values:
        parts = item.split(":")
        if not 3 <= len(parts) <= 5:
            raise click.BadParameter(
                f"Extra rule must be in KIND:START_MONTH:AMOUNT[:INTERVAL[:END_MONTH]] format; got {item}"
            )
        kind = parts[0]
        if kind not in EXTRA_FREQUENCIES:
            raise click.BadParameter(
                f"Extra rule kind must be one of {', '.join(EXTRA_FREQUENCIES)}; got {kind}"
            )
        try:
            start_month = int(parts[1])
            interval = int(parts[3]) if len(parts) >= 4 and parts[3] else None
            end_month = int(parts[4]) if len(parts) == 5 and parts[4] else None
        except ValueError:
            raise click.BadParameter(f"Extra rule months must be whole numbers; got {item}")
        rules.append(
            ExtraRule(
                start_month=start_month,
                amount=_parse_or_fail(parse_amount, parts[2]),
                frequency=EXTRA_FREQUENCIES[kind],
                interval_months=interval,
                end_month=end_month,
            )
        )
    return rules


def parse_offset_string(value: Optional[str]) -> Optional[OffsetConfig]:
    if not value:
        return None
    parts = value.split(":")
    if len(parts) != 2:
        raise click.BadParameter(f"Offset must be in BALANCE:MONTHLY_CONTRIBUTION format; got {value}")
    return OffsetConfig(
        starting_balance=_parse_or_fail(parse_amount, parts[0]),
        monthly_contribution=_parse_or_fail(parse_amount, parts[1]),
    )


def build_inputs_from_options(
    amount: str,
    rate: str,
    years: int,
    frequency: str,
    repayment_type: str,
    strategy: str,
    start_date: str,
    rate_change: Tuple[str, ...] = (),
    extra_repayment: Tuple[str, ...] = (),
    offset: Optional[str] = None,
    upfront_fee: Optional[str] = None,
    monthly_fee: Optional[str] = None,
    annual_fee: Optional[str] = None,
) -> LoanInputs:
    fees = None
    if upfront_fee or monthly_fee or annual_fee:
        fees = FeeConfig(
            upfront_fee=_parse_or_fail(parse_amount, upfront_fee or "0"),
            monthly_fee=_parse_or_fail(parse_amount, monthly_fee or "0"),
            annual_fee=_parse_or_fail(parse_amount, annual_fee or "0"),
        )
    inputs = LoanInputs(
        amount=_parse_or_fail(parse_amount, amount),
        annual_rate=_parse_or_fail(parse_amount, rate),
        years=years,
        frequency=frequency,
        repayment_type=REPAYMENT_TYPES[repayment_type],
        repayment_strategy=STRATEGIES[strategy],
        start_date=_parse_or_fail(parse_iso_date, start_date),
        rate_changes=parse_rate_change_strings(rate_change),
        offset=parse_offset_string(offset),
        extra_repayments=parse_extra_repayment_strings(extra_repayment),
        fees=fees,
    )
    try:
        validate_inputs(inputs)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc))
    return inputs


def export_to_json(path: Path, data: dict) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[PeriodRow]) -> None:
    """Export schedule to a CSV file."""
    header = [
        "Period",
        "Date",
        "Opening_Balance",
        "Interest",
        "Principal",
        "Extra",
        "Fees",
        "Offset_Balance",
        "Closing_Balance",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in schedule:
            writer.writerow(
                [
                    row.period_index,
                    row.date.isoformat(),
                    float(row.opening_balance),
                    float(row.interest_charged),
                    float(row.principal_paid),
                    float(row.extra_repayment),
                    float(row.fees_applied),
                    float(row.offset_balance),
                    float(row.closing_balance),
                ]
            )


def loan_options(func):
    """Attach the options describing a loan to a command."""
    options = [
        click.option("--amount", "-a", "amount", required=True, help="Loan amount (accepts 500k, 1.2m)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--years", "-y", "years", required=True, type=int, help="Loan term in years"),
        click.option(
            "--frequency",
            type=click.Choice(["weekly", "fortnightly", "monthly"]),
            default="monthly",
            help="Repayment frequency",
        ),
        click.option(
            "--type",
            "repayment_type",
            type=click.Choice(list(REPAYMENT_TYPES)),
            default="principalAndInterest",
            help="Repayment type",
        ),
        click.option(
            "--strategy",
            type=click.Choice(list(STRATEGIES)),
            default="reduceTerm",
            help="What extra repayments reduce: the term or the regular repayment",
        ),
        click.option("--start-date", "-s", "start_date", required=True, help="First repayment date (YYYY-MM-DD)"),
        click.option("--rate-change", "rate_change", multiple=True, help="Rate change in YYYY-MM-DD:RATE format"),
        click.option(
            "--extra-repayment",
            "extra_repayment",
            multiple=True,
            help="Extra repayment in YYYY-MM-DD:AMOUNT[:recurring[:YYYY-MM-DD]] format",
        ),
        click.option("--offset", "offset", help="Offset account in BALANCE:MONTHLY_CONTRIBUTION format"),
        click.option("--upfront-fee", "upfront_fee", help="One-time upfront fee"),
        click.option("--monthly-fee", "monthly_fee", help="Monthly account fee"),
        click.option("--annual-fee", "annual_fee", help="Annual package fee"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _inputs_from_kwargs(kwargs: dict) -> LoanInputs:
    return build_inputs_from_options(
        kwargs.pop("amount"),
        kwargs.pop("rate"),
        kwargs.pop("years"),
        kwargs.pop("frequency"),
        kwargs.pop("repayment_type"),
        kwargs.pop("strategy"),
        kwargs.pop("start_date"),
        kwargs.pop("rate_change"),
        kwargs.pop("extra_repayment"),
        kwargs.pop("offset"),
        kwargs.pop("upfront_fee"),
        kwargs.pop("monthly_fee"),
        kwargs.pop("annual_fee"),
    )


def with_loan_inputs(func):
    """Replace the raw loan options with a validated ``LoanInputs``."""

    @loan_options
    @functools.wraps(func)
    def wrapper(**kwargs):
        inputs = _inputs_from_kwargs(kwargs)
        return func(inputs, **kwargs)

    return wrapper


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log simulation details")
def cli(verbose: bool) -> None:
    """A command-line loan simulator with offset accounts, fees and extra repayments."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@with_loan_inputs
@click.option("--yearly", is_flag=True, help="Print totals per calendar year instead of every period")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(inputs: LoanInputs, yearly: bool, output: Optional[str]) -> None:
    """Compute and print the full amortisation schedule."""
    result = generate_amortisation(inputs)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result_to_dict(result))
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result.summary)
    if yearly:
        print_yearly(yearly_breakdown(result.schedule))
        return
    # Limit schedule length printed to avoid flooding the terminal
    if len(result.schedule) > MAX_PRINTED_ROWS:
        click.echo(
            f"Schedule has {len(result.schedule)} rows; showing first {MAX_PRINTED_ROWS} rows."
        )
    print_schedule(result.schedule[:MAX_PRINTED_ROWS], show_offset=inputs.offset is not None)


@cli.command()
@with_loan_inputs
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(inputs: LoanInputs, output: Optional[str]) -> None:
    """Compute and print only the summary metrics for a loan."""
    result = generate_amortisation(inputs)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        export_to_json(path, {"summary": result_to_dict(result)["summary"]})
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result.summary)


@cli.command()
@with_loan_inputs
@click.option(
    "--extra",
    "extra",
    multiple=True,
    required=True,
    help="Extra rule in KIND:START_MONTH:AMOUNT[:INTERVAL[:END_MONTH]] format, e.g. oneOff:12:50000",
)
def compare(inputs: LoanInputs, extra: Tuple[str, ...]) -> None:
    """Compare a loan with and without extra repayment rules.

    Example:

        loan-sim compare -a 500k -r 6 -y 30 -s 2024-01-01 --extra weekly:0:100
    """
    rules = parse_extra_rule_strings(extra)
    scenario = generate_scenario_with_extras(inputs, rules)
    print_comparison(scenario)


@cli.command()
@click.option("--amount", "-a", "amount", required=True, help="Total amount to borrow (accepts 500k, 1.2m)")
@click.option("--personal-amount", "-p", "personal_amount", required=True, help="Part borrowed as a personal loan")
@click.option("--rate", "-r", "rate", required=True, help="Mortgage annual interest rate (percent)")
@click.option("--years", "-y", "years", required=True, type=int, help="Mortgage term in years")
@click.option("--personal-rate", "personal_rate", required=True, help="Personal loan annual interest rate (percent)")
@click.option("--personal-years", "personal_years", required=True, type=int, help="Personal loan term in years")
@click.option(
    "--frequency",
    type=click.Choice(["weekly", "fortnightly", "monthly"]),
    default="monthly",
    help="Repayment frequency",
)
@click.option(
    "--type",
    "repayment_type",
    type=click.Choice(list(REPAYMENT_TYPES)),
    default="principalAndInterest",
    help="Repayment type",
)
@click.option("--strategy", type=click.Choice(list(STRATEGIES)), default="reduceTerm", help="Repayment strategy")
@click.option("--start-date", "-s", "start_date", required=True, help="First repayment date (YYYY-MM-DD)")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def split(
    amount: str,
    personal_amount: str,
    rate: str,
    years: int,
    personal_rate: str,
    personal_years: int,
    frequency: str,
    repayment_type: str,
    strategy: str,
    start_date: str,
    output: Optional[str],
) -> None:
    """Compare one mortgage with a smaller mortgage plus a personal loan.

    Example:

        loan-sim split -a 440k -p 40k -r 5.85 -y 30 --personal-rate 8.5 --personal-years 5 -s 2024-01-01
    """
    inputs = SplitLoanInputs(
        full_mortgage_amount=_parse_or_fail(parse_amount, amount),
        mortgage_rate=_parse_or_fail(parse_amount, rate),
        mortgage_term_years=years,
        personal_loan_amount=_parse_or_fail(parse_amount, personal_amount),
        personal_loan_rate=_parse_or_fail(parse_amount, personal_rate),
        personal_loan_term_years=personal_years,
        frequency=frequency,
        repayment_type=REPAYMENT_TYPES[repayment_type],
        repayment_strategy=STRATEGIES[strategy],
        start_date=_parse_or_fail(parse_iso_date, start_date),
    )
    try:
        validate_split_inputs(inputs)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc))
    comparison = compare_mortgage_vs_personal_loan(inputs)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Comparison export must use .json extension")
        export_to_json(path, split_comparison_to_dict(comparison))
        click.echo(f"Comparison exported to {path}")
        return
    print_split_comparison(comparison)


if __name__ == "__main__":
    cli()
