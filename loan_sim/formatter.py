"""Output helpers for the loan simulator.

This module provides simple functions to render amortisation schedules,
summaries, yearly breakdowns and comparisons in a tabular text format using
built-in printing and string formatting.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import AmortisationSummary, PeriodRow, ScenarioResult, SplitLoanComparison, YearlyBreakdown


def print_summary(summary: AmortisationSummary) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Regular payment    : {summary.regular_payment:.2f}")
    print(f"Total interest     : {summary.total_interest:.2f}")
    if summary.total_fees:
        print(f"Total fees         : {summary.total_fees:.2f}")
    print(f"Total paid         : {summary.total_paid:.2f}")
    print(f"Payoff date        : {summary.payoff_date.isoformat()}")
    print("-" * 72)


def print_schedule(schedule: Iterable[PeriodRow], show_offset: bool = False) -> None:
    """Print the amortisation schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[PeriodRow]
        The schedule rows to print.
    show_offset: bool
        Whether to include the ``Offset`` column. Hidden by default because
        most loans have no offset account.
    """
    headers = [
        "Period",
        "Date",
        "OpenBal",
        "Interest",
        "Principal",
        "Extra",
        "Fees",
    ]
    if show_offset:
        headers.append("Offset")
    headers.append("CloseBal")
    print("\t".join(headers))
    for row in schedule:
        cells = [
            str(row.period_index),
            row.date.isoformat(),
            f"{row.opening_balance:.2f}",
            f"{row.interest_charged:.2f}",
            f"{row.principal_paid:.2f}",
            f"{row.extra_repayment:.2f}",
            f"{row.fees_applied:.2f}",
        ]
        if show_offset:
            cells.append(f"{row.offset_balance:.2f}")
        cells.append(f"{row.closing_balance:.2f}")
        print("\t".join(cells))


def print_yearly(breakdown: Iterable[YearlyBreakdown]) -> None:
    print("\t".join(["Year", "Principal", "Interest", "Extra", "Fees"]))
    for year in breakdown:
        print(
            f"{year.year}\t{year.principal:.2f}\t{year.interest:.2f}"
            f"\t{year.extra:.2f}\t{year.fees:.2f}"
        )


def print_comparison(scenario: ScenarioResult) -> None:
    """Print the baseline and with-extras summaries side by side.

    The last column shows what the extras save (baseline minus extras), so a
    positive number is a saving.
    """
    base = scenario.baseline.summary
    extra = scenario.with_extras.summary
    comparison = scenario.comparison
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Baseline':>15s} {'With extras':>15s} {'Saved':>15s}")
    print(
        f"{'total_interest':20s} {base.total_interest:15.2f} "
        f"{extra.total_interest:15.2f} {comparison.interest_saved:15.2f}"
    )
    print(
        f"{'total_paid':20s} {base.total_paid:15.2f} "
        f"{extra.total_paid:15.2f} {comparison.total_paid_saved:15.2f}"
    )
    print(
        f"{'periods':20s} {len(scenario.baseline.schedule):15d} "
        f"{len(scenario.with_extras.schedule):15d} {comparison.periods_saved:15d}"
    )
    print(
        f"{'payoff_year':20s} {comparison.baseline_payoff_year:15d} "
        f"{comparison.with_extras_payoff_year:15d} {comparison.years_saved:15.2f}"
    )
    print("=" * 72)


def print_split_comparison(comparison: SplitLoanComparison) -> None:
    """Print one full mortgage against a smaller mortgage plus a personal loan."""
    s = comparison.summary
    print("Mortgage vs personal loan")
    print("=" * 72)
    print(f"{'Metric':20s} {'Full mortgage':>15s} {'Split':>15s} {'Difference':>15s}")
    print(
        f"{'initial_payment':20s} {s.full_mortgage_payment:15.2f} "
        f"{s.split_combined_payment_initial:15.2f} "
        f"{s.split_combined_payment_initial - s.full_mortgage_payment:15.2f}"
    )
    print(
        f"{'total_interest':20s} {s.full_mortgage_total_interest:15.2f} "
        f"{s.split_combined_total_interest:15.2f} "
        f"{s.split_combined_total_interest - s.full_mortgage_total_interest:15.2f}"
    )
    print(
        f"{'total_paid':20s} {s.full_mortgage_total_paid:15.2f} "
        f"{s.split_combined_total_paid:15.2f} "
        f"{s.split_combined_total_paid - s.full_mortgage_total_paid:15.2f}"
    )
    print("-" * 72)
    print(f"Split mortgage     : {s.split_mortgage_amount:.2f} at {s.split_mortgage_payment:.2f} per period")
    print(f"Personal loan      : {s.split_personal_amount:.2f} at {s.split_personal_payment:.2f} per period")
    print("=" * 72)
