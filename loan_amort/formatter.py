"""Output helpers for the loan calculator.

This module provides simple functions to render results, amortization
schedules and scenario comparisons in a tabular text format. We rely only on
built-in printing and string formatting. None of these functions modify the
records they are given.
"""

from __future__ import annotations

from typing import Sequence

from .config import WIDE_CONTEXT
from .data_models import ComparisonResult, LoanResult, ScheduleRow


def print_summary(result: LoanResult) -> None:
    """Print the headline figures of a loan in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Periodic payment   : {result.periodic_payment:.2f}")
    if result.periodic_payment != result.base_payment:
        print(f"  of which P&I     : {result.base_payment:.2f}")
    if result.last_payment is not None and result.last_payment != result.base_payment:
        print(f"Final payment P&I  : {result.last_payment:.2f}")
    print(f"Payoff date        : {result.payoff_date.isoformat()}")
    print(f"Payments made      : {result.periods}")
    print(f"Total interest     : {result.total_interest:.2f}")
    print(f"Total paid         : {result.total_paid:.2f}")
    if result.warnings:
        print("Warnings:")
        for warning in result.warnings:
            print(f" - {warning}")
    print("-" * 72)


def _format_row(entry: ScheduleRow) -> str:
    return "\t".join(
        [
            str(entry.period),
            entry.due_date.isoformat(),
            f"{entry.payment:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.extra:.2f}",
            f"{entry.escrow:.2f}",
            f"{entry.ending_balance:.2f}",
        ]
    )


def print_schedule(schedule: Sequence[ScheduleRow], edge_rows: int = 0) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Sequence[ScheduleRow]
        The schedule rows to print.
    edge_rows: int
        When positive and the schedule is longer than twice this number, only
        the first and last ``edge_rows`` rows are printed.
    """
    headers = ["Period", "Date", "Payment", "Interest", "Principal", "Extra", "Escrow", "EndBal"]
    print("\t".join(headers))
    if edge_rows > 0 and len(schedule) > edge_rows * 2:
        for entry in schedule[:edge_rows]:
            print(_format_row(entry))
        print("...")
        for entry in schedule[-edge_rows:]:
            print(_format_row(entry))
        return
    for entry in schedule:
        print(_format_row(entry))


def print_comparison(comparison: ComparisonResult) -> None:
    """Print two loan results side by side.

    The difference column is scenario 1 minus scenario 2, so a positive
    difference means the second scenario is cheaper or shorter.
    """
    a, b = comparison.a, comparison.b
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    print(f"{'periodic_payment':20s} {a.periodic_payment:15.2f} {b.periodic_payment:15.2f} {comparison.payment_diff:15.2f}")
    print(f"{'total_interest':20s} {a.total_interest:15.2f} {b.total_interest:15.2f} {comparison.interest_diff:15.2f}")
    print(f"{'total_paid':20s} {a.total_paid:15.2f} {b.total_paid:15.2f} {WIDE_CONTEXT.subtract(a.total_paid, b.total_paid):15.2f}")
    print(f"{'payments_made':20s} {a.periods:15d} {b.periods:15d} {comparison.periods_saved:15d}")
    print(f"{'payoff_date':20s} {a.payoff_date.isoformat():>15s} {b.payoff_date.isoformat():>15s}")
    print("=" * 72)
