"""Command-line interface for the loan calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries or
compare two loan scenarios. Schedules can be printed to the terminal or
exported to CSV/JSON files.
"""

from __future__ import annotations

import csv
import json
import logging
import shlex
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import click

from .config import WIDE_CONTEXT, ZERO
from .data_models import (
    AmortizationMethod,
    Compounding,
    LoanInput,
    LoanResult,
    PaymentFrequency,
    ScheduleRow,
)
from .engine import calculate_loan, compare as compare_loans
from .errors import LoanCalculationError
from .formatter import print_comparison, print_schedule, print_summary
from .utils import decimal_from_str, parse_iso_date

CSV_HEADER = ["Period", "Date", "Payment", "Interest", "Principal", "Extra", "Escrow", "Balance"]
FREQUENCIES = {f.name.lower(): f for f in PaymentFrequency}
COMPOUNDINGS = {c.value: c for c in Compounding}
METHODS = {m.value: m for m in AmortizationMethod}
PRINTED_EDGE_ROWS = 60


def parse_amount(value: Optional[str]) -> Decimal:
    """Parse a monetary string with optional suffixes.

    Accepts plain numbers ("250000", "250,000.50") and shorthand with
    ``k``/``m`` suffixes (e.g., "250k" meaning 250 000). Empty values are
    zero.
    """
    if value is None:
        return ZERO
    text = str(value).strip().lower().replace(",", "")
    if not text:
        return ZERO
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    try:
        return WIDE_CONTEXT.multiply(decimal_from_str(text), factor)
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_percent(value: str) -> Decimal:
    """Parse an annual rate given in percent (e.g. "6.5" or "6.5%")."""
    text = str(value).strip()
    if text.endswith("%"):
        text = text[:-1]
    try:
        return decimal_from_str(text)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")


def loan_options(func: Callable) -> Callable:
    """Attach the options describing one loan scenario to a click command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Amount borrowed (e.g. 250k)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate in percent"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option("--start-date", "-s", "start_date", required=True, help="Loan start date (YYYY-MM-DD)"),
        click.option(
            "--frequency",
            "-f",
            "frequency",
            type=click.Choice(sorted(FREQUENCIES)),
            default="monthly",
            show_default=True,
            help="Payment frequency",
        ),
        click.option(
            "--compounding",
            "compounding",
            type=click.Choice(list(COMPOUNDINGS)),
            default=Compounding.NOMINAL_MONTHLY.value,
            show_default=True,
            help="How the annual rate is converted into a per-period rate",
        ),
        click.option(
            "--method",
            "method",
            type=click.Choice(list(METHODS)),
            default=AmortizationMethod.LEVEL_PAYMENT.value,
            show_default=True,
            help="Level payments or a constant principal installment (payments fall over time)",
        ),
        click.option("--extra", "extra", help="Extra principal paid every period"),
        click.option("--lump-sum", "lump_sum", help="One-time extra principal paid with the first payment"),
        click.option("--origination-fee", "origination_fee", help="Origination fee"),
        click.option("--closing-costs", "closing_costs", help="Closing costs"),
        click.option(
            "--finance-fees/--pay-fees-upfront",
            "finance_fees",
            default=False,
            help="Add fees to the amortized balance instead of paying them up front",
        ),
        click.option("--escrow", "escrow", help="Escrow (taxes/insurance) added to every payment"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_input_from_options(
    principal: str,
    rate: str,
    term: int,
    start_date: str,
    frequency: str = "monthly",
    compounding: str = Compounding.NOMINAL_MONTHLY.value,
    extra: Optional[str] = None,
    lump_sum: Optional[str] = None,
    origination_fee: Optional[str] = None,
    closing_costs: Optional[str] = None,
    finance_fees: bool = False,
    escrow: Optional[str] = None,
    method: str = AmortizationMethod.LEVEL_PAYMENT.value,
) -> LoanInput:
    try:
        start = parse_iso_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    escrow_value = parse_amount(escrow)
    return LoanInput(
        principal=parse_amount(principal),
        annual_rate=parse_percent(rate),
        term_months=term,
        start_date=start,
        frequency=FREQUENCIES[frequency],
        extra_per_period=parse_amount(extra),
        extra_lump_sum=parse_amount(lump_sum),
        finance_fees=finance_fees,
        origination_fee=parse_amount(origination_fee),
        closing_costs=parse_amount(closing_costs),
        include_escrow=escrow_value > 0,
        escrow_per_period=escrow_value,
        compounding=COMPOUNDINGS[compounding],
        method=METHODS[method],
    )


def _calculate(loan: LoanInput) -> LoanResult:
    try:
        return calculate_loan(loan)
    except LoanCalculationError as exc:
        raise click.ClickException(str(exc))


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def _row_to_dict(row: ScheduleRow) -> Dict[str, Any]:
    return {
        "period": row.period,
        "date": row.due_date.isoformat(),
        "payment": _money(row.payment),
        "interest": _money(row.interest),
        "principal": _money(row.principal),
        "extra": _money(row.extra),
        "escrow": _money(row.escrow),
        "balance": _money(row.ending_balance),
    }


def result_to_dict(result: LoanResult, include_schedule: bool = True) -> Dict[str, Any]:
    summary = {
        "periodic_payment": _money(result.periodic_payment),
        "base_payment": _money(result.base_payment),
        "final_payment": _money(result.last_payment),
        "payoff_date": result.payoff_date.isoformat(),
        "payments_made": result.periods,
        "total_interest": _money(result.total_interest),
        "total_paid": _money(result.total_paid),
        "warnings": list(result.warnings),
    }
    data: Dict[str, Any] = {"summary": summary}
    if include_schedule:
        data["schedule"] = [_row_to_dict(row) for row in result.schedule]
    return data


def export_to_json(path: Path, result: LoanResult, include_schedule: bool = True) -> None:
    """Export the summary (and optionally the schedule) to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result, include_schedule), f, indent=2)


def export_to_csv(path: Path, schedule: Sequence[ScheduleRow]) -> None:
    """Export the schedule to a CSV file, one row per period."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for row in schedule:
            writer.writerow(
                [
                    row.period,
                    row.due_date.isoformat(),
                    _money(row.payment),
                    _money(row.interest),
                    _money(row.principal),
                    _money(row.extra),
                    _money(row.escrow),
                    _money(row.ending_balance),
                ]
            )


@click.group()
@click.option(
    "--log-level",
    "log_level",
    envvar="LOAN_AMORT_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command-line loan amortization calculator."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.csv or .json)")
@click.option("--full", is_flag=True, help="Print every row instead of the first and last periods")
def schedule(output: Optional[str], full: bool, **loan_params: Any) -> None:
    """Compute and print the full amortization schedule."""
    result = _calculate(build_input_from_options(**loan_params))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result)
    print_schedule(result.schedule, edge_rows=0 if full else PRINTED_EDGE_ROWS)


@cli.command()
@loan_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **loan_params: Any) -> None:
    """Compute and print only the summary figures for a loan."""
    result = _calculate(build_input_from_options(**loan_params))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        export_to_json(path, result, include_schedule=False)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result)


@click.command("scenario")
@loan_options
def _scenario(**loan_params: Any) -> None:
    """Option parser for one scenario of ``compare``."""


def parse_scenario(options: str) -> LoanInput:
    """Turn a quoted option string into a ``LoanInput``.

    The string accepts the same options as the ``schedule`` command, e.g.
    ``"-p 300k -r 6.5 -t 360 -s 2024-08-01 --extra 250"``.
    """
    ctx = _scenario.make_context("scenario", shlex.split(options))
    return build_input_from_options(**ctx.params)


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        loan-amort compare --scenario1 "-p 300k -r 6.5 -t 360 -s 2024-08-01"
        --scenario2 "-p 300k -r 6.5 -t 360 -s 2024-08-01 --extra 250"
    """
    first = parse_scenario(scenario1)
    second = parse_scenario(scenario2)
    try:
        comparison = compare_loans(first, second)
    except LoanCalculationError as exc:
        raise click.ClickException(str(exc))
    print_comparison(comparison)


if __name__ == "__main__":
    cli()
