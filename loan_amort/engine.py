"""Core calculation engine for the loan calculator.

This module validates a ``LoanInput``, converts its rate, derives the level
payment (or the constant principal installment) and simulates the loan period
by period. The simulation supports extra payments (per period and a one-time
lump sum at the first payment), financed or up-front fees and escrow. Results
are returned as an immutable ``LoanResult``; two scenarios can be compared
with ``compare``.

Money amounts are rounded to cents on input and all balance and total
arithmetic runs in ``WIDE_CONTEXT``, so a result does not depend on the
caller's decimal context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .config import (
    CENT,
    DEFAULT_ROUNDING,
    HALF_CENT,
    ONE,
    RATE_CONTEXT,
    ROUNDING_MODES,
    WIDE_CONTEXT,
    ZERO,
)
from .data_models import (
    AmortizationMethod,
    ComparisonResult,
    Compounding,
    LoanInput,
    LoanResult,
    PaymentFrequency,
    ScheduleRow,
)
from .errors import InputValidationError, NonConvergenceError
from .payment import base_payment, present_value, principal_installment
from .rates import period_count, periodic_rate
from .utils import decimal_from_str, round_money

logger = logging.getLogger(__name__)


def _as_decimal(name: str, value: object, required: bool = False) -> Decimal:
    if value is None:
        if required:
            raise InputValidationError(f"{name} is required")
        return ZERO
    if isinstance(value, bool):
        raise InputValidationError(f"{name} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = decimal_from_str(str(value))
        except ValueError as exc:
            raise InputValidationError(f"{name} must be a number, got {value!r}") from exc
    if not result.is_finite():
        raise InputValidationError(f"{name} must be a finite number")
    return result


def validate_input(loan: LoanInput) -> LoanInput:
    """Check ``loan`` and return a copy with all amounts as ``Decimal``.

    The principal and every other money amount are rounded to cents with the
    loan's rounding mode.

    Raises
    ------
    InputValidationError
        If a required field is missing or a value is out of range.
    """
    if loan is None:
        raise InputValidationError("Loan input is required")
    if loan.rounding not in ROUNDING_MODES:
        raise InputValidationError(f"Unknown rounding mode: {loan.rounding!r}")

    principal = round_money(_as_decimal("Principal", loan.principal, required=True), loan.rounding)
    if principal <= 0:
        raise InputValidationError("Principal must be greater than zero")
    annual_rate = _as_decimal("Annual rate", loan.annual_rate, required=True)
    if annual_rate < 0:
        raise InputValidationError("Annual rate cannot be negative")
    if loan.term_months is None or isinstance(loan.term_months, bool) or not isinstance(loan.term_months, int):
        raise InputValidationError("Term (months) must be a whole number")
    if loan.term_months <= 0:
        raise InputValidationError("Term (months) must be greater than zero")
    if not isinstance(loan.start_date, date):
        raise InputValidationError("Start date is required")
    if not isinstance(loan.frequency, PaymentFrequency):
        raise InputValidationError(f"Unknown payment frequency: {loan.frequency!r}")
    if not isinstance(loan.compounding, Compounding):
        raise InputValidationError(f"Unknown compounding convention: {loan.compounding!r}")
    if not isinstance(loan.method, AmortizationMethod):
        raise InputValidationError(f"Unknown amortization method: {loan.method!r}")

    amounts = {}
    for field, label in (
        ("extra_per_period", "Extra per period"),
        ("extra_lump_sum", "Lump sum extra"),
        ("origination_fee", "Origination fee"),
        ("closing_costs", "Closing costs"),
        ("escrow_per_period", "Escrow per period"),
    ):
        amount = _as_decimal(label, getattr(loan, field))
        if amount < 0:
            raise InputValidationError(f"{label} cannot be negative")
        amounts[field] = round_money(amount, loan.rounding)

    return replace(loan, principal=principal, annual_rate=annual_rate, **amounts)


@dataclass(frozen=True)
class SimulationState:
    """Running state of the schedule simulation.

    Each call to ``step`` returns a new state; nothing is mutated in place.
    """

    balance: Decimal
    period: int
    due_date: date
    total_paid: Decimal
    total_interest: Decimal
    rows: Tuple[ScheduleRow, ...] = ()

    @property
    def settled(self) -> bool:
        return self.balance <= HALF_CENT


@dataclass(frozen=True)
class _Terms:
    rate: Decimal
    payment: Decimal
    periods: int
    extra: Decimal
    lump_sum: Decimal
    escrow: Decimal
    frequency: PaymentFrequency
    rounding: str
    # set for constant principal loans; the payment then follows the interest
    installment: Optional[Decimal] = None


def _add(*values: Decimal) -> Decimal:
    total = ZERO
    for value in values:
        total = WIDE_CONTEXT.add(total, value)
    return total


def step(state: SimulationState, terms: _Terms) -> SimulationState:
    """Simulate one payment period and return the next state."""
    period = state.period + 1
    interest = round_money(WIDE_CONTEXT.multiply(state.balance, terms.rate), terms.rounding)
    if terms.installment is not None:
        principal_due = terms.installment
    else:
        principal_due = max(ZERO, WIDE_CONTEXT.subtract(terms.payment, interest))
    extra = _add(terms.extra, terms.lump_sum) if period == 1 else terms.extra

    applied = min(state.balance, _add(principal_due, extra))
    scheduled = min(principal_due, applied)
    extra_applied = WIDE_CONTEXT.subtract(applied, scheduled)
    balance = WIDE_CONTEXT.subtract(state.balance, applied)
    if terms.installment is not None:
        payment = _add(scheduled, interest)
    else:
        payment = terms.payment

    row = ScheduleRow(
        period=period,
        due_date=state.due_date,
        payment=round_money(payment, terms.rounding),
        interest=interest,
        principal=round_money(scheduled, terms.rounding),
        extra=round_money(extra_applied, terms.rounding),
        escrow=round_money(terms.escrow, terms.rounding),
        ending_balance=round_money(max(balance, ZERO), terms.rounding),
    )
    next_state = replace(
        state,
        balance=balance,
        period=period,
        total_paid=_add(state.total_paid, interest, applied, terms.escrow),
        total_interest=_add(state.total_interest, interest),
        rows=state.rows + (row,),
    )
    if not next_state.settled:
        next_state = replace(next_state, due_date=terms.frequency.next_due_date(state.due_date))
    return next_state


def rounding_drift_limit(rate: Decimal, periods: int) -> Decimal:
    """Largest residual explained by rounding the payment and interest to cents.

    This is the future value of one cent per period over ``periods``.
    """
    if rate == 0:
        return WIDE_CONTEXT.multiply(CENT, Decimal(periods))
    growth = RATE_CONTEXT.power(RATE_CONTEXT.add(ONE, rate), periods)
    return RATE_CONTEXT.divide(RATE_CONTEXT.multiply(CENT, RATE_CONTEXT.subtract(growth, ONE)), rate)


def settle_final_row(state: SimulationState, terms: _Terms) -> SimulationState:
    """Fold the residual balance into the last row and force it to zero.

    A residual within one cent is always folded. When the period ceiling was
    reached, a residual up to the rounding drift limit is folded as well; any
    larger residual means the payment cannot retire the loan.
    """
    if not state.rows:
        return state
    residual = state.balance
    last = state.rows[-1]
    if residual.copy_abs() > CENT:
        limit = rounding_drift_limit(terms.rate, terms.periods)
        if residual > limit:
            raise NonConvergenceError(
                f"Balance of {round_money(residual, terms.rounding)} remains after "
                f"{state.period} of {terms.periods} periods"
            )
        logger.debug("Folding residual %s into final period %d", residual, last.period)
    elif residual == 0 and last.ending_balance == 0:
        return state

    folded = replace(
        last,
        principal=round_money(_add(last.principal, residual), terms.rounding),
        payment=round_money(_add(last.payment, residual), terms.rounding),
        ending_balance=round_money(ZERO, terms.rounding),
    )
    return replace(
        state,
        balance=ZERO,
        total_paid=_add(state.total_paid, residual),
        rows=state.rows[:-1] + (folded,),
    )


def simulate(
    pv: Decimal, terms: _Terms, first_due: date
) -> SimulationState:
    """Run the schedule from ``pv`` until it settles or the ceiling is hit."""
    state = SimulationState(
        balance=pv,
        period=0,
        due_date=first_due,
        total_paid=ZERO,
        total_interest=ZERO,
    )
    while not state.settled and state.period < terms.periods:
        state = step(state, terms)
    return settle_final_row(state, terms)


def calculate_loan(loan: LoanInput) -> LoanResult:
    """Compute the payment, totals and full amortization schedule for ``loan``.

    For a constant principal loan ``base_payment`` is the first (largest)
    payment; later payments fall with the interest on the balance.

    Raises
    ------
    InputValidationError
        If the input is incomplete or out of range.
    NonConvergenceError
        If the schedule cannot be retired within its nominal term.
    """
    loan = validate_input(loan)
    rounding = loan.rounding
    ppy = loan.frequency.periods_per_year
    periods = period_count(loan.term_months, ppy)
    rate = periodic_rate(loan.annual_rate, ppy, loan.compounding)
    pv = present_value(loan)

    installment = None
    if loan.method is AmortizationMethod.CONSTANT_PRINCIPAL:
        installment = principal_installment(pv, periods, rounding)
        payment, warnings = installment, []
        logger.debug("Principal installment %s over %d periods at rate %s on %s", installment, periods, rate, pv)
    else:
        payment, warnings = base_payment(pv, rate, periods, rounding)
        logger.debug("Base payment %s over %d periods at rate %s on %s", payment, periods, rate, pv)

    terms = _Terms(
        rate=rate,
        payment=payment,
        periods=periods,
        extra=loan.extra_per_period,
        lump_sum=loan.extra_lump_sum,
        escrow=loan.escrow_per_period if loan.include_escrow else ZERO,
        frequency=loan.frequency,
        rounding=rounding,
        installment=installment,
    )
    state = simulate(pv, terms, loan.frequency.next_due_date(loan.start_date))

    if installment is not None:
        payment = state.rows[0].payment

    total_paid = state.total_paid
    if not loan.finance_fees:
        total_paid = _add(total_paid, loan.fees)

    payoff_date = state.rows[-1].due_date if state.rows else loan.start_date
    return LoanResult(
        periodic_payment=round_money(_add(payment, terms.escrow), rounding),
        base_payment=payment,
        periodic_rate=rate,
        payoff_date=payoff_date,
        total_paid=round_money(total_paid, rounding),
        total_interest=round_money(state.total_interest, rounding),
        warnings=tuple(warnings),
        schedule=state.rows,
    )


def compare(
    a: LoanInput, b: LoanInput, rounding: str = DEFAULT_ROUNDING
) -> ComparisonResult:
    """Calculate two scenarios independently and report how ``a`` differs from ``b``."""
    result_a = calculate_loan(a)
    result_b = calculate_loan(b)
    return ComparisonResult(
        a=result_a,
        b=result_b,
        payment_diff=round_money(
            WIDE_CONTEXT.subtract(result_a.periodic_payment, result_b.periodic_payment), rounding
        ),
        interest_diff=round_money(
            WIDE_CONTEXT.subtract(result_a.total_interest, result_b.total_interest), rounding
        ),
        periods_saved=len(result_a.schedule) - len(result_b.schedule),
    )
