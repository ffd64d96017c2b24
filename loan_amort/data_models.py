"""Data models for the loan calculator.

This module defines the enums and dataclasses used by the calculator: the
payment frequency and compounding conventions, the loan input, individual
schedule rows, the result of a calculation and the comparison of two results.
All records are frozen; the engine builds them once and callers only read
them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from .config import DEFAULT_ROUNDING, WIDE_CONTEXT, ZERO
from .utils import add_months


class PaymentFrequency(Enum):
    """How often payments fall due.

    The value of each member is the number of periods in one year.
    """

    MONTHLY = 12
    BIWEEKLY = 26
    WEEKLY = 52

    @property
    def periods_per_year(self) -> int:
        return self.value

    def next_due_date(self, current: date) -> date:
        """Return the due date one period after ``current``."""
        if self is PaymentFrequency.MONTHLY:
            return add_months(current, 1)
        if self is PaymentFrequency.BIWEEKLY:
            return current + timedelta(weeks=2)
        return current + timedelta(weeks=1)


class Compounding(Enum):
    """How an annual percentage rate is turned into a per-period rate."""

    NOMINAL_MONTHLY = "nominal-monthly"
    NOMINAL_DAILY = "nominal-daily"
    EFFECTIVE_ANNUAL = "effective-annual"


class AmortizationMethod(Enum):
    """How principal is repaid over the term.

    ``LEVEL_PAYMENT`` keeps the base payment constant (annuity, "PRICE").
    ``CONSTANT_PRINCIPAL`` repays the same principal every period, so the
    payment falls as interest on the balance shrinks ("SAC").
    """

    LEVEL_PAYMENT = "level"
    CONSTANT_PRINCIPAL = "constant-principal"


@dataclass(frozen=True)
class LoanInput:
    """All parameters of a single loan scenario.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed.
    annual_rate: Decimal
        Annual interest rate as a percentage (``Decimal("6")`` means 6 %).
    term_months: int
        Scheduled length of the loan in months. It is converted into a number
        of payment periods according to ``frequency``.
    start_date: date
        The first due date is one period after this date.
    extra_per_period: Decimal
        Additional principal paid every period.
    extra_lump_sum: Decimal
        One-time additional principal paid with the first payment.
    finance_fees: bool
        When True the origination fee and closing costs are added to the
        amortized balance; otherwise they are paid up front and only counted
        in the total paid.
    include_escrow: bool
        When True ``escrow_per_period`` is added to every payment.
    rounding: str
        A ``decimal`` rounding mode used for every monetary rounding.
    method: AmortizationMethod
        Level payments (the default) or a constant principal installment.
    """

    principal: Decimal
    annual_rate: Decimal
    term_months: int
    start_date: date
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    extra_per_period: Decimal = ZERO
    extra_lump_sum: Decimal = ZERO
    finance_fees: bool = False
    origination_fee: Decimal = ZERO
    closing_costs: Decimal = ZERO
    include_escrow: bool = False
    escrow_per_period: Decimal = ZERO
    compounding: Compounding = Compounding.NOMINAL_MONTHLY
    rounding: str = DEFAULT_ROUNDING
    method: AmortizationMethod = AmortizationMethod.LEVEL_PAYMENT

    @property
    def fees(self) -> Decimal:
        return WIDE_CONTEXT.add(self.origination_fee or ZERO, self.closing_costs or ZERO)


@dataclass(frozen=True)
class ScheduleRow:
    """One period of the amortization schedule.

    ``payment`` is the scheduled base payment (without extra or escrow).
    ``principal`` is the part of the scheduled payment that reduced the
    balance and ``extra`` the additional principal on top of it.
    """

    period: int
    due_date: date
    payment: Decimal
    interest: Decimal
    principal: Decimal
    extra: Decimal
    escrow: Decimal
    ending_balance: Decimal

    @property
    def cash_paid(self) -> Decimal:
        total = ZERO
        for part in (self.interest, self.principal, self.extra, self.escrow):
            total = WIDE_CONTEXT.add(total, part)
        return total


@dataclass(frozen=True)
class LoanResult:
    periodic_payment: Decimal  # base payment plus escrow
    base_payment: Decimal
    periodic_rate: Decimal
    payoff_date: date
    total_paid: Decimal
    total_interest: Decimal
    warnings: Tuple[str, ...]
    schedule: Tuple[ScheduleRow, ...]

    @property
    def periods(self) -> int:
        return len(self.schedule)

    @property
    def final_row(self) -> Optional[ScheduleRow]:
        return self.schedule[-1] if self.schedule else None

    @property
    def last_payment(self) -> Optional[Decimal]:
        """Base payment of the final period, which differs from ``base_payment``
        for constant principal loans and for loans with a settled residual."""
        return self.schedule[-1].payment if self.schedule else None


@dataclass(frozen=True)
class ComparisonResult:
    """Two results and how the first differs from the second.

    A positive ``periods_saved`` means scenario ``b`` pays off in fewer
    periods than scenario ``a``.
    """

    a: LoanResult
    b: LoanResult
    payment_diff: Decimal
    interest_diff: Decimal
    periods_saved: int
