"""Level payment and constant principal installment calculation.

The base payment (principal and interest only, no extra or escrow) uses the
standard annuity formula::

    payment = r * PV / (1 - (1 + r) ** -n)

where ``PV`` is the amortized balance, ``r`` the periodic rate and ``n`` the
number of periods. When the rate is zero, the payment is ``PV / n``. A
constant principal loan instead repays ``PV / n`` of principal every period
plus the interest on the outstanding balance.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Tuple

from .config import CENT, ONE, PAYMENT_PLACES, WIDE_CONTEXT, ZERO
from .data_models import LoanInput
from .errors import InputValidationError
from .utils import round_money

logger = logging.getLogger(__name__)

NEGATIVE_AMORTIZATION_WARNING = (
    "Payment is too low and would cause the balance to grow; "
    "adjusted to first-period interest plus one cent."
)


def present_value(loan: LoanInput) -> Decimal:
    """Return the balance to amortize: principal plus fees when financed."""
    if loan.finance_fees:
        return WIDE_CONTEXT.add(loan.principal, loan.fees)
    return loan.principal


def guard_negative_amortization(
    payment: Decimal, pv: Decimal, rate: Decimal, rounding: str
) -> Tuple[Decimal, List[str]]:
    """Make sure ``payment`` reduces principal in the first period.

    If the payment does not exceed the rounded first-period interest, it is
    raised to that interest plus one cent and a warning is returned.
    """
    first_interest = round_money(WIDE_CONTEXT.multiply(pv, rate), rounding)
    if payment > first_interest:
        return payment, []
    adjusted = round_money(WIDE_CONTEXT.add(first_interest, CENT), rounding)
    logger.warning(
        "Payment %s does not cover first-period interest %s; using %s",
        payment,
        first_interest,
        adjusted,
    )
    return adjusted, [NEGATIVE_AMORTIZATION_WARNING]


def base_payment(
    pv: Decimal, rate: Decimal, periods: int, rounding: str
) -> Tuple[Decimal, List[str]]:
    """Return the rounded level payment and any warnings raised computing it."""
    if periods <= 0:
        raise InputValidationError("Number of periods must be positive")
    if rate == 0:
        return round_money(WIDE_CONTEXT.divide(pv, Decimal(periods)), rounding), []

    one_plus_rate = WIDE_CONTEXT.add(ONE, rate)
    discount = WIDE_CONTEXT.power(one_plus_rate, -periods)
    denominator = WIDE_CONTEXT.subtract(ONE, discount)
    numerator = WIDE_CONTEXT.multiply(rate, pv)
    if denominator <= ZERO:
        raise InputValidationError("Periodic rate is too small to amortize over the term")
    exact = WIDE_CONTEXT.divide(numerator, denominator)
    places = Decimal(1).scaleb(-PAYMENT_PLACES, context=WIDE_CONTEXT)
    payment = round_money(exact.quantize(places, rounding=rounding, context=WIDE_CONTEXT), rounding)
    return guard_negative_amortization(payment, pv, rate, rounding)


def principal_installment(pv: Decimal, periods: int, rounding: str) -> Decimal:
    """Return the fixed principal repaid each period by a constant principal loan.

    The installment is ``PV / n`` rounded to cents; the rounding difference is
    settled in the final period.
    """
    if periods <= 0:
        raise InputValidationError("Number of periods must be positive")
    return round_money(WIDE_CONTEXT.divide(pv, Decimal(periods)), rounding)
