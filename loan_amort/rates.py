"""Conversion of an annual percentage rate into a per-period rate.

Three conventions are supported:

* nominal monthly - the APR is nominal with 12 compounding periods per year;
  the monthly rate is scaled linearly (``12 / periods_per_year``) to the
  payment frequency. This is a linear approximation, not a re-compounding.
* nominal daily - the APR is divided by 365 and the daily rate is compounded
  up to the payment period: ``(1 + apr/365) ** (365 / ppy) - 1``.
* effective annual - the APR is an effective annual rate:
  ``(1 + apr) ** (1 / ppy) - 1``.

Arithmetic is done at ``RATE_PRECISION`` significant digits. Fractional
powers are evaluated in binary double precision and converted back to a
Decimal at that precision.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from .config import (
    APR_PLACES,
    ONE,
    RATE_CONTEXT,
    RATE_PLACES,
    WIDE_CONTEXT,
    ZERO,
)
from .data_models import Compounding
from .errors import InputValidationError

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)
_MONTHS = Decimal(12)
_DAYS = Decimal(365)


def _divide(numerator: Decimal, denominator: Decimal, places: int) -> Decimal:
    """Divide and round half-up to a fixed number of decimal places."""
    quotient = WIDE_CONTEXT.divide(numerator, denominator)
    return quotient.quantize(
        Decimal(1).scaleb(-places, context=WIDE_CONTEXT), rounding=ROUND_HALF_UP, context=WIDE_CONTEXT
    )


def _fractional_power(base: Decimal, exponent: float) -> Decimal:
    return RATE_CONTEXT.create_decimal_from_float(float(base) ** exponent)


def period_count(term_months: int, periods_per_year: int) -> int:
    """Return the number of payment periods covering ``term_months``.

    Partial periods round up, so a 12 month term paid biweekly has 26
    periods and a 1 month term paid weekly has 5.
    """
    return -(-term_months * periods_per_year // 12)


def periodic_rate(
    annual_rate_percent: Decimal, periods_per_year: int, compounding: Compounding
) -> Decimal:
    """Return the decimal interest rate for one payment period.

    >>> periodic_rate(Decimal("6"), 12, Compounding.NOMINAL_MONTHLY)
    Decimal('0.0050000000000000000000')
    """
    if annual_rate_percent is None:
        raise InputValidationError("Annual rate is required")
    if annual_rate_percent < 0:
        raise InputValidationError("Annual rate cannot be negative")
    if periods_per_year <= 0:
        raise InputValidationError("Periods per year must be positive")

    apr = _divide(annual_rate_percent, _HUNDRED, APR_PLACES)
    if apr == 0:
        return ZERO

    ppy = Decimal(periods_per_year)
    if compounding is Compounding.NOMINAL_MONTHLY:
        monthly = _divide(apr, _MONTHS, RATE_PLACES)
        factor = _divide(_MONTHS, ppy, RATE_PLACES)
        rate = RATE_CONTEXT.multiply(monthly, factor)
    elif compounding is Compounding.NOMINAL_DAILY:
        daily = _divide(apr, _DAYS, RATE_PLACES)
        one_plus_daily = RATE_CONTEXT.add(ONE, daily)
        grown = _fractional_power(one_plus_daily, 365.0 / periods_per_year)
        rate = RATE_CONTEXT.subtract(grown, ONE)
    elif compounding is Compounding.EFFECTIVE_ANNUAL:
        one_plus_apr = RATE_CONTEXT.add(ONE, apr)
        grown = _fractional_power(one_plus_apr, 1.0 / periods_per_year)
        rate = RATE_CONTEXT.subtract(grown, ONE)
    else:
        raise InputValidationError(f"Unknown compounding convention: {compounding!r}")

    logger.debug(
        "Periodic rate %s for %s%% APR (%s, %d periods/year)",
        rate,
        annual_rate_percent,
        compounding.value,
        periods_per_year,
    )
    return rate
