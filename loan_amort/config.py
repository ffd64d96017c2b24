"""Numeric settings shared by the amortization engine.

Precision is carried by explicit ``decimal.Context`` objects rather than by
changing the process-wide context, so independent calculations never affect
each other.
"""

from decimal import (
    ROUND_05UP,
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    ROUND_UP,
    Context,
    Decimal,
)

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")
# A balance at or below half a cent is treated as paid off.
HALF_CENT = Decimal("0.005")

DEFAULT_ROUNDING = ROUND_HALF_UP
ROUNDING_MODES = frozenset(
    {
        ROUND_05UP,
        ROUND_CEILING,
        ROUND_DOWN,
        ROUND_FLOOR,
        ROUND_HALF_DOWN,
        ROUND_HALF_EVEN,
        ROUND_HALF_UP,
        ROUND_UP,
    }
)

# Significant digits used for rate arithmetic.
RATE_PRECISION = 20
RATE_CONTEXT = Context(prec=RATE_PRECISION, rounding=ROUND_HALF_UP)

# Money arithmetic (balances, totals) and fixed-scale division (e.g. "to 20
# decimal places") run in a context wide enough that results are exact before
# they are quantized, whatever the caller's current context is.
WIDE_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)

APR_PLACES = 12
RATE_PLACES = 20
PAYMENT_PLACES = 10
