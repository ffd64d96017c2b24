"""Exceptions raised by the amortization engine."""


class LoanCalculationError(Exception):
    """Base class for failures that abort a loan calculation."""


class InputValidationError(LoanCalculationError, ValueError):
    """The loan input is missing a required field or holds an invalid value."""


class NonConvergenceError(LoanCalculationError, RuntimeError):
    """The schedule reached its period ceiling without paying off the loan."""
