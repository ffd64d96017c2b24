"""Unit tests for rates.py: APR to per-period rate conversion."""
from decimal import Decimal

import pytest

from loan_amort.data_models import Compounding
from loan_amort.errors import InputValidationError
from loan_amort.rates import period_count, periodic_rate


class TestPeriodicRate:
    def test_nominal_monthly_six_percent(self):
        assert periodic_rate(Decimal("6"), 12, Compounding.NOMINAL_MONTHLY) == Decimal("0.005")

    def test_nominal_monthly_scales_linearly_to_biweekly(self):
        rate = periodic_rate(Decimal("6"), 26, Compounding.NOMINAL_MONTHLY)
        # 0.005 * 12/26, not a re-compounded rate
        assert abs(rate - Decimal("0.06") / Decimal(26)) < Decimal("1e-18")

    def test_nominal_daily_compounds_daily_rate(self):
        rate = periodic_rate(Decimal("6"), 12, Compounding.NOMINAL_DAILY)
        expected = (1 + 0.06 / 365) ** (365 / 12) - 1
        assert abs(float(rate) - expected) < 1e-12
        # daily compounding is slightly dearer than the plain monthly rate
        assert rate > Decimal("0.005")

    def test_effective_annual(self):
        rate = periodic_rate(Decimal("12"), 12, Compounding.EFFECTIVE_ANNUAL)
        expected = 1.12 ** (1 / 12) - 1
        assert abs(float(rate) - expected) < 1e-12
        assert rate < Decimal("0.01")

    @pytest.mark.parametrize("compounding", list(Compounding))
    def test_zero_rate(self, compounding):
        assert periodic_rate(Decimal("0"), 52, compounding) == 0

    def test_negative_rate_rejected(self):
        with pytest.raises(InputValidationError, match="negative"):
            periodic_rate(Decimal("-0.5"), 12, Compounding.NOMINAL_MONTHLY)

    def test_missing_rate_rejected(self):
        with pytest.raises(InputValidationError):
            periodic_rate(None, 12, Compounding.NOMINAL_MONTHLY)


class TestPeriodCount:
    @pytest.mark.parametrize("term,ppy,expected", [
        (12, 12, 12),
        (12, 26, 26),
        (12, 52, 52),
        (360, 26, 780),
        (13, 26, 29),
        (1, 52, 5),
    ])
    def test_partial_periods_round_up(self, term, ppy, expected):
        assert period_count(term, ppy) == expected
