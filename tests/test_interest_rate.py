"""
Unit tests for InterestRate.
"""

from datetime import date
import math
import pytest

from ratecurves.conventions import Compounding, DayCount, Frequency
from ratecurves.interest_rate import InterestRate


class TestCompoundFactor:
    """Compound factors under each compounding rule."""

    def test_simple(self):
        r = InterestRate(0.05, DayCount.ACT_360, Compounding.SIMPLE)
        assert abs(r.compound_factor(0.5) - 1.025) < 1e-12

    def test_compounded(self):
        r = InterestRate(0.05, DayCount.ACT_365, Compounding.COMPOUNDED, Frequency.SEMIANNUAL)
        assert abs(r.compound_factor(2.0) - 1.025 ** 4) < 1e-12

    def test_continuous(self):
        r = InterestRate(0.05)
        assert abs(r.compound_factor(3.0) - math.exp(0.15)) < 1e-12

    def test_simple_then_compounded(self):
        r = InterestRate(0.04, DayCount.ACT_365, Compounding.SIMPLE_THEN_COMPOUNDED, Frequency.QUARTERLY)
        assert abs(r.compound_factor(0.2) - (1 + 0.04 * 0.2)) < 1e-12
        assert abs(r.compound_factor(1.0) - 1.01 ** 4) < 1e-12

    def test_date_pair(self):
        """Compound factor over a date pair uses the rate's day count."""
        r = InterestRate(0.05, DayCount.ACT_360, Compounding.SIMPLE)
        factor = r.compound_factor((date(2024, 1, 15), date(2024, 4, 15)))
        assert abs(factor - (1 + 0.05 * 91 / 360)) < 1e-12

    def test_zero_time(self):
        assert InterestRate(0.05).compound_factor(0.0) == 1.0

    def test_negative_time_rejected(self):
        with pytest.raises(ValueError):
            InterestRate(0.05).compound_factor(-1.0)

    def test_discount_factor(self):
        r = InterestRate(0.05)
        assert abs(r.discount_factor(2.0) * r.compound_factor(2.0) - 1.0) < 1e-14


class TestImpliedRate:
    """Rates implied by compound factors."""

    @pytest.mark.parametrize("compounding,frequency", [
        (Compounding.SIMPLE, Frequency.ANNUAL),
        (Compounding.COMPOUNDED, Frequency.SEMIANNUAL),
        (Compounding.CONTINUOUS, Frequency.ANNUAL),
        (Compounding.SIMPLE_THEN_COMPOUNDED, Frequency.QUARTERLY),
        (Compounding.COMPOUNDED_THEN_SIMPLE, Frequency.QUARTERLY),
    ])
    def test_recovers_rate(self, compounding, frequency):
        """Implied rate of a rate's own compound factor is the rate."""
        r = InterestRate(0.037, DayCount.ACT_365, compounding, frequency)
        for t in (0.1, 1.0, 2.5):
            implied = InterestRate.implied_rate(
                r.compound_factor(t), DayCount.ACT_365, compounding, frequency, t
            )
            assert abs(implied.rate - 0.037) < 1e-12

    def test_zero_horizon(self):
        r = InterestRate.implied_rate(1.0, DayCount.ACT_365, Compounding.SIMPLE, Frequency.ANNUAL, 0.0)
        assert r.rate == 0.0

    def test_non_positive_compound(self):
        with pytest.raises(ValueError):
            InterestRate.implied_rate(0.0, DayCount.ACT_365, Compounding.SIMPLE, Frequency.ANNUAL, 1.0)

    def test_equivalent_rate(self):
        """5% continuous equals exp(0.05) - 1 annual compounded."""
        r = InterestRate(0.05)
        eq = r.equivalent_rate(Compounding.COMPOUNDED, Frequency.ANNUAL, 1.0)
        assert abs(eq.rate - (math.exp(0.05) - 1.0)) < 1e-12
        assert eq.compounding == Compounding.COMPOUNDED

    def test_float_and_str(self):
        r = InterestRate(0.05, DayCount.ACT_360, Compounding.SIMPLE)
        assert float(r) == 0.05
        assert "5.0000%" in str(r)
