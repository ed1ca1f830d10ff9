"""
Unit tests for piecewise curve bootstrapping.
"""

from datetime import date
import logging
import numpy as np
import pandas as pd
import pytest

from ratecurves.conventions import Compounding, DayCount, WEEKENDS_ONLY
from ratecurves.curves.interpolation import LinearInterpolator, LogLinearInterpolator
from ratecurves.curves.piecewise import (
    BootstrapSettings,
    PiecewiseYieldCurve,
    bootstrap_from_quotes,
    helpers_from_quotes,
    pillar_residual,
    repricing_errors,
)
from ratecurves.curves.rate_helpers import (
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
)
from ratecurves.errors import BootstrapError, PreconditionError, SolverError


REF = date(2025, 1, 2)


def deposit(rate, maturity, day_count=DayCount.ACT_360):
    return DepositRateHelper(rate, REF, maturity, day_count)


class TestSingleDeposit:
    """3M deposit at 5% Act/360 from 2025-01-02 to 2025-04-02."""

    @pytest.fixture
    def curve(self):
        return PiecewiseYieldCurve(REF, [deposit(0.05, date(2025, 4, 2))])

    def test_reprices(self, curve):
        fwd = curve.forward_rate(REF, date(2025, 4, 2), DayCount.ACT_360, Compounding.SIMPLE)
        assert abs(fwd.rate - 0.05) < 1e-10
        assert abs(curve.helpers[0].implied_quote(curve) - 0.05) < 1e-10

    def test_discount_at_reference(self, curve):
        assert curve.discount(0.0) == 1.0
        assert curve.discount_date(REF) == 1.0

    def test_pillars(self, curve):
        assert curve.dates == (REF, date(2025, 4, 2))
        assert curve.reference_date == REF
        assert curve.max_date == date(2025, 4, 2)
        assert curve.rates[0] == curve.rates[1]
        assert len(curve.iterations) == 1

    def test_immutable(self, curve):
        with pytest.raises(ValueError):
            curve.rates[1] = 0.0


class TestDepositLadder:
    """3M 4% and 6M 4.2% deposits, Act/365F."""

    @pytest.fixture
    def curve(self):
        helpers = [
            deposit(0.04, date(2025, 4, 2), DayCount.ACT_365),
            deposit(0.042, date(2025, 7, 2), DayCount.ACT_365),
        ]
        return PiecewiseYieldCurve(REF, helpers)

    def test_discount_ordering(self, curve):
        t_3m = curve.times[1]
        t_6m = curve.times[2]
        assert curve.discount(t_3m) > curve.discount(t_6m) > 0

    def test_reprices_3m(self, curve):
        assert abs(curve.helpers[0].implied_quote(curve) - 0.04) < 1e-6

    def test_reprices_all(self, curve):
        for helper in curve.helpers:
            assert abs(helper.quote_error(curve)) < 1e-10

    def test_decreasing_discount_factors(self):
        maturities = [date(2025, 2, 3), date(2025, 4, 2), date(2025, 7, 2),
                      date(2025, 10, 2), date(2026, 1, 2)]
        quotes = [0.030, 0.032, 0.035, 0.037, 0.040]
        curve = PiecewiseYieldCurve(REF, [deposit(q, m) for q, m in zip(quotes, maturities)])

        dfs = [curve.discount(t) for t in np.linspace(0.0, curve.times[-1], 200)]
        assert all(b < a for a, b in zip(dfs, dfs[1:]))

    def test_negative_rates(self):
        helpers = [
            deposit(-0.005, date(2025, 4, 2)),
            deposit(-0.004, date(2025, 7, 2)),
            deposit(-0.003, date(2026, 1, 2)),
        ]
        curve = PiecewiseYieldCurve(REF, helpers)

        for d in curve.dates[1:]:
            assert curve.discount_date(d) > 1.0
        for helper in curve.helpers:
            assert abs(helper.quote_error(curve)) < 1e-10

    def test_unsorted_input(self):
        late = deposit(0.042, date(2025, 7, 2))
        early = deposit(0.04, date(2025, 4, 2))
        curve = PiecewiseYieldCurve(REF, [late, early])
        assert curve.helpers == (early, late)
        assert list(curve.dates) == [REF, date(2025, 4, 2), date(2025, 7, 2)]


class TestPreconditions:
    """Invalid helper sets."""

    def test_no_helpers(self):
        with pytest.raises(PreconditionError):
            PiecewiseYieldCurve(REF, [])

    def test_precondition_is_value_error(self):
        with pytest.raises(ValueError):
            PiecewiseYieldCurve(REF, iter(()))

    def test_pillar_on_reference_date(self):
        helper = DepositRateHelper(0.05, date(2024, 10, 2), REF)
        with pytest.raises(PreconditionError) as excinfo:
            PiecewiseYieldCurve(REF, [deposit(0.05, date(2025, 4, 2)), helper])
        assert str(REF) in str(excinfo.value)

    def test_pillar_before_reference_date(self):
        helper = DepositRateHelper(0.05, date(2024, 7, 2), date(2024, 10, 2))
        with pytest.raises(PreconditionError):
            PiecewiseYieldCurve(REF, [helper])

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            PiecewiseYieldCurve(REF, [deposit(0.05, date(2025, 4, 2))], min_rate=0.5, max_rate=0.1)


class TestDuplicatePillars:
    """Helpers sharing a pillar date."""

    def test_first_helper_wins(self):
        first = deposit(0.05, date(2025, 4, 2))
        second = deposit(0.06, date(2025, 4, 2))
        curve = PiecewiseYieldCurve(REF, [first, second])

        assert curve.helpers == (first,)
        assert len(curve.dates) == 2
        assert abs(first.quote_error(curve)) < 1e-10
        assert abs(second.quote_error(curve)) > 1e-3


class TestSolverFailures:
    """Failures surface as BootstrapError naming the pillar."""

    def test_log_linear_negative_rate(self):
        """Negative zero rates cannot be log-interpolated."""
        helpers = [deposit(-0.01, date(2025, 4, 2))]
        with pytest.raises(BootstrapError) as excinfo:
            PiecewiseYieldCurve(REF, helpers, interpolation=LogLinearInterpolator)

        assert excinfo.value.pillar_date == date(2025, 4, 2)
        assert excinfo.value.helper is helpers[0]
        assert isinstance(excinfo.value.__cause__, SolverError)

    def test_log_linear_positive_rates(self):
        helpers = [deposit(0.03, date(2025, 4, 2)), deposit(0.035, date(2025, 10, 2))]
        curve = PiecewiseYieldCurve(REF, helpers, interpolation="log_linear", min_rate=1e-4)
        for helper in curve.helpers:
            assert abs(helper.quote_error(curve)) < 1e-10

    def test_log_linear_needs_positive_lower_bound(self):
        """Undefined lower bound moves to the midpoint (10%), above these roots."""
        helpers = [deposit(0.03, date(2025, 4, 2)), deposit(0.035, date(2025, 10, 2))]
        with pytest.raises(BootstrapError) as excinfo:
            PiecewiseYieldCurve(REF, helpers, interpolation="log_linear")
        assert excinfo.value.pillar_date == date(2025, 4, 2)

    def test_quote_outside_bounds(self):
        helpers = [deposit(0.50, date(2025, 4, 2))]
        with pytest.raises(BootstrapError):
            PiecewiseYieldCurve(REF, helpers)

    def test_retry_with_wider_bounds(self):
        helpers = [deposit(0.50, date(2025, 4, 2))]
        curve = PiecewiseYieldCurve(REF, helpers, settings=BootstrapSettings.wide())
        assert abs(helpers[0].quote_error(curve)) < 1e-10
        assert curve.settings.max_rate == 1.00

    def test_keyword_overrides(self):
        helpers = [deposit(0.50, date(2025, 4, 2))]
        curve = PiecewiseYieldCurve(REF, helpers, max_rate=0.8)
        assert curve.settings.max_rate == 0.8
        assert curve.settings.min_rate == -0.10


class TestMixedInstruments:
    """Deposits, FRA, futures and swaps in one curve."""

    @pytest.fixture
    def helpers(self):
        ref = REF
        return [
            DepositRateHelper.from_tenor(0.0430, "1M", 2, WEEKENDS_ONLY, reference_date=ref),
            DepositRateHelper.from_tenor(0.0435, "3M", 2, WEEKENDS_ONLY, reference_date=ref),
            FraRateHelper.from_months(0.0440, 3, 6, 2, WEEKENDS_ONLY, reference_date=ref),
            FuturesRateHelper.from_price(95.50, date(2025, 7, 16), convexity_adjustment=0.0001),
            SwapRateHelper.from_conventions(0.0420, "2Y", WEEKENDS_ONLY, reference_date=ref),
            SwapRateHelper.from_conventions(0.0400, "5Y", WEEKENDS_ONLY, reference_date=ref),
            SwapRateHelper.from_conventions(0.0410, "10Y", WEEKENDS_ONLY, reference_date=ref),
        ]

    def test_linear_reprices_every_helper(self, helpers):
        curve = PiecewiseYieldCurve(REF, helpers)

        assert len(curve.helpers) == len(helpers)
        for helper in helpers:
            assert abs(helper.quote_error(curve)) < 1e-10

    def test_monotone_cubic(self, helpers):
        """Newest pillar exact; earlier pillars only slightly perturbed."""
        curve = PiecewiseYieldCurve(REF, helpers, interpolation="monotone_cubic")

        assert abs(curve.helpers[-1].quote_error(curve)) < 1e-10
        for helper in helpers:
            assert abs(helper.quote_error(curve)) < 5e-4

    def test_cubic_spline_builds(self, helpers):
        curve = PiecewiseYieldCurve(REF, helpers, interpolation="cubic_spline")
        errors = repricing_errors(curve)
        assert np.all(np.isfinite(errors["error"]))

    def test_repricing_errors(self, helpers):
        curve = PiecewiseYieldCurve(REF, helpers)
        errors = repricing_errors(curve)

        assert isinstance(errors, pd.DataFrame)
        assert list(errors.columns) == ["pillar_date", "instrument", "quote", "implied", "error"]
        assert len(errors) == len(helpers)
        assert errors["error"].abs().max() < 1e-10
        assert set(errors["instrument"]) == {
            "DepositRateHelper", "FraRateHelper", "FuturesRateHelper", "SwapRateHelper",
        }

    def test_repricing_errors_other_helpers(self, helpers):
        curve = PiecewiseYieldCurve(REF, helpers)
        extra = SwapRateHelper.from_conventions(0.0405, "7Y", WEEKENDS_ONLY, reference_date=REF)
        errors = repricing_errors(curve, [extra])
        assert len(errors) == 1
        assert abs(errors["error"].iloc[0]) < 5e-3

    def test_logging(self, helpers, caplog):
        with caplog.at_level(logging.INFO, logger="ratecurves.curves.piecewise"):
            PiecewiseYieldCurve(REF, helpers)
        assert "Bootstrapped 7 pillars" in caplog.text


class TestPillarResidual:
    """The per-pillar objective is a pure function."""

    @pytest.fixture
    def setup(self):
        helper = deposit(0.05, date(2025, 4, 2))
        times = [0.0, DayCount.ACT_365.year_fraction(REF, date(2025, 4, 2))]
        return helper, times

    def test_does_not_mutate_inputs(self, setup):
        helper, times = setup
        committed = [0.05]
        first = pillar_residual(helper, REF, DayCount.ACT_365, times, committed, 0.04,
                                LinearInterpolator.build)
        second = pillar_residual(helper, REF, DayCount.ACT_365, times, committed, 0.04,
                                 LinearInterpolator.build)

        assert committed == [0.05]
        assert first == second

    def test_sign_change(self, setup):
        helper, times = setup
        low = pillar_residual(helper, REF, DayCount.ACT_365, times, [0.0], 0.0,
                              LinearInterpolator.build)
        high = pillar_residual(helper, REF, DayCount.ACT_365, times, [0.0], 0.10,
                               LinearInterpolator.build)
        assert low < 0 < high

    def test_undefined(self, setup):
        helper, times = setup
        residual = pillar_residual(helper, REF, DayCount.ACT_365, times, [0.05], -0.01,
                                   LogLinearInterpolator.build)
        assert residual is None


class TestBootstrapFromQuotes:
    """Curves from quote records."""

    @pytest.fixture
    def quotes(self):
        return [
            {"instrument_type": "DEPOSIT", "tenor": "3M", "quote": 0.0435},
            {"instrument_type": "FRA", "tenor": "3M", "start_tenor": "3M", "quote": 0.0440},
            {"instrument_type": "SWAP", "tenor": "2Y", "quote": 0.0420, "pay_freq": "SEMI"},
            {"instrument_type": "OIS", "tenor": "5Y", "quote": 0.0400, "day_count": "ACT/360"},
        ]

    def test_helpers_from_records(self, quotes):
        helpers = helpers_from_quotes(REF, quotes)

        assert [type(h) for h in helpers] == [
            DepositRateHelper, FraRateHelper, SwapRateHelper, SwapRateHelper,
        ]
        assert helpers[0].settlement_date == date(2025, 1, 6)
        assert len(helpers[2].fixed_schedule) == 5
        assert helpers[3].fixed_day_count == DayCount.ACT_360

    def test_from_dict_records(self, quotes):
        curve = bootstrap_from_quotes(REF, quotes)
        for helper in curve.helpers:
            assert abs(helper.quote_error(curve)) < 1e-10

    def test_from_dataframe(self, quotes):
        """Missing columns arrive as NaN and fall back to defaults."""
        frame = pd.DataFrame(quotes)
        from_frame = bootstrap_from_quotes(REF, frame)
        from_dicts = bootstrap_from_quotes(REF, quotes)

        assert from_frame.dates == from_dicts.dates
        assert np.allclose(from_frame.rates, from_dicts.rates, atol=1e-14)

    def test_futures_record(self):
        helpers = helpers_from_quotes(
            REF, [{"instrument_type": "FUTURE", "tenor": "3M", "quote": 95.5, "convexity": 0.0001}]
        )
        assert isinstance(helpers[0], FuturesRateHelper)
        assert abs(helpers[0].quote - 0.0449) < 1e-12
        assert helpers[0].value_date == date(2025, 4, 2)

    def test_unknown_instrument(self):
        with pytest.raises(ValueError):
            helpers_from_quotes(REF, [{"instrument_type": "BOND", "tenor": "5Y", "quote": 0.04}])
