"""
Unit tests for the tolerant Brent root finder.
"""

import logging
import math
import pytest
from scipy.optimize import brentq

from ratecurves.errors import SolverError
from ratecurves.rootfinding import RootResult, tolerant_brent


class TestBrent:
    """Standard bracketing behaviour."""

    def test_sqrt_two(self):
        result = tolerant_brent(lambda x: x * x - 2.0, 0.0, 2.0)

        assert isinstance(result, RootResult)
        assert result.converged
        assert abs(result.root - math.sqrt(2.0)) < 1e-10

    @pytest.mark.parametrize("f,lo,hi", [
        (lambda x: math.cos(x) - x, 0.0, 1.0),
        (lambda x: x ** 3 - 2 * x - 5, 2.0, 3.0),
        (lambda x: math.exp(x) - 10.0, 0.0, 5.0),
        (lambda x: 0.05 - (math.exp(0.25 * x) - 1.0) / 0.25, -0.1, 0.3),
    ])
    def test_matches_scipy(self, f, lo, hi):
        """Same root as scipy's brentq."""
        expected = brentq(f, lo, hi, xtol=1e-14)
        result = tolerant_brent(f, lo, hi, accuracy=1e-13)
        assert abs(result.root - expected) < 1e-10

    def test_root_at_endpoint(self):
        result = tolerant_brent(lambda x: x - 1.0, 1.0, 3.0)
        assert result.root == 1.0
        assert result.iterations == 0
        assert result.method == "endpoint"

    def test_no_sign_change(self):
        with pytest.raises(SolverError) as excinfo:
            tolerant_brent(lambda x: x * x + 1.0, -1.0, 2.0)
        assert excinfo.value.x_min == -1.0
        assert excinfo.value.x_max == 2.0

    def test_invalid_bracket(self):
        with pytest.raises(ValueError):
            tolerant_brent(lambda x: x, 1.0, -1.0)

    def test_invalid_accuracy(self):
        with pytest.raises(ValueError):
            tolerant_brent(lambda x: x, -1.0, 1.0, accuracy=0.0)


class TestUndefinedEvaluations:
    """Objectives that return None or non-finite values."""

    def test_undefined_at_min_endpoint(self):
        """Lower half undefined: the midpoint replaces the endpoint."""
        f = lambda x: None if x < 0 else x - 0.25
        result = tolerant_brent(f, -1.0, 1.0)
        assert abs(result.root - 0.25) < 1e-10

    def test_undefined_at_max_endpoint(self):
        f = lambda x: None if x > 0.5 else x + 0.25
        result = tolerant_brent(f, -1.0, 1.0)
        assert abs(result.root + 0.25) < 1e-10

    def test_nan_treated_as_undefined(self):
        f = lambda x: float("nan") if x < 0 else x - 0.25
        result = tolerant_brent(f, -1.0, 1.0)
        assert abs(result.root - 0.25) < 1e-10

    def test_undefined_at_both_endpoints(self):
        f = lambda x: None if abs(x) > 0.5 else x
        with pytest.raises(SolverError):
            tolerant_brent(f, -1.0, 1.0)

    def test_undefined_at_endpoint_and_midpoint(self):
        f = lambda x: None if x < 0.5 else x - 0.75
        with pytest.raises(SolverError):
            tolerant_brent(f, -1.0, 1.0)

    def test_undefined_interior_falls_back_to_bisection(self):
        """A hole between the endpoints is stepped around."""
        f = lambda x: None if 0.75 < x < 0.85 else x * x - 0.81
        result = tolerant_brent(f, 0.0, 1.0)
        assert result.converged
        assert abs(result.root - 0.9) < 1e-10

    def test_undefined_everywhere_inside(self):
        """Only the endpoints are defined."""
        f = lambda x: x if abs(x) == 1.0 else None
        with pytest.raises(SolverError):
            tolerant_brent(f, -1.0, 1.0, accuracy=1e-3)


class TestIterationBudget:
    """Exhausting the budget is a soft failure."""

    def test_returns_best_estimate(self, caplog):
        f = lambda x: math.atan(x - 0.3)
        with caplog.at_level(logging.WARNING, logger="ratecurves.rootfinding"):
            result = tolerant_brent(f, -10.0, 10.0, accuracy=1e-15, max_iterations=2)

        assert not result.converged
        assert result.iterations == 2
        assert -10.0 < result.root < 10.0
        assert "exhausted" in caplog.text
