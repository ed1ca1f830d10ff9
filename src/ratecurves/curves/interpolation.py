"""
Interpolation methods for zero-rate curves.

Provides:
- LinearInterpolator: Linear in zero rates
- LogLinearInterpolator: Linear in log(zero rate); positive rates only
- CubicSplineInterpolator: Natural cubic spline (global support)
- MonotoneCubicInterpolator: Shape-preserving PCHIP cubic (local support)

All interpolators take year fractions as x-coordinates and zero rates as
y-coordinates, and extrapolate flat beyond the first and last knots.

``Interpolator.build(times, values)`` is the construction strategy used by the
bootstrap: it is called once per solver trial and once for the final curve,
and raises ValueError for data it cannot represent.

Note on bootstrapping: a natural cubic spline moves every segment when a knot
is appended, so already-solved pillars are perturbed by later ones. Prefer
linear or monotone cubic inside a one-pass bootstrap.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Type, Union
import numpy as np
from scipy.interpolate import PchipInterpolator


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    @classmethod
    def build(cls, times: Sequence[float], values: Sequence[float]) -> "Interpolator":
        """Create and fit an interpolator in one step."""
        interp = cls()
        interp.fit(times, values)
        return interp

    def fit(self, times: Sequence[float], values: Sequence[float]) -> None:
        """
        Fit the interpolator to data points.

        Args:
            times: Year fractions, non-decreasing
            values: Zero rates at those times
        """
        times = np.array(times, dtype=np.float64)
        values = np.array(values, dtype=np.float64)
        if times.ndim != 1 or times.shape != values.shape:
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")
        if not (np.all(np.isfinite(times)) and np.all(np.isfinite(values))):
            raise ValueError("Times and values must be finite")
        if np.any(np.diff(times) < 0):
            raise ValueError("Times must be sorted ascending")
        times.setflags(write=False)
        values.setflags(write=False)
        self.times = times
        self.values = values
        self._fit()

    def _fit(self) -> None:
        """Hook for subclasses that precompute coefficients."""

    @abstractmethod
    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point.

        Args:
            t: Year fraction

        Returns:
            Interpolated value
        """

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    @abstractmethod
    def derivative(self, t: float) -> float:
        """First derivative at point t (zero in the flat extrapolation regions)."""

    def _check_fitted(self) -> None:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

    def _segment(self, t: float) -> int:
        idx = int(np.searchsorted(self.times, t, side='right')) - 1
        return max(0, min(idx, len(self.times) - 2))


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Simple linear interpolation between knot points.
    Extrapolates flat beyond boundaries.
    """

    def interpolate(self, t: float) -> float:
        """Linear interpolation with flat extrapolation."""
        self._check_fitted()

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]

        w = (t - t0) / (t1 - t0) if t1 != t0 else 0.0
        return float(v0 + w * (v1 - v0))

    def derivative(self, t: float) -> float:
        """Derivative of linear interpolation (piecewise constant)."""
        self._check_fitted()

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]

        return float((v1 - v0) / (t1 - t0)) if t1 != t0 else 0.0


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation on zero rates.

    Interpolates linearly in log(value), so every knot value must be
    strictly positive; negative or zero rates cannot be represented.

    Inside a bootstrap the zero-rate search must then start above zero: with
    a non-positive min_rate the solver replaces the undefined lower bound by
    the bracket midpoint, and pillars whose rate lies below it fail.
    """

    def _fit(self) -> None:
        if np.any(self.values <= 0):
            raise ValueError("Log-linear interpolation requires positive values")
        self._log_values = np.log(self.values)

    def interpolate(self, t: float) -> float:
        self._check_fitted()

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self._log_values[idx], self._log_values[idx + 1]

        w = (t - t0) / (t1 - t0) if t1 != t0 else 0.0
        return float(np.exp(v0 + w * (v1 - v0)))

    def derivative(self, t: float) -> float:
        self._check_fitted()

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0

        idx = self._segment(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        if t1 == t0:
            return 0.0
        slope = (self._log_values[idx + 1] - self._log_values[idx]) / (t1 - t0)
        return float(slope * self.interpolate(t))


class CubicSplineInterpolator(Interpolator):
    """
    Natural cubic spline interpolation.

    Second derivative is zero at both ends. Requires strictly increasing
    times.
    """

    def _fit(self) -> None:
        """
        Solve the tridiagonal system for the knot second derivatives M,
        then store per-interval polynomial coefficients [a, b, c, d].
        """
        h = np.diff(self.times)
        if np.any(h <= 0):
            raise ValueError("Cubic spline requires strictly increasing times")

        n = len(self.times)
        y = self.values
        if n == 2:
            slope = (y[1] - y[0]) / h[0]
            self.coefficients = np.array([[y[0], slope, 0.0, 0.0]])
            return

        A = np.zeros((n, n))
        rhs = np.zeros(n)
        A[0, 0] = 1.0
        A[n - 1, n - 1] = 1.0
        for i in range(1, n - 1):
            A[i, i - 1] = h[i - 1]
            A[i, i] = 2 * (h[i - 1] + h[i])
            A[i, i + 1] = h[i]
            rhs[i] = 6 * ((y[i + 1] - y[i]) / h[i] - (y[i] - y[i - 1]) / h[i - 1])

        M = np.linalg.solve(A, rhs)

        self.coefficients = np.column_stack([
            y[:-1],
            (y[1:] - y[:-1]) / h - h * (M[1:] + 2 * M[:-1]) / 6,
            M[:-1] / 2,
            (M[1:] - M[:-1]) / (6 * h),
        ])

    def interpolate(self, t: float) -> float:
        """Evaluate cubic spline at point t."""
        self._check_fitted()

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])

        idx = self._segment(t)
        dx = t - self.times[idx]
        a, b, c, d = self.coefficients[idx]

        return float(a + b*dx + c*dx**2 + d*dx**3)

    def derivative(self, t: float) -> float:
        """First derivative of cubic spline at point t."""
        self._check_fitted()

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0

        idx = self._segment(t)
        dx = t - self.times[idx]
        _, b, c, d = self.coefficients[idx]

        return float(b + 2*c*dx + 3*d*dx**2)


class MonotoneCubicInterpolator(Interpolator):
    """
    Shape-preserving piecewise cubic Hermite interpolation (PCHIP).

    Slopes at each knot depend only on neighbouring knots, so appending a
    pillar only changes the last segments of the curve.
    """

    def _fit(self) -> None:
        if np.any(np.diff(self.times) <= 0):
            raise ValueError("Monotone cubic requires strictly increasing times")
        self._pchip = PchipInterpolator(self.times, self.values, extrapolate=False)
        self._dpchip = self._pchip.derivative()

    def interpolate(self, t: float) -> float:
        self._check_fitted()

        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])
        return float(self._pchip(t))

    def derivative(self, t: float) -> float:
        self._check_fitted()

        if t <= self.times[0] or t >= self.times[-1]:
            return 0.0
        return float(self._dpchip(t))


InterpolationBuilder = Callable[[Sequence[float], Sequence[float]], Interpolator]

_METHODS = {
    "linear": LinearInterpolator,
    "lin": LinearInterpolator,
    "log_linear": LogLinearInterpolator,
    "loglinear": LogLinearInterpolator,
    "cubic_spline": CubicSplineInterpolator,
    "cubic": CubicSplineInterpolator,
    "spline": CubicSplineInterpolator,
    "natural_cubic": CubicSplineInterpolator,
    "monotone_cubic": MonotoneCubicInterpolator,
    "pchip": MonotoneCubicInterpolator,
}


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an (unfitted) interpolator by name.

    Args:
        method: One of "linear", "log_linear", "cubic_spline", "monotone_cubic"

    Returns:
        Interpolator instance
    """
    key = method.lower().replace("-", "_").replace(" ", "_")
    if key not in _METHODS:
        raise ValueError(f"Unknown interpolation method: {method}")
    return _METHODS[key]()


def resolve_interpolation(
    interpolation: Union[str, Type[Interpolator], InterpolationBuilder]
) -> InterpolationBuilder:
    """
    Turn a method name, Interpolator subclass or builder callable into a
    ``build(times, values)`` callable.
    """
    if isinstance(interpolation, str):
        return type(create_interpolator(interpolation)).build
    if isinstance(interpolation, type) and issubclass(interpolation, Interpolator):
        return interpolation.build
    if callable(interpolation):
        return interpolation
    raise TypeError(f"Unsupported interpolation: {interpolation!r}")


__all__ = [
    "Interpolator",
    "InterpolationBuilder",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "MonotoneCubicInterpolator",
    "create_interpolator",
    "resolve_interpolation",
]
