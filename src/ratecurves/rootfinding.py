"""
Bracketing root finder for objectives that may be undefined at some points.

The objective returns a float residual or ``None`` when the trial point is
numerically invalid (e.g. an interpolation that cannot be built). Non-finite
floats are treated as ``None`` so NaN never reaches a comparison.

Failure modes:
- hard: no usable bracket at entry, or a neighbourhood that is undefined
  everywhere mid-iteration -> SolverError
- soft: iteration budget exhausted -> best estimate, ``converged=False``
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math
import sys

from .errors import SolverError

logger = logging.getLogger(__name__)

Objective = Callable[[float], Optional[float]]

EPSILON = sys.float_info.epsilon
MAX_ITERATIONS = 100
MAX_HALVINGS = 60


@dataclass(frozen=True)
class RootResult:
    root: float
    iterations: int
    converged: bool
    method: str
    residual: float


def _evaluate(f: Objective, x: float) -> Optional[float]:
    value = f(x)
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def tolerant_brent(
    f: Objective,
    x_min: float,
    x_max: float,
    accuracy: float = 1e-12,
    max_iterations: int = MAX_ITERATIONS,
) -> RootResult:
    """
    Brent's method on [x_min, x_max] tolerating undefined evaluations.

    Args:
        f: Objective returning a residual, or None where undefined
        x_min: Lower bracket endpoint
        x_max: Upper bracket endpoint, above x_min
        accuracy: Absolute tolerance on both the residual and the bracket width
        max_iterations: Iteration budget; when exhausted the best estimate is returned

    Returns:
        RootResult with the root, iteration count and convergence flag

    Raises:
        SolverError: If no sign change can be bracketed, or a trial region is
            undefined everywhere
    """
    if not x_min < x_max:
        raise ValueError(f"Invalid bracket: x_min={x_min} must be below x_max={x_max}")
    if accuracy <= 0:
        raise ValueError(f"Accuracy must be positive, got {accuracy}")
    if max_iterations <= 0:
        raise ValueError(f"Iteration budget must be positive, got {max_iterations}")

    a, b = x_min, x_max
    fa = _evaluate(f, a)
    fb = _evaluate(f, b)

    if fa is None and fb is None:
        raise SolverError(
            f"objective undefined at both endpoints {x_min} and {x_max}", x_min, x_max
        )
    if fa is None or fb is None:
        mid = 0.5 * (x_min + x_max)
        fm = _evaluate(f, mid)
        side = "min" if fa is None else "max"
        if fm is None:
            raise SolverError(
                f"objective undefined at {side} endpoint and at midpoint {mid}", x_min, x_max
            )
        logger.debug("Objective undefined at %s endpoint; using midpoint %s", side, mid)
        if fa is None:
            a, fa = mid, fm
        else:
            b, fb = mid, fm

    if abs(fa) <= accuracy:
        return RootResult(a, 0, True, "endpoint", fa)
    if abs(fb) <= accuracy:
        return RootResult(b, 0, True, "endpoint", fb)
    if (fa > 0) == (fb > 0):
        raise SolverError(
            f"no sign change: f({a}) = {fa} and f({b}) = {fb}", a, b
        )

    c, fc = b, fb
    d = e = b - a

    for iteration in range(1, max_iterations + 1):
        if (fb > 0) == (fc > 0):
            c, fc = a, fa
            d = e = b - a
        if abs(fc) < abs(fb):
            a, fa = b, fb
            b, fb = c, fc
            c, fc = a, fa

        tol = 2.0 * EPSILON * abs(b) + 0.5 * accuracy
        m = 0.5 * (c - b)
        logger.debug("Brent iter %s: b=%s f(b)=%s c=%s", iteration, b, fb, c)

        if abs(m) <= tol or abs(fb) <= accuracy:
            return RootResult(b, iteration, True, "brent", fb)

        if abs(e) >= tol and abs(fa) > abs(fb):
            s = fb / fa
            if a == c:
                # secant
                p = 2.0 * m * s
                q = 1.0 - s
            else:
                # inverse quadratic interpolation
                q0 = fa / fc
                r = fb / fc
                p = s * (2.0 * m * q0 * (q0 - r) - (b - a) * (r - 1.0))
                q = (q0 - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0:
                q = -q
            else:
                p = -p
            if 2.0 * p < min(3.0 * m * q - abs(tol * q), abs(e * q)):
                e, d = d, p / q
            else:
                d = e = m
        else:
            d = e = m

        a, fa = b, fb
        b = b + d if abs(d) > tol else b + math.copysign(tol, m)

        fb = _evaluate(f, b)
        if fb is None:
            b, fb = _bisect_to_defined(f, a, c, fa)
            d = e = b - a

    logger.warning(
        "Brent budget of %s iterations exhausted; returning best estimate %s (residual %s)",
        max_iterations, b, fb,
    )
    return RootResult(b, max_iterations, False, "brent", fb)


def _bisect_to_defined(f: Objective, a: float, c: float, fa: float):
    """Bisection fallback: midpoint of [a, c], then halve towards a until defined."""
    x = 0.5 * (a + c)
    for _ in range(MAX_HALVINGS):
        fx = _evaluate(f, x)
        if fx is not None:
            logger.debug("Undefined trial point; bisection fallback to %s", x)
            return x, fx
        x = 0.5 * (a + x)
        if x == a:
            break
    raise SolverError(f"objective undefined everywhere between {a} and {c}", min(a, c), max(a, c))


__all__ = [
    "RootResult",
    "tolerant_brent",
]
