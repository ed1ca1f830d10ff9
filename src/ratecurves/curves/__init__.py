"""
Curves package - yield term structures and bootstrapping.

Provides:
- YieldTermStructure, FlatForward, InterpolatedZeroCurve: term structures
- Rate helpers: deposits, FRAs, swaps and futures as bootstrap inputs
- PiecewiseYieldCurve: sequential bootstrap from rate helpers
- Interpolators for zero-rate curves
"""

from .interpolation import (
    Interpolator,
    InterpolationBuilder,
    LinearInterpolator,
    LogLinearInterpolator,
    CubicSplineInterpolator,
    MonotoneCubicInterpolator,
    create_interpolator,
    resolve_interpolation,
)
from .termstructure import YieldTermStructure, FlatForward, InterpolatedZeroCurve
from .rate_helpers import (
    BootstrapCurve,
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    SwapRateHelper,
    FuturesRateHelper,
)
from .piecewise import (
    BootstrapSettings,
    PiecewiseYieldCurve,
    pillar_residual,
    repricing_errors,
    helpers_from_quotes,
    bootstrap_from_quotes,
)

__all__ = [
    "Interpolator",
    "InterpolationBuilder",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "MonotoneCubicInterpolator",
    "create_interpolator",
    "resolve_interpolation",
    "YieldTermStructure",
    "FlatForward",
    "InterpolatedZeroCurve",
    "BootstrapCurve",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "SwapRateHelper",
    "FuturesRateHelper",
    "BootstrapSettings",
    "PiecewiseYieldCurve",
    "pillar_residual",
    "repricing_errors",
    "helpers_from_quotes",
    "bootstrap_from_quotes",
]
