"""
RateCurves: Yield Curve Bootstrapping Library

A small library for:
- Building zero-rate curves from deposits, FRAs, futures and swaps
- Querying discount factors, zero rates and forwards under explicit conventions
- Checking how well a bootstrapped curve reprices its inputs

Scope: single-curve bootstrapping of linear instruments.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    Compounding,
    Frequency,
    Calendar,
    WEEKENDS_ONLY,
    Conventions,
    year_fraction,
)
from .dates import DateUtils, DateGeneration, Schedule
from .errors import CurveError, PreconditionError, SolverError, BootstrapError
from .interest_rate import InterestRate
from .rootfinding import RootResult, tolerant_brent

# Curves
from .curves import (
    YieldTermStructure,
    FlatForward,
    InterpolatedZeroCurve,
    LinearInterpolator,
    LogLinearInterpolator,
    CubicSplineInterpolator,
    MonotoneCubicInterpolator,
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    SwapRateHelper,
    FuturesRateHelper,
    BootstrapSettings,
    PiecewiseYieldCurve,
    repricing_errors,
    bootstrap_from_quotes,
)

__all__ = [
    "__version__",
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Calendar",
    "WEEKENDS_ONLY",
    "Conventions",
    "year_fraction",
    "DateUtils",
    "DateGeneration",
    "Schedule",
    "CurveError",
    "PreconditionError",
    "SolverError",
    "BootstrapError",
    "InterestRate",
    "RootResult",
    "tolerant_brent",
    "YieldTermStructure",
    "FlatForward",
    "InterpolatedZeroCurve",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "MonotoneCubicInterpolator",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "SwapRateHelper",
    "FuturesRateHelper",
    "BootstrapSettings",
    "PiecewiseYieldCurve",
    "repricing_errors",
    "bootstrap_from_quotes",
]
