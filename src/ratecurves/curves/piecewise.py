"""
Piecewise yield curve bootstrapping.

Implements the sequential, forward, one-pass bootstrap:
1. Sort helpers by pillar date
2. For each pillar, solve for the zero rate that reprices its helper,
   holding every earlier pillar fixed
3. Build one interpolation over all solved pillars

Each solver trial evaluates a pure residual on a freshly built
BootstrapCurve; construction is all-or-nothing, so a failure at any pillar
raises BootstrapError and no partial curve is returned.

The bootstrap assumes that appending a pillar does not materially move the
already-solved segments. Linear and log-linear satisfy this exactly. Monotone
cubic moves only the segment next to the previous last pillar; a natural cubic
spline moves every segment. Check both with repricing_errors().
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging
import math

import pandas as pd

from ..conventions import Calendar, Conventions, DayCount, Frequency, WEEKENDS_ONLY
from ..dates import DateUtils
from ..errors import BootstrapError, PreconditionError, SolverError
from ..rootfinding import tolerant_brent
from .interpolation import InterpolationBuilder, resolve_interpolation
from .rate_helpers import (
    BootstrapCurve,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    RateHelper,
    SwapRateHelper,
)
from .termstructure import InterpolatedZeroCurve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapSettings:
    """
    Solver configuration for the bootstrap.

    Attributes:
        min_rate: Lower bound of the zero-rate search (default -10%)
        max_rate: Upper bound of the zero-rate search (default +30%)
        accuracy: Residual / bracket tolerance
        max_iterations: Solver iteration budget per pillar

    Log-linear interpolation is undefined for non-positive rates; use a small
    positive min_rate with it, e.g. 1e-4.
    """
    min_rate: float = -0.10
    max_rate: float = 0.30
    accuracy: float = 1.0e-12
    max_iterations: int = 100

    def validate(self) -> None:
        if not self.min_rate < self.max_rate:
            raise ValueError(
                f"min_rate ({self.min_rate}) must be below max_rate ({self.max_rate})"
            )
        if not self.accuracy > 0:
            raise ValueError(f"accuracy must be positive, got {self.accuracy}")
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")

    @classmethod
    def default(cls) -> "BootstrapSettings":
        return cls()

    @classmethod
    def wide(cls) -> "BootstrapSettings":
        """Wider bounds for retrying a failed bootstrap."""
        return cls(min_rate=-0.50, max_rate=1.00)


def pillar_residual(
    helper: RateHelper,
    reference_date: date,
    day_count: DayCount,
    times: Sequence[float],
    committed_rates: Sequence[float],
    candidate: float,
    build: InterpolationBuilder,
) -> Optional[float]:
    """
    Implied minus market quote with ``candidate`` at the newest pillar.

    Args:
        helper: Helper for the newest pillar
        reference_date: Curve reference date
        day_count: Curve day count
        times: Pillar times up to and including the newest pillar
        committed_rates: Solved rates for every pillar before the newest
        candidate: Trial zero rate at the newest pillar
        build: Interpolation construction strategy

    Returns:
        Residual, or None when the trial curve cannot be built or the
        implied quote is not finite
    """
    rates = list(committed_rates)
    rates.append(candidate)
    # flat before the first pillar
    rates[0] = rates[1]
    try:
        interpolation = build(times, rates)
    except (ValueError, ArithmeticError) as exc:
        logger.debug("Trial curve undefined at rate %s: %s", candidate, exc)
        return None
    curve = BootstrapCurve(reference_date, day_count, times, rates, interpolation)
    try:
        implied = helper.implied_quote(curve)
    except (ValueError, ArithmeticError) as exc:
        logger.debug("Implied quote undefined at rate %s: %s", candidate, exc)
        return None
    if not math.isfinite(implied):
        return None
    return implied - helper.quote


class PiecewiseYieldCurve(InterpolatedZeroCurve):
    """
    Zero curve bootstrapped from rate helpers.

    Pillars are the reference date plus each distinct helper pillar date.
    When several helpers share a pillar date only the first (in pillar
    order, ties by input order) is used.

    Attributes:
        helpers: Helpers that defined the pillars, in pillar order
        iterations: Solver iterations spent on each pillar
        settings: Solver configuration used
    """

    def __init__(
        self,
        reference_date: date,
        helpers: Iterable[RateHelper],
        day_count: DayCount = DayCount.ACT_365,
        interpolation: Union[str, type, InterpolationBuilder] = "linear",
        settings: Optional[BootstrapSettings] = None,
        *,
        min_rate: Optional[float] = None,
        max_rate: Optional[float] = None,
        accuracy: Optional[float] = None,
    ):
        settings = settings or BootstrapSettings()
        overrides = {
            name: value
            for name, value in (("min_rate", min_rate), ("max_rate", max_rate), ("accuracy", accuracy))
            if value is not None
        }
        if overrides:
            settings = replace(settings, **overrides)
        settings.validate()

        build = resolve_interpolation(interpolation)
        dates, rates, used, iterations = _bootstrap(
            reference_date, list(helpers), day_count, build, settings
        )
        super().__init__(dates, rates, day_count, build)
        self._helpers: Tuple[RateHelper, ...] = tuple(used)
        self._iterations: Tuple[int, ...] = tuple(iterations)
        self._settings = settings

    @property
    def helpers(self) -> Tuple[RateHelper, ...]:
        return self._helpers

    @property
    def iterations(self) -> Tuple[int, ...]:
        return self._iterations

    @property
    def settings(self) -> BootstrapSettings:
        return self._settings


def _bootstrap(
    reference_date: date,
    helpers: List[RateHelper],
    day_count: DayCount,
    build: InterpolationBuilder,
    settings: BootstrapSettings,
) -> Tuple[List[date], List[float], List[RateHelper], List[int]]:
    """Solve pillar by pillar; returns dates, rates, pillar helpers and iteration counts."""
    if not helpers:
        raise PreconditionError("At least one rate helper is required")

    # stable: ties keep input order
    ordered = sorted(helpers, key=lambda h: h.pillar_date)

    dates = [reference_date]
    pillar_helpers: List[RateHelper] = []
    for helper in ordered:
        pillar = helper.pillar_date
        if pillar <= reference_date:
            raise PreconditionError(
                f"Pillar date {pillar} of {helper!r} is not after reference date {reference_date}"
            )
        if pillar == dates[-1]:
            logger.debug("Skipping %r: pillar %s already taken", helper, pillar)
            continue
        dates.append(pillar)
        pillar_helpers.append(helper)

    times = [day_count.year_fraction(reference_date, d) for d in dates]

    first_quote = pillar_helpers[0].quote
    rates = [first_quote, first_quote]
    iterations: List[int] = []

    for k in range(1, len(dates)):
        helper = pillar_helpers[k - 1]
        committed = rates[:k]
        trial_times = times[:k + 1]

        def objective(r: float) -> Optional[float]:
            return pillar_residual(
                helper, reference_date, day_count, trial_times, committed, r, build
            )

        try:
            result = tolerant_brent(
                objective,
                settings.min_rate,
                settings.max_rate,
                settings.accuracy,
                settings.max_iterations,
            )
        except SolverError as exc:
            raise BootstrapError(dates[k], helper, str(exc)) from exc

        if k == 1:
            rates[1] = result.root
        else:
            rates.append(result.root)
        rates[0] = rates[1]
        iterations.append(result.iterations)
        logger.debug(
            "Pillar %s (t=%.6f): zero rate %.10f after %s iterations (converged=%s)",
            dates[k], times[k], result.root, result.iterations, result.converged,
        )

    logger.info("Bootstrapped %s pillars up to %s", len(dates) - 1, dates[-1])
    return dates, rates, pillar_helpers, iterations


def repricing_errors(
    curve: InterpolatedZeroCurve,
    helpers: Optional[Iterable[RateHelper]] = None,
) -> pd.DataFrame:
    """
    Reprice helpers off a curve.

    Args:
        curve: Curve to price from
        helpers: Helpers to reprice (the curve's own pillar helpers if omitted)

    Returns:
        DataFrame with pillar_date, instrument, quote, implied and error
        (implied - quote), one row per helper
    """
    if helpers is None:
        helpers = getattr(curve, "helpers", ())
    rows = []
    for helper in helpers:
        implied = helper.implied_quote(curve)
        rows.append({
            "pillar_date": helper.pillar_date,
            "instrument": type(helper).__name__,
            "quote": helper.quote,
            "implied": implied,
            "error": implied - helper.quote,
        })
    return pd.DataFrame(rows, columns=["pillar_date", "instrument", "quote", "implied", "error"])


def helpers_from_quotes(
    reference_date: date,
    quotes: Union[Sequence[Dict], pd.DataFrame],
    calendar: Calendar = WEEKENDS_ONLY,
) -> List[RateHelper]:
    """
    Build rate helpers from quote records.

    Args:
        reference_date: Trade / curve date
        quotes: Dicts or a DataFrame with keys instrument_type, tenor, quote
            and optionally day_count, pay_freq, start_tenor, convexity,
            fixing_days
        calendar: Business calendar for settlement and maturities

    Returns:
        Helpers in input order

    Example quote format:
        {"instrument_type": "DEPOSIT", "tenor": "3M", "quote": 0.053}
        {"instrument_type": "FRA", "start_tenor": "3M", "tenor": "6M", "quote": 0.052}
        {"instrument_type": "FUTURE", "tenor": "3M", "quote": 94.85, "convexity": 0.0002}
        {"instrument_type": "SWAP", "tenor": "5Y", "quote": 0.045, "pay_freq": "SEMI"}
    """
    if isinstance(quotes, pd.DataFrame):
        quotes = quotes.to_dict("records")

    helpers: List[RateHelper] = []
    for q in quotes:
        inst_type = str(_field(q, "instrument_type", "")).upper()
        tenor = str(_field(q, "tenor", ""))
        quote = float(_field(q, "quote", 0))

        if inst_type == "DEPOSIT":
            conv = Conventions.usd_deposit()
            helpers.append(DepositRateHelper.from_tenor(
                quote, tenor, int(_field(q, "fixing_days", conv.settlement_days)), calendar,
                conv.business_day, conv.end_of_month,
                _day_count(q, conv.day_count), reference_date,
            ))
        elif inst_type == "FRA":
            start_months = _tenor_months(str(_field(q, "start_tenor", "0M")))
            end_months = start_months + _tenor_months(tenor)
            conv = Conventions.usd_deposit()
            helpers.append(FraRateHelper.from_months(
                quote, start_months, end_months, int(_field(q, "fixing_days", conv.settlement_days)),
                calendar, conv.business_day, _day_count(q, conv.day_count), reference_date,
            ))
        elif inst_type in ("FUT", "FUTURE"):
            conv = Conventions.usd_deposit()
            value_date = DateUtils.add_tenor(reference_date, tenor, calendar, conv.business_day)
            helpers.append(FuturesRateHelper.from_price(
                quote, value_date, None, _day_count(q, conv.day_count),
                float(_field(q, "convexity", 0.0)), calendar,
            ))
        elif inst_type in ("SWAP", "IRS", "OIS"):
            conv = Conventions.usd_ois() if inst_type == "OIS" else Conventions.usd_swap()
            freq = _field(q, "pay_freq")
            helpers.append(SwapRateHelper.from_conventions(
                quote, tenor, calendar,
                Frequency.from_string(str(freq)) if freq else conv.payment_frequency,
                conv.business_day, _day_count(q, conv.day_count), reference_date,
                int(_field(q, "fixing_days", conv.settlement_days)),
            ))
        else:
            raise ValueError(f"Unsupported instrument_type: {inst_type!r}")

    return helpers


def bootstrap_from_quotes(
    reference_date: date,
    quotes: Union[Sequence[Dict], pd.DataFrame],
    day_count: DayCount = DayCount.ACT_365,
    interpolation: Union[str, type, InterpolationBuilder] = "linear",
    settings: Optional[BootstrapSettings] = None,
    calendar: Calendar = WEEKENDS_ONLY,
) -> PiecewiseYieldCurve:
    """
    Convenience function to bootstrap a curve from quote records.

    See helpers_from_quotes for the record format.
    """
    helpers = helpers_from_quotes(reference_date, quotes, calendar)
    return PiecewiseYieldCurve(reference_date, helpers, day_count, interpolation, settings)


def _field(q: Dict, key: str, default=None):
    """Record value, or the default when missing or an empty DataFrame cell."""
    value = q.get(key)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    return value


def _day_count(q: Dict, default: DayCount) -> DayCount:
    value = _field(q, "day_count")
    if value is None:
        return default
    return DayCount.from_string(str(value))


def _tenor_months(tenor: str) -> int:
    amount, unit = DateUtils.parse_tenor(tenor)
    if unit == 'M':
        return amount
    if unit == 'Y':
        return 12 * amount
    raise ValueError(f"FRA tenors must be in months or years, got {tenor}")


__all__ = [
    "BootstrapSettings",
    "PiecewiseYieldCurve",
    "pillar_residual",
    "repricing_errors",
    "helpers_from_quotes",
    "bootstrap_from_quotes",
]
