"""
Yield term structures.

The YieldTermStructure base provides, from a single continuously
compounded zero-rate function z(t):
- Discount factor P(0,t) = exp(-z(t) t), with P = 1 for t <= 0
- Zero rate under any compounding convention
- Forward rate between two dates
- Instantaneous forward rate

Concrete curves:
- FlatForward: constant rate
- InterpolatedZeroCurve: zero rates on pillar dates plus an interpolator

Times are year fractions from the reference date under the curve's day count.
Curves are immutable after construction and safe to share between readers.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence, Tuple, Union
import math

import numpy as np
import pandas as pd

from ..conventions import Compounding, DayCount, Frequency
from ..interest_rate import InterestRate
from .interpolation import Interpolator, InterpolationBuilder, resolve_interpolation

# step used for instantaneous forwards
DT = 1.0e-4

TimeOrDate = Union[float, date]


class YieldTermStructure(ABC):
    """
    Base class for yield curves.

    Subclasses implement ``_zero_rate_impl(t)`` for t >= 0 and ``max_date``.

    Attributes:
        reference_date: Curve date (time 0)
        day_count: Day count for date to time conversion
    """

    def __init__(self, reference_date: date, day_count: DayCount = DayCount.ACT_365):
        self._reference_date = reference_date
        self._day_count = day_count

    @property
    def reference_date(self) -> date:
        return self._reference_date

    @property
    def day_count(self) -> DayCount:
        return self._day_count

    @property
    @abstractmethod
    def max_date(self) -> date:
        """Latest date the curve is built for."""

    @abstractmethod
    def _zero_rate_impl(self, t: float) -> float:
        """Continuously compounded zero rate at t >= 0."""

    def time_from_reference(self, d: date) -> float:
        return self._day_count.year_fraction(self._reference_date, d)

    def _to_time(self, t: TimeOrDate) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    def discount(self, t: TimeOrDate) -> float:
        """
        Discount factor P(0,t).

        Args:
            t: Year fraction or date

        Returns:
            Discount factor, exactly 1.0 for t <= 0
        """
        t = self._to_time(t)
        if t <= 0:
            return 1.0
        return math.exp(-self._zero_rate_impl(t) * t)

    def discount_date(self, d: date) -> float:
        """Discount factor for a date."""
        return self.discount(self.time_from_reference(d))

    def zero_rate(self, t: TimeOrDate) -> float:
        """Continuously compounded zero rate; the short-end rate for t <= 0."""
        return self._zero_rate_impl(max(self._to_time(t), 0.0))

    def zero_rate_date(
        self,
        d: date,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
    ) -> InterestRate:
        """
        Zero rate to a date under explicit conventions.

        Args:
            d: Maturity date
            day_count: Day count of the returned rate (curve's own if omitted)
            compounding: Compounding of the returned rate
            frequency: Compounding frequency of the returned rate

        Returns:
            InterestRate
        """
        day_count = day_count or self._day_count
        t = day_count.year_fraction(self._reference_date, d)
        df = self.discount_date(d)
        compound = 1.0 / df if df > 0 else 1.0
        return InterestRate.implied_rate(compound, day_count, compounding, frequency, t)

    def forward_rate(
        self,
        d1: date,
        d2: date,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.SIMPLE,
        frequency: Frequency = Frequency.ANNUAL,
    ) -> InterestRate:
        """
        Forward rate between two dates.

        Equal dates give the instantaneous forward at d1.

        Args:
            d1: Start date
            d2: End date
            day_count: Day count of the returned rate (curve's own if omitted)
            compounding: Compounding of the returned rate
            frequency: Compounding frequency of the returned rate

        Returns:
            InterestRate
        """
        if d2 < d1:
            raise ValueError(f"Forward end {d2} precedes start {d1}")
        day_count = day_count or self._day_count
        if d1 == d2:
            r = self.instantaneous_forward(self.time_from_reference(d1))
            return InterestRate.implied_rate(math.exp(r * DT), day_count, compounding, frequency, DT)
        compound = self.discount_date(d1) / self.discount_date(d2)
        tau = day_count.year_fraction(d1, d2)
        return InterestRate.implied_rate(compound, day_count, compounding, frequency, tau)

    def instantaneous_forward(self, t: TimeOrDate) -> float:
        """
        Instantaneous forward rate f(t) = -d/dt log P(0,t).

        Central difference with step DT, clipped at t = 0.
        """
        t = self._to_time(t)
        t1 = max(t - DT / 2, 0.0)
        t2 = t1 + DT
        return (math.log(self.discount(t1)) - math.log(self.discount(t2))) / (t2 - t1)


class FlatForward(YieldTermStructure):
    """
    Flat curve at a single rate.

    The rate is quoted under the given compounding and converted to its
    continuous equivalent on construction.
    """

    def __init__(
        self,
        reference_date: date,
        rate: float,
        day_count: DayCount = DayCount.ACT_365,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
    ):
        super().__init__(reference_date, day_count)
        self.rate = InterestRate(rate, day_count, compounding, frequency)
        if compounding == Compounding.CONTINUOUS:
            self._continuous = rate
        else:
            # continuous equivalent over one year
            self._continuous = math.log(self.rate.compound_factor(1.0))

    @property
    def max_date(self) -> date:
        return date.max

    def _zero_rate_impl(self, t: float) -> float:
        return self._continuous

    def __repr__(self) -> str:
        return f"FlatForward(reference={self.reference_date}, rate={self.rate})"


class InterpolatedZeroCurve(YieldTermStructure):
    """
    Zero-rate curve interpolated between pillar dates.

    The first date is the reference date. Zero rates are continuously
    compounded; pillar data are stored read-only.

    Attributes:
        dates: Pillar dates
        times: Pillar times from the reference date
        rates: Zero rates at the pillars
    """

    def __init__(
        self,
        dates: Sequence[date],
        rates: Sequence[float],
        day_count: DayCount = DayCount.ACT_365,
        interpolation: Union[str, type, InterpolationBuilder] = "linear",
    ):
        if len(dates) < 2:
            raise ValueError("Need at least 2 dates (reference + 1 pillar)")
        if len(dates) != len(rates):
            raise ValueError("Dates and rates must have same length")
        for earlier, later in zip(dates, dates[1:]):
            if later <= earlier:
                raise ValueError(f"Pillar dates must be strictly increasing: {earlier} >= {later}")
        super().__init__(dates[0], day_count)

        times = np.array([day_count.year_fraction(dates[0], d) for d in dates])
        values = np.array(rates, dtype=np.float64)
        times.setflags(write=False)
        values.setflags(write=False)

        self._dates: Tuple[date, ...] = tuple(dates)
        self._times = times
        self._rates = values
        self._interpolator: Interpolator = resolve_interpolation(interpolation)(times, values)

    @property
    def dates(self) -> Tuple[date, ...]:
        return self._dates

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def rates(self) -> np.ndarray:
        return self._rates

    @property
    def max_date(self) -> date:
        return self._dates[-1]

    @property
    def interpolator(self) -> Interpolator:
        return self._interpolator

    def _zero_rate_impl(self, t: float) -> float:
        return self._interpolator(t)

    def nodes(self) -> pd.DataFrame:
        """Pillar table: date, time, zero rate and discount factor."""
        return pd.DataFrame({
            "date": list(self._dates),
            "time": self._times,
            "zero_rate": self._rates,
            "discount_factor": [self.discount(t) for t in self._times],
        })

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(reference={self.reference_date}, "
                f"pillars={len(self._dates) - 1}, max_date={self.max_date}, "
                f"method={type(self._interpolator).__name__})")


__all__ = [
    "YieldTermStructure",
    "FlatForward",
    "InterpolatedZeroCurve",
]
