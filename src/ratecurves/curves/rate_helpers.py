"""
Rate helpers for curve bootstrapping.

A rate helper pairs one market quote with the formula that relates curve
discount factors to that quote:
- DepositRateHelper: simple rate over [settlement, maturity]
- FraRateHelper: simple forward over [value date, maturity]
- SwapRateHelper: par rate (P(start) - P(end)) / annuity on the fixed leg
- FuturesRateHelper: simple forward, quote taken from price less convexity

Each helper knows:
1. Its pillar date (the date up to which it constrains the curve)
2. Its market quote
3. The quote implied by any yield term structure, partial or complete

Helpers are immutable and pure; the bootstrapper adjusts the zero rate at a
helper's pillar until ``implied_quote(curve) == quote``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence
import math

from ..conventions import BusinessDayConvention, Calendar, DayCount, Frequency, WEEKENDS_ONLY
from ..dates import DateGeneration, DateUtils, Schedule
from .interpolation import Interpolator
from .termstructure import YieldTermStructure


class BootstrapCurve(YieldTermStructure):
    """
    Trial curve over the pillars committed so far plus one candidate.

    Built fresh for every solver evaluation and discarded afterwards. For
    t <= 0 the zero rate is ``rates[0]`` (flat before the curve start).

    Attributes:
        times: Pillar times, first entry 0 for the reference date
        rates: Zero rates at those times
        interpolation: Interpolator fitted on (times, rates)
    """

    def __init__(
        self,
        reference_date: date,
        day_count: DayCount,
        times: Sequence[float],
        rates: Sequence[float],
        interpolation: Interpolator,
    ):
        super().__init__(reference_date, day_count)
        self.times = tuple(times)
        self.rates = tuple(rates)
        self.interpolation = interpolation

    @property
    def max_date(self) -> date:
        return date.max

    def _zero_rate_impl(self, t: float) -> float:
        if t <= 0:
            return self.rates[0] if self.rates else 0.0
        return self.interpolation(t)


class RateHelper(ABC):
    """
    Abstract base for quotes that constrain the curve at a pillar date.

    Concrete helpers are frozen dataclasses exposing ``quote`` and
    ``pillar_date``.
    """

    quote: float

    @property
    @abstractmethod
    def pillar_date(self) -> date:
        """Date up to which this helper constrains the curve."""

    @abstractmethod
    def implied_quote(self, curve: YieldTermStructure) -> float:
        """
        Quote implied by the given curve.

        Must vary continuously with the zero rate at this helper's pillar
        when earlier pillars are held fixed.
        """

    def quote_error(self, curve: YieldTermStructure) -> float:
        """Implied minus market quote."""
        return self.implied_quote(curve) - self.quote


def _simple_forward(
    curve: YieldTermStructure,
    start: date,
    end: date,
    day_count: DayCount,
) -> float:
    """Simple forward over [start, end]; 0 for empty accrual or a non-positive far discount."""
    tau = day_count.year_fraction(start, end)
    if tau <= 0:
        return 0.0
    df_start = curve.discount_date(start)
    df_end = curve.discount_date(end)
    if df_end <= 0:
        return 0.0
    return (df_start / df_end - 1.0) / tau


def _check_quote(value: float, name: str = "quote") -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")


def _check_period(start: date, end: date, what: str) -> None:
    if end < start:
        raise ValueError(f"{what} maturity {end} precedes its start {start}")


@dataclass(frozen=True)
class DepositRateHelper(RateHelper):
    """
    Money market deposit.

    The depositor receives (1 + R * tau) at maturity, so the implied quote
    is R = (P(settlement) / P(maturity) - 1) / tau.

    Attributes:
        quote: Deposit rate (decimal)
        settlement_date: Start of accrual
        maturity_date: End of accrual, the pillar date
        day_count: Accrual day count
    """
    quote: float
    settlement_date: date
    maturity_date: date
    day_count: DayCount = DayCount.ACT_360

    def __post_init__(self):
        _check_quote(self.quote)
        _check_period(self.settlement_date, self.maturity_date, "Deposit")

    @classmethod
    def from_tenor(
        cls,
        rate: float,
        tenor: str,
        fixing_days: int,
        calendar: Calendar = WEEKENDS_ONLY,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360,
        reference_date: Optional[date] = None,
    ) -> "DepositRateHelper":
        """
        Build from a tenor: settle ``fixing_days`` business days after the
        reference date, mature ``tenor`` after settlement.
        """
        if reference_date is None:
            raise ValueError("reference_date is required")
        settlement = calendar.advance_business_days(reference_date, fixing_days)
        maturity = DateUtils.add_tenor(settlement, tenor, calendar, convention, end_of_month)
        return cls(rate, settlement, maturity, day_count)

    @property
    def pillar_date(self) -> date:
        return self.maturity_date

    def implied_quote(self, curve: YieldTermStructure) -> float:
        return _simple_forward(curve, self.settlement_date, self.maturity_date, self.day_count)


@dataclass(frozen=True)
class FraRateHelper(RateHelper):
    """
    Forward Rate Agreement.

    FRA rate: F = (P(T1) / P(T2) - 1) / tau over [value date, maturity].

    Attributes:
        quote: FRA rate (decimal)
        value_date: Start of the forward period
        maturity_date: End of the forward period, the pillar date
        day_count: Accrual day count
    """
    quote: float
    value_date: date
    maturity_date: date
    day_count: DayCount = DayCount.ACT_360

    def __post_init__(self):
        _check_quote(self.quote)
        _check_period(self.value_date, self.maturity_date, "FRA")

    @classmethod
    def from_months(
        cls,
        rate: float,
        months_to_start: int,
        months_to_end: int,
        fixing_days: int,
        calendar: Calendar = WEEKENDS_ONLY,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        day_count: DayCount = DayCount.ACT_360,
        reference_date: Optional[date] = None,
    ) -> "FraRateHelper":
        """
        Build an m x n FRA; both offsets count from the settlement date.
        """
        if reference_date is None:
            raise ValueError("reference_date is required")
        if months_to_end <= months_to_start:
            raise ValueError(
                f"FRA end ({months_to_end}M) must be after start ({months_to_start}M)"
            )
        settlement = calendar.advance_business_days(reference_date, fixing_days)
        value_date = DateUtils.add_tenor(settlement, f"{months_to_start}M", calendar, convention)
        maturity = DateUtils.add_tenor(settlement, f"{months_to_end}M", calendar, convention)
        return cls(rate, value_date, maturity, day_count)

    @property
    def pillar_date(self) -> date:
        return self.maturity_date

    def implied_quote(self, curve: YieldTermStructure) -> float:
        return _simple_forward(curve, self.value_date, self.maturity_date, self.day_count)


@dataclass(frozen=True)
class SwapRateHelper(RateHelper):
    """
    Par swap rate on a single curve.

    Par rate: R = (P(T0) - P(Tn)) / sum(delta_i * P(Ti)) over the fixed-leg
    schedule T0 < T1 < ... < Tn.

    Attributes:
        quote: Par swap rate (decimal)
        fixed_schedule: Fixed-leg accrual dates including start and end
        fixed_day_count: Fixed-leg accrual day count
    """
    quote: float
    fixed_schedule: Schedule
    fixed_day_count: DayCount = DayCount.THIRTY_360

    def __post_init__(self):
        _check_quote(self.quote)

    @classmethod
    def from_conventions(
        cls,
        rate: float,
        tenor: str,
        calendar: Calendar = WEEKENDS_ONLY,
        fixed_frequency: Frequency = Frequency.ANNUAL,
        fixed_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        fixed_day_count: DayCount = DayCount.THIRTY_360,
        reference_date: Optional[date] = None,
        fixing_days: int = 2,
    ) -> "SwapRateHelper":
        """
        Build a spot-starting swap: forward schedule from settlement to
        settlement + tenor at the fixed-leg frequency.
        """
        if reference_date is None:
            raise ValueError("reference_date is required")
        settlement = calendar.advance_business_days(reference_date, fixing_days)
        maturity = DateUtils.add_tenor(settlement, tenor, calendar, fixed_convention)
        schedule = Schedule.generate(
            settlement,
            maturity,
            fixed_frequency.tenor,
            calendar,
            convention=fixed_convention,
            termination_convention=fixed_convention,
            rule=DateGeneration.FORWARD,
        )
        return cls(rate, schedule, fixed_day_count)

    @property
    def pillar_date(self) -> date:
        return self.fixed_schedule.end_date

    def annuity(self, curve: YieldTermStructure) -> float:
        """Fixed-leg PV01 per unit rate: sum(delta_i * P(Ti))."""
        dates = self.fixed_schedule.dates
        return sum(
            self.fixed_day_count.year_fraction(start, end) * curve.discount_date(end)
            for start, end in zip(dates, dates[1:])
        )

    def implied_quote(self, curve: YieldTermStructure) -> float:
        dates = self.fixed_schedule.dates
        if len(dates) < 2:
            return 0.0

        annuity = self.annuity(curve)
        if abs(annuity) < 1e-16:
            return 0.0

        df_start = curve.discount_date(dates[0])
        df_end = curve.discount_date(dates[-1])
        if df_end <= 0:
            return 0.0
        return (df_start - df_end) / annuity


@dataclass(frozen=True)
class FuturesRateHelper(RateHelper):
    """
    Interest rate future (e.g. SOFR, Euribor).

    Price is quoted as 100 - rate in percent. The convexity adjustment is
    subtracted from the futures rate to give the forward rate that the curve
    must reproduce over [value date, maturity].

    Attributes:
        quote: Forward rate = (100 - price) / 100 - convexity_adjustment
        value_date: Start of the underlying deposit period
        maturity_date: End of the underlying period, the pillar date
        day_count: Accrual day count
        convexity_adjustment: Futures minus forward rate
        price: Quoted price if built from a price
    """
    quote: float
    value_date: date
    maturity_date: date
    day_count: DayCount = DayCount.ACT_360
    convexity_adjustment: float = 0.0
    price: Optional[float] = None

    def __post_init__(self):
        _check_quote(self.quote)
        _check_quote(self.convexity_adjustment, "convexity_adjustment")
        _check_period(self.value_date, self.maturity_date, "Futures")

    @classmethod
    def from_price(
        cls,
        price: float,
        value_date: date,
        maturity_date: Optional[date] = None,
        day_count: DayCount = DayCount.ACT_360,
        convexity_adjustment: float = 0.0,
        calendar: Calendar = WEEKENDS_ONLY,
    ) -> "FuturesRateHelper":
        """
        Build from a price, e.g. 96.50 -> 3.5% futures rate.

        Without a maturity date the underlying period is three months from
        the value date, modified-following adjusted.
        """
        _check_quote(price, "price")
        if maturity_date is None:
            maturity_date = DateUtils.add_tenor(
                value_date, "3M", calendar, BusinessDayConvention.MODIFIED_FOLLOWING
            )
        rate = (100.0 - price) / 100.0 - convexity_adjustment
        return cls(rate, value_date, maturity_date, day_count, convexity_adjustment, price)

    @classmethod
    def from_rate(
        cls,
        rate: float,
        value_date: date,
        maturity_date: date,
        day_count: DayCount = DayCount.ACT_360,
    ) -> "FuturesRateHelper":
        """Build from a forward rate quoted directly."""
        return cls(rate, value_date, maturity_date, day_count)

    @property
    def pillar_date(self) -> date:
        return self.maturity_date

    @property
    def futures_rate(self) -> float:
        """Rate before convexity adjustment."""
        return self.quote + self.convexity_adjustment

    def implied_quote(self, curve: YieldTermStructure) -> float:
        return _simple_forward(curve, self.value_date, self.maturity_date, self.day_count)


__all__ = [
    "BootstrapCurve",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "SwapRateHelper",
    "FuturesRateHelper",
]
