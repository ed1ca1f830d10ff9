"""
Day count conventions, calendars and rate conventions used by curve building.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, futures)
- ACT/365: Actual days / 365 fixed
- ACT/ACT: ISDA actual/actual, split at year boundaries
- 30/360: US bond basis

Business Day Conventions:
- Following, Modified Following, Preceding, Modified Preceding, Unadjusted

Calendars are weekend-plus-holiday-set calendars; anything richer is the
caller's concern.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional
import calendar as _calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACTUAL/360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACT/365FIXED": cls.ACT_365,
            "ACTUAL/365FIXED": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "ACT/ACTISDA": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")

    def year_fraction(self, start: date, end: date) -> float:
        """Year fraction between two dates under this convention."""
        return year_fraction(start, end, self)


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    FOLLOWING = "Following"
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    PRECEDING = "Preceding"
    MODIFIED_PRECEDING = "ModifiedPreceding"
    UNADJUSTED = "Unadjusted"


class Compounding(Enum):
    """Interest rate compounding rule."""
    SIMPLE = "Simple"
    COMPOUNDED = "Compounded"
    CONTINUOUS = "Continuous"
    SIMPLE_THEN_COMPOUNDED = "SimpleThenCompounded"
    COMPOUNDED_THEN_SIMPLE = "CompoundedThenSimple"


class Frequency(Enum):
    """Payment / compounding frequency, valued in periods per year."""
    NO_FREQUENCY = -1
    ONCE = 0
    ANNUAL = 1
    SEMIANNUAL = 2
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12
    BIWEEKLY = 26
    WEEKLY = 52
    DAILY = 365

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        """Parse frequency names used in quote files ("ANNUAL", "SEMI", ...)."""
        mapping = {
            "ANNUAL": cls.ANNUAL,
            "SEMI": cls.SEMIANNUAL,
            "SEMIANNUAL": cls.SEMIANNUAL,
            "SEMI_ANNUAL": cls.SEMIANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "BIMONTHLY": cls.BIMONTHLY,
            "MONTHLY": cls.MONTHLY,
            "BIWEEKLY": cls.BIWEEKLY,
            "WEEKLY": cls.WEEKLY,
            "DAILY": cls.DAILY,
            "ONCE": cls.ONCE,
        }
        key = s.upper().replace(" ", "").replace("-", "_")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown frequency: {s}")

    @property
    def periods_per_year(self) -> float:
        """Periods per year; 1 for NO_FREQUENCY and ONCE."""
        return float(self.value) if self.value > 0 else 1.0

    @property
    def tenor(self) -> str:
        """Coupon period as a tenor string, e.g. "6M" for SEMIANNUAL."""
        tenors = {
            Frequency.ANNUAL: "1Y",
            Frequency.SEMIANNUAL: "6M",
            Frequency.QUARTERLY: "3M",
            Frequency.BIMONTHLY: "2M",
            Frequency.MONTHLY: "1M",
            Frequency.BIWEEKLY: "2W",
            Frequency.WEEKLY: "1W",
            Frequency.DAILY: "1D",
        }
        if self not in tenors:
            raise ValueError(f"Frequency {self.name} has no coupon period")
        return tenors[self]


@dataclass(frozen=True)
class Calendar:
    """
    Weekend-plus-holidays business calendar.

    Attributes:
        holidays: Non-business dates in addition to weekends
        weekend: Weekday numbers treated as weekend (Monday = 0)
    """
    holidays: FrozenSet[date] = field(default_factory=frozenset)
    weekend: FrozenSet[int] = frozenset({5, 6})

    @classmethod
    def with_holidays(cls, holidays: Iterable[date]) -> "Calendar":
        return cls(holidays=frozenset(holidays))

    def is_business_day(self, d: date) -> bool:
        if d.weekday() in self.weekend:
            return False
        return d not in self.holidays

    def is_end_of_month(self, d: date) -> bool:
        """True if d is the last business day of its month."""
        return self.end_of_month(d) == d

    def end_of_month(self, d: date) -> date:
        """Last business day of d's month."""
        last = date(d.year, d.month, _calendar.monthrange(d.year, d.month)[1])
        return self.adjust(last, BusinessDayConvention.PRECEDING)

    def adjust(self, d: date, convention: BusinessDayConvention) -> date:
        """
        Adjust a date according to business day convention.

        Args:
            d: Date to adjust
            convention: Business day adjustment rule

        Returns:
            Adjusted date
        """
        if convention == BusinessDayConvention.UNADJUSTED or self.is_business_day(d):
            return d

        if convention in (BusinessDayConvention.FOLLOWING,
                          BusinessDayConvention.MODIFIED_FOLLOWING):
            adjusted = self._roll(d, 1)
            if (convention == BusinessDayConvention.MODIFIED_FOLLOWING
                    and adjusted.month != d.month):
                adjusted = self._roll(d, -1)
            return adjusted

        if convention in (BusinessDayConvention.PRECEDING,
                          BusinessDayConvention.MODIFIED_PRECEDING):
            adjusted = self._roll(d, -1)
            if (convention == BusinessDayConvention.MODIFIED_PRECEDING
                    and adjusted.month != d.month):
                adjusted = self._roll(d, 1)
            return adjusted

        raise ValueError(f"Unknown business day convention: {convention}")

    def advance_business_days(self, d: date, n: int) -> date:
        """Move n business days forward (backward for negative n)."""
        if n == 0:
            return self.adjust(d, BusinessDayConvention.FOLLOWING)
        step = 1 if n > 0 else -1
        result = d
        remaining = abs(n)
        while remaining > 0:
            result += timedelta(days=step)
            if self.is_business_day(result):
                remaining -= 1
        return result

    def _roll(self, d: date, step: int) -> date:
        while not self.is_business_day(d):
            d += timedelta(days=step)
        return d


WEEKENDS_ONLY = Calendar()


@dataclass
class Conventions:
    """
    Container for instrument conventions.

    Attributes:
        day_count: Day count convention for accrual
        business_day: Business day adjustment rule
        compounding: Rate compounding convention
        payment_frequency: Fixed-leg payment frequency
        settlement_days: Business days from trade date to settlement
        end_of_month: Roll month-end starts to month-end maturities
    """
    day_count: DayCount = DayCount.ACT_360
    business_day: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    compounding: Compounding = Compounding.SIMPLE
    payment_frequency: Frequency = Frequency.ANNUAL
    settlement_days: int = 2
    end_of_month: bool = False

    @classmethod
    def usd_deposit(cls) -> "Conventions":
        """USD money-market deposit conventions."""
        return cls(
            day_count=DayCount.ACT_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.SIMPLE,
            payment_frequency=Frequency.ONCE,
            settlement_days=2,
        )

    @classmethod
    def usd_ois(cls) -> "Conventions":
        """Standard USD OIS conventions."""
        return cls(
            day_count=DayCount.ACT_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.ANNUAL,
            settlement_days=2,
        )

    @classmethod
    def usd_swap(cls) -> "Conventions":
        """Standard USD IRS conventions (fixed leg)."""
        return cls(
            day_count=DayCount.THIRTY_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.SEMIANNUAL,
            settlement_days=2,
        )

    @classmethod
    def eur_swap(cls) -> "Conventions":
        """Standard EUR IRS conventions (fixed leg)."""
        return cls(
            day_count=DayCount.THIRTY_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.ANNUAL,
            settlement_days=2,
        )


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float; negative when end precedes start
    """
    if start == end:
        return 0.0
    if start > end:
        return -year_fraction(end, start, day_count)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        if start.year == end.year:
            return actual_days / _days_in_year(start.year)
        total = (date(start.year + 1, 1, 1) - start).days / _days_in_year(start.year)
        total += end.year - start.year - 1
        total += (end - date(end.year, 1, 1)).days / _days_in_year(end.year)
        return total

    elif day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """Weekend/holiday check against an ad-hoc holiday set."""
    return Calendar(holidays=frozenset(holidays or ())).is_business_day(d)


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """Adjust a date against an ad-hoc holiday set."""
    return Calendar(holidays=frozenset(holidays or ())).adjust(d, convention)


def _days_in_year(year: int) -> int:
    return 366 if _calendar.isleap(year) else 365


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Calendar",
    "WEEKENDS_ONLY",
    "Conventions",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
]
