"""
Date utilities for curve instruments.

Provides:
- Tenor parsing and date arithmetic
- Fixed-leg schedule generation for swap rate helpers
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple
import calendar as _calendar
import re

from .conventions import BusinessDayConvention, Calendar


class DateUtils:
    """Utility class for date manipulation in rates contexts."""

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_tenor(
        start: date,
        tenor: str,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED,
        end_of_month: bool = False,
    ) -> date:
        """
        Add a tenor to a date.

        Day tenors count business days when a calendar is given and calendar
        days otherwise. Month and year tenors clip to month end; with
        end_of_month set, a start on the calendar's last business day of the
        month rolls to the last business day of the target month.

        Args:
            start: Starting date
            tenor: Tenor string (e.g., "1D", "3M", "2Y")
            calendar: Business calendar for day counting and adjustment
            convention: Adjustment applied to the raw result
            end_of_month: Apply the end-of-month rule

        Returns:
            End date
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            if calendar is not None:
                return calendar.advance_business_days(start, amount)
            result = start + timedelta(days=amount)
        elif unit == 'W':
            result = start + timedelta(weeks=amount)
        elif unit == 'M':
            result = add_months(start, amount)
        elif unit == 'Y':
            result = add_months(start, 12 * amount)
        else:
            raise ValueError(f"Unknown tenor unit: {unit}")

        if calendar is None:
            return result
        if end_of_month and unit in ('M', 'Y') and calendar.is_end_of_month(start):
            return calendar.end_of_month(result)
        return calendar.adjust(result, convention)

    @staticmethod
    def tenor_to_years(tenor: str) -> float:
        """
        Convert tenor to approximate year fraction.

        Args:
            tenor: Tenor string

        Returns:
            Approximate years as float
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            return amount / 365.0
        elif unit == 'W':
            return amount * 7 / 365.0
        elif unit == 'M':
            return amount / 12.0
        return float(amount)


class DateGeneration(Enum):
    """Direction in which schedule dates are generated."""
    FORWARD = "Forward"
    BACKWARD = "Backward"


@dataclass(frozen=True)
class Schedule:
    """
    Ordered accrual dates of a leg, first entry is the accrual start.

    Stubs fall where the generation rule leaves them: at the back for
    forward generation, at the front for backward generation.
    """
    dates: Tuple[date, ...]

    def __post_init__(self):
        if not self.dates:
            raise ValueError("Schedule needs at least one date")
        for earlier, later in zip(self.dates, self.dates[1:]):
            if later <= earlier:
                raise ValueError(f"Schedule dates must be strictly increasing: {earlier} >= {later}")

    @classmethod
    def from_dates(cls, dates: Sequence[date]) -> "Schedule":
        return cls(tuple(dates))

    @classmethod
    def generate(
        cls,
        start: date,
        end: date,
        tenor: str,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        termination_convention: Optional[BusinessDayConvention] = None,
        rule: DateGeneration = DateGeneration.FORWARD,
        end_of_month: bool = False,
    ) -> "Schedule":
        """
        Generate a schedule between start and end.

        Args:
            start: Accrual start (effective date)
            end: Final accrual end (termination date)
            tenor: Coupon period, e.g. "6M"
            calendar: Calendar used for adjustment (weekends only if omitted)
            convention: Adjustment for intermediate dates
            termination_convention: Adjustment for the end date
            rule: Generate forward from start or backward from end
            end_of_month: Roll intermediate dates to month end

        Returns:
            Schedule with adjusted dates
        """
        if end <= start:
            raise ValueError(f"Schedule end {end} must be after start {start}")
        calendar = calendar or Calendar()
        if termination_convention is None:
            termination_convention = convention
        amount, unit = DateUtils.parse_tenor(tenor)
        if amount == 0:
            raise ValueError("Schedule tenor must be positive")

        unadjusted: List[date] = []
        if rule == DateGeneration.FORWARD:
            unadjusted.append(start)
            n = 1
            while True:
                d = _shift(start, amount * n, unit, end_of_month and _is_month_end(start))
                if d >= end:
                    break
                unadjusted.append(d)
                n += 1
            unadjusted.append(end)
        else:
            unadjusted.append(end)
            n = 1
            while True:
                d = _shift(end, -amount * n, unit, end_of_month and _is_month_end(end))
                if d <= start:
                    break
                unadjusted.insert(0, d)
                n += 1
            unadjusted.insert(0, start)

        adjusted = [calendar.adjust(unadjusted[0], convention)]
        for d in unadjusted[1:-1]:
            adjusted.append(calendar.adjust(d, convention))
        adjusted.append(calendar.adjust(unadjusted[-1], termination_convention))

        # adjustment can collapse a short stub onto its neighbour
        deduped = [adjusted[0]]
        for d in adjusted[1:]:
            if d > deduped[-1]:
                deduped.append(d)
        return cls(tuple(deduped))

    @property
    def start_date(self) -> date:
        return self.dates[0]

    @property
    def end_date(self) -> date:
        return self.dates[-1]

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self) -> Iterator[date]:
        return iter(self.dates)

    def __getitem__(self, i):
        return self.dates[i]


def add_months(d: date, months: int) -> date:
    """Add calendar months, clipping the day to the target month's end."""
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    day = min(d.day, _days_in_month(year, month))
    return date(year, month, day)


def _shift(d: date, amount: int, unit: str, to_month_end: bool) -> date:
    if unit == 'D':
        return d + timedelta(days=amount)
    if unit == 'W':
        return d + timedelta(weeks=amount)
    months = amount if unit == 'M' else 12 * amount
    shifted = add_months(d, months)
    if to_month_end:
        return date(shifted.year, shifted.month, _days_in_month(shifted.year, shifted.month))
    return shifted


def _is_month_end(d: date) -> bool:
    return d.day == _days_in_month(d.year, d.month)


def _days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    return _calendar.monthrange(year, month)[1]


__all__ = [
    "DateUtils",
    "DateGeneration",
    "Schedule",
    "add_months",
]
