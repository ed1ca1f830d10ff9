"""
Interest rate with compounding and day-count conventions.

Converts between compound factors and quoted rates:
- Simple: 1 + r*t
- Compounded: (1 + r/f)^(f*t)
- Continuous: exp(r*t)
- SimpleThenCompounded / CompoundedThenSimple: switch at one period (1/f)
"""

from dataclasses import dataclass
import math

from .conventions import Compounding, DayCount, Frequency


@dataclass(frozen=True)
class InterestRate:
    """
    A rate quoted under explicit conventions.

    Attributes:
        rate: Rate in decimal
        day_count: Day count used to turn dates into times
        compounding: Compounding rule
        frequency: Compounding frequency (ignored for simple/continuous)
    """
    rate: float
    day_count: DayCount = DayCount.ACT_365
    compounding: Compounding = Compounding.CONTINUOUS
    frequency: Frequency = Frequency.ANNUAL

    def __float__(self) -> float:
        return self.rate

    def compound_factor(self, t) -> float:
        """
        Compound factor over a time, or over a (start, end) date pair.

        Args:
            t: Year fraction, or tuple of two dates

        Returns:
            Growth of one unit over the period
        """
        if isinstance(t, tuple):
            start, end = t
            t = self.day_count.year_fraction(start, end)
        if t < 0:
            raise ValueError(f"Negative time ({t}) not allowed")
        if t == 0:
            return 1.0

        r = self.rate
        f = self.frequency.periods_per_year
        comp = self.compounding
        if comp == Compounding.SIMPLE:
            factor = 1.0 + r * t
        elif comp == Compounding.COMPOUNDED:
            factor = (1.0 + r / f) ** (f * t)
        elif comp == Compounding.CONTINUOUS:
            factor = math.exp(r * t)
        elif comp == Compounding.SIMPLE_THEN_COMPOUNDED:
            factor = 1.0 + r * t if t <= 1.0 / f else (1.0 + r / f) ** (f * t)
        elif comp == Compounding.COMPOUNDED_THEN_SIMPLE:
            factor = (1.0 + r / f) ** (f * t) if t <= 1.0 / f else 1.0 + r * t
        else:
            raise ValueError(f"Unknown compounding: {comp}")

        if factor <= 0:
            raise ValueError(f"Non-positive compound factor {factor} for rate {r}")
        return factor

    def discount_factor(self, t) -> float:
        return 1.0 / self.compound_factor(t)

    def equivalent_rate(
        self,
        compounding: Compounding,
        frequency: Frequency,
        t: float,
    ) -> "InterestRate":
        """Same growth over t, quoted under other conventions."""
        return InterestRate.implied_rate(
            self.compound_factor(t), self.day_count, compounding, frequency, t
        )

    @classmethod
    def implied_rate(
        cls,
        compound: float,
        day_count: DayCount,
        compounding: Compounding,
        frequency: Frequency,
        t: float,
    ) -> "InterestRate":
        """
        Rate that produces a given compound factor over time t.

        A zero horizon implies a zero rate.
        """
        if compound <= 0:
            raise ValueError(f"Compound factor must be positive, got {compound}")
        if t == 0:
            return cls(0.0, day_count, compounding, frequency)

        f = frequency.periods_per_year
        if compounding == Compounding.SIMPLE:
            r = (compound - 1.0) / t
        elif compounding == Compounding.COMPOUNDED:
            r = (compound ** (1.0 / (f * t)) - 1.0) * f
        elif compounding == Compounding.CONTINUOUS:
            r = math.log(compound) / t
        elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
            if t <= 1.0 / f:
                r = (compound - 1.0) / t
            else:
                r = (compound ** (1.0 / (f * t)) - 1.0) * f
        elif compounding == Compounding.COMPOUNDED_THEN_SIMPLE:
            if t <= 1.0 / f:
                r = (compound ** (1.0 / (f * t)) - 1.0) * f
            else:
                r = (compound - 1.0) / t
        else:
            raise ValueError(f"Unknown compounding: {compounding}")
        return cls(r, day_count, compounding, frequency)

    def __str__(self) -> str:
        return (f"{self.rate * 100:.4f}% {self.day_count.value} "
                f"{self.compounding.value} {self.frequency.name}")


__all__ = ["InterestRate"]
