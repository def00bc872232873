import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
import numpy as np

class MathTools:
    """Numeric helpers shared by validation and the progress statistics."""

    EPL_COEFF: float = 0.0333
    EPL_MAX_REPS: int = 8

    @staticmethod
    def clamp(value: float, low: float, high: float) -> float:
        if low > high:
            raise ValueError("low must not exceed high")
        return min(max(value, low), high)

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Estimated one-rep max; reps past ``EPL_MAX_REPS`` add nothing."""
        if reps < 0:
            raise ValueError("reps must be non-negative")
        return weight * (1 + cls.EPL_COEFF * min(reps, cls.EPL_MAX_REPS))

    @staticmethod
    def volume(sets: Iterable[tuple[int, float]]) -> float:
        """Total load lifted: the sum of reps times weight over ``sets``."""
        return float(sum(reps * weight for reps, weight in sets))

    @staticmethod
    def mean(values: Iterable[float], digits: int | None = None) -> float | None:
        """Return the arithmetic mean of ``values`` or ``None`` when empty.

        With ``digits`` halves round away from zero: 7.25 becomes 7.3.
        """
        data = list(values)
        if not data:
            return None
        avg = sum(data) / len(data)
        if digits is None:
            return avg
        step = Decimal(1).scaleb(-digits)
        return float(Decimal(avg).quantize(step, rounding=ROUND_HALF_UP))

    @staticmethod
    def weekly_slope(points: Iterable[tuple[datetime.date, float]]) -> float | None:
        """Least-squares slope of dated ``points`` in units per week.

        Needs at least two distinct dates; returns ``None`` otherwise.
        """
        data = list(points)
        if len({d for d, _ in data}) < 2:
            return None
        origin = min(d for d, _ in data)
        x = np.array([(d - origin).days for d, _ in data], dtype=float)
        y = np.array([v for _, v in data], dtype=float)
        slope, _intercept = np.polyfit(x, y, 1)
        return round(float(slope) * 7, 2)
