"""Technical indicators over a price history snapshot.

All functions are pure: they take an ordered sequence of prices (oldest
first) and return the value for the latest point, or None when the
sequence is shorter than the requested period. The None return is the
only guard against empty windows; callers never divide by a length.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


def _check_period(period: int) -> None:
    if period <= 0:
        raise ValueError(f"period must be > 0, got {period}")


def _tail(values: Sequence[float], period: int) -> np.ndarray:
    return np.asarray(values[-period:], dtype=np.float64)


def sma(values: Sequence[float], period: int) -> float | None:
    """
    Calculate Simple Moving Average of the trailing ``period`` values.

    Args:
        values: Sequence of prices, oldest first
        period: SMA period

    Returns:
        Arithmetic mean of the last ``period`` values, or None if there
        are fewer than ``period`` values
    """
    _check_period(period)
    if len(values) < period:
        return None
    return float(np.mean(_tail(values, period)))


def ema(values: Sequence[float], period: int) -> float | None:
    """
    Calculate Exponential Moving Average.

    The running value is seeded with the first element of ``values`` (not
    with an SMA of the first ``period`` elements) and updated forward with
    multiplier 2 / (period + 1):

        ema[i] = (price[i] - ema[i-1]) * multiplier + ema[i-1]

    Seeding from the first element is a simplification relative to the
    textbook EMA; it is kept so outputs match the live bot's history.

    Args:
        values: Sequence of prices, oldest first
        period: EMA period

    Returns:
        EMA at the last value, or None if there are fewer than ``period`` values
    """
    _check_period(period)
    if len(values) < period:
        return None

    multiplier = 2.0 / (period + 1)
    result = float(values[0])
    for price in values[1:]:
        result = (float(price) - result) * multiplier + result
    return result


def highest(values: Sequence[float], period: int) -> float | None:
    """Highest value over the trailing ``period`` values (swing high)."""
    _check_period(period)
    if len(values) < period:
        return None
    return float(np.max(_tail(values, period)))


def lowest(values: Sequence[float], period: int) -> float | None:
    """Lowest value over the trailing ``period`` values (swing low)."""
    _check_period(period)
    if len(values) < period:
        return None
    return float(np.min(_tail(values, period)))


@dataclass(frozen=True, slots=True)
class IndicatorSnapshot:
    """Indicator values for the latest point of one history snapshot."""

    price: float | None
    fast_sma: float | None
    slow_sma: float | None
    slow_ema: float | None
    swing_high: float | None
    swing_low: float | None


class IndicatorCalculator:
    """Calculator for the indicators the signal generator needs."""

    def __init__(
        self,
        fast_period: int = 5,
        slow_period: int = 10,
        swing_lookback: int = 10,
    ):
        for period in (fast_period, slow_period, swing_lookback):
            _check_period(period)
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.swing_lookback = swing_lookback

    def calculate(self, prices: Sequence[float]) -> IndicatorSnapshot:
        """
        Calculate all indicators for a history snapshot.

        Values whose period exceeds the history length are None.
        """
        return IndicatorSnapshot(
            price=float(prices[-1]) if len(prices) else None,
            fast_sma=sma(prices, self.fast_period),
            slow_sma=sma(prices, self.slow_period),
            slow_ema=ema(prices, self.slow_period),
            swing_high=highest(prices, self.swing_lookback),
            swing_low=lowest(prices, self.swing_lookback),
        )
