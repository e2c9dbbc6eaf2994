"""Technical indicators (pure math, no I/O)."""

from pulse_core.indicators.indicators import (
    ema,
    sma,
    highest,
    lowest,
    IndicatorCalculator,
    IndicatorSnapshot,
)

__all__ = [
    "ema",
    "sma",
    "highest",
    "lowest",
    "IndicatorCalculator",
    "IndicatorSnapshot",
]
