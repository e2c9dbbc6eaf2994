"""Data models."""

from pulse_core.models.config import (
    MAX_CONFIDENCE_CEILING,
    MIN_STOP_FRACTION,
    LevelPolicy,
    StrategyConfig,
    TrendRule,
)
from pulse_core.models.instrument import (
    Category,
    Instrument,
    InstrumentCatalog,
    default_instruments,
)
from pulse_core.models.signal import (
    Direction,
    InsufficientData,
    NoPriceData,
    PriceQuote,
    Signal,
    Trend,
    UnknownTicker,
)
from pulse_core.models.tick import Tick

__all__ = [
    # Catalog
    "Category",
    "Instrument",
    "InstrumentCatalog",
    "default_instruments",
    # Hot path
    "Tick",
    # Signals and query results
    "Direction",
    "Trend",
    "Signal",
    "UnknownTicker",
    "InsufficientData",
    "NoPriceData",
    "PriceQuote",
    # Config
    "StrategyConfig",
    "TrendRule",
    "LevelPolicy",
    "MAX_CONFIDENCE_CEILING",
    "MIN_STOP_FRACTION",
]
