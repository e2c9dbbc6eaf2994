"""Strategy configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class TrendRule(str, Enum):
    """How the trend is classified from the indicators."""

    CROSSOVER = "crossover"  # fast SMA vs slow SMA
    PRICE_VS_EMA = "price_vs_ema"  # last price vs slow EMA


class LevelPolicy(str, Enum):
    """How stop-loss and take-profit levels are placed."""

    FIXED_PCT = "fixed_pct"
    SWING = "swing"


# Confidence is a display heuristic; it is never allowed to look certain
MAX_CONFIDENCE_CEILING = 95.0

# Smallest stop distance (fraction of entry) that float prices can resolve
MIN_STOP_FRACTION = 1e-6


class StrategyConfig(BaseModel):
    """Strategy configuration parameters.

    One rule set per deployment: the trend rule and the level policy are
    fixed when the config is built and apply to every signal.
    """

    # Indicator periods
    fast_period: int = Field(default=5, ge=1)
    slow_period: int = Field(default=10, ge=2)

    trend_rule: TrendRule = TrendRule.CROSSOVER
    level_policy: LevelPolicy = LevelPolicy.SWING

    # Swing policy: lookback for swing high/low and minimum stop distance
    swing_lookback: int = Field(default=10, ge=2)
    min_stop_pct: float = Field(default=0.001, ge=MIN_STOP_FRACTION, lt=1)

    # Fixed-percentage policy: stop distance as a fraction of entry
    stop_pct: float = Field(default=0.005, ge=MIN_STOP_FRACTION, lt=1)

    # Targets as multiples of the stop distance, nearest first
    tp_risk_multiples: list[float] = Field(default_factory=lambda: [1.5, 3.0])

    # Confidence heuristic (percent)
    buy_confidence_base: float = Field(default=70.0, ge=0, le=MAX_CONFIDENCE_CEILING)
    sell_confidence_base: float = Field(default=65.0, ge=0, le=MAX_CONFIDENCE_CEILING)
    confidence_jitter: float = Field(default=20.0, ge=0)
    confidence_ceiling: float = Field(default=90.0, gt=0, le=MAX_CONFIDENCE_CEILING)

    @model_validator(mode="after")
    def _check_consistency(self) -> StrategyConfig:
        if self.fast_period >= self.slow_period:
            raise ValueError(
                f"fast_period ({self.fast_period}) must be shorter than "
                f"slow_period ({self.slow_period})"
            )
        if not self.tp_risk_multiples:
            raise ValueError("tp_risk_multiples must contain at least one entry")
        if any(m <= 0 for m in self.tp_risk_multiples):
            raise ValueError("tp_risk_multiples must all be positive")
        if max(self.buy_confidence_base, self.sell_confidence_base) > self.confidence_ceiling:
            raise ValueError("confidence bases must not exceed confidence_ceiling")
        self.tp_risk_multiples = sorted(self.tp_risk_multiples)
        return self

    @property
    def required_history(self) -> int:
        """Minimum number of prices before any signal is computed."""
        needed = self.slow_period
        if self.level_policy == LevelPolicy.SWING:
            needed = max(needed, self.swing_lookback)
        return needed
