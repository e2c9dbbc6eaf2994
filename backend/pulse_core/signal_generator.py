"""Signal generator: trend classification, direction, confidence and levels.

This module is pure business logic with no I/O dependencies. The random
source used for the confidence jitter is injected, so a seeded
random.Random makes every output reproducible.
"""

import logging
import math
import random
from typing import Sequence

from pulse_core.indicators import IndicatorCalculator, IndicatorSnapshot
from pulse_core.models import (
    Direction,
    InsufficientData,
    LevelPolicy,
    Signal,
    StrategyConfig,
    Trend,
    TrendRule,
)

logger = logging.getLogger(__name__)

# Confidence shown for HOLD signals
NEUTRAL_CONFIDENCE = 50.0

# SELL targets never fall below this fraction of entry
MIN_SELL_TARGET_FRACTION = 0.01


class SignalGenerator:
    """
    Generate trade signals from a price history snapshot.

    Trend rules (one per deployment, from StrategyConfig.trend_rule):
    - crossover: Bullish if fast SMA > slow SMA, else Bearish
    - price_vs_ema: Bullish if price > slow EMA, Bearish if below,
      Neutral if equal

    Levels (StrategyConfig.level_policy):
    - fixed_pct: stop at entry -/+ entry * stop_pct
    - swing: stop beyond the swing low/high of the last swing_lookback
      prices, never closer than entry * min_stop_pct
    Targets sit at entry +/- risk * m for every m in tp_risk_multiples.
    SELL risk is capped so the farthest target stays above zero.

    Confidence is a display heuristic: the direction's base value plus
    uniform jitter, clamped to confidence_ceiling.
    """

    def __init__(
        self,
        config: StrategyConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or StrategyConfig()
        self._rng = rng or random.Random()
        self.indicator_calc = IndicatorCalculator(
            fast_period=self.config.fast_period,
            slow_period=self.config.slow_period,
            swing_lookback=self.config.swing_lookback,
        )

    @property
    def required_history(self) -> int:
        return self.config.required_history

    def classify_trend(self, indicators: IndicatorSnapshot) -> Trend:
        """Classify the trend from a complete indicator snapshot."""
        if self.config.trend_rule == TrendRule.CROSSOVER:
            if indicators.fast_sma is None or indicators.slow_sma is None:
                return Trend.INSUFFICIENT
            if indicators.fast_sma > indicators.slow_sma:
                return Trend.BULLISH
            return Trend.BEARISH

        if indicators.price is None or indicators.slow_ema is None:
            return Trend.INSUFFICIENT
        if indicators.price > indicators.slow_ema:
            return Trend.BULLISH
        if indicators.price < indicators.slow_ema:
            return Trend.BEARISH
        return Trend.NEUTRAL

    def confidence(self, direction: Direction) -> float:
        """Heuristic confidence percentage for a direction."""
        if direction == Direction.BUY:
            base = self.config.buy_confidence_base
        elif direction == Direction.SELL:
            base = self.config.sell_confidence_base
        else:
            return NEUTRAL_CONFIDENCE

        jitter = self._rng.uniform(0.0, self.config.confidence_jitter)
        return min(base + jitter, self.config.confidence_ceiling)

    def _risk_distance(
        self,
        direction: Direction,
        entry: float,
        indicators: IndicatorSnapshot,
    ) -> float:
        """Distance from entry to the stop loss, always > 0 for entry > 0."""
        if self.config.level_policy == LevelPolicy.FIXED_PCT:
            risk = entry * self.config.stop_pct
        else:
            floor = entry * self.config.min_stop_pct
            if direction == Direction.BUY:
                swing_distance = entry - indicators.swing_low
            else:
                swing_distance = indicators.swing_high - entry
            risk = max(swing_distance, floor)

        if direction == Direction.SELL:
            # Farthest target must stay a positive price after a spike
            farthest = self.config.tp_risk_multiples[-1]
            max_risk = entry * (1 - MIN_SELL_TARGET_FRACTION) / farthest
            risk = min(risk, max_risk)
        return risk

    def calculate_levels(
        self,
        direction: Direction,
        entry: float,
        indicators: IndicatorSnapshot,
    ) -> tuple[float, tuple[float, ...]]:
        """
        Calculate stop loss and take profit levels.

        Args:
            direction: BUY or SELL
            entry: Entry price (> 0)
            indicators: Snapshot the direction was derived from

        Returns:
            Tuple of (stop_loss, take_profit_levels), targets nearest first
        """
        risk = self._risk_distance(direction, entry, indicators)

        # Offsets below float resolution would collapse onto entry
        below = math.nextafter(entry, 0.0)
        above = math.nextafter(entry, math.inf)

        if direction == Direction.BUY:
            stop_loss = min(entry - risk, below)
            take_profit = tuple(
                max(entry + risk * multiple, above)
                for multiple in self.config.tp_risk_multiples
            )
        else:
            stop_loss = max(entry + risk, above)
            take_profit = tuple(
                min(entry - risk * multiple, below)
                for multiple in self.config.tp_risk_multiples
            )
        return stop_loss, take_profit

    def evaluate(self, ticker: str, prices: Sequence[float]) -> Signal | InsufficientData:
        """
        Evaluate a history snapshot.

        Args:
            ticker: User-facing ticker, copied into the result
            prices: History snapshot, oldest first

        Returns:
            Signal, or InsufficientData when the snapshot is shorter than
            the longest period the strategy needs
        """
        required = self.required_history
        if len(prices) < required:
            return InsufficientData(ticker=ticker, have=len(prices), required=required)

        indicators = self.indicator_calc.calculate(prices)
        trend = self.classify_trend(indicators)
        direction = Direction.from_trend(trend)
        entry = indicators.price

        if trend == Trend.INSUFFICIENT:
            return InsufficientData(ticker=ticker, have=len(prices), required=required)

        if direction == Direction.HOLD or entry <= 0:
            stop_loss, take_profit = None, ()
            direction = Direction.HOLD
        else:
            stop_loss, take_profit = self.calculate_levels(direction, entry, indicators)

        if self.config.trend_rule == TrendRule.CROSSOVER:
            fast_average, slow_average = indicators.fast_sma, indicators.slow_sma
        else:
            fast_average, slow_average = indicators.price, indicators.slow_ema

        signal = Signal(
            ticker=ticker,
            trend=trend,
            direction=direction,
            confidence=self.confidence(direction),
            entry=entry,
            stop_loss=stop_loss,
            take_profit=take_profit,
            fast_average=fast_average,
            slow_average=slow_average,
        )
        logger.debug(
            f"{ticker}: {trend.value} -> {direction.value} "
            f"entry={entry} sl={stop_loss} tp={take_profit}"
        )
        return signal
