"""Signal and query result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Trend(str, Enum):
    """Trend classification."""

    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"
    INSUFFICIENT = "Insufficient"


class Direction(str, Enum):
    """Trade direction."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"

    @classmethod
    def from_trend(cls, trend: Trend) -> Direction:
        if trend == Trend.BULLISH:
            return cls.BUY
        if trend == Trend.BEARISH:
            return cls.SELL
        return cls.HOLD


class Signal(BaseModel):
    """Directional trade signal derived from recent price history.

    ``confidence`` is a heuristic display percentage, not a statistically
    validated win probability.
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    trend: Trend
    direction: Direction
    confidence: float = Field(ge=0, le=100)
    entry: float
    stop_loss: float | None = None
    take_profit: tuple[float, ...] = ()

    # Indicator values behind the decision
    fast_average: float | None = None
    slow_average: float | None = None

    @model_validator(mode="after")
    def _check_levels(self) -> Signal:
        if self.direction == Direction.HOLD:
            if self.stop_loss is not None or self.take_profit:
                raise ValueError("HOLD signals carry no stop-loss or targets")
            return self

        if self.stop_loss is None or not self.take_profit:
            raise ValueError(f"{self.direction.value} signal needs a stop-loss and targets")

        if self.direction == Direction.BUY:
            ordered = self.stop_loss < self.entry and all(
                tp > self.entry for tp in self.take_profit
            )
        else:
            ordered = self.stop_loss > self.entry and all(
                tp < self.entry for tp in self.take_profit
            )
        if not ordered:
            raise ValueError(
                f"Invalid {self.direction.value} levels: entry={self.entry} "
                f"sl={self.stop_loss} tp={self.take_profit}"
            )
        return self

    @property
    def risk_amount(self) -> float:
        """Distance from entry to stop loss."""
        if self.stop_loss is None:
            return 0.0
        return abs(self.entry - self.stop_loss)


class UnknownTicker(BaseModel):
    """The ticker is not in the instrument catalog."""

    model_config = ConfigDict(frozen=True)

    ticker: str


class InsufficientData(BaseModel):
    """Not enough history to compute a signal yet."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    have: int
    required: int

    @property
    def progress(self) -> str:
        return f"{self.have}/{self.required}"

    @property
    def no_data(self) -> bool:
        """True when no tick has been received at all."""
        return self.have == 0


class NoPriceData(BaseModel):
    """The ticker is known but no tick has arrived yet."""

    model_config = ConfigDict(frozen=True)

    ticker: str


class PriceQuote(BaseModel):
    """Latest mid price for a ticker."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    price: float
