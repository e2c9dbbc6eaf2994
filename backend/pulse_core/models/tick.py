"""Hot path tick model.

Uses @dataclass(slots=True) and float prices, like the other hot path
models: ticks are created for every inbound frame and discarded as soon
as their price has been appended to the history.
"""

import math
from dataclasses import dataclass


def _as_price(value) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Invalid price value: {value!r}")
    price = float(value)
    if not math.isfinite(price) or price <= 0:
        raise ValueError(f"Price must be positive and finite: {value!r}")
    return price


@dataclass(slots=True, frozen=True)
class Tick:
    """One price update for a feed symbol."""

    feed_symbol: str
    bid: float | None = None
    ask: float | None = None
    quote: float | None = None

    @property
    def mid_price(self) -> float:
        """(bid + ask) / 2 when both sides are present, else the quote."""
        if self.bid is not None and self.ask is not None:
            return (self.bid + self.ask) / 2
        if self.quote is not None:
            return self.quote
        raise ValueError(f"Tick for {self.feed_symbol} carries no price")

    @classmethod
    def from_payload(cls, payload: dict) -> "Tick":
        """
        Build a tick from the feed's ``tick`` object.

        Args:
            payload: Dict with ``symbol`` and any of ``bid``/``ask``/``quote``

        Raises:
            ValueError: If the symbol is missing or no usable price is present
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Tick payload must be an object, got {type(payload).__name__}")

        symbol = payload.get("symbol")
        if not isinstance(symbol, str) or not symbol:
            raise ValueError("Tick payload has no symbol")

        tick = cls(
            feed_symbol=symbol,
            bid=_as_price(payload.get("bid")),
            ask=_as_price(payload.get("ask")),
            quote=_as_price(payload.get("quote")),
        )
        # Validate eagerly so malformed ticks never reach the history
        tick.mid_price
        return tick
