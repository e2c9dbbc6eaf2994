"""Bounded per-symbol price history.

Data structure:
- one PriceHistory per feed symbol: a deque(maxlen=capacity), oldest first
- one lock per history, held only for a single append or a single copy

The store has a single writer (the tick collector) and any number of
readers (queries running on caller threads or tasks). Readers always get
a tuple copy, never the live deque, so they can compute indicators
without holding a lock.
"""

from __future__ import annotations

import logging
import threading
from collections import deque

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20
MIN_CAPACITY = 2
MAX_CAPACITY = 1000


class PriceHistory:
    """Fixed-capacity FIFO of prices for one feed symbol."""

    __slots__ = ("feed_symbol", "_prices", "_lock")

    def __init__(self, feed_symbol: str, capacity: int):
        self.feed_symbol = feed_symbol
        self._prices: deque[float] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._prices.maxlen

    def append(self, price: float) -> None:
        """Append a price, evicting the oldest one when full."""
        with self._lock:
            self._prices.append(price)

    def snapshot(self) -> tuple[float, ...]:
        """Point-in-time copy, oldest first."""
        with self._lock:
            return tuple(self._prices)

    def latest(self) -> float | None:
        with self._lock:
            return self._prices[-1] if self._prices else None

    def __len__(self) -> int:
        return len(self._prices)


class PriceHistoryStore:
    """Registry of PriceHistory objects keyed by feed symbol.

    Histories are created lazily on the first append. Each symbol is
    locked independently; the registry lock is only taken when a new
    symbol is added.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if not MIN_CAPACITY <= capacity <= MAX_CAPACITY:
            raise ValueError(
                f"capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}, got {capacity}"
            )
        self.capacity = capacity
        self._histories: dict[str, PriceHistory] = {}
        self._registry_lock = threading.Lock()

    def _get_or_create(self, feed_symbol: str) -> PriceHistory:
        history = self._histories.get(feed_symbol)
        if history is not None:
            return history

        with self._registry_lock:
            history = self._histories.get(feed_symbol)
            if history is None:
                history = PriceHistory(feed_symbol, self.capacity)
                self._histories[feed_symbol] = history
                logger.debug(f"Created price history for {feed_symbol}")
            return history

    def append(self, feed_symbol: str, price: float) -> None:
        """
        Append a price for a feed symbol.

        Args:
            feed_symbol: Feed-specific symbol (e.g., "frxEURUSD")
            price: Mid price of the tick
        """
        self._get_or_create(feed_symbol).append(price)

    def snapshot(self, feed_symbol: str) -> tuple[float, ...]:
        """Copy of the history for a symbol; empty if never seen."""
        history = self._histories.get(feed_symbol)
        if history is None:
            return ()
        return history.snapshot()

    def latest(self, feed_symbol: str) -> float | None:
        history = self._histories.get(feed_symbol)
        if history is None:
            return None
        return history.latest()

    def length(self, feed_symbol: str) -> int:
        history = self._histories.get(feed_symbol)
        if history is None:
            return 0
        return len(history)

    def symbols(self) -> list[str]:
        return list(self._histories.keys())

    def clear(self) -> None:
        """Drop every history (shutdown and test isolation)."""
        with self._registry_lock:
            self._histories.clear()
