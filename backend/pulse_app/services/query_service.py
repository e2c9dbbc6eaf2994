"""Read-only market queries over the price history store.

Every query takes one snapshot of the relevant history and computes from
that copy, so queries never block the collector for longer than the
copy and never touch the network.
"""

import logging

from pulse_core.history import PriceHistoryStore
from pulse_core.models import (
    Direction,
    InsufficientData,
    InstrumentCatalog,
    NoPriceData,
    PriceQuote,
    Signal,
    UnknownTicker,
)
from pulse_core.signal_generator import SignalGenerator

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 5

PriceResult = PriceQuote | NoPriceData | UnknownTicker
AnalysisResult = Signal | InsufficientData | UnknownTicker


def _fmt(value: float) -> str:
    return f"{value:.{PRICE_DECIMALS}f}"


class MarketQueryService:
    """Query facade used by the command dispatcher and the HTTP API."""

    def __init__(
        self,
        catalog: InstrumentCatalog,
        store: PriceHistoryStore,
        generator: SignalGenerator,
    ):
        self.catalog = catalog
        self.store = store
        self.generator = generator

    def catalog_contains(self, ticker: str) -> bool:
        return self.catalog.contains(ticker)

    def current_price(self, ticker: str) -> PriceResult:
        """Latest mid price for a ticker."""
        instrument = self.catalog.get(ticker)
        if instrument is None:
            return UnknownTicker(ticker=ticker.strip().upper())

        price = self.store.latest(instrument.feed_symbol)
        if price is None:
            return NoPriceData(ticker=instrument.ticker)
        return PriceQuote(ticker=instrument.ticker, price=price)

    def analyze(self, ticker: str) -> AnalysisResult:
        """Trend, direction and levels for a ticker from its current history."""
        instrument = self.catalog.get(ticker)
        if instrument is None:
            return UnknownTicker(ticker=ticker.strip().upper())

        prices = self.store.snapshot(instrument.feed_symbol)
        return self.generator.evaluate(instrument.ticker, prices)


def format_price(result: PriceResult) -> str:
    """Render a price query result as reply text."""
    if isinstance(result, UnknownTicker):
        return "❌ Invalid asset"
    if isinstance(result, NoPriceData):
        return f"❌ No price data received yet for {result.ticker}. Try again later."
    return f"{result.ticker}: {_fmt(result.price)}"


def format_analysis(result: AnalysisResult) -> str:
    """Render an analysis result as reply text."""
    if isinstance(result, UnknownTicker):
        return "❌ Invalid asset"
    if isinstance(result, InsufficientData):
        if result.no_data:
            return f"❌ No price data received yet for {result.ticker}. Try again later."
        return f"🔄 Collecting data ({result.progress})"

    lines = [
        f"📊 {result.ticker} Analysis",
        f"Trend: {result.trend.value}",
        f"Signal: {result.direction.value} ({result.confidence:.0f}%)",
        f"Entry: {_fmt(result.entry)}",
    ]
    if result.direction != Direction.HOLD:
        lines.append(f"SL: {_fmt(result.stop_loss)}")
        if len(result.take_profit) == 1:
            lines.append(f"TP: {_fmt(result.take_profit[0])}")
        else:
            for i, level in enumerate(result.take_profit, start=1):
                lines.append(f"TP{i}: {_fmt(level)}")
    return "\n".join(lines)
