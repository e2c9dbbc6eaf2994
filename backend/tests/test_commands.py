"""Tests for the text command dispatcher."""

import random
from unittest.mock import MagicMock

import pytest

from pulse_app.services import CommandHandler, MarketQueryService, build_greeting
from pulse_app.services.commands import ERROR_REPLY, INVALID_COMMAND
from pulse_core.history import PriceHistoryStore
from pulse_core.models import Category, Instrument, InstrumentCatalog, StrategyConfig
from pulse_core.signal_generator import SignalGenerator


@pytest.fixture
def store():
    return PriceHistoryStore(capacity=20)


@pytest.fixture
def handler(store):
    generator = SignalGenerator(StrategyConfig(), rng=random.Random(3))
    return CommandHandler(MarketQueryService(InstrumentCatalog.default(), store, generator))


class TestGreeting:
    """Greeting text."""

    def test_lists_every_category(self, handler):
        reply = handler.handle("hi")

        assert reply.startswith("📈 Trading Bot - Supported Assets:")
        assert "Forex: EURUSD, GBPUSD" in reply
        assert "Commodities: XAUUSD" in reply
        assert "Crypto: BTCUSD" in reply
        assert "VOL75" in reply
        assert "➤ Analysis: EURUSD" in reply
        assert "➤ Price: PRICE EURUSD" in reply

    def test_skips_empty_categories(self):
        catalog = InstrumentCatalog([
            Instrument(ticker="VOL10", feed_symbol="1HZ10V", category=Category.SYNTHETIC),
        ])

        greeting = build_greeting(catalog)

        assert "Synthetics: VOL10" in greeting
        assert "Forex" not in greeting
        assert "➤ Analysis: VOL10" in greeting


class TestDispatch:
    """Command routing."""

    def test_price(self, handler, store):
        store.append("frxEURUSD", 1.08)

        assert handler.handle("  price eurusd ") == "EURUSD: 1.08000"

    def test_price_no_data(self, handler):
        assert handler.handle("PRICE GBPUSD") == (
            "❌ No price data received yet for GBPUSD. Try again later."
        )

    def test_price_unknown_ticker(self, handler):
        assert handler.handle("PRICE ZZZZ") == "❌ Invalid asset"

    def test_analysis_collecting(self, handler, store):
        for price in (1.0, 1.1, 1.2):
            store.append("frxEURUSD", price)

        assert handler.handle("eurusd") == "🔄 Collecting data (3/10)"

    def test_analysis_signal(self, handler, store):
        for i in range(15):
            store.append("frxEURUSD", 1.1 + 0.0005 * i)

        reply = handler.handle("EURUSD")

        assert reply.startswith("📊 EURUSD Analysis")
        assert "Signal: BUY" in reply
        assert "TP2:" in reply

    @pytest.mark.parametrize("text", ["", "   ", None, "HELLO", "PRICE", "ZZZZ"])
    def test_invalid_command(self, handler, text):
        assert handler.handle(text) == INVALID_COMMAND

    def test_errors_become_error_reply(self):
        query = MagicMock()
        query.catalog = InstrumentCatalog.default()
        query.catalog_contains.return_value = True
        query.analyze.side_effect = RuntimeError("boom")
        handler = CommandHandler(query)

        assert handler.handle("EURUSD") == ERROR_REPLY
