"""Text command dispatcher.

Commands (case-insensitive):
- HI             -> greeting with the supported assets
- PRICE <TICKER> -> latest price
- <TICKER>       -> full analysis
"""

import logging

from pulse_app.services.query_service import (
    MarketQueryService,
    format_analysis,
    format_price,
)
from pulse_core.models import Category, InstrumentCatalog

logger = logging.getLogger(__name__)

INVALID_COMMAND = "Invalid command"
ERROR_REPLY = "Error processing request"

_CATEGORY_LABELS = {
    Category.FOREX: "Forex",
    Category.COMMODITY: "Commodities",
    Category.INDEX: "Indices",
    Category.CRYPTO: "Crypto",
    Category.SYNTHETIC: "Synthetics",
}


def build_greeting(catalog: InstrumentCatalog) -> str:
    """Greeting listing every cataloged ticker grouped by category."""
    lines = ["📈 Trading Bot - Supported Assets:"]
    for category, label in _CATEGORY_LABELS.items():
        tickers = [i.ticker for i in catalog.by_category(category)]
        if tickers:
            lines.append(f"{label}: {', '.join(tickers)}")

    example = next(iter(catalog)).ticker
    lines += [
        "",
        "Commands:",
        f"➤ Analysis: {example}",
        f"➤ Price: PRICE {example}",
    ]
    return "\n".join(lines)


class CommandHandler:
    """Turns one inbound text command into one reply."""

    def __init__(self, query: MarketQueryService):
        self.query = query
        self.greeting = build_greeting(query.catalog)

    def handle(self, text: str | None) -> str:
        command = (text or "").strip().upper()
        try:
            return self._dispatch(command)
        except Exception:
            logger.exception(f"Error processing command {command!r}")
            return ERROR_REPLY

    def _dispatch(self, command: str) -> str:
        if command == "HI":
            return self.greeting

        if command.startswith("PRICE "):
            ticker = command.split()[1]
            return format_price(self.query.current_price(ticker))

        if command and self.query.catalog_contains(command):
            return format_analysis(self.query.analyze(command))

        return INVALID_COMMAND
