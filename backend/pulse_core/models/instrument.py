"""Instrument catalog: user-facing tickers mapped to feed symbols."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

import yaml
from pydantic import BaseModel, ConfigDict, field_validator


class Category(str, Enum):
    """Asset category of an instrument."""

    FOREX = "forex"
    COMMODITY = "commodity"
    INDEX = "index"
    CRYPTO = "crypto"
    SYNTHETIC = "synthetic"


class Instrument(BaseModel):
    """A tradeable instrument."""

    model_config = ConfigDict(frozen=True)

    ticker: str
    feed_symbol: str
    category: Category

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("ticker must not be empty")
        return value

    @field_validator("feed_symbol")
    @classmethod
    def _check_feed_symbol(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("feed_symbol must not be empty")
        return value


# (ticker, feed symbol) per category
_DEFAULT_TABLE: dict[Category, list[tuple[str, str]]] = {
    Category.FOREX: [
        ("EURUSD", "frxEURUSD"), ("GBPUSD", "frxGBPUSD"), ("USDJPY", "frxUSDJPY"),
        ("AUDUSD", "frxAUDUSD"), ("USDCAD", "frxUSDCAD"), ("USDCHF", "frxUSDCHF"),
        ("NZDUSD", "frxNZDUSD"), ("EURGBP", "frxEURGBP"), ("EURJPY", "frxEURJPY"),
        ("GBPJPY", "frxGBPJPY"),
    ],
    Category.COMMODITY: [
        ("XAUUSD", "frxXAUUSD"), ("XAGUSD", "frxXAGUSD"),
        ("XPTUSD", "frxXPTUSD"), ("XPDUSD", "frxXPDUSD"),
    ],
    Category.INDEX: [
        ("SPX", "RDBULL"), ("NDX", "frxNAS100"), ("DJI", "frxDJ30"),
        ("FTSE", "frxUK100"), ("DAX", "frxGER30"), ("NIKKEI", "frxJP225"),
        ("HSI", "frxHK50"), ("ASX", "frxAUS200"), ("CAC", "frxFRA40"),
    ],
    Category.CRYPTO: [
        ("BTCUSD", "cryBTCUSD"), ("ETHUSD", "cryETHUSD"), ("XRPUSD", "cryXRPUSD"),
        ("LTCUSD", "cryLTCUSD"), ("BCHUSD", "cryBCHUSD"), ("ADAUSD", "cryADAUSD"),
        ("DOTUSD", "cryDOTUSD"), ("SOLUSD", "crySOLUSD"),
    ],
    Category.SYNTHETIC: [
        # Volatility indices
        ("VOL10", "1HZ10V"), ("VOL25", "1HZ25V"), ("VOL50", "1HZ50V"),
        ("VOL75", "1HZ75V"), ("VOL100", "1HZ100V"), ("VOL150", "1HZ150V"),
        ("VOL250", "1HZ250V"),
        # Jump indices
        ("JUMP10", "JD10"), ("JUMP25", "JD25"), ("JUMP50", "JD50"),
        ("JUMP75", "JD75"), ("JUMP100", "JD100"),
        # Boom/Crash
        ("BOOM300", "boom300"), ("BOOM500", "boom500"), ("BOOM1000", "boom1000"),
        ("CRASH300", "crash300"), ("CRASH500", "crash500"), ("CRASH1000", "crash1000"),
    ],
}


def default_instruments() -> list[Instrument]:
    """Build the default instrument universe."""
    return [
        Instrument(ticker=ticker, feed_symbol=feed_symbol, category=category)
        for category, rows in _DEFAULT_TABLE.items()
        for ticker, feed_symbol in rows
    ]


class InstrumentCatalog:
    """Static, validated lookup of instruments.

    Built once at startup and never mutated. Construction fails with
    ValueError on duplicate tickers or duplicate feed symbols, so every
    lookup afterwards can trust the table.
    """

    def __init__(self, instruments: Iterable[Instrument]):
        by_ticker: dict[str, Instrument] = {}
        by_feed_symbol: dict[str, Instrument] = {}

        for instrument in instruments:
            if instrument.ticker in by_ticker:
                raise ValueError(f"Duplicate ticker in catalog: {instrument.ticker}")
            if instrument.feed_symbol in by_feed_symbol:
                raise ValueError(
                    f"Duplicate feed symbol in catalog: {instrument.feed_symbol}"
                )
            by_ticker[instrument.ticker] = instrument
            by_feed_symbol[instrument.feed_symbol] = instrument

        if not by_ticker:
            raise ValueError("Instrument catalog must not be empty")

        self._by_ticker = by_ticker
        self._by_feed_symbol = by_feed_symbol

    @classmethod
    def default(cls) -> InstrumentCatalog:
        return cls(default_instruments())

    @classmethod
    def from_yaml(cls, path: str | Path) -> InstrumentCatalog:
        """
        Load a catalog from a YAML file.

        Expected layout:

            instruments:
              - ticker: EURUSD
                feed_symbol: frxEURUSD
                category: forex

        Args:
            path: Path to the YAML file

        Returns:
            Validated catalog
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        rows = data.get("instruments")
        if not isinstance(rows, list):
            raise ValueError(f"{path}: 'instruments' must be a list")

        return cls(Instrument(**row) for row in rows)

    def get(self, ticker: str) -> Instrument | None:
        """Look up an instrument by ticker (case-insensitive)."""
        return self._by_ticker.get(ticker.strip().upper())

    def by_feed_symbol(self, feed_symbol: str) -> Instrument | None:
        """Resolve a feed symbol back to its instrument."""
        return self._by_feed_symbol.get(feed_symbol)

    def contains(self, ticker: str) -> bool:
        return self.get(ticker) is not None

    def feed_symbols(self) -> list[str]:
        return list(self._by_feed_symbol.keys())

    def by_category(self, category: Category) -> list[Instrument]:
        return [i for i in self._by_ticker.values() if i.category == category]

    def __iter__(self) -> Iterator[Instrument]:
        return iter(self._by_ticker.values())

    def __len__(self) -> int:
        return len(self._by_ticker)

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and self.contains(ticker)
