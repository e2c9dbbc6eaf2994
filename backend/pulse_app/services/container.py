"""Service wiring.

Builds the object graph once per process (or per test) so ownership is
explicit: the collector owns the store for writing, everything else
reads through the query service.
"""

import logging
import random
from dataclasses import dataclass

from pulse_app.clients import DerivTickWebSocket
from pulse_app.config import Settings
from pulse_app.services.commands import CommandHandler
from pulse_app.services.query_service import MarketQueryService
from pulse_app.services.tick_collector import TickCollector
from pulse_core.history import PriceHistoryStore
from pulse_core.models import InstrumentCatalog
from pulse_core.signal_generator import SignalGenerator

logger = logging.getLogger(__name__)


@dataclass
class Services:
    catalog: InstrumentCatalog
    store: PriceHistoryStore
    collector: TickCollector
    query: MarketQueryService
    commands: CommandHandler


def load_catalog(settings: Settings) -> InstrumentCatalog:
    if settings.instruments_file:
        catalog = InstrumentCatalog.from_yaml(settings.instruments_file)
        logger.info(f"Loaded {len(catalog)} instruments from {settings.instruments_file}")
        return catalog
    return InstrumentCatalog.default()


def build_services(settings: Settings, rng: random.Random | None = None) -> Services:
    """
    Build every service from settings.

    Args:
        settings: Application settings
        rng: Random source for confidence jitter; defaults to one seeded
            from settings.random_seed (or from OS entropy when unset)

    Returns:
        Wired services; the feed connection is not opened yet
    """
    catalog = load_catalog(settings)
    store = PriceHistoryStore(capacity=settings.history_capacity)
    generator = SignalGenerator(
        settings.strategy_config(),
        rng=rng or random.Random(settings.random_seed),
    )

    client = DerivTickWebSocket(
        feed_symbols=catalog.feed_symbols(),
        url=settings.feed_endpoint,
        heartbeat_interval=settings.heartbeat_interval,
        reconnect_delay=settings.reconnect_delay,
        reconnect_backoff=settings.reconnect_backoff,
        max_reconnect_delay=settings.reconnect_max_delay,
    )
    collector = TickCollector(catalog, store, client)
    query = MarketQueryService(catalog, store, generator)

    return Services(
        catalog=catalog,
        store=store,
        collector=collector,
        query=query,
        commands=CommandHandler(query),
    )
