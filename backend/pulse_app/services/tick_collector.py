"""Tick collection service.

Wires the feed client to the price history store:
- subscribes the client to every feed symbol in the catalog
- resolves each inbound tick's feed symbol against the catalog
- appends the tick's mid price to that symbol's history

The collector is the only writer of the store.
"""

import logging

from pulse_app.clients import ConnectionState, DerivTickWebSocket
from pulse_core.history import PriceHistoryStore
from pulse_core.models import InstrumentCatalog, Tick

logger = logging.getLogger(__name__)


class TickCollector:
    """Service for collecting ticks into the price history store."""

    def __init__(
        self,
        catalog: InstrumentCatalog,
        store: PriceHistoryStore,
        client: DerivTickWebSocket,
    ):
        self.catalog = catalog
        self.store = store
        self.client = client
        self.ticks_received = 0
        self.ticks_ignored = 0

        self.client.on_tick(self.handle_tick)

    @property
    def state(self) -> ConnectionState:
        return self.client.state

    def handle_tick(self, tick: Tick) -> None:
        """Append one tick to its history; ticks for unknown symbols are ignored."""
        instrument = self.catalog.by_feed_symbol(tick.feed_symbol)
        if instrument is None:
            self.ticks_ignored += 1
            logger.debug(f"Ignoring tick for uncataloged symbol {tick.feed_symbol}")
            return

        self.store.append(instrument.feed_symbol, tick.mid_price)
        self.ticks_received += 1

    async def start(self) -> None:
        """Start streaming ticks for every cataloged instrument."""
        logger.info(f"Starting tick collector for {len(self.catalog)} instruments")
        await self.client.start()

    async def stop(self) -> None:
        await self.client.stop()
        logger.info(
            f"Tick collector stopped ({self.ticks_received} ticks stored, "
            f"{self.ticks_ignored} ignored)"
        )
