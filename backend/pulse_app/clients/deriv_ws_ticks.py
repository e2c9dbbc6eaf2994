"""Deriv WebSocket client for real-time tick data using picows."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable

import orjson
from picows import ws_connect, WSFrame, WSTransport, WSListener, WSMsgType, WSCloseCode

from pulse_core.models import Tick

logger = logging.getLogger(__name__)

# Type alias for tick callback
TickCallback = Callable[[Tick], None]


class ConnectionState(str, Enum):
    """Lifecycle of the feed connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"
    CLOSED = "closed"  # terminal, only after stop()


class DerivTickListener(WSListener):
    """picows listener for the Deriv tick stream.

    Owns the per-connection resources: the transport and the heartbeat
    task. Both are released when the connection goes away.
    """

    def __init__(
        self,
        feed_symbols: list[str],
        callbacks: list[TickCallback],
        on_state: Callable[[ConnectionState], None],
        loop: asyncio.AbstractEventLoop,
        heartbeat_interval: float = 30.0,
    ):
        self._feed_symbols = feed_symbols
        self._callbacks = callbacks
        self._on_state = on_state
        self._loop = loop
        self._heartbeat_interval = heartbeat_interval
        self._transport: WSTransport | None = None
        self._heartbeat_task: asyncio.Task | None = None
        self._streaming = False

    def on_ws_connected(self, transport: WSTransport):
        """Called when WebSocket connection is established."""
        self._transport = transport
        self._streaming = False
        logger.info("picows: tick WebSocket connected")
        self._on_state(ConnectionState.CONNECTED)

        self._heartbeat_task = self._loop.create_task(self._heartbeat())
        self._send_subscriptions()
        self._on_state(ConnectionState.SUBSCRIBING)

    def on_ws_disconnected(self, transport: WSTransport):
        """Called when WebSocket is disconnected."""
        logger.info("picows: tick WebSocket disconnected")
        self._cancel_heartbeat()
        self._transport = None
        self._streaming = False
        self._on_state(ConnectionState.DISCONNECTED)

    def on_ws_frame(self, transport: WSTransport, frame: WSFrame):
        """Called when a new frame is received."""
        if frame.msg_type == WSMsgType.TEXT:
            self._handle_message(frame.get_payload_as_bytes())
        elif frame.msg_type == WSMsgType.PING:
            transport.send_pong(frame.get_payload_as_bytes())
        elif frame.msg_type == WSMsgType.CLOSE:
            transport.disconnect()

    def _send(self, msg: dict) -> None:
        if not self._transport:
            return
        self._transport.send(WSMsgType.TEXT, orjson.dumps(msg))

    def _send_subscriptions(self) -> None:
        """Send one subscription request per feed symbol without waiting for acks."""
        for feed_symbol in self._feed_symbols:
            self._send({"ticks": feed_symbol, "subscribe": 1})
        logger.info(f"Subscribed to {len(self._feed_symbols)} tick streams")

    async def _heartbeat(self) -> None:
        """Keep the connection alive with periodic application-level pings."""
        try:
            while True:
                await asyncio.sleep(self._heartbeat_interval)
                self._send({"ping": 1})
        except Exception as e:
            logger.error(f"Heartbeat stopped: {e}")

    def _cancel_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is not None:
            task.cancel()

    def _handle_message(self, payload: bytes) -> None:
        """Handle incoming WebSocket message."""
        try:
            data = orjson.loads(payload)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")

            if "error" in data:
                error = data["error"] or {}
                logger.warning(
                    f"Feed error for {data.get('msg_type')}: "
                    f"{error.get('code')}: {error.get('message')}"
                )
                return

            if data.get("msg_type") == "tick":
                tick = Tick.from_payload(data.get("tick"))
                self._process_tick(tick)

        except ValueError as e:
            logger.warning(f"Dropping malformed tick frame: {e}")

    def _process_tick(self, tick: Tick) -> None:
        """Mark the stream live and call the registered callbacks."""
        if not self._streaming:
            self._streaming = True
            self._on_state(ConnectionState.STREAMING)

        for callback in self._callbacks:
            try:
                callback(tick)
            except Exception as e:
                logger.error(f"Tick callback error for {tick.feed_symbol}: {e}")

    def disconnect(self) -> None:
        """Disconnect the WebSocket."""
        self._cancel_heartbeat()
        if self._transport:
            self._transport.send_close(WSCloseCode.OK)
            self._transport.disconnect()


class DerivTickWebSocket:
    """WebSocket client for Deriv tick streams using picows.

    Keeps one connection open, subscribes to every feed symbol on each
    connect and reconnects without limit after any failure.
    """

    def __init__(
        self,
        feed_symbols: Iterable[str],
        url: str,
        heartbeat_interval: float = 30.0,
        reconnect_delay: float = 5.0,
        reconnect_backoff: float = 1.0,
        max_reconnect_delay: float = 60.0,
    ):
        self.url = url
        self._feed_symbols = list(feed_symbols)
        self._callbacks: list[TickCallback] = []
        self._heartbeat_interval = heartbeat_interval
        self._base_reconnect_delay = reconnect_delay
        self._reconnect_delay = reconnect_delay
        self._reconnect_backoff = reconnect_backoff
        self._max_reconnect_delay = max(max_reconnect_delay, reconnect_delay)
        self._running = False
        self._state = ConnectionState.DISCONNECTED
        self._task: asyncio.Task | None = None
        self._listener: DerivTickListener | None = None
        self._disconnected = asyncio.Event()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_delay(self) -> float:
        """Delay before the next reconnect attempt."""
        return self._reconnect_delay

    def on_tick(self, callback: TickCallback) -> None:
        """
        Register a callback invoked once per inbound tick.

        Note: Duplicate callbacks are ignored.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    async def start(self) -> None:
        """Start the WebSocket connection and message processing."""
        if self._running:
            return

        self._running = True
        self._state = ConnectionState.DISCONNECTED
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the WebSocket connection and cancel all timers."""
        self._running = False
        if self._listener:
            self._listener.disconnect()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._set_state(ConnectionState.CLOSED)

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state or self._state == ConnectionState.CLOSED:
            return
        logger.debug(f"Tick stream state: {self._state.value} -> {state.value}")
        self._state = state

        if state == ConnectionState.CONNECTED:
            self._reconnect_delay = self._base_reconnect_delay
        elif state == ConnectionState.DISCONNECTED:
            self._disconnected.set()

    def _next_reconnect_delay(self) -> None:
        self._reconnect_delay = min(
            self._reconnect_delay * self._reconnect_backoff,
            self._max_reconnect_delay,
        )

    async def _run(self) -> None:
        """Main WebSocket loop with reconnection."""
        while self._running:
            try:
                await self._connect_and_process()
            except Exception as e:
                logger.error(f"picows tick stream error: {e}")

            if self._state != ConnectionState.CLOSED:
                self._set_state(ConnectionState.DISCONNECTED)

            if self._running:
                logger.info(
                    f"Reconnecting tick WS in {self._reconnect_delay} seconds..."
                )
                await asyncio.sleep(self._reconnect_delay)
                self._next_reconnect_delay()

    async def _connect_and_process(self) -> None:
        """Connect to WebSocket and wait for disconnection."""
        self._disconnected.clear()
        self._set_state(ConnectionState.CONNECTING)

        loop = asyncio.get_running_loop()

        def listener_factory():
            self._listener = DerivTickListener(
                feed_symbols=self._feed_symbols,
                callbacks=self._callbacks,
                on_state=self._set_state,
                loop=loop,
                heartbeat_interval=self._heartbeat_interval,
            )
            return self._listener

        logger.info(f"Connecting tick WS to {self.url}")
        await ws_connect(listener_factory, self.url)

        # Wait until disconnected
        await self._disconnected.wait()
