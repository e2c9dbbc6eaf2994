"""Tests for the Deriv tick stream client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest
from picows import WSMsgType

from pulse_app.clients import ConnectionState, DerivTickListener, DerivTickWebSocket


def _frame(payload) -> MagicMock:
    frame = MagicMock()
    frame.msg_type = WSMsgType.TEXT
    raw = payload if isinstance(payload, bytes) else orjson.dumps(payload)
    frame.get_payload_as_bytes.return_value = raw
    return frame


def _tick_frame(symbol: str = "frxEURUSD", **prices) -> MagicMock:
    return _frame({"msg_type": "tick", "tick": {"symbol": symbol, **prices}})


def _sent_messages(transport: MagicMock) -> list[dict]:
    return [orjson.loads(c.args[1]) for c in transport.send.call_args_list]


def _mock_loop() -> MagicMock:
    """Loop stand-in whose create_task closes the coroutine instead of running it."""
    def create_task(coro):
        coro.close()
        return MagicMock()

    loop = MagicMock()
    loop.create_task.side_effect = create_task
    return loop


class TestListenerFrames:
    """Inbound frame handling."""

    @pytest.fixture
    def ticks(self):
        return []

    @pytest.fixture
    def states(self):
        return []

    @pytest.fixture
    def listener(self, ticks, states):
        return DerivTickListener(
            feed_symbols=["frxEURUSD"],
            callbacks=[ticks.append],
            on_state=states.append,
            loop=_mock_loop(),
        )

    def test_tick_delivered_with_mid_price(self, listener, ticks):
        listener.on_ws_frame(MagicMock(), _tick_frame(bid=1.1, ask=1.2))

        assert len(ticks) == 1
        assert ticks[0].feed_symbol == "frxEURUSD"
        assert ticks[0].mid_price == pytest.approx(1.15)

    def test_streaming_reported_once(self, listener, states):
        for _ in range(3):
            listener.on_ws_frame(MagicMock(), _tick_frame(quote=1.1))

        assert states == [ConnectionState.STREAMING]

    @pytest.mark.parametrize(
        "payload",
        [
            b"not json",
            [1, 2, 3],
            {"msg_type": "tick", "tick": {"symbol": "frxEURUSD"}},
            {"msg_type": "tick", "tick": None},
            {"msg_type": "tick", "error": {"code": "MarketIsClosed", "message": "closed"}},
        ],
    )
    def test_bad_frames_dropped(self, listener, ticks, payload):
        listener.on_ws_frame(MagicMock(), _frame(payload))

        assert ticks == []

    def test_non_tick_messages_ignored(self, listener, ticks):
        listener.on_ws_frame(MagicMock(), _frame({"msg_type": "ping", "ping": "pong"}))

        assert ticks == []

    def test_stream_continues_after_bad_frame(self, listener, ticks):
        listener.on_ws_frame(MagicMock(), _frame(b"{broken"))
        listener.on_ws_frame(MagicMock(), _tick_frame(quote=2.0))

        assert [t.mid_price for t in ticks] == [2.0]

    def test_failing_callback_does_not_stop_others(self, ticks, states):
        failing = MagicMock(side_effect=RuntimeError("boom"))
        listener = DerivTickListener(
            feed_symbols=[],
            callbacks=[failing, ticks.append],
            on_state=states.append,
            loop=_mock_loop(),
        )

        listener.on_ws_frame(MagicMock(), _tick_frame(quote=1.0))

        failing.assert_called_once()
        assert len(ticks) == 1

    def test_ping_answered_with_pong(self, listener):
        transport = MagicMock()
        frame = MagicMock()
        frame.msg_type = WSMsgType.PING
        frame.get_payload_as_bytes.return_value = b"hello"

        listener.on_ws_frame(transport, frame)

        transport.send_pong.assert_called_once_with(b"hello")


class TestListenerConnection:
    """Connection lifecycle of a single listener."""

    @pytest.mark.asyncio
    async def test_connect_subscribes_every_symbol(self):
        states = []
        listener = DerivTickListener(
            feed_symbols=["frxEURUSD", "1HZ75V", "cryBTCUSD"],
            callbacks=[],
            on_state=states.append,
            loop=asyncio.get_running_loop(),
        )
        transport = MagicMock()

        listener.on_ws_connected(transport)

        assert _sent_messages(transport) == [
            {"ticks": "frxEURUSD", "subscribe": 1},
            {"ticks": "1HZ75V", "subscribe": 1},
            {"ticks": "cryBTCUSD", "subscribe": 1},
        ]
        assert states == [ConnectionState.CONNECTED, ConnectionState.SUBSCRIBING]

        listener.on_ws_disconnected(transport)
        assert states[-1] == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_heartbeat_sends_ping(self):
        listener = DerivTickListener(
            feed_symbols=[],
            callbacks=[],
            on_state=lambda state: None,
            loop=asyncio.get_running_loop(),
            heartbeat_interval=0.01,
        )
        transport = MagicMock()

        listener.on_ws_connected(transport)
        await asyncio.sleep(0.05)
        listener.on_ws_disconnected(transport)

        assert {"ping": 1} in _sent_messages(transport)

    @pytest.mark.asyncio
    async def test_heartbeat_cancelled_on_disconnect(self):
        listener = DerivTickListener(
            feed_symbols=[],
            callbacks=[],
            on_state=lambda state: None,
            loop=asyncio.get_running_loop(),
            heartbeat_interval=10.0,
        )
        transport = MagicMock()
        listener.on_ws_connected(transport)
        task = listener._heartbeat_task

        listener.on_ws_disconnected(transport)
        await asyncio.sleep(0.01)

        assert task.cancelled()
        assert listener._heartbeat_task is None

    def test_heartbeat_scheduled_on_loop(self):
        loop = _mock_loop()
        listener = DerivTickListener(
            feed_symbols=[],
            callbacks=[],
            on_state=lambda state: None,
            loop=loop,
        )

        listener.on_ws_connected(MagicMock())

        coro = loop.create_task.call_args.args[0]
        assert coro.__qualname__ == "DerivTickListener._heartbeat"
        assert coro.cr_frame is None

    def test_heartbeat_cancelled_exactly_once(self):
        listener = DerivTickListener(
            feed_symbols=[],
            callbacks=[],
            on_state=lambda state: None,
            loop=_mock_loop(),
        )
        transport = MagicMock()
        listener.on_ws_connected(transport)
        task = MagicMock()
        listener._heartbeat_task = task

        listener.on_ws_disconnected(transport)
        listener.disconnect()

        task.cancel.assert_called_once()


class TestReconnectDelay:
    """Reconnect delay policy."""

    def test_fixed_delay_by_default(self):
        client = DerivTickWebSocket(["X"], "wss://example")
        delays = []
        for _ in range(4):
            client._next_reconnect_delay()
            delays.append(client.reconnect_delay)

        assert delays == [5.0, 5.0, 5.0, 5.0]

    def test_exponential_backoff_is_capped(self):
        client = DerivTickWebSocket(
            ["X"], "wss://example",
            reconnect_delay=5.0, reconnect_backoff=2.0, max_reconnect_delay=60.0,
        )
        delays = []
        for _ in range(5):
            client._next_reconnect_delay()
            delays.append(client.reconnect_delay)

        assert delays == [10.0, 20.0, 40.0, 60.0, 60.0]

    def test_delay_reset_after_connect(self):
        client = DerivTickWebSocket(
            ["X"], "wss://example", reconnect_delay=5.0, reconnect_backoff=2.0,
        )
        client._next_reconnect_delay()
        client._next_reconnect_delay()

        client._set_state(ConnectionState.CONNECTED)

        assert client.reconnect_delay == 5.0


class TestClientLifecycle:
    """Connect, reconnect and stop."""

    def test_duplicate_callbacks_ignored(self):
        client = DerivTickWebSocket(["X"], "wss://example")
        callback = MagicMock()
        client.on_tick(callback)
        client.on_tick(callback)

        assert client._callbacks == [callback]

    @pytest.mark.asyncio
    async def test_reconnects_and_resubscribes(self):
        transports = []

        async def fake_connect(listener_factory, url):
            listener = listener_factory()
            transport = MagicMock()
            transports.append(transport)
            listener.on_ws_connected(transport)
            return transport, listener

        client = DerivTickWebSocket(
            ["frxEURUSD", "1HZ75V"], "wss://example", reconnect_delay=0.01,
        )

        with patch("pulse_app.clients.deriv_ws_ticks.ws_connect", new=fake_connect):
            await client.start()
            await asyncio.sleep(0.02)
            assert client.state == ConnectionState.SUBSCRIBING

            # Server drops the connection
            client._listener.on_ws_disconnected(transports[0])
            await asyncio.sleep(0.05)

            assert len(transports) >= 2
            assert {"ticks": "1HZ75V", "subscribe": 1} in _sent_messages(transports[1])

            await client.stop()

        assert client.state == ConnectionState.CLOSED
        transports[-1].send_close.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_connects_are_retried(self):
        connect = AsyncMock(side_effect=OSError("connection refused"))
        client = DerivTickWebSocket(["X"], "wss://example", reconnect_delay=0.01)

        with patch("pulse_app.clients.deriv_ws_ticks.ws_connect", new=connect):
            await client.start()
            await asyncio.sleep(0.1)
            await client.stop()

        assert connect.await_count >= 2
        assert client.state == ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_no_state_changes_after_stop(self):
        client = DerivTickWebSocket(["X"], "wss://example")
        await client.stop()

        client._set_state(ConnectionState.CONNECTING)

        assert client.state == ConnectionState.CLOSED
