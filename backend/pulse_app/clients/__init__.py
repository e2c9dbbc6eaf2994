"""Feed clients."""

from pulse_app.clients.deriv_ws_ticks import (
    ConnectionState,
    DerivTickListener,
    DerivTickWebSocket,
    TickCallback,
)

__all__ = [
    "ConnectionState",
    "DerivTickListener",
    "DerivTickWebSocket",
    "TickCallback",
]
