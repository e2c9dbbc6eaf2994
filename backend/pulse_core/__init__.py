"""Core shared logic for price history, indicators and signals.

This package contains pure business logic with no I/O dependencies
(no network, no storage). The stream client and the HTTP surface in
pulse_app/ feed it ticks and query it for signals.
"""
