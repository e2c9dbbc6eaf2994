"""Business services."""

from pulse_app.services.commands import CommandHandler, build_greeting
from pulse_app.services.container import Services, build_services, load_catalog
from pulse_app.services.query_service import (
    MarketQueryService,
    format_analysis,
    format_price,
)
from pulse_app.services.tick_collector import TickCollector

__all__ = [
    "CommandHandler",
    "build_greeting",
    "MarketQueryService",
    "format_analysis",
    "format_price",
    "TickCollector",
    "Services",
    "build_services",
    "load_catalog",
]
