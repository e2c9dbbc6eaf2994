"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("picows").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

# Try to use uvloop for better performance (Unix only)
try:
    import uvloop
    uvloop.install()
    _UVLOOP_ENABLED = True
except ImportError:
    _UVLOOP_ENABLED = False

from pulse_app.api import router
from pulse_app.config import get_settings
from pulse_app.services import Services, build_services

logger = logging.getLogger(__name__)


def create_app(services: Services | None = None, start_stream: bool = True) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Pre-built services; built from settings at startup when None
        start_stream: Open the feed connection during startup

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting tick signal service...")
        logger.info(f"Event loop: {'uvloop' if _UVLOOP_ENABLED else 'asyncio'}")

        if services is None:
            settings = get_settings()
            logging.getLogger().setLevel(settings.log_level.upper())
            app.state.services = build_services(settings)
        else:
            app.state.services = services

        collector = app.state.services.collector
        if start_stream:
            await collector.start()

        try:
            yield
        finally:
            logger.info("Shutting down...")
            if start_stream:
                await collector.stop()
            app.state.services.store.clear()
            logger.info("Shutdown complete")

    app = FastAPI(
        title="tickpulse",
        description="Tick-driven trend signals for a fixed instrument universe",
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "tickpulse",
            "version": "0.1.0",
            "docs": "/docs",
            "event_loop": "uvloop" if _UVLOOP_ENABLED else "asyncio",
        }

    return app


app = create_app()


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "pulse_app.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
