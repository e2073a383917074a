"""Application startup and shutdown events."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from prometheus_client import Counter

from spec2bom.core.config import Settings
from spec2bom.core.logging import configure_logging

# Prometheus metrics
REQUESTS_TOTAL = Counter(
    "spec2bom_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "path"],
)

RESPONSES_TOTAL = Counter(
    "spec2bom_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

UPSTREAM_REQUESTS_TOTAL = Counter(
    "spec2bom_upstream_requests_total",
    "Total number of requests relayed to the upstream API",
    labelnames=["method", "status_code"],
)

logger: logging.Logger = logging.getLogger("spec2bom.core.events")


def create_start_app_handler(
    app: Any, settings: Settings
) -> Callable[[], Awaitable[None]]:
    """Create startup handler.

    Configures logging and opens the shared upstream HTTP client.

    Args:
        app: FastAPI application instance
        settings: Settings the application was built with

    Returns:
        Startup handler function
    """

    async def start_app() -> None:
        configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
        app.state.upstream = httpx.AsyncClient()
        if not settings.has_credential:
            logger.warning("VERTESIA_API_KEY is not set; proxied calls will be refused")
        logger.info("Upstream client ready for %s", settings.VERTESIA_API_BASE)

    return start_app


def create_stop_app_handler(app: Any) -> Callable[[], Awaitable[None]]:
    """Create shutdown handler.

    Args:
        app: FastAPI application instance

    Returns:
        Shutdown handler function
    """

    async def stop_app() -> None:
        client: httpx.AsyncClient | None = getattr(app.state, "upstream", None)
        if client is not None:
            await client.aclose()
            app.state.upstream = None
        logger.info("Upstream client closed")

    return stop_app


def create_lifespan(
    settings: Settings,
) -> Callable[[Any], Any]:
    """Wrap the startup and shutdown handlers into a lifespan context."""

    @asynccontextmanager
    async def lifespan(app: Any) -> AsyncIterator[None]:
        await create_start_app_handler(app, settings)()
        try:
            yield
        finally:
            await create_stop_app_handler(app)()

    return lifespan
