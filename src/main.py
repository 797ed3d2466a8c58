"""Stageside FastAPI application entry point.

Builds the shared HTTP client, cache and ticketing sources once at
startup, stores them on ``app.state`` for the routes, and closes the
client on shutdown.  Configuration comes from ``.env`` and
``config/config.yaml``; logging is configured before anything else runs.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.concert_source import IConcertSource
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.ticketing import BandsintownProvider, SeatGeekProvider, TicketmasterProvider
from src.services.concert_aggregator import ConcertAggregationService
from src.utils.logging import configure_logging

_VERSION = "0.1.0"
_USER_AGENT = f"stageside/{_VERSION}"


def _build_sources(app_settings: Settings, http_client: httpx.AsyncClient) -> list[IConcertSource]:
    """Instantiate every ticketing adapter; unconfigured ones report unavailable."""
    return [
        TicketmasterProvider(settings=app_settings, http_client=http_client),
        SeatGeekProvider(settings=app_settings, http_client=http_client),
        BandsintownProvider(settings=app_settings, http_client=http_client),
    ]


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct the shared components stored on ``app.state``."""
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.source_timeout_seconds),
        headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
    )
    cache = MemoryCacheProvider(ttl=app_settings.source_cache_ttl)
    sources = _build_sources(app_settings, http_client)
    concert_service = ConcertAggregationService(
        sources=sources, cache=cache, cache_ttl=app_settings.source_cache_ttl
    )
    return {
        "http_client": http_client,
        "cache": cache,
        "concert_service": concert_service,
    }


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or Settings()
    config = load_config(settings=app_settings)
    configure_logging(log_level=app_settings.log_level, app_env=app_settings.app_env)
    logger: structlog.BoundLogger = structlog.get_logger(logger_name=__name__)

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        components = _build_all(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)

        logger.info(
            "app_startup",
            version=_VERSION,
            environment=app_settings.app_env,
            sources=app_settings.get_enabled_sources(),
        )

        yield

        await components["http_client"].aclose()
        logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="Stageside API",
        version=_VERSION,
        description=(
            "Match concerts and festival lineups against a listener's taste "
            "across streaming services, and plan conflict-free festival days "
            "for one person or a whole group."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings
    application.state.config = config

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("app", {}).get("cors_origins"))

    application.include_router(api_router)
    return application


def main() -> None:
    app_settings = Settings()
    uvicorn.run(
        "src.main:create_app",
        factory=True,
        host=app_settings.app_host,
        port=app_settings.app_port,
        reload=(app_settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
