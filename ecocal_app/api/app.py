"""HTTP surface: the cache read endpoint and the scheduled refresh trigger."""

from typing import Optional

import structlog
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from ..cache.shared import SharedCache, create_shared_cache
from ..config.defaults import DefaultConfig
from ..config.loader import ConfigLoader
from ..errors import DataQualityError, OriginFetchError, SharedCacheError
from ..logging.config import configure_logging
from ..origin.base import OriginFetcher
from ..origin.fred import FredOriginFetcher
from ..origin.retry import RetryingOriginFetcher
from ..refresh.background import BackgroundRefresher
from ..refresh.endpoint import CacheReadEndpoint

logger = structlog.get_logger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def build_origin_fetcher(config: DefaultConfig) -> OriginFetcher:
    """FRED fetcher wrapped in retry/backoff. Fails fast without an API key."""
    return RetryingOriginFetcher(FredOriginFetcher(config.origin), config.retry)


def create_app(
    config: DefaultConfig,
    fetcher: Optional[OriginFetcher] = None,
    shared_cache: Optional[SharedCache] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Typed configuration
        fetcher: Origin fetcher override (defaults to FRED with retries)
        shared_cache: Shared cache override (defaults to the configured backend)

    Raises:
        ConfigurationError: if required settings such as the API key are missing
    """
    fetcher = fetcher or build_origin_fetcher(config)
    shared_cache = shared_cache or create_shared_cache(config.shared_cache)

    endpoint = CacheReadEndpoint(
        shared_cache,
        fetcher,
        cache_key=config.shared_cache.key,
        max_workers=config.origin.max_workers,
    )
    refresher = BackgroundRefresher(
        fetcher,
        shared_cache,
        cache_key=config.shared_cache.key,
        max_workers=config.origin.max_workers,
    )

    app = FastAPI(title="Economic Calendar Cache API", version="1.0.0")
    app.state.endpoint = endpoint
    app.state.refresher = refresher

    @app.get("/api/fred")
    def read_calendar(series_id: Optional[str] = Query(default=None, alias="seriesId")):
        try:
            body = endpoint.handle(series_id)
        except (SharedCacheError, OriginFetchError, DataQualityError) as e:
            logger.error("Cache read failed", error=str(e), series_id=series_id)
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to read FRED cache", "detail": str(e)},
            )
        return JSONResponse(content=body, headers=NO_STORE)

    @app.api_route("/api/cron/fred", methods=["GET", "POST"])
    def run_refresh():
        try:
            report = refresher.run()
        except SharedCacheError as e:
            logger.error("Scheduled refresh failed", error=str(e))
            return JSONResponse(status_code=500, content={"error": str(e)})
        return {"ok": True, "series": report.indicator_count, "failed": report.failed_indicators}

    return app


def create_app_from_env() -> FastAPI:
    """
    Application factory for ASGI servers.

    Usage: ``uvicorn ecocal_app.api.app:create_app_from_env --factory``
    """
    config = ConfigLoader.create().load()
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)
    return create_app(config)
