"""Shared HTTP client with connection pooling for better performance."""
import logging

import httpx

from forecast_api.config import Settings

logger = logging.getLogger(__name__)


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the process-wide HTTP client shared by all providers.

    Connection pool settings from environment:
    - Max connections: HTTP_MAX_CONNECTIONS (default: 100)
    - Max keepalive: HTTP_MAX_KEEPALIVE (default: 50)
    - Per-attempt timeout: HTTP_ATTEMPT_TIMEOUT_SECONDS (default: 5)

    The caller owns the client and must close it on shutdown.
    """
    limits = httpx.Limits(
        max_connections=settings.HTTP_MAX_CONNECTIONS,
        max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE,
    )
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.HTTP_ATTEMPT_TIMEOUT_SECONDS),
        limits=limits,
    )
    logger.info(
        f"HTTP client initialized: max_conn={settings.HTTP_MAX_CONNECTIONS}, "
        f"keepalive={settings.HTTP_MAX_KEEPALIVE}, timeout={settings.HTTP_ATTEMPT_TIMEOUT_SECONDS}s"
    )
    return client
