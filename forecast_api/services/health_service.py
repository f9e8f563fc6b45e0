"""Health check service for monitoring system components."""
import asyncio
import logging
from typing import Any, Dict, List
from enum import Enum

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker

from forecast_api.config import Settings
from forecast_api.infrastructure.persistence.database_init import check_database_health

logger = logging.getLogger(__name__)

DATABASE_KEY = "Database"
OPEN_METEO_KEY = "Open-Meteo API"
IP_API_KEY = "IP-Geolocation API"


class HealthStatus(str, Enum):
    """Health status values."""
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"


class HealthCheckService:
    """Service for checking health of the store and both upstream providers."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        client: httpx.AsyncClient,
        settings: Settings,
    ):
        self.session_factory = session_factory
        self.client = client
        self.timeout = settings.HEALTH_CHECK_TIMEOUT_SECONDS
        self.endpoints = {
            OPEN_METEO_KEY: settings.OPEN_METEO_HEALTH_CHECK_URL,
            IP_API_KEY: settings.IP_API_HEALTH_CHECK_URL,
        }

    async def check_database(self) -> HealthStatus:
        """Check database connectivity with a trivial query."""
        try:
            await asyncio.wait_for(check_database_health(self.session_factory), timeout=self.timeout)
            return HealthStatus.HEALTHY
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return HealthStatus.UNHEALTHY

    async def check_endpoint(self, key: str, url: str) -> HealthStatus:
        """Check that an upstream endpoint answers with a 2xx status."""
        try:
            response = await self.client.get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"{key} health check failed: {e}")
            return HealthStatus.UNHEALTHY

        if response.is_success:
            return HealthStatus.HEALTHY
        logger.error(f"{key} health check failed: HTTP {response.status_code}")
        return HealthStatus.UNHEALTHY

    async def get_overall_health(self) -> Dict[str, Any]:
        """Run all checks concurrently.

        Returns:
            {"status": ..., "details": [{"key": ..., "status": ...}, ...]}
        """
        keys: List[str] = [DATABASE_KEY, *self.endpoints]
        statuses = await asyncio.gather(
            self.check_database(),
            *(self.check_endpoint(key, url) for key, url in self.endpoints.items()),
        )

        overall = (
            HealthStatus.HEALTHY
            if all(s == HealthStatus.HEALTHY for s in statuses)
            else HealthStatus.UNHEALTHY
        )
        return {
            "status": overall,
            "details": [{"key": key, "status": s} for key, s in zip(keys, statuses)],
        }
