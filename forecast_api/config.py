"""Application configuration using Pydantic Settings.

This module centralizes all configuration values that may vary between environments.
Values can be overridden via environment variables or .env file.
"""
from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # ===== Database =====
    DATABASE_URL: str = "sqlite+aiosqlite:///./forecast_api.db"
    DATABASE_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT_MS: int = 5000
    SEED_DEFAULT_LOCATIONS: bool = True

    # ===== Forecast Cache =====
    FORECAST_FRESHNESS_MINUTES: int = 60
    FORECAST_DAYS: int = 7

    # ===== External Services =====
    OPEN_METEO_BASE_URL: str = "https://api.open-meteo.com"
    OPEN_METEO_HEALTH_CHECK_URL: str = "https://api.open-meteo.com/v1/forecast?latitude=0&longitude=0"
    IP_API_BASE_URL: str = "http://ip-api.com"
    IP_API_HEALTH_CHECK_URL: str = "http://ip-api.com/json/8.8.8.8"
    HEALTH_CHECK_TIMEOUT_SECONDS: float = 5.0

    # ===== Retry & Timeouts =====
    HTTP_ATTEMPT_TIMEOUT_SECONDS: float = 5.0
    HTTP_TOTAL_TIMEOUT_SECONDS: float = 15.0
    HTTP_RETRY_MAX_ATTEMPTS: int = 3
    HTTP_RETRY_BASE_DELAY_SECONDS: float = 1.0

    # ===== Circuit Breaker =====
    CIRCUIT_BREAKER_FAILURE_RATIO: float = 0.5
    CIRCUIT_BREAKER_MINIMUM_THROUGHPUT: int = 10
    CIRCUIT_BREAKER_SAMPLING_SECONDS: float = 30.0
    CIRCUIT_BREAKER_BREAK_SECONDS: float = 30.0

    # ===== Connection Pooling =====
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_MAX_KEEPALIVE: int = 50

    # ===== API =====
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ===== Logging =====
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        # Allow extra fields from .env that aren't defined here
        extra = "ignore"

    @property
    def forecast_freshness_window(self) -> timedelta:
        return timedelta(minutes=self.FORECAST_FRESHNESS_MINUTES)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure singleton pattern - settings are loaded once.
    """
    return Settings()
