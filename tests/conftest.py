"""
Pytest configuration and shared fixtures for backend tests.

This module provides test fixtures for:
- In-memory repositories (fast unit tests)
- Async SQLAlchemy sessions on a temporary SQLite file
- FastAPI test client with fake providers
- Sample provider payloads
"""

from decimal import Decimal
from typing import Generator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from forecast_api.application.ports.providers import GeolocationResult, WeatherReport
from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.config import Settings
from forecast_api.core.dependencies import get_geolocation_provider, get_weather_provider
from forecast_api.infrastructure.persistence.database_init import initialize_database
from forecast_api.infrastructure.persistence.db import create_db_engine, create_session_factory
from forecast_api.infrastructure.persistence.repositories.in_memory_repositories import (
    InMemoryForecastRepository,
    InMemoryLocationRepository,
    InMemoryStore,
)
from forecast_api.main import create_app

from factories import make_weather_report


# ==============================================================================
# SAMPLE DATA FIXTURES
# ==============================================================================

@pytest.fixture
def weather_report() -> WeatherReport:
    return make_weather_report()


@pytest.fixture
def geolocation_success() -> GeolocationResult:
    return GeolocationResult(
        status="success",
        latitude=Decimal("37.386"),
        longitude=Decimal("-122.0838"),
        city="Mountain View",
        country="United States",
    )


# ==============================================================================
# MOCK PROVIDER FIXTURES
# ==============================================================================

@pytest.fixture
def weather_provider(weather_report):
    """Weather provider double returning a 7-day report."""
    provider = AsyncMock()
    provider.get_forecast = AsyncMock(return_value=weather_report)
    return provider


@pytest.fixture
def geolocation_provider(geolocation_success):
    """Geolocation provider double resolving everything to Mountain View."""
    provider = AsyncMock()
    provider.locate = AsyncMock(return_value=geolocation_success)
    return provider


# ==============================================================================
# IN-MEMORY REPOSITORY FIXTURES
# ==============================================================================

@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def location_repo(store) -> InMemoryLocationRepository:
    return InMemoryLocationRepository(store)


@pytest.fixture
def forecast_repo(store) -> InMemoryForecastRepository:
    return InMemoryForecastRepository(store)


@pytest.fixture
def registry(location_repo) -> LocationRegistry:
    return LocationRegistry(location_repo)


# ==============================================================================
# DATABASE FIXTURES
# ==============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file, seeding disabled."""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        SEED_DEFAULT_LOCATIONS=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def db_session_factory(test_settings):
    """Initialized schema on a temporary SQLite file."""
    engine = create_db_engine(test_settings)
    session_factory = create_session_factory(engine)
    await initialize_database(engine, session_factory, test_settings)
    yield session_factory
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_session_factory):
    async with db_session_factory() as session:
        yield session


# ==============================================================================
# API CLIENT FIXTURES
# ==============================================================================

@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app, weather_provider, geolocation_provider) -> Generator[TestClient, None, None]:
    """FastAPI test client on a temporary database with fake providers."""
    app.dependency_overrides[get_weather_provider] = lambda: weather_provider
    app.dependency_overrides[get_geolocation_provider] = lambda: geolocation_provider

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==============================================================================
# MARKERS
# ==============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: Mark test as an integration test"
    )
