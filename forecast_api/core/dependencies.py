"""Dependency injection for FastAPI routes.
Follows Dependency Inversion Principle - routes depend on abstractions."""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from forecast_api.application.ports.providers import GeolocationProvider, WeatherProvider
from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.application.use_cases.get_forecast import GetForecastUseCase
from forecast_api.config import Settings, get_settings
from forecast_api.domain.repositories.forecast_repository import ForecastRepository
from forecast_api.domain.repositories.location_repository import LocationRepository
from forecast_api.domain.services.forecast_cache_policy import ForecastCachePolicy
from forecast_api.infrastructure.persistence.db import get_db
from forecast_api.infrastructure.persistence.repositories.sqlalchemy_forecast_repository import (
    SQLAlchemyForecastRepository,
)
from forecast_api.infrastructure.persistence.repositories.sqlalchemy_location_repository import (
    SQLAlchemyLocationRepository,
)
from forecast_api.services.health_service import HealthCheckService


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_location_repository(session: AsyncSession = Depends(get_db)) -> LocationRepository:
    return SQLAlchemyLocationRepository(session)


def get_forecast_repository(session: AsyncSession = Depends(get_db)) -> ForecastRepository:
    """Shares the request session with the location repository."""
    return SQLAlchemyForecastRepository(session)


def get_location_registry(
    locations: LocationRepository = Depends(get_location_repository),
) -> LocationRegistry:
    return LocationRegistry(locations)


def get_weather_provider(request: Request) -> WeatherProvider:
    return request.app.state.weather_provider


def get_geolocation_provider(request: Request) -> GeolocationProvider:
    return request.app.state.geolocation_provider


def get_cache_policy(settings: Settings = Depends(get_app_settings)) -> ForecastCachePolicy:
    return ForecastCachePolicy(settings.forecast_freshness_window)


def get_forecast_use_case(
    locations: LocationRepository = Depends(get_location_repository),
    forecasts: ForecastRepository = Depends(get_forecast_repository),
    registry: LocationRegistry = Depends(get_location_registry),
    weather_provider: WeatherProvider = Depends(get_weather_provider),
    geolocation_provider: GeolocationProvider = Depends(get_geolocation_provider),
    cache_policy: ForecastCachePolicy = Depends(get_cache_policy),
) -> GetForecastUseCase:
    """Get forecast use case wired to the request's repositories and the shared providers."""
    return GetForecastUseCase(
        location_repository=locations,
        forecast_repository=forecasts,
        registry=registry,
        weather_provider=weather_provider,
        geolocation_provider=geolocation_provider,
        cache_policy=cache_policy,
    )


def get_health_service(request: Request) -> HealthCheckService:
    return request.app.state.health_service
