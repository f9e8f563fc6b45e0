"""Repository interfaces."""
from forecast_api.domain.repositories.forecast_repository import ForecastRepository
from forecast_api.domain.repositories.location_repository import LocationRepository

__all__ = [
    "ForecastRepository",
    "LocationRepository",
]
