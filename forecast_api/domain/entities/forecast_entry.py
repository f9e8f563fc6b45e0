"""Forecast entry domain entity - one day's forecast for one location."""
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from forecast_api.domain.exceptions import OutOfRangeError, ValidationError
from forecast_api.domain.value_objects.temperature import Temperature
from forecast_api.domain.value_objects.wind_speed import WindSpeed
from forecast_api.utils.time_utils import utc_now


@dataclass(frozen=True)
class ForecastEntry:
    """Immutable daily forecast owned by a Location.

    Entries are never updated in place. A stale set is deleted and a new
    set is created in its place.
    """
    location_id: int
    forecast_date: date
    temperature: Temperature
    wind_speed: WindSpeed
    weather_code: int
    retrieved_at: datetime
    id: Optional[int] = None

    @classmethod
    def create(
        cls,
        location_id: int,
        forecast_date: date,
        temperature: Temperature,
        wind_speed: WindSpeed,
        weather_code: int,
        retrieved_at: Optional[datetime] = None,
    ) -> "ForecastEntry":
        """Create a new entry stamped with its retrieval time."""
        if location_id is None or location_id <= 0:
            raise OutOfRangeError(
                f"Location ID must be positive, got {location_id}",
                field="location_id",
                value=location_id,
            )
        if weather_code < 0:
            raise OutOfRangeError(
                f"Weather code must be non-negative, got {weather_code}",
                field="weather_code",
                value=weather_code,
            )
        if isinstance(forecast_date, datetime) or not isinstance(forecast_date, date):
            raise ValidationError(
                f"Forecast date must be a calendar date, got {forecast_date!r}",
                field="forecast_date",
                value=forecast_date,
            )
        return cls(
            location_id=location_id,
            forecast_date=forecast_date,
            temperature=temperature,
            wind_speed=wind_speed,
            weather_code=weather_code,
            retrieved_at=retrieved_at or utc_now(),
        )

    def with_id(self, entry_id: int) -> "ForecastEntry":
        """Copy of this entry carrying the id assigned by storage."""
        return replace(self, id=entry_id)
