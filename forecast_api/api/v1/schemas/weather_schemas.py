"""Pydantic schemas for weather endpoints - forecast response contract."""
from datetime import date as Date, datetime
from typing import List, Optional

from pydantic import BaseModel

from forecast_api.application.dto.forecast_dto import ForecastResult
from forecast_api.application.ports.providers import CurrentConditions
from forecast_api.domain.entities.forecast_entry import ForecastEntry


class CurrentWeatherSchema(BaseModel):
    """Current conditions, present only on a fresh upstream fetch."""
    temperature: float
    wind_speed: float
    weather_code: int

    @classmethod
    def from_conditions(cls, current: CurrentConditions) -> "CurrentWeatherSchema":
        return cls(
            temperature=float(current.temperature),
            wind_speed=float(current.wind_speed),
            weather_code=current.weather_code,
        )


class DailyForecastSchema(BaseModel):
    """One forecast day."""
    date: Date
    temperature: float
    max_temperature: float
    min_temperature: float
    wind_speed: float
    weather_code: int

    @classmethod
    def from_entry(cls, entry: ForecastEntry) -> "DailyForecastSchema":
        return cls(
            date=entry.forecast_date,
            temperature=float(entry.temperature.current),
            max_temperature=float(entry.temperature.maximum),
            min_temperature=float(entry.temperature.minimum),
            wind_speed=float(entry.wind_speed.value),
            weather_code=entry.weather_code,
        )


class WeatherForecastResponse(BaseModel):
    location_id: int
    latitude: float
    longitude: float
    name: Optional[str] = None
    current_weather: Optional[CurrentWeatherSchema] = None
    daily_forecasts: List[DailyForecastSchema]
    retrieved_at: datetime
    from_cache: bool

    @classmethod
    def from_result(cls, result: ForecastResult) -> "WeatherForecastResponse":
        location = result.location
        return cls(
            location_id=location.id,
            latitude=float(location.coordinates.latitude),
            longitude=float(location.coordinates.longitude),
            name=location.name,
            current_weather=(
                CurrentWeatherSchema.from_conditions(result.current) if result.current else None
            ),
            daily_forecasts=[DailyForecastSchema.from_entry(e) for e in result.entries],
            retrieved_at=result.retrieved_at,
            from_cache=result.from_cache,
        )
