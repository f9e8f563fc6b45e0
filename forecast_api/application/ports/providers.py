"""Provider interfaces for external data sources.

Each provider returns data already shaped to our domain needs;
implementations can be swapped without changing application logic.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Protocol

from forecast_api.constants import GEOLOCATION_STATUS_SUCCESS
from forecast_api.domain.value_objects.coordinates import Coordinates


@dataclass(frozen=True)
class CurrentConditions:
    """Current weather as reported alongside the daily series."""
    temperature: Decimal
    wind_speed: Decimal
    weather_code: int
    time: Optional[str] = None


@dataclass(frozen=True)
class DailySeries:
    """Parallel per-metric sequences, index-aligned by day."""
    dates: List[str] = field(default_factory=list)
    max_temperatures: List[Decimal] = field(default_factory=list)
    min_temperatures: List[Decimal] = field(default_factory=list)
    weather_codes: List[int] = field(default_factory=list)
    max_wind_speeds: List[Decimal] = field(default_factory=list)

    def lengths(self) -> dict:
        return {
            "time": len(self.dates),
            "temperature_2m_max": len(self.max_temperatures),
            "temperature_2m_min": len(self.min_temperatures),
            "weathercode": len(self.weather_codes),
            "windspeed_10m_max": len(self.max_wind_speeds),
        }


@dataclass(frozen=True)
class WeatherReport:
    latitude: Decimal
    longitude: Decimal
    timezone: Optional[str]
    daily: DailySeries
    current: Optional[CurrentConditions] = None


@dataclass(frozen=True)
class GeolocationResult:
    status: str
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    city: Optional[str] = None
    country: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == GEOLOCATION_STATUS_SUCCESS


class WeatherProvider(Protocol):
    async def get_forecast(self, coordinates: Coordinates) -> WeatherReport:
        """Return current conditions plus the daily series for coordinates."""


class GeolocationProvider(Protocol):
    async def locate(self, target: str) -> GeolocationResult:
        """Resolve an IP address or hostname to a position."""
