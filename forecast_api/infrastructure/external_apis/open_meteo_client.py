"""Open-Meteo API client for daily forecasts and current conditions."""
import logging
from typing import Any, Dict

import httpx

from forecast_api.application.ports.providers import CurrentConditions, DailySeries, WeatherReport
from forecast_api.constants import OPEN_METEO_DAILY_FIELDS, SOURCE_OPEN_METEO
from forecast_api.domain.exceptions import UpstreamContractViolationError
from forecast_api.domain.value_objects.coordinates import Coordinates
from forecast_api.infrastructure.external_apis import payload as p
from forecast_api.infrastructure.external_apis.resilience import ResilientCaller

logger = logging.getLogger(__name__)


class OpenMeteoClient:
    """Client for the Open-Meteo forecast endpoint (no API key needed)."""

    BASE_URL = "https://api.open-meteo.com"

    def __init__(
        self,
        client: httpx.AsyncClient,
        caller: ResilientCaller,
        base_url: str = BASE_URL,
        forecast_days: int = 7,
    ):
        self.client = client
        self.caller = caller
        self.base_url = base_url.rstrip("/")
        self.forecast_days = forecast_days

    def build_params(self, coordinates: Coordinates) -> Dict[str, Any]:
        return {
            "latitude": str(coordinates.latitude),
            "longitude": str(coordinates.longitude),
            "daily": ",".join(OPEN_METEO_DAILY_FIELDS),
            "current_weather": "true",
            "timezone": "auto",
            "forecast_days": self.forecast_days,
        }

    async def get_forecast(self, coordinates: Coordinates) -> WeatherReport:
        """Fetch the daily series and current conditions for coordinates.

        Raises:
            UpstreamUnavailableError / UpstreamTimeoutError: transport-level failure
            UpstreamContractViolationError: payload missing required fields
        """
        url = f"{self.base_url}/v1/forecast"
        params = self.build_params(coordinates)
        logger.info(f"Fetching forecast from Open-Meteo for ({coordinates.latitude}, {coordinates.longitude})")

        response = await self.caller.call(lambda: self.client.get(url, params=params))
        report = parse_forecast(p.decode_json(response, SOURCE_OPEN_METEO))

        logger.info(f"Open-Meteo returned {len(report.daily.dates)} daily entries")
        return report


def check_daily_ranges(series: DailySeries):
    """Reject readings no real forecast produces.

    Inverted daily bounds, negative wind speeds and negative weather codes
    are the provider's fault and must not reach the domain as caller errors.
    """
    source = SOURCE_OPEN_METEO
    for index, (maximum, minimum) in enumerate(zip(series.max_temperatures, series.min_temperatures)):
        if maximum < minimum:
            raise UpstreamContractViolationError(
                f"{source} day {index} has max {maximum} below min {minimum}", provider=source
            )
    for index, speed in enumerate(series.max_wind_speeds):
        if speed < 0:
            raise UpstreamContractViolationError(
                f"{source} day {index} has negative wind speed {speed}", provider=source
            )
    for index, code in enumerate(series.weather_codes):
        if code < 0:
            raise UpstreamContractViolationError(
                f"{source} day {index} has negative weather code {code}", provider=source
            )


def parse_forecast(data: Dict[str, Any]) -> WeatherReport:
    """Map an Open-Meteo /v1/forecast payload to a WeatherReport."""
    source = SOURCE_OPEN_METEO
    daily = p.require(data, "daily", source)
    if not isinstance(daily, dict):
        raise UpstreamContractViolationError(f"{source} 'daily' must be an object", provider=source)

    series = DailySeries(
        dates=p.str_list(daily, "time", source),
        max_temperatures=p.decimal_list(daily, "temperature_2m_max", source),
        min_temperatures=p.decimal_list(daily, "temperature_2m_min", source),
        weather_codes=p.int_list(daily, "weathercode", source),
        max_wind_speeds=p.decimal_list(daily, "windspeed_10m_max", source),
    )
    check_daily_ranges(series)

    current = None
    current_data = data.get("current_weather")
    if isinstance(current_data, dict):
        current = CurrentConditions(
            temperature=p.as_decimal(p.require(current_data, "temperature", source), "temperature", source),
            wind_speed=p.as_decimal(p.require(current_data, "windspeed", source), "windspeed", source),
            weather_code=p.as_int(p.require(current_data, "weathercode", source), "weathercode", source),
            time=current_data.get("time"),
        )

    return WeatherReport(
        latitude=p.as_decimal(p.require(data, "latitude", source), "latitude", source),
        longitude=p.as_decimal(p.require(data, "longitude", source), "longitude", source),
        timezone=data.get("timezone"),
        daily=series,
        current=current,
    )
