"""Sample provider payloads and reports shared by the tests."""
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from forecast_api.application.ports.providers import CurrentConditions, DailySeries, WeatherReport


def make_daily_series(days: int = 7, start: date = date(2024, 1, 1)) -> DailySeries:
    """Daily series with max = 20 + i, min = 10 + i, wind = 5 + i."""
    return DailySeries(
        dates=[(start + timedelta(days=i)).isoformat() for i in range(days)],
        max_temperatures=[Decimal(20 + i) for i in range(days)],
        min_temperatures=[Decimal(10 + i) for i in range(days)],
        weather_codes=[i % 4 for i in range(days)],
        max_wind_speeds=[Decimal(5 + i) for i in range(days)],
    )


def make_weather_report(
    days: int = 7,
    start: date = date(2024, 1, 1),
    current: Optional[CurrentConditions] = None,
) -> WeatherReport:
    return WeatherReport(
        latitude=Decimal("52.23"),
        longitude=Decimal("21.01"),
        timezone="Europe/Warsaw",
        daily=make_daily_series(days, start),
        current=current or CurrentConditions(
            temperature=Decimal("14.2"),
            wind_speed=Decimal("8.1"),
            weather_code=3,
        ),
    )


def open_meteo_payload(days: int = 7) -> dict:
    """Open-Meteo /v1/forecast response body."""
    return {
        "latitude": 52.25,
        "longitude": 21.0,
        "timezone": "Europe/Warsaw",
        "current_weather": {
            "temperature": 14.2,
            "windspeed": 8.1,
            "weathercode": 3,
            "time": "2024-01-01T12:00",
        },
        "daily": {
            "time": [(date(2024, 1, 1) + timedelta(days=i)).isoformat() for i in range(days)],
            "temperature_2m_max": [20.5 + i for i in range(days)],
            "temperature_2m_min": [10.5 + i for i in range(days)],
            "weathercode": [i % 4 for i in range(days)],
            "windspeed_10m_max": [5.0 + i for i in range(days)],
        },
    }


def forecast_dates(body: dict) -> List[str]:
    return [day["date"] for day in body["daily_forecasts"]]
