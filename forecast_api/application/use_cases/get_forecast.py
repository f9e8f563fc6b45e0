"""Use case: get the forecast for a location, from cache or upstream.

Both entry points share one workflow:

    resolve location -> mark usage -> evaluate cache
        fresh: persist usage, return stored entries (from_cache=True)
        stale: fetch upstream, replace entries atomically (from_cache=False)

They differ only in how the location is resolved: by stored id, or by
geolocating an IP address / hostname and registering the result.
"""
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Iterable, List, Optional

from forecast_api.application.dto.forecast_dto import ForecastResult
from forecast_api.application.ports.providers import DailySeries, GeolocationProvider, WeatherProvider
from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location
from forecast_api.domain.exceptions import (
    InvalidTargetError,
    LocationNotFoundError,
    UpstreamContractViolationError,
)
from forecast_api.domain.repositories.forecast_repository import ForecastRepository
from forecast_api.domain.repositories.location_repository import LocationRepository
from forecast_api.domain.services.forecast_cache_policy import ForecastCachePolicy
from forecast_api.domain.value_objects.coordinates import Coordinates
from forecast_api.domain.value_objects.temperature import Temperature
from forecast_api.domain.value_objects.wind_speed import WindSpeed
from forecast_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

LocationResolver = Callable[[], Awaitable[Location]]


def sort_by_date(entries: Iterable[ForecastEntry]) -> List[ForecastEntry]:
    return sorted(entries, key=lambda entry: entry.forecast_date)


def build_forecast_entries(
    location_id: int,
    daily: DailySeries,
    retrieved_at: datetime,
) -> List[ForecastEntry]:
    """Zip the provider's parallel daily sequences into one entry per day.

    current is the midpoint of the daily max and min. A length mismatch
    between sequences, an empty series or an unparseable date is a provider
    contract violation, and so is a date that repeats. Value-object failures
    propagate unchanged.
    """
    lengths = daily.lengths()
    if len(set(lengths.values())) != 1:
        raise UpstreamContractViolationError(
            f"Daily series lengths differ: {lengths}", provider="weather"
        )
    if not daily.dates:
        raise UpstreamContractViolationError("Daily series is empty", provider="weather")

    entries = []
    seen = set()
    for index, raw_date in enumerate(daily.dates):
        try:
            forecast_date = date.fromisoformat(raw_date)
        except (TypeError, ValueError):
            raise UpstreamContractViolationError(
                f"Invalid forecast date {raw_date!r} at index {index}", provider="weather"
            )
        if forecast_date in seen:
            raise UpstreamContractViolationError(
                f"Forecast date {forecast_date} repeats at index {index}", provider="weather"
            )
        seen.add(forecast_date)
        maximum = daily.max_temperatures[index]
        minimum = daily.min_temperatures[index]
        entries.append(
            ForecastEntry.create(
                location_id=location_id,
                forecast_date=forecast_date,
                temperature=Temperature.create(
                    current=(maximum + minimum) / 2,
                    maximum=maximum,
                    minimum=minimum,
                ),
                wind_speed=WindSpeed.create(daily.max_wind_speeds[index]),
                weather_code=daily.weather_codes[index],
                retrieved_at=retrieved_at,
            )
        )
    return entries


class GetForecastUseCase:
    """Cache-then-fetch-then-replace forecast retrieval."""

    def __init__(
        self,
        location_repository: LocationRepository,
        forecast_repository: ForecastRepository,
        registry: LocationRegistry,
        weather_provider: WeatherProvider,
        geolocation_provider: GeolocationProvider,
        cache_policy: Optional[ForecastCachePolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._locations = location_repository
        self._forecasts = forecast_repository
        self._registry = registry
        self._weather = weather_provider
        self._geolocation = geolocation_provider
        self._cache_policy = cache_policy or ForecastCachePolicy()
        self._clock = clock

    async def by_location_id(self, location_id: int) -> ForecastResult:
        """Forecast for a stored location. Raises LocationNotFoundError."""

        async def resolve() -> Location:
            location = await self._locations.get_by_id(location_id)
            if location is None:
                raise LocationNotFoundError(location_id)
            return location

        return await self._retrieve(resolve)

    async def by_target(self, target: str) -> ForecastResult:
        """Forecast for wherever an IP address or hostname geolocates to.

        The location is registered on first sight, named after the city
        the geolocation provider reports.
        """

        async def resolve() -> Location:
            query = (target or "").strip()
            if not query:
                raise InvalidTargetError(target, "target is empty")

            geo = await self._geolocation.locate(query)
            if not geo.succeeded:
                raise InvalidTargetError(query, geo.message or geo.status)
            if geo.latitude is None or geo.longitude is None:
                raise UpstreamContractViolationError(
                    f"Geolocation of '{query}' succeeded without coordinates",
                    provider="geolocation",
                )

            coordinates = Coordinates.create(geo.latitude, geo.longitude)
            registration = await self._registry.register_or_touch(coordinates, geo.city)
            return registration.location

        return await self._retrieve(resolve)

    async def _retrieve(self, resolve: LocationResolver) -> ForecastResult:
        location = await resolve()
        now = self._clock()
        location.update_usage(now)

        decision = self._cache_policy.evaluate(location.forecasts, now)
        if decision.hit:
            logger.info(f"Cache hit for location {location.id}")
            await self._locations.save(location)
            return ForecastResult(
                location=location,
                entries=sort_by_date(location.forecasts),
                from_cache=True,
                retrieved_at=decision.latest_retrieved_at,
            )

        logger.info(f"Cache miss or expired for location {location.id}. Fetching from API")
        report = await self._weather.get_forecast(location.coordinates)
        entries = build_forecast_entries(location.id, report.daily, now)
        stored = await self._forecasts.replace_for_location(location, entries)
        logger.info(f"Stored {len(stored)} fresh forecast entries for location {location.id}")

        return ForecastResult(
            location=location,
            entries=sort_by_date(stored),
            from_cache=False,
            retrieved_at=now,
            current=report.current,
        )
