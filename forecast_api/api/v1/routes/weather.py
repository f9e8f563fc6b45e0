"""Weather API routes - thin layer delegating to the forecast use case."""
from fastapi import APIRouter, Depends

from forecast_api.api.v1.schemas.weather_schemas import WeatherForecastResponse
from forecast_api.application.use_cases.get_forecast import GetForecastUseCase
from forecast_api.core.dependencies import get_forecast_use_case

router = APIRouter(prefix="/weather", tags=["weather"])


@router.get("/locations/{location_id}", response_model=WeatherForecastResponse)
async def get_forecast_for_location(
    location_id: int,
    use_case: GetForecastUseCase = Depends(get_forecast_use_case),
):
    """
    Get the forecast for a stored location.

    Served from the cache while the newest entry is under an hour old,
    otherwise fetched from Open-Meteo and stored.
    """
    result = await use_case.by_location_id(location_id)
    return WeatherForecastResponse.from_result(result)


@router.get("/by-target/{target}", response_model=WeatherForecastResponse)
async def get_forecast_for_target(
    target: str,
    use_case: GetForecastUseCase = Depends(get_forecast_use_case),
):
    """
    Get the forecast for wherever an IP address or hostname geolocates to.

    The resolved position is registered as a location on first use.
    """
    result = await use_case.by_target(target)
    return WeatherForecastResponse.from_result(result)
