"""Location API routes - thin layer delegating to the location registry."""
from typing import List

from fastapi import APIRouter, Depends, Response, status

from forecast_api.api.v1.schemas.location_schemas import CreateLocationRequest, LocationResponse
from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.core.dependencies import get_location_registry
from forecast_api.domain.value_objects.coordinates import Coordinates

router = APIRouter(tags=["locations"])


@router.post(
    "/locations",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": LocationResponse, "description": "Location already registered"}},
)
async def register_location(
    payload: CreateLocationRequest,
    response: Response,
    registry: LocationRegistry = Depends(get_location_registry),
):
    """
    Register a location by coordinates.

    Returns 201 for a new location, 200 when one already exists at exactly
    these coordinates (its usage timestamp is refreshed, its name kept).
    """
    coordinates = Coordinates.create(payload.latitude, payload.longitude)
    result = await registry.register_or_touch(coordinates, payload.name)
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return LocationResponse.from_entity(result.location)


@router.get("/locations", response_model=List[LocationResponse])
async def list_locations(registry: LocationRegistry = Depends(get_location_registry)):
    """List all locations, most recently used first."""
    locations = await registry.list()
    return [LocationResponse.from_entity(location) for location in locations]


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: int,
    registry: LocationRegistry = Depends(get_location_registry),
):
    """Delete a location and all of its forecast entries."""
    await registry.delete(location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
