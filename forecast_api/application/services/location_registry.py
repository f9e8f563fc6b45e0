"""Location registry - one durable Location per coordinate pair."""
import logging
from typing import List, Optional

from forecast_api.application.dto.forecast_dto import RegistrationResult
from forecast_api.domain.entities.location import Location
from forecast_api.domain.exceptions import DuplicateLocationError, LocationNotFoundError, StorageError
from forecast_api.domain.repositories.location_repository import LocationRepository
from forecast_api.domain.value_objects.coordinates import Coordinates

logger = logging.getLogger(__name__)


class LocationRegistry:
    """Maps coordinates to Location identities.

    The storage uniqueness constraint on (latitude, longitude) is the final
    arbiter: an insert that loses a concurrent race falls back to reading
    the row the winner wrote.
    """

    def __init__(self, location_repository: LocationRepository):
        self._locations = location_repository

    async def find(self, coordinates: Coordinates) -> Optional[Location]:
        """Exact-match lookup; no proximity matching."""
        return await self._locations.get_by_coordinates(coordinates)

    async def register_or_touch(
        self,
        coordinates: Coordinates,
        name: Optional[str] = None,
    ) -> RegistrationResult:
        """Return the location at coordinates, creating it if needed.

        An existing location has its usage bumped; its name is left alone.
        """
        existing = await self._locations.get_by_coordinates(coordinates)
        if existing is not None:
            logger.info(f"Reusing location {existing.id} at ({coordinates.latitude}, {coordinates.longitude})")
            return RegistrationResult(location=await self._touch(existing), created=False)

        location = Location.create(coordinates, name)
        try:
            created = await self._locations.add(location)
        except DuplicateLocationError:
            logger.warning(
                f"Concurrent insert for ({coordinates.latitude}, {coordinates.longitude}); "
                f"re-reading existing location"
            )
            existing = await self._locations.get_by_coordinates(coordinates)
            if existing is None:
                raise StorageError(
                    f"Location ({coordinates.latitude}, {coordinates.longitude}) "
                    f"violated uniqueness but could not be re-read"
                )
            return RegistrationResult(location=await self._touch(existing), created=False)

        logger.info(f"Registered location {created.id} at ({coordinates.latitude}, {coordinates.longitude})")
        return RegistrationResult(location=created, created=True)

    async def delete(self, location_id: int):
        """Delete a location and, by cascade, its forecast entries."""
        if not await self._locations.delete(location_id):
            raise LocationNotFoundError(location_id)
        logger.info(f"Deleted location {location_id}")

    async def list(self) -> List[Location]:
        """All locations, most recently used first."""
        return await self._locations.list_all()

    async def _touch(self, location: Location) -> Location:
        location.update_usage()
        return await self._locations.save(location)
