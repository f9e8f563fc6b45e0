"""Location repository interface - abstraction for data access."""
from abc import ABC, abstractmethod
from typing import List, Optional

from forecast_api.domain.entities.location import Location
from forecast_api.domain.value_objects.coordinates import Coordinates


class LocationRepository(ABC):
    """Repository interface for the Location aggregate.

    Lookups return the location together with its forecast entries and
    leave no read transaction open behind them.
    """

    @abstractmethod
    async def get_by_id(self, location_id: int) -> Optional[Location]:
        """Get location by ID."""
        pass

    @abstractmethod
    async def get_by_coordinates(self, coordinates: Coordinates) -> Optional[Location]:
        """Exact-match lookup by latitude and longitude."""
        pass

    @abstractmethod
    async def add(self, location: Location) -> Location:
        """Insert a new location and return it with its assigned id.

        Raises DuplicateLocationError when the coordinates are already taken.
        """
        pass

    @abstractmethod
    async def save(self, location: Location) -> Location:
        """Persist name and usage changes of an existing location."""
        pass

    @abstractmethod
    async def delete(self, location_id: int) -> bool:
        """Delete a location and its forecasts. False when nothing matched."""
        pass

    @abstractmethod
    async def list_all(self) -> List[Location]:
        """List all locations, most recently used first."""
        pass
