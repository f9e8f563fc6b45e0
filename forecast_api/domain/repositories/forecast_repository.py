"""Forecast repository interface - abstraction for data access."""
from abc import ABC, abstractmethod
from typing import List, Sequence

from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location


class ForecastRepository(ABC):
    """Repository interface for ForecastEntry rows owned by a Location."""

    @abstractmethod
    async def list_for_location(self, location_id: int) -> List[ForecastEntry]:
        """Get all stored entries for a location."""
        pass

    @abstractmethod
    async def replace_for_location(
        self,
        location: Location,
        entries: Sequence[ForecastEntry],
    ) -> List[ForecastEntry]:
        """Atomically swap the location's entries for a new set.

        Also persists the location's last_used_at in the same transaction.
        Raises LocationNotFoundError if the location no longer exists.
        """
        pass
