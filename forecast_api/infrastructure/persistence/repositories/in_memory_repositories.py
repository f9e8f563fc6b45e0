"""In-memory implementations of the repositories for testing.

Locations and forecast entries live in one InMemoryStore: an arena of
locations keyed by id, plus entry lists keyed by location id. Deleting a
location drops its arena slot, which removes its entries with it.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location
from forecast_api.domain.exceptions import DuplicateLocationError, LocationNotFoundError, StorageError
from forecast_api.domain.repositories.forecast_repository import ForecastRepository
from forecast_api.domain.repositories.location_repository import LocationRepository
from forecast_api.domain.value_objects.coordinates import Coordinates


@dataclass
class _StoredLocation:
    location_id: int
    coordinates: Coordinates
    name: Optional[str]
    created_at: object
    last_used_at: object
    sequence: int


@dataclass
class InMemoryStore:
    """Shared state behind the in-memory repositories."""
    locations: Dict[int, _StoredLocation] = field(default_factory=dict)
    by_coordinates: Dict[Tuple, int] = field(default_factory=dict)
    forecasts: Dict[int, List[ForecastEntry]] = field(default_factory=dict)
    next_location_id: int = 1
    next_forecast_id: int = 1
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def _coordinate_key(coordinates: Coordinates) -> Tuple:
    # Decimal("48.8566") and Decimal("48.856600") must collide
    return (coordinates.latitude.normalize(), coordinates.longitude.normalize())


def _restore(store: InMemoryStore, stored: _StoredLocation, with_forecasts: bool = True) -> Location:
    return Location.restore(
        location_id=stored.location_id,
        coordinates=stored.coordinates,
        name=stored.name,
        created_at=stored.created_at,
        last_used_at=stored.last_used_at,
        forecasts=list(store.forecasts.get(stored.location_id, [])) if with_forecasts else [],
    )


class InMemoryLocationRepository(LocationRepository):
    """In-memory LocationRepository; enforces the coordinate uniqueness rule."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    async def get_by_id(self, location_id: int) -> Optional[Location]:
        stored = self.store.locations.get(location_id)
        return _restore(self.store, stored) if stored else None

    async def get_by_coordinates(self, coordinates: Coordinates) -> Optional[Location]:
        location_id = self.store.by_coordinates.get(_coordinate_key(coordinates))
        if location_id is None:
            return None
        return _restore(self.store, self.store.locations[location_id])

    async def add(self, location: Location) -> Location:
        key = _coordinate_key(location.coordinates)
        async with self.store.lock:
            if key in self.store.by_coordinates:
                raise DuplicateLocationError(location.coordinates.latitude, location.coordinates.longitude)
            location_id = self.store.next_location_id
            self.store.next_location_id += 1
            stored = _StoredLocation(
                location_id=location_id,
                coordinates=location.coordinates,
                name=location.name,
                created_at=location.created_at,
                last_used_at=location.last_used_at,
                sequence=location_id,
            )
            self.store.locations[location_id] = stored
            self.store.by_coordinates[key] = location_id
            self.store.forecasts[location_id] = []
        return _restore(self.store, stored)

    async def save(self, location: Location) -> Location:
        stored = self.store.locations.get(location.id)
        if stored is None:
            raise LocationNotFoundError(location.id)
        stored.name = location.name
        stored.last_used_at = location.last_used_at
        return location

    async def delete(self, location_id: int) -> bool:
        async with self.store.lock:
            stored = self.store.locations.pop(location_id, None)
            if stored is None:
                return False
            self.store.by_coordinates.pop(_coordinate_key(stored.coordinates), None)
            self.store.forecasts.pop(location_id, None)
        return True

    async def list_all(self) -> List[Location]:
        # sorted() is stable, so ties keep insertion order
        ordered = sorted(self.store.locations.values(), key=lambda s: s.sequence)
        ordered = sorted(ordered, key=lambda s: s.last_used_at, reverse=True)
        return [_restore(self.store, s, with_forecasts=False) for s in ordered]


class InMemoryForecastRepository(ForecastRepository):
    """In-memory ForecastRepository sharing a store with the location repository."""

    def __init__(self, store: Optional[InMemoryStore] = None):
        self.store = store or InMemoryStore()

    async def list_for_location(self, location_id: int) -> List[ForecastEntry]:
        return sorted(self.store.forecasts.get(location_id, []), key=lambda e: e.forecast_date)

    async def replace_for_location(
        self,
        location: Location,
        entries: Sequence[ForecastEntry],
    ) -> List[ForecastEntry]:
        async with self.store.lock:
            stored = self.store.locations.get(location.id)
            if stored is None:
                raise LocationNotFoundError(location.id)

            dates = [entry.forecast_date for entry in entries]
            if len(set(dates)) != len(dates):
                raise StorageError(f"Duplicate forecast dates for location {location.id}")

            new_entries = []
            for entry in entries:
                new_entries.append(entry.with_id(self.store.next_forecast_id))
                self.store.next_forecast_id += 1

            stored.last_used_at = location.last_used_at
            self.store.forecasts[location.id] = new_entries
        return list(new_entries)
