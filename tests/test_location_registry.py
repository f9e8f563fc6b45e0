"""Tests for LocationRegistry over the in-memory repositories."""
import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.domain.entities.location import Location
from forecast_api.domain.exceptions import DuplicateLocationError, LocationNotFoundError, StorageError
from forecast_api.domain.value_objects.coordinates import Coordinates

pytestmark = pytest.mark.unit

LONDON = Coordinates.create("51.5074", "-0.1278")
PARIS = Coordinates.create("48.8566", "2.3522")


class TestRegisterOrTouch:
    """Test one-location-per-coordinate-pair registration."""

    @pytest.mark.asyncio
    async def test_new_coordinates_create_a_location(self, registry):
        result = await registry.register_or_touch(LONDON, "London")
        assert result.created
        assert result.location.id is not None
        assert result.location.name == "London"

    @pytest.mark.asyncio
    async def test_existing_coordinates_are_touched_not_renamed(self, registry):
        first = await registry.register_or_touch(LONDON, "London")
        second = await registry.register_or_touch(LONDON, "Another name")
        assert not second.created
        assert second.location.id == first.location.id
        assert second.location.name == "London"
        assert second.location.last_used_at >= first.location.last_used_at

    @pytest.mark.asyncio
    async def test_trailing_zeros_match_the_same_location(self, registry):
        first = await registry.register_or_touch(LONDON)
        second = await registry.register_or_touch(Coordinates.create("51.507400", "-0.127800"))
        assert second.location.id == first.location.id

    @pytest.mark.asyncio
    async def test_no_proximity_matching(self, registry):
        first = await registry.register_or_touch(LONDON)
        nearby = await registry.register_or_touch(Coordinates.create("51.5075", "-0.1278"))
        assert nearby.created
        assert nearby.location.id != first.location.id

    @pytest.mark.asyncio
    async def test_concurrent_registration_yields_one_location(self, registry, location_repo):
        results = await asyncio.gather(*(registry.register_or_touch(PARIS, "Paris") for _ in range(10)))
        assert len({r.location.id for r in results}) == 1
        assert sum(r.created for r in results) == 1
        assert len(await location_repo.list_all()) == 1

    @pytest.mark.asyncio
    async def test_lost_insert_race_falls_back_to_existing_row(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        winner = Location.restore(7, PARIS, "Paris", now, now)
        repo = AsyncMock()
        repo.get_by_coordinates = AsyncMock(side_effect=[None, winner])
        repo.add = AsyncMock(side_effect=DuplicateLocationError(PARIS.latitude, PARIS.longitude))
        repo.save = AsyncMock(side_effect=lambda location: location)

        result = await LocationRegistry(repo).register_or_touch(PARIS, "Paris")

        assert not result.created
        assert result.location.id == 7
        repo.save.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreadable_duplicate_is_a_storage_error(self):
        repo = AsyncMock()
        repo.get_by_coordinates = AsyncMock(return_value=None)
        repo.add = AsyncMock(side_effect=DuplicateLocationError(PARIS.latitude, PARIS.longitude))

        with pytest.raises(StorageError):
            await LocationRegistry(repo).register_or_touch(PARIS)


class TestDeleteAndList:
    """Test deletion and listing order."""

    @pytest.mark.asyncio
    async def test_delete_removes_location(self, registry):
        created = (await registry.register_or_touch(LONDON)).location
        await registry.delete(created.id)
        assert await registry.find(LONDON) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_id_raises(self, registry):
        with pytest.raises(LocationNotFoundError):
            await registry.delete(999)

    @pytest.mark.asyncio
    async def test_list_is_most_recently_used_first(self, registry):
        london = (await registry.register_or_touch(LONDON)).location
        paris = (await registry.register_or_touch(PARIS)).location
        await registry.register_or_touch(LONDON)

        ids = [location.id for location in await registry.list()]
        assert ids == [london.id, paris.id]
