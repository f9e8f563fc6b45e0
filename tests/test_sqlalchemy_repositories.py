"""Integration tests for the SQLAlchemy repositories on a temporary SQLite file."""
import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from forecast_api.application.services.location_registry import LocationRegistry
from forecast_api.application.use_cases.get_forecast import GetForecastUseCase, build_forecast_entries
from forecast_api.domain.entities.location import Location
from forecast_api.domain.exceptions import DuplicateLocationError, LocationNotFoundError
from forecast_api.domain.value_objects.coordinates import Coordinates
from forecast_api.infrastructure.persistence import models
from forecast_api.infrastructure.persistence.database_init import seed_default_locations
from forecast_api.infrastructure.persistence.repositories.sqlalchemy_forecast_repository import (
    SQLAlchemyForecastRepository,
)
from forecast_api.infrastructure.persistence.repositories.sqlalchemy_location_repository import (
    SQLAlchemyLocationRepository,
)

from factories import make_daily_series, make_weather_report

pytestmark = pytest.mark.integration

WARSAW = Coordinates.create("52.2297", "21.0122")
T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


async def add_location(session, coordinates=WARSAW, name="Warsaw") -> Location:
    return await SQLAlchemyLocationRepository(session).add(Location.create(coordinates, name))


class TestSQLAlchemyLocationRepository:
    """Test location persistence."""

    @pytest.mark.asyncio
    async def test_add_and_get_by_coordinates(self, db_session):
        repo = SQLAlchemyLocationRepository(db_session)
        created = await add_location(db_session)

        found = await repo.get_by_coordinates(Coordinates.create("52.229700", "21.012200"))

        assert found.id == created.id
        assert found.name == "Warsaw"
        assert found.coordinates == WARSAW
        assert found.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_duplicate_coordinates_are_rejected(self, db_session):
        await add_location(db_session)
        with pytest.raises(DuplicateLocationError):
            await add_location(db_session, name="Warszawa")

    @pytest.mark.asyncio
    async def test_save_persists_usage(self, db_session_factory):
        async with db_session_factory() as session:
            created = await add_location(session)

        created.update_usage(T0 + timedelta(days=400))
        async with db_session_factory() as session:
            await SQLAlchemyLocationRepository(session).save(created)

        async with db_session_factory() as session:
            stored = await SQLAlchemyLocationRepository(session).get_by_id(created.id)
        assert stored.last_used_at == T0 + timedelta(days=400)

    @pytest.mark.asyncio
    async def test_list_all_most_recent_first(self, db_session):
        repo = SQLAlchemyLocationRepository(db_session)
        warsaw = await add_location(db_session)
        london = await add_location(db_session, Coordinates.create("51.5074", "-0.1278"), "London")
        warsaw.update_usage(london.last_used_at + timedelta(seconds=1))
        await repo.save(warsaw)

        assert [l.id for l in await repo.list_all()] == [warsaw.id, london.id]

    @pytest.mark.asyncio
    async def test_delete_cascades_to_forecasts(self, db_session):
        repo = SQLAlchemyLocationRepository(db_session)
        warsaw = await add_location(db_session)
        entries = build_forecast_entries(warsaw.id, make_daily_series(7), T0)
        await SQLAlchemyForecastRepository(db_session).replace_for_location(warsaw, entries)

        assert await repo.delete(warsaw.id)

        remaining = await db_session.scalar(select(func.count()).select_from(models.WeatherForecast))
        assert remaining == 0
        assert await repo.get_by_id(warsaw.id) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_returns_false(self, db_session):
        assert not await SQLAlchemyLocationRepository(db_session).delete(12345)


class TestSQLAlchemyForecastRepository:
    """Test atomic forecast replacement."""

    @pytest.mark.asyncio
    async def test_replace_inserts_and_assigns_ids(self, db_session):
        warsaw = await add_location(db_session)
        entries = build_forecast_entries(warsaw.id, make_daily_series(7), T0)

        stored = await SQLAlchemyForecastRepository(db_session).replace_for_location(warsaw, entries)

        assert len(stored) == 7
        assert all(e.id is not None for e in stored)
        listed = await SQLAlchemyForecastRepository(db_session).list_for_location(warsaw.id)
        assert [e.forecast_date for e in listed] == [date(2024, 1, 1) + timedelta(days=i) for i in range(7)]
        assert listed[0].temperature.maximum == Decimal("20")
        assert listed[0].retrieved_at == T0

    @pytest.mark.asyncio
    async def test_replace_removes_previous_set(self, db_session):
        repo = SQLAlchemyForecastRepository(db_session)
        warsaw = await add_location(db_session)
        await repo.replace_for_location(warsaw, build_forecast_entries(warsaw.id, make_daily_series(7), T0))

        later = T0 + timedelta(hours=2)
        fresh = build_forecast_entries(warsaw.id, make_daily_series(3, start=date(2024, 1, 5)), later)
        await repo.replace_for_location(warsaw, fresh)

        listed = await repo.list_for_location(warsaw.id)
        assert [e.forecast_date for e in listed] == [date(2024, 1, 5), date(2024, 1, 6), date(2024, 1, 7)]
        assert all(e.retrieved_at == later for e in listed)

    @pytest.mark.asyncio
    async def test_replace_updates_last_used(self, db_session_factory):
        async with db_session_factory() as session:
            warsaw = await add_location(session)
        warsaw.update_usage(T0 + timedelta(days=900))
        async with db_session_factory() as session:
            await SQLAlchemyForecastRepository(session).replace_for_location(
                warsaw, build_forecast_entries(warsaw.id, make_daily_series(1), T0)
            )
        async with db_session_factory() as session:
            stored = await SQLAlchemyLocationRepository(session).get_by_id(warsaw.id)
        assert stored.last_used_at == T0 + timedelta(days=900)
        assert len(stored.forecasts) == 1

    @pytest.mark.asyncio
    async def test_replace_for_vanished_location_raises(self, db_session):
        warsaw = await add_location(db_session)
        entries = build_forecast_entries(warsaw.id, make_daily_series(2), T0)
        await SQLAlchemyLocationRepository(db_session).delete(warsaw.id)

        with pytest.raises(LocationNotFoundError):
            await SQLAlchemyForecastRepository(db_session).replace_for_location(warsaw, entries)


class TestSeed:
    """Test default location seeding."""

    @pytest.mark.asyncio
    async def test_seeds_empty_store_once(self, db_session_factory):
        assert await seed_default_locations(db_session_factory) == 3
        assert await seed_default_locations(db_session_factory) == 0

        async with db_session_factory() as session:
            names = {l.name for l in await SQLAlchemyLocationRepository(session).list_all()}
        assert names == {"Warsaw", "London", "New York"}


class TestConcurrentWrites:
    """Test concurrent requests on separate sessions."""

    @pytest.mark.asyncio
    async def test_concurrent_replacements_leave_one_complete_set(self, db_session_factory):
        async with db_session_factory() as session:
            warsaw = await add_location(session)

        async def replace(hours: int):
            entries = build_forecast_entries(warsaw.id, make_daily_series(7), T0 + timedelta(hours=hours))
            async with db_session_factory() as session:
                await SQLAlchemyForecastRepository(session).replace_for_location(warsaw, entries)

        await asyncio.gather(*(replace(hours) for hours in range(6)))

        async with db_session_factory() as session:
            stored = await SQLAlchemyForecastRepository(session).list_for_location(warsaw.id)
        assert len(stored) == 7
        assert len({e.retrieved_at for e in stored}) == 1
        assert len({e.forecast_date for e in stored}) == 7

    @pytest.mark.asyncio
    async def test_concurrent_registrations_share_one_location(self, db_session_factory):
        async def register():
            async with db_session_factory() as session:
                registry = LocationRegistry(SQLAlchemyLocationRepository(session))
                return await registry.register_or_touch(WARSAW, "Warsaw")

        results = await asyncio.gather(*(register() for _ in range(8)))

        assert len({r.location.id for r in results}) == 1
        assert sum(r.created for r in results) == 1
        async with db_session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(models.Location))
        assert count == 1


class TransactionRecordingProvider:
    """Weather provider that records whether the session held a transaction when called."""

    def __init__(self, session):
        self.session = session
        self.in_transaction = []

    async def get_forecast(self, coordinates):
        self.in_transaction.append(self.session.in_transaction())
        return make_weather_report()


class TestForecastWorkflowOnSQLite:
    """Test the forecast workflow against the SQLAlchemy repositories."""

    def make_use_case(self, session, weather_provider, geolocation_provider) -> GetForecastUseCase:
        location_repo = SQLAlchemyLocationRepository(session)
        return GetForecastUseCase(
            location_repository=location_repo,
            forecast_repository=SQLAlchemyForecastRepository(session),
            registry=LocationRegistry(location_repo),
            weather_provider=weather_provider,
            geolocation_provider=geolocation_provider,
        )

    @pytest.mark.asyncio
    async def test_no_transaction_open_during_fetch_by_id(self, db_session, geolocation_provider):
        warsaw = await add_location(db_session)
        provider = TransactionRecordingProvider(db_session)

        result = await self.make_use_case(db_session, provider, geolocation_provider).by_location_id(warsaw.id)

        assert provider.in_transaction == [False]
        assert not result.from_cache
        assert len(await SQLAlchemyForecastRepository(db_session).list_for_location(warsaw.id)) == 7

    @pytest.mark.asyncio
    async def test_no_transaction_open_during_fetch_by_target(self, db_session, geolocation_provider):
        provider = TransactionRecordingProvider(db_session)

        result = await self.make_use_case(db_session, provider, geolocation_provider).by_target("8.8.8.8")

        assert provider.in_transaction == [False]
        assert result.location.name == "Mountain View"
        assert len(result.entries) == 7
