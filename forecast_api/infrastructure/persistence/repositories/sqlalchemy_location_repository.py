"""SQLAlchemy implementation of LocationRepository."""
import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location as LocationEntity
from forecast_api.domain.exceptions import DuplicateLocationError, LocationNotFoundError, StorageError
from forecast_api.domain.repositories.location_repository import LocationRepository
from forecast_api.domain.value_objects.coordinates import Coordinates
from forecast_api.domain.value_objects.temperature import Temperature
from forecast_api.domain.value_objects.wind_speed import WindSpeed
from forecast_api.infrastructure.persistence import models
from forecast_api.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)


def forecast_to_entity(row: models.WeatherForecast) -> ForecastEntry:
    return ForecastEntry(
        id=row.id,
        location_id=row.location_id,
        forecast_date=row.forecast_date,
        temperature=Temperature(
            current=row.temperature,
            maximum=row.max_temperature,
            minimum=row.min_temperature,
        ),
        wind_speed=WindSpeed(value=row.wind_speed),
        weather_code=row.weather_code,
        retrieved_at=ensure_utc(row.retrieved_at),
    )


def location_to_entity(row: models.Location, with_forecasts: bool = True) -> LocationEntity:
    forecasts = [forecast_to_entity(f) for f in row.forecasts] if with_forecasts else []
    return LocationEntity.restore(
        location_id=row.id,
        coordinates=Coordinates(latitude=row.latitude, longitude=row.longitude),
        name=row.name,
        created_at=ensure_utc(row.created_at),
        last_used_at=ensure_utc(row.last_used_at),
        forecasts=forecasts,
    )


class SQLAlchemyLocationRepository(LocationRepository):
    """Location repository using async SQLAlchemy."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, location_id: int) -> Optional[LocationEntity]:
        stmt = (
            select(models.Location)
            .options(selectinload(models.Location.forecasts))
            .where(models.Location.id == location_id)
            .execution_options(populate_existing=True)
        )
        return await self._load(stmt)

    async def get_by_coordinates(self, coordinates: Coordinates) -> Optional[LocationEntity]:
        stmt = (
            select(models.Location)
            .options(selectinload(models.Location.forecasts))
            .where(
                models.Location.latitude == coordinates.latitude,
                models.Location.longitude == coordinates.longitude,
            )
            .execution_options(populate_existing=True)
        )
        return await self._load(stmt)

    async def add(self, location: LocationEntity) -> LocationEntity:
        row = models.Location(
            latitude=location.coordinates.latitude,
            longitude=location.coordinates.longitude,
            name=location.name,
            created_at=location.created_at,
            last_used_at=location.last_used_at,
        )
        self.session.add(row)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateLocationError(location.coordinates.latitude, location.coordinates.longitude)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to insert location: {e}")
            raise StorageError(f"Failed to insert location: {e}") from e

        return LocationEntity.restore(
            location_id=row.id,
            coordinates=location.coordinates,
            name=row.name,
            created_at=location.created_at,
            last_used_at=location.last_used_at,
        )

    async def save(self, location: LocationEntity) -> LocationEntity:
        try:
            row = await self.session.get(models.Location, location.id)
            if row is None:
                raise LocationNotFoundError(location.id)
            row.name = location.name
            row.last_used_at = location.last_used_at
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to save location {location.id}: {e}")
            raise StorageError(f"Failed to save location {location.id}: {e}") from e
        return location

    async def delete(self, location_id: int) -> bool:
        try:
            # forecasts go with it through ON DELETE CASCADE
            result = await self.session.execute(
                delete(models.Location)
                .where(models.Location.id == location_id)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to delete location {location_id}: {e}")
            raise StorageError(f"Failed to delete location {location_id}: {e}") from e
        return result.rowcount > 0

    async def list_all(self) -> List[LocationEntity]:
        stmt = select(models.Location).order_by(
            models.Location.last_used_at.desc(),
            models.Location.id,
        )
        try:
            rows = (await self.session.scalars(stmt)).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list locations: {e}")
            raise StorageError(f"Failed to list locations: {e}") from e
        return [location_to_entity(r, with_forecasts=False) for r in rows]

    async def _load(self, stmt) -> Optional[LocationEntity]:
        """Run a lookup and end its read transaction.

        Callers may await upstream requests next; the connection goes back
        to the pool first.
        """
        try:
            row = await self.session.scalar(stmt)
            location = location_to_entity(row) if row else None
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Location query failed: {e}")
            raise StorageError(f"Location query failed: {e}") from e
        return location
