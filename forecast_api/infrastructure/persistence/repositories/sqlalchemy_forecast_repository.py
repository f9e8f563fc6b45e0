"""SQLAlchemy implementation of ForecastRepository."""
import logging
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location as LocationEntity
from forecast_api.domain.exceptions import LocationNotFoundError, StorageError
from forecast_api.domain.repositories.forecast_repository import ForecastRepository
from forecast_api.infrastructure.persistence import models
from forecast_api.infrastructure.persistence.repositories.sqlalchemy_location_repository import (
    forecast_to_entity,
)

logger = logging.getLogger(__name__)


def _to_row(entry: ForecastEntry) -> models.WeatherForecast:
    return models.WeatherForecast(
        location_id=entry.location_id,
        forecast_date=entry.forecast_date,
        temperature=entry.temperature.current,
        max_temperature=entry.temperature.maximum,
        min_temperature=entry.temperature.minimum,
        wind_speed=entry.wind_speed.value,
        weather_code=entry.weather_code,
        retrieved_at=entry.retrieved_at,
    )


class SQLAlchemyForecastRepository(ForecastRepository):
    """Forecast repository using async SQLAlchemy."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_location(self, location_id: int) -> List[ForecastEntry]:
        stmt = (
            select(models.WeatherForecast)
            .where(models.WeatherForecast.location_id == location_id)
            .order_by(models.WeatherForecast.forecast_date)
        )
        try:
            rows = (await self.session.scalars(stmt)).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load forecasts for location {location_id}: {e}")
            raise StorageError(f"Failed to load forecasts for location {location_id}: {e}") from e
        return [forecast_to_entity(r) for r in rows]

    async def replace_for_location(
        self,
        location: LocationEntity,
        entries: Sequence[ForecastEntry],
    ) -> List[ForecastEntry]:
        """Delete-then-insert under a row lock on the owning location.

        Everything happens in one transaction so readers see either the
        old set or the complete new one. SELECT ... FOR UPDATE serializes
        concurrent replacements on databases with row locks; SQLite
        serializes writers on its database lock instead.
        """
        # rows cached by earlier reads must not collide with re-used primary keys
        self.session.expunge_all()
        try:
            row = await self.session.scalar(
                select(models.Location)
                .where(models.Location.id == location.id)
                .with_for_update()
            )
            if row is None:
                raise LocationNotFoundError(location.id)

            row.last_used_at = location.last_used_at
            await self.session.execute(
                delete(models.WeatherForecast)
                .where(models.WeatherForecast.location_id == location.id)
                .execution_options(synchronize_session=False)
            )
            new_rows = [_to_row(entry) for entry in entries]
            self.session.add_all(new_rows)
            await self.session.commit()
        except LocationNotFoundError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to replace forecasts for location {location.id}: {e}")
            raise StorageError(f"Failed to replace forecasts for location {location.id}: {e}") from e

        return [entry.with_id(r.id) for entry, r in zip(entries, new_rows)]
