"""Location domain entity - aggregate root owning its forecast entries."""
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from forecast_api.constants import LOCATION_NAME_MAX_LENGTH
from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.exceptions import ValidationError
from forecast_api.domain.value_objects.coordinates import Coordinates
from forecast_api.utils.time_utils import utc_now


def _validate_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValidationError("Name cannot be empty", field="name", value=name)
    if len(name) > LOCATION_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Name cannot exceed {LOCATION_NAME_MAX_LENGTH} characters",
            field="name",
            value=name,
        )
    return name


class Location:
    """Location aggregate.

    Attributes are read-only properties; state changes go through
    update_usage(), set_name() and clear_name(). Use create() for new
    locations and restore() when rehydrating from storage.
    """

    __slots__ = ("_id", "_coordinates", "_name", "_created_at", "_last_used_at", "_forecasts")

    def __init__(
        self,
        coordinates: Coordinates,
        name: Optional[str],
        created_at: datetime,
        last_used_at: datetime,
        location_id: Optional[int] = None,
        forecasts: Iterable[ForecastEntry] = (),
    ):
        self._id = location_id
        self._coordinates = coordinates
        self._name = name
        self._created_at = created_at
        self._last_used_at = last_used_at
        self._forecasts: List[ForecastEntry] = list(forecasts)

    @classmethod
    def create(cls, coordinates: Coordinates, name: Optional[str] = None) -> "Location":
        """Create a new, not yet persisted location used right now.

        A blank name is treated as no name.
        """
        if name is not None and not name.strip():
            name = None
        if name is not None:
            name = _validate_name(name)
        now = utc_now()
        return cls(coordinates=coordinates, name=name, created_at=now, last_used_at=now)

    @classmethod
    def restore(
        cls,
        location_id: int,
        coordinates: Coordinates,
        name: Optional[str],
        created_at: datetime,
        last_used_at: datetime,
        forecasts: Iterable[ForecastEntry] = (),
    ) -> "Location":
        """Rehydrate a persisted location."""
        return cls(
            coordinates=coordinates,
            name=name,
            created_at=created_at,
            last_used_at=last_used_at,
            location_id=location_id,
            forecasts=forecasts,
        )

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def coordinates(self) -> Coordinates:
        return self._coordinates

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_used_at(self) -> datetime:
        return self._last_used_at

    @property
    def forecasts(self) -> Tuple[ForecastEntry, ...]:
        return tuple(self._forecasts)

    def update_usage(self, now: Optional[datetime] = None):
        """Mark the location as used."""
        self._last_used_at = now or utc_now()

    def set_name(self, name: str):
        self._name = _validate_name(name)

    def clear_name(self):
        self._name = None

    def __repr__(self) -> str:
        return (
            f"Location(id={self._id!r}, coordinates={self._coordinates!r}, "
            f"name={self._name!r}, last_used_at={self._last_used_at!r})"
        )
