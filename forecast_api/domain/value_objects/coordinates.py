"""Coordinate value object - immutable and validated."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from forecast_api.constants import MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, MIN_LONGITUDE
from forecast_api.domain.exceptions import OutOfRangeError
from forecast_api.utils.number_utils import to_decimal


@dataclass(frozen=True)
class Coordinates:
    """Immutable coordinate value object.

    Two instances with the same latitude and longitude are equal and hash
    the same, so they can be used interchangeably as lookup keys.
    """
    latitude: Decimal
    longitude: Decimal

    def __post_init__(self):
        """Validate coordinates. Latitude is checked first."""
        if not MIN_LATITUDE <= self.latitude <= MAX_LATITUDE:
            raise OutOfRangeError(
                f"Latitude must be between -90 and 90, got {self.latitude}",
                field="latitude",
                value=self.latitude,
            )
        if not MIN_LONGITUDE <= self.longitude <= MAX_LONGITUDE:
            raise OutOfRangeError(
                f"Longitude must be between -180 and 180, got {self.longitude}",
                field="longitude",
                value=self.longitude,
            )

    @classmethod
    def create(cls, latitude: Any, longitude: Any) -> "Coordinates":
        """Build coordinates from any numeric input."""
        return cls(
            latitude=to_decimal(latitude, "latitude"),
            longitude=to_decimal(longitude, "longitude"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"latitude": float(self.latitude), "longitude": float(self.longitude)}
