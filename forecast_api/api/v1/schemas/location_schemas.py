"""Pydantic schemas for location endpoints."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from forecast_api.constants import (
    LOCATION_NAME_MAX_LENGTH,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)
from forecast_api.domain.entities.location import Location


class CreateLocationRequest(BaseModel):
    """Register a location by coordinates."""
    latitude: Decimal = Field(..., ge=MIN_LATITUDE, le=MAX_LATITUDE)
    longitude: Decimal = Field(..., ge=MIN_LONGITUDE, le=MAX_LONGITUDE)
    name: Optional[str] = Field(default=None, max_length=LOCATION_NAME_MAX_LENGTH)


class LocationResponse(BaseModel):
    id: int
    latitude: float
    longitude: float
    name: Optional[str] = None
    created_at: datetime
    last_used_at: datetime

    @classmethod
    def from_entity(cls, location: Location) -> "LocationResponse":
        return cls(
            id=location.id,
            latitude=float(location.coordinates.latitude),
            longitude=float(location.coordinates.longitude),
            name=location.name,
            created_at=location.created_at,
            last_used_at=location.last_used_at,
        )
