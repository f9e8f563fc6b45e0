"""Data Transfer Objects returned by the application services."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from forecast_api.application.ports.providers import CurrentConditions
from forecast_api.domain.entities.forecast_entry import ForecastEntry
from forecast_api.domain.entities.location import Location


@dataclass
class RegistrationResult:
    """Location returned by register-or-touch and whether it was just created."""
    location: Location
    created: bool


@dataclass
class ForecastResult:
    """Forecast for one location.

    entries are sorted ascending by forecast_date; from_cache is True when
    served from storage and False when freshly fetched.
    """
    location: Location
    entries: List[ForecastEntry]
    from_cache: bool
    retrieved_at: datetime
    current: Optional[CurrentConditions] = None
