"""Wind speed value object - immutable and validated."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from forecast_api.domain.exceptions import OutOfRangeError
from forecast_api.utils.number_utils import to_decimal


@dataclass(frozen=True)
class WindSpeed:
    """Immutable non-negative wind speed (km/h)."""
    value: Decimal

    def __post_init__(self):
        if self.value < 0:
            raise OutOfRangeError(
                f"Wind speed cannot be negative, got {self.value}",
                field="wind_speed",
                value=self.value,
            )

    @classmethod
    def create(cls, value: Any) -> "WindSpeed":
        return cls(value=to_decimal(value, "wind_speed"))
