"""Temperature value object - immutable and validated."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from forecast_api.domain.exceptions import InvalidRangeError
from forecast_api.utils.number_utils import to_decimal


@dataclass(frozen=True)
class Temperature:
    """Immutable temperature triple in degrees Celsius.

    Only maximum >= minimum is enforced; current is free to sit outside
    the daily bounds.
    """
    current: Decimal
    maximum: Decimal
    minimum: Decimal

    def __post_init__(self):
        if self.maximum < self.minimum:
            raise InvalidRangeError(
                f"Maximum temperature ({self.maximum}) cannot be lower than "
                f"minimum temperature ({self.minimum})",
                field="maximum",
                value=self.maximum,
            )

    @classmethod
    def create(cls, current: Any, maximum: Any, minimum: Any) -> "Temperature":
        return cls(
            current=to_decimal(current, "current"),
            maximum=to_decimal(maximum, "maximum"),
            minimum=to_decimal(minimum, "minimum"),
        )
