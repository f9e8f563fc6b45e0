"""Numeric coercion used by the value objects."""
from decimal import Decimal, InvalidOperation
from typing import Any

from forecast_api.domain.exceptions import ValidationError


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce int/float/str/Decimal to a finite Decimal.

    Floats go through str() so 48.8566 becomes Decimal("48.8566") rather
    than its binary expansion.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field, value=value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number, got {value!r}", field=field, value=value)
    else:
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field, value=value)

    if not result.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}", field=field, value=value)
    return result
