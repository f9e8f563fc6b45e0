"""Helpers for pulling typed values out of provider JSON payloads.

Any missing key or unparseable value becomes UpstreamContractViolationError.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

import httpx

from forecast_api.domain.exceptions import UpstreamContractViolationError


def decode_json(response: httpx.Response, provider: str) -> Mapping[str, Any]:
    """Decode a JSON object body, keeping floats as Decimal."""
    try:
        payload = response.json(parse_float=Decimal)
    except ValueError as e:
        raise UpstreamContractViolationError(f"{provider} returned invalid JSON: {e}", provider=provider) from e
    if not isinstance(payload, dict):
        raise UpstreamContractViolationError(
            f"{provider} returned {type(payload).__name__} instead of an object", provider=provider
        )
    return payload


def require(payload: Mapping[str, Any], key: str, provider: str) -> Any:
    if key not in payload or payload[key] is None:
        raise UpstreamContractViolationError(f"{provider} payload is missing '{key}'", provider=provider)
    return payload[key]


def as_decimal(value: Any, key: str, provider: str) -> Decimal:
    if isinstance(value, bool):
        raise UpstreamContractViolationError(f"{provider} '{key}' is not numeric: {value!r}", provider=provider)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise UpstreamContractViolationError(
            f"{provider} '{key}' is not numeric: {value!r}", provider=provider
        ) from e
    if not result.is_finite():
        raise UpstreamContractViolationError(f"{provider} '{key}' is not finite: {value!r}", provider=provider)
    return result


def as_int(value: Any, key: str, provider: str) -> int:
    number = as_decimal(value, key, provider)
    if number != number.to_integral_value():
        raise UpstreamContractViolationError(f"{provider} '{key}' is not an integer: {value!r}", provider=provider)
    return int(number)


def optional_decimal(payload: Mapping[str, Any], key: str, provider: str) -> Optional[Decimal]:
    value = payload.get(key)
    return None if value is None else as_decimal(value, key, provider)


def decimal_list(payload: Mapping[str, Any], key: str, provider: str) -> List[Decimal]:
    return [as_decimal(v, key, provider) for v in _require_list(payload, key, provider)]


def int_list(payload: Mapping[str, Any], key: str, provider: str) -> List[int]:
    return [as_int(v, key, provider) for v in _require_list(payload, key, provider)]


def str_list(payload: Mapping[str, Any], key: str, provider: str) -> List[str]:
    values = _require_list(payload, key, provider)
    if not all(isinstance(v, str) for v in values):
        raise UpstreamContractViolationError(f"{provider} '{key}' must contain strings", provider=provider)
    return list(values)


def _require_list(payload: Mapping[str, Any], key: str, provider: str) -> list:
    value = require(payload, key, provider)
    if not isinstance(value, list):
        raise UpstreamContractViolationError(f"{provider} '{key}' must be a list", provider=provider)
    return value
