"""Domain error taxonomy.

Every error the service raises on purpose derives from ForecastApiError.
The API layer maps each class to an HTTP status in api/error_handlers.py.
"""
from typing import Any, Optional


class ForecastApiError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ForecastApiError, ValueError):
    """Bad coordinates, name or other caller input."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class OutOfRangeError(ValidationError):
    """A numeric value fell outside its allowed range."""


class InvalidRangeError(ValidationError):
    """A pair of bounds is inverted (maximum below minimum)."""


class LocationNotFoundError(ForecastApiError, LookupError):
    """No location with the requested id."""

    def __init__(self, location_id: int):
        super().__init__(f"Location {location_id} not found")
        self.location_id = location_id


class InvalidTargetError(ForecastApiError):
    """Geolocation of an IP address or hostname failed."""

    def __init__(self, target: str, reason: Optional[str] = None):
        message = f"Could not geolocate target '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.target = target
        self.reason = reason


class UpstreamError(ForecastApiError):
    """Base class for failures talking to an external provider."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class UpstreamUnavailableError(UpstreamError):
    """Circuit open, or the provider kept failing after retries."""


class UpstreamTimeoutError(UpstreamError):
    """The provider did not answer within the total request budget."""


class UpstreamContractViolationError(UpstreamError):
    """The provider answered with a malformed or inconsistent payload."""


class StorageError(ForecastApiError):
    """The persistence store rejected an operation or is unavailable."""


class DuplicateLocationError(StorageError):
    """Insert lost the race on the (latitude, longitude) uniqueness constraint."""

    def __init__(self, latitude: Any, longitude: Any):
        super().__init__(f"Location ({latitude}, {longitude}) already exists")
        self.latitude = latitude
        self.longitude = longitude
