"""Map service errors to problem-details JSON responses."""
import logging
from typing import Any, Dict, List, Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from forecast_api.domain.exceptions import (
    ForecastApiError,
    InvalidTargetError,
    LocationNotFoundError,
    StorageError,
    UpstreamContractViolationError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"

# Most specific first; the first isinstance match wins.
ERROR_STATUS: List[Tuple[Type[ForecastApiError], int, str]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Invalid request"),
    (InvalidTargetError, status.HTTP_400_BAD_REQUEST, "Invalid target"),
    (LocationNotFoundError, status.HTTP_404_NOT_FOUND, "Location not found"),
    (UpstreamTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT, "Upstream timeout"),
    (UpstreamUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "Upstream unavailable"),
    (UpstreamContractViolationError, status.HTTP_502_BAD_GATEWAY, "Upstream returned invalid data"),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY, "Upstream error"),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage error"),
]


def status_for(exc: ForecastApiError) -> Tuple[int, str]:
    for error_type, status_code, title in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, title
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"


def problem_response(request: Request, status_code: int, title: str, detail: Any, error: str) -> JSONResponse:
    body: Dict[str, Any] = {
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
        "error": error,
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), media_type=PROBLEM_JSON)


async def forecast_api_error_handler(request: Request, exc: ForecastApiError) -> JSONResponse:
    status_code, title = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return problem_response(request, status_code, title, exc.message, type(exc).__name__)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "An unexpected error occurred",
        type(exc).__name__,
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and path parameters are reported as 400, not 422."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} rejected: {len(errors)} validation error(s)")
    return problem_response(request, status.HTTP_400_BAD_REQUEST, "Invalid request", errors, "ValidationError")


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ForecastApiError, forecast_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
