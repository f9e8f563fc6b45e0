"""Health check endpoints."""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status

from forecast_api.core.dependencies import get_health_service
from forecast_api.services.health_service import HealthCheckService, HealthStatus

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check(
    response: Response,
    health_service: HealthCheckService = Depends(get_health_service),
) -> Dict[str, Any]:
    """
    Health check with database and upstream provider checks.

    Returns HTTP 200 if all components are healthy.
    Returns HTTP 503 if any component is unhealthy.
    """
    health_data = await health_service.get_overall_health()

    # Set HTTP status code based on health
    if health_data["status"] == HealthStatus.UNHEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        response.status_code = status.HTTP_200_OK

    return health_data
