"""ip-api.com client for resolving an IP address or hostname to a position."""
import logging
from urllib.parse import quote

import httpx

from forecast_api.application.ports.providers import GeolocationResult
from forecast_api.constants import SOURCE_IP_API
from forecast_api.domain.exceptions import UpstreamContractViolationError
from forecast_api.infrastructure.external_apis import payload as p
from forecast_api.infrastructure.external_apis.resilience import ResilientCaller

logger = logging.getLogger(__name__)

RESPONSE_FIELDS = "status,message,lat,lon,city,country"


class IpApiClient:
    """Client for the ip-api.com JSON endpoint."""

    BASE_URL = "http://ip-api.com"

    def __init__(self, client: httpx.AsyncClient, caller: ResilientCaller, base_url: str = BASE_URL):
        self.client = client
        self.caller = caller
        self.base_url = base_url.rstrip("/")

    async def locate(self, target: str) -> GeolocationResult:
        """Geolocate an IP address or hostname.

        A lookup the provider could not resolve comes back with a status
        other than "success"; deciding what to do with it is left to the caller.
        """
        url = f"{self.base_url}/json/{quote(target, safe='')}"
        logger.info(f"Geolocating target '{target}' via ip-api")

        response = await self.caller.call(
            lambda: self.client.get(url, params={"fields": RESPONSE_FIELDS})
        )
        data = p.decode_json(response, SOURCE_IP_API)

        status = p.require(data, "status", SOURCE_IP_API)
        if not isinstance(status, str):
            raise UpstreamContractViolationError(f"{SOURCE_IP_API} 'status' must be a string", provider=SOURCE_IP_API)

        result = GeolocationResult(
            status=status,
            latitude=p.optional_decimal(data, "lat", SOURCE_IP_API),
            longitude=p.optional_decimal(data, "lon", SOURCE_IP_API),
            city=data.get("city"),
            country=data.get("country"),
            message=data.get("message"),
        )
        if not result.succeeded:
            logger.warning(f"ip-api could not locate '{target}': {result.message or result.status}")
        return result
