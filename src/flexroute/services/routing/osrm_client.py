"""Async HTTP client pricing single legs with the OSRM route service."""

from __future__ import annotations

import logging
import math

import httpx

from ...config import settings
from ...models.domain import LegMetrics
from .errors import OracleFailure
from .oracle import Coordinate

logger = logging.getLogger(__name__)


class OSRMClient:
    """Distance oracle backed by OSRM's ``route`` endpoint.

    One HTTP request per :meth:`lookup`, no retries and no caching. Retry
    policy, if any, belongs to the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
        )

    async def __aenter__(self) -> "OSRMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _route_url(self, origin: Coordinate, destination: Coordinate) -> str:
        # OSRM expects "lon,lat;lon,lat"
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in (origin, destination))
        return f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

    async def lookup(self, origin: Coordinate, destination: Coordinate) -> LegMetrics:
        """Return distance (m) and duration (s) of the driving route between two points."""
        url = self._route_url(origin, destination)
        params = {
            "overview": "false",
            "alternatives": "false",
            "steps": "false",
        }
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            reason = _error_message(e.response) or f"HTTP {e.response.status_code}"
            logger.warning(f"OSRM route request failed for {origin} -> {destination}: {reason}")
            raise OracleFailure(reason, origin=origin, destination=destination) from e
        except httpx.TimeoutException as e:
            logger.warning(f"OSRM route request timed out for {origin} -> {destination}: {e}")
            raise OracleFailure("OSRM request timed out", origin=origin, destination=destination) from e
        except httpx.HTTPError as e:
            raise OracleFailure(
                f"Failed to connect to OSRM service at {self.base_url}: {e}",
                origin=origin,
                destination=destination,
            ) from e
        except ValueError as e:
            raise OracleFailure("OSRM returned a non-JSON response", origin=origin, destination=destination) from e

        if not isinstance(data, dict):
            raise OracleFailure("OSRM returned an unexpected payload", origin=origin, destination=destination)
        if data.get("code") != "Ok":
            reason = data.get("message") or data.get("code") or "Unknown OSRM route error"
            raise OracleFailure(reason, origin=origin, destination=destination)

        try:
            leg = data["routes"][0]["legs"][0]
            distance = float(leg["distance"])
            duration = float(leg["duration"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise OracleFailure(
                "OSRM response missing route legs", origin=origin, destination=destination
            ) from e
        if not all(math.isfinite(value) and value >= 0 for value in (distance, duration)):
            raise OracleFailure(
                "OSRM returned an invalid leg metric", origin=origin, destination=destination
            )
        return LegMetrics(distance=distance, duration=duration)


def _error_message(response: httpx.Response) -> str | None:
    """Extract OSRM's ``code: message`` pair from an error body, if it has one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    code = body.get("code")
    message = body.get("message")
    if code and message:
        return f"{code}: {message}"
    return code or message


async def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health by pricing one short leg.

    Public OSRM endpoints may not have a /health endpoint, so we test
    connectivity with a real route request between two Berlin points.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        async with OSRMClient(base_url=base, timeout=5.0) as client:
            await client.lookup((52.517037, 13.388860), (52.496891, 13.385983))
        return True
    except OracleFailure:
        return False
