"""IP geolocation lookups over HTTP (ipapi.co with ip-api.com fallback)."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from video_analytics.domain.entities import LocationData
from video_analytics.domain.ports import ClockPort, LocationLookupPort
from video_analytics.infrastructure.config.settings import Settings

logger = structlog.get_logger()

UNKNOWN = "Unknown"
PRIMARY_PROVIDER = "ipapi.co"
FALLBACK_PROVIDER = "ip-api.com"


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def parse_ipapi_co(data: dict[str, Any]) -> LocationData:
    """Normalize an ipapi.co payload."""
    return LocationData(
        country=data.get("country_name") or UNKNOWN,
        region=data.get("region") or UNKNOWN,
        city=data.get("city") or UNKNOWN,
        country_code=data.get("country_code") or None,
        region_code=data.get("region_code") or None,
        postal=data.get("postal") or "",
        latitude=_as_float(data.get("latitude")),
        longitude=_as_float(data.get("longitude")),
        timezone=data.get("timezone") or "",
        org=data.get("org") or "",
    )


def parse_ip_api_com(data: dict[str, Any]) -> LocationData:
    """Normalize an ip-api.com payload."""
    return LocationData(
        country=data.get("country") or UNKNOWN,
        region=data.get("regionName") or UNKNOWN,
        city=data.get("city") or UNKNOWN,
        country_code=data.get("countryCode") or None,
        region_code=data.get("region") or None,
        postal=data.get("zip") or "",
        latitude=_as_float(data.get("lat")),
        longitude=_as_float(data.get("lon")),
        timezone=data.get("timezone") or "",
        org=data.get("isp") or "",
    )


_PARSERS: dict[str, Callable[[dict[str, Any]], LocationData]] = {
    PRIMARY_PROVIDER: parse_ipapi_co,
    FALLBACK_PROVIDER: parse_ip_api_com,
}


def _is_error_payload(data: dict[str, Any]) -> bool:
    # ipapi.co: {"error": true, "reason": ...}; ip-api.com: {"status": "fail", "message": ...}
    return bool(data.get("error")) or data.get("status") == "fail"


class IpGeolocationClient(LocationLookupPort):
    """Geolocation lookups with caching, a failed-IP set and request spacing.

    Requests are serialized so consecutive provider calls are at least
    location_min_request_interval_seconds apart. IPs that were rate limited
    or failed are not retried for the lifetime of the client.
    """

    def __init__(
        self,
        settings: Settings,
        clock: ClockPort,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize geolocation client."""
        self.primary_url = settings.location_primary_url
        self.fallback_url = settings.location_fallback_url
        self.min_interval = timedelta(seconds=settings.location_min_request_interval_seconds)
        self.cache_ttl = timedelta(seconds=settings.location_cache_ttl_seconds)
        self.clock = clock
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.location_timeout_seconds),
            headers={"User-Agent": settings.location_user_agent},
            transport=transport,
            follow_redirects=True,
        )
        self._cache: dict[str, tuple[LocationData, datetime]] = {}
        self._failed_ips: set[str] = set()
        self._last_request_at: datetime | None = None
        self._request_lock = asyncio.Lock()

    @property
    def failed_ips(self) -> frozenset[str]:
        return frozenset(self._failed_ips)

    def _cached(self, ip_address: str) -> LocationData | None:
        entry = self._cache.get(ip_address)
        if entry is None:
            return None
        location, expires_at = entry
        if self.clock.now() >= expires_at:
            del self._cache[ip_address]
            return None
        return location

    async def get_location_data(self, ip_address: str) -> LocationData | None:
        """Look up location for an IP address, or None when unknown."""
        cached = self._cached(ip_address)
        if cached is not None:
            return cached

        if ip_address in self._failed_ips:
            return None

        async with self._request_lock:
            await self._wait_for_slot()
            try:
                response, provider = await self._fetch(ip_address)
            except httpx.HTTPError as e:
                logger.warning("location_lookup_failed", ip=ip_address, error=str(e))
                self._failed_ips.add(ip_address)
                return None
            finally:
                self._last_request_at = self.clock.now()

        if not response.is_success:
            logger.warning(
                "location_provider_error",
                ip=ip_address,
                provider=provider,
                status_code=response.status_code,
            )
            if response.status_code == 429:
                self._failed_ips.add(ip_address)
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("location_payload_invalid", ip=ip_address, provider=provider, error=str(e))
            self._failed_ips.add(ip_address)
            return None

        if not isinstance(data, dict) or _is_error_payload(data):
            logger.warning("location_lookup_rejected", ip=ip_address, provider=provider)
            self._failed_ips.add(ip_address)
            return None

        location = _PARSERS[provider](data)
        self._cache[ip_address] = (location, self.clock.now() + self.cache_ttl)
        logger.info("location_lookup_completed", ip=ip_address, provider=provider, country=location.country)
        return location

    async def _wait_for_slot(self) -> None:
        if self._last_request_at is None:
            return
        elapsed = self.clock.now() - self._last_request_at
        remaining = (self.min_interval - elapsed).total_seconds()
        if remaining > 0:
            await self._sleep(remaining)

    async def _fetch(self, ip_address: str) -> tuple[httpx.Response, str]:
        try:
            response = await self._client.get(self.primary_url.format(ip=ip_address))
        except httpx.TransportError as e:
            logger.info("location_primary_unreachable", ip=ip_address, error=str(e))
            return await self._get_fallback(ip_address), FALLBACK_PROVIDER

        if response.status_code == 429:
            logger.info("location_primary_rate_limited", ip=ip_address)
            return await self._get_fallback(ip_address), FALLBACK_PROVIDER
        return response, PRIMARY_PROVIDER

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _get_fallback(self, ip_address: str) -> httpx.Response:
        return await self._client.get(self.fallback_url.format(ip=ip_address))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
