"""Client geolocation via a fallback chain of free APIs."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Callable, Optional, Sequence

import httpx

from netpick.config import (
    FALLBACK_CITY,
    FALLBACK_COUNTRY,
    FALLBACK_LAT,
    FALLBACK_LON,
    FALLBACK_SOURCE,
    GEO_TIMEOUT,
    PLACEHOLDER_NAMES,
    USER_AGENT,
)
from netpick.errors import LocationValidationError, ProviderFailure
from netpick.models import Location, LookupAttempt, Resolution
from netpick.providers import default_chain
from netpick.providers.base import GeoProvider

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _clean_name(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise LocationValidationError(f"Invalid {field_name}: {value!r}")
    cleaned = value.strip()
    if not cleaned or cleaned.lower() in PLACEHOLDER_NAMES:
        raise LocationValidationError(f"Invalid {field_name}: {value!r}")
    return cleaned


def _coerce_coordinate(value: Any, field_name: str, limit: float) -> float:
    # bool is an int subclass; a JSON true is never a coordinate
    if value is None or isinstance(value, bool):
        raise LocationValidationError(f"Invalid {field_name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise LocationValidationError(f"Invalid {field_name}: {value!r}") from None
    if not math.isfinite(number) or not -limit <= number <= limit:
        raise LocationValidationError(f"{field_name} out of range: {value!r}")
    return number


def validate_location(
    country: Any,
    city: Any,
    latitude: Any,
    longitude: Any,
    isp: Any = None,
    source: str = FALLBACK_SOURCE,
) -> Location:
    """Build a :class:`Location` from raw provider values.

    Raises
    ------
    LocationValidationError
        If a name is empty, a coordinate is not a number in range, or the
        pair is exactly (0, 0), which providers emit as a parse default.
    """
    country = _clean_name(country, "country")
    city = _clean_name(city, "city")
    lat = _coerce_coordinate(latitude, "latitude", 90.0)
    lon = _coerce_coordinate(longitude, "longitude", 180.0)
    if lat == 0.0 and lon == 0.0:
        raise LocationValidationError("Invalid coordinates: (0, 0)")

    isp_name = isp.strip() if isinstance(isp, str) and isp.strip() else None
    return Location(
        country=country,
        city=city,
        latitude=lat,
        longitude=lon,
        isp=isp_name,
        source=source,
    )


def fallback_location() -> Location:
    """The fixed location used when every provider fails."""
    return Location(
        country=FALLBACK_COUNTRY,
        city=FALLBACK_CITY,
        latitude=FALLBACK_LAT,
        longitude=FALLBACK_LON,
        isp=None,
        source=FALLBACK_SOURCE,
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class GeolocationResolver:
    """Walks an ordered provider chain until one yields a valid location.

    Providers are tried strictly in order; the order encodes preference, so
    they are never raced.  Each attempt is bounded by ``timeout`` seconds
    and its outcome is recorded as a :class:`LookupAttempt`.  Failures are
    only reported as trace diagnostics when ``debug`` is set.
    """

    def __init__(
        self,
        providers: Optional[Sequence[GeoProvider]] = None,
        timeout: float = GEO_TIMEOUT,
        debug: bool = False,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.providers = list(providers) if providers is not None else default_chain()
        self.timeout = timeout
        self.debug = debug
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def resolve(self, deadline: Optional[float] = None) -> Resolution:
        """Resolve the client location.  Never raises.

        Parameters
        ----------
        deadline:
            Optional overall budget in seconds for the whole chain.  When it
            runs out the in-flight lookup is abandoned as a timeout and the
            fallback location is returned.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        attempts: list[LookupAttempt] = []

        for provider in self.providers:
            bound = self.timeout
            if deadline is not None:
                remaining = deadline - (loop.time() - started)
                if remaining <= 0:
                    attempt = LookupAttempt(
                        provider=provider.slug,
                        failure=ProviderFailure.TIMEOUT,
                        detail="overall deadline exceeded",
                    )
                    attempts.append(attempt)
                    self._trace(provider, attempt)
                    continue
                bound = min(bound, remaining)

            attempt = await self._attempt(provider, bound)
            attempts.append(attempt)
            if attempt.ok:
                return Resolution(location=attempt.location, used_fallback=False, attempts=tuple(attempts))
            self._trace(provider, attempt)

        if self.debug:
            logger.debug("[TRACE] All geolocation providers failed, using %s, %s", FALLBACK_CITY, FALLBACK_COUNTRY)
        return Resolution(location=fallback_location(), used_fallback=True, attempts=tuple(attempts))

    async def _attempt(self, provider: GeoProvider, bound: float) -> LookupAttempt:
        """Run one provider lookup and classify the outcome."""

        def failed(kind: ProviderFailure, detail: str) -> LookupAttempt:
            return LookupAttempt(provider=provider.slug, failure=kind, detail=detail)

        try:
            response = await asyncio.wait_for(self._fetch(provider), timeout=bound)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            return failed(ProviderFailure.TIMEOUT, f"timed out after {bound:.1f}s: {exc}")
        except httpx.HTTPError as exc:
            return failed(ProviderFailure.NETWORK_ERROR, f"request failed: {exc}")

        if not response.is_success:
            return failed(ProviderFailure.HTTP_STATUS, f"HTTP error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            return failed(ProviderFailure.PARSE_ERROR, f"invalid JSON: {exc}")
        if not isinstance(data, dict):
            return failed(ProviderFailure.PARSE_ERROR, f"unexpected body type: {type(data).__name__}")

        message = provider.error_message(data)
        if message is not None:
            return failed(ProviderFailure.API_ERROR, f"API error: {message}")

        try:
            fields = provider.parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            return failed(ProviderFailure.PARSE_ERROR, f"missing or malformed field: {exc!r}")

        try:
            location = validate_location(source=provider.slug, **fields)
        except LocationValidationError as exc:
            return failed(ProviderFailure.VALIDATION_ERROR, str(exc))

        return LookupAttempt(provider=provider.slug, location=location)

    async def _fetch(self, provider: GeoProvider) -> httpx.Response:
        async with self._client_factory() as client:
            return await client.get(provider.lookup_url)

    def _trace(self, provider: GeoProvider, attempt: LookupAttempt) -> None:
        if self.debug:
            logger.debug(
                "[TRACE] %s geolocation failed (%s): %s",
                provider.name,
                attempt.failure.value if attempt.failure else "unknown",
                attempt.detail,
            )


async def resolve_location(
    timeout: float = GEO_TIMEOUT,
    debug: bool = False,
    deadline: Optional[float] = None,
) -> tuple[Location, bool]:
    """Resolve with the default provider chain; returns (location, used_fallback)."""
    resolution = await GeolocationResolver(timeout=timeout, debug=debug).resolve(deadline=deadline)
    return resolution.location, resolution.used_fallback
