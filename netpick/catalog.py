"""Candidate server catalog.

Merges servers discovered from a public directory with a static set of
regional hubs and global CDN entries.  The static half always contributes
at least one GLOBAL entry, so the catalog is never empty even when the
directory is unreachable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, Optional

import httpx

from netpick.config import (
    CONTINENT_HUBS,
    COUNTRY_SERVERS,
    DIRECTORY_LIMIT,
    DIRECTORY_TIMEOUT,
    DIRECTORY_URL,
    EXCHANGE_HUBS,
    GLOBAL_SERVERS,
    MAX_POOL_SIZE,
    USER_AGENT,
)
from netpick.distance import distance_km
from netpick.errors import CatalogFailure
from netpick.models import Location, ServerCandidate, ServerClass

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


def determine_continent(lat: float, lon: float) -> str:
    """Coarse continent classification from bounding boxes."""
    if lat > 15.0 and -130.0 < lon < -50.0:
        return "North America"
    if -60.0 < lat < 15.0 and -85.0 < lon < -30.0:
        return "South America"
    if lat > 35.0 and -15.0 < lon < 60.0:
        return "Europe"
    if -40.0 < lat < 40.0 and -20.0 < lon < 55.0:
        return "Africa"
    if lat > -15.0 and 60.0 < lon < 180.0:
        return "Asia"
    if lat < -10.0 and 110.0 < lon < 180.0:
        return "Oceania"
    return "Unknown"


def _hub_candidate(hub: tuple, server_class: ServerClass, location: Location) -> ServerCandidate:
    server_id, name, url, city, country_code, lat, lon = hub
    return ServerCandidate(
        id=server_id,
        name=name,
        url=url,
        server_class=server_class,
        lat=lat,
        lon=lon,
        country_code=country_code,
        city=city,
        distance_km=distance_km(location.coordinate, (lat, lon)),
    )


def static_candidates(location: Location) -> list[ServerCandidate]:
    """Well-known hubs for *location* plus the global CDN entries."""
    servers: list[ServerCandidate] = []

    country_hub = COUNTRY_SERVERS.get(location.country.strip().lower())
    if country_hub is not None:
        servers.append(_hub_candidate(country_hub, ServerClass.REGIONAL, location))

    continent = determine_continent(location.latitude, location.longitude)
    for hub in CONTINENT_HUBS.get(continent, []):
        servers.append(_hub_candidate(hub, ServerClass.REGIONAL, location))

    for hub in EXCHANGE_HUBS:
        servers.append(_hub_candidate(hub, ServerClass.CONTINENTAL, location))

    # Anycast entries have no fixed coordinates; distance stays 0
    for server_id, name, url, class_name in GLOBAL_SERVERS:
        servers.append(
            ServerCandidate(id=server_id, name=name, url=url, server_class=ServerClass(class_name))
        )

    return servers


def parse_directory(data: Any, location: Location, limit: int = DIRECTORY_LIMIT) -> list[ServerCandidate]:
    """Parse a speedtest.net-style server list.

    Format: ``[{"id": 123, "host": "server.host.com:8080", "lat": "40.7",
    "lon": "-74.0", "name": "New York", "country": "US", "sponsor": "ISP"}]``

    Entries missing a field or carrying unusable coordinates are skipped.
    """
    if not isinstance(data, list):
        return []

    servers: list[ServerCandidate] = []
    for entry in data[:limit]:
        if not isinstance(entry, dict):
            continue
        host = entry.get("host")
        name = entry.get("name")
        country = entry.get("country")
        if not (host and name and country):
            continue
        try:
            lat = float(entry["lat"])
            lon = float(entry["lon"])
        except (KeyError, TypeError, ValueError):
            continue
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            continue

        candidate = ServerCandidate(
            id=f"speedtest-{entry.get('id') or host}",
            name=f"{name}, {country}",
            url=f"https://{host}",
            server_class=ServerClass.REGIONAL,
            lat=lat,
            lon=lon,
            country_code=str(entry.get("cc") or country),
            city=str(name),
            distance_km=distance_km(location.coordinate, (lat, lon)),
        )
        # Malformed hosts (bad port, unbalanced IPv6 bracket) fail here
        try:
            candidate.endpoint_key
        except ValueError:
            continue
        servers.append(candidate)
    return servers


def merge_candidates(
    groups: Iterable[Iterable[ServerCandidate]],
    max_pool_size: int = MAX_POOL_SIZE,
) -> tuple[ServerCandidate, ...]:
    """Deduplicate by endpoint, keep the nearest *max_pool_size* entries.

    The first occurrence of an endpoint wins, except that a GLOBAL entry
    always replaces a non-GLOBAL one at the same endpoint.  The cap never
    removes the last GLOBAL entry.
    """
    index: dict[str, int] = {}
    unique: list[ServerCandidate] = []
    for group in groups:
        for candidate in group:
            key = candidate.endpoint_key
            if key not in index:
                index[key] = len(unique)
                unique.append(candidate)
            elif (
                candidate.server_class is ServerClass.GLOBAL
                and unique[index[key]].server_class is not ServerClass.GLOBAL
            ):
                unique[index[key]] = candidate

    pool = sorted(unique, key=lambda c: c.distance_km)[:max_pool_size]
    if not any(c.server_class is ServerClass.GLOBAL for c in pool):
        global_entry = next((c for c in unique if c.server_class is ServerClass.GLOBAL), None)
        if global_entry is not None:
            pool = pool[: max(max_pool_size - 1, 0)] + [global_entry]
    return tuple(pool)


class ServerCatalog:
    """Builds the candidate set for a resolved location."""

    def __init__(
        self,
        timeout: float = DIRECTORY_TIMEOUT,
        debug: bool = False,
        client_factory: Optional[ClientFactory] = None,
        directory_url: Optional[str] = DIRECTORY_URL,
        max_pool_size: int = MAX_POOL_SIZE,
    ) -> None:
        self.timeout = timeout
        self.debug = debug
        self.directory_url = directory_url
        self.max_pool_size = max_pool_size
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def build_candidates(
        self,
        location: Location,
        deadline: Optional[float] = None,
    ) -> tuple[ServerCandidate, ...]:
        """Return the deduplicated candidate set.  Never raises.

        *deadline* caps the directory request in seconds on top of the
        catalog's own timeout.
        """
        dynamic = await self.discover(location, deadline=deadline)
        candidates = merge_candidates([dynamic, static_candidates(location)], self.max_pool_size)
        if self.debug:
            logger.debug("Catalog built: %d dynamic, %d total candidates", len(dynamic), len(candidates))
        return candidates

    async def discover(self, location: Location, deadline: Optional[float] = None) -> list[ServerCandidate]:
        """Fetch nearby servers from the directory; empty list on any failure."""
        if not self.directory_url:
            return []

        bound = self.timeout if deadline is None else min(self.timeout, deadline)
        if bound <= 0:
            self._trace("overall deadline exceeded before directory request")
            return []

        try:
            data = await asyncio.wait_for(self._fetch(), timeout=bound)
        except (asyncio.TimeoutError, httpx.HTTPError, ValueError) as exc:
            self._trace(f"directory request failed: {exc}")
            return []

        servers = parse_directory(data, location)
        if not servers:
            self._trace("directory returned no usable servers")
        return servers

    async def _fetch(self) -> Any:
        async with self._client_factory() as client:
            resp = await client.get(self.directory_url)
            resp.raise_for_status()
            return resp.json()

    def _trace(self, detail: str) -> None:
        if self.debug:
            logger.debug("[TRACE] Server discovery (%s): %s", CatalogFailure.EMPTY_DYNAMIC_SET.value, detail)
