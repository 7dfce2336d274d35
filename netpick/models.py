"""Data models for netpick."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlparse

from netpick.config import CLASS_WEIGHTS
from netpick.errors import ProbeFailure, ProviderFailure


@dataclass(frozen=True)
class Location:
    """Resolved client location. Build through ``validate_location``."""

    country: str
    city: str
    latitude: float
    longitude: float
    isp: Optional[str] = None
    source: str = "fallback"  # Provider slug or "fallback"

    @property
    def coordinate(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class ServerClass(str, enum.Enum):
    """Geographic reach of a candidate server."""

    REGIONAL = "regional"
    CONTINENTAL = "continental"
    GLOBAL = "global"
    BACKUP = "backup"

    @property
    def weight(self) -> float:
        return CLASS_WEIGHTS[self.value]


@dataclass(frozen=True)
class ServerCandidate:
    """A test server eligible for selection."""

    id: str
    name: str
    url: str
    server_class: ServerClass
    lat: Optional[float] = None  # None for anycast / CDN entries
    lon: Optional[float] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    weight: Optional[float] = None  # Explicit class weight, defaults to the class table
    distance_km: float = 0.0  # Precomputed by the catalog

    def __post_init__(self) -> None:
        if self.weight is None:
            object.__setattr__(self, "weight", self.server_class.weight)

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def endpoint_key(self) -> str:
        """Normalized endpoint address used as the dedupe identity."""
        parsed = urlparse(self.url.strip())
        host = (parsed.hostname or "").lower()
        port = f":{parsed.port}" if parsed.port else ""
        path = parsed.path.rstrip("/")
        return f"{parsed.scheme.lower()}://{host}{port}{path}"


@dataclass(frozen=True)
class LatencyStats:
    """Aggregated statistics for a set of round-trip times."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0
    jitter: float = 0.0


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one candidate."""

    candidate_id: str
    success: bool
    latency_ms: Optional[float] = None  # Present only on success
    jitter_ms: float = 0.0
    min_ms: Optional[float] = None
    max_ms: Optional[float] = None
    median_ms: Optional[float] = None
    samples: int = 0  # Successful round trips
    failure: Optional[ProbeFailure] = None
    detail: Optional[str] = None


@dataclass(frozen=True)
class ScoredServer:
    """A reachable candidate with its ranking score."""

    candidate: ServerCandidate
    distance_km: float
    latency_ms: float
    quality: float

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def url(self) -> str:
        return self.candidate.url


@dataclass(frozen=True)
class LookupAttempt:
    """Tagged outcome of one geolocation provider attempt."""

    provider: str
    location: Optional[Location] = None
    failure: Optional[ProviderFailure] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class Resolution:
    """Result of walking the provider chain."""

    location: Location
    used_fallback: bool
    attempts: tuple[LookupAttempt, ...] = ()


@dataclass
class SelectionReport:
    """Complete selection run results."""

    location: Location
    used_fallback: bool
    candidates: tuple[ServerCandidate, ...] = ()
    probes: Mapping[str, ProbeResult] = field(default_factory=dict)
    servers: list[ScoredServer] = field(default_factory=list)
    attempts: tuple[LookupAttempt, ...] = ()
    timestamp: Optional[str] = None
    error: Optional[str] = None  # Fatal error for the run

    @property
    def reachable_count(self) -> int:
        return sum(1 for p in self.probes.values() if p.success)
