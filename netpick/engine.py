"""Selection pipeline for netpick.

    resolve location -> build catalog -> probe -> score -> select

Public API:
    select_best_servers -- rank reachable servers for a known location
    run_selection       -- full pipeline starting from geolocation
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional

from netpick.catalog import ServerCatalog
from netpick.config import Settings
from netpick.errors import NoReachableServersError
from netpick.location import GeolocationResolver
from netpick.models import Location, ProbeResult, ScoredServer, SelectionReport, ServerCandidate
from netpick.prober import LatencyProber
from netpick.scoring import score_candidates, select_servers

logger = logging.getLogger(__name__)


def _default_catalog(settings: Settings) -> ServerCatalog:
    return ServerCatalog(timeout=settings.geo_timeout, debug=settings.debug)


def _default_prober(settings: Settings) -> LatencyProber:
    return LatencyProber(
        concurrency=settings.probe_concurrency,
        timeout=settings.probe_timeout,
        attempts=settings.probe_attempts,
        debug=settings.debug,
    )


Budget = Callable[[], Optional[float]]


def _budget(deadline: Optional[float]) -> Budget:
    """Return a callable giving the seconds left of one overall *deadline*."""
    if deadline is None:
        return lambda: None
    loop = asyncio.get_running_loop()
    expires = loop.time() + deadline
    return lambda: max(expires - loop.time(), 0.0)


async def _gather_candidates(
    location: Location,
    settings: Settings,
    catalog: Optional[ServerCatalog],
    prober: Optional[LatencyProber],
    remaining: Budget,
) -> tuple[tuple[ServerCandidate, ...], Mapping[str, ProbeResult]]:
    catalog = catalog or _default_catalog(settings)
    prober = prober or _default_prober(settings)

    candidates = await catalog.build_candidates(location, deadline=remaining())
    probes = await prober.probe(candidates, deadline=remaining())
    if settings.debug:
        reachable = sum(1 for p in probes.values() if p.success)
        logger.debug("Probed %d candidates, %d reachable", len(candidates), reachable)
    return candidates, probes


def _rank(
    candidates: tuple[ServerCandidate, ...],
    probes: Mapping[str, ProbeResult],
    max_count: int,
) -> list[ScoredServer]:
    scored = score_candidates(candidates, probes)
    if not scored:
        raise NoReachableServersError(len(candidates))
    return select_servers(scored, max_count)


async def select_best_servers(
    location: Location,
    max_count: int = 3,
    *,
    settings: Optional[Settings] = None,
    catalog: Optional[ServerCatalog] = None,
    prober: Optional[LatencyProber] = None,
) -> list[ScoredServer]:
    """Return up to *max_count* reachable servers, best first.

    Fewer than *max_count* servers are returned when fewer answered; the
    list is never padded with unreachable ones.

    Raises
    ------
    NoReachableServersError
        If no candidate answered a probe.
    ValueError
        If *max_count* is less than 1.
    """
    if max_count < 1:
        raise ValueError(f"max_count must be >= 1, got {max_count}")
    settings = settings or Settings()
    candidates, probes = await _gather_candidates(
        location, settings, catalog, prober, _budget(settings.deadline),
    )
    return _rank(candidates, probes, max_count)


async def run_selection(
    settings: Settings,
    *,
    resolver: Optional[GeolocationResolver] = None,
    catalog: Optional[ServerCatalog] = None,
    prober: Optional[LatencyProber] = None,
) -> SelectionReport:
    """Run the whole pipeline and return a report.

    On :class:`NoReachableServersError` the partially filled report is
    attached to the exception as ``report`` before it propagates.
    """
    resolver = resolver or GeolocationResolver(timeout=settings.geo_timeout, debug=settings.debug)
    remaining = _budget(settings.deadline)
    resolution = await resolver.resolve(deadline=remaining())

    report = SelectionReport(
        location=resolution.location,
        used_fallback=resolution.used_fallback,
        attempts=resolution.attempts,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )

    report.candidates, report.probes = await _gather_candidates(
        resolution.location, settings, catalog, prober, remaining,
    )
    try:
        report.servers = _rank(report.candidates, report.probes, settings.max_servers)
    except NoReachableServersError as exc:
        report.error = str(exc)
        exc.report = report
        raise

    return report
