"""Quality scoring and ranking of probed candidates."""

from __future__ import annotations

from typing import Iterable, Mapping

from netpick.errors import NoReachableServersError
from netpick.models import ProbeResult, ScoredServer, ServerCandidate

BASE_SCORE = 10000.0


def quality_score(weight: float, distance_km: float, latency_ms: float) -> float:
    """Higher is better.

    ``(10000 * weight) / (max(latency_ms, 1) + max(distance_km / 100, 1))``;
    the floors keep a near-zero latency or distance from dominating.
    """
    latency_penalty = max(latency_ms, 1.0)
    distance_penalty = max(distance_km / 100.0, 1.0)
    return (BASE_SCORE * weight) / (latency_penalty + distance_penalty)


def score_candidates(
    candidates: Iterable[ServerCandidate],
    probes: Mapping[str, ProbeResult],
) -> tuple[ScoredServer, ...]:
    """Score every candidate whose probe succeeded; others are left out."""
    scored = []
    for candidate in candidates:
        probe = probes.get(candidate.id)
        if probe is None or not probe.success or probe.latency_ms is None:
            continue
        scored.append(
            ScoredServer(
                candidate=candidate,
                distance_km=candidate.distance_km,
                latency_ms=probe.latency_ms,
                quality=quality_score(candidate.weight, candidate.distance_km, probe.latency_ms),
            )
        )
    return tuple(scored)


def rank_key(server: ScoredServer) -> tuple[float, float, str]:
    """Quality descending, then latency ascending, then name."""
    return (-server.quality, server.latency_ms, server.candidate.name)


def select_servers(scored: Iterable[ScoredServer], max_count: int) -> list[ScoredServer]:
    """Return the best ``min(max_count, len(scored))`` servers in rank order.

    Raises
    ------
    ValueError
        If *max_count* is less than 1.
    NoReachableServersError
        If *scored* is empty.  Callers must treat this as a failed run,
        not as a short list.
    """
    if max_count < 1:
        raise ValueError(f"max_count must be >= 1, got {max_count}")
    ranked = sorted(scored, key=rank_key)
    if not ranked:
        raise NoReachableServersError()
    return ranked[:max_count]
