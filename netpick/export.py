"""JSON export for selection results."""

from __future__ import annotations

import json
from pathlib import Path

from netpick.models import Location, ProbeResult, ScoredServer, SelectionReport, ServerCandidate


def export_json(report: SelectionReport, indent: int = 2) -> str:
    """Export a selection report as JSON string."""
    data = build_export_dict(report)
    return json.dumps(data, indent=indent, default=str)


def write_to_file(content: str, path: str) -> None:
    """Write content to a file."""
    Path(path).write_text(content, encoding="utf-8")


def build_export_dict(report: SelectionReport) -> dict:
    """Convert a SelectionReport to a serializable dict."""
    data: dict = {
        "timestamp": report.timestamp,
        "location": _location_to_dict(report.location),
        "used_fallback": report.used_fallback,
        "error": report.error,
        "attempts": [
            {
                "provider": a.provider,
                "ok": a.ok,
                "failure": a.failure.value if a.failure else None,
                "detail": a.detail,
            }
            for a in report.attempts
        ],
    }

    data["servers"] = [_scored_to_dict(rank, s) for rank, s in enumerate(report.servers, 1)]

    # Full candidate list with probe outcomes, reachable or not
    data["candidates"] = []
    for c in report.candidates:
        cdata = _candidate_to_dict(c)
        probe = report.probes.get(c.id)
        cdata["probe"] = _probe_to_dict(probe) if probe else None
        data["candidates"].append(cdata)

    return data


def _location_to_dict(loc: Location) -> dict:
    return {
        "country": loc.country,
        "city": loc.city,
        "latitude": loc.latitude,
        "longitude": loc.longitude,
        "isp": loc.isp,
        "source": loc.source,
    }


def _candidate_to_dict(c: ServerCandidate) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "url": c.url,
        "class": c.server_class.value,
        "weight": c.weight,
        "lat": c.lat,
        "lon": c.lon,
        "country_code": c.country_code,
        "city": c.city,
        "distance_km": round(c.distance_km, 1),
    }


def _probe_to_dict(p: ProbeResult) -> dict:
    return {
        "success": p.success,
        "latency_ms": p.latency_ms,
        "jitter_ms": p.jitter_ms,
        "min_ms": p.min_ms,
        "max_ms": p.max_ms,
        "median_ms": p.median_ms,
        "samples": p.samples,
        "failure": p.failure.value if p.failure else None,
        "detail": p.detail,
    }


def _scored_to_dict(rank: int, s: ScoredServer) -> dict:
    return {
        "rank": rank,
        "id": s.candidate.id,
        "name": s.name,
        "url": s.url,
        "class": s.candidate.server_class.value,
        "latency_ms": s.latency_ms,
        "distance_km": round(s.distance_km, 1),
        "quality": round(s.quality, 2),
    }
