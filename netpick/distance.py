"""Great-circle distance between coordinates."""

from __future__ import annotations

import math

from netpick.config import EARTH_RADIUS_KM

Coordinate = tuple[float, float]  # (latitude, longitude) in degrees


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance in km between two lat/lon points using the Haversine formula."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    # Rounding can push a a hair outside [0, 1] for antipodal points
    a = min(max(a, 0.0), 1.0)
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a[0], a[1], b[0], b[1])
