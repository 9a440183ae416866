"""Straight-line geometry helpers."""

from __future__ import annotations

import math
from typing import Tuple

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 50.0

Coordinate = Tuple[float, float]  # lat, lon


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Out-of-range input can push `a` a hair outside [0, 1].
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(origin: Coordinate, target: Coordinate) -> float:
    return haversine_km(origin[0], origin[1], target[0], target[1])


def estimate_travel_minutes(distance: float, speed_kmh: float = DEFAULT_SPEED_KMH) -> int:
    """Rough door-to-door minutes assuming a constant average speed.

    This is a straight-line estimate, not a route.
    """
    if speed_kmh <= 0:
        raise ValueError("speed_kmh must be positive")
    return math.ceil(max(distance, 0.0) / speed_kmh * 60)
