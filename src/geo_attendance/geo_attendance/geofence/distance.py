from __future__ import annotations

import math

from ..common.coordinates import Coordinate
from ..core.constants import EARTH_RADIUS_KM


def haversine_meters(p1: Coordinate, p2: Coordinate) -> float:
    """Great-circle distance between two points, in meters."""
    d_lat = math.radians(p2.lat - p1.lat)
    d_lng = math.radians(p2.lng - p1.lng)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(p1.lat)) * math.cos(math.radians(p2.lat)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000
