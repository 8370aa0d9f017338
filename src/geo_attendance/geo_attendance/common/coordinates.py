from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

_PAIR_RE = re.compile(r"\(\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*\)")


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in decimal degrees."""

    lat: float
    lng: float

    def is_in_range(self) -> bool:
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0


def format_coordinate(point: Optional[Coordinate]) -> Optional[str]:
    """Encode a point as the stored ``"(lat,lng)"`` text pair."""
    if point is None:
        return None
    return f"({point.lat},{point.lng})"


def parse_coordinate(value: Any) -> Optional[Coordinate]:
    """Decode the stored ``"(lat,lng)"`` text pair.

    Returns None for empty or malformed values so report screens can keep
    rendering rows with bad legacy data.
    """
    if value is None:
        return None
    if isinstance(value, Coordinate):
        return value

    match = _PAIR_RE.search(str(value))
    if not match:
        return None
    return Coordinate(lat=float(match.group(1)), lng=float(match.group(2)))
