from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.coordinates import parse_coordinate
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkLocation
from .repository import LocationRepository

logger = logging.getLogger(__name__)

_COLUMNS = "location_id, name, address, coordinates, tolerance_meters, is_active"


def _to_location(r: dict) -> Optional[WorkLocation]:
    center = parse_coordinate(r.get("coordinates"))
    if center is None:
        logger.warning("work location %s has unparseable coordinates %r", r["location_id"], r.get("coordinates"))
        return None
    return WorkLocation(
        location_id=int(r["location_id"]),
        name=r["name"],
        address=r.get("address"),
        center=center,
        tolerance_meters=float(r["tolerance_meters"]) if r.get("tolerance_meters") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, location_id: int) -> Optional[WorkLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_locations WHERE location_id=%s", (int(location_id),))
            r = fetchone(cur)
            return _to_location(r) if r else None

    def list_active(self) -> Sequence[WorkLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_locations WHERE is_active=1 ORDER BY location_id")
            locations = [_to_location(r) for r in fetchall(cur)]
            return [loc for loc in locations if loc is not None]
