from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.coordinates import Coordinate
from ..core.constants import NEAREST_ZONE_MAX_METERS, UNIDENTIFIED_LOCATION
from ..core.exceptions import NoLocationAssigned, OutOfGeofence
from ..employees.repository import EmployeeRepository
from ..locations.model import WorkLocation
from ..locations.repository import LocationRepository
from .distance import haversine_meters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationValidation:
    is_valid: bool
    distance_meters: float
    tolerance_meters: float
    location_name: str
    message: str


def check_point(point: Coordinate, location: WorkLocation) -> LocationValidation:
    """Compare a point against one zone. Exactly on the radius is inside."""
    distance = haversine_meters(point, location.center)
    tolerance = location.effective_tolerance
    if distance <= tolerance:
        message = f"Ubicación validada en {location.name}. Distancia: {round(distance)}m"
        return LocationValidation(True, distance, tolerance, location.name, message)

    message = (
        f"Fuera de la ubicación asignada {location.name} ({round(distance)}m). "
        f"Debe estar dentro de {round(tolerance)}m."
    )
    return LocationValidation(False, distance, tolerance, location.name, message)


def nearest_zone(point: Optional[Coordinate], locations: Sequence[WorkLocation]) -> str:
    """Label the zone a coordinate belongs to, for report screens.

    Returns the first zone whose tolerance contains the point; otherwise the
    closest zone with its distance when within 1 km.
    """
    if point is None or not locations:
        return UNIDENTIFIED_LOCATION

    closest: Optional[WorkLocation] = None
    closest_distance = float("inf")
    for location in locations:
        result = check_point(point, location)
        if result.is_valid:
            return location.name
        if result.distance_meters < closest_distance:
            closest_distance = result.distance_meters
            closest = location

    if closest is not None and closest_distance <= NEAREST_ZONE_MAX_METERS:
        return f"{closest.name} ({round(closest_distance)}m)"
    return UNIDENTIFIED_LOCATION


class GeofenceValidator:
    """Decides whether a punch coordinate is inside the employee's zone."""

    def __init__(self, employees: EmployeeRepository, locations: LocationRepository):
        self._employees = employees
        self._locations = locations

    def _assigned_location(self, employee_id: int) -> WorkLocation:
        employee = self._employees.get_by_id(employee_id)
        if not employee or employee.location_id is None:
            raise NoLocationAssigned("No tiene una ubicación de trabajo asignada. Contacte al administrador.")

        location = self._locations.get_by_id(employee.location_id)
        if not location or not location.is_active:
            raise NoLocationAssigned("La ubicación asignada no está disponible. Contacte al administrador.")
        return location

    def validate_location(self, point: Coordinate, employee_id: int) -> LocationValidation:
        return check_point(point, self._assigned_location(employee_id))

    def ensure_within(self, point: Coordinate, employee_id: int) -> LocationValidation:
        result = self.validate_location(point, employee_id)
        if not result.is_valid:
            logger.info(
                "punch rejected for employee %s: %.0fm from %s (tolerance %.0fm)",
                employee_id,
                result.distance_meters,
                result.location_name,
                result.tolerance_meters,
            )
            raise OutOfGeofence(
                result.message,
                location_name=result.location_name,
                distance_meters=result.distance_meters,
                tolerance_meters=result.tolerance_meters,
            )
        return result

    def nearest_zone(self, point: Optional[Coordinate]) -> str:
        return nearest_zone(point, self._locations.list_active())
