from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.coordinates import Coordinate
from ..core.constants import DEFAULT_TOLERANCE_METERS


@dataclass(frozen=True)
class WorkLocation:
    """Entidad de dominio: zona de trabajo autorizada (centro + radio)."""

    location_id: int
    name: str
    address: Optional[str]
    center: Coordinate
    tolerance_meters: Optional[float] = None
    is_active: bool = True

    @property
    def effective_tolerance(self) -> float:
        return float(self.tolerance_meters or DEFAULT_TOLERANCE_METERS)
