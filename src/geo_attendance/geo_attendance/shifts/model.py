from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.coordinates import Coordinate
from ..core.enums import ComplianceTier, JustificationState


@dataclass(frozen=True)
class ShiftRecord:
    """Entidad de dominio: par entrada/salida de un empleado en una fecha.

    exit_time may fall on a later calendar day when a forgotten exit is
    closed through the cross-day confirmation.
    """

    shift_id: int
    employee_id: int
    work_date: date
    entry_time: Optional[datetime]
    entry_coords: Optional[Coordinate] = None
    entry_photo: Optional[str] = None
    exit_time: Optional[datetime] = None
    exit_coords: Optional[Coordinate] = None
    exit_photo: Optional[str] = None
    minutes_late: int = 0
    compliance_tier: Optional[ComplianceTier] = None
    early_warning: bool = False
    justification: JustificationState = JustificationState.UNJUSTIFIED_PENDING
    observations: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.entry_time is not None and self.exit_time is None


@dataclass(frozen=True)
class NewEntry:
    """Fields written when a punch opens a record."""

    employee_id: int
    work_date: date
    entry_time: datetime
    entry_coords: Coordinate
    entry_photo: Optional[str]
    minutes_late: int
    compliance_tier: Optional[ComplianceTier]
    early_warning: bool
