from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..common.coordinates import Coordinate
from ..core.enums import ComplianceTier, JustificationState
from .model import NewEntry, ShiftRecord


class ShiftRecordRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[ShiftRecord]:
        raise NotImplementedError

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[ShiftRecord]:
        """Records of one day, oldest first."""

        raise NotImplementedError

    def find_open(self, employee_id: int, work_date: date) -> Optional[ShiftRecord]:
        """Most recent record of that date with an entry and no exit."""

        raise NotImplementedError

    def find_latest_open(self, employee_id: int, *, up_to: date) -> Optional[ShiftRecord]:
        """Most recent open record on any date up to ``up_to``."""

        raise NotImplementedError

    def create_entry(self, entry: NewEntry) -> int:
        raise NotImplementedError

    def update_exit(
        self,
        *,
        shift_id: int,
        exit_time: datetime,
        exit_coords: Coordinate,
        exit_photo: Optional[str],
    ) -> bool:
        """Fill exit fields; must not overwrite an exit already present."""

        raise NotImplementedError

    def admin_update_times(
        self,
        *,
        shift_id: int,
        entry_time: Optional[datetime],
        exit_time: Optional[datetime],
        minutes_late: int,
        compliance_tier: Optional[ComplianceTier],
        early_warning: bool,
        observations: str,
    ) -> bool:
        """Admin-only override used by manual corrections.

        Returns whether the row matched, even when no value changed.
        """

        raise NotImplementedError

    def set_justification(self, *, shift_id: int, justification: JustificationState, observations: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, shift_id: int) -> bool:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftRecord]:
        raise NotImplementedError
