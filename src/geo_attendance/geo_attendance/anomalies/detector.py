from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from ..core.enums import AnomalyKind
from ..shifts.model import ShiftRecord
from ..shifts.repository import ShiftRecordRepository


@dataclass(frozen=True)
class PatternCheck:
    needs_alert: bool
    kind: Optional[AnomalyKind] = None
    message: str = ""
    open_record: Optional[ShiftRecord] = None


class CrossDayAnomalyDetector:
    """Flags a first punch of the day that may belong to yesterday's shift."""

    def __init__(self, shifts: ShiftRecordRepository):
        self._shifts = shifts

    def check_pattern(self, employee_id: int, work_date: date) -> PatternCheck:
        if self._shifts.list_for_employee_and_date(employee_id, work_date):
            return PatternCheck(needs_alert=False)

        stale = self._shifts.find_open(employee_id, work_date - timedelta(days=1))
        if stale is None:
            return PatternCheck(needs_alert=False)

        entry_at = stale.entry_time.strftime("%H:%M") if stale.entry_time else "--:--"
        message = (
            f"Tiene una entrada del {stale.work_date.strftime('%d/%m/%Y')} a las {entry_at} sin salida registrada. "
            "Este registro podría corresponder a la salida de ese turno en lugar de una nueva entrada."
        )
        return PatternCheck(needs_alert=True, kind=AnomalyKind.MISSING_EXIT, message=message, open_record=stale)
