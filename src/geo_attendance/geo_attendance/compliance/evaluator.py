from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import combine
from ..core.constants import EARLY_ALERT_MAX_MINUTES, YELLOW_MAX_MINUTES
from ..core.enums import ComplianceTier, LeaveKind
from ..employees.model import Employee
from ..employees.schedule import resolve_schedule
from ..leaves.service import LeaveService


@dataclass(frozen=True)
class ComplianceResult:
    minutes_late: int
    tier: ComplianceTier
    early_warning: bool


def minutes_late(actual: datetime, scheduled: datetime) -> int:
    """Whole minutes after the scheduled time; never negative."""
    seconds = (actual - scheduled).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def tier_for(late: int, leave_kind: Optional[LeaveKind] = None) -> ComplianceTier:
    """Map lateness to a tier; an active leave replaces the tier outright.

    Each boundary belongs to the less severe tier: 5 minutes is still an
    early alert, 15 minutes is still yellow.
    """
    if leave_kind is not None:
        return ComplianceTier.for_leave(leave_kind)
    if late <= 0:
        return ComplianceTier.ON_TIME
    if late <= EARLY_ALERT_MAX_MINUTES:
        return ComplianceTier.EARLY_ALERT
    if late <= YELLOW_MAX_MINUTES:
        return ComplianceTier.YELLOW
    return ComplianceTier.RED


def classify(actual: datetime, scheduled: datetime, leave_kind: Optional[LeaveKind] = None) -> ComplianceResult:
    late = 0 if leave_kind is not None else minutes_late(actual, scheduled)
    tier = tier_for(late, leave_kind)
    return ComplianceResult(minutes_late=late, tier=tier, early_warning=tier == ComplianceTier.EARLY_ALERT)


class ComplianceEvaluator:
    """Scores an entry punch against the employee's schedule and leave state."""

    def __init__(self, leaves: Optional[LeaveService] = None):
        self._leaves = leaves

    def leave_kind_for(self, employee_id: int, day: date) -> Optional[LeaveKind]:
        if not self._leaves:
            return None
        leave = self._leaves.active_leave_for(employee_id, day)
        return leave.kind if leave else None

    def evaluate_entry(self, employee: Employee, work_date: date, entry_time: datetime) -> ComplianceResult:
        scheduled_entry, _ = resolve_schedule(employee)
        leave_kind = self.leave_kind_for(employee.employee_id, work_date)
        return classify(entry_time, combine(work_date, scheduled_entry), leave_kind)
