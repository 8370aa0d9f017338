from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import ApprovalStatus, LeaveKind


@dataclass(frozen=True)
class LeaveState:
    """Vacation, medical leave or permit covering a date range.

    An open-ended leave has no end_date.
    """

    leave_id: int
    employee_id: int
    kind: LeaveKind
    start_date: date
    end_date: Optional[date]
    reason: Optional[str] = None
    approval: ApprovalStatus = ApprovalStatus.PENDING
    decided_by: Optional[str] = None
    admin_comments: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day and (self.end_date is None or day <= self.end_date)
