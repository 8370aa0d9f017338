from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, LeaveKind
from .model import LeaveState


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        kind: LeaveKind,
        start_date: date,
        end_date: Optional[date],
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveState]:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        approval: ApprovalStatus,
        decided_by: str,
        admin_comments: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def list_approved_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveState]:
        """Approved leaves of one employee intersecting [start, end], newest first."""

        raise NotImplementedError
