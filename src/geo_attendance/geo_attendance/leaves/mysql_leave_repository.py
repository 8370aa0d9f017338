from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, LeaveKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveState
from .repository import LeaveRepository

_COLUMNS = "leave_id, employee_id, kind, start_date, end_date, reason, approval, decided_by, admin_comments"


def _to_leave(r: dict) -> LeaveState:
    return LeaveState(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        kind=LeaveKind(r["kind"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        reason=r.get("reason"),
        approval=ApprovalStatus(r["approval"]),
        decided_by=r.get("decided_by"),
        admin_comments=r.get("admin_comments"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        kind: LeaveKind,
        start_date: date,
        end_date: Optional[date],
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_states(employee_id, kind, start_date, end_date, reason, approval)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), kind.value, start_date, end_date, reason, ApprovalStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_states WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def decide(
        self,
        *,
        leave_id: int,
        approval: ApprovalStatus,
        decided_by: str,
        admin_comments: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_states
                SET approval=%s, decided_by=%s, admin_comments=%s
                WHERE leave_id=%s AND approval=%s
                """,
                (approval.value, decided_by, admin_comments, int(leave_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_approved_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveState]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_states
                WHERE employee_id=%s AND approval=%s
                  AND start_date<=%s AND (end_date IS NULL OR end_date>=%s)
                ORDER BY created_at DESC, leave_id DESC
                """,
                (int(employee_id), ApprovalStatus.APPROVED.value, end, start),
            )
            return [_to_leave(r) for r in fetchall(cur)]
