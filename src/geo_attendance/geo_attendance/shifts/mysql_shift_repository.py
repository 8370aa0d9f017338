from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.coordinates import Coordinate, format_coordinate, parse_coordinate
from ..core.enums import ComplianceTier, JustificationState
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewEntry, ShiftRecord
from .repository import ShiftRecordRepository

_COLUMNS = """
    shift_id, employee_id, work_date,
    entry_time, entry_coords, entry_photo,
    exit_time, exit_coords, exit_photo,
    minutes_late, compliance_tier, early_warning, justification, observations
"""


def _to_record(r: dict) -> ShiftRecord:
    tier = r.get("compliance_tier")
    return ShiftRecord(
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        entry_time=r.get("entry_time"),
        entry_coords=parse_coordinate(r.get("entry_coords")),
        entry_photo=r.get("entry_photo"),
        exit_time=r.get("exit_time"),
        exit_coords=parse_coordinate(r.get("exit_coords")),
        exit_photo=r.get("exit_photo"),
        minutes_late=int(r.get("minutes_late") or 0),
        compliance_tier=ComplianceTier(tier) if tier else None,
        early_warning=bool(r.get("early_warning")),
        justification=JustificationState(r.get("justification") or JustificationState.UNJUSTIFIED_PENDING.value),
        observations=r.get("observations"),
    )


class MySQLShiftRecordRepository(ShiftRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shift_records WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_records
                WHERE employee_id=%s AND work_date=%s
                ORDER BY entry_time ASC, shift_id ASC
                """,
                (int(employee_id), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def find_open(self, employee_id: int, work_date: date) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_records
                WHERE employee_id=%s AND work_date=%s
                  AND entry_time IS NOT NULL AND exit_time IS NULL
                ORDER BY entry_time DESC, shift_id DESC
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_latest_open(self, employee_id: int, *, up_to: date) -> Optional[ShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_records
                WHERE employee_id=%s AND work_date<=%s
                  AND entry_time IS NOT NULL AND exit_time IS NULL
                ORDER BY work_date DESC, entry_time DESC, shift_id DESC
                LIMIT 1
                """,
                (int(employee_id), up_to),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_entry(self, entry: NewEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_records(
                    employee_id, work_date, entry_time, entry_coords, entry_photo,
                    minutes_late, compliance_tier, early_warning
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(entry.employee_id),
                    entry.work_date,
                    entry.entry_time,
                    format_coordinate(entry.entry_coords),
                    entry.entry_photo,
                    int(entry.minutes_late),
                    entry.compliance_tier.value if entry.compliance_tier else None,
                    int(entry.early_warning),
                ),
            )
            return int(cur.lastrowid)

    def update_exit(
        self,
        *,
        shift_id: int,
        exit_time: datetime,
        exit_coords: Coordinate,
        exit_photo: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_records
                SET exit_time=%s, exit_coords=%s, exit_photo=%s
                WHERE shift_id=%s AND entry_time IS NOT NULL AND exit_time IS NULL
                """,
                (exit_time, format_coordinate(exit_coords), exit_photo, int(shift_id)),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_records
                SET entry_time=%s, exit_time=%s, minutes_late=%s, compliance_tier=%s,
                    early_warning=%s, observations=%s
                WHERE shift_id=%s
                """,
                (
                    entry_time,
                    exit_time,
                    int(minutes_late),
                    compliance_tier.value if compliance_tier else None,
                    int(early_warning),
                    observations,
                    int(shift_id),
                ),
            )
            return cur.rowcount > 0

    def set_justification(self, *, shift_id: int, justification: JustificationState, observations: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shift_records SET justification=%s, observations=%s WHERE shift_id=%s",
                (justification.value, observations, int(shift_id)),
            )
            return cur.rowcount > 0

    def delete(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_records WHERE shift_id=%s", (int(shift_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[ShiftRecord]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_records
                WHERE {where}
                ORDER BY work_date DESC, employee_id ASC, entry_time ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
