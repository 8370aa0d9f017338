from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, full_name, job_title, location_id, scheduled_entry, scheduled_exit, is_active"


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        full_name=r["full_name"],
        job_title=r.get("job_title") or "",
        location_id=int(r["location_id"]) if r.get("location_id") is not None else None,
        scheduled_entry=normalize_mysql_time(r.get("scheduled_entry")),
        scheduled_exit=normalize_mysql_time(r.get("scheduled_exit")),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE is_active=1 ORDER BY full_name")
            return [_to_employee(r) for r in fetchall(cur)]
