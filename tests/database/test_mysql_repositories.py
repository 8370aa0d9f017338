from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest
from mysql.connector.constants import ClientFlag

from src.geo_attendance.geo_attendance.compliance.adjustments import AdjustmentService
from src.geo_attendance.geo_attendance.compliance.evaluator import ComplianceEvaluator
from src.geo_attendance.geo_attendance.core.enums import ComplianceTier, JustificationState, Role
from src.geo_attendance.geo_attendance.core.exceptions import PersistenceFailure
from src.geo_attendance.geo_attendance.database.connection import DBConfig
from src.geo_attendance.geo_attendance.database.mysql_base import db_cursor
from src.geo_attendance.geo_attendance.locations.mysql_location_repository import (
    MySQLLocationRepository,
    _to_location,
)
from src.geo_attendance.geo_attendance.shifts.mysql_shift_repository import MySQLShiftRecordRepository, _to_record
from tests.fakes import OFFICE, InMemoryEmployees


class FakeCursor:
    def __init__(self, rows=(), rowcount=0, error=None):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.error = error
        self.statements = []
        self.closed = False

    def execute(self, sql, params=None):
        if self.error is not None:
            raise self.error
        self.statements.append((sql, params))

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, cursor=None, connect_error=None):
        self.cursor = cursor or FakeCursor()
        self.connect_error = connect_error
        self.connections = []

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self.cursor)
        self.connections.append(conn)
        return conn


def _shift_row(**overrides):
    row = {
        "shift_id": 7,
        "employee_id": 1,
        "work_date": date(2025, 3, 3),
        "entry_time": datetime(2025, 3, 3, 8, 20),
        "entry_coords": "(18.4917,-69.90167)",
        "entry_photo": None,
        "exit_time": None,
        "exit_coords": None,
        "exit_photo": None,
        "minutes_late": 20,
        "compliance_tier": "rojo",
        "early_warning": 0,
        "justification": None,
        "observations": None,
    }
    row.update(overrides)
    return row


def test_connect_args_count_matched_rows():
    config = DBConfig.from_dict({"host": "db", "user": "app", "database": "attendance"})
    assert config.connect_args()["client_flags"] == [ClientFlag.FOUND_ROWS]
    assert "database" not in config.connect_args(with_database=False)


def test_db_cursor_commits_and_closes():
    factory = FakeFactory()
    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    conn = factory.connections[0]
    assert conn.commits == 1
    assert conn.rollbacks == 0
    assert conn.closed
    assert factory.cursor.closed


def test_driver_error_rolls_back_and_keeps_message():
    factory = FakeFactory(FakeCursor(error=mysql.connector.Error("boom")))

    with pytest.raises(PersistenceFailure, match="boom"):
        with db_cursor(factory) as (_, cur):
            cur.execute("UPDATE shift_records SET minutes_late=0")

    conn = factory.connections[0]
    assert conn.commits == 0
    assert conn.rollbacks == 1
    assert conn.closed
    assert factory.cursor.closed


def test_other_errors_roll_back_and_propagate():
    factory = FakeFactory()
    with pytest.raises(KeyError):
        with db_cursor(factory):
            raise KeyError("shift_id")

    conn = factory.connections[0]
    assert conn.rollbacks == 1
    assert conn.closed


def test_connect_failure_is_persistence_failure():
    factory = FakeFactory(connect_error=mysql.connector.Error("Can't connect to MySQL server"))
    with pytest.raises(PersistenceFailure, match="Can't connect"):
        with db_cursor(factory):
            pass
    assert factory.connections == []


def test_shift_row_decoding():
    record = _to_record(_shift_row(compliance_tier="amarillo", early_warning=1, minutes_late=None))
    assert record.entry_coords == OFFICE
    assert record.exit_coords is None
    assert record.compliance_tier == ComplianceTier.YELLOW
    assert record.early_warning is True
    assert record.minutes_late == 0
    assert record.justification == JustificationState.UNJUSTIFIED_PENDING
    assert record.is_open

    record = _to_record(_shift_row(compliance_tier=None, early_warning=0, justification="justificado"))
    assert record.compliance_tier is None
    assert record.early_warning is False
    assert record.justification == JustificationState.JUSTIFIED


def test_location_row_decoding():
    location = _to_location(
        {
            "location_id": 1,
            "name": "Oficina Principal",
            "address": None,
            "coordinates": "(18.4917,-69.90167)",
            "tolerance_meters": "100",
            "is_active": 1,
        }
    )
    assert location.center == OFFICE
    assert location.tolerance_meters == 100.0
    assert location.is_active is True

    assert _to_location({"location_id": 2, "name": "Rota", "coordinates": "sin datos"}) is None


def test_list_active_skips_malformed_locations():
    rows = [
        {"location_id": 1, "name": "Oficina Principal", "coordinates": "(18.4917,-69.90167)", "tolerance_meters": None},
        {"location_id": 2, "name": "Rota", "coordinates": "", "tolerance_meters": 50},
    ]
    repo = MySQLLocationRepository(FakeFactory(FakeCursor(rows=rows)))

    locations = repo.list_active()

    assert [loc.location_id for loc in locations] == [1]
    assert locations[0].tolerance_meters is None


def test_unchanged_justification_is_not_reported_missing():
    # rowcount stays 0 when the UPDATE writes the values already stored
    cursor = FakeCursor(rows=[_shift_row(justification="injustificado")], rowcount=0)
    service = AdjustmentService(
        MySQLShiftRecordRepository(FakeFactory(cursor)),
        InMemoryEmployees({}),
        ComplianceEvaluator(),
    )

    for _ in range(2):
        record = service.resolve_justification(
            current_role=Role.ADMIN, actor="admin", shift_id=7, decision="injustificado"
        )

    assert record.justification == JustificationState.UNJUSTIFIED
    updates = [sql for sql, _ in cursor.statements if sql.startswith("UPDATE")]
    assert len(updates) == 2
