from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .anomalies.detector import CrossDayAnomalyDetector
from .anomalies.pending import PendingPunchStore
from .compliance.adjustments import AdjustmentService
from .compliance.evaluator import ComplianceEvaluator
from .core.constants import DEFAULT_PENDING_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .geofence.service import GeofenceValidator
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .punches.locks import KeyedLock
from .punches.service import PunchService
from .reports.calendar import WorkCalendar
from .reports.service import ReportService
from .shifts.mysql_shift_repository import MySQLShiftRecordRepository
from .shifts.repository import ShiftRecordRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    locations_repo: LocationRepository
    shifts_repo: ShiftRecordRepository
    leaves_repo: LeaveRepository

    geofence: GeofenceValidator
    leave_service: LeaveService
    punch_service: PunchService
    adjustment_service: AdjustmentService
    report_service: ReportService


def assemble(
    *,
    employees_repo: EmployeeRepository,
    locations_repo: LocationRepository,
    shifts_repo: ShiftRecordRepository,
    leaves_repo: LeaveRepository,
    conn: Optional[DatabaseConnection] = None,
    pending_ttl_seconds: int = DEFAULT_PENDING_TTL_SECONDS,
    require_photo: bool = True,
    max_accuracy_meters: Optional[float] = None,
    calendar: Optional[WorkCalendar] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""
    geofence = GeofenceValidator(employees_repo, locations_repo)
    leave_service = LeaveService(leaves_repo, employees_repo)
    evaluator = ComplianceEvaluator(leave_service)

    punch_service = PunchService(
        shifts_repo,
        employees_repo,
        geofence,
        evaluator,
        detector=CrossDayAnomalyDetector(shifts_repo),
        pending=PendingPunchStore(ttl_seconds=pending_ttl_seconds),
        locks=KeyedLock(),
        require_photo=require_photo,
        max_accuracy_meters=max_accuracy_meters,
    )
    adjustment_service = AdjustmentService(shifts_repo, employees_repo, evaluator)
    report_service = ReportService(shifts_repo, employees_repo, locations_repo, leave_service, calendar=calendar)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        locations_repo=locations_repo,
        shifts_repo=shifts_repo,
        leaves_repo=leaves_repo,
        geofence=geofence,
        leave_service=leave_service,
        punch_service=punch_service,
        adjustment_service=adjustment_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, **options) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        employees_repo=MySQLEmployeeRepository(conn),
        locations_repo=MySQLLocationRepository(conn),
        shifts_repo=MySQLShiftRecordRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        conn=conn,
        **options,
    )
