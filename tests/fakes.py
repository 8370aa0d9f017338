from __future__ import annotations

import io
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

from PIL import Image

from src.geo_attendance.geo_attendance.common.coordinates import Coordinate
from src.geo_attendance.geo_attendance.container import assemble
from src.geo_attendance.geo_attendance.core.constants import EARTH_RADIUS_KM
from src.geo_attendance.geo_attendance.core.enums import ApprovalStatus, LeaveKind
from src.geo_attendance.geo_attendance.employees.model import Employee
from src.geo_attendance.geo_attendance.leaves.model import LeaveState
from src.geo_attendance.geo_attendance.locations.model import WorkLocation
from src.geo_attendance.geo_attendance.punches.capture import PunchCapture
from src.geo_attendance.geo_attendance.shifts.model import NewEntry, ShiftRecord

OFFICE = Coordinate(18.4917, -69.90167)


def north_of(point: Coordinate, meters: float) -> Coordinate:
    """Point ``meters`` due north of ``point``."""
    return Coordinate(point.lat + math.degrees(meters / (EARTH_RADIUS_KM * 1000)), point.lng)


def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def capture_at(point: Optional[Coordinate], photo=None) -> PunchCapture:
    return PunchCapture(coords=point, photo=png_bytes() if photo is None else photo)


@dataclass
class InMemoryEmployees:
    employees_by_id: dict[int, Employee]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees_by_id.get(employee_id)

    def list_active(self):
        return [e for e in self.employees_by_id.values() if e.is_active]


@dataclass
class InMemoryLocations:
    locations_by_id: dict[int, WorkLocation]

    def get_by_id(self, location_id: int) -> Optional[WorkLocation]:
        return self.locations_by_id.get(location_id)

    def list_active(self):
        return [loc for loc in self.locations_by_id.values() if loc.is_active]


class InMemoryShifts:
    def __init__(self):
        self.records: dict[int, ShiftRecord] = {}
        self._id = 0

    def add(self, record: ShiftRecord) -> ShiftRecord:
        self._id = max(self._id, record.shift_id)
        self.records[record.shift_id] = record
        return record

    def get_by_id(self, shift_id: int) -> Optional[ShiftRecord]:
        return self.records.get(shift_id)

    def list_for_employee_and_date(self, employee_id: int, work_date: date):
        items = [r for r in self.records.values() if r.employee_id == employee_id and r.work_date == work_date]
        items.sort(key=lambda r: (r.entry_time or datetime.min, r.shift_id))
        return items

    def find_open(self, employee_id: int, work_date: date) -> Optional[ShiftRecord]:
        items = [r for r in self.list_for_employee_and_date(employee_id, work_date) if r.is_open]
        return items[-1] if items else None

    def find_latest_open(self, employee_id: int, *, up_to: date) -> Optional[ShiftRecord]:
        items = [r for r in self.records.values() if r.employee_id == employee_id and r.work_date <= up_to and r.is_open]
        items.sort(key=lambda r: (r.work_date, r.entry_time, r.shift_id))
        return items[-1] if items else None

    def create_entry(self, entry: NewEntry) -> int:
        self._id += 1
        self.records[self._id] = ShiftRecord(
            shift_id=self._id,
            employee_id=entry.employee_id,
            work_date=entry.work_date,
            entry_time=entry.entry_time,
            entry_coords=entry.entry_coords,
            entry_photo=entry.entry_photo,
            minutes_late=entry.minutes_late,
            compliance_tier=entry.compliance_tier,
            early_warning=entry.early_warning,
        )
        return self._id

    def update_exit(self, *, shift_id: int, exit_time: datetime, exit_coords, exit_photo) -> bool:
        record = self.records.get(shift_id)
        if not record or not record.is_open:
            return False
        self.records[shift_id] = replace(record, exit_time=exit_time, exit_coords=exit_coords, exit_photo=exit_photo)
        return True

    def admin_update_times(self, *, shift_id, entry_time, exit_time, minutes_late, compliance_tier, early_warning, observations) -> bool:
        record = self.records.get(shift_id)
        if not record:
            return False
        self.records[shift_id] = replace(
            record,
            entry_time=entry_time,
            exit_time=exit_time,
            minutes_late=minutes_late,
            compliance_tier=compliance_tier,
            early_warning=early_warning,
            observations=observations,
        )
        return True

    def set_justification(self, *, shift_id, justification, observations) -> bool:
        record = self.records.get(shift_id)
        if not record:
            return False
        self.records[shift_id] = replace(record, justification=justification, observations=observations)
        return True

    def delete(self, shift_id: int) -> bool:
        return self.records.pop(shift_id, None) is not None

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None):
        return [
            r
            for r in sorted(self.records.values(), key=lambda r: (r.work_date, r.shift_id))
            if start <= r.work_date <= end and (employee_id is None or r.employee_id == employee_id)
        ]


class InMemoryLeaves:
    def __init__(self):
        self.leaves: dict[int, LeaveState] = {}
        self._id = 0

    def create(self, *, employee_id, kind, start_date, end_date, reason) -> int:
        self._id += 1
        self.leaves[self._id] = LeaveState(
            leave_id=self._id,
            employee_id=employee_id,
            kind=kind,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        return self._id

    def get_by_id(self, leave_id: int) -> Optional[LeaveState]:
        return self.leaves.get(leave_id)

    def decide(self, *, leave_id, approval, decided_by, admin_comments) -> bool:
        leave = self.leaves.get(leave_id)
        if not leave or leave.approval != ApprovalStatus.PENDING:
            return False
        self.leaves[leave_id] = replace(leave, approval=approval, decided_by=decided_by, admin_comments=admin_comments)
        return True

    def list_approved_overlapping(self, *, employee_id, start, end):
        items = [
            lv
            for lv in self.leaves.values()
            if lv.employee_id == employee_id
            and lv.approval == ApprovalStatus.APPROVED
            and lv.start_date <= end
            and (lv.end_date is None or lv.end_date >= start)
        ]
        return sorted(items, key=lambda lv: lv.leave_id, reverse=True)

    def approve(self, *, employee_id: int, kind: LeaveKind, start_date: date, end_date: Optional[date] = None) -> int:
        leave_id = self.create(employee_id=employee_id, kind=kind, start_date=start_date, end_date=end_date, reason=None)
        self.decide(leave_id=leave_id, approval=ApprovalStatus.APPROVED, decided_by="admin", admin_comments=None)
        return leave_id


def make_world(**options):
    """Office with 100 m tolerance, a guard scheduled 08:00, a receptionist
    on the job-title default schedule, and an employee with no location."""
    locations = InMemoryLocations(
        {
            1: WorkLocation(location_id=1, name="Oficina Principal", address="Santo Domingo", center=OFFICE, tolerance_meters=100),
            2: WorkLocation(location_id=2, name="Sucursal Norte", address=None, center=Coordinate(18.5, -69.9), tolerance_meters=None),
        }
    )
    employees = InMemoryEmployees(
        {
            1: Employee(1, "Ana Pérez", "Agente de Seguridad", 1, time(8, 0), time(17, 0)),
            2: Employee(2, "Luis Gómez", "Recepcionista", 1),
            3: Employee(3, "Sin Ubicación", "Recepcionista", None),
        }
    )
    shifts = InMemoryShifts()
    leaves = InMemoryLeaves()
    container = assemble(
        employees_repo=employees,
        locations_repo=locations,
        shifts_repo=shifts,
        leaves_repo=leaves,
        **options,
    )
    return container, shifts, leaves
