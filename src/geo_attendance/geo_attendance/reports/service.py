from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import iter_dates
from ..core.enums import ComplianceTier, JustificationState
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geofence.service import nearest_zone
from ..leaves.service import LeaveService
from ..locations.repository import LocationRepository
from ..shifts.model import ShiftRecord
from ..shifts.repository import ShiftRecordRepository
from .calendar import WeekdayCalendar, WorkCalendar


@dataclass(frozen=True)
class EmployeeStatistics:
    employee_id: int
    full_name: str
    job_title: str
    total_days: int
    on_time_days: int
    late_days: int
    avg_late_minutes: float
    absences: int
    justified_days: int
    early_warnings: int
    punctuality_percent: int


@dataclass(frozen=True)
class FleetSummary:
    employees: list[EmployeeStatistics]
    average_punctuality_percent: float
    average_late_minutes: float = 0.0
    average_absences: float = 0.0


def punctuality_percent(on_time_days: int, total_days: int) -> int:
    if total_days <= 0:
        return 0
    return round(100 * on_time_days / total_days)


def first_entries_by_day(records: Sequence[ShiftRecord]) -> dict[date, ShiftRecord]:
    """The scored record of each day: its earliest entry."""
    by_day: dict[date, ShiftRecord] = {}
    for r in records:
        if r.entry_time is None:
            continue
        current = by_day.get(r.work_date)
        if current is None or r.entry_time < current.entry_time:
            by_day[r.work_date] = r
    return by_day


class ReportService:
    def __init__(
        self,
        shifts: ShiftRecordRepository,
        employees: EmployeeRepository,
        locations: LocationRepository,
        leaves: LeaveService,
        *,
        calendar: Optional[WorkCalendar] = None,
    ):
        self._shifts = shifts
        self._employees = employees
        self._locations = locations
        self._leaves = leaves
        self._calendar = calendar or WeekdayCalendar()

    @staticmethod
    def _check_range(start: date, end: date) -> None:
        if end < start:
            raise ValidationError("La fecha fin no puede ser anterior a la fecha inicio")

    def summarize(self, employee_id: int, start: date, end: date) -> EmployeeStatistics:
        self._check_range(start, end)
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Empleado no existe")
        return self._summarize(employee, start, end)

    def _summarize(self, employee: Employee, start: date, end: date) -> EmployeeStatistics:
        records = self._shifts.list_range(start=start, end=end, employee_id=employee.employee_id)
        scored = first_entries_by_day(records)
        days_with_records = {r.work_date for r in records}

        late_minutes = [r.minutes_late for r in scored.values() if r.minutes_late > 0]
        total_days = len(scored)
        on_time_days = total_days - len(late_minutes)

        leaves = self._leaves.approved_in_range(employee.employee_id, start, end)
        absences = 0
        for day in iter_dates(start, end):
            if day in days_with_records or not self._calendar.is_workday(employee.employee_id, day):
                continue
            if any(leave.covers(day) for leave in leaves):
                continue
            absences += 1

        return EmployeeStatistics(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            job_title=employee.job_title,
            total_days=total_days,
            on_time_days=on_time_days,
            late_days=len(late_minutes),
            avg_late_minutes=round(sum(late_minutes) / len(late_minutes), 2) if late_minutes else 0.0,
            absences=absences,
            justified_days=sum(1 for r in scored.values() if r.justification == JustificationState.JUSTIFIED),
            early_warnings=sum(1 for r in scored.values() if r.early_warning),
            punctuality_percent=punctuality_percent(on_time_days, total_days),
        )

    def fleet_summary(self, start: date, end: date) -> FleetSummary:
        """Per-employee statistics plus unweighted fleet means (0.0 when empty)."""
        self._check_range(start, end)
        stats = [self._summarize(e, start, end) for e in self._employees.list_active()]
        stats.sort(key=lambda s: s.punctuality_percent, reverse=True)

        def mean(values) -> float:
            values = list(values)
            return round(sum(values) / len(values), 2) if values else 0.0

        return FleetSummary(
            employees=stats,
            average_punctuality_percent=mean(s.punctuality_percent for s in stats),
            average_late_minutes=mean(s.avg_late_minutes for s in stats),
            average_absences=mean(s.absences for s in stats),
        )

    def shift_analysis(self, start: date, end: date, employee_id: Optional[int] = None) -> list[dict]:
        """Report rows: one per record, plus an ``ausente`` row per missed workday."""
        self._check_range(start, end)
        locations = self._locations.list_active()
        employees = (
            [e for e in [self._employees.get_by_id(int(employee_id))] if e]
            if employee_id is not None
            else list(self._employees.list_active())
        )

        rows: list[dict] = []
        for employee in employees:
            records = self._shifts.list_range(start=start, end=end, employee_id=employee.employee_id)
            leaves = self._leaves.approved_in_range(employee.employee_id, start, end)
            days_with_records = {r.work_date for r in records}

            for r in records:
                leave = next((lv for lv in leaves if lv.covers(r.work_date)), None)
                rows.append(
                    {
                        "shift_id": r.shift_id,
                        "employee_id": employee.employee_id,
                        "full_name": employee.full_name,
                        "work_date": r.work_date.strftime("%Y-%m-%d"),
                        "entry": r.entry_time.strftime("%H:%M") if r.entry_time else "-",
                        "exit": r.exit_time.strftime("%H:%M") if r.exit_time else "-",
                        "minutes_late": r.minutes_late,
                        "tier": r.compliance_tier.value if r.compliance_tier else "-",
                        "early_warning": r.early_warning,
                        "justification": r.justification.value,
                        "leave_state": leave.kind.value if leave else None,
                        "location": nearest_zone(r.entry_coords, locations),
                        "observations": r.observations or "",
                    }
                )

            for day in iter_dates(start, end):
                if day in days_with_records or not self._calendar.is_workday(employee.employee_id, day):
                    continue
                leave = next((lv for lv in leaves if lv.covers(day)), None)
                rows.append(
                    {
                        "shift_id": None,
                        "employee_id": employee.employee_id,
                        "full_name": employee.full_name,
                        "work_date": day.strftime("%Y-%m-%d"),
                        "entry": "-",
                        "exit": "-",
                        "minutes_late": 0,
                        "tier": leave.kind.value if leave else ComplianceTier.ABSENT.value,
                        "early_warning": False,
                        "justification": JustificationState.UNJUSTIFIED_PENDING.value,
                        "leave_state": leave.kind.value if leave else None,
                        "location": "-",
                        "observations": "",
                    }
                )

        rows.sort(key=lambda x: (x["work_date"], -x["employee_id"]), reverse=True)
        return rows
