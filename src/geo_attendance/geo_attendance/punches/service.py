from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..anomalies.detector import CrossDayAnomalyDetector
from ..anomalies.pending import PendingPunchStore
from ..common.datetime_utils import now_local
from ..compliance.evaluator import ComplianceEvaluator, ComplianceResult
from ..core.enums import PunchKind, ShiftState
from ..core.exceptions import AmbiguousPattern, NotFoundError, PersistenceFailure, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geofence.service import GeofenceValidator
from ..shifts.model import NewEntry, ShiftRecord
from ..shifts.repository import ShiftRecordRepository
from .capture import PunchCapture, ValidCapture, validate_capture
from .locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PunchResult:
    kind: PunchKind
    shift_id: int
    employee_id: int
    work_date: date
    punch_time: datetime
    state: ShiftState
    message: str
    compliance: Optional[ComplianceResult] = None
    closed_previous_day: bool = False


@dataclass(frozen=True)
class ShiftStatus:
    employee_id: int
    work_date: date
    state: ShiftState
    records: Sequence[ShiftRecord]
    open_record: Optional[ShiftRecord] = None


def state_of(records: Sequence[ShiftRecord]) -> ShiftState:
    if not records:
        return ShiftState.NO_ENTRY
    if any(r.is_open for r in records):
        return ShiftState.ENTRY_RECORDED
    return ShiftState.COMPLETE


class PunchService:
    """Single entry point for punches.

    The caller never says whether a punch is an entry or an exit: an open
    record for the day is closed, otherwise a new one is opened. The lookup
    and the write run under a per-(employee, date) lock.
    """

    def __init__(
        self,
        shifts: ShiftRecordRepository,
        employees: EmployeeRepository,
        geofence: GeofenceValidator,
        evaluator: ComplianceEvaluator,
        *,
        detector: CrossDayAnomalyDetector | None = None,
        pending: PendingPunchStore | None = None,
        locks: KeyedLock | None = None,
        require_photo: bool = True,
        max_accuracy_meters: float | None = None,
    ):
        self._shifts = shifts
        self._employees = employees
        self._geofence = geofence
        self._evaluator = evaluator
        self._detector = detector or CrossDayAnomalyDetector(shifts)
        self._pending = pending or PendingPunchStore()
        self._locks = locks or KeyedLock()
        self._require_photo = bool(require_photo)
        self._max_accuracy = max_accuracy_meters

    def _active_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Empleado no existe o está inactivo")
        return employee

    def register_punch(
        self,
        employee_id: int,
        work_date: date | None,
        capture: PunchCapture,
        *,
        now: datetime | None = None,
    ) -> PunchResult:
        now = now or now_local()
        work_date = work_date or now.date()
        employee = self._active_employee(employee_id)

        valid = validate_capture(capture, require_photo=self._require_photo, max_accuracy_meters=self._max_accuracy)
        self._geofence.ensure_within(valid.coords, employee.employee_id)

        with self._locks.hold((employee.employee_id, work_date)):
            open_record = self._shifts.find_open(employee.employee_id, work_date)
            if open_record is not None:
                return self._close(open_record, work_date, now, valid)

            check = self._detector.check_pattern(employee.employee_id, work_date)
            if check.needs_alert:
                pending = self._pending.park(
                    employee_id=employee.employee_id,
                    work_date=work_date,
                    punch_time=now,
                    capture=valid,
                    open_shift_id=check.open_record.shift_id if check.open_record else None,
                )
                logger.warning(
                    "cross-day pattern for employee %s on %s, punch held as %s",
                    employee.employee_id,
                    work_date,
                    pending.token,
                )
                raise AmbiguousPattern(check.message, token=pending.token, open_shift_id=pending.open_shift_id)

            return self._open(employee, work_date, now, valid)

    def confirm_pending(self, token: str) -> PunchResult:
        """Apply a parked punch, closing the newest open record on any prior date.

        Both the punch date and the date of the record being closed are
        locked; if a different open record shows up meanwhile, resolve again.
        """
        pending = self._pending.take(token)
        if pending is None:
            raise ValidationError("La confirmación no existe o ha expirado. Vuelva a registrar el punch.")

        employee = self._active_employee(pending.employee_id)
        while True:
            stale = self._shifts.find_latest_open(employee.employee_id, up_to=pending.work_date)
            dates = {pending.work_date} | ({stale.work_date} if stale else set())
            with self._locks.hold_many((employee.employee_id, d) for d in dates):
                current = self._shifts.find_latest_open(employee.employee_id, up_to=pending.work_date)
                if current is None:
                    return self._open(employee, pending.work_date, pending.punch_time, pending.capture)
                if current.work_date in dates:
                    return self._close(current, pending.work_date, pending.punch_time, pending.capture)

    def cancel_pending(self, token: str) -> bool:
        discarded = self._pending.discard(token)
        if discarded:
            logger.info("pending punch %s cancelled", token)
        return discarded

    def get_shift_state(self, employee_id: int, work_date: date) -> ShiftStatus:
        records = list(self._shifts.list_for_employee_and_date(int(employee_id), work_date))
        open_records = [r for r in records if r.is_open]
        return ShiftStatus(
            employee_id=int(employee_id),
            work_date=work_date,
            state=state_of(records),
            records=records,
            open_record=open_records[-1] if open_records else None,
        )

    def _open(self, employee: Employee, work_date: date, now: datetime, capture: ValidCapture) -> PunchResult:
        first_of_day = not self._shifts.list_for_employee_and_date(employee.employee_id, work_date)
        compliance = self._evaluator.evaluate_entry(employee, work_date, now) if first_of_day else None

        shift_id = self._shifts.create_entry(
            NewEntry(
                employee_id=employee.employee_id,
                work_date=work_date,
                entry_time=now,
                entry_coords=capture.coords,
                entry_photo=capture.photo,
                minutes_late=compliance.minutes_late if compliance else 0,
                compliance_tier=compliance.tier if compliance else None,
                early_warning=compliance.early_warning if compliance else False,
            )
        )
        logger.info(
            "entry recorded for employee %s on %s (shift %s, tier %s)",
            employee.employee_id,
            work_date,
            shift_id,
            compliance.tier.value if compliance else "-",
        )
        return PunchResult(
            kind=PunchKind.ENTRY,
            shift_id=shift_id,
            employee_id=employee.employee_id,
            work_date=work_date,
            punch_time=now,
            state=ShiftState.ENTRY_RECORDED,
            message="Entrada registrada exitosamente",
            compliance=compliance,
        )

    def _close(self, record: ShiftRecord, work_date: date, now: datetime, capture: ValidCapture) -> PunchResult:
        if record.entry_time and now < record.entry_time:
            raise ValidationError("La hora de salida no puede ser anterior a la entrada")

        if not self._shifts.update_exit(
            shift_id=record.shift_id,
            exit_time=now,
            exit_coords=capture.coords,
            exit_photo=capture.photo,
        ):
            raise PersistenceFailure("No se pudo registrar la salida. Intente de nuevo.")

        closed_previous_day = record.work_date != work_date
        logger.info(
            "exit recorded for employee %s on shift %s (opened %s)",
            record.employee_id,
            record.shift_id,
            record.work_date,
        )
        return PunchResult(
            kind=PunchKind.EXIT,
            shift_id=record.shift_id,
            employee_id=record.employee_id,
            work_date=record.work_date,
            punch_time=now,
            state=ShiftState.COMPLETE,
            message="Salida registrada exitosamente",
            closed_previous_day=closed_previous_day,
        )
