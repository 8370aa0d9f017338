from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_audit_timestamp, now_local
from ..common.validators import require_non_empty
from ..core.enums import ComplianceTier, JustificationState, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..shifts.model import ShiftRecord
from ..shifts.repository import ShiftRecordRepository
from .evaluator import ComplianceEvaluator

logger = logging.getLogger(__name__)

TARDINESS_CLEARED_NOTE = "Tardanza eliminada por corrección administrativa."


def audit_stamp(actor: str, at: datetime) -> str:
    return f"[Modificado por {actor} el {format_audit_timestamp(at)}]"


class AdjustmentService:
    """Administrative corrections on shift records.

    Every manual change carries the actor and time in the stored observation.
    """

    def __init__(
        self,
        shifts: ShiftRecordRepository,
        employees: EmployeeRepository,
        evaluator: ComplianceEvaluator,
    ):
        self._shifts = shifts
        self._employees = employees
        self._evaluator = evaluator

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tiene permisos para esta acción")

    def _get_record(self, shift_id: int) -> ShiftRecord:
        record = self._shifts.get_by_id(int(shift_id))
        if not record:
            raise NotFoundError("Registro de turno no encontrado")
        return record

    def _is_first_entry(self, record: ShiftRecord, entry_time: datetime) -> bool:
        """Only the earliest entry of a work date carries a punctuality score."""
        others = self._shifts.list_for_employee_and_date(record.employee_id, record.work_date)
        return all(
            o.entry_time is None or entry_time <= o.entry_time for o in others if o.shift_id != record.shift_id
        )

    def adjust_times(
        self,
        *,
        current_role: Role,
        actor: str,
        shift_id: int,
        entry_time: Optional[datetime],
        exit_time: Optional[datetime],
        justification: str,
        clear_tardiness: bool = False,
        now: Optional[datetime] = None,
    ) -> ShiftRecord:
        self._require_admin(current_role)
        actor = require_non_empty(actor, "Usuario")
        justification = require_non_empty(justification, "La justificación")

        record = self._get_record(shift_id)
        if exit_time is not None and entry_time is None:
            raise ValidationError("No se puede registrar una salida sin entrada")
        if entry_time is not None and exit_time is not None and exit_time < entry_time:
            raise ValidationError("La hora de salida no puede ser anterior a la entrada")

        if entry_time is None or not self._is_first_entry(record, entry_time):
            minutes_late, tier, early_warning = 0, None, False
        elif clear_tardiness:
            minutes_late, tier, early_warning = 0, ComplianceTier.ON_TIME, False
        elif entry_time == record.entry_time and record.compliance_tier is not None:
            minutes_late, tier, early_warning = record.minutes_late, record.compliance_tier, record.early_warning
        else:
            employee = self._employees.get_by_id(record.employee_id)
            if not employee:
                raise NotFoundError("Empleado no existe")
            result = self._evaluator.evaluate_entry(employee, record.work_date, entry_time)
            minutes_late, tier, early_warning = result.minutes_late, result.tier, result.early_warning

        text = justification
        if clear_tardiness:
            text = f"{text} - {TARDINESS_CLEARED_NOTE}"
        observations = f"{audit_stamp(actor, now or now_local())} {text}"

        self._shifts.admin_update_times(
            shift_id=record.shift_id,
            entry_time=entry_time,
            exit_time=exit_time,
            minutes_late=minutes_late,
            compliance_tier=tier,
            early_warning=early_warning,
            observations=observations,
        )

        logger.info("shift %s times adjusted by %s", record.shift_id, actor)
        return self._get_record(record.shift_id)

    def resolve_justification(
        self,
        *,
        current_role: Role,
        actor: str,
        shift_id: int,
        decision: JustificationState | str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> ShiftRecord:
        self._require_admin(current_role)
        actor = require_non_empty(actor, "Usuario")
        try:
            decision = JustificationState(decision)
        except ValueError:
            raise ValidationError("Decisión de justificación inválida")
        if decision == JustificationState.UNJUSTIFIED_PENDING:
            raise ValidationError("Debe indicar justificado o injustificado")

        record = self._get_record(shift_id)
        notes = (notes or "").strip()
        observations = f"{audit_stamp(actor, now or now_local())} {notes}" if notes else record.observations

        self._shifts.set_justification(
            shift_id=record.shift_id,
            justification=decision,
            observations=observations,
        )

        logger.info("shift %s marked %s by %s", record.shift_id, decision.value, actor)
        return self._get_record(record.shift_id)

    def delete_record(self, *, current_role: Role, shift_id: int) -> None:
        self._require_admin(current_role)
        record = self._get_record(shift_id)
        if not self._shifts.delete(record.shift_id):
            raise ValidationError("No se pudo eliminar el registro")
        logger.warning("shift %s of employee %s deleted", record.shift_id, record.employee_id)
