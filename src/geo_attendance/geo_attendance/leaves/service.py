from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.validators import require_non_empty
from ..core.enums import ApprovalStatus, LeaveKind, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import LeaveState
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Use cases around vacation / medical leave / permit states."""

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository):
        self._leaves = leaves
        self._employees = employees

    def create(
        self,
        *,
        employee_id: int,
        kind: LeaveKind | str,
        start_date: date,
        end_date: Optional[date] = None,
        reason: str = "",
    ) -> int:
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Empleado no existe")
        try:
            kind = LeaveKind(kind)
        except ValueError:
            raise ValidationError("Tipo de estado inválido")
        if end_date is not None and end_date < start_date:
            raise ValidationError("La fecha fin no puede ser anterior a la fecha inicio")

        return self._leaves.create(
            employee_id=int(employee_id),
            kind=kind,
            start_date=start_date,
            end_date=end_date,
            reason=(reason or "").strip() or None,
        )

    def decide(
        self,
        *,
        current_role: Role,
        actor: str,
        leave_id: int,
        approved: bool,
        comments: str = "",
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("No tiene permisos para esta acción")
        actor = require_non_empty(actor, "Usuario")

        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Estado no encontrado")
        if leave.approval != ApprovalStatus.PENDING:
            raise ValidationError("El estado ya fue procesado")

        approval = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        if not self._leaves.decide(
            leave_id=leave.leave_id,
            approval=approval,
            decided_by=actor,
            admin_comments=(comments or "").strip() or None,
        ):
            raise ValidationError("No se pudo procesar el estado")
        logger.info("leave %s %s by %s", leave.leave_id, approval.value, actor)

    def active_leave_for(self, employee_id: int, day: date) -> Optional[LeaveState]:
        """Approved leave covering ``day``; the newest one wins."""
        leaves = self._leaves.list_approved_overlapping(employee_id=int(employee_id), start=day, end=day)
        for leave in leaves:
            if leave.covers(day):
                return leave
        return None

    def approved_in_range(self, employee_id: int, start: date, end: date) -> list[LeaveState]:
        return list(self._leaves.list_approved_overlapping(employee_id=int(employee_id), start=start, end=end))
