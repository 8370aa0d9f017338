from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles read from the session populated by the login screens."""

    ADMIN = "admin"
    EMPLOYEE = "empleado"


class ShiftState(str, Enum):
    """Punch state of one employee on one date."""

    NO_ENTRY = "NO_ENTRY"
    ENTRY_RECORDED = "ENTRY_RECORDED"
    COMPLETE = "COMPLETE"


class PunchKind(str, Enum):
    ENTRY = "entrada"
    EXIT = "salida"


class LeaveKind(str, Enum):
    VACATION = "vacaciones"
    MEDICAL_LEAVE = "licencia_medica"
    PERMIT = "permiso"


class ComplianceTier(str, Enum):
    """Punctuality band stored on a shift record.

    The leave values replace the time-based band when an approved leave
    covers the date; ABSENT is only produced by reporting.
    """

    ON_TIME = "a_tiempo"
    EARLY_ALERT = "alerta_temprana"
    YELLOW = "amarillo"
    RED = "rojo"
    VACATION = "vacaciones"
    MEDICAL_LEAVE = "licencia_medica"
    PERMIT = "permiso"
    ABSENT = "ausente"

    @classmethod
    def for_leave(cls, kind: LeaveKind) -> "ComplianceTier":
        return cls(kind.value)


class JustificationState(str, Enum):
    UNJUSTIFIED_PENDING = "sin_justificar"
    JUSTIFIED = "justificado"
    UNJUSTIFIED = "injustificado"


class ApprovalStatus(str, Enum):
    """Approval flow for leave states."""

    PENDING = "pendiente"
    APPROVED = "aprobado"
    REJECTED = "rechazado"


class AnomalyKind(str, Enum):
    MISSING_EXIT = "missing_exit"
