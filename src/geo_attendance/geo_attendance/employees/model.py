from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Entidad de dominio: empleado con ubicación y horario asignados.

    Reference data maintained by the employee management screens; this
    package only reads it.
    """

    employee_id: int
    full_name: str
    job_title: str
    location_id: Optional[int]
    scheduled_entry: Optional[time] = None
    scheduled_exit: Optional[time] = None
    is_active: bool = True
