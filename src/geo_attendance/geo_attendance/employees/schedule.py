from __future__ import annotations

import logging
from datetime import time

from ..core.constants import SECURITY_SCHEDULE, SECURITY_TITLE_MARKER, STANDARD_SCHEDULE
from .model import Employee

logger = logging.getLogger(__name__)


def default_schedule_for_title(job_title: str) -> tuple[time, time]:
    """Default (entry, exit) picked from the job title.

    Titles containing "Seguridad" work 08:00-17:00, everyone else
    09:00-17:30. This mirrors how employees were bulk-loaded and is only
    used when no explicit schedule is stored.
    """
    if SECURITY_TITLE_MARKER in (job_title or ""):
        return SECURITY_SCHEDULE
    return STANDARD_SCHEDULE


def resolve_schedule(employee: Employee) -> tuple[time, time]:
    default_entry, default_exit = default_schedule_for_title(employee.job_title)
    if employee.scheduled_entry is None or employee.scheduled_exit is None:
        logger.info(
            "employee %s has no stored schedule, using job-title default %s-%s",
            employee.employee_id,
            default_entry.strftime("%H:%M"),
            default_exit.strftime("%H:%M"),
        )
    return (employee.scheduled_entry or default_entry, employee.scheduled_exit or default_exit)
