from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Protocol


class WorkCalendar(Protocol):
    def is_workday(self, employee_id: int, day: date) -> bool:
        raise NotImplementedError


@dataclass
class WeekdayCalendar(WorkCalendar):
    """Monday-Friday workdays, minus listed holidays."""

    workdays: frozenset[int] = frozenset({0, 1, 2, 3, 4})
    holidays: set[date] = field(default_factory=set)

    def is_workday(self, employee_id: int, day: date) -> bool:
        return day.weekday() in self.workdays and day not in self.holidays
