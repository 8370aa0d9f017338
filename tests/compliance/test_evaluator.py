from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.geo_attendance.geo_attendance.compliance.evaluator import (
    ComplianceEvaluator,
    classify,
    minutes_late,
    tier_for,
)
from src.geo_attendance.geo_attendance.core.enums import ComplianceTier, LeaveKind
from src.geo_attendance.geo_attendance.employees.model import Employee
from src.geo_attendance.geo_attendance.employees.schedule import default_schedule_for_title, resolve_schedule
from tests.fakes import OFFICE, capture_at, make_world

SCHEDULED = datetime(2025, 3, 3, 8, 0)


def test_late_by_three_minutes_is_early_alert():
    result = classify(datetime(2025, 3, 3, 8, 3), SCHEDULED)
    assert result.minutes_late == 3
    assert result.tier == ComplianceTier.EARLY_ALERT
    assert result.early_warning is True


def test_late_by_twenty_minutes_is_red():
    result = classify(datetime(2025, 3, 3, 8, 20), SCHEDULED)
    assert result.minutes_late == 20
    assert result.tier == ComplianceTier.RED
    assert result.early_warning is False


@pytest.mark.parametrize(
    "late, tier",
    [
        (0, ComplianceTier.ON_TIME),
        (1, ComplianceTier.EARLY_ALERT),
        (5, ComplianceTier.EARLY_ALERT),
        (6, ComplianceTier.YELLOW),
        (15, ComplianceTier.YELLOW),
        (16, ComplianceTier.RED),
    ],
)
def test_tier_boundaries_belong_to_less_severe_tier(late, tier):
    assert tier_for(late) == tier


def test_early_arrival_and_partial_minutes():
    assert minutes_late(datetime(2025, 3, 3, 7, 45), SCHEDULED) == 0
    assert minutes_late(datetime(2025, 3, 3, 8, 0, 59), SCHEDULED) == 0
    assert minutes_late(datetime(2025, 3, 3, 8, 5, 59), SCHEDULED) == 5


def test_minutes_late_is_monotonic_in_entry_time():
    start = datetime(2025, 3, 3, 7, 50)
    values = [minutes_late(start + timedelta(seconds=37 * i), SCHEDULED) for i in range(60)]
    assert values == sorted(values)


@pytest.mark.parametrize("kind", list(LeaveKind))
def test_leave_overrides_tier_regardless_of_time(kind):
    result = classify(datetime(2025, 3, 3, 11, 0), SCHEDULED, kind)
    assert result.tier.value == kind.value
    assert result.minutes_late == 0
    assert result.early_warning is False


def test_job_title_default_schedules():
    assert default_schedule_for_title("Agente de Seguridad") == (time(8, 0), time(17, 0))
    assert default_schedule_for_title("Recepcionista") == (time(9, 0), time(17, 30))
    assert default_schedule_for_title("") == (time(9, 0), time(17, 30))


def test_stored_schedule_wins_over_title():
    employee = Employee(5, "Eva", "Seguridad", 1, time(6, 30), time(14, 30))
    assert resolve_schedule(employee) == (time(6, 30), time(14, 30))


def test_evaluator_applies_approved_leave():
    container, _, leaves = make_world()
    monday = date(2025, 3, 3)
    leaves.approve(employee_id=1, kind=LeaveKind.MEDICAL_LEAVE, start_date=monday)

    result = container.punch_service.register_punch(1, monday, capture_at(OFFICE), now=datetime(2025, 3, 3, 9, 30))
    assert result.compliance.tier == ComplianceTier.MEDICAL_LEAVE
    assert result.compliance.minutes_late == 0


def test_pending_leave_does_not_override():
    container, _, _ = make_world()
    monday = date(2025, 3, 3)
    container.leave_service.create(employee_id=1, kind="vacaciones", start_date=monday)

    evaluator = ComplianceEvaluator(container.leave_service)
    employee = container.employees_repo.get_by_id(1)
    result = evaluator.evaluate_entry(employee, monday, datetime(2025, 3, 3, 8, 10))
    assert result.tier == ComplianceTier.YELLOW
