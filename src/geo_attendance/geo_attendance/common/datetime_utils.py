from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError("Fecha inválida (YYYY-MM-DD)")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError("Fecha y hora inválidas (YYYY-MM-DDTHH:MM)")


def now_local() -> datetime:
    """Current local wall-clock time, naive."""
    return datetime.now()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def combine(work_date: date, at: time) -> datetime:
    return datetime.combine(work_date, at)


def format_audit_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y, %H:%M:%S")
