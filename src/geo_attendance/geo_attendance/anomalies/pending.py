from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_PENDING_TTL_SECONDS
from ..punches.capture import ValidCapture

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingPunch:
    """A punch held back until the employee confirms or cancels it."""

    token: str
    employee_id: int
    work_date: date
    punch_time: datetime
    capture: ValidCapture
    open_shift_id: Optional[int]
    expires_at: datetime


class PendingPunchStore:
    """Short-lived confirmation tokens for parked punches.

    Taking a token removes it, so a confirmation can be applied only once.
    """

    def __init__(self, *, ttl_seconds: int = DEFAULT_PENDING_TTL_SECONDS, clock: Callable[[], datetime] = now_local):
        self._ttl = timedelta(seconds=int(ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._items: dict[str, PendingPunch] = {}

    def park(
        self,
        *,
        employee_id: int,
        work_date: date,
        punch_time: datetime,
        capture: ValidCapture,
        open_shift_id: Optional[int],
    ) -> PendingPunch:
        pending = PendingPunch(
            token=uuid.uuid4().hex,
            employee_id=int(employee_id),
            work_date=work_date,
            punch_time=punch_time,
            capture=capture,
            open_shift_id=open_shift_id,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            self._purge_expired()
            self._items[pending.token] = pending
        return pending

    def take(self, token: str) -> Optional[PendingPunch]:
        with self._lock:
            pending = self._items.pop(token, None)
        if pending is None:
            return None
        if pending.expires_at < self._clock():
            logger.info("pending punch %s for employee %s expired", token, pending.employee_id)
            return None
        return pending

    def discard(self, token: str) -> bool:
        with self._lock:
            return self._items.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _purge_expired(self) -> None:
        now = self._clock()
        for token in [t for t, p in self._items.items() if p.expires_at < now]:
            del self._items[token]
