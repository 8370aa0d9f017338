from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import WorkLocation


class LocationRepository(Protocol):
    def get_by_id(self, location_id: int) -> Optional[WorkLocation]:
        raise NotImplementedError

    def list_active(self) -> Sequence[WorkLocation]:
        raise NotImplementedError
