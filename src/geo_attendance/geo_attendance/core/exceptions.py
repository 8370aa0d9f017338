from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class NoLocationAssigned(DomainError):
    """The employee has no usable work location; the punch is blocked."""


class OutOfGeofence(DomainError):
    """The punch coordinate lies outside the assigned location tolerance."""

    def __init__(self, message: str, *, location_name: str, distance_meters: float, tolerance_meters: float):
        super().__init__(message)
        self.location_name = location_name
        self.distance_meters = distance_meters
        self.tolerance_meters = tolerance_meters


class AmbiguousPattern(DomainError):
    """The punch is parked until the caller confirms or cancels it."""

    def __init__(self, message: str, *, token: str, open_shift_id: Optional[int] = None):
        super().__init__(message)
        self.token = token
        self.open_shift_id = open_shift_id


class SensorUnavailable(DomainError):
    """Location or camera data is missing, denied or unusable."""

    retryable = True


class PersistenceFailure(DomainError):
    """The store rejected a read or write; nothing was committed."""

    retryable = True
