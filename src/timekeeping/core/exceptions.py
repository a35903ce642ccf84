from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AttendanceError(DomainError):
    """Invariant violation on a session or break transition.

    Carries the ids involved so callers can decide whether to retry or
    surface a message.
    """

    def __init__(
        self,
        message: str,
        *,
        session_id: Optional[int] = None,
        employee_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.session_id = session_id
        self.employee_id = employee_id


class AlreadyClockedIn(AttendanceError):
    """Employee already has an active session."""


class InvalidState(AttendanceError):
    """Session is not in the state the operation requires."""


class SessionNotActive(InvalidState):
    """Break transition attempted on a session that is not active."""


class BreakAlreadyOpen(AttendanceError):
    """Session already has a break without an end time."""


class NoOpenBreak(AttendanceError):
    """End of break requested but the session has no open break."""


class SessionNotFound(AttendanceError):
    """No session exists with the given id."""


class PersistenceFailure(Exception):
    """The storage collaborator failed. Chained from the driver error."""
