"""Error taxonomy for agreement resolution, pricing and compliance."""

from __future__ import annotations

from datetime import date


class AgreementEngineError(Exception):
    """Base class for all engine errors."""


class NotFoundError(AgreementEngineError):
    """Raised when an agreement, classification, version or alert is unknown."""

    def __init__(self, entity_type: str, entity_id: str, detail: str | None = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.detail = detail
        msg = f"{entity_type} '{entity_id}' not found"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InvalidEffectiveDateError(AgreementEngineError):
    """Raised when a new rate version does not strictly follow the current one."""

    def __init__(self, agreement_id: str, effective_from: date, current_effective_from: date):
        self.agreement_id = agreement_id
        self.effective_from = effective_from
        self.current_effective_from = current_effective_from
        super().__init__(
            f"Version for agreement '{agreement_id}' effective {effective_from} "
            f"must be after the current version's effective date {current_effective_from}"
        )


class NoApplicableClassificationError(AgreementEngineError):
    """Raised when a worker has no classification mapping in effect on a date."""

    def __init__(self, worker_id: str, agreement_id: str, on_date: date):
        self.worker_id = worker_id
        self.agreement_id = agreement_id
        self.on_date = on_date
        super().__init__(
            f"No classification for worker '{worker_id}' under agreement "
            f"'{agreement_id}' is effective on {on_date}"
        )


class InvalidShiftDurationError(AgreementEngineError):
    """Raised when a shift has zero or negative worked time."""

    def __init__(self, worked_minutes: int, reason: str | None = None):
        self.worked_minutes = worked_minutes
        msg = f"Shift has no payable time ({worked_minutes} worked minutes)"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvariantViolationError(AgreementEngineError):
    """Raised when an internal consistency check fails. Never swallowed."""


class InvalidTransitionError(AgreementEngineError):
    """Raised when an alert state change is not allowed."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvalidAssignmentError(AgreementEngineError, ValueError):
    """Raised when a worker's agreement assignment breaks its ordering rules."""
