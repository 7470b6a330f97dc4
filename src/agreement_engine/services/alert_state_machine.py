"""Alert lifecycle state machine with transition validation."""

from __future__ import annotations

from agreement_engine.errors import InvalidTransitionError
from agreement_engine.models import AlertStatus


class AlertStateMachine:
    """State machine for rate change alert status transitions.

    Allowed transitions:
    - pending → acknowledged
    - pending → dismissed
    - acknowledged → actioned
    - acknowledged → dismissed

    Dismissing an acknowledged alert is an extension to the basic
    pending → acknowledged → actioned path: an alert someone has looked at
    can still be closed without action. Actioned and dismissed are terminal.
    """

    VALID_TRANSITIONS: dict[AlertStatus, list[AlertStatus]] = {
        AlertStatus.PENDING: [AlertStatus.ACKNOWLEDGED, AlertStatus.DISMISSED],
        AlertStatus.ACKNOWLEDGED: [AlertStatus.ACTIONED, AlertStatus.DISMISSED],
        AlertStatus.ACTIONED: [],  # Terminal state
        AlertStatus.DISMISSED: [],  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_status: AlertStatus, to_status: AlertStatus) -> bool:
        """Check if a transition is valid."""
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def is_terminal(cls, status: AlertStatus) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)

    @classmethod
    def validate_transition(
        cls,
        from_status: AlertStatus,
        to_status: AlertStatus,
        actor: str | None = None,
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not actor:
            raise InvalidTransitionError(
                from_status.value, to_status.value, "an actor is required"
            )
        if cls.is_terminal(from_status):
            raise InvalidTransitionError(
                from_status.value, to_status.value, f"'{from_status.value}' is terminal"
            )
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status.value, to_status.value)

    @classmethod
    def get_next_statuses(cls, current_status: AlertStatus) -> list[AlertStatus]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
