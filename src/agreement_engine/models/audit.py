"""Audit trail and rate change alert models.

Audit events are immutable and append-only. Alerts move through a small
lifecycle (see AlertStateMachine) and every transition is kept with its
actor and timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class AuditEventType(str, Enum):
    """Audited change kinds."""

    RATE_OVERRIDE_CREATED = "rate_override_created"
    RATE_OVERRIDE_UPDATED = "rate_override_updated"
    RATE_OVERRIDE_DELETED = "rate_override_deleted"
    AWARD_ENABLED = "award_enabled"
    AWARD_DISABLED = "award_disabled"
    CLASSIFICATION_CHANGED = "classification_changed"
    ALLOWANCE_MODIFIED = "allowance_modified"
    PENALTY_RATE_CHANGED = "penalty_rate_changed"
    LEAVE_ENTITLEMENT_CHANGED = "leave_entitlement_changed"
    EBA_CREATED = "eba_created"
    EBA_UPDATED = "eba_updated"
    EBA_EXPIRED = "eba_expired"
    FWC_RATE_UPDATE = "fwc_rate_update"
    SYSTEM_RATE_SYNC = "system_rate_sync"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ENABLE = "enable"
    DISABLE = "disable"
    SYNC = "sync"


class AuditSource(str, Enum):
    USER = "user"
    SYSTEM = "system"
    FWC_SYNC = "fwc_sync"
    IMPORT = "import"


class EntityType(str, Enum):
    AWARD = "award"
    EBA = "eba"
    CLASSIFICATION = "classification"
    ALLOWANCE = "allowance"
    PENALTY = "penalty"
    LEAVE = "leave"
    STAFF = "staff"


# Default action for each event type when the caller does not give one
DEFAULT_ACTIONS: dict[AuditEventType, AuditAction] = {
    AuditEventType.RATE_OVERRIDE_CREATED: AuditAction.CREATE,
    AuditEventType.RATE_OVERRIDE_UPDATED: AuditAction.UPDATE,
    AuditEventType.RATE_OVERRIDE_DELETED: AuditAction.DELETE,
    AuditEventType.AWARD_ENABLED: AuditAction.ENABLE,
    AuditEventType.AWARD_DISABLED: AuditAction.DISABLE,
    AuditEventType.CLASSIFICATION_CHANGED: AuditAction.UPDATE,
    AuditEventType.ALLOWANCE_MODIFIED: AuditAction.UPDATE,
    AuditEventType.PENALTY_RATE_CHANGED: AuditAction.UPDATE,
    AuditEventType.LEAVE_ENTITLEMENT_CHANGED: AuditAction.UPDATE,
    AuditEventType.EBA_CREATED: AuditAction.CREATE,
    AuditEventType.EBA_UPDATED: AuditAction.UPDATE,
    AuditEventType.EBA_EXPIRED: AuditAction.UPDATE,
    AuditEventType.FWC_RATE_UPDATE: AuditAction.UPDATE,
    AuditEventType.SYSTEM_RATE_SYNC: AuditAction.SYNC,
}


@dataclass(frozen=True)
class EntityRef:
    """Reference to the audited entity."""

    entity_type: EntityType
    entity_id: str
    entity_name: str


@dataclass(frozen=True)
class FieldChange:
    """Field-level change recorded on an audit event."""

    field: str
    old_value: Any = None
    new_value: Any = None

    def render(self) -> str:
        old = "" if self.old_value is None else self.old_value
        new = "" if self.new_value is None else self.new_value
        return f"{self.field}: {old} → {new}"


@dataclass(frozen=True)
class AuditEvent:
    """An immutable audit trail entry."""

    event_id: str
    event_type: AuditEventType
    entity: EntityRef
    action: AuditAction
    changes: tuple[FieldChange, ...]
    performed_by: str
    performed_at: datetime
    source: AuditSource
    reason: str | None = None
    triggered_alert_ids: tuple[str, ...] = ()
    sequence: int = 0


class AlertType(str, Enum):
    UPCOMING_FWC_CHANGE = "upcoming_fwc_change"
    EBA_EXPIRY = "eba_expiry"
    RATE_BELOW_AWARD = "rate_below_award"
    COMPLIANCE_ISSUE = "compliance_issue"
    CUSTOM_RATE_REVIEW = "custom_rate_review"


class AlertPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, most urgent first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    AlertPriority.CRITICAL: 0,
    AlertPriority.HIGH: 1,
    AlertPriority.MEDIUM: 2,
    AlertPriority.LOW: 3,
}


class AlertStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    ACTIONED = "actioned"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class AlertTransition:
    """One recorded status change of an alert."""

    from_status: AlertStatus
    to_status: AlertStatus
    actor: str
    at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class RateChangeAlert:
    """A priority-ranked alert raised by rate changes or agreement lapses."""

    alert_id: str
    alert_type: AlertType
    priority: AlertPriority
    status: AlertStatus
    title: str
    message: str
    trigger_date: date
    created_at: datetime
    action_required: str | None = None
    action_deadline: date | None = None
    affected_agreement_ids: tuple[str, ...] = ()
    affected_agreement_names: tuple[str, ...] = ()
    affected_worker_ids: tuple[str, ...] = ()
    related_audit_event_id: str | None = None
    transitions: tuple[AlertTransition, ...] = ()
    sequence: int = 0

    @property
    def notes(self) -> str | None:
        """All transition notes, oldest first."""
        collected = [t.notes for t in self.transitions if t.notes]
        return "\n".join(collected) if collected else None

    def last_transition_to(self, status: AlertStatus) -> AlertTransition | None:
        for transition in reversed(self.transitions):
            if transition.to_status == status:
                return transition
        return None

    @property
    def acknowledged_by(self) -> str | None:
        transition = self.last_transition_to(AlertStatus.ACKNOWLEDGED)
        return transition.actor if transition else None

    @property
    def acknowledged_at(self) -> datetime | None:
        transition = self.last_transition_to(AlertStatus.ACKNOWLEDGED)
        return transition.at if transition else None
