"""Append-only audit ledger with rule-driven alerting.

Every recorded event is run through a rule table. Matching rules produce
alerts, which are linked back to the event. Rule failures are isolated:
a failing rule is logged and the event is still stored.

Usage:
    ledger = AuditLedger()
    event = ledger.record(
        AuditEventType.EBA_EXPIRED,
        EntityRef(EntityType.EBA, "ea-1", "Retail EA 2021"),
        actor="admin",
    )
    for alert in ledger.get_alerts(status=AlertStatus.PENDING):
        ...
"""

from __future__ import annotations

import csv
import io
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from agreement_engine.errors import NotFoundError
from agreement_engine.models import (
    DEFAULT_ACTIONS,
    AlertPriority,
    AlertStatus,
    AlertTransition,
    AlertType,
    AuditAction,
    AuditEvent,
    AuditEventType,
    AuditSource,
    EntityRef,
    EntityType,
    FieldChange,
    RateChangeAlert,
)
from agreement_engine.services.alert_state_machine import AlertStateMachine
from agreement_engine.services.locking import KeyedLock

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Date",
    "Event Type",
    "Entity Type",
    "Entity Name",
    "Action",
    "Performed By",
    "Source",
    "Changes",
]
CSV_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class AlertSpec:
    """What an alert rule wants raised for an event."""

    alert_type: AlertType
    priority: AlertPriority
    title: str
    message: str
    action_required: str | None = None
    action_deadline: date | None = None
    affected_agreement_ids: tuple[str, ...] = ()
    affected_agreement_names: tuple[str, ...] = ()
    affected_worker_ids: tuple[str, ...] = ()


AlertRule = Callable[[AuditEvent], AlertSpec | None]


@dataclass
class RuleRegistration:
    """An alert rule bound to the event types it evaluates."""

    rule: AlertRule
    event_types: frozenset[AuditEventType]


def rate_override_review_rule(event: AuditEvent) -> AlertSpec | None:
    """Ask for a compliance review whenever a rate override is created or changed."""
    verb = "Created" if event.action == AuditAction.CREATE else "Updated"
    worker_ids = (
        (event.entity.entity_id,) if event.entity.entity_type == EntityType.STAFF else ()
    )
    return AlertSpec(
        alert_type=AlertType.CUSTOM_RATE_REVIEW,
        priority=AlertPriority.MEDIUM,
        title=f"Rate Override {verb}",
        message=(
            f"A custom rate override has been {verb.lower()} for "
            f"{event.entity.entity_name}. Please review to ensure compliance "
            "with minimum award rates."
        ),
        action_required="Review the override against the award minimum",
        affected_worker_ids=worker_ids,
    )


def eba_expired_rule(event: AuditEvent) -> AlertSpec | None:
    name = event.entity.entity_name
    return AlertSpec(
        alert_type=AlertType.EBA_EXPIRY,
        priority=AlertPriority.HIGH,
        title=f"Enterprise Agreement Expired: {name}",
        message=(
            f'The enterprise agreement "{name}" has reached its nominal expiry date. '
            "Employees will continue under the EBA until a new agreement is made "
            "or they revert to the underlying Modern Award."
        ),
        action_required="Negotiate a replacement agreement or revert to the underlying award",
        affected_agreement_ids=(event.entity.entity_id,),
        affected_agreement_names=(name,),
    )


class AuditLedger:
    """Append-only audit history and the alerts derived from it.

    Appends are serialized under one lock; alert transitions are serialized
    per alert id.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._alert_locks = KeyedLock()
        self._events: list[AuditEvent] = []
        self._alerts: dict[str, RateChangeAlert] = {}
        self._sequence = 0
        self._rules: list[RuleRegistration] = []

        self.on(
            [AuditEventType.RATE_OVERRIDE_CREATED, AuditEventType.RATE_OVERRIDE_UPDATED],
            rate_override_review_rule,
        )
        self.on(AuditEventType.EBA_EXPIRED, eba_expired_rule)

    def on(
        self,
        event_type: AuditEventType | list[AuditEventType],
        rule: AlertRule,
    ) -> None:
        """Register an alert rule for one or more event types."""
        types = event_type if isinstance(event_type, list) else [event_type]
        self._rules.append(RuleRegistration(rule=rule, event_types=frozenset(types)))

    def _next_sequence(self) -> int:
        with self._lock:
            self._sequence += 1
            return self._sequence

    # Recording

    def record(
        self,
        event_type: AuditEventType,
        entity: EntityRef,
        changes: Iterable[FieldChange] = (),
        actor: str = "system",
        source: AuditSource = AuditSource.USER,
        reason: str | None = None,
        action: AuditAction | None = None,
    ) -> AuditEvent:
        """Append an audit event and raise any alerts its rules produce.

        Always stores the event. A rule that raises, or returns something
        that cannot become an alert, is logged and skipped.
        """
        event = AuditEvent(
            event_id=str(uuid4()),
            event_type=event_type,
            entity=entity,
            action=action or DEFAULT_ACTIONS[event_type],
            changes=tuple(changes),
            performed_by=actor,
            performed_at=self._clock(),
            source=source,
            reason=reason,
            sequence=self._next_sequence(),
        )

        triggered: list[str] = []
        for registration in self._rules:
            if event.event_type not in registration.event_types:
                continue
            try:
                spec = registration.rule(event)
                if spec is None:
                    continue
                if not isinstance(spec, AlertSpec):
                    raise TypeError(f"expected AlertSpec or None, got {type(spec).__name__}")
                alert = self._add_alert(
                    spec,
                    trigger_date=event.performed_at.date(),
                    related_audit_event_id=event.event_id,
                )
            except Exception:
                logger.exception(
                    "Alert rule %s failed for event %s (%s)",
                    getattr(registration.rule, "__name__", registration.rule),
                    event.event_id,
                    event.event_type.value,
                )
                continue
            triggered.append(alert.alert_id)

        if triggered:
            event = replace(event, triggered_alert_ids=tuple(triggered))

        with self._lock:
            self._events.append(event)

        logger.debug(
            "Recorded %s for %s '%s' (%d alert(s))",
            event.event_type.value,
            entity.entity_type.value,
            entity.entity_id,
            len(triggered),
        )
        return event

    # Alerts

    def create_alert(
        self,
        spec: AlertSpec,
        trigger_date: date | None = None,
    ) -> RateChangeAlert:
        """Raise an alert directly, outside the rule table."""
        return self._add_alert(spec, trigger_date=trigger_date or self._clock().date())

    def create_fwc_rate_update_alert(
        self,
        effective_date: date,
        increase_percent: Decimal,
        affected_agreements: list[tuple[str, str]],
    ) -> RateChangeAlert:
        """Raise the annual wage review alert for a set of (id, name) agreements."""
        names = ", ".join(name for _, name in affected_agreements)
        spec = AlertSpec(
            alert_type=AlertType.UPCOMING_FWC_CHANGE,
            priority=AlertPriority.HIGH,
            title=f"FWC Annual Wage Review - {increase_percent}% Increase",
            message=(
                f"The Fair Work Commission has announced a {increase_percent}% increase "
                f"to minimum wages effective {effective_date:%d %B %Y}. "
                f"Affected awards: {names}. Please review and update pay rates "
                "before the effective date."
            ),
            action_required="Update pay rates in payroll system before effective date",
            action_deadline=effective_date,
            affected_agreement_ids=tuple(agreement_id for agreement_id, _ in affected_agreements),
            affected_agreement_names=tuple(name for _, name in affected_agreements),
        )
        return self._add_alert(spec, trigger_date=effective_date)

    def _add_alert(
        self,
        spec: AlertSpec,
        trigger_date: date,
        related_audit_event_id: str | None = None,
    ) -> RateChangeAlert:
        # Malformed specs fail here, before anything is stored
        alert = RateChangeAlert(
            alert_id=str(uuid4()),
            alert_type=AlertType(spec.alert_type),
            priority=AlertPriority(spec.priority),
            status=AlertStatus.PENDING,
            title=spec.title,
            message=spec.message,
            trigger_date=trigger_date,
            created_at=self._clock(),
            action_required=spec.action_required,
            action_deadline=spec.action_deadline,
            affected_agreement_ids=spec.affected_agreement_ids,
            affected_agreement_names=spec.affected_agreement_names,
            affected_worker_ids=spec.affected_worker_ids,
            related_audit_event_id=related_audit_event_id,
            sequence=self._next_sequence(),
        )
        with self._lock:
            self._alerts[alert.alert_id] = alert

        logger.info(
            "Alert %s created: [%s] %s",
            alert.alert_id,
            alert.priority.value,
            alert.title,
        )
        return alert

    def get_alert(self, alert_id: str) -> RateChangeAlert:
        alert = self._alerts.get(alert_id)
        if alert is None:
            raise NotFoundError("alert", alert_id)
        return alert

    def acknowledge(self, alert_id: str, actor: str, notes: str | None = None) -> RateChangeAlert:
        return self._transition(alert_id, AlertStatus.ACKNOWLEDGED, actor, notes)

    def action(self, alert_id: str, actor: str, notes: str | None = None) -> RateChangeAlert:
        return self._transition(alert_id, AlertStatus.ACTIONED, actor, notes)

    def dismiss(self, alert_id: str, actor: str, reason: str) -> RateChangeAlert:
        return self._transition(alert_id, AlertStatus.DISMISSED, actor, f"Dismissed: {reason}")

    def _transition(
        self,
        alert_id: str,
        to_status: AlertStatus,
        actor: str,
        notes: str | None,
    ) -> RateChangeAlert:
        with self._alert_locks.hold(alert_id):
            alert = self.get_alert(alert_id)
            AlertStateMachine.validate_transition(alert.status, to_status, actor)

            transition = AlertTransition(
                from_status=alert.status,
                to_status=to_status,
                actor=actor,
                at=self._clock(),
                notes=notes,
            )
            updated = replace(
                alert,
                status=to_status,
                transitions=(*alert.transitions, transition),
            )
            with self._lock:
                self._alerts[alert_id] = updated

        logger.info(
            "Alert %s moved %s -> %s by %s",
            alert_id,
            transition.from_status.value,
            to_status.value,
            actor,
        )
        return updated

    def get_alerts(
        self,
        status: AlertStatus | None = None,
        priority: AlertPriority | None = None,
    ) -> list[RateChangeAlert]:
        """Alerts sorted by priority (critical first), then newest first."""
        with self._lock:
            alerts = list(self._alerts.values())
        if status is not None:
            alerts = [a for a in alerts if a.status == status]
        if priority is not None:
            alerts = [a for a in alerts if a.priority == priority]
        return sorted(alerts, key=lambda a: (a.priority.rank, -a.sequence))

    def get_pending_alerts_count(self) -> dict[AlertPriority, int]:
        """Pending alert counts for every priority."""
        counts = {priority: 0 for priority in AlertPriority}
        for alert in self.get_alerts(status=AlertStatus.PENDING):
            counts[alert.priority] += 1
        return counts

    # Events

    def get_events(
        self,
        event_type: AuditEventType | None = None,
        source: AuditSource | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """Events newest first, optionally filtered."""
        with self._lock:
            events = list(self._events)
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        if source is not None:
            events = [e for e in events if e.source == source]
        events.sort(key=lambda e: e.sequence, reverse=True)
        return events[offset : offset + limit]

    def get_events_for_entity(
        self,
        entity_id: str,
        entity_type: EntityType | None = None,
    ) -> list[AuditEvent]:
        with self._lock:
            events = [e for e in self._events if e.entity.entity_id == entity_id]
        if entity_type is not None:
            events = [e for e in events if e.entity.entity_type == entity_type]
        return sorted(events, key=lambda e: e.sequence, reverse=True)

    def export_csv(self, start: date, end: date) -> str:
        """Export events performed between two dates (inclusive) as CSV.

        One row per event in recording order; changes rendered as
        ``field: old → new`` joined by ``; ``.
        """
        with self._lock:
            events = [e for e in self._events if start <= e.performed_at.date() <= end]

        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="\n").writerow(CSV_HEADER)
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for event in events:
            writer.writerow(
                [
                    event.performed_at.strftime(CSV_DATE_FORMAT),
                    event.event_type.value,
                    event.entity.entity_type.value,
                    event.entity.entity_name,
                    event.action.value,
                    event.performed_by,
                    event.source.value,
                    "; ".join(change.render() for change in event.changes),
                ]
            )
        return buffer.getvalue()
