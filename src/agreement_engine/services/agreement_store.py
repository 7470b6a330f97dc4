"""Authoritative, versioned record of agreements and their rate tables.

Each agreement's versions live in a VersionedAgreement aggregate. Creating a
version builds a new aggregate (old current retired, new one current) and
swaps it in with a compare-and-swap on the aggregate revision, under a lock
held per agreement id. Readers only ever see a whole aggregate, so there is
always exactly one current version once the first has been created.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from agreement_engine.errors import (
    InvalidEffectiveDateError,
    InvariantViolationError,
    NotFoundError,
)
from agreement_engine.models import (
    Agreement,
    AgreementStatus,
    AuditEventType,
    AuditSource,
    EnterpriseAgreement,
    EntityRef,
    EntityType,
    FieldChange,
    ModernAward,
    RateSnapshot,
    RateVersion,
    VersionChange,
    VersionedAgreement,
)
from agreement_engine.services.audit_ledger import AuditLedger
from agreement_engine.services.locking import KeyedLock

logger = logging.getLogger(__name__)


def _entity_for(agreement: Agreement) -> EntityRef:
    entity_type = EntityType.AWARD if isinstance(agreement, ModernAward) else EntityType.EBA
    return EntityRef(entity_type, agreement.agreement_id, agreement.name)


def summarize_changes(changes: Iterable[VersionChange]) -> str:
    parts = []
    for change in changes:
        if change.description:
            parts.append(change.description)
        else:
            parts.append(f"{change.field}: {change.previous_value} → {change.new_value}")
    return "; ".join(parts)


class AgreementStore:
    """In-memory agreement store with effective-dated rate versions.

    Every mutation is written to the audit ledger while the agreement's
    lock is held. Alert rules must not write back to the same agreement.
    """

    def __init__(
        self,
        ledger: AuditLedger | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.ledger = ledger or AuditLedger(clock=clock)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._guard = threading.Lock()
        self._locks = KeyedLock()
        self._agreements: dict[str, Agreement] = {}
        self._versions: dict[str, VersionedAgreement] = {}

    # Agreements

    def register_agreement(self, agreement: Agreement, actor: str = "system") -> Agreement:
        """Add an agreement and record that it was enabled or created."""
        with self._locks.hold(agreement.agreement_id):
            with self._guard:
                if agreement.agreement_id in self._agreements:
                    raise ValueError(f"Agreement '{agreement.agreement_id}' is already registered")
                self._agreements[agreement.agreement_id] = agreement
                self._versions[agreement.agreement_id] = VersionedAgreement(agreement.agreement_id)

            event_type = (
                AuditEventType.AWARD_ENABLED
                if isinstance(agreement, ModernAward)
                else AuditEventType.EBA_CREATED
            )
            self.ledger.record(
                event_type,
                _entity_for(agreement),
                [FieldChange("status", None, agreement.status.value)],
                actor=actor,
            )
        logger.info(
            "Registered %s '%s' (%s)",
            agreement.agreement_type.value,
            agreement.agreement_id,
            agreement.name,
        )
        return agreement

    def get_agreement(self, agreement_id: str) -> Agreement:
        agreement = self._agreements.get(agreement_id)
        if agreement is None:
            raise NotFoundError("agreement", agreement_id)
        return agreement

    def list_agreements(self, status: AgreementStatus | None = None) -> list[Agreement]:
        with self._guard:
            agreements = list(self._agreements.values())
        if status is not None:
            agreements = [a for a in agreements if a.status == status]
        return agreements

    def set_status(
        self,
        agreement_id: str,
        status: AgreementStatus,
        actor: str,
        reason: str | None = None,
    ) -> Agreement:
        """Change an agreement's lifecycle status.

        Raises:
            NotFoundError: If the agreement is unknown
            InvariantViolationError: If the agreement has been superseded
        """
        with self._locks.hold(agreement_id):
            current = self.get_agreement(agreement_id)
            if current.status == AgreementStatus.SUPERSEDED:
                raise InvariantViolationError(
                    f"Agreement '{agreement_id}' is superseded and cannot change"
                )
            if current.status == status:
                return current

            updated = replace(current, status=status)
            with self._guard:
                self._agreements[agreement_id] = updated

            self.ledger.record(
                self._status_event_type(updated),
                _entity_for(updated),
                [FieldChange("status", current.status.value, status.value)],
                actor=actor,
                reason=reason,
            )
        logger.info(
            "Agreement '%s' status %s -> %s",
            agreement_id,
            current.status.value,
            status.value,
        )
        return updated

    @staticmethod
    def _status_event_type(agreement: Agreement) -> AuditEventType:
        if isinstance(agreement, ModernAward):
            if agreement.status == AgreementStatus.ACTIVE:
                return AuditEventType.AWARD_ENABLED
            return AuditEventType.AWARD_DISABLED
        if isinstance(agreement, EnterpriseAgreement) and agreement.status == AgreementStatus.EXPIRED:
            return AuditEventType.EBA_EXPIRED
        return AuditEventType.EBA_UPDATED

    # Versions

    def versioned(self, agreement_id: str) -> VersionedAgreement:
        """The agreement's version aggregate as one consistent snapshot."""
        self.get_agreement(agreement_id)
        return self._versions[agreement_id]

    def get_current_version(self, agreement_id: str) -> RateVersion | None:
        """Current version, or None if the agreement is unknown or unversioned."""
        aggregate = self._versions.get(agreement_id)
        return aggregate.current if aggregate else None

    def get_version_history(self, agreement_id: str) -> list[RateVersion]:
        """Versions newest first by effective date."""
        aggregate = self._versions.get(agreement_id)
        return aggregate.history() if aggregate else []

    def get_version_in_effect(self, agreement_id: str, on_date: date) -> RateVersion | None:
        aggregate = self._versions.get(agreement_id)
        return aggregate.in_effect_on(on_date) if aggregate else None

    def create_version_snapshot(
        self,
        agreement_id: str,
        effective_date: date,
        reference: str | None,
        changes: Iterable[VersionChange],
        rate_snapshot: RateSnapshot,
        actor: str,
        version_label: str | None = None,
        notes: str | None = None,
        source: AuditSource = AuditSource.IMPORT,
    ) -> RateVersion:
        """Add a new current rate version and retire the previous one.

        The retired version's effective_to becomes the day before the new
        version takes effect.

        Raises:
            NotFoundError: If the agreement is unknown
            InvalidEffectiveDateError: If effective_date is not strictly after
                the current version's effective date
            InvariantViolationError: If the agreement has been superseded
        """
        changes = tuple(changes)
        summary = summarize_changes(changes)

        with self._locks.hold(agreement_id):
            agreement = self.get_agreement(agreement_id)
            if agreement.status == AgreementStatus.SUPERSEDED:
                raise InvariantViolationError(
                    f"Agreement '{agreement_id}' is superseded and cannot be versioned"
                )

            aggregate = self._versions[agreement_id]
            current = aggregate.current
            if current is not None and effective_date <= current.effective_from:
                raise InvalidEffectiveDateError(
                    agreement_id, effective_date, current.effective_from
                )

            version = RateVersion(
                version_id=str(uuid4()),
                agreement_id=agreement_id,
                version_label=version_label or effective_date.isoformat(),
                effective_from=effective_date,
                reference=reference,
                changes=changes,
                snapshot=rate_snapshot,
                is_current=True,
                created_at=self._clock(),
                created_by=actor,
                notes=notes,
                changes_summary=summary,
            )

            versions = []
            for existing in aggregate.versions:
                if current is not None and existing.version_id == current.version_id:
                    existing = replace(
                        existing,
                        is_current=False,
                        effective_to=effective_date - timedelta(days=1),
                    )
                versions.append(existing)
            versions.append(version)

            self._swap(
                aggregate,
                VersionedAgreement(
                    agreement_id=agreement_id,
                    versions=tuple(versions),
                    current_version_id=version.version_id,
                    revision=aggregate.revision + 1,
                ),
            )

            # Recorded under the lock so event order matches version order
            event_type = (
                AuditEventType.FWC_RATE_UPDATE
                if isinstance(agreement, ModernAward)
                else AuditEventType.EBA_UPDATED
            )
            self.ledger.record(
                event_type,
                _entity_for(agreement),
                [FieldChange(c.field, c.previous_value, c.new_value) for c in changes],
                actor=actor,
                source=source,
                reason=summary or None,
            )
        logger.info(
            "Created rate version %s for '%s' effective %s",
            version.version_label,
            agreement_id,
            effective_date,
        )
        return version

    def _swap(self, expected: VersionedAgreement, replacement: VersionedAgreement) -> None:
        """Compare-and-swap an agreement's version aggregate."""
        with self._guard:
            stored = self._versions.get(expected.agreement_id)
            if stored is None or stored.revision != expected.revision:
                raise InvariantViolationError(
                    f"Concurrent version change for agreement '{expected.agreement_id}'"
                )
            if sum(1 for v in replacement.versions if v.is_current) != 1:
                raise InvariantViolationError(
                    f"Agreement '{expected.agreement_id}' must have exactly one current version"
                )
            self._versions[expected.agreement_id] = replacement
