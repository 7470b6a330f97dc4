"""Worker-to-agreement assignment models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from agreement_engine.errors import InvalidAssignmentError


@dataclass(frozen=True)
class AgreementAssignment:
    """One agreement that applies to a worker, with its precedence.

    Lower priority values apply first when conditions conflict.
    """

    agreement_id: str
    priority: int
    applicable_conditions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassificationMapping:
    """The worker's classification under one agreement from a given date."""

    agreement_id: str
    classification_code: str
    effective_from: date


@dataclass(frozen=True)
class WorkerAgreementAssignment:
    """All agreements a worker is covered by, in a strict priority order.

    Construction rejects duplicate priorities, a primary that is not the
    lowest priority, and an agreement listed more than once.
    """

    worker_id: str
    primary: AgreementAssignment
    additional: tuple[AgreementAssignment, ...] = ()
    classification_mappings: tuple[ClassificationMapping, ...] = ()

    def __post_init__(self) -> None:
        entries = [self.primary, *self.additional]

        priorities = [entry.priority for entry in entries]
        if len(set(priorities)) != len(priorities):
            raise InvalidAssignmentError(
                f"Worker '{self.worker_id}' has duplicate agreement priorities: {sorted(priorities)}"
            )

        agreement_ids = [entry.agreement_id for entry in entries]
        if len(set(agreement_ids)) != len(agreement_ids):
            raise InvalidAssignmentError(
                f"Worker '{self.worker_id}' lists an agreement more than once"
            )

        if any(entry.priority < self.primary.priority for entry in self.additional):
            raise InvalidAssignmentError(
                f"Primary agreement '{self.primary.agreement_id}' must have the lowest priority"
            )

        unknown = {m.agreement_id for m in self.classification_mappings} - set(agreement_ids)
        if unknown:
            raise InvalidAssignmentError(
                f"Classification mappings reference unassigned agreements: {sorted(unknown)}"
            )

    @property
    def primary_agreement_id(self) -> str:
        return self.primary.agreement_id

    def ordered_agreements(self) -> list[AgreementAssignment]:
        """Assignments in priority order, primary first."""
        return sorted([self.primary, *self.additional], key=lambda a: a.priority)

    def mappings_for(self, agreement_id: str) -> list[ClassificationMapping]:
        """Mappings for one agreement in insertion order."""
        return [m for m in self.classification_mappings if m.agreement_id == agreement_id]

    def with_mapping(self, mapping: ClassificationMapping) -> WorkerAgreementAssignment:
        """Return a copy with a classification mapping appended."""
        return WorkerAgreementAssignment(
            worker_id=self.worker_id,
            primary=self.primary,
            additional=self.additional,
            classification_mappings=(*self.classification_mappings, mapping),
        )
