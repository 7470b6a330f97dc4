"""Agreement and rate resolution for a worker on a date."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from agreement_engine.calculators.types import ResolvedRate
from agreement_engine.errors import NoApplicableClassificationError, NotFoundError
from agreement_engine.models import (
    AgreementAssignment,
    ClassificationMapping,
    WorkerAgreementAssignment,
)

if TYPE_CHECKING:
    from agreement_engine.services.agreement_store import AgreementStore

logger = logging.getLogger(__name__)


class RateResolver:
    """Resolves the applicable agreements and rates for a worker.

    Resolution per agreement, in priority order:
    1. Pick the classification mapping with the latest effective_from on or
       before the date. When two mappings share that effective_from, the one
       added last wins.
    2. Pick the agreement's rate version in effect on the date.
    3. Look up the classification's rate in that version's snapshot.

    The primary agreement must resolve. Additional agreements with no
    classification yet in effect are skipped.
    """

    def __init__(self, store: AgreementStore):
        self.store = store

    def resolve(
        self,
        assignment: WorkerAgreementAssignment,
        on_date: date,
    ) -> list[ResolvedRate]:
        """Resolve every applicable agreement, ordered by priority.

        Raises:
            NoApplicableClassificationError: If the primary agreement has no
                classification mapping in effect on the date
            NotFoundError: If an agreement, rate version or classification
                rate is missing
        """
        resolved: list[ResolvedRate] = []

        for entry in assignment.ordered_agreements():
            is_primary = entry.agreement_id == assignment.primary_agreement_id
            mapping = self.select_mapping(assignment.mappings_for(entry.agreement_id), on_date)

            if mapping is None:
                if is_primary:
                    raise NoApplicableClassificationError(
                        assignment.worker_id, entry.agreement_id, on_date
                    )
                logger.debug(
                    "Skipping agreement %s for worker %s: no classification in effect on %s",
                    entry.agreement_id,
                    assignment.worker_id,
                    on_date,
                )
                continue

            resolved.append(
                self._resolve_entry(assignment.worker_id, entry, mapping, is_primary, on_date)
            )

        return resolved

    def resolve_primary(
        self,
        assignment: WorkerAgreementAssignment,
        on_date: date,
    ) -> ResolvedRate:
        """Resolve only the primary agreement, the default for calculations."""
        mapping = self.select_mapping(
            assignment.mappings_for(assignment.primary_agreement_id), on_date
        )
        if mapping is None:
            raise NoApplicableClassificationError(
                assignment.worker_id, assignment.primary_agreement_id, on_date
            )
        return self._resolve_entry(
            assignment.worker_id, assignment.primary, mapping, True, on_date
        )

    @staticmethod
    def select_mapping(
        mappings: list[ClassificationMapping],
        on_date: date,
    ) -> ClassificationMapping | None:
        """Select the mapping in effect on a date.

        Latest effective_from wins; ties go to the mapping added last.
        """
        best: ClassificationMapping | None = None
        for mapping in mappings:
            if mapping.effective_from > on_date:
                continue
            # >= so a later-added mapping with the same date replaces the earlier one
            if best is None or mapping.effective_from >= best.effective_from:
                best = mapping
        return best

    def _resolve_entry(
        self,
        worker_id: str,
        entry: AgreementAssignment,
        mapping: ClassificationMapping,
        is_primary: bool,
        on_date: date,
    ) -> ResolvedRate:
        agreement = self.store.get_agreement(entry.agreement_id)
        classification = agreement.get_classification(mapping.classification_code)

        version = self.store.get_version_in_effect(entry.agreement_id, on_date)
        if version is None:
            raise NotFoundError(
                "rate_version",
                entry.agreement_id,
                f"no version in effect on {on_date}",
            )

        rate = version.snapshot.rate_for(mapping.classification_code)
        if rate is None:
            raise NotFoundError(
                "classification_rate",
                mapping.classification_code,
                f"missing from version '{version.version_id}' of agreement '{entry.agreement_id}'",
            )

        snapshot = version.snapshot
        return ResolvedRate(
            worker_id=worker_id,
            agreement_id=agreement.agreement_id,
            agreement_type=agreement.agreement_type,
            agreement_status=agreement.status,
            priority=entry.priority,
            is_primary=is_primary,
            classification_code=classification.code,
            classification_name=classification.name,
            base_hourly_rate=rate.hourly_rate,
            version_id=version.version_id,
            version_effective_from=version.effective_from,
            casual_loading_percent=(
                snapshot.casual_loading_percent
                if snapshot.casual_loading_percent is not None
                else agreement.casual_loading_percent
            ),
            penalty_rates=snapshot.penalty_rates or agreement.penalty_rates,
            overtime=snapshot.overtime or agreement.overtime,
            superannuation_rate=(
                snapshot.superannuation_rate
                if snapshot.superannuation_rate is not None
                else agreement.superannuation_rate
            ),
            mapped_award_classification=classification.mapped_award_classification,
            allowances=snapshot.allowances or agreement.allowances,
        )
