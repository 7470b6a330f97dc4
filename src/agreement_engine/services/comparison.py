"""Better-off-overall comparison of an agreement against its reference award."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from agreement_engine.errors import NotFoundError
from agreement_engine.models import Agreement, PenaltyRateTable, RateVersion
from agreement_engine.services.agreement_store import AgreementStore

TWO_PLACES = Decimal("0.01")


class OverallResult(str, Enum):
    COMPARISON_BETTER = "comparison_better"
    BASE_BETTER = "base_better"
    EQUIVALENT = "equivalent"


@dataclass(frozen=True)
class ClassificationComparison:
    comparison_code: str
    comparison_name: str
    base_code: str
    base_hourly_rate: Decimal
    comparison_hourly_rate: Decimal

    @property
    def difference(self) -> Decimal:
        return self.comparison_hourly_rate - self.base_hourly_rate

    @property
    def difference_percent(self) -> Decimal:
        if self.base_hourly_rate <= 0:
            return Decimal("0")
        return (self.difference / self.base_hourly_rate * 100).quantize(
            TWO_PLACES, rounding=ROUND_HALF_UP
        )


@dataclass(frozen=True)
class TermComparison:
    """A percentage term (penalty or loading) in both agreements."""

    term: str
    base_percent: Decimal
    comparison_percent: Decimal

    @property
    def difference(self) -> Decimal:
        return self.comparison_percent - self.base_percent


@dataclass(frozen=True)
class AgreementComparison:
    base_agreement_id: str
    comparison_agreement_id: str
    on_date: date
    classifications: tuple[ClassificationComparison, ...]
    terms: tuple[TermComparison, ...]
    overall: OverallResult
    notes: tuple[str, ...]


def _version_on(store: AgreementStore, agreement_id: str, on_date: date) -> RateVersion:
    version = store.get_version_in_effect(agreement_id, on_date)
    if version is None:
        raise NotFoundError("rate_version", agreement_id, f"no version in effect on {on_date}")
    return version


def _penalties(agreement: Agreement, version: RateVersion) -> PenaltyRateTable:
    return version.snapshot.penalty_rates or agreement.penalty_rates


def _casual_loading(agreement: Agreement, version: RateVersion) -> Decimal:
    if version.snapshot.casual_loading_percent is not None:
        return version.snapshot.casual_loading_percent
    return agreement.casual_loading_percent


def compare_agreements(
    store: AgreementStore,
    base_agreement_id: str,
    comparison_agreement_id: str,
    on_date: date,
) -> AgreementComparison:
    """Compare rates and percentage terms in effect on a date.

    Classifications are paired through the comparison agreement's
    mapped_award_classification. Unpaired or unrated classifications are
    listed in the notes and left out of the overall result.
    """
    base = store.get_agreement(base_agreement_id)
    comparison = store.get_agreement(comparison_agreement_id)
    base_version = _version_on(store, base_agreement_id, on_date)
    comparison_version = _version_on(store, comparison_agreement_id, on_date)

    notes: list[str] = []
    pairs: list[ClassificationComparison] = []
    for classification in comparison.classifications:
        base_code = classification.mapped_award_classification
        if base_code is None:
            notes.append(f"{classification.code} has no mapped award classification")
            continue
        base_rate = base_version.snapshot.rate_for(base_code)
        comparison_rate = comparison_version.snapshot.rate_for(classification.code)
        if base_rate is None or comparison_rate is None:
            notes.append(f"{classification.code} → {base_code} has no rate on {on_date}")
            continue

        pair = ClassificationComparison(
            comparison_code=classification.code,
            comparison_name=classification.name,
            base_code=base_code,
            base_hourly_rate=base_rate.hourly_rate,
            comparison_hourly_rate=comparison_rate.hourly_rate,
        )
        pairs.append(pair)
        if pair.difference < 0:
            notes.append(
                f"{pair.comparison_code} is ${-pair.difference:.2f}/hr below "
                f"{pair.base_code} ({pair.difference_percent}%)"
            )

    base_penalties = _penalties(base, base_version)
    comparison_penalties = _penalties(comparison, comparison_version)
    terms = (
        TermComparison(
            "saturday",
            base_penalties.saturday_percent,
            comparison_penalties.saturday_percent,
        ),
        TermComparison(
            "sunday",
            base_penalties.sunday_percent,
            comparison_penalties.sunday_percent,
        ),
        TermComparison(
            "public_holiday",
            base_penalties.public_holiday_percent,
            comparison_penalties.public_holiday_percent,
        ),
        TermComparison(
            "casual_loading",
            _casual_loading(base, base_version),
            _casual_loading(comparison, comparison_version),
        ),
    )
    for term in terms:
        if term.difference < 0:
            notes.append(
                f"{term.term} is {term.comparison_percent}% against {term.base_percent}% in the award"
            )

    differences = [pair.difference for pair in pairs]
    if any(d < 0 for d in differences):
        overall = OverallResult.BASE_BETTER
    elif any(d > 0 for d in differences):
        overall = OverallResult.COMPARISON_BETTER
    else:
        overall = OverallResult.EQUIVALENT

    return AgreementComparison(
        base_agreement_id=base_agreement_id,
        comparison_agreement_id=comparison_agreement_id,
        on_date=on_date,
        classifications=tuple(pairs),
        terms=terms,
        overall=overall,
        notes=tuple(notes),
    )
