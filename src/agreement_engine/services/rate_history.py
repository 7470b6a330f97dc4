"""Historical rate trends for one classification across an agreement's versions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from agreement_engine.errors import NotFoundError
from agreement_engine.services.agreement_store import AgreementStore

TWO_PLACES = Decimal("0.01")
DAYS_PER_YEAR = Decimal("365.25")


def _pct(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RateHistoryEntry:
    version_id: str
    version_label: str
    effective_from: date
    hourly_rate: Decimal
    weekly_rate: Decimal | None
    annual_rate: Decimal | None
    change_from_previous: Decimal | None
    change_percent_from_previous: Decimal | None


@dataclass(frozen=True)
class HistoricalRateComparison:
    agreement_id: str
    classification_code: str
    classification_name: str
    history: tuple[RateHistoryEntry, ...]  # newest first
    average_increase_percent: Decimal
    compound_annual_growth_rate: Decimal
    projected_next_rate: Decimal | None


def historical_rate_comparison(
    store: AgreementStore,
    agreement_id: str,
    classification_code: str,
) -> HistoricalRateComparison:
    """Rate history and trend for a classification.

    Versions that do not rate the classification are skipped; each entry's
    change is measured against the next older version that does.
    """
    agreement = store.get_agreement(agreement_id)
    try:
        classification_name = agreement.get_classification(classification_code).name
    except NotFoundError:
        classification_name = classification_code

    rated = []
    for version in store.get_version_history(agreement_id):
        rate = version.snapshot.rate_for(classification_code)
        if rate is not None:
            rated.append((version, rate))

    entries = []
    percents = []
    for index, (version, rate) in enumerate(rated):
        change = change_percent = None
        if index + 1 < len(rated):
            previous = rated[index + 1][1].hourly_rate
            change = rate.hourly_rate - previous
            if previous > 0:
                change_percent = change / previous * 100
                percents.append(change_percent)
        entries.append(
            RateHistoryEntry(
                version_id=version.version_id,
                version_label=version.version_label,
                effective_from=version.effective_from,
                hourly_rate=rate.hourly_rate,
                weekly_rate=rate.weekly_rate,
                annual_rate=rate.annual_rate,
                change_from_previous=change,
                change_percent_from_previous=(
                    _pct(change_percent) if change_percent is not None else None
                ),
            )
        )

    average = sum(percents, Decimal("0")) / len(percents) if percents else Decimal("0")

    cagr = Decimal("0")
    if len(entries) >= 2:
        newest, oldest = entries[0], entries[-1]
        years = Decimal((newest.effective_from - oldest.effective_from).days) / DAYS_PER_YEAR
        if years > 0 and oldest.hourly_rate > 0:
            cagr = ((newest.hourly_rate / oldest.hourly_rate) ** (1 / years) - 1) * 100

    projected = entries[0].hourly_rate * (1 + average / 100) if entries else None

    return HistoricalRateComparison(
        agreement_id=agreement_id,
        classification_code=classification_code,
        classification_name=classification_name,
        history=tuple(entries),
        average_increase_percent=_pct(average),
        compound_annual_growth_rate=_pct(cagr),
        projected_next_rate=projected,
    )
