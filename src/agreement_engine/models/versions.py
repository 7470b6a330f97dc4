"""Effective-dated rate version models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from agreement_engine.models.agreement import Allowance, OvertimeRuleSet, PenaltyRateTable


class VersionChangeType(str, Enum):
    """Kinds of change between rate versions."""

    RATE_INCREASE = "rate_increase"
    ALLOWANCE_CHANGE = "allowance_change"
    PENALTY_CHANGE = "penalty_change"
    NEW_ENTITLEMENT = "new_entitlement"
    REMOVED_ENTITLEMENT = "removed_entitlement"
    STRUCTURAL = "structural"


@dataclass(frozen=True)
class VersionChange:
    """A single field-level change carried by a rate version."""

    field: str
    previous_value: Any = None
    new_value: Any = None
    change_type: VersionChangeType = VersionChangeType.RATE_INCREASE
    description: str = ""

    @property
    def change_percent(self) -> Decimal | None:
        """Percentage change for numeric values, if computable."""
        if not isinstance(self.previous_value, (int, Decimal)) or not isinstance(
            self.new_value, (int, Decimal)
        ):
            return None
        if self.previous_value == 0:
            return None
        return (Decimal(self.new_value) - Decimal(self.previous_value)) / Decimal(
            self.previous_value
        ) * 100


@dataclass(frozen=True)
class ClassificationRate:
    """Minimum rates for one classification in a snapshot."""

    code: str
    name: str
    hourly_rate: Decimal
    weekly_rate: Decimal | None = None
    annual_rate: Decimal | None = None


@dataclass(frozen=True)
class RateSnapshot:
    """Full rate table for an agreement at one effective date.

    Pay terms left as None fall back to the agreement's own terms.
    """

    classifications: tuple[ClassificationRate, ...]
    casual_loading_percent: Decimal | None = None
    penalty_rates: PenaltyRateTable | None = None
    overtime: OvertimeRuleSet | None = None
    superannuation_rate: Decimal | None = None
    allowances: tuple[Allowance, ...] = ()

    def rate_for(self, classification_code: str) -> ClassificationRate | None:
        for rate in self.classifications:
            if rate.code == classification_code:
                return rate
        return None


@dataclass(frozen=True)
class RateVersion:
    """One effective-dated snapshot of an agreement's rates."""

    version_id: str
    agreement_id: str
    version_label: str
    effective_from: date
    reference: str | None
    changes: tuple[VersionChange, ...]
    snapshot: RateSnapshot
    is_current: bool
    created_at: datetime
    created_by: str
    effective_to: date | None = None  # None = open-ended
    notes: str | None = None
    changes_summary: str = ""

    def is_in_effect_on(self, on_date: date) -> bool:
        if on_date < self.effective_from:
            return False
        if self.effective_to is not None and on_date > self.effective_to:
            return False
        return True


@dataclass(frozen=True)
class VersionedAgreement:
    """Version history of a single agreement with its current pointer.

    Replaced wholesale on every new version, so readers always see one
    consistent history with exactly one current version.
    """

    agreement_id: str
    versions: tuple[RateVersion, ...] = ()
    current_version_id: str | None = None
    revision: int = 0

    @property
    def current(self) -> RateVersion | None:
        for version in self.versions:
            if version.version_id == self.current_version_id:
                return version
        return None

    def history(self) -> list[RateVersion]:
        """Versions ordered by effective date, newest first."""
        return sorted(self.versions, key=lambda v: v.effective_from, reverse=True)

    def in_effect_on(self, on_date: date) -> RateVersion | None:
        for version in self.history():
            if version.is_in_effect_on(on_date):
                return version
        return None
