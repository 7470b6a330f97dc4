"""Type definitions for the resolution and pricing pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from agreement_engine.models import (
    AgreementStatus,
    Allowance,
    AgreementType,
    DayType,
    OvertimeRuleSet,
    PenaltyRateTable,
    ShiftContext,
)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class ResolvedRate:
    """The rate and pay terms one agreement gives a worker on a date."""

    worker_id: str
    agreement_id: str
    agreement_type: AgreementType
    agreement_status: AgreementStatus
    priority: int
    is_primary: bool
    classification_code: str
    classification_name: str
    base_hourly_rate: Decimal
    version_id: str
    version_effective_from: date
    casual_loading_percent: Decimal
    penalty_rates: PenaltyRateTable
    overtime: OvertimeRuleSet
    superannuation_rate: Decimal
    mapped_award_classification: str | None = None
    allowances: tuple[Allowance, ...] = ()


class SegmentKind(str, Enum):
    """Pay segment categories."""

    ORDINARY = "ordinary"
    OVERTIME_FIRST_TIER = "overtime_first_tier"
    OVERTIME_SECOND_TIER = "overtime_second_tier"


@dataclass(frozen=True)
class PaySegment:
    """One priced block of worked time."""

    label: str
    kind: SegmentKind
    minutes: int
    hours: Decimal
    rate: Decimal
    amount: Decimal  # hours × rate, unrounded


@dataclass(frozen=True)
class AllowanceLine:
    """An allowance paid on a shift, kept apart from worked-time segments."""

    code: str
    name: str
    frequency: str
    amount: Decimal
    description: str
    is_super_applicable: bool = False


@dataclass(frozen=True)
class PayBreakdown:
    """Priced shift.

    Totals are always derived from the segments, so segment hours sum to
    worked hours and segment amounts sum to total pay with no drift.
    Allowances are reported separately and only enter total_cost.
    Rounding happens only in display_total().
    """

    shift: ShiftContext
    worker_id: str
    agreement_id: str
    classification_code: str
    segments: tuple[PaySegment, ...]
    base_rate: Decimal
    loaded_base_rate: Decimal
    day_type: DayType
    day_type_multiplier: Decimal
    time_of_day_multiplier: Decimal
    time_of_day_label: str | None
    superannuation_rate: Decimal
    allowances: tuple[AllowanceLine, ...] = ()

    @property
    def worked_minutes(self) -> int:
        return sum(segment.minutes for segment in self.segments)

    @property
    def worked_hours(self) -> Decimal:
        return sum((segment.hours for segment in self.segments), Decimal("0"))

    @property
    def total_pay(self) -> Decimal:
        return sum((segment.amount for segment in self.segments), Decimal("0"))

    @property
    def effective_hourly_rate(self) -> Decimal:
        return self.total_pay / self.worked_hours

    @property
    def ordinary_hours(self) -> Decimal:
        return sum(
            (s.hours for s in self.segments if s.kind == SegmentKind.ORDINARY),
            Decimal("0"),
        )

    @property
    def overtime_hours(self) -> Decimal:
        return self.worked_hours - self.ordinary_hours

    @property
    def combined_rate(self) -> Decimal:
        """Rate for ordinary hours: casual × day-type × time-of-day."""
        return self.loaded_base_rate * self.day_type_multiplier * self.time_of_day_multiplier

    @property
    def allowances_total(self) -> Decimal:
        return sum((line.amount for line in self.allowances), Decimal("0"))

    @property
    def total_cost(self) -> Decimal:
        """Pay for worked time plus allowances."""
        return self.total_pay + self.allowances_total

    @property
    def superannuation(self) -> Decimal:
        """Super on worked-time pay and super-applicable allowances."""
        ordinary_time_earnings = self.total_pay + sum(
            (line.amount for line in self.allowances if line.is_super_applicable),
            Decimal("0"),
        )
        return ordinary_time_earnings * self.superannuation_rate / 100

    def display_total(self) -> Decimal:
        """Total pay rounded to cents for presentation."""
        return self.total_pay.quantize(CENTS, rounding=ROUND_HALF_UP)
