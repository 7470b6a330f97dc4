"""Agreement, classification and pay-term models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from agreement_engine.errors import NotFoundError


class AgreementType(str, Enum):
    """Kinds of pay-and-conditions agreements."""

    MODERN_AWARD = "modern_award"
    ENTERPRISE_AGREEMENT = "enterprise_agreement"
    INDIVIDUAL_FLEXIBILITY = "individual_flexibility"


class AgreementStatus(str, Enum):
    """Agreement lifecycle status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"
    SUPERSEDED = "superseded"


class AustralianState(str, Enum):
    """States and territories used for coverage and long service leave."""

    NSW = "NSW"
    VIC = "VIC"
    QLD = "QLD"
    SA = "SA"
    WA = "WA"
    TAS = "TAS"
    NT = "NT"
    ACT = "ACT"


class DayType(str, Enum):
    """Day categories for penalty selection."""

    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    PUBLIC_HOLIDAY = "public_holiday"


@dataclass(frozen=True)
class Classification:
    """A pay grade within an agreement."""

    code: str
    name: str
    level: int
    description: str = ""
    required_qualifications: tuple[str, ...] = ()
    min_experience_months: int | None = None
    # Award classification code this maps to, for better-off-overall checks
    mapped_award_classification: str | None = None


@dataclass(frozen=True)
class TimeWindow:
    """A time-of-day loading window, e.g. evening 18:00-21:00 at 110%.

    Windows may wrap past midnight (night 21:00-06:00).
    """

    start: time
    end: time
    percent: Decimal

    def __post_init__(self) -> None:
        if self.percent < 0:
            raise ValueError("Time window percent must be non-negative")
        if self.start == self.end:
            raise ValueError("Time window must not be empty")

    @property
    def multiplier(self) -> Decimal:
        return self.percent / 100

    def contains(self, moment: time) -> bool:
        """Check whether a time of day falls in [start, end)."""
        if self.start < self.end:
            return self.start <= moment < self.end
        return moment >= self.start or moment < self.end

    def overlaps(self, other: TimeWindow) -> bool:
        return (
            self.contains(other.start)
            or other.contains(self.start)
        )


@dataclass(frozen=True)
class PenaltyRateTable:
    """Day-type penalties and time-of-day loadings, as percentages of base."""

    saturday_percent: Decimal = Decimal("150")
    sunday_percent: Decimal = Decimal("200")
    public_holiday_percent: Decimal = Decimal("250")
    weekday_percent: Decimal = Decimal("100")
    evening: TimeWindow | None = None
    night: TimeWindow | None = None

    def __post_init__(self) -> None:
        for name in (
            "saturday_percent",
            "sunday_percent",
            "public_holiday_percent",
            "weekday_percent",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    def percent_for(self, day_type: DayType) -> Decimal:
        """Return the single day-type penalty percent. Penalties never stack."""
        if day_type == DayType.PUBLIC_HOLIDAY:
            return self.public_holiday_percent
        if day_type == DayType.SUNDAY:
            return self.sunday_percent
        if day_type == DayType.SATURDAY:
            return self.saturday_percent
        return self.weekday_percent

    def window_for(self, start: time) -> TimeWindow | None:
        """Return the time-of-day window a shift start falls in.

        Evening is checked first so it wins when windows overlap.
        """
        for window in (self.evening, self.night):
            if window is not None and window.contains(start):
                return window
        return None

    @property
    def windows_overlap(self) -> bool:
        if self.evening is None or self.night is None:
            return False
        return self.evening.overlaps(self.night)


@dataclass(frozen=True)
class OvertimeRuleSet:
    """Daily overtime tiers as percentages of the casual-loaded base rate."""

    daily_threshold_hours: Decimal = Decimal("8")
    first_tier_hours: Decimal = Decimal("2")
    first_tier_percent: Decimal = Decimal("150")
    second_tier_percent: Decimal = Decimal("200")

    def __post_init__(self) -> None:
        if self.daily_threshold_hours <= 0:
            raise ValueError("daily_threshold_hours must be positive")
        if self.first_tier_hours < 0:
            raise ValueError("first_tier_hours must be non-negative")
        if self.first_tier_percent < 0 or self.second_tier_percent < 0:
            raise ValueError("Overtime percents must be non-negative")


@dataclass(frozen=True)
class Allowance:
    """An allowance payable under an agreement."""

    code: str
    name: str
    amount: Decimal
    frequency: str  # per_hour, per_shift, per_week, per_annum, per_occurrence
    is_taxable: bool = True
    is_super_applicable: bool = False

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Allowance {self.code} amount must be non-negative")


@dataclass(frozen=True)
class LeaveEntitlement:
    """Leave entitlement granted by an agreement, in days per year."""

    leave_type: str
    entitlement_days: Decimal
    accrual_method: str = "progressive"
    exceeds_nes: bool = False


@dataclass(frozen=True)
class Agreement:
    """Base for all agreement kinds.

    Agreements are replaced, never mutated: status changes produce a new
    instance in the store. Once superseded an agreement is immutable.
    """

    agreement_type: ClassVar[AgreementType]

    agreement_id: str
    name: str
    code: str = ""
    status: AgreementStatus = AgreementStatus.ACTIVE
    applicable_states: tuple[AustralianState, ...] = ()
    industry_classifications: tuple[str, ...] = ()
    classifications: tuple[Classification, ...] = ()
    penalty_rates: PenaltyRateTable = field(default_factory=PenaltyRateTable)
    overtime: OvertimeRuleSet = field(default_factory=OvertimeRuleSet)
    casual_loading_percent: Decimal = Decimal("25")
    allowances: tuple[Allowance, ...] = ()
    leave_entitlements: tuple[LeaveEntitlement, ...] = ()
    superannuation_rate: Decimal = Decimal("11.5")

    def get_classification(self, code: str) -> Classification:
        for classification in self.classifications:
            if classification.code == code:
                return classification
        raise NotFoundError("classification", code, f"not defined by agreement '{self.agreement_id}'")

    def covers_state(self, state: AustralianState) -> bool:
        """An agreement with no listed states applies nationally."""
        return not self.applicable_states or state in self.applicable_states


@dataclass(frozen=True)
class ModernAward(Agreement):
    """A regulator-published Modern Award."""

    agreement_type: ClassVar[AgreementType] = AgreementType.MODERN_AWARD

    award_reference: str | None = None


@dataclass(frozen=True)
class EnterpriseAgreement(Agreement):
    """An enterprise agreement, tested against its underlying award."""

    agreement_type: ClassVar[AgreementType] = AgreementType.ENTERPRISE_AGREEMENT

    underlying_award_id: str | None = None
    commencement_date: date | None = None
    nominal_expiry_date: date | None = None
    approval_reference: str | None = None


@dataclass(frozen=True)
class IndividualFlexibilityArrangement(Agreement):
    """A per-worker variation of an award or enterprise agreement."""

    agreement_type: ClassVar[AgreementType] = AgreementType.INDIVIDUAL_FLEXIBILITY

    worker_id: str | None = None
    base_agreement_id: str | None = None
