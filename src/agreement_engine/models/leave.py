"""Leave accrual models and statutory tables."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from agreement_engine.models.agreement import AustralianState
from agreement_engine.models.shift import EmploymentBasis


class LeaveType(str, Enum):
    ANNUAL_LEAVE = "annual_leave"
    PERSONAL_LEAVE = "personal_leave"
    LONG_SERVICE_LEAVE = "long_service_leave"


class SeparationType(str, Enum):
    RESIGNATION = "resignation"
    TERMINATION = "termination"
    REDUNDANCY = "redundancy"


@dataclass(frozen=True)
class LSLStateRules:
    """Long service leave rules for one state or territory."""

    state: AustralianState
    state_name: str
    accrual_start_years: Decimal
    entitlement_years: Decimal
    entitlement_weeks: Decimal
    pro_rata_years: Decimal | None
    pro_rata_on_resignation: bool
    pro_rata_on_termination: bool
    additional_weeks_per_year: Decimal
    notes: str = ""

    @property
    def pro_rata_threshold_years(self) -> Decimal:
        return self.pro_rata_years if self.pro_rata_years is not None else self.entitlement_years

    @property
    def accrual_rate(self) -> Decimal:
        """LSL hours accrued per hour worked."""
        return self.entitlement_weeks / (self.entitlement_years * 52)


def _rules(
    state: AustralianState,
    name: str,
    entitlement_years: str,
    entitlement_weeks: str,
    pro_rata_years: str,
    on_resignation: bool,
    on_termination: bool,
    additional_weeks: str,
    notes: str,
) -> LSLStateRules:
    return LSLStateRules(
        state=state,
        state_name=name,
        accrual_start_years=Decimal("0"),
        entitlement_years=Decimal(entitlement_years),
        entitlement_weeks=Decimal(entitlement_weeks),
        pro_rata_years=Decimal(pro_rata_years),
        pro_rata_on_resignation=on_resignation,
        pro_rata_on_termination=on_termination,
        additional_weeks_per_year=Decimal(additional_weeks),
        notes=notes,
    )


LSL_STATE_RULES: dict[AustralianState, LSLStateRules] = {
    AustralianState.NSW: _rules(
        AustralianState.NSW, "New South Wales", "10", "8.67", "5", True, True, "0.867",
        "Long Service Leave Act 1955. Pro-rata available after 5 years.",
    ),
    AustralianState.VIC: _rules(
        AustralianState.VIC, "Victoria", "7", "6.07", "7", True, True, "0.867",
        "Long Service Leave Act 2018. Entitlement at 7 years.",
    ),
    AustralianState.QLD: _rules(
        AustralianState.QLD, "Queensland", "10", "8.67", "7", False, True, "0.867",
        "Industrial Relations Act 2016. Pro-rata on termination after 7 years.",
    ),
    AustralianState.SA: _rules(
        AustralianState.SA, "South Australia", "10", "13", "7", True, True, "1.3",
        "Long Service Leave Act 1987. 13 weeks entitlement.",
    ),
    AustralianState.WA: _rules(
        AustralianState.WA, "Western Australia", "10", "8.67", "7", False, True, "0.867",
        "Long Service Leave Act 1958. Pro-rata only on termination.",
    ),
    AustralianState.TAS: _rules(
        AustralianState.TAS, "Tasmania", "10", "8.67", "7", True, True, "0.867",
        "Long Service Leave Act 1976.",
    ),
    AustralianState.NT: _rules(
        AustralianState.NT, "Northern Territory", "10", "13", "7", True, True, "1.3",
        "Long Service Leave Act 1981. 13 weeks entitlement.",
    ),
    AustralianState.ACT: _rules(
        AustralianState.ACT, "Australian Capital Territory", "7", "6.07", "5", True, True, "0.867",
        "Long Service Leave Act 1976. Entitlement at 7 years.",
    ),
}

# NES accrual per hour worked: 4 weeks annual leave, 10 days personal leave
NES_ANNUAL_LEAVE_RATE = Decimal("0.07692")
NES_PERSONAL_LEAVE_RATE = Decimal("0.03846")


@dataclass(frozen=True)
class AccrualLine:
    """Accrual for one leave type, with the formula used."""

    leave_type: LeaveType
    hours_accrued: Decimal
    rate: Decimal
    formula: str
    notes: str = ""


@dataclass(frozen=True)
class AccrualCalculation:
    """Accrual for a period of work, per leave type."""

    hours_worked: Decimal
    employment_basis: EmploymentBasis
    service_years: Decimal
    state: AustralianState
    lines: tuple[AccrualLine, ...]
    lsl_entitlement_reached: bool = False

    def hours_for(self, leave_type: LeaveType) -> Decimal:
        for line in self.lines:
            if line.leave_type == leave_type:
                return line.hours_accrued
        return Decimal("0")

    @property
    def annual_leave_accrued(self) -> Decimal:
        return self.hours_for(LeaveType.ANNUAL_LEAVE)

    @property
    def personal_leave_accrued(self) -> Decimal:
        return self.hours_for(LeaveType.PERSONAL_LEAVE)

    @property
    def lsl_accrued(self) -> Decimal:
        return self.hours_for(LeaveType.LONG_SERVICE_LEAVE)


@dataclass(frozen=True)
class LSLProRataEntitlement:
    """Long service leave payable on separation."""

    eligible: bool
    weeks: Decimal
    hours: Decimal
    value: Decimal
    reason: str
