"""Leave accrual calculator.

Annual and personal leave accrue at flat NES rates per hour worked unless an
agreement grants a custom number of hours per year. Casual employees accrue
neither (their loading is paid in lieu). Long service leave accrues at the
state rate once service reaches the state's accrual start.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from agreement_engine.models import (
    LSL_STATE_RULES,
    AccrualCalculation,
    AccrualLine,
    AustralianState,
    EmploymentBasis,
    LeaveEntitlement,
    LeaveType,
    LSLProRataEntitlement,
    SeparationType,
)
from agreement_engine.models.leave import NES_ANNUAL_LEAVE_RATE, NES_PERSONAL_LEAVE_RATE

WEEKS_PER_YEAR = Decimal("52")
DEFAULT_STANDARD_HOURS_PER_WEEK = Decimal("38")
STANDARD_HOURS_PER_DAY = Decimal("7.6")
TWO_PLACES = Decimal("0.01")


def _formula(hours_worked: Decimal, rate: Decimal, accrued: Decimal) -> str:
    return f"{hours_worked} hours × {rate:.5f} = {accrued:.4f} hours"


def _accrual_line(
    leave_type: LeaveType,
    hours_worked: Decimal,
    rate: Decimal,
    notes: str,
) -> AccrualLine:
    accrued = hours_worked * rate
    return AccrualLine(
        leave_type=leave_type,
        hours_accrued=accrued,
        rate=rate,
        formula=_formula(hours_worked, rate, accrued),
        notes=notes,
    )


def custom_hours_per_year(
    entitlements: tuple[LeaveEntitlement, ...] | list[LeaveEntitlement],
    leave_type: LeaveType,
    hours_per_day: Decimal = STANDARD_HOURS_PER_DAY,
) -> Decimal | None:
    """Hours per year granted by an agreement's leave entitlement, if any."""
    for entitlement in entitlements:
        if entitlement.leave_type == leave_type.value:
            return entitlement.entitlement_days * hours_per_day
    return None


def calculate_accrual(
    hours_worked: Decimal,
    employment_basis: EmploymentBasis,
    service_years: Decimal,
    state: AustralianState,
    *,
    standard_hours_per_week: Decimal = DEFAULT_STANDARD_HOURS_PER_WEEK,
    custom_annual_hours_per_year: Decimal | None = None,
    custom_personal_hours_per_year: Decimal | None = None,
) -> AccrualCalculation:
    """Calculate leave accrued for a period of work.

    Returns one line per leave type that accrues a positive amount, each with
    the rate used and a formula string for audit.
    """
    if hours_worked < 0:
        raise ValueError("hours_worked must be non-negative")
    if service_years < 0:
        raise ValueError("service_years must be non-negative")

    rules = LSL_STATE_RULES[state]
    hours_per_year = standard_hours_per_week * WEEKS_PER_YEAR
    lines: list[AccrualLine] = []

    if not employment_basis.is_casual:
        if custom_annual_hours_per_year is not None:
            annual = _accrual_line(
                LeaveType.ANNUAL_LEAVE,
                hours_worked,
                custom_annual_hours_per_year / hours_per_year,
                "Custom rate applied",
            )
        else:
            annual = _accrual_line(
                LeaveType.ANNUAL_LEAVE, hours_worked, NES_ANNUAL_LEAVE_RATE, "NES standard rate"
            )

        if custom_personal_hours_per_year is not None:
            personal = _accrual_line(
                LeaveType.PERSONAL_LEAVE,
                hours_worked,
                custom_personal_hours_per_year / hours_per_year,
                "Custom rate applied",
            )
        else:
            personal = _accrual_line(
                LeaveType.PERSONAL_LEAVE, hours_worked, NES_PERSONAL_LEAVE_RATE, "NES standard rate"
            )

        lines.extend(line for line in (annual, personal) if line.hours_accrued > 0)

    entitlement_reached = service_years >= rules.entitlement_years
    if service_years >= rules.accrual_start_years:
        if entitlement_reached:
            note = f"{rules.state_name} LSL rules. Eligible for entitlement"
        else:
            note = (
                f"{rules.state_name} LSL rules. Eligible after "
                f"{rules.entitlement_years} years service"
            )
        lsl = _accrual_line(LeaveType.LONG_SERVICE_LEAVE, hours_worked, rules.accrual_rate, note)
        if lsl.hours_accrued > 0:
            lines.append(lsl)

    return AccrualCalculation(
        hours_worked=hours_worked,
        employment_basis=employment_basis,
        service_years=service_years,
        state=state,
        lines=tuple(lines),
        lsl_entitlement_reached=entitlement_reached,
    )


def lsl_pro_rata_entitlement(
    state: AustralianState,
    service_years: Decimal,
    separation: SeparationType,
    hourly_rate: Decimal,
    standard_hours_per_week: Decimal = DEFAULT_STANDARD_HOURS_PER_WEEK,
) -> LSLProRataEntitlement:
    """Long service leave payable when employment ends.

    Full entitlement (plus additional weeks per year beyond it) once the
    entitlement period is reached. Before that, a pro-rata share if the
    state allows it for the separation type and the pro-rata threshold is
    met. Redundancy always qualifies once past the threshold.
    """
    rules = LSL_STATE_RULES[state]
    threshold = rules.pro_rata_threshold_years
    past_threshold = service_years >= threshold

    if separation == SeparationType.RESIGNATION:
        pro_rata_allowed = rules.pro_rata_on_resignation and past_threshold
    elif separation == SeparationType.TERMINATION:
        pro_rata_allowed = rules.pro_rata_on_termination and past_threshold
    else:
        pro_rata_allowed = past_threshold

    if not pro_rata_allowed and service_years < rules.entitlement_years:
        return LSLProRataEntitlement(
            eligible=False,
            weeks=Decimal("0"),
            hours=Decimal("0"),
            value=Decimal("0"),
            reason=(
                f"Minimum {threshold} years service required for pro-rata LSL "
                f"in {rules.state_name}"
            ),
        )

    if service_years >= rules.entitlement_years:
        additional_years = service_years - rules.entitlement_years
        weeks = rules.entitlement_weeks + additional_years * rules.additional_weeks_per_year
    else:
        weeks = service_years / rules.entitlement_years * rules.entitlement_weeks

    hours = weeks * standard_hours_per_week
    value = hours * hourly_rate

    return LSLProRataEntitlement(
        eligible=True,
        weeks=weeks.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        hours=hours.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        value=value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        reason=(
            f"{rules.state_name} LSL: {weeks.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)} "
            f"weeks for {service_years} years service"
        ),
    )


def next_entitlement_date(service_start: date, state: AustralianState) -> date:
    """Date the worker reaches full LSL entitlement in a state."""
    years = int(LSL_STATE_RULES[state].entitlement_years)
    try:
        return service_start.replace(year=service_start.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return service_start.replace(year=service_start.year + years, day=28)
