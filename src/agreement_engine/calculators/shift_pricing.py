"""Shift pricing engine.

Prices one shift under one resolved rate. Combination rules:
- Casual loading is applied once, to the base rate.
- Exactly one day-type penalty applies: public holiday > Sunday > Saturday > weekday.
- A time-of-day loading (evening or night, by shift start) multiplies on top.
- Overtime tiers replace the penalty: each tier is a percent of the
  casual-loaded base rate, not stacked with day-type or time-of-day loadings.
- Allowances are flat amounts outside the multipliers: per hour worked,
  per shift, or a fifth of a weekly amount.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from agreement_engine.calculators.types import (
    AllowanceLine,
    PayBreakdown,
    PaySegment,
    ResolvedRate,
    SegmentKind,
)
from agreement_engine.errors import InvalidShiftDurationError, InvariantViolationError
from agreement_engine.models import Allowance, OvertimeRuleSet, PenaltyRateTable, ShiftContext

logger = logging.getLogger(__name__)

MINUTES_PER_HOUR = Decimal("60")
# Allowance frequencies priced per shift; per_annum and per_occurrence are not
SHIFT_ALLOWANCE_FREQUENCIES = ("per_hour", "per_shift", "per_week")
# Weekly allowances are spread over a five-day week
SHIFTS_PER_WEEK = Decimal("5")

_DAY_LABELS = {
    "weekday": "weekday",
    "saturday": "Saturday",
    "sunday": "Sunday",
    "public_holiday": "public holiday",
}


def _hours_to_minutes(hours: Decimal) -> int:
    return int((hours * MINUTES_PER_HOUR).to_integral_value(rounding=ROUND_HALF_UP))


def _format_hours(hours: Decimal) -> str:
    return f"{hours.normalize():f}"


class ShiftPricingEngine:
    """Deterministic pay computation for a single shift."""

    def price(self, shift: ShiftContext, resolved: ResolvedRate) -> PayBreakdown:
        """Price a shift.

        Raises:
            InvalidShiftDurationError: If worked time is zero or negative
            InvariantViolationError: If any computed rate or amount is negative
        """
        worked_minutes = shift.worked_minutes
        if worked_minutes <= 0:
            raise InvalidShiftDurationError(
                worked_minutes,
                f"{shift.span_minutes} minute span with {shift.break_minutes} minute break",
            )

        loaded_base = self.casual_loaded_rate(
            resolved.base_hourly_rate,
            resolved.casual_loading_percent,
            casual=shift.employment_basis.is_casual,
        )

        penalties = resolved.penalty_rates
        day_type = shift.day_type
        day_multiplier = penalties.percent_for(day_type) / 100
        time_of_day_multiplier, time_of_day_label = self._time_of_day(penalties, shift)

        segments = self._build_segments(
            worked_minutes,
            loaded_base * day_multiplier * time_of_day_multiplier,
            loaded_base,
            resolved.overtime,
            ordinary_label=self._ordinary_label(_DAY_LABELS[day_type.value], time_of_day_label),
        )

        allowances = self._price_allowances(resolved.allowances, shift, worked_minutes)

        for segment in segments:
            if segment.rate < 0 or segment.amount < 0:
                raise InvariantViolationError(
                    f"Negative pay computed for worker '{resolved.worker_id}': "
                    f"segment '{segment.label}' rate {segment.rate} amount {segment.amount}"
                )

        breakdown = PayBreakdown(
            shift=shift,
            worker_id=resolved.worker_id,
            agreement_id=resolved.agreement_id,
            classification_code=resolved.classification_code,
            segments=tuple(segments),
            base_rate=resolved.base_hourly_rate,
            loaded_base_rate=loaded_base,
            day_type=day_type,
            day_type_multiplier=day_multiplier,
            time_of_day_multiplier=time_of_day_multiplier,
            time_of_day_label=time_of_day_label,
            superannuation_rate=resolved.superannuation_rate,
            allowances=tuple(allowances),
        )

        if breakdown.worked_minutes != worked_minutes:
            raise InvariantViolationError(
                f"Segment minutes {breakdown.worked_minutes} do not sum to "
                f"worked minutes {worked_minutes}"
            )

        return breakdown

    @staticmethod
    def casual_loaded_rate(
        base_rate: Decimal,
        casual_loading_percent: Decimal,
        casual: bool,
    ) -> Decimal:
        """Apply casual loading once. Permanent rates are returned unchanged."""
        if not casual:
            return base_rate
        return base_rate * (1 + casual_loading_percent / 100)

    @staticmethod
    def _time_of_day(
        penalties: PenaltyRateTable,
        shift: ShiftContext,
    ) -> tuple[Decimal, str | None]:
        window = penalties.window_for(shift.start_time)
        if window is None:
            return Decimal("1"), None
        label = "evening" if window is penalties.evening else "night"
        return window.multiplier, label

    @staticmethod
    def _ordinary_label(day_label: str, time_of_day_label: str | None) -> str:
        if time_of_day_label:
            return f"Ordinary hours ({day_label}, {time_of_day_label})"
        return f"Ordinary hours ({day_label})"

    @staticmethod
    def _price_allowances(
        allowances: tuple[Allowance, ...],
        shift: ShiftContext,
        worked_minutes: int,
    ) -> list[AllowanceLine]:
        claimed = shift.allowance_codes
        worked_hours = Decimal(worked_minutes) / MINUTES_PER_HOUR

        lines = []
        for allowance in allowances:
            if claimed is not None and allowance.code not in claimed:
                continue
            if allowance.frequency == "per_hour":
                amount = allowance.amount * worked_hours
                description = f"{_format_hours(worked_hours)}h × ${allowance.amount:.2f}"
            elif allowance.frequency == "per_shift":
                amount = allowance.amount
                description = "Per shift"
            elif allowance.frequency == "per_week":
                amount = allowance.amount / SHIFTS_PER_WEEK
                description = "Prorated from weekly allowance"
            else:
                logger.debug(
                    "Allowance %s (%s) is not paid per shift", allowance.code, allowance.frequency
                )
                continue
            lines.append(
                AllowanceLine(
                    code=allowance.code,
                    name=allowance.name,
                    frequency=allowance.frequency,
                    amount=amount,
                    description=description,
                    is_super_applicable=allowance.is_super_applicable,
                )
            )
        return lines

    @staticmethod
    def _build_segments(
        worked_minutes: int,
        ordinary_rate: Decimal,
        loaded_base: Decimal,
        overtime: OvertimeRuleSet,
        ordinary_label: str,
    ) -> list[PaySegment]:
        threshold = _hours_to_minutes(overtime.daily_threshold_hours)
        first_tier_limit = _hours_to_minutes(overtime.first_tier_hours)

        ordinary_minutes = min(worked_minutes, threshold)
        overtime_minutes = worked_minutes - ordinary_minutes
        first_tier_minutes = min(overtime_minutes, first_tier_limit)
        second_tier_minutes = overtime_minutes - first_tier_minutes

        first_tier_hours = _format_hours(overtime.first_tier_hours)
        plan = [
            (ordinary_label, SegmentKind.ORDINARY, ordinary_minutes, ordinary_rate),
            (
                f"Overtime (first {first_tier_hours}h)",
                SegmentKind.OVERTIME_FIRST_TIER,
                first_tier_minutes,
                loaded_base * overtime.first_tier_percent / 100,
            ),
            (
                f"Overtime (after {first_tier_hours}h)",
                SegmentKind.OVERTIME_SECOND_TIER,
                second_tier_minutes,
                loaded_base * overtime.second_tier_percent / 100,
            ),
        ]

        segments = []
        for label, kind, minutes, rate in plan:
            if minutes <= 0:
                continue
            hours = Decimal(minutes) / MINUTES_PER_HOUR
            segments.append(
                PaySegment(
                    label=label,
                    kind=kind,
                    minutes=minutes,
                    hours=hours,
                    rate=rate,
                    amount=hours * rate,
                )
            )
        return segments
