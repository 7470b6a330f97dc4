"""Retrospective pay adjustments when a rate change is backdated."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from agreement_engine.calculators.shift_pricing import ShiftPricingEngine
from agreement_engine.calculators.types import PayBreakdown, ResolvedRate
from agreement_engine.models import ShiftContext


class AdjustmentType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    NONE = "none"


@dataclass(frozen=True)
class ShiftAdjustment:
    """One shift priced under both the original and the revised rate."""

    shift: ShiftContext
    original: PayBreakdown
    revised: PayBreakdown

    @property
    def adjustment(self) -> Decimal:
        return self.revised.total_pay - self.original.total_pay


@dataclass(frozen=True)
class BackPayCalculation:
    worker_id: str
    original_rate: ResolvedRate
    revised_rate: ResolvedRate
    adjustments: tuple[ShiftAdjustment, ...]

    @property
    def total_hours(self) -> Decimal:
        return sum((a.original.worked_hours for a in self.adjustments), Decimal("0"))

    @property
    def total_original_pay(self) -> Decimal:
        return sum((a.original.total_pay for a in self.adjustments), Decimal("0"))

    @property
    def total_revised_pay(self) -> Decimal:
        return sum((a.revised.total_pay for a in self.adjustments), Decimal("0"))

    @property
    def total_adjustment(self) -> Decimal:
        return self.total_revised_pay - self.total_original_pay

    @property
    def rate_difference(self) -> Decimal:
        return self.revised_rate.base_hourly_rate - self.original_rate.base_hourly_rate

    @property
    def percent_change(self) -> Decimal:
        if self.original_rate.base_hourly_rate <= 0:
            return Decimal("0")
        return self.rate_difference / self.original_rate.base_hourly_rate * 100

    @property
    def adjustment_type(self) -> AdjustmentType:
        if self.total_adjustment > 0:
            return AdjustmentType.INCREASE
        if self.total_adjustment < 0:
            return AdjustmentType.DECREASE
        return AdjustmentType.NONE


class BackPayCalculator:
    """Reprices already-paid shifts under a revised rate."""

    def __init__(self, pricing_engine: ShiftPricingEngine | None = None):
        self.pricing_engine = pricing_engine or ShiftPricingEngine()

    def calculate(
        self,
        worker_id: str,
        shifts: list[ShiftContext],
        original_rate: ResolvedRate,
        revised_rate: ResolvedRate,
    ) -> BackPayCalculation:
        adjustments = tuple(
            ShiftAdjustment(
                shift=shift,
                original=self.pricing_engine.price(shift, original_rate),
                revised=self.pricing_engine.price(shift, revised_rate),
            )
            for shift in shifts
        )
        return BackPayCalculation(
            worker_id=worker_id,
            original_rate=original_rate,
            revised_rate=revised_rate,
            adjustments=adjustments,
        )
