"""Pure calculators: rate resolution, shift pricing, leave accrual and back pay."""

from agreement_engine.calculators.back_pay import (
    AdjustmentType,
    BackPayCalculation,
    BackPayCalculator,
    ShiftAdjustment,
)
from agreement_engine.calculators.leave_accrual import (
    calculate_accrual,
    custom_hours_per_year,
    lsl_pro_rata_entitlement,
    next_entitlement_date,
)
from agreement_engine.calculators.rate_resolver import RateResolver
from agreement_engine.calculators.shift_pricing import (
    SHIFT_ALLOWANCE_FREQUENCIES,
    ShiftPricingEngine,
)
from agreement_engine.calculators.types import (
    AllowanceLine,
    PayBreakdown,
    PaySegment,
    ResolvedRate,
    SegmentKind,
)

__all__ = [
    "SHIFT_ALLOWANCE_FREQUENCIES",
    "AdjustmentType",
    "AllowanceLine",
    "BackPayCalculation",
    "BackPayCalculator",
    "PayBreakdown",
    "PaySegment",
    "RateResolver",
    "ResolvedRate",
    "SegmentKind",
    "ShiftAdjustment",
    "ShiftPricingEngine",
    "calculate_accrual",
    "custom_hours_per_year",
    "lsl_pro_rata_entitlement",
    "next_entitlement_date",
]
