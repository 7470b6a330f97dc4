"""Shift context supplied per pricing request."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from enum import Enum

from agreement_engine.models.agreement import DayType


class EmploymentBasis(str, Enum):
    """Employment basis of a worker."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CASUAL = "casual"

    @property
    def is_casual(self) -> bool:
        return self is EmploymentBasis.CASUAL


@dataclass(frozen=True)
class ShiftContext:
    """An already-rostered shift to be priced. Never persisted."""

    shift_date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    employment_basis: EmploymentBasis = EmploymentBasis.FULL_TIME
    is_public_holiday: bool = False
    # Allowance codes the worker claims on this shift; None claims every one
    allowance_codes: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.break_minutes < 0:
            raise ValueError("break_minutes must be non-negative")

    @property
    def day_of_week(self) -> str:
        return self.shift_date.strftime("%A")

    @property
    def day_type(self) -> DayType:
        """Day type by precedence: public holiday, Sunday, Saturday, weekday."""
        if self.is_public_holiday:
            return DayType.PUBLIC_HOLIDAY
        weekday = self.shift_date.weekday()
        if weekday == 6:
            return DayType.SUNDAY
        if weekday == 5:
            return DayType.SATURDAY
        return DayType.WEEKDAY

    @property
    def span_minutes(self) -> int:
        """Minutes from start to end, crossing midnight when end is earlier."""
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        span = end - start
        if span < 0:
            span += 24 * 60
        return span

    @property
    def worked_minutes(self) -> int:
        return self.span_minutes - self.break_minutes
