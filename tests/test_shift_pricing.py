"""Tests for the shift pricing engine."""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, assume, given, settings, strategies as st

from agreement_engine.calculators import SegmentKind, ShiftPricingEngine
from agreement_engine.errors import InvalidShiftDurationError, InvariantViolationError
from agreement_engine.models import (
    Allowance,
    DayType,
    EmploymentBasis,
    OvertimeRuleSet,
    PenaltyRateTable,
    ShiftContext,
    TimeWindow,
)

WEDNESDAY = date(2024, 7, 3)
SATURDAY = date(2024, 7, 6)
SUNDAY = date(2024, 7, 7)


def shift(
    day=WEDNESDAY,
    start=time(8, 0),
    end=time(16, 30),
    break_minutes=0,
    casual=False,
    public_holiday=False,
) -> ShiftContext:
    return ShiftContext(
        shift_date=day,
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        employment_basis=EmploymentBasis.CASUAL if casual else EmploymentBasis.FULL_TIME,
        is_public_holiday=public_holiday,
    )


@pytest.fixture
def engine() -> ShiftPricingEngine:
    return ShiftPricingEngine()


class TestScenarios:
    """Reference pay scenarios."""

    def test_permanent_weekday_with_break(self, engine, resolved_rate):
        """8:00-16:30 with a 30 minute break is 8 ordinary hours at base."""
        breakdown = engine.price(shift(break_minutes=30), resolved_rate)

        assert breakdown.worked_hours == Decimal("8")
        assert breakdown.overtime_hours == 0
        assert breakdown.total_pay == Decimal("224.00")
        assert breakdown.effective_hourly_rate == Decimal("28.00")
        assert len(breakdown.segments) == 1
        assert breakdown.segments[0].kind == SegmentKind.ORDINARY

    def test_casual_sunday(self, engine, resolved_rate):
        """Casual loading then Sunday penalty: 28 × 1.25 × 2 = 70/hr."""
        breakdown = engine.price(
            shift(day=SUNDAY, start=time(8, 0), end=time(14, 0), casual=True),
            resolved_rate,
        )

        assert breakdown.loaded_base_rate == Decimal("35.00")
        assert breakdown.day_type == DayType.SUNDAY
        assert breakdown.combined_rate == Decimal("70.00")
        assert breakdown.worked_hours == Decimal("6")
        assert breakdown.total_pay == Decimal("420.00")

    def test_weekday_overtime_first_tier(self, engine, resolved_rate):
        """10 worked hours split into 8 ordinary and 2 first-tier overtime."""
        breakdown = engine.price(
            shift(start=time(8, 0), end=time(19, 0), break_minutes=60),
            resolved_rate,
        )

        assert len(breakdown.segments) == 2
        ordinary, overtime = breakdown.segments
        assert ordinary.hours + overtime.hours == Decimal("10")
        assert ordinary.hours == Decimal("8")
        assert overtime.kind == SegmentKind.OVERTIME_FIRST_TIER
        assert overtime.hours == Decimal("2")
        assert overtime.rate == Decimal("42.00")
        assert breakdown.total_pay == Decimal("308.00")


class TestDayTypePenalties:
    """Test day-type penalty selection."""

    def test_saturday(self, engine, resolved_rate):
        breakdown = engine.price(shift(day=SATURDAY, break_minutes=30), resolved_rate)
        assert breakdown.day_type_multiplier == Decimal("1.5")
        assert breakdown.total_pay == Decimal("336.00")

    def test_public_holiday_on_sunday_does_not_stack(self, engine, resolved_rate):
        """Public holiday replaces the Sunday penalty entirely."""
        breakdown = engine.price(
            shift(day=SUNDAY, break_minutes=30, public_holiday=True),
            resolved_rate,
        )

        assert breakdown.day_type == DayType.PUBLIC_HOLIDAY
        assert breakdown.day_type_multiplier == Decimal("2.5")
        assert breakdown.total_pay == Decimal("560.00")

    def test_public_holiday_on_weekday(self, engine, resolved_rate):
        breakdown = engine.price(shift(break_minutes=30, public_holiday=True), resolved_rate)
        assert breakdown.day_type == DayType.PUBLIC_HOLIDAY

    def test_overtime_is_not_penalized(self, engine, resolved_rate):
        """Overtime tiers are relative to base, not to the Sunday rate."""
        breakdown = engine.price(
            shift(day=SUNDAY, start=time(8, 0), end=time(19, 0), break_minutes=60),
            resolved_rate,
        )

        ordinary, overtime = breakdown.segments
        assert ordinary.rate == Decimal("56.00")
        assert overtime.rate == Decimal("42.00")

    @given(
        day=st.sampled_from([WEDNESDAY, SATURDAY, SUNDAY]),
        base=st.decimals(min_value=Decimal("15.00"), max_value=Decimal("80.00"), places=2),
    )
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_public_holiday_multiplier_never_compounds(self, day, base, rate_with):
        """Any public holiday applies exactly the public holiday percent."""
        rate = rate_with(base_hourly_rate=base)
        breakdown = ShiftPricingEngine().price(
            shift(day=day, break_minutes=30, public_holiday=True), rate
        )
        assert breakdown.day_type_multiplier == Decimal("2.5")
        assert breakdown.total_pay == base * Decimal("2.5") * 8


class TestTimeOfDayLoading:
    """Test evening and night windows."""

    def test_evening_loading_multiplies_day_penalty(self, engine, rate_with):
        rate = rate_with(
            penalty_rates=PenaltyRateTable(
                evening=TimeWindow(time(18, 0), time(23, 0), Decimal("110")),
            )
        )
        breakdown = engine.price(shift(day=SATURDAY, start=time(18, 0), end=time(22, 0)), rate)

        assert breakdown.time_of_day_label == "evening"
        assert breakdown.combined_rate == Decimal("28.00") * Decimal("1.5") * Decimal("1.1")
        assert breakdown.total_pay == Decimal("184.80")

    def test_night_window_wraps_midnight(self, engine, rate_with):
        rate = rate_with(
            penalty_rates=PenaltyRateTable(
                night=TimeWindow(time(22, 0), time(6, 0), Decimal("115")),
            )
        )
        breakdown = engine.price(shift(start=time(23, 0), end=time(5, 0)), rate)

        assert breakdown.time_of_day_label == "night"
        assert breakdown.worked_hours == Decimal("6")
        assert breakdown.total_pay == Decimal("28.00") * Decimal("1.15") * 6

    def test_overlapping_windows_evening_wins(self, engine, rate_with):
        penalties = PenaltyRateTable(
            evening=TimeWindow(time(18, 0), time(21, 0), Decimal("110")),
            night=TimeWindow(time(20, 0), time(6, 0), Decimal("115")),
        )
        assert penalties.windows_overlap

        breakdown = engine.price(
            shift(start=time(20, 30), end=time(23, 30)),
            rate_with(penalty_rates=penalties),
        )
        assert breakdown.time_of_day_label == "evening"
        assert breakdown.time_of_day_multiplier == Decimal("1.1")

    def test_start_outside_windows(self, engine, rate_with):
        rate = rate_with(
            penalty_rates=PenaltyRateTable(
                evening=TimeWindow(time(18, 0), time(21, 0), Decimal("110")),
            )
        )
        breakdown = engine.price(shift(start=time(12, 0), end=time(20, 0)), rate)

        assert breakdown.time_of_day_label is None
        assert breakdown.time_of_day_multiplier == 1


class TestOvertime:
    """Test overtime tiering."""

    def test_second_tier(self, engine, resolved_rate):
        breakdown = engine.price(shift(start=time(8, 0), end=time(21, 0)), resolved_rate)

        assert [s.kind for s in breakdown.segments] == [
            SegmentKind.ORDINARY,
            SegmentKind.OVERTIME_FIRST_TIER,
            SegmentKind.OVERTIME_SECOND_TIER,
        ]
        assert [s.minutes for s in breakdown.segments] == [480, 120, 180]
        assert breakdown.segments[2].rate == Decimal("56.00")
        assert breakdown.total_pay == Decimal("224") + Decimal("84") + Decimal("168")

    def test_casual_overtime_uses_loaded_base(self, engine, resolved_rate):
        breakdown = engine.price(
            shift(start=time(8, 0), end=time(18, 0), casual=True), resolved_rate
        )
        overtime = breakdown.segments[1]
        assert overtime.rate == Decimal("35.00") * Decimal("1.5")

    def test_custom_threshold(self, engine, rate_with):
        rate = rate_with(overtime=OvertimeRuleSet(daily_threshold_hours=Decimal("7.6")))
        breakdown = engine.price(shift(start=time(8, 0), end=time(16, 0)), rate)

        assert [s.minutes for s in breakdown.segments] == [456, 24]

    def test_invalid_rule_set(self):
        with pytest.raises(ValueError):
            OvertimeRuleSet(daily_threshold_hours=Decimal("0"))


class TestShiftDuration:
    """Test worked time edge cases."""

    def test_crossing_midnight(self, engine, resolved_rate):
        breakdown = engine.price(
            shift(start=time(22, 0), end=time(6, 0), break_minutes=30), resolved_rate
        )
        assert breakdown.worked_minutes == 450
        assert breakdown.total_pay == Decimal("210.00")

    def test_zero_length_shift(self, engine, resolved_rate):
        with pytest.raises(InvalidShiftDurationError) as exc_info:
            engine.price(shift(start=time(9, 0), end=time(9, 0)), resolved_rate)
        assert exc_info.value.worked_minutes == 0

    def test_break_consumes_shift(self, engine, resolved_rate):
        with pytest.raises(InvalidShiftDurationError):
            engine.price(
                shift(start=time(9, 0), end=time(9, 30), break_minutes=45), resolved_rate
            )

    def test_negative_rate_fails_loudly(self, engine, rate_with):
        with pytest.raises(InvariantViolationError):
            engine.price(shift(), rate_with(base_hourly_rate=Decimal("-1.00")))


class TestBreakdownTotals:
    """Test derived totals and display helpers."""

    def test_display_total_rounds_half_up(self, engine, rate_with):
        breakdown = engine.price(
            shift(start=time(9, 0), end=time(9, 20)), rate_with(base_hourly_rate=Decimal("28.01"))
        )
        # 28.01 / 3 = 9.3366...
        assert breakdown.display_total() == Decimal("9.34")

    def test_superannuation(self, engine, resolved_rate):
        breakdown = engine.price(shift(break_minutes=30), resolved_rate)
        assert breakdown.superannuation == Decimal("25.76")


class TestAllowances:
    """Test allowance pricing outside the pay multipliers."""

    ALLOWANCES = (
        Allowance("ED", "Educational allowance", Decimal("1.50"), "per_hour", is_super_applicable=True),
        Allowance("MEAL", "Meal allowance", Decimal("15.42"), "per_shift"),
        Allowance("FA", "First aid allowance", Decimal("19.85"), "per_week"),
        Allowance("TOOL", "Tool allowance", Decimal("500"), "per_annum"),
    )

    def test_per_hour_shift_and_weekly(self, engine, rate_with):
        breakdown = engine.price(shift(break_minutes=30), rate_with(allowances=self.ALLOWANCES))

        lines = {line.code: line for line in breakdown.allowances}
        assert set(lines) == {"ED", "MEAL", "FA"}
        assert lines["ED"].amount == Decimal("12.00")
        assert lines["ED"].description == "8h × $1.50"
        assert lines["MEAL"].amount == Decimal("15.42")
        assert lines["FA"].amount == Decimal("3.97")

    def test_totals_keep_allowances_out_of_total_pay(self, engine, rate_with):
        breakdown = engine.price(shift(break_minutes=30), rate_with(allowances=self.ALLOWANCES))

        assert breakdown.total_pay == Decimal("224")
        assert breakdown.total_pay == sum(s.amount for s in breakdown.segments)
        assert breakdown.allowances_total == Decimal("31.39")
        assert breakdown.total_cost == Decimal("255.39")
        # Only the educational allowance attracts super
        assert breakdown.superannuation == Decimal("27.14")

    def test_per_hour_uses_net_hours(self, engine, rate_with):
        rate = rate_with(allowances=self.ALLOWANCES[:1])
        breakdown = engine.price(shift(end=time(12, 0), break_minutes=60), rate)

        assert breakdown.allowances[0].amount == Decimal("4.50")

    def test_claimed_codes_filter(self, engine, rate_with):
        claimed = ShiftContext(
            shift_date=WEDNESDAY,
            start_time=time(8, 0),
            end_time=time(16, 30),
            break_minutes=30,
            allowance_codes=("MEAL",),
        )
        breakdown = engine.price(claimed, rate_with(allowances=self.ALLOWANCES))

        assert [line.code for line in breakdown.allowances] == ["MEAL"]
        assert breakdown.total_cost == Decimal("239.42")

    def test_no_allowances(self, engine, resolved_rate):
        breakdown = engine.price(shift(break_minutes=30), resolved_rate)

        assert breakdown.allowances == ()
        assert breakdown.allowances_total == 0
        assert breakdown.total_cost == breakdown.total_pay


start_minutes = st.integers(min_value=0, max_value=24 * 60 - 1)
worked = st.integers(min_value=1, max_value=16 * 60)


def _shift_from(start: int, duration: int, break_minutes: int, day: date, casual: bool = False):
    begin = time(start // 60, start % 60)
    finish_minutes = (start + duration + break_minutes) % (24 * 60)
    finish = time(finish_minutes // 60, finish_minutes % 60)
    return shift(day=day, start=begin, end=finish, break_minutes=break_minutes, casual=casual)


class TestPricingProperties:
    """Property tests across generated shifts."""

    @given(
        start=start_minutes,
        duration=worked,
        break_minutes=st.integers(min_value=0, max_value=60),
        day_offset=st.integers(min_value=0, max_value=6),
        casual=st.booleans(),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_segments_add_up(self, start, duration, break_minutes, day_offset, casual, resolved_rate):
        """Segment minutes, hours and amounts add up to the shift totals exactly."""
        assume(duration + break_minutes < 24 * 60)
        ctx = _shift_from(start, duration, break_minutes, WEDNESDAY + timedelta(days=day_offset), casual)
        breakdown = ShiftPricingEngine().price(ctx, resolved_rate)

        assert breakdown.worked_minutes == duration
        assert sum(s.minutes for s in breakdown.segments) == ctx.worked_minutes
        assert sum((s.hours for s in breakdown.segments), Decimal("0")) == breakdown.worked_hours
        assert sum((s.amount for s in breakdown.segments), Decimal("0")) == breakdown.total_pay
        assert all(s.amount >= 0 for s in breakdown.segments)

    @given(
        start_quarter=st.integers(min_value=0, max_value=95),
        duration_quarters=st.integers(min_value=1, max_value=56),
        day_offset=st.integers(min_value=0, max_value=6),
        base=st.decimals(min_value=Decimal("15.00"), max_value=Decimal("80.00"), places=2),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_casual_is_loaded_permanent(self, start_quarter, duration_quarters, day_offset, base, rate_with):
        """A casual shift pays exactly the permanent amount times the loading."""
        rate = rate_with(base_hourly_rate=base)
        day = WEDNESDAY + timedelta(days=day_offset)
        permanent = ShiftPricingEngine().price(
            _shift_from(start_quarter * 15, duration_quarters * 15, 0, day), rate
        )
        casual = ShiftPricingEngine().price(
            _shift_from(start_quarter * 15, duration_quarters * 15, 0, day, casual=True), rate
        )

        assert casual.total_pay == permanent.total_pay * Decimal("1.25")
        assert [s.minutes for s in casual.segments] == [s.minutes for s in permanent.segments]
        assert [s.kind for s in casual.segments] == [s.kind for s in permanent.segments]
        assert casual.day_type_multiplier == permanent.day_type_multiplier
