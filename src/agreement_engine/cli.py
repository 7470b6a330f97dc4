"""Agreement engine command line interface.

Provides calculation tools for:
- Pricing a single shift
- Leave accrual for a period of work
- Long service leave pay-outs on separation

Usage:
    python -m agreement_engine price-shift --base-rate 28.00 --date 2024-07-01 --start 08:00 --end 16:30 --break-minutes 30
    python -m agreement_engine accrue-leave --hours 76 --service-years 3 --state NSW
    python -m agreement_engine lsl-payout --state VIC --service-years 8 --separation resignation --hourly-rate 30
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Callable

from agreement_engine.calculators import (
    SHIFT_ALLOWANCE_FREQUENCIES,
    ResolvedRate,
    ShiftPricingEngine,
    calculate_accrual,
    lsl_pro_rata_entitlement,
)
from agreement_engine.config import get_settings
from agreement_engine.errors import AgreementEngineError
from agreement_engine.models import (
    AgreementStatus,
    Allowance,
    AgreementType,
    AustralianState,
    EmploymentBasis,
    OvertimeRuleSet,
    PenaltyRateTable,
    SeparationType,
    ShiftContext,
    TimeWindow,
)
from agreement_engine.schemas import (
    AccrualCalculationResponse,
    LSLProRataResponse,
    PayBreakdownResponse,
)


def parse_decimal(s: str) -> Decimal:
    """Parse a decimal amount."""
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid decimal value: {s!r}") from e


def parse_time(s: str) -> time:
    """Parse HH:MM time string."""
    return time.fromisoformat(s)


def parse_window(s: str) -> TimeWindow:
    """Parse START-END@PERCENT, e.g. 18:00-21:00@110."""
    span, _, percent = s.partition("@")
    start, _, end = span.partition("-")
    try:
        return TimeWindow(time.fromisoformat(start), time.fromisoformat(end), Decimal(percent))
    except (ValueError, InvalidOperation) as e:
        raise argparse.ArgumentTypeError(f"invalid window {s!r}: expected START-END@PERCENT") from e


def parse_allowance(s: str) -> Allowance:
    """Parse CODE:FREQUENCY:AMOUNT, e.g. FA:per_week:19.85."""
    code, _, rest = s.partition(":")
    frequency, _, amount = rest.partition(":")
    if not code or frequency not in SHIFT_ALLOWANCE_FREQUENCIES:
        raise argparse.ArgumentTypeError(
            f"invalid allowance {s!r}: expected CODE:FREQUENCY:AMOUNT with FREQUENCY one of "
            f"{', '.join(SHIFT_ALLOWANCE_FREQUENCIES)}"
        )
    try:
        return Allowance(code=code, name=code, amount=Decimal(amount), frequency=frequency)
    except (ValueError, InvalidOperation) as e:
        raise argparse.ArgumentTypeError(f"invalid allowance amount in {s!r}") from e


class AgreementCli:
    """Agreement engine command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m agreement_engine",
            description="Pay agreement calculation tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # price-shift command
        price = subparsers.add_parser("price-shift", help="Price one shift")
        price.add_argument("--base-rate", type=parse_decimal, required=True, help="Base hourly rate")
        price.add_argument("--date", type=date.fromisoformat, required=True, help="Shift date")
        price.add_argument("--start", type=parse_time, required=True, help="Start time (HH:MM)")
        price.add_argument("--end", type=parse_time, required=True, help="End time (HH:MM)")
        price.add_argument("--break-minutes", type=int, default=0, help="Unpaid break minutes")
        price.add_argument("--casual", action="store_true", help="Casual employment")
        price.add_argument("--public-holiday", action="store_true", help="Shift is on a public holiday")
        price.add_argument("--casual-loading", type=parse_decimal, default=Decimal("25"))
        price.add_argument("--saturday-percent", type=parse_decimal, default=Decimal("150"))
        price.add_argument("--sunday-percent", type=parse_decimal, default=Decimal("200"))
        price.add_argument("--public-holiday-percent", type=parse_decimal, default=Decimal("250"))
        price.add_argument("--evening", type=parse_window, help="Evening window START-END@PERCENT")
        price.add_argument("--night", type=parse_window, help="Night window START-END@PERCENT")
        price.add_argument("--overtime-after", type=parse_decimal, default=Decimal("8"))
        price.add_argument("--super-rate", type=parse_decimal, default=Decimal("11.5"))
        price.add_argument(
            "--allowance",
            type=parse_allowance,
            action="append",
            default=[],
            help="Allowance CODE:FREQUENCY:AMOUNT (repeatable)",
        )

        # accrue-leave command
        accrue = subparsers.add_parser("accrue-leave", help="Leave accrued for hours worked")
        accrue.add_argument("--hours", type=parse_decimal, required=True, help="Hours worked")
        accrue.add_argument(
            "--basis",
            choices=[b.value for b in EmploymentBasis],
            default=EmploymentBasis.FULL_TIME.value,
        )
        accrue.add_argument("--service-years", type=parse_decimal, required=True)
        accrue.add_argument("--state", choices=[s.value for s in AustralianState], required=True)

        # lsl-payout command
        payout = subparsers.add_parser("lsl-payout", help="Long service leave payable on separation")
        payout.add_argument("--state", choices=[s.value for s in AustralianState], required=True)
        payout.add_argument("--service-years", type=parse_decimal, required=True)
        payout.add_argument(
            "--separation",
            choices=[s.value for s in SeparationType],
            required=True,
        )
        payout.add_argument("--hourly-rate", type=parse_decimal, required=True)
        payout.add_argument("--hours-per-week", type=parse_decimal, help="Standard hours per week")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[..., int]] = {
            "price-shift": self._cmd_price_shift,
            "accrue-leave": self._cmd_accrue_leave,
            "lsl-payout": self._cmd_lsl_payout,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (AgreementEngineError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    def _cmd_price_shift(self, args: argparse.Namespace) -> int:
        """Price a shift at an ad hoc rate."""
        resolved = ResolvedRate(
            worker_id="cli",
            agreement_id="cli",
            agreement_type=AgreementType.MODERN_AWARD,
            agreement_status=AgreementStatus.ACTIVE,
            priority=1,
            is_primary=True,
            classification_code="cli",
            classification_name="Command line rate",
            base_hourly_rate=args.base_rate,
            version_id="cli",
            version_effective_from=args.date,
            casual_loading_percent=args.casual_loading,
            penalty_rates=PenaltyRateTable(
                saturday_percent=args.saturday_percent,
                sunday_percent=args.sunday_percent,
                public_holiday_percent=args.public_holiday_percent,
                evening=args.evening,
                night=args.night,
            ),
            overtime=OvertimeRuleSet(daily_threshold_hours=args.overtime_after),
            superannuation_rate=args.super_rate,
            allowances=tuple(args.allowance),
        )
        shift = ShiftContext(
            shift_date=args.date,
            start_time=args.start,
            end_time=args.end,
            break_minutes=args.break_minutes,
            employment_basis=EmploymentBasis.CASUAL if args.casual else EmploymentBasis.FULL_TIME,
            is_public_holiday=args.public_holiday,
        )
        breakdown = ShiftPricingEngine().price(shift, resolved)
        print(PayBreakdownResponse.model_validate(breakdown).model_dump_json(indent=2))
        return 0

    def _cmd_accrue_leave(self, args: argparse.Namespace) -> int:
        """Leave accrual for a period of work."""
        calculation = calculate_accrual(
            args.hours,
            EmploymentBasis(args.basis),
            args.service_years,
            AustralianState(args.state),
            standard_hours_per_week=get_settings().standard_hours_per_week,
        )
        print(AccrualCalculationResponse.model_validate(calculation).model_dump_json(indent=2))
        return 0

    def _cmd_lsl_payout(self, args: argparse.Namespace) -> int:
        """LSL payable on separation."""
        entitlement = lsl_pro_rata_entitlement(
            AustralianState(args.state),
            args.service_years,
            SeparationType(args.separation),
            args.hourly_rate,
            args.hours_per_week or get_settings().standard_hours_per_week,
        )
        print(LSLProRataResponse.model_validate(entitlement).model_dump_json(indent=2))
        return 0


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = AgreementCli()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
