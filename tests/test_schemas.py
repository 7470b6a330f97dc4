"""Tests for response schemas built from engine results."""

from datetime import date, time
from decimal import Decimal

from agreement_engine.calculators import ShiftPricingEngine, calculate_accrual
from agreement_engine.models import (
    AlertPriority,
    AuditEventType,
    AustralianState,
    EmploymentBasis,
    EntityRef,
    EntityType,
    FieldChange,
    ShiftContext,
)
from agreement_engine.schemas import (
    AccrualCalculationResponse,
    AuditEventResponse,
    PayBreakdownResponse,
    RateChangeAlertResponse,
)


class TestPayBreakdownResponse:
    """Test pay breakdown serialization."""

    def test_from_breakdown(self, resolved_rate):
        shift = ShiftContext(date(2024, 7, 1), time(8, 0), time(16, 30), break_minutes=30)
        breakdown = ShiftPricingEngine().price(shift, resolved_rate)

        response = PayBreakdownResponse.model_validate(breakdown)

        assert response.worked_minutes == 480
        assert response.total_pay == Decimal("224")
        assert response.segments[0].label == "Ordinary hours (weekday)"
        assert response.superannuation == breakdown.superannuation
        assert response.allowances == []
        assert response.total_cost == response.total_pay

        dumped = response.model_dump(mode="json")
        assert dumped["day_type"] == "weekday"
        assert dumped["segments"][0]["kind"] == "ordinary"


class TestAccrualCalculationResponse:
    def test_from_calculation(self):
        calculation = calculate_accrual(
            Decimal("38"), EmploymentBasis.CASUAL, Decimal("2"), AustralianState.VIC
        )

        response = AccrualCalculationResponse.model_validate(calculation)

        assert response.annual_leave_accrued == Decimal("0")
        assert [line.leave_type.value for line in response.lines] == ["long_service_leave"]
        assert response.lsl_entitlement_reached is False


class TestAuditSchemas:
    def test_event_and_alert(self, ledger):
        event = ledger.record(
            AuditEventType.RATE_OVERRIDE_CREATED,
            EntityRef(EntityType.STAFF, "worker-1", "Jordan Lee"),
            [FieldChange("hourly_rate", None, Decimal("31.50"))],
            actor="payroll",
        )
        alert = ledger.acknowledge(event.triggered_alert_ids[0], actor="manager")

        event_response = AuditEventResponse.model_validate(event)
        assert event_response.entity.entity_name == "Jordan Lee"
        assert event_response.changes[0].new_value == Decimal("31.50")
        assert event_response.triggered_alert_ids == [alert.alert_id]

        alert_response = RateChangeAlertResponse.model_validate(alert)
        assert alert_response.priority == AlertPriority.MEDIUM
        assert alert_response.acknowledged_by == "manager"
        assert alert_response.transitions[0].to_status.value == "acknowledged"
        assert alert_response.affected_worker_ids == ["worker-1"]
