"""Pydantic schemas for engine outputs.

Built straight from the engine's dataclasses:

    PayBreakdownResponse.model_validate(breakdown).model_dump(mode="json")
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from agreement_engine.calculators.types import SegmentKind
from agreement_engine.models import (
    AlertPriority,
    AlertStatus,
    AlertType,
    AuditAction,
    AuditEventType,
    AuditSource,
    AustralianState,
    DayType,
    EmploymentBasis,
    EntityType,
    IssueCategory,
    IssueSeverity,
    LeaveType,
)


class EngineSchema(BaseModel):
    """Base schema reading from dataclass attributes."""

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Pay breakdown schemas
# ============================================================================


class PaySegmentResponse(EngineSchema):
    label: str
    kind: SegmentKind
    minutes: int
    hours: Decimal
    rate: Decimal
    amount: Decimal


class AllowanceLineResponse(EngineSchema):
    code: str
    name: str
    frequency: str
    amount: Decimal
    description: str
    is_super_applicable: bool


class PayBreakdownResponse(EngineSchema):
    """Priced shift with its segments and derived totals."""

    worker_id: str
    agreement_id: str
    classification_code: str
    day_type: DayType
    base_rate: Decimal
    loaded_base_rate: Decimal
    day_type_multiplier: Decimal
    time_of_day_multiplier: Decimal
    time_of_day_label: str | None = None
    segments: list[PaySegmentResponse]
    worked_minutes: int
    worked_hours: Decimal
    total_pay: Decimal
    effective_hourly_rate: Decimal
    allowances: list[AllowanceLineResponse] = []
    allowances_total: Decimal
    total_cost: Decimal
    superannuation: Decimal


# ============================================================================
# Compliance schemas
# ============================================================================


class ComplianceIssueResponse(EngineSchema):
    severity: IssueSeverity
    category: IssueCategory
    title: str
    description: str
    recommended_action: str
    affected_worker_ids: list[str] = []
    estimated_underpayment: Decimal | None = None
    remediation_deadline: date | None = None


class ComplianceWarningResponse(EngineSchema):
    category: IssueCategory
    title: str
    description: str
    recommendation: str


class ComplianceCheckResponse(EngineSchema):
    check_date: datetime
    worker_id: str
    agreement_id: str
    is_compliant: bool
    data_missing: bool
    issues: list[ComplianceIssueResponse]
    warnings: list[ComplianceWarningResponse]
    compliance_score: int
    minimum_hourly_rate: Decimal | None = None
    version_id: str | None = None
    performed_by: str


# ============================================================================
# Leave schemas
# ============================================================================


class AccrualLineResponse(EngineSchema):
    leave_type: LeaveType
    hours_accrued: Decimal
    rate: Decimal
    formula: str
    notes: str


class AccrualCalculationResponse(EngineSchema):
    hours_worked: Decimal
    employment_basis: EmploymentBasis
    service_years: Decimal
    state: AustralianState
    lines: list[AccrualLineResponse]
    annual_leave_accrued: Decimal
    personal_leave_accrued: Decimal
    lsl_accrued: Decimal
    lsl_entitlement_reached: bool


class LSLProRataResponse(EngineSchema):
    eligible: bool
    weeks: Decimal
    hours: Decimal
    value: Decimal
    reason: str


# ============================================================================
# Audit and alert schemas
# ============================================================================


class EntityRefResponse(EngineSchema):
    entity_type: EntityType
    entity_id: str
    entity_name: str


class FieldChangeResponse(EngineSchema):
    field: str
    old_value: Any = None
    new_value: Any = None


class AuditEventResponse(EngineSchema):
    event_id: str
    event_type: AuditEventType
    entity: EntityRefResponse
    action: AuditAction
    changes: list[FieldChangeResponse]
    performed_by: str
    performed_at: datetime
    source: AuditSource
    reason: str | None = None
    triggered_alert_ids: list[str] = []


class AlertTransitionResponse(EngineSchema):
    from_status: AlertStatus
    to_status: AlertStatus
    actor: str
    at: datetime
    notes: str | None = None


class RateChangeAlertResponse(EngineSchema):
    alert_id: str
    alert_type: AlertType
    priority: AlertPriority
    status: AlertStatus
    title: str
    message: str
    trigger_date: date
    created_at: datetime
    action_required: str | None = None
    action_deadline: date | None = None
    affected_agreement_ids: list[str] = []
    affected_agreement_names: list[str] = []
    affected_worker_ids: list[str] = []
    related_audit_event_id: str | None = None
    transitions: list[AlertTransitionResponse] = []
    acknowledged_by: str | None = None
