"""Domain models for agreements, rate versions, shifts, audit and leave."""

from agreement_engine.models.agreement import (
    Agreement,
    AgreementStatus,
    AgreementType,
    Allowance,
    AustralianState,
    Classification,
    DayType,
    EnterpriseAgreement,
    IndividualFlexibilityArrangement,
    LeaveEntitlement,
    ModernAward,
    OvertimeRuleSet,
    PenaltyRateTable,
    TimeWindow,
)
from agreement_engine.models.assignment import (
    AgreementAssignment,
    ClassificationMapping,
    WorkerAgreementAssignment,
)
from agreement_engine.models.audit import (
    DEFAULT_ACTIONS,
    AlertPriority,
    AlertStatus,
    AlertTransition,
    AlertType,
    AuditAction,
    AuditEvent,
    AuditEventType,
    AuditSource,
    EntityRef,
    EntityType,
    FieldChange,
    RateChangeAlert,
)
from agreement_engine.models.compliance import (
    ComplianceCheckResult,
    ComplianceIssue,
    ComplianceWarning,
    IssueCategory,
    IssueSeverity,
    RateOverride,
)
from agreement_engine.models.leave import (
    LSL_STATE_RULES,
    AccrualCalculation,
    AccrualLine,
    LeaveType,
    LSLProRataEntitlement,
    LSLStateRules,
    SeparationType,
)
from agreement_engine.models.shift import EmploymentBasis, ShiftContext
from agreement_engine.models.versions import (
    ClassificationRate,
    RateSnapshot,
    RateVersion,
    VersionChange,
    VersionChangeType,
    VersionedAgreement,
)

__all__ = [
    # Agreements
    "Agreement",
    "AgreementStatus",
    "AgreementType",
    "Allowance",
    "AustralianState",
    "Classification",
    "DayType",
    "EnterpriseAgreement",
    "IndividualFlexibilityArrangement",
    "LeaveEntitlement",
    "ModernAward",
    "OvertimeRuleSet",
    "PenaltyRateTable",
    "TimeWindow",
    # Assignments
    "AgreementAssignment",
    "ClassificationMapping",
    "WorkerAgreementAssignment",
    # Audit
    "DEFAULT_ACTIONS",
    "AlertPriority",
    "AlertStatus",
    "AlertTransition",
    "AlertType",
    "AuditAction",
    "AuditEvent",
    "AuditEventType",
    "AuditSource",
    "EntityRef",
    "EntityType",
    "FieldChange",
    "RateChangeAlert",
    # Compliance
    "ComplianceCheckResult",
    "ComplianceIssue",
    "ComplianceWarning",
    "IssueCategory",
    "IssueSeverity",
    "RateOverride",
    # Leave
    "LSL_STATE_RULES",
    "AccrualCalculation",
    "AccrualLine",
    "LeaveType",
    "LSLProRataEntitlement",
    "LSLStateRules",
    "SeparationType",
    # Shifts
    "EmploymentBasis",
    "ShiftContext",
    # Versions
    "ClassificationRate",
    "RateSnapshot",
    "RateVersion",
    "VersionChange",
    "VersionChangeType",
    "VersionedAgreement",
]
