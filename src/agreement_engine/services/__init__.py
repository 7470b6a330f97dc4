"""Stateful services: agreement store, compliance, audit and alerts."""

from agreement_engine.services.agreement_store import AgreementStore
from agreement_engine.services.alert_state_machine import AlertStateMachine
from agreement_engine.services.audit_ledger import AlertSpec, AuditLedger
from agreement_engine.services.comparison import (
    AgreementComparison,
    OverallResult,
    compare_agreements,
)
from agreement_engine.services.compliance import ComplianceChecker, compliance_score
from agreement_engine.services.locking import KeyedLock
from agreement_engine.services.rate_history import (
    HistoricalRateComparison,
    historical_rate_comparison,
)

__all__ = [
    "AgreementComparison",
    "AgreementStore",
    "AlertSpec",
    "AlertStateMachine",
    "AuditLedger",
    "ComplianceChecker",
    "HistoricalRateComparison",
    "KeyedLock",
    "OverallResult",
    "compare_agreements",
    "compliance_score",
    "historical_rate_comparison",
]
