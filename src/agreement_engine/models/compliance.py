"""Compliance check result models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class IssueSeverity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class IssueCategory(str, Enum):
    PAY_RATE = "pay_rate"
    ALLOWANCE = "allowance"
    LEAVE = "leave"
    PENALTY = "penalty"
    SUPER = "super"
    CLASSIFICATION = "classification"


# Score deductions per finding
SEVERITY_DEDUCTIONS: dict[IssueSeverity, int] = {
    IssueSeverity.CRITICAL: 30,
    IssueSeverity.MAJOR: 15,
    IssueSeverity.MINOR: 5,
}
WARNING_DEDUCTION = 2


@dataclass(frozen=True)
class RateOverride:
    """A custom rate override active for a worker."""

    worker_id: str
    field: str
    value: Decimal
    reason: str | None = None


@dataclass(frozen=True)
class ComplianceIssue:
    severity: IssueSeverity
    category: IssueCategory
    title: str
    description: str
    recommended_action: str
    affected_worker_ids: tuple[str, ...] = ()
    estimated_underpayment: Decimal | None = None
    remediation_deadline: date | None = None


@dataclass(frozen=True)
class ComplianceWarning:
    category: IssueCategory
    title: str
    description: str
    recommendation: str


@dataclass(frozen=True)
class ComplianceCheckResult:
    """Outcome of comparing a worker's actual rate with the agreement minimum."""

    check_date: datetime
    worker_id: str
    agreement_id: str
    is_compliant: bool
    issues: tuple[ComplianceIssue, ...]
    warnings: tuple[ComplianceWarning, ...]
    compliance_score: int
    minimum_hourly_rate: Decimal | None = None
    version_id: str | None = None
    performed_by: str = "system"

    def count(self, severity: IssueSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def critical_count(self) -> int:
        return self.count(IssueSeverity.CRITICAL)

    @property
    def data_missing(self) -> bool:
        """True when the check could not find the rate data it needed."""
        return self.minimum_hourly_rate is None
