"""Compliance checking of actual pay rates against agreement minimums.

Checking is error-tolerant: missing rate data becomes a finding on the
result rather than an exception, so callers can tell "cannot calculate"
(data_missing) apart from "calculated and non-compliant".
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal

from agreement_engine.config import Settings, get_settings
from agreement_engine.models import (
    AlertPriority,
    AlertType,
    ComplianceCheckResult,
    ComplianceIssue,
    ComplianceWarning,
    IssueCategory,
    IssueSeverity,
    RateChangeAlert,
    RateOverride,
)
from agreement_engine.models.compliance import SEVERITY_DEDUCTIONS, WARNING_DEDUCTION
from agreement_engine.services.agreement_store import AgreementStore
from agreement_engine.services.alert_state_machine import AlertStateMachine
from agreement_engine.services.audit_ledger import AlertSpec, AuditLedger
from agreement_engine.services.locking import KeyedLock

logger = logging.getLogger(__name__)


def compliance_score(
    issues: Sequence[ComplianceIssue],
    warnings: Sequence[ComplianceWarning],
) -> int:
    """100 less per-severity deductions and per-warning deductions, floored at 0."""
    deductions = sum(SEVERITY_DEDUCTIONS[issue.severity] for issue in issues)
    deductions += WARNING_DEDUCTION * len(warnings)
    return max(0, 100 - deductions)


class ComplianceChecker:
    """Compares a worker's actual hourly rate with the classification minimum."""

    def __init__(
        self,
        store: AgreementStore,
        settings: Settings | None = None,
        ledger: AuditLedger | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.ledger = ledger
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._alert_locks = KeyedLock()

    def check(
        self,
        worker_id: str,
        actual_hourly_rate: Decimal,
        agreement_id: str,
        classification_id: str,
        overrides: Sequence[RateOverride] = (),
        as_of: date | None = None,
    ) -> ComplianceCheckResult:
        """Check one worker's rate.

        Uses the version in effect on ``as_of`` when given, otherwise the
        current version. Never raises for missing versions or classifications.
        """
        now = self._clock()
        today = now.date()

        if as_of is not None:
            version = self.store.get_version_in_effect(agreement_id, as_of)
        else:
            version = self.store.get_current_version(agreement_id)

        if version is None:
            when = f"on {as_of}" if as_of is not None else "currently"
            return self._missing_data(
                now,
                worker_id,
                agreement_id,
                title="Agreement Version Not Found",
                description=f"No rate version of agreement '{agreement_id}' is in effect {when}",
                version_id=None,
            )

        rate = version.snapshot.rate_for(classification_id)
        if rate is None:
            return self._missing_data(
                now,
                worker_id,
                agreement_id,
                title="Classification Not Found",
                description=(
                    f"Classification '{classification_id}' has no rate in version "
                    f"{version.version_label} of agreement '{agreement_id}'"
                ),
                version_id=version.version_id,
            )

        minimum = rate.hourly_rate
        issues: list[ComplianceIssue] = []
        warnings: list[ComplianceWarning] = []

        if actual_hourly_rate < minimum:
            issues.append(
                ComplianceIssue(
                    severity=IssueSeverity.CRITICAL,
                    category=IssueCategory.PAY_RATE,
                    title="Rate Below Award Minimum",
                    description=(
                        f"Current rate (${actual_hourly_rate:.2f}/hr) is below the "
                        f"award minimum (${minimum:.2f}/hr)"
                    ),
                    recommended_action=f"Increase hourly rate to at least ${minimum:.2f}",
                    affected_worker_ids=(worker_id,),
                    estimated_underpayment=(
                        (minimum - actual_hourly_rate) * self.settings.assumed_annual_hours
                    ),
                    remediation_deadline=today,
                )
            )
        elif actual_hourly_rate < minimum * self.settings.near_minimum_factor:
            warnings.append(
                ComplianceWarning(
                    category=IssueCategory.PAY_RATE,
                    title="Rate Close to Minimum",
                    description=(
                        f"Current rate is within {self.settings.near_minimum_margin_percent}% "
                        "of award minimum. Next FWC increase may result in underpayment."
                    ),
                    recommendation="Consider proactive rate increase before next FWC review",
                )
            )

        if overrides:
            warnings.append(
                ComplianceWarning(
                    category=IssueCategory.PAY_RATE,
                    title="Custom Rate Overrides Active",
                    description=(
                        f"{len(overrides)} custom rate override(s) are active for this employee"
                    ),
                    recommendation="Review overrides to ensure they meet or exceed award minimums",
                )
            )

        result = ComplianceCheckResult(
            check_date=now,
            worker_id=worker_id,
            agreement_id=agreement_id,
            is_compliant=not any(i.severity == IssueSeverity.CRITICAL for i in issues),
            issues=tuple(issues),
            warnings=tuple(warnings),
            compliance_score=compliance_score(issues, warnings),
            minimum_hourly_rate=minimum,
            version_id=version.version_id,
        )

        if self.ledger is not None and not result.is_compliant:
            self._raise_underpayment_alert(result, today)

        return result

    def _missing_data(
        self,
        now: datetime,
        worker_id: str,
        agreement_id: str,
        title: str,
        description: str,
        version_id: str | None,
    ) -> ComplianceCheckResult:
        logger.warning(
            "Compliance check for worker %s could not run: %s", worker_id, description
        )
        issue = ComplianceIssue(
            severity=IssueSeverity.MAJOR,
            category=IssueCategory.PAY_RATE,
            title=title,
            description=description,
            recommended_action="Ensure award data is up to date",
            affected_worker_ids=(worker_id,),
        )
        return ComplianceCheckResult(
            check_date=now,
            worker_id=worker_id,
            agreement_id=agreement_id,
            is_compliant=False,
            issues=(issue,),
            warnings=(),
            compliance_score=0,
            version_id=version_id,
        )

    def _raise_underpayment_alert(self, result: ComplianceCheckResult, today: date) -> None:
        """Raise a critical alert unless one is already open for this worker and agreement."""
        issue = next(i for i in result.issues if i.severity == IssueSeverity.CRITICAL)
        agreement = self.store.get_agreement(result.agreement_id)
        with self._alert_locks.hold(f"{result.worker_id}:{agreement.agreement_id}"):
            existing = self._open_underpayment_alert(result.worker_id, agreement.agreement_id)
            if existing is not None:
                logger.debug(
                    "Underpayment alert %s already open for worker %s on '%s'",
                    existing.alert_id,
                    result.worker_id,
                    agreement.agreement_id,
                )
                return
            self.ledger.create_alert(
                AlertSpec(
                    alert_type=AlertType.RATE_BELOW_AWARD,
                    priority=AlertPriority.CRITICAL,
                    title=f"Rate Below Award Minimum: {result.worker_id}",
                    message=issue.description,
                    action_required=issue.recommended_action,
                    action_deadline=issue.remediation_deadline,
                    affected_agreement_ids=(agreement.agreement_id,),
                    affected_agreement_names=(agreement.name,),
                    affected_worker_ids=(result.worker_id,),
                ),
                trigger_date=today,
            )

    def _open_underpayment_alert(self, worker_id: str, agreement_id: str) -> RateChangeAlert | None:
        for alert in self.ledger.get_alerts():
            if (
                alert.alert_type == AlertType.RATE_BELOW_AWARD
                and not AlertStateMachine.is_terminal(alert.status)
                and worker_id in alert.affected_worker_ids
                and agreement_id in alert.affected_agreement_ids
            ):
                return alert
        return None
