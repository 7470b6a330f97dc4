"""Pytest fixtures for agreement engine tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from agreement_engine.calculators import ResolvedRate
from agreement_engine.config import Settings
from agreement_engine.models import (
    AgreementAssignment,
    AgreementStatus,
    AgreementType,
    Classification,
    ClassificationMapping,
    ClassificationRate,
    EnterpriseAgreement,
    ModernAward,
    OvertimeRuleSet,
    PenaltyRateTable,
    RateSnapshot,
    VersionChange,
    WorkerAgreementAssignment,
)
from agreement_engine.services import AgreementStore, AuditLedger

FIXED_NOW = datetime(2024, 7, 15, 9, 30, tzinfo=timezone.utc)

AWARD_ID = "MA000004"
EA_ID = "EA-RETAIL-2023"


def fixed_clock() -> datetime:
    return FIXED_NOW


def rates(**hourly: str) -> RateSnapshot:
    """Snapshot with the given classification hourly rates."""
    return RateSnapshot(
        classifications=tuple(
            ClassificationRate(code=code, name=code, hourly_rate=Decimal(rate))
            for code, rate in hourly.items()
        )
    )


@pytest.fixture
def settings() -> Settings:
    """Settings with the standard defaults, independent of the environment."""
    return Settings(
        engine_version="test",
        assumed_annual_hours=Decimal("1976"),
        near_minimum_margin_percent=Decimal("2"),
        standard_hours_per_week=Decimal("38"),
        log_level="DEBUG",
    )


@pytest.fixture
def award() -> ModernAward:
    return ModernAward(
        agreement_id=AWARD_ID,
        name="General Retail Industry Award 2020",
        code=AWARD_ID,
        classifications=(
            Classification("L1", "Retail Employee Level 1", 1),
            Classification("L2", "Retail Employee Level 2", 2),
            Classification("L3", "Retail Employee Level 3", 3),
        ),
        award_reference="MA000004",
    )


@pytest.fixture
def enterprise_agreement() -> EnterpriseAgreement:
    return EnterpriseAgreement(
        agreement_id=EA_ID,
        name="Retail Enterprise Agreement 2023",
        classifications=(
            Classification("EA1", "Team Member", 1, mapped_award_classification="L1"),
            Classification("EA2", "Senior Team Member", 2, mapped_award_classification="L2"),
        ),
        underlying_award_id=AWARD_ID,
        commencement_date=date(2023, 7, 1),
        nominal_expiry_date=date(2026, 6, 30),
    )


@pytest.fixture
def ledger() -> AuditLedger:
    return AuditLedger(clock=fixed_clock)


@pytest.fixture
def store(ledger, award, enterprise_agreement) -> AgreementStore:
    """Store with a two-version award and a one-version enterprise agreement."""
    store = AgreementStore(ledger=ledger, clock=fixed_clock)
    store.register_agreement(award, actor="admin")
    store.register_agreement(enterprise_agreement, actor="admin")

    store.create_version_snapshot(
        AWARD_ID,
        date(2023, 7, 1),
        "PR762155",
        [],
        rates(L1="26.00", L2="27.00", L3="27.50"),
        actor="importer",
    )
    store.create_version_snapshot(
        AWARD_ID,
        date(2024, 7, 1),
        "PR773881",
        [VersionChange("L1.hourly_rate", Decimal("26.00"), Decimal("28.00"))],
        rates(L1="28.00", L2="29.00"),
        actor="importer",
    )
    store.create_version_snapshot(
        EA_ID,
        date(2023, 7, 1),
        "AG2023/1234",
        [],
        rates(EA1="27.50", EA2="29.50"),
        actor="importer",
    )
    return store


@pytest.fixture
def assignment() -> WorkerAgreementAssignment:
    """Worker covered by the enterprise agreement first, then the award."""
    return WorkerAgreementAssignment(
        worker_id="worker-1",
        primary=AgreementAssignment(EA_ID, priority=1),
        additional=(AgreementAssignment(AWARD_ID, priority=2),),
        classification_mappings=(
            ClassificationMapping(EA_ID, "EA1", date(2023, 7, 1)),
            ClassificationMapping(AWARD_ID, "L1", date(2023, 7, 1)),
        ),
    )


@pytest.fixture
def resolved_rate() -> ResolvedRate:
    """A $28.00/hr permanent rate with standard award terms."""
    return ResolvedRate(
        worker_id="worker-1",
        agreement_id=AWARD_ID,
        agreement_type=AgreementType.MODERN_AWARD,
        agreement_status=AgreementStatus.ACTIVE,
        priority=1,
        is_primary=True,
        classification_code="L1",
        classification_name="Retail Employee Level 1",
        base_hourly_rate=Decimal("28.00"),
        version_id="v-2024",
        version_effective_from=date(2024, 7, 1),
        casual_loading_percent=Decimal("25"),
        penalty_rates=PenaltyRateTable(),
        overtime=OvertimeRuleSet(),
        superannuation_rate=Decimal("11.5"),
    )


@pytest.fixture
def rate_with(resolved_rate):
    """Factory for variations of the standard resolved rate."""

    def make(**changes) -> ResolvedRate:
        return replace(resolved_rate, **changes)

    return make


@pytest.fixture
def make_rates():
    """Factory for rate snapshots keyed by classification code."""
    return rates
