"""Tests for better-off-overall agreement comparison."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from agreement_engine.errors import NotFoundError
from agreement_engine.models import (
    Classification,
    ClassificationRate,
    EnterpriseAgreement,
    ModernAward,
    PenaltyRateTable,
    RateSnapshot,
)
from agreement_engine.services import AgreementStore, OverallResult, compare_agreements

AWARD_ID = "MA000004"
EA_ID = "EA-RETAIL-2023"


def clock() -> datetime:
    return datetime(2024, 7, 15, tzinfo=timezone.utc)


def snapshot(penalties: PenaltyRateTable | None = None, **hourly: str) -> RateSnapshot:
    return RateSnapshot(
        classifications=tuple(
            ClassificationRate(code=code, name=code, hourly_rate=Decimal(rate))
            for code, rate in hourly.items()
        ),
        penalty_rates=penalties,
    )


def small_store(ea_classifications, ea_rates: RateSnapshot) -> AgreementStore:
    store = AgreementStore(clock=clock)
    store.register_agreement(
        ModernAward(
            agreement_id="MA1",
            name="Award",
            classifications=(Classification("L1", "Level 1", 1),),
        )
    )
    store.register_agreement(
        EnterpriseAgreement(
            agreement_id="EA1",
            name="Agreement",
            classifications=ea_classifications,
            underlying_award_id="MA1",
        )
    )
    store.create_version_snapshot("MA1", date(2024, 7, 1), None, [], snapshot(L1="28.00"), actor="t")
    store.create_version_snapshot("EA1", date(2024, 7, 1), None, [], ea_rates, actor="t")
    return store


class TestCompareAgreements:
    """Test rate and term comparison against the award."""

    def test_agreement_below_award(self, store):
        result = compare_agreements(store, AWARD_ID, EA_ID, date(2024, 7, 10))

        assert result.overall == OverallResult.BASE_BETTER
        by_code = {c.comparison_code: c for c in result.classifications}
        assert by_code["EA1"].base_code == "L1"
        assert by_code["EA1"].difference == Decimal("-0.50")
        assert by_code["EA1"].difference_percent == Decimal("-1.79")
        assert by_code["EA2"].difference == Decimal("0.50")
        assert "EA1 is $0.50/hr below L1 (-1.79%)" in result.notes

    def test_agreement_above_award_before_increase(self, store):
        result = compare_agreements(store, AWARD_ID, EA_ID, date(2024, 1, 10))

        assert result.overall == OverallResult.COMPARISON_BETTER
        by_code = {c.comparison_code: c for c in result.classifications}
        assert by_code["EA1"].base_hourly_rate == Decimal("26.00")
        assert by_code["EA1"].difference_percent == Decimal("5.77")
        assert result.notes == ()

    def test_equivalent(self):
        store = small_store(
            (Classification("E1", "Team", 1, mapped_award_classification="L1"),),
            snapshot(E1="28.00"),
        )
        result = compare_agreements(store, "MA1", "EA1", date(2024, 8, 1))
        assert result.overall == OverallResult.EQUIVALENT

    def test_unmapped_classification_noted(self):
        store = small_store(
            (
                Classification("E1", "Team", 1, mapped_award_classification="L1"),
                Classification("E9", "Specialist", 9),
            ),
            snapshot(E1="29.00", E9="40.00"),
        )
        result = compare_agreements(store, "MA1", "EA1", date(2024, 8, 1))

        assert [c.comparison_code for c in result.classifications] == ["E1"]
        assert "E9 has no mapped award classification" in result.notes
        assert result.overall == OverallResult.COMPARISON_BETTER

    def test_lower_penalty_noted(self):
        store = small_store(
            (Classification("E1", "Team", 1, mapped_award_classification="L1"),),
            snapshot(PenaltyRateTable(sunday_percent=Decimal("150")), E1="29.00"),
        )
        result = compare_agreements(store, "MA1", "EA1", date(2024, 8, 1))

        sunday = next(t for t in result.terms if t.term == "sunday")
        assert sunday.difference == Decimal("-50")
        assert "sunday is 150% against 200% in the award" in result.notes

    def test_no_version_in_effect(self, store):
        with pytest.raises(NotFoundError):
            compare_agreements(store, AWARD_ID, EA_ID, date(2022, 1, 1))
