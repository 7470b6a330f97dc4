"""Tests for historical rate comparison."""

from datetime import date
from decimal import Decimal

import pytest

from agreement_engine.errors import NotFoundError
from agreement_engine.services import historical_rate_comparison

AWARD_ID = "MA000004"


class TestHistoricalRateComparison:
    """Test rate trends across an agreement's versions."""

    def test_two_version_history(self, store):
        result = historical_rate_comparison(store, AWARD_ID, "L1")

        assert result.classification_name == "Retail Employee Level 1"
        assert [e.hourly_rate for e in result.history] == [Decimal("28.00"), Decimal("26.00")]
        assert [e.effective_from for e in result.history] == [date(2024, 7, 1), date(2023, 7, 1)]

        newest, oldest = result.history
        assert newest.change_from_previous == Decimal("2.00")
        assert newest.change_percent_from_previous == Decimal("7.69")
        assert oldest.change_from_previous is None
        assert oldest.change_percent_from_previous is None

        assert result.average_increase_percent == Decimal("7.69")
        # 366 days between the two versions
        assert result.compound_annual_growth_rate == Decimal("7.68")
        assert result.projected_next_rate.quantize(Decimal("0.01")) == Decimal("30.15")

    def test_skips_versions_without_the_classification(self, store):
        result = historical_rate_comparison(store, AWARD_ID, "L3")

        assert len(result.history) == 1
        assert result.history[0].hourly_rate == Decimal("27.50")
        assert result.history[0].change_from_previous is None
        assert result.average_increase_percent == Decimal("0")
        assert result.compound_annual_growth_rate == Decimal("0")
        assert result.projected_next_rate == Decimal("27.50")

    def test_unknown_classification(self, store):
        result = historical_rate_comparison(store, AWARD_ID, "L9")

        assert result.classification_name == "L9"
        assert result.history == ()
        assert result.projected_next_rate is None

    def test_unknown_agreement(self, store):
        with pytest.raises(NotFoundError):
            historical_rate_comparison(store, "MA999999", "L1")
